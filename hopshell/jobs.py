"""External commands, background jobs and signals."""

import math
import os
import signal
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

from .proclore import parse_status

RED = "\033[31m"
RESET = "\033[0m"
SLOW_SECONDS = 2.0


@dataclass
class BackgroundJob:
    """A process started in, or moved to, the background."""

    pid: int
    command: str


@dataclass(frozen=True)
class CommandLine:
    """An external command split into arguments and redirections."""

    argv: tuple
    input_file: str | None = None
    output_file: str | None = None
    append: bool = False


def _alive(pid):
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def process_status(pid):
    """Describe ``pid`` as ``Running``, ``Stopped`` or unknown, from /proc."""
    try:
        text = Path(f"/proc/{pid}/status").read_text()
    except OSError:
        return "Unknown (Process does not exist or no permission)"
    state = parse_status(text)[0][:1]
    if state == "T":
        return "Stopped"
    if state in ("R", "S"):
        return "Running"
    return "Unknown (Unrecognized state)"


def ping(pid, signal_number):
    """Send ``signal_number`` modulo 32 to ``pid`` and return the signal sent."""
    sig = int(math.fmod(signal_number, 32))
    if not _alive(pid):
        raise ProcessLookupError(f"process with pid {pid} doesn't exist")
    os.kill(pid, sig)
    return sig


def _read_word(command, i):
    n = len(command)
    while i < n and command[i] in " \t":
        i += 1
    start = i
    while i < n and command[i] not in " \t":
        i += 1
    return command[start:i], i


def split_command_line(command):
    """Split ``command`` on blanks, honouring quotes and ``<``, ``>``, ``>>``."""
    argv = []
    input_file = output_file = None
    append = False
    word = []
    quote = None
    i = 0
    while i < len(command):
        c = command[i]
        if quote is None and c in "\"'":
            quote = c
        elif quote is not None and c == quote:
            quote = None
        elif quote is not None or c not in " \t":
            word.append(c)
        elif word:
            text = "".join(word)
            word = []
            if text == "<":
                input_file, i = _read_word(command, i + 1)
                continue
            if text in (">", ">>"):
                output_file, i = _read_word(command, i + 1)
                append = text == ">>"
                continue
            argv.append(text)
        i += 1
    if word:
        argv.append("".join(word))
    return CommandLine(tuple(argv), input_file, output_file, append)


@dataclass
class JobTable:
    """Background jobs and the current foreground process."""

    fg_pid: int | None = None
    fg_command: str = ""
    slow_command: str | None = None
    _jobs: list = field(default_factory=list, init=False, repr=False)

    def add(self, pid, command):
        """Register a background job and return it."""
        job = BackgroundJob(pid, command)
        self._jobs.append(job)
        return job

    def _find(self, pid):
        return next((job for job in self._jobs if job.pid == pid), None)

    def remove(self, pid):
        """Forget the job with ``pid`` and return it; KeyError if unknown."""
        job = self._find(pid)
        if job is None:
            raise KeyError(pid)
        self._jobs.remove(job)
        return job

    def __len__(self):
        return len(self._jobs)

    def __iter__(self):
        return iter(list(self._jobs))

    def activities(self):
        """Lines describing every background job, in pid order."""
        if not self._jobs:
            return ["No background processes"]
        return [
            f"[{job.pid}] : {job.command} - {process_status(job.pid)}"
            for job in sorted(self._jobs, key=lambda job: job.pid)
        ]

    def reap(self):
        """Collect finished children and return the messages to report.

        Jobs that exit normally are dropped; jobs killed by a signal stay listed.
        """
        messages = []
        while True:
            try:
                pid, status = os.waitpid(-1, os.WNOHANG)
            except ChildProcessError:
                break
            if pid == 0:
                break
            job = self._find(pid)
            if job is None:
                continue
            if os.WIFEXITED(status):
                messages.append(f"{job.command} got terminated")
                self._jobs.remove(job)
            elif os.WIFSIGNALED(status):
                messages.append(
                    f"{RED}{job.command} got terminated by signal "
                    f"{os.WTERMSIG(status)}{RESET}"
                )
        return messages

    def foreground(self, pid):
        """Resume job ``pid`` in the foreground and wait until it stops or ends.

        Returns the job, or None when it was known but is no longer running.
        Raises ProcessLookupError when nothing is known of ``pid``.
        """
        job = self._find(pid)
        if job is not None:
            self._jobs.remove(job)
        alive = _alive(pid)
        if job is None and not alive:
            raise ProcessLookupError("No such process found")
        if job is None or not alive:
            return None
        self.fg_pid = pid
        self.fg_command = job.command
        os.kill(pid, signal.SIGCONT)
        try:
            os.waitpid(pid, os.WUNTRACED)
        except ChildProcessError:
            pass
        if self.fg_pid == pid:
            self.fg_pid = None
        return job

    def background(self, pid):
        """Let a stopped process ``pid`` continue in the background."""
        if not _alive(pid):
            raise ProcessLookupError(f"process with pid {pid} doesn't exist")
        os.kill(pid, signal.SIGCONT)

    def stop_foreground(self):
        """Stop the foreground process and turn it into a background job."""
        if self.fg_pid is None:
            raise ProcessLookupError("No foreground process running currently")
        os.kill(self.fg_pid, signal.SIGTSTP)
        job = self.add(self.fg_pid, self.fg_command)
        self.fg_pid = None
        return job

    def interrupt_foreground(self):
        """Kill the foreground process and return its pid."""
        pid = self.fg_pid
        if pid is None or not _alive(pid):
            raise ProcessLookupError("no fg process running currently")
        os.kill(pid, signal.SIGKILL)
        self.fg_pid = None
        return pid

    def kill_all(self):
        """Kill every background job and return one message per job."""
        messages = []
        for job in self._jobs:
            if not _alive(job.pid):
                messages.append(f"process with pid {job.pid} doesn't exist")
                continue
            try:
                os.kill(job.pid, signal.SIGKILL)
            except OSError as exc:
                messages.append(f"kill: {exc.strerror}")
            else:
                messages.append(f"Sent signal {int(signal.SIGKILL)} to process with pid {job.pid}")
        return messages


def _open(path, flags, what):
    try:
        return os.open(path, flags, 0o644)
    except OSError as exc:
        raise OSError(exc.errno, f"{what}: {exc.strerror}", path) from exc


def run_external(command, background, jobs):
    """Start ``command`` as a program and return its pid.

    A background command is recorded in ``jobs``; a foreground one is waited
    for, and marked as slow in ``jobs`` when it took over two seconds.
    Raises OSError when a redirection target or the program cannot be used.
    """
    line = split_command_line(command)
    if not line.argv:
        return None
    opened = []
    actions = []
    try:
        if line.input_file is not None:
            fd = _open(line.input_file, os.O_RDONLY, "open input file")
            opened.append(fd)
            actions.append((os.POSIX_SPAWN_DUP2, fd, 0))
        if line.output_file is not None:
            mode = os.O_APPEND if line.append else os.O_TRUNC
            fd = _open(line.output_file, os.O_WRONLY | os.O_CREAT | mode, "open output file")
            opened.append(fd)
            actions.append((os.POSIX_SPAWN_DUP2, fd, 1))
        sys.stdout.flush()
        pid = os.posix_spawnp(
            line.argv[0],
            list(line.argv),
            os.environ,
            file_actions=actions,
            setsid=bool(background),
        )
    finally:
        for fd in opened:
            os.close(fd)

    if background:
        print(f"[{pid}] {command}")
        jobs.add(pid, command)
        sys.stdout.flush()
        return pid

    jobs.fg_pid = pid
    jobs.fg_command = command
    start = time.monotonic()
    try:
        os.waitpid(pid, os.WUNTRACED)
    except ChildProcessError:
        pass
    if jobs.fg_pid == pid:
        jobs.fg_pid = None
    if time.monotonic() - start > SLOW_SECONDS:
        jobs.slow_command = command
    sys.stdout.flush()
    return pid