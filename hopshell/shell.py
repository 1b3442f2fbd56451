"""The interactive shell: reading lines, splitting them and dispatching commands."""

import argparse
import os
import re
import signal
import socket
import sys
from pathlib import Path

from .aliases import expand_alias
from .history import History
from .hop import DirectoryState, HopError, hop
from .iman import iman
from .jobs import JobTable, ping, run_external
from .neonate import neonate
from .proclore import proclore
from .redirection import RedirectionError, redirected
from .reveal import parse_reveal_args, reveal
from .seek import parse_seek_args, seek
from .textutil import display_path, trim_whitespace

RED = "\033[31m"
GREEN = "\033[32m"
BLUE = "\033[34m"
WHITE = "\033[37m"
RESET = "\033[0m"

HISTORY_FILE = "store.txt"
RC_FILE = ".myshrc"
EOF_MESSAGE = "\nEOF (Ctrl+D) detected.Exiting program."

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(word):
    """Read the leading integer of ``word``, or 0 when it has none."""
    match = _LEADING_INT.match(word)
    return int(match.group(1)) if match else 0


def split_background(segment):
    """Split one ``;``-separated segment on ``&`` into ``(command, background)`` pairs.

    Every command followed by ``&`` runs in the background; a last command
    without a trailing ``&`` runs in the foreground.
    """
    trimmed = trim_whitespace(segment)
    count = len([part for part in trimmed.split("&") if part]) - 1 + trimmed.endswith("&")
    pairs = []
    for part in (p for p in segment.split("&") if p):
        command = trim_whitespace(part)
        if command:
            pairs.append((command, count > 0))
        count -= 1
    return pairs


def _username():
    try:
        return os.getlogin()
    except OSError:
        print(f"{RED}error in getlogin_r{RESET}")
        return ""


class Shell:
    """One interactive session: directories, history, aliases and jobs."""

    def __init__(self, home=None):
        if home is None:
            home = os.getcwd()
        self.state = DirectoryState(home=str(home))
        self.rc_path = Path(home) / RC_FILE
        self.history = History(Path(home) / HISTORY_FILE)
        self.history.load()
        self.jobs = JobTable()
        self._builtins = {
            "hop": self._hop,
            "reveal": self._reveal,
            "log": self._log,
            "proclore": self._proclore,
            "seek": self._seek,
            "activities": self._activities,
            "ping": self._ping,
            "iMan": self._iman,
            "fg": self._fg,
            "bg": self._bg,
            "neonate": self._neonate,
        }

    def prompt(self):
        """Return the prompt text, naming the last slow foreground command once."""
        try:
            curr = self.state.refresh()
        except OSError:
            print(f"{RED}error in getcwd{RESET}")
            curr = self.state.curr
        user = _username()
        host = socket.gethostname()
        where = display_path(curr, self.state.home)
        text = f"<{GREEN}{user}@{RESET}{GREEN}{host}{RESET}:{BLUE}{where}{RESET}"
        if self.jobs.slow_command is not None:
            text += f" {WHITE}{self.jobs.slow_command}{RESET}"
            self.jobs.slow_command = None
        return text + "> "

    def run_line(self, line, record=True):
        """Run a full input line: ``;`` separates commands, ``&`` backgrounds them."""
        if record:
            try:
                self.history.record(line)
            except OSError as exc:
                print(f"unable to open file: {exc.strerror}", file=sys.stderr)
        for segment in line.split(";"):
            if not segment:
                continue
            for command, background in split_background(segment):
                self.run_command(command, background)

    def run_command(self, command, background=False):
        """Run a single command, expanding its alias and applying redirections."""
        expanded = expand_alias(command, self.rc_path)
        if "|" in expanded:
            self.run_pipeline(expanded, background)
            return
        try:
            with redirected(expanded) as redirection:
                self._dispatch(redirection.command, expanded, background)
        except RedirectionError as exc:
            print(exc, file=sys.stderr)

    def _dispatch(self, text, full_command, background):
        words = iter([trim_whitespace(word) for word in text.split(" ") if word])
        run_program = False
        seeking = False
        for word in words:
            handler = self._builtins.get(word)
            if handler is None:
                run_program = True
                continue
            if word == "seek":
                seeking = True
            handler(words)
        if run_program and not seeking:
            try:
                run_external(full_command, background, self.jobs)
            except OSError as exc:
                print(exc, file=sys.stderr)

    def run_pipeline(self, command, background=False):
        """Run ``|``-separated commands, each in its own process, joined by pipes."""
        if background:
            command += " &"
        segments = [trim_whitespace(part) for part in command.split("|") if part]
        if any(not segment for segment in segments):
            print("Invalid use of pipe")
            return
        pipes = [os.pipe() for _ in range(len(segments) - 1)]
        sys.stdout.flush()
        sys.stderr.flush()
        children = []
        try:
            for index, segment in enumerate(segments):
                pid = os.fork()
                if pid == 0:
                    self._pipeline_child(index, segment, pipes)
                children.append(pid)
        finally:
            for read_end, write_end in pipes:
                os.close(read_end)
                os.close(write_end)
        for pid in children:
            try:
                os.waitpid(pid, 0)
            except ChildProcessError:
                pass

    def _pipeline_child(self, index, segment, pipes):
        status = 1
        try:
            if index > 0:
                os.dup2(pipes[index - 1][0], 0)
            if index < len(pipes):
                os.dup2(pipes[index][1], 1)
            for read_end, write_end in pipes:
                os.close(read_end)
                os.close(write_end)
            self.run_line(segment, record=False)
            status = 0
        finally:
            try:
                sys.stdout.flush()
                sys.stderr.flush()
            finally:
                os._exit(status)

    def run_log(self, args):
        """Show, purge or re-run the command history."""
        if not args:
            if not len(self.history):
                print("Queue is empty")
            for entry in self.history:
                print(entry)
        elif args[0] == "purge":
            self.history.clear()
            try:
                self.history.save()
            except OSError as exc:
                print(f"unable to open file: {exc.strerror}", file=sys.stderr)
        elif args[0] == "execute":
            if len(args) < 2:
                print("Usage: log execute <index>")
                return
            try:
                command = self.history.recent(_atoi(args[1]))
            except IndexError as exc:
                print(f"log: {exc}", file=sys.stderr)
                return
            self.run_line(command, record=False)

    def loop(self, stream=None):
        """Read and run lines from ``stream`` until ``stop`` or end of input."""
        if stream is None:
            stream = sys.stdin
        while True:
            for message in self.jobs.reap():
                print(message)
            print(self.prompt(), end="", flush=True)
            line = stream.readline()
            if not line:
                for message in self.jobs.kill_all():
                    print(message)
                print(EOF_MESSAGE)
                return 0
            line = line.split("\n", 1)[0]
            if line == "stop":
                return 0
            self.run_line(line)

    def _hop(self, words):
        for target in words:
            try:
                hop(self.state, target)
            except HopError as exc:
                if exc.errno is None:
                    print(exc.args[0])
                else:
                    print(exc, file=sys.stderr)
            print(self.state.curr)

    def _reveal(self, words):
        options = parse_reveal_args(list(words), self.state)
        reveal(options.path, options.show_all, options.long_format)

    def _log(self, words):
        arg = next(words, None)
        args = [] if arg is None else [arg]
        if arg == "execute":
            index = next(words, None)
            if index is not None:
                args.append(index)
        self.run_log(args)

    def _proclore(self, words):
        token = next(words, None)
        proclore(None if token is None else _atoi(token))

    def _seek(self, words):
        try:
            options = parse_seek_args(list(words), self.state.curr)
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return
        seek(options, self.state)

    def _activities(self, words):
        for line in self.jobs.activities():
            print(line)

    def _ping(self, words):
        pid_word = next(words, None)
        signal_word = next(words, None)
        if pid_word is None or signal_word is None:
            print("Usage: ping <pid> <signal>")
            return
        pid = _atoi(pid_word)
        try:
            sent = ping(pid, _atoi(signal_word))
        except ProcessLookupError as exc:
            print(exc)
        except OSError as exc:
            print(f"kill: {exc.strerror}", file=sys.stderr)
        else:
            print(f"Sent signal {sent} to process with pid {pid}")

    def _iman(self, words):
        iman(next(words, None))

    def _fg(self, words):
        token = next(words, None)
        if token is None:
            print("Usage: fg <pid>")
            return
        try:
            self.jobs.foreground(_atoi(token))
        except ProcessLookupError as exc:
            print(exc)
        except OSError as exc:
            print(f"Failed to send SIGCONT: {exc.strerror}", file=sys.stderr)

    def _bg(self, words):
        token = next(words, None)
        if token is None:
            print("Usage: bg <pid>")
            return
        try:
            self.jobs.background(_atoi(token))
        except ProcessLookupError as exc:
            print(exc)
        except OSError as exc:
            print(f"Failed to send SIGCONT: {exc.strerror}", file=sys.stderr)

    def _neonate(self, words):
        next(words, None)
        token = next(words, None)
        if token is None:
            print("Usage: neonate -n <seconds>")
            return
        try:
            neonate(_atoi(token))
        except ValueError as exc:
            print(exc, file=sys.stderr)


def _install_signal_handlers(shell):
    def on_interrupt(signum, frame):
        try:
            pid = shell.jobs.interrupt_foreground()
        except ProcessLookupError as exc:
            print(exc)
        except OSError as exc:
            print(f"kill: {exc.strerror}", file=sys.stderr)
        else:
            print(f"Sent signal {signum} to process with pid {pid}")

    def on_stop(signum, frame):
        try:
            job = shell.jobs.stop_foreground()
        except ProcessLookupError as exc:
            print(exc)
            return
        except OSError as exc:
            print(f"Failed to send SIGTSTP: {exc.strerror}", file=sys.stderr)
            return
        print(f"Sent signal {signum} (SIGTSTP) to process with pid {job.pid}")
        try:
            os.tcsetpgrp(0, os.getpgid(0))
        except OSError as exc:
            print(f"tcsetpgrp failed: {exc.strerror}", file=sys.stderr)

    signal.signal(signal.SIGINT, on_interrupt)
    signal.signal(signal.SIGTSTP, on_stop)


def main(argv=None):
    """Start an interactive session in the current directory."""
    parser = argparse.ArgumentParser(prog="hopshell", description="An interactive command shell.")
    parser.parse_args(argv)
    try:
        shell = Shell()
    except OSError as exc:
        print(f"{RED}getcwd: {exc.strerror}{RESET}")
        return 1
    _install_signal_handlers(shell)
    return shell.loop()


if __name__ == "__main__":
    sys.exit(main())