"""The ``proclore`` built-in: information about a process."""

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProcessInfo:
    """What ``proclore`` reports about one process."""

    pid: int
    state: str
    vm_size: int
    ppid: int
    foreground: bool
    executable: str | None


def _leading_int(word):
    try:
        return int(word)
    except ValueError:
        return 0


def parse_status(text):
    """Extract ``(state, vm_size_kb, ppid)`` from a /proc status file's text."""
    state = ""
    vm_size = 0
    ppid = 0
    for line in text.splitlines():
        key, _, rest = line.partition(":")
        words = rest.split()
        if not words:
            continue
        if key == "State":
            state = words[0]
        elif key == "VmSize":
            vm_size = _leading_int(words[0])
        elif key == "PPid":
            ppid = _leading_int(words[0])
    return state, vm_size, ppid


def _is_foreground(pid):
    try:
        return os.tcgetpgrp(1) == os.getpgid(pid)
    except OSError:
        return False


def read_process_info(pid=None):
    """Gather information about ``pid`` (this process by default) from /proc."""
    if pid is None:
        pid = os.getpid()
    text = Path(f"/proc/{pid}/status").read_text()
    state, vm_size, ppid = parse_status(text)
    try:
        executable = os.readlink(f"/proc/{pid}/exe")
    except OSError:
        executable = None
    return ProcessInfo(
        pid=pid,
        state=state,
        vm_size=vm_size,
        ppid=ppid,
        foreground=_is_foreground(pid),
        executable=executable,
    )


def _status_label(info):
    first = info.state[:1]
    if first in ("R", "S"):
        return first + ("+" if info.foreground else "")
    if first == "Z":
        return "Z"
    return info.state


def format_process_info(info):
    """Return the lines ``proclore`` prints for ``info``."""
    lines = [
        f"pid : {info.pid}",
        f"process status : {_status_label(info)}",
        f"Process Group : {info.ppid}",
        f"Virtual memory : {info.vm_size} kB",
    ]
    if info.executable is not None:
        lines.append(f"executable Path : {info.executable}")
    return lines


def proclore(pid=None):
    """Print information about ``pid`` and return it, or None if unreadable."""
    if pid is None:
        pid = os.getpid()
    try:
        info = read_process_info(pid)
    except OSError as exc:
        print(f"pid : {pid}")
        print(f"failed to open file: {exc.strerror}", file=sys.stderr)
        return None
    for line in format_process_info(info):
        print(line)
    if info.executable is None:
        print("readlink failed", file=sys.stderr)
    return info