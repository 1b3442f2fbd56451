"""The ``neonate`` built-in: watching for the newest process id."""

import os
import select
import sys
import termios
import tty
from contextlib import contextmanager

STEP_SECONDS = 0.2


def newest_pid(proc_root="/proc"):
    """Return the highest numeric entry in ``proc_root``, or -1 if there is none."""
    return max((int(name) for name in os.listdir(proc_root) if name.isdigit()), default=-1)


@contextmanager
def _cbreak(fd):
    try:
        saved = termios.tcgetattr(fd)
    except termios.error:
        yield
        return
    tty.setcbreak(fd)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSANOW, saved)


def _stop_requested(fd, timeout):
    ready, _, _ = select.select([fd], [], [], timeout)
    if not ready:
        return False
    key = os.read(fd, 1)
    return not key or key in (b"x", b"X")


def _wait_for_stop(fd, interval):
    steps = int(5 * interval)
    if steps == 0:
        return _stop_requested(fd, 0)
    return any(_stop_requested(fd, STEP_SECONDS) for _ in range(steps))


def neonate(interval):
    """Print the newest pid every ``interval`` seconds until ``x`` is pressed."""
    if interval < 0:
        raise ValueError("neonate: interval must not be negative")
    fd = sys.stdin.fileno()
    with _cbreak(fd):
        while True:
            try:
                pid = newest_pid()
            except OSError as exc:
                print(f"opendir: {exc.strerror}", file=sys.stderr)
            else:
                if pid != -1:
                    print(pid, flush=True)
            if _wait_for_stop(fd, interval):
                break
    print("Terminated by user.")