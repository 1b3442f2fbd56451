"""The ``hop`` built-in: changing the working directory."""

import os
from dataclasses import dataclass


class HopError(OSError):
    """The working directory could not be changed."""


@dataclass
class DirectoryState:
    """The shell's home, current and previous directories."""

    home: str
    curr: str = ""
    prev: str | None = None

    def __post_init__(self):
        if not self.curr:
            self.curr = os.getcwd()

    def refresh(self):
        """Re-read the current directory from the process and return it."""
        self.curr = os.getcwd()
        return self.curr


def expand_home(path, home):
    """Replace a leading ``~`` in ``path`` with ``home``."""
    if path.startswith("~"):
        return home + path[1:]
    return path


def hop(state, target):
    """Change directory to ``target`` and return the new current directory.

    ``-`` goes back to the previous directory and ``~`` to home.
    """
    path = expand_home(target, state.home)
    if path == ".":
        return state.curr
    if path == "-":
        if state.prev is None:
            raise HopError("No previous directory")
        destination = state.prev
    else:
        destination = path
    try:
        os.chdir(destination)
    except OSError as exc:
        raise HopError(exc.errno, f"chdir: {exc.strerror}", destination) from exc
    state.prev = state.curr
    state.refresh()
    return state.curr