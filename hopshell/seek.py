"""The ``seek`` built-in: searching a directory tree by name."""

import os
import stat
import sys
from dataclasses import dataclass

BLUE = "\033[1;34m"
GREEN = "\033[1;32m"
RED = "\033[31m"
RESET = "\033[0m"


@dataclass
class SeekOptions:
    """What to look for, where, and what to do with a single match."""

    term: str
    directory: str
    only_dirs: bool = False
    only_files: bool = False
    execute: bool = False


@dataclass(frozen=True)
class SeekMatch:
    """One entry whose name contains the search term."""

    path: str
    is_dir: bool

    def coloured(self):
        """The path as ``seek`` prints it: blue for directories, green otherwise."""
        colour = BLUE if self.is_dir else GREEN
        return f"{colour}{self.path}{RESET}"


def parse_seek_args(args, curr):
    """Read ``-d``, ``-f``, ``-e``, the search term and an optional directory."""
    term = None
    options = SeekOptions(term="", directory=curr)
    for arg in args:
        if arg == "-d":
            options.only_dirs = True
        elif arg == "-f":
            options.only_files = True
        elif arg == "-e":
            options.execute = True
        elif term is None:
            term = arg
        else:
            options.directory = arg
    if term is None:
        raise ValueError("seek: missing search term")
    options.term = term
    return options


def find_matches(term, directory, only_dirs=False, only_files=False):
    """Yield every entry below ``directory`` whose name contains ``term``.

    Entries are visited in name order, each directory before its contents.
    """
    try:
        names = sorted(os.listdir(directory))
    except OSError as exc:
        print(f"opendir: {exc.strerror}", file=sys.stderr)
        return
    for name in names:
        full = f"{directory}/{name}"
        try:
            st = os.stat(full)
        except OSError:
            print(f"{RED}stat failed{RESET}")
            continue
        is_dir = stat.S_ISDIR(st.st_mode)
        is_file = stat.S_ISREG(st.st_mode)
        wanted = (
            (only_dirs and is_dir)
            or (only_files and is_file)
            or (not only_dirs and not only_files)
        )
        if wanted and term in name:
            yield SeekMatch(path=full, is_dir=is_dir)
        if is_dir:
            yield from find_matches(term, full, only_dirs, only_files)


def _act_on(match, state):
    if match.is_dir:
        try:
            os.chdir(match.path)
        except OSError:
            print(f"{RED}chdir\n{RESET}")
            print(f"Failed to change directory to {match.path}")
            return
        state.prev = state.curr
        print(f"Changed directory to: {state.refresh()}")
        return
    try:
        with open(match.path, "r", encoding="utf-8", errors="replace") as handle:
            print(handle.read(), end="")
    except OSError:
        print(f"{RED}Missing permissions for task!{RESET}")


def seek(options, state):
    """Print the matches for ``options`` and return them.

    With ``execute`` set and exactly one match, a file is printed and a
    directory becomes the current directory.
    """
    if options.only_dirs and options.only_files:
        print("Invalid flags!")
        return []
    matches = []
    for match in find_matches(
        options.term, options.directory, options.only_dirs, options.only_files
    ):
        print(match.coloured())
        matches.append(match)
    if not matches:
        print("No match found!")
    elif options.execute and len(matches) == 1:
        _act_on(matches[0], state)
    return matches