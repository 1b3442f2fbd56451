"""The ``reveal`` built-in: listing directory contents."""

import grp
import math
import os
import pwd
import stat
import sys
import time
from dataclasses import dataclass

BLUE = "\033[1;34m"
GREEN = "\033[1;32m"
RED = "\033[31m"
RESET = "\033[0m"


@dataclass
class RevealOptions:
    """What to list and how."""

    path: str
    show_all: bool = False
    long_format: bool = False


def parse_reveal_args(args, state):
    """Read ``-a``/``-l`` flags and an optional path from the arguments."""
    options = RevealOptions(path=state.curr)
    for arg in args:
        if arg.startswith("-"):
            for flag in arg[1:]:
                if flag == "a":
                    options.show_all = True
                elif flag == "l":
                    options.long_format = True
                else:
                    print(f"Invalid option: -{flag}", file=sys.stderr)
        elif arg.startswith("~"):
            options.path = state.home
        else:
            options.path = arg
    return options


def file_mode_string(mode):
    """Render a mode as ``drwxr-xr-x``."""
    bits = (
        (stat.S_IRUSR, "r"), (stat.S_IWUSR, "w"), (stat.S_IXUSR, "x"),
        (stat.S_IRGRP, "r"), (stat.S_IWGRP, "w"), (stat.S_IXGRP, "x"),
        (stat.S_IROTH, "r"), (stat.S_IWOTH, "w"), (stat.S_IXOTH, "x"),
    )
    kind = "d" if stat.S_ISDIR(mode) else "-"
    return kind + "".join(ch if mode & bit else "-" for bit, ch in bits)


def block_count(path):
    """Return the size of ``path`` in 1 KiB blocks, or 0 if it cannot be read."""
    try:
        st = os.stat(path)
    except OSError:
        return 0
    return math.ceil(st.st_blocks / 2)


def format_details(st, name):
    """Format one long-listing line for ``name`` from its stat result."""
    try:
        owner = pwd.getpwuid(st.st_uid).pw_name
    except KeyError:
        owner = str(st.st_uid)
    try:
        group = grp.getgrgid(st.st_gid).gr_name
    except KeyError:
        group = str(st.st_gid)
    modified = time.strftime("%b %d %H:%M", time.localtime(st.st_mtime))
    return (
        f"{file_mode_string(st.st_mode)} {st.st_nlink} {owner} {group} "
        f"{st.st_size:5d} {modified} {name}"
    )


def _entry_line(st, name, long_format):
    if long_format:
        return format_details(st, name)
    if stat.S_ISDIR(st.st_mode):
        return f"{BLUE}{name}{RESET}"
    if st.st_mode & stat.S_IXUSR:
        return f"{GREEN}{name}{RESET}"
    return name


def reveal_lines(path=None, show_all=False, long_format=False):
    """Return the lines ``reveal`` prints for ``path``.

    Raises OSError when ``path`` cannot be examined.
    """
    if path is None:
        path = "."
    st = os.stat(path)
    if not stat.S_ISDIR(st.st_mode):
        return [_entry_line(st, path, long_format)]

    names = os.listdir(path)
    if show_all:
        names += [".", ".."]
    lines = []
    entries = []
    for name in names:
        if not show_all and name.startswith("."):
            continue
        try:
            entries.append((name, os.stat(os.path.join(path, name))))
        except OSError:
            lines.append(f"{RED}stat{RESET}")
    entries.sort(key=lambda item: os.fsencode(item[0]))
    if long_format:
        total = sum(block_count(os.path.join(path, name)) for name, _ in entries)
        lines.append(f"total {total}")
    lines.extend(_entry_line(entry_stat, name, long_format) for name, entry_stat in entries)
    return lines


def reveal(path=None, show_all=False, long_format=False):
    """Print the listing of ``path``."""
    try:
        lines = reveal_lines(path, show_all, long_format)
    except OSError:
        step = "opendir" if path is not None and os.path.isdir(path) else "stat"
        print(f"{RED}{step}{RESET}")
        return
    for line in lines:
        print(line)