"""Parsing and applying ``<``, ``>`` and ``>>`` redirections."""

import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass


class RedirectionError(OSError):
    """A redirection target could not be opened or installed."""


@dataclass(frozen=True)
class Redirection:
    """A command with its redirections taken out."""

    command: str
    input_file: str | None = None
    output_file: str | None = None
    append: bool = False


def _read_word(command, i):
    n = len(command)
    while i < n and command[i] in " \t":
        i += 1
    start = i
    while i < n and command[i] not in " \t":
        i += 1
    return command[start:i], i


def parse_redirection(command):
    """Split the redirection operators and their targets out of ``command``."""
    kept = []
    input_file = output_file = None
    saw_truncate = saw_append = False
    i = 0
    while i < len(command):
        if command[i] == "<":
            input_file, i = _read_word(command, i + 1)
        elif command.startswith(">>", i):
            output_file, i = _read_word(command, i + 2)
            saw_append = True
        elif command[i] == ">":
            output_file, i = _read_word(command, i + 1)
            saw_truncate = True
        else:
            kept.append(command[i])
            i += 1
    return Redirection(
        command="".join(kept),
        input_file=input_file,
        output_file=output_file,
        append=saw_append and not saw_truncate,
    )


def _install(path, flags, target, what):
    try:
        fd = os.open(path, flags, 0o644)
    except OSError as exc:
        raise RedirectionError(exc.errno, f"{what}: {exc.strerror}", path) from exc
    try:
        os.dup2(fd, target)
    finally:
        os.close(fd)


def apply_redirection(redirection):
    """Point standard input and output at the files named by ``redirection``."""
    if redirection.input_file is not None:
        _install(redirection.input_file, os.O_RDONLY, 0, "Error opening input file")
    if redirection.output_file is not None:
        mode = os.O_APPEND if redirection.append else os.O_TRUNC
        sys.stdout.flush()
        _install(
            redirection.output_file,
            os.O_WRONLY | os.O_CREAT | mode,
            1,
            "Error opening output file",
        )


@contextmanager
def redirected(command):
    """Apply the redirections in ``command`` for the duration of the block.

    Yields the parsed :class:`Redirection`; standard input and output are
    restored on exit.
    """
    redirection = parse_redirection(command)
    sys.stdout.flush()
    saved_in = os.dup(0)
    saved_out = os.dup(1)
    try:
        apply_redirection(redirection)
        yield redirection
    finally:
        sys.stdout.flush()
        os.dup2(saved_in, 0)
        os.dup2(saved_out, 1)
        os.close(saved_in)
        os.close(saved_out)