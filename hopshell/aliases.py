"""Alias lookup in the shell's rc file."""


def lookup_alias(token, rc_path):
    """Return the value assigned to ``token`` in ``rc_path``, or None.

    A line matches when ``token`` first occurs at its start or after a blank
    and is followed somewhere by ``=``; the value is everything after that ``=``.
    """
    try:
        with open(rc_path, "r", encoding="utf-8") as handle:
            lines = handle.readlines()
    except OSError:
        return None
    for line in lines:
        pos = line.find(token)
        if pos < 0 or (pos > 0 and line[pos - 1] not in " \t"):
            continue
        equal = line.find("=", pos + len(token))
        if equal >= 0:
            return line[equal + 1:].split("\n", 1)[0]
    return None


def expand_alias(command, rc_path):
    """Replace the first word of ``command`` by its alias, if it has one."""
    first, _, rest = command.partition(" ")
    value = lookup_alias(first, rc_path)
    if value is None:
        return command
    return f"{value} {rest}"