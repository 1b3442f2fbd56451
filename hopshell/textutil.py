"""Small text helpers shared by the shell's built-in commands."""

_BLANKS = " \t\n"

BLUE = "\033[34m"
GREEN = "\033[32m"
RESET = "\033[0m"


def trim_whitespace(text):
    """Return ``text`` without leading and trailing spaces, tabs and newlines."""
    return text.strip(_BLANKS)


def display_path(curr, home):
    """Show ``curr`` relative to ``home`` with a leading ``~`` when it lies under it."""
    if curr.startswith(home):
        return "~" + curr[len(home):]
    return curr


def colour_entry(path, is_dir, is_exec):
    """Colour a path blue for directories, green for executables, plain otherwise."""
    if is_dir:
        return f"{BLUE}{path}{RESET}"
    if is_exec:
        return f"{GREEN}{path}{RESET}"
    return path