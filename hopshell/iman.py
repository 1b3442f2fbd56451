"""The ``iMan`` built-in: fetching manual pages over HTTP."""

import socket
import sys

MAN_HOST = "man.he.net"
MAN_PORT = 80


def strip_html(text):
    """Remove everything between ``<`` and ``>``, the brackets included."""
    kept = []
    inside = False
    for ch in text:
        if ch == "<":
            inside = True
        elif ch == ">":
            inside = False
            continue
        if not inside:
            kept.append(ch)
    return "".join(kept)


def man_page_url(command):
    """The address of the manual page for ``command``."""
    return f"http://{MAN_HOST}/?topic={command}&section=all"


def fetch_man_page(command):
    """Download the raw HTTP response for ``command``'s manual page.

    Raises OSError when the server cannot be reached.
    """
    request = (
        f"GET {man_page_url(command)} HTTP/1.1\r\n"
        f"Host: {MAN_HOST}\r\n"
        "Connection: close\r\n\r\n"
    )
    chunks = []
    with socket.create_connection((MAN_HOST, MAN_PORT)) as conn:
        conn.sendall(request.encode("ascii", errors="replace"))
        while chunk := conn.recv(4096):
            chunks.append(chunk)
    return b"".join(chunks).decode("utf-8", errors="replace")


def iman(command):
    """Print the manual page for ``command`` without its markup and return it."""
    if command is None:
        print("Usage: iMan <command>")
        return None
    try:
        page = strip_html(fetch_man_page(command))
    except OSError as exc:
        print(f"iMan: {exc}", file=sys.stderr)
        return None
    print(page)
    return page