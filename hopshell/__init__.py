"""An interactive Linux shell with built-in navigation, listing, search, history and job-control commands."""

__version__ = "0.1.0"
__all__ = [
    "aliases",
    "history",
    "hop",
    "iman",
    "jobs",
    "neonate",
    "proclore",
    "redirection",
    "reveal",
    "seek",
    "shell",
    "textutil",
]