"""Bounded, file-backed command history."""

from collections import deque
from pathlib import Path

QUEUE_CAPACITY = 15


class History:
    """The most recent commands, oldest first, persisted one per line."""

    def __init__(self, path, capacity=QUEUE_CAPACITY):
        self.path = Path(path)
        self.capacity = capacity
        self._entries = deque(maxlen=capacity)

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def add(self, command):
        """Append a command, dropping the oldest one when full."""
        self._entries.append(command)

    def record(self, command):
        """Add and persist a typed command unless it repeats the last one or is a log command.

        Returns True when the command was stored.
        """
        if self._entries and self._entries[-1] == command:
            return False
        if command.startswith("log"):
            return False
        self.add(command)
        self.save()
        return True

    def recent(self, n):
        """Return the n-th most recent command (1 is the latest)."""
        if not 1 <= n <= len(self._entries):
            raise IndexError(f"no history entry {n}")
        return self._entries[-n]

    def clear(self):
        """Forget every stored command."""
        self._entries.clear()

    def load(self):
        """Replace the contents with the commands stored in the history file."""
        self._entries.clear()
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                for line in handle:
                    if len(self._entries) >= self.capacity:
                        break
                    self._entries.append(line.rstrip("\n"))
        except FileNotFoundError:
            pass

    def save(self):
        """Write the commands to the history file, one per line."""
        with self.path.open("w", encoding="utf-8") as handle:
            for entry in self._entries:
                handle.write(entry + "\n")