"""Fixed-capacity ring buffer holding the most recent log records."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cloudtail.models import LogRecord


class RecordStore:
    """Ring buffer of log records in arrival order.

    Appends are O(1) and never reallocate once the buffer is full; the
    oldest record is overwritten instead. Positions used by ``view``,
    ``get`` and ``update_at`` are always oldest-first.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            msg = f"capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._entries: list[LogRecord] = []
        self._oldest = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, record: LogRecord) -> bool:
        """Add a record. Returns True if the oldest record was evicted to make room."""
        if len(self._entries) < self._capacity:
            self._entries.append(record)
            return False
        self._entries[self._oldest] = record
        self._oldest = (self._oldest + 1) % self._capacity
        return True

    def view(self) -> list[LogRecord]:
        """Return a chronological copy of the buffer (oldest first)."""
        if self._oldest == 0:
            return list(self._entries)
        return self._entries[self._oldest :] + self._entries[: self._oldest]

    def get(self, position: int) -> LogRecord | None:
        """Return the record at a view position, or None if out of bounds."""
        if not 0 <= position < len(self._entries):
            return None
        return self._entries[self._slot(position)]

    def update_at(self, position: int, record: LogRecord) -> None:
        """Replace the record at a view position. Out-of-range positions are ignored."""
        if not 0 <= position < len(self._entries):
            return
        self._entries[self._slot(position)] = record

    def _slot(self, position: int) -> int:
        return (self._oldest + position) % len(self._entries)
