"""Cursor and follow state over the record store's view.

The viewport only deals in positions and counts; it never looks at record
contents.
"""

from __future__ import annotations


class Viewport:
    """Selected position plus the follow-latest flag."""

    def __init__(self, *, follow: bool = True) -> None:
        self.cursor: int = 0
        self.follow: bool = follow

    def clamp(self, view_len: int) -> None:
        """Keep the cursor inside ``[0, view_len)`` and pin it to the end when following."""
        if view_len <= 0:
            self.cursor = 0
            return
        self.cursor = max(0, min(self.cursor, view_len - 1))
        if self.follow:
            self.cursor = view_len - 1

    def move_by(self, delta: int, view_len: int) -> None:
        """Move relative to the cursor.

        Moving up stops following. Moving down onto the newest record starts
        following again.
        """
        if delta < 0:
            self.follow = False
        self.cursor += delta
        self.clamp(view_len)
        if delta > 0 and view_len > 0 and self.cursor == view_len - 1:
            self.follow = True

    def jump_to_start(self, view_len: int) -> None:
        self.follow = False
        self.cursor = 0
        self.clamp(view_len)

    def jump_to_end(self, view_len: int) -> None:
        """Select the newest record and follow new arrivals."""
        self.follow = True
        self.clamp(view_len)

    def focus(self, position: int, view_len: int) -> None:
        """Select a specific position, e.g. a search match. Stops following."""
        self.follow = False
        self.cursor = position
        self.clamp(view_len)

    def shift(self, offset: int, view_len: int) -> None:
        """Adjust for positions moving after eviction so the same record stays selected."""
        if not self.follow:
            self.cursor += offset
        self.clamp(view_len)

    def visible_range(self, view_len: int, height: int) -> tuple[int, int]:
        """Return ``(start, end)`` of a window of ``height`` rows centred on the cursor."""
        height = max(1, height)
        start = max(0, self.cursor - height // 2)
        end = start + height
        if end > view_len:
            end = view_len
            start = max(0, end - height)
        return start, end
