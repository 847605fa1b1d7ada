"""Inline search input shown while the user types a pattern."""

from __future__ import annotations

from typing import ClassVar

from textual.binding import Binding, BindingType
from textual.message import Message
from textual.widgets import Input


class SearchBar(Input):
    """Single-line pattern input shown above the status bar.

    Hidden until a search starts. The app reacts to the ``Changed`` and
    ``Submitted`` messages Input already posts, plus ``Cancelled`` on Escape.
    """

    DEFAULT_CSS = """
    SearchBar {
        height: 1;
        border: none;
        padding: 0 1;
        display: none;
    }

    SearchBar.active {
        display: block;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "cancel_search", "Cancel", show=False),
    ]

    class Cancelled(Message):
        """Escape pressed while typing a pattern."""

    def open(self) -> None:
        """Clear the input, show it and take focus."""
        self.value = ""
        self.add_class("active")
        self.focus()

    def close(self) -> None:
        self.remove_class("active")

    def action_cancel_search(self) -> None:
        self.post_message(self.Cancelled())
