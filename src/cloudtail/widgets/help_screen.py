"""Help screen showing all keyboard shortcuts."""

from __future__ import annotations

from typing import ClassVar

from textual.app import ComposeResult
from textual.binding import BindingType
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

HELP_TEXT = """\
[bold]Navigation[/bold]
  Up/Down, k/j  Move between log records
  PgUp/PgDn     Page up/down
  Home, g       Jump to oldest record
  End, G        Jump to newest record and follow
  F             Toggle follow (ON when you reach the bottom)

[bold]Search[/bold]
  /             Search (case-insensitive regex)
  Enter         Run search, select the most recent match
  Esc           Cancel typing, or clear matches
  n / N         Next / previous match (wraps around)

[bold]Display[/bold]
  J             Toggle formatted / raw messages
  y             Copy the selected record to the clipboard

[bold]Source[/bold]
  H             Load the previous time window (history)
  L             Switch log group

[bold]General[/bold]
  ?             Show this help
  q, Ctrl+C     Quit
"""


class HelpScreen(ModalScreen[None]):
    """Modal help screen with keyboard shortcuts."""

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    HelpScreen > VerticalScroll {
        width: 70;
        height: 80%;
        max-height: 30;
        background: $surface;
        border: tall $accent;
        padding: 1 2;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        ("escape", "dismiss_help", "Close"),
        ("q", "dismiss_help", "Close"),
        ("question_mark", "dismiss_help", "Close"),
    ]

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static(HELP_TEXT, markup=True)

    def action_dismiss_help(self) -> None:
        self.dismiss(None)
