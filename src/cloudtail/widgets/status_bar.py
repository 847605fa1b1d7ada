"""Title, status and controls lines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.style import Style
from rich.text import Text
from textual.widget import Widget

from cloudtail.colors import header_style
from cloudtail.orchestrator import StatusKind, StatusLine

if TYPE_CHECKING:
    from cloudtail.models import ColorScheme


def status_style(colors: ColorScheme, kind: StatusKind) -> Style:
    """Color for the status line, by what it is reporting."""
    match kind:
        case StatusKind.SEARCH:
            return Style(color=colors.search)
        case StatusKind.MATCHES:
            return Style(color=colors.matches)
        case StatusKind.ERROR:
            return Style(color=colors.error)
        case _:
            return Style(color=colors.status)


class TitleBar(Widget):
    """Top line naming the log group being tailed."""

    DEFAULT_CSS = """
    TitleBar {
        height: 1;
        padding: 0 1;
    }
    """

    def __init__(self, colors: ColorScheme, id: str | None = None) -> None:
        super().__init__(id=id)
        self._colors = colors
        self._title = ""

    def set_title(self, title: str) -> None:
        if title != self._title:
            self._title = title
            self.refresh()

    def render(self) -> Text:
        return Text(self._title, style=header_style(self._colors))


class StatusBar(Widget):
    """Bottom bar: one status line above the controls line."""

    DEFAULT_CSS = """
    StatusBar {
        height: 2;
        padding: 0 1;
    }
    """

    def __init__(self, colors: ColorScheme, id: str | None = None) -> None:
        super().__init__(id=id)
        self._colors = colors
        self._status = StatusLine(StatusKind.NONE)
        self._controls = ""

    def update_status(self, status: StatusLine, controls: str) -> None:
        """Show a new status and controls line."""
        self._status = status
        self._controls = controls
        self.refresh()

    def render(self) -> Text:
        text = Text(no_wrap=True, overflow="ellipsis")
        text.append(self._status.text, style=status_style(self._colors, self._status.kind))
        text.append("\n")
        text.append(self._controls, style=Style(color=self._colors.controls))
        return text
