"""Log record display widget."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rich.style import Style
from rich.text import Text
from textual.message import Message
from textual.strip import Strip
from textual.widget import Widget

from cloudtail.colors import cursor_style, row_style

if TYPE_CHECKING:
    from textual import events

    from cloudtail.models import ColorScheme
    from cloudtail.orchestrator import Frame, FrameRow

logger = logging.getLogger(__name__)

CURSOR_MARK = "▌ "
_CONTINUATION = " " * len(CURSOR_MARK)


def _row_text(row: FrameRow) -> Text:
    if row.highlight is not None:
        return row.highlight.copy()
    return Text.from_ansi(row.record.display_line)


def render_rows(frame: Frame, colors: ColorScheme) -> list[tuple[int, Text]]:
    """Render the frame's records as screen lines tagged with their view position.

    Multi-line records (pretty-printed JSON) produce one screen line per
    line of display text. The cursor row is drawn with the cursor style,
    unless it carries search highlights, in which case it keeps them and is
    marked with a bar on its first line instead.
    """
    lines: list[tuple[int, Text]] = []
    for row in frame.rows:
        text = _row_text(row)
        marked = row.is_cursor and row.highlight is not None
        base = cursor_style(colors) if row.is_cursor and not marked else row_style(colors, row.position)
        for index, part in enumerate(text.split("\n", allow_blank=True)):
            line = Text(style=base, no_wrap=True, end="")
            if marked:
                line.append(CURSOR_MARK if index == 0 else _CONTINUATION, style=Style(bold=True))
            line.append_text(part)
            lines.append((row.position, line))
    return lines


def fit_to_height(lines: list[tuple[int, Text]], cursor: int, height: int) -> list[tuple[int, Text]]:
    """Trim leading lines until the whole cursor record fits in ``height`` rows."""
    if height <= 0:
        return []
    cursor_end = max((i + 1 for i, (position, _) in enumerate(lines) if position == cursor), default=0)
    skip = max(0, cursor_end - height)
    return lines[skip : skip + height]


class LogView(Widget):
    """Draws the visible slice of records using the Line API."""

    DEFAULT_CSS = """
    LogView {
        background: $surface;
        height: 1fr;
    }
    """

    class HeightChanged(Message):
        """Posted when the number of rows available for records changes."""

        def __init__(self, height: int) -> None:
            super().__init__()
            self.height = height

    def __init__(self, colors: ColorScheme, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._colors = colors
        self._lines: list[tuple[int, Text]] = []

    def on_resize(self, event: events.Resize) -> None:
        self.post_message(self.HeightChanged(event.size.height))

    def show(self, frame: Frame) -> None:
        """Replace the displayed lines. Keeps the previous ones if rendering fails."""
        try:
            lines = fit_to_height(render_rows(frame, self._colors), frame.cursor, self.size.height)
        except Exception:
            logger.exception("Failed to render frame, keeping the previous one")
            return
        self._lines = lines
        self.refresh()

    def render_line(self, y: int) -> Strip:
        width = self.size.width
        if y >= len(self._lines):
            return Strip.blank(width, self.rich_style)

        _, text = self._lines[y]
        strip = Strip(list(text.render(self.app.console))).crop(0, width)
        fill = text.style if isinstance(text.style, Style) else self.rich_style
        return strip.extend_cell_length(width, self.rich_style + fill)
