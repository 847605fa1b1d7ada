"""Rich styles derived from the configured color scheme."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.style import Style

from cloudtail.search import HighlightStyles

if TYPE_CHECKING:
    from cloudtail.models import ColorScheme


def highlight_styles(colors: ColorScheme) -> HighlightStyles:
    """Styles for search matches: ordinary and current (brighter, bold)."""
    return HighlightStyles(
        match=Style(color=colors.match_fg, bgcolor=colors.match_bg),
        current=Style(color=colors.current_match_fg, bgcolor=colors.current_match_bg, bold=True),
    )


def cursor_style(colors: ColorScheme) -> Style:
    return Style(color=colors.cursor_fg, bgcolor=colors.cursor_bg)


def row_style(colors: ColorScheme, position: int) -> Style:
    """Zebra striping by logical record, not by wrapped sub-line."""
    return Style(color=colors.odd_row if position % 2 else colors.even_row)


def header_style(colors: ColorScheme) -> Style:
    return Style(color=colors.header, bold=True)
