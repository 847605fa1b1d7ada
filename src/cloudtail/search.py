"""Match index: regex search over the record store's view and highlight caching."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.text import Text

from cloudtail.errors import InvalidPatternError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.style import Style

    from cloudtail.models import LogRecord

_ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_markup(text: str) -> str:
    """Remove ANSI SGR sequences so text can be searched as the user reads it."""
    return _ANSI_ESCAPE_RE.sub("", text)


@dataclass(frozen=True)
class HighlightStyles:
    """Styles for ordinary matches and for the line holding the current match."""

    match: Style
    current: Style


@dataclass
class MatchSet:
    """Ordered view positions matching a pattern, plus the current selection.

    Positions are only valid for the view they were computed against; the
    set must be discarded whenever the store evicts a record.
    """

    pattern: str = ""
    regex: re.Pattern[str] | None = None
    positions: list[int] = field(default_factory=list)
    current: int = -1
    highlighted: dict[int, Text] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.positions)

    @property
    def is_empty(self) -> bool:
        return not self.positions

    @property
    def current_position(self) -> int | None:
        """View position of the current match, if one is selected."""
        if 0 <= self.current < len(self.positions):
            return self.positions[self.current]
        return None


def compile_pattern(pattern: str, *, is_regex: bool = True) -> re.Pattern[str]:
    """Compile a case-insensitive search pattern, literal or regex."""
    source = pattern if is_regex else re.escape(pattern)
    try:
        return re.compile(source, re.IGNORECASE)
    except re.error as exc:
        raise InvalidPatternError(str(exc)) from exc


def search(pattern: str, view: Sequence[LogRecord], *, is_regex: bool = True) -> MatchSet:
    """Find the view positions whose stripped display line matches ``pattern``.

    An empty pattern yields an empty match set. Raises InvalidPatternError
    if the pattern does not compile.
    """
    if not pattern:
        return MatchSet()
    regex = compile_pattern(pattern, is_regex=is_regex)
    positions = [i for i, record in enumerate(view) if regex.search(strip_markup(record.display_line))]
    return MatchSet(pattern=pattern, regex=regex, positions=positions)


def highlight_line(regex: re.Pattern[str], line: str, style: Style) -> Text:
    """Return the stripped line with every non-empty match span styled."""
    text = Text(strip_markup(line))
    for m in regex.finditer(text.plain):
        if m.end() > m.start():
            text.stylize(style, m.start(), m.end())
    return text


def highlight_all(
    match_set: MatchSet,
    view: Sequence[LogRecord],
    current_position: int | None,
    styles: HighlightStyles,
) -> dict[int, Text]:
    """Precompute highlighted text for every matched position.

    The record at ``current_position`` is rendered with the current-match
    style instead of the ordinary match style. The result is also stored
    on ``match_set.highlighted``.
    """
    highlighted: dict[int, Text] = {}
    if match_set.regex is not None:
        for position in match_set.positions:
            if not 0 <= position < len(view):
                continue
            style = styles.current if position == current_position else styles.match
            highlighted[position] = highlight_line(match_set.regex, view[position].display_line, style)
    match_set.highlighted = highlighted
    return highlighted


def move_current(
    match_set: MatchSet,
    new_index: int,
    view: Sequence[LogRecord],
    styles: HighlightStyles,
) -> None:
    """Select another match, restyling only the two affected lines."""
    if match_set.is_empty or match_set.regex is None:
        return
    old_position = match_set.current_position
    match_set.current = new_index
    new_position = match_set.current_position
    for position, style in ((old_position, styles.match), (new_position, styles.current)):
        if position is not None and 0 <= position < len(view):
            match_set.highlighted[position] = highlight_line(match_set.regex, view[position].display_line, style)


def advance(match_set: MatchSet, current_index: int, direction: int) -> int:
    """Step through matches with wraparound. No-op on an empty set."""
    if match_set.is_empty:
        return current_index
    return (current_index + direction) % match_set.count
