"""Messages consumed and commands produced by the orchestrator.

Every event the viewer reacts to is one of the ``Message`` classes. The
orchestrator answers each message with a list of ``Command`` objects that
the application shell carries out; results come back as new messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from cloudtail.models import FetchedEvent, FetchKind, FetchRequest


class ScrollKind(StrEnum):
    """Cursor movements requested by the user."""

    LINE_UP = "line_up"
    LINE_DOWN = "line_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    TOP = "top"
    BOTTOM = "bottom"


# --- Messages ---


@dataclass(frozen=True)
class RecordsArrived:
    kind: FetchKind
    events: tuple[FetchedEvent, ...]
    next_token: str | None = None
    generation: int = 0


@dataclass(frozen=True)
class FetchFailed:
    kind: FetchKind
    error: str
    generation: int = 0


@dataclass(frozen=True)
class Tick:
    generation: int = 0


@dataclass(frozen=True)
class DeferredSearch:
    """Re-run a search once the store has settled after an eviction."""

    pattern: str
    generation: int = 0


@dataclass(frozen=True)
class StartSearch:
    pass


@dataclass(frozen=True)
class SearchInput:
    text: str


@dataclass(frozen=True)
class SubmitSearch:
    pattern: str


@dataclass(frozen=True)
class CancelSearch:
    pass


@dataclass(frozen=True)
class ClearSearch:
    pass


@dataclass(frozen=True)
class NextMatch:
    pass


@dataclass(frozen=True)
class PrevMatch:
    pass


@dataclass(frozen=True)
class Scroll:
    kind: ScrollKind


@dataclass(frozen=True)
class ToggleFollow:
    pass


@dataclass(frozen=True)
class ToggleMode:
    pass


@dataclass(frozen=True)
class LoadHistory:
    pass


@dataclass(frozen=True)
class Resize:
    height: int


@dataclass(frozen=True)
class CopyLine:
    pass


Message = (
    RecordsArrived
    | FetchFailed
    | Tick
    | DeferredSearch
    | StartSearch
    | SearchInput
    | SubmitSearch
    | CancelSearch
    | ClearSearch
    | NextMatch
    | PrevMatch
    | Scroll
    | ToggleFollow
    | ToggleMode
    | LoadHistory
    | Resize
    | CopyLine
)


# --- Commands ---


@dataclass(frozen=True)
class Fetch:
    request: FetchRequest


@dataclass(frozen=True)
class Schedule:
    """Deliver ``message`` after ``delay`` seconds."""

    delay: float
    message: Message


@dataclass(frozen=True)
class CopyText:
    text: str


Command = Fetch | Schedule | CopyText
