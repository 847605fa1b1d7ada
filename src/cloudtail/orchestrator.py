"""Session orchestrator: the only writer of the store, match set and viewport.

Messages are handled one at a time, to completion. ``handle`` never blocks
and performs no I/O; fetches, timers and clipboard writes are returned as
commands and their outcomes come back as new messages.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, assert_never

from cloudtail.colors import highlight_styles
from cloudtail.errors import InvalidPatternError
from cloudtail.formatter import make_record, regenerate
from cloudtail.messages import (
    CancelSearch,
    ClearSearch,
    Command,
    CopyLine,
    CopyText,
    DeferredSearch,
    Fetch,
    FetchFailed,
    LoadHistory,
    Message,
    NextMatch,
    PrevMatch,
    RecordsArrived,
    Resize,
    Schedule,
    Scroll,
    ScrollKind,
    SearchInput,
    StartSearch,
    SubmitSearch,
    Tick,
    ToggleFollow,
    ToggleMode,
)
from cloudtail.models import DisplayMode, FetchKind, FetchRequest
from cloudtail.search import MatchSet, advance, highlight_all, move_current, search
from cloudtail.store import RecordStore
from cloudtail.utils import describe_hours
from cloudtail.viewport import Viewport

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from rich.text import Text

    from cloudtail.models import AppConfig, FetchedEvent, LogRecord

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class StatusKind(StrEnum):
    """What the status line is currently reporting."""

    NONE = "none"
    SEARCH = "search"
    MATCHES = "matches"
    INFO = "info"
    LOADING = "loading"
    ERROR = "error"


@dataclass(frozen=True)
class StatusLine:
    kind: StatusKind
    text: str = ""


@dataclass(frozen=True)
class FrameRow:
    """One record in the visible slice."""

    position: int
    record: LogRecord
    highlight: Text | None = None
    is_cursor: bool = False


@dataclass(frozen=True)
class Frame:
    """Everything the renderer needs, computed once per message."""

    title: str
    rows: tuple[FrameRow, ...]
    status: StatusLine
    controls: str
    cursor: int
    total: int


class Orchestrator:
    """Drives the record store, match index and viewport from messages."""

    def __init__(
        self,
        config: AppConfig,
        log_group: str = "",
        *,
        since: datetime | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._config = config
        self._clock = clock
        self._since = since
        self._styles = highlight_styles(config.colors)
        self.mode: DisplayMode = config.display_mode
        self.page_height: int = config.page_height
        self.generation: int = 0
        self._init_session(log_group)

    def _init_session(self, log_group: str) -> None:
        self.log_group = log_group
        self.store = RecordStore(self._config.capacity)
        self.viewport = Viewport(follow=True)
        self.matches = MatchSet()
        self.active_pattern = ""
        self.search_query = ""
        self.searching = False
        self.loading_initial = True
        self.awaiting_research = False
        self.status_message = ""
        self.last_error: str | None = None
        self.empty_notice: str | None = None
        self._pending: set[FetchKind] = set()
        self._initial_since = self._since
        self._window_hours = self._config.log_time_range
        self._window_attempt = 0
        self._fetch_count = 0
        self._next_token: str | None = None
        self._page_window: tuple[datetime, datetime] | None = None

    # --- State ---

    @property
    def following(self) -> bool:
        return self.viewport.follow

    @property
    def has_matches(self) -> bool:
        return not self.matches.is_empty

    @property
    def loading(self) -> bool:
        """True while a user-visible load (initial pages or history) is outstanding."""
        return FetchKind.INITIAL in self._pending or FetchKind.HISTORY in self._pending

    # --- Lifecycle ---

    def start(self) -> list[Command]:
        """Commands that begin a session: the first page and the poll timer."""
        return [self._fetch_initial(), Schedule(self._config.refresh_interval, Tick(self.generation))]

    def reset(self, log_group: str) -> list[Command]:
        """Abandon the current session and start over, e.g. on another log group."""
        self.generation += 1
        logger.debug("Starting session %d for %s", self.generation, log_group)
        self._init_session(log_group)
        return self.start()

    # --- Dispatch ---

    def handle(self, message: Message) -> list[Command]:  # noqa: C901, PLR0912
        """Apply one message and return the commands it produces."""
        match message:
            case RecordsArrived():
                return self._on_records(message)
            case FetchFailed():
                return self._on_fetch_failed(message)
            case Tick():
                return self._on_tick(message)
            case DeferredSearch():
                self._on_deferred_search(message)
            case StartSearch():
                self.searching = True
                self.search_query = ""
                self.viewport.follow = False
            case SearchInput(text=text):
                self.search_query = text
            case SubmitSearch(pattern=pattern):
                self.searching = False
                self.search_query = pattern
                self._perform_search(pattern)
            case CancelSearch():
                self.searching = False
                self.search_query = ""
                self._clear_search()
                self.viewport.follow = False
            case ClearSearch():
                self._clear_search()
            case NextMatch():
                self._step_match(1)
            case PrevMatch():
                self._step_match(-1)
            case Scroll(kind=kind):
                self._scroll(kind)
            case ToggleFollow():
                self._toggle_follow()
            case ToggleMode():
                self._toggle_mode()
            case LoadHistory():
                if FetchKind.HISTORY in self._pending:
                    return []
                return [self._fetch_history()]
            case Resize(height=height):
                self.page_height = max(1, height)
                self._regenerate_near_cursor()
            case CopyLine():
                return self._copy_line()
            case _:
                assert_never(message)
        return []

    # --- Fetch results ---

    def _on_records(self, msg: RecordsArrived) -> list[Command]:
        if msg.generation != self.generation:
            logger.debug("Dropping %s page from abandoned session %d", msg.kind, msg.generation)
            return []
        if msg.kind == FetchKind.INITIAL and not self.loading_initial:
            logger.debug("Dropping initial page that arrived after the initial load completed")
            return []
        self._pending.discard(msg.kind)
        self.last_error = None

        commands: list[Command] = []
        if msg.events:
            self.status_message = ""
            self.empty_notice = None
            commands.extend(self._ingest(msg.events))
        if msg.kind == FetchKind.INITIAL:
            commands.extend(self._continue_initial_load(msg))
        return commands

    def _on_fetch_failed(self, msg: FetchFailed) -> list[Command]:
        if msg.generation != self.generation:
            logger.debug("Dropping %s failure from abandoned session %d", msg.kind, msg.generation)
            return []
        self._pending.discard(msg.kind)
        logger.warning("%s fetch failed: %s", msg.kind, msg.error)
        self.last_error = msg.error
        self.status_message = ""
        return []

    def _ingest(self, events: Iterable[FetchedEvent]) -> list[Command]:
        evicted = 0
        for event in events:
            record = make_record(event.timestamp, event.message, self.mode, self._config.json_indent)
            if self.store.append(record):
                evicted += 1

        view_len = len(self.store)
        commands: list[Command] = []
        if evicted:
            logger.debug("Store evicted %d records", evicted)
            had_search = bool(self.active_pattern) or self.has_matches
            # Positions shifted: discard, never repair
            self.matches = MatchSet()
            self.viewport.shift(-evicted, view_len)
            if had_search:
                self.status_message = "Log buffer rolled over"
            if self.active_pattern and not self.awaiting_research:
                self.awaiting_research = True
                logger.debug("Scheduling re-search for %r", self.active_pattern)
                commands.append(
                    Schedule(self._config.rescan_delay, DeferredSearch(self.active_pattern, self.generation))
                )
        self.viewport.clamp(view_len)
        self._regenerate_near_cursor()
        return commands

    def _continue_initial_load(self, msg: RecordsArrived) -> list[Command]:
        if msg.next_token and msg.events and self._fetch_count < self._config.initial_page_budget:
            self._fetch_count += 1
            self._next_token = msg.next_token
            return [self._fetch_initial()]

        self._next_token = None
        self._page_window = None
        self._fetch_count = 0
        if not len(self.store):
            steps = self._config.window_expansion_hours
            if self._window_attempt < len(steps):
                self._window_hours = steps[self._window_attempt]
                self._window_attempt += 1
                self._initial_since = None
                self.status_message = f"No logs found, expanding search to {describe_hours(self._window_hours)}..."
                return [self._fetch_initial()]
            self.status_message = ""
            self.empty_notice = f"No logs found in the last {describe_hours(self._window_hours)}"
        self.loading_initial = False
        return []

    def _on_tick(self, msg: Tick) -> list[Command]:
        if msg.generation != self.generation:
            return []
        commands: list[Command] = [Schedule(self._config.refresh_interval, Tick(self.generation))]
        if self.loading_initial:
            if FetchKind.INITIAL not in self._pending:
                commands.append(self._fetch_initial())
        elif FetchKind.REFRESH not in self._pending:
            commands.append(self._fetch_refresh())
        return commands

    # --- Fetch requests ---

    def _request(self, kind: FetchKind, start: datetime, end: datetime, token: str | None = None) -> Fetch:
        self._pending.add(kind)
        request = FetchRequest(
            kind=kind,
            start=start,
            end=end,
            limit=self._config.logs_per_fetch,
            next_token=token,
            generation=self.generation,
        )
        logger.debug("Fetching %s %s..%s", kind, start, end)
        return Fetch(request)

    def _fetch_initial(self) -> Fetch:
        # Continuation tokens are only valid for the window that produced them
        if self._next_token is None or self._page_window is None:
            now = self._clock()
            start = self._initial_since or now - timedelta(hours=self._window_hours)
            self._page_window = (start, now)
        start, end = self._page_window
        return self._request(FetchKind.INITIAL, start, end, self._next_token)

    def _fetch_refresh(self) -> Fetch:
        now = self._clock()
        seconds = self._config.follow_refresh_window if self.viewport.follow else self._config.refresh_window
        return self._request(FetchKind.REFRESH, now - timedelta(seconds=seconds), now)

    def _fetch_history(self) -> Fetch:
        span = timedelta(hours=self._config.log_time_range)
        oldest = self.store.get(0)
        end = oldest.captured_at - timedelta(milliseconds=1) if oldest else self._clock() - span
        return self._request(FetchKind.HISTORY, end - span, end)

    # --- Search ---

    def _clear_search(self) -> None:
        self.active_pattern = ""
        self.matches = MatchSet()

    def _perform_search(self, pattern: str) -> None:
        if not pattern:
            self._clear_search()
            return
        self._regenerate_all()
        view = self.store.view()
        try:
            matches = search(pattern, view, is_regex=self._config.regex_search)
        except InvalidPatternError as exc:
            self.status_message = f"Invalid search pattern: {exc}"
            return

        self.active_pattern = pattern
        self.matches = matches
        if matches.is_empty:
            self.status_message = f"No matches found for '{pattern}'"
            return

        # Most recent match first, as a live tail would find it
        matches.current = matches.count - 1
        position = matches.positions[-1]
        self.viewport.focus(position, len(view))
        highlight_all(matches, view, position, self._styles)
        self.status_message = f"Found {matches.count} matches"

    def _on_deferred_search(self, msg: DeferredSearch) -> None:
        if msg.generation != self.generation:
            return
        self.awaiting_research = False
        if msg.pattern != self.active_pattern:
            logger.debug("Dropping re-search for superseded pattern %r", msg.pattern)
            return

        self._regenerate_all()
        view = self.store.view()
        try:
            matches = search(msg.pattern, view, is_regex=self._config.regex_search)
        except InvalidPatternError as exc:
            self.status_message = f"Invalid search pattern: {exc}"
            return
        self.matches = matches
        if matches.is_empty:
            self.status_message = f"No matches found for '{msg.pattern}'"
            return

        # Keep the user's place: nearest match at or above the cursor
        matches.current = max(0, bisect.bisect_right(matches.positions, self.viewport.cursor) - 1)
        highlight_all(matches, view, matches.current_position, self._styles)
        self.status_message = f"Found {matches.count} matches"

    def _step_match(self, direction: int) -> None:
        if self.matches.is_empty:
            return
        view = self.store.view()
        move_current(self.matches, advance(self.matches, self.matches.current, direction), view, self._styles)
        position = self.matches.current_position
        if position is not None:
            self.viewport.focus(position, len(view))
        self._regenerate_near_cursor()

    # --- Cursor and display ---

    def _scroll(self, kind: ScrollKind) -> None:
        view_len = len(self.store)
        match kind:
            case ScrollKind.LINE_UP:
                self.viewport.move_by(-1, view_len)
            case ScrollKind.LINE_DOWN:
                self.viewport.move_by(1, view_len)
            case ScrollKind.PAGE_UP:
                self.viewport.move_by(-self.page_height, view_len)
            case ScrollKind.PAGE_DOWN:
                self.viewport.move_by(self.page_height, view_len)
            case ScrollKind.TOP:
                self.viewport.jump_to_start(view_len)
            case ScrollKind.BOTTOM:
                self.viewport.jump_to_end(view_len)
        self._regenerate_near_cursor()

    def _toggle_mode(self) -> None:
        self.mode = DisplayMode.RAW if self.mode == DisplayMode.DECORATED else DisplayMode.DECORATED
        self._clear_search()
        self._regenerate_near_cursor(margin=0)
        self.status_message = "Formatted mode enabled" if self.mode == DisplayMode.DECORATED else "Raw mode enabled"

    def _toggle_follow(self) -> None:
        self.viewport.follow = not self.viewport.follow
        if self.viewport.follow:
            # Following and match navigation never coexist
            self._clear_search()
        self.viewport.clamp(len(self.store))
        self._regenerate_near_cursor()

    def _regenerate_near_cursor(self, margin: int | None = None) -> None:
        """Bring records around the visible slice up to the current display mode."""
        if margin is None:
            margin = self._config.regen_margin
        view_len = len(self.store)
        start, end = self.viewport.visible_range(view_len, self.page_height)
        self._regenerate_range(max(0, start - margin), min(view_len, end + margin))

    def _regenerate_all(self) -> None:
        """Bring every record up to the current display mode so search sees what is shown."""
        self._regenerate_range(0, len(self.store))

    def _regenerate_range(self, start: int, end: int) -> None:
        for position in range(start, end):
            record = self.store.get(position)
            if record is None or record.mode == self.mode:
                continue
            self.store.update_at(position, regenerate(record, self.mode, self._config.json_indent))

    def _copy_line(self) -> list[Command]:
        record = self.store.get(self.viewport.cursor)
        if record is None:
            return []
        self.status_message = "Copied line to clipboard"
        return [CopyText(record.original_text)]

    # --- Frame ---

    def frame(self) -> Frame:
        view_len = len(self.store)
        start, end = self.viewport.visible_range(view_len, self.page_height)
        rows: list[FrameRow] = []
        for position in range(start, end):
            record = self.store.get(position)
            if record is None:
                continue
            rows.append(
                FrameRow(
                    position=position,
                    record=record,
                    highlight=self.matches.highlighted.get(position),
                    is_cursor=position == self.viewport.cursor,
                )
            )
        return Frame(
            title=f"CloudWatch Logs: {self.log_group}",
            rows=tuple(rows),
            status=self.status_line(),
            controls=self.controls_line(),
            cursor=self.viewport.cursor,
            total=view_len,
        )

    def status_line(self) -> StatusLine:
        follow_note = "" if self.viewport.follow else " (follow disabled)"
        if self.searching:
            return StatusLine(StatusKind.SEARCH, f"Search: {self.search_query}_{follow_note}")
        if self.has_matches:
            return StatusLine(
                StatusKind.MATCHES,
                f"Matches: {self.matches.current + 1}/{self.matches.count}{follow_note}"
                " | n=next, N=prev, /=new search",
            )
        if self.status_message:
            return StatusLine(StatusKind.INFO, self.status_message)
        if self.loading:
            return StatusLine(StatusKind.LOADING, "Loading logs...")
        if self.last_error:
            return StatusLine(StatusKind.ERROR, f"Error: {self.last_error}")
        if self.empty_notice:
            return StatusLine(StatusKind.ERROR, self.empty_notice)
        return StatusLine(StatusKind.NONE)

    def controls_line(self) -> str:
        mode = "Formatted" if self.mode == DisplayMode.DECORATED else "Raw"
        follow = "ON" if self.viewport.follow and not self.searching and not self.has_matches else "OFF"
        view_len = len(self.store)
        position = f" | {self.viewport.cursor + 1}/{view_len} logs" if view_len else ""
        return (
            f"/ search, Esc clear, n/N next/prev, J format ({mode}), F follow ({follow}), "
            f"H history, y copy, q quit{position}"
        )
