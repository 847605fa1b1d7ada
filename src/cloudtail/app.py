"""Textual application for cloudtail."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import TYPE_CHECKING, ClassVar, assert_never

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.widgets import Input

from cloudtail.aws import CloudWatchSource, list_log_groups
from cloudtail.errors import SourceUnavailableError
from cloudtail.messages import (
    CancelSearch,
    ClearSearch,
    Command,
    CopyLine,
    CopyText,
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
    ToggleFollow,
    ToggleMode,
)
from cloudtail.orchestrator import Orchestrator
from cloudtail.widgets.group_dialog import LogGroupDialog
from cloudtail.widgets.help_screen import HelpScreen
from cloudtail.widgets.log_view import LogView
from cloudtail.widgets.search_bar import SearchBar
from cloudtail.widgets.status_bar import StatusBar, TitleBar

if TYPE_CHECKING:
    from datetime import datetime

    from mypy_boto3_logs import CloudWatchLogsClient

    from cloudtail.models import AppConfig, FetchRequest

logger = logging.getLogger(__name__)

_ALWAYS_ENABLED = frozenset({"quit"})


class CloudTailApp(App[None]):
    """CloudWatch Logs tail viewer.

    All state lives in the orchestrator. Every key press, timer and fetch
    result goes through ``deliver``; the commands it returns are carried out
    here and the screen is redrawn from a fresh frame.
    """

    CSS_PATH = "styles/app.tcss"
    ENABLE_COMMAND_PALETTE = False

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("question_mark", "show_help", "Help"),
        Binding("slash", "start_search", "Search"),
        Binding("escape", "clear_search", "Clear", show=False),
        Binding("n", "next_match", "Next", show=False),
        Binding("N", "prev_match", "Prev", show=False),
        Binding("up,k", "move('line_up')", "Up", show=False),
        Binding("down,j", "move('line_down')", "Down", show=False),
        Binding("pageup", "move('page_up')", "Page Up", show=False),
        Binding("pagedown", "move('page_down')", "Page Down", show=False),
        Binding("home,g", "move('top')", "Top", show=False),
        Binding("end,G", "move('bottom')", "Latest", show=False),
        Binding("F", "toggle_follow", "Follow"),
        Binding("J", "toggle_mode", "Format"),
        Binding("H", "load_history", "History"),
        Binding("y", "copy_line", "Copy", show=False),
        Binding("L", "choose_group", "Log group"),
    ]

    def __init__(
        self,
        config: AppConfig,
        client: CloudWatchLogsClient,
        log_group: str = "",
        *,
        since: datetime | None = None,
        stream_prefix: str | None = None,
    ) -> None:
        super().__init__()
        self._config = config
        self._client = client
        self._stream_prefix = stream_prefix
        self._orchestrator = Orchestrator(config, log_group, since=since)
        self._source: CloudWatchSource | None = None

    def compose(self) -> ComposeResult:
        self._title_bar = TitleBar(self._config.colors, id="title-bar")
        self._log_view = LogView(self._config.colors, id="log-view")
        self._search_bar = SearchBar(placeholder="search pattern...", id="search-bar")
        self._status_bar = StatusBar(self._config.colors, id="status-bar")
        yield self._title_bar
        yield self._log_view
        yield self._search_bar
        yield self._status_bar

    def on_mount(self) -> None:
        if self._config.theme in self.available_themes:
            self.theme = self._config.theme
        else:
            logger.warning("Unknown theme %r, using the default", self._config.theme)

        if self._orchestrator.log_group:
            self._open_group(self._orchestrator.log_group)
        else:
            self.action_choose_group()
        self._render_frame()

    # --- Message loop ---

    def deliver(self, message: Message) -> None:
        """Hand one message to the orchestrator, run its commands and redraw."""
        self._execute(self._orchestrator.handle(message))
        self._render_frame()

    def _execute(self, commands: list[Command]) -> None:
        for command in commands:
            match command:
                case Fetch(request=request):
                    self.run_worker(self._fetch(request), group="fetch")
                case Schedule(delay=delay, message=message):
                    self.set_timer(delay, partial(self.deliver, message))
                case CopyText(text=text):
                    self.copy_to_clipboard(text)
                case _:
                    assert_never(command)

    async def _fetch(self, request: FetchRequest) -> None:
        source = self._source
        if source is None:
            return
        timeout = self._config.api_timeout
        try:
            result = await asyncio.wait_for(asyncio.to_thread(source.fetch, request), timeout=timeout)
        except SourceUnavailableError as exc:
            self.deliver(FetchFailed(request.kind, str(exc), request.generation))
            return
        except TimeoutError:
            self.deliver(FetchFailed(request.kind, f"request timed out after {timeout:g}s", request.generation))
            return
        self.deliver(RecordsArrived(request.kind, tuple(result.events), result.next_token, request.generation))

    def _render_frame(self) -> None:
        frame = self._orchestrator.frame()
        self._title_bar.set_title(frame.title)
        self._log_view.show(frame)
        self._status_bar.update_status(frame.status, frame.controls)

    def on_log_view_height_changed(self, event: LogView.HeightChanged) -> None:
        self.deliver(Resize(event.height))

    # --- Log group ---

    def _open_group(self, log_group: str) -> None:
        first = self._source is None
        self.workers.cancel_group(self, "fetch")
        self._source = CloudWatchSource(
            self._client,
            log_group,
            stream_prefix=self._stream_prefix,
            seen_limit=self._config.seen_event_limit,
        )
        logger.info("Tailing %s", log_group)
        if first and self._orchestrator.log_group == log_group:
            commands = self._orchestrator.start()
        else:
            commands = self._orchestrator.reset(log_group)
        self._execute(commands)

    def _list_groups(self) -> list[str]:
        return list(list_log_groups(self._client))

    def action_choose_group(self) -> None:
        dialog = LogGroupDialog(self._list_groups, current=self._orchestrator.log_group)
        self.push_screen(dialog, callback=self._on_group_chosen)

    def _on_group_chosen(self, log_group: str | None) -> None:
        if log_group is None:
            if self._source is None:
                self.exit()
            return
        self._open_group(log_group)
        self._render_frame()

    # --- Search ---

    def action_start_search(self) -> None:
        self.deliver(StartSearch())
        self._search_bar.open()

    def on_input_changed(self, event: Input.Changed) -> None:
        if isinstance(event.input, SearchBar) and self._orchestrator.searching:
            self.deliver(SearchInput(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if not isinstance(event.input, SearchBar):
            return
        self._close_search_bar()
        self.deliver(SubmitSearch(event.value.strip()))

    def on_search_bar_cancelled(self, _event: SearchBar.Cancelled) -> None:
        self._close_search_bar()
        self.deliver(CancelSearch())

    def _close_search_bar(self) -> None:
        self._search_bar.close()
        self.set_focus(None)

    def action_clear_search(self) -> None:
        self.deliver(ClearSearch())

    def action_next_match(self) -> None:
        self.deliver(NextMatch())

    def action_prev_match(self) -> None:
        self.deliver(PrevMatch())

    # --- Navigation and display ---

    def action_move(self, kind: str) -> None:
        self.deliver(Scroll(ScrollKind(kind)))

    def action_toggle_follow(self) -> None:
        self.deliver(ToggleFollow())

    def action_toggle_mode(self) -> None:
        self.deliver(ToggleMode())

    def action_load_history(self) -> None:
        self.deliver(LoadHistory())

    def action_copy_line(self) -> None:
        self.deliver(CopyLine())

    def action_show_help(self) -> None:
        self.push_screen(HelpScreen())

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:  # noqa: ARG002
        """Only quitting and cancelling are available while a pattern is being typed."""
        if self._orchestrator.searching:
            return action in _ALWAYS_ENABLED
        return True
