"""Modal dialog for choosing a log group."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

from botocore.exceptions import BotoCoreError, ClientError
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, OptionList
from textual.widgets.option_list import Option

if TYPE_CHECKING:
    from collections.abc import Callable

    from textual.app import ComposeResult
    from textual.binding import BindingType

logger = logging.getLogger(__name__)


def filter_groups(groups: list[str], query: str) -> list[str]:
    """Case-insensitive substring filter, keeping the original order."""
    needle = query.strip().lower()
    if not needle:
        return list(groups)
    return [name for name in groups if needle in name.lower()]


class LogGroupDialog(ModalScreen[str | None]):
    """Filterable list of the account's log groups."""

    DEFAULT_CSS = """
    LogGroupDialog {
        align: center middle;
    }

    LogGroupDialog > Vertical {
        width: 90;
        height: 80%;
        background: $surface;
        border: tall $accent;
        padding: 1 2;
    }

    LogGroupDialog > Vertical > .title {
        margin-bottom: 1;
        text-style: bold;
    }

    LogGroupDialog > Vertical > OptionList {
        height: 1fr;
    }

    LogGroupDialog > Vertical > .hint {
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "cancel", "Cancel"),
        Binding("down", "focus_list", "List", show=False),
    ]

    def __init__(self, loader: Callable[[], list[str]], current: str = "") -> None:
        super().__init__()
        self._loader = loader
        self._current = current
        self._groups: list[str] = []

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label("Select a log group", classes="title")
            yield Input(placeholder="filter...", id="group-filter")
            yield OptionList(Option("Loading log groups...", disabled=True), id="group-list")
            yield Label("Enter to select, Escape to cancel", classes="hint", id="group-hint")

    def on_mount(self) -> None:
        self.query_one("#group-filter", Input).focus()
        self.run_worker(self._load_groups, thread=True, exclusive=True)

    def _load_groups(self) -> None:
        try:
            groups = self._loader()
        except (BotoCoreError, ClientError) as exc:
            logger.warning("Listing log groups failed: %s", exc)
            self.app.call_from_thread(self._show_error, str(exc))
            return
        self.app.call_from_thread(self._show_groups, groups)

    def _show_groups(self, groups: list[str]) -> None:
        self._groups = groups
        self._refresh_options(self.query_one("#group-filter", Input).value)

    def _show_error(self, error: str) -> None:
        option_list = self.query_one("#group-list", OptionList)
        option_list.clear_options()
        option_list.add_option(Option(f"Error: {error}", disabled=True))

    def _refresh_options(self, query: str) -> None:
        option_list = self.query_one("#group-list", OptionList)
        option_list.clear_options()
        names = filter_groups(self._groups, query)
        if not names:
            option_list.add_option(Option("(no matching log groups)", disabled=True))
            return
        option_list.add_options(Option(name, id=name) for name in names)
        if self._current in names:
            option_list.highlighted = names.index(self._current)

    def on_input_changed(self, event: Input.Changed) -> None:
        self._refresh_options(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        names = filter_groups(self._groups, event.value)
        if len(names) == 1:
            self.dismiss(names[0])
        elif names:
            self.action_focus_list()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option.id is not None:
            self.dismiss(event.option.id)

    def action_focus_list(self) -> None:
        self.query_one("#group-list", OptionList).focus()

    def action_cancel(self) -> None:
        self.dismiss(None)
