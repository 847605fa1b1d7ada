"""Pydantic models for cloudtail."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime for model field resolution
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class DisplayMode(StrEnum):
    """How log messages are turned into display text."""

    DECORATED = "decorated"
    RAW = "raw"


class LogRecord(BaseModel):
    """A single log event held in the record store."""

    model_config = ConfigDict(frozen=True)

    captured_at: datetime
    original_text: str
    display_text: str
    display_line: str
    mode: DisplayMode = DisplayMode.DECORATED


class FetchKind(StrEnum):
    """Why a fetch was issued."""

    INITIAL = "initial"
    REFRESH = "refresh"
    HISTORY = "history"


class FetchRequest(BaseModel):
    """A time-range query against the log source."""

    model_config = ConfigDict(frozen=True)

    kind: FetchKind
    start: datetime
    end: datetime
    limit: int
    next_token: str | None = None
    generation: int = 0


class FetchedEvent(BaseModel):
    """A raw event as returned by the log source."""

    timestamp: datetime
    message: str
    event_id: str = ""


class FetchResult(BaseModel):
    """One page of events plus the continuation token, if any."""

    events: list[FetchedEvent] = []
    next_token: str | None = None


class ColorScheme(BaseModel):
    """Colors used by the viewer. Values are Rich color names or definitions."""

    header: str = "bright_blue"
    search: str = "bright_yellow"
    matches: str = "bright_green"
    status: str = "bright_yellow"
    error: str = "bright_red"
    controls: str = "bright_black"
    even_row: str = "color(245)"
    odd_row: str = "bright_white"
    cursor_bg: str = "bright_black"
    cursor_fg: str = "bright_white"
    match_bg: str = "bright_green"
    match_fg: str = "black"
    current_match_bg: str = "bright_yellow"
    current_match_fg: str = "black"


class AppConfig(BaseModel):
    """Application configuration persisted to disk."""

    capacity: int = Field(default=5000, ge=1)
    display_height: int = Field(default=24, ge=1)
    reserved_rows: int = Field(default=6, ge=0)
    refresh_interval: float = Field(default=5.0, gt=0)
    logs_per_fetch: int = Field(default=500, ge=1, le=10000)
    log_time_range: int = Field(default=2, ge=1)
    api_timeout: float = Field(default=10.0, gt=0)
    initial_page_budget: int = Field(default=3, ge=0)
    window_expansion_hours: list[int] = [24, 24 * 7, 24 * 30]
    refresh_window: int = Field(default=120, ge=1)
    follow_refresh_window: int = Field(default=60, ge=1)
    rescan_delay: float = Field(default=0.05, ge=0)
    display_mode: DisplayMode = DisplayMode.DECORATED
    json_indent: str = "  "
    regex_search: bool = True
    regen_margin: int = Field(default=50, ge=0)
    seen_event_limit: int = Field(default=10000, ge=1)
    theme: str = "textual-dark"
    colors: ColorScheme = ColorScheme()

    @property
    def page_height(self) -> int:
        """Rows available for log records at the configured display height."""
        return max(1, self.display_height - self.reserved_rows)
