"""Turn raw CloudWatch messages into display text.

Decorated mode condenses web server access lines and pretty-prints JSON;
raw mode only trims surrounding whitespace. Colors are emitted as ANSI
escape sequences so the same text can be stripped for searching.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, NamedTuple

from rich.style import Style

from cloudtail.models import DisplayMode, LogRecord

if TYPE_CHECKING:
    from datetime import datetime

# IP - - [timestamp] "METHOD path protocol" status size "referer" "user-agent"
_ACCESS_LOG_RE = re.compile(
    r'^(\S+) \S+ \S+ \[([^\]]+)\] "(\S+) ([^"]*) ([^"]*)" (\d+) (\S+) "([^"]*)" "([^"]*)"'
)

# JSON objects with at most one level of nesting, embedded in free text
_EMBEDDED_JSON_RE = re.compile(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}")

_METHOD_STYLES: dict[str, Style] = {
    "GET": Style(color="bright_blue", bold=True),
    "POST": Style(color="bright_magenta", bold=True),
    "PUT": Style(color="bright_cyan", bold=True),
    "DELETE": Style(color="bright_red", bold=True),
}

_STATUS_STYLES: dict[str, Style] = {
    "2": Style(color="bright_green", bold=True),
    "3": Style(color="bright_yellow", bold=True),
    "4": Style(color="bright_red", bold=True),
    "5": Style(color="red", bold=True),
}

_DEFAULT_STYLE = Style(color="bright_white")
_IP_STYLE = Style(color="cyan")
_SIZE_STYLE = Style(color="bright_black")


class AccessLogEntry(NamedTuple):
    """Fields of a combined-format access log line."""

    ip: str
    timestamp: str
    method: str
    path: str
    protocol: str
    status: str
    size: str
    referer: str
    user_agent: str


def parse_access_log(message: str) -> AccessLogEntry | None:
    """Parse an Apache/Nginx combined log line, or return None."""
    m = _ACCESS_LOG_RE.match(message)
    if m is None:
        return None
    return AccessLogEntry(*m.groups())


def _paint(text: str, style: Style) -> str:
    return style.render(text)


def format_access_log(entry: AccessLogEntry) -> str:
    """Render an access log entry as ``ip method path status size`` with colors."""
    return " ".join(
        (
            _paint(entry.ip, _IP_STYLE),
            _paint(entry.method, _METHOD_STYLES.get(entry.method, _DEFAULT_STYLE)),
            _paint(entry.path, _DEFAULT_STYLE),
            _paint(entry.status, _STATUS_STYLES.get(entry.status[:1], _DEFAULT_STYLE)),
            _paint(entry.size, _SIZE_STYLE),
        )
    )


def format_json(text: str, indent: str) -> str | None:
    """Pretty-print a JSON document, or return None if it is not JSON."""
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return json.dumps(parsed, indent=indent, ensure_ascii=False)


def format_message(message: str, mode: DisplayMode, indent: str = "  ") -> str:
    """Format a raw message for display. Pure and idempotent for a given mode."""
    message = message.strip()
    if mode == DisplayMode.RAW:
        return message

    if entry := parse_access_log(message):
        return format_access_log(entry)

    # Only whole objects/arrays count; bare scalars stay as they are
    if message[:1] in "{[" and (whole := format_json(message, indent)) is not None:
        return whole

    def _replace(m: re.Match[str]) -> str:
        formatted = format_json(m.group(0), indent)
        return m.group(0) if formatted is None else formatted

    return _EMBEDDED_JSON_RE.sub(_replace, message)


def make_record(
    captured_at: datetime,
    original_text: str,
    mode: DisplayMode,
    indent: str = "  ",
) -> LogRecord:
    """Create a complete record with display text derived for the given mode."""
    display_text = format_message(original_text, mode, indent)
    stamp = captured_at.astimezone().strftime("%H:%M:%S")
    return LogRecord(
        captured_at=captured_at,
        original_text=original_text,
        display_text=display_text,
        display_line=f"[{stamp}] {display_text}",
        mode=mode,
    )


def regenerate(record: LogRecord, mode: DisplayMode, indent: str = "  ") -> LogRecord:
    """Re-derive a record's display forms from its original text."""
    return make_record(record.captured_at, record.original_text, mode, indent)
