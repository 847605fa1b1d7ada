"""Time helpers for cloudtail."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

import dateparser

_TIME_UNITS: dict[str, str] = {
    "s": "seconds",
    "sec": "seconds",
    "m": "minutes",
    "min": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "h": "hours",
    "hour": "hours",
    "hours": "hours",
    "d": "days",
    "day": "days",
    "days": "days",
    "w": "weeks",
    "week": "weeks",
    "weeks": "weeks",
}

_RELATIVE_RE = re.compile(r"^(\d+)\s*([a-z]+)$")

_HOURS_PER_DAY = 24
_HOURS_PER_WEEK = 24 * 7
_HOURS_PER_MONTH = 24 * 30


def parse_time(value: str, now: datetime | None = None) -> datetime:
    """Parse a start time for a log query.

    Supports relative shorthand (``30m``, ``2h``, ``1week``), ISO 8601 and
    anything dateparser understands ("yesterday 9:00", "2 days ago").
    Results are timezone-aware.
    """
    stripped = value.strip()
    ref = now or datetime.now(tz=UTC)

    if match := _RELATIVE_RE.match(stripped.lower()):
        amount, unit = int(match.group(1)), match.group(2)
        if unit in _TIME_UNITS:
            return ref - timedelta(**{_TIME_UNITS[unit]: amount})

    result = dateparser.parse(
        stripped,
        settings={
            "TIMEZONE": "UTC",
            "RETURN_AS_TIMEZONE_AWARE": True,
            "PREFER_DATES_FROM": "past",
            "RELATIVE_BASE": ref.replace(tzinfo=None),
        },
    )
    if result is not None:
        return result

    msg = f"Cannot parse time: {value!r}"
    raise ValueError(msg)


def _count(amount: int, unit: str) -> str:
    return f"{amount} {unit}" if amount == 1 else f"{amount} {unit}s"


def describe_hours(hours: int) -> str:
    """Render a look-back window the way the status line shows it."""
    if hours < _HOURS_PER_DAY:
        return _count(hours, "hour")
    if hours < _HOURS_PER_WEEK:
        return _count(hours // _HOURS_PER_DAY, "day")
    if hours < _HOURS_PER_MONTH:
        return _count(hours // _HOURS_PER_WEEK, "week")
    return _count(hours // _HOURS_PER_MONTH, "month")
