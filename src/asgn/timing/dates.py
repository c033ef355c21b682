"""
asgn - local-time date helpers.

File: src/asgn/timing/dates.py

Purpose
- Convert due dates, turn-in times and command-line dates to local wall-clock time.

Functional requirements
- Every datetime handed to lateness and grace arithmetic is timezone-aware local time.
- A date without a time means the default due time on that day.
- Day offsets keep the wall-clock time across daylight-saving changes.
- A missing date renders as ``-``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from asgn.constants import DEFAULT_DUE_TIME
from asgn.errors import DateOutOfRangeError, InvalidDateError, TimeConversionError


def now_local() -> datetime:
    return datetime.now().astimezone()


def local_from_timestamp(seconds: int) -> datetime:
    """Convert whole epoch seconds into an aware local timestamp."""

    try:
        return datetime.fromtimestamp(seconds).astimezone()
    except (OverflowError, OSError, ValueError) as exc:
        raise TimeConversionError(seconds, str(exc)) from exc


def to_local(value: date | datetime) -> datetime:
    """Normalize a TOML date or date-time into an aware local timestamp.

    Date-only values mean the end of that day. Naive date-times are read as
    local wall-clock time.
    """

    if isinstance(value, datetime):
        return value.astimezone()
    if isinstance(value, date):
        return datetime.combine(value, DEFAULT_DUE_TIME).astimezone()
    raise InvalidDateError(repr(value))


def to_wall_clock(value: datetime) -> date | datetime:
    """Inverse of :func:`to_local` for persistence: a date when the time is the default due time."""

    naive = value.astimezone().replace(tzinfo=None)
    if naive.time() == DEFAULT_DUE_TIME:
        return naive.date()
    return naive


def parse_date_arg(text: str) -> datetime:
    """Parse ``yyyy-mm-dd`` or ``yyyy-mm-ddThh:mm[:ss]`` typed by a user."""

    raw = text.strip()
    try:
        if "T" in raw or " " in raw:
            return datetime.fromisoformat(raw).astimezone()
        return datetime.combine(date.fromisoformat(raw), DEFAULT_DUE_TIME).astimezone()
    except ValueError as exc:
        raise InvalidDateError(text) from exc


def format_date(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S")


def offset_date(value: datetime, days: int) -> datetime:
    """Shift ``value`` by whole calendar days on the local wall clock.

    Keeping the wall-clock time fixed means a 23:59:59 deadline stays at
    23:59:59 across daylight-saving transitions.
    """

    try:
        wall = value.astimezone().replace(tzinfo=None)
        return (wall + timedelta(days=days)).astimezone()
    except (OverflowError, OSError, ValueError) as exc:
        raise DateOutOfRangeError(f"{value.isoformat()} offset by {days} day(s)") from exc


__all__ = [
    "format_date",
    "local_from_timestamp",
    "now_local",
    "offset_date",
    "parse_date_arg",
    "to_local",
    "to_wall_clock",
]
