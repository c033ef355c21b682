"""
asgn - lateness verdicts.

File: src/asgn/timing/lateness.py

Purpose
- Compare a submission's turn-in time with its (possibly extended) due date and
  render a short verdict such as ``Late 1d 2h 3m``.

Functional requirements
- Without a due date the verdict only says whether something was submitted.
- Swapping which of turn-in and due date is later flips Late/Early and keeps
  the day/hour/minute magnitudes.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from asgn.timing.dates import now_local, offset_date

if TYPE_CHECKING:
    from asgn.course.slot import SubmissionStatus

_SECONDS_PER_MINUTE: Final[int] = 60
_SECONDS_PER_HOUR: Final[int] = 60 * _SECONDS_PER_MINUTE
_SECONDS_PER_DAY: Final[int] = 24 * _SECONDS_PER_HOUR


class Verdict(StrEnum):
    SUBMITTED = "Submitted"
    NOT_SUBMITTED = "Not Submitted"
    MISSING = "Missing"
    LATE = "Late"
    EARLY = "Early"


def whole_seconds(turn_in: datetime, due: datetime) -> int:
    """Signed ``turn_in - due`` in whole seconds, truncated toward zero."""

    return int((turn_in - due).total_seconds())


def split_duration(seconds: int) -> tuple[int, int, int]:
    """Split a non-negative number of seconds into whole days, hours and minutes."""

    if seconds < 0:
        raise ValueError("split_duration expects a non-negative duration")
    days, rest = divmod(seconds, _SECONDS_PER_DAY)
    hours, rest = divmod(rest, _SECONDS_PER_HOUR)
    return days, hours, rest // _SECONDS_PER_MINUTE


def versus(
    status: SubmissionStatus,
    due_date: datetime | None,
    now: datetime | None = None,
) -> str:
    turn_in = status.turn_in_time
    if due_date is None:
        return str(Verdict.SUBMITTED if turn_in is not None else Verdict.NOT_SUBMITTED)

    if turn_in is None:
        current = now if now is not None else now_local()
        return str(Verdict.NOT_SUBMITTED if current <= due_date else Verdict.MISSING)

    delta = whole_seconds(turn_in, due_date)
    if delta > 0:
        days, hours, minutes = split_duration(delta)
        return f"{Verdict.LATE} {days}d {hours}h {minutes}m"
    days, hours, minutes = split_duration(-delta)
    return f"{Verdict.EARLY} {days}d {hours}h {minutes}m"


def effective_due_date(status: SubmissionStatus, due_date: datetime) -> datetime:
    """Due date pushed back by the slot's extension and grace days."""

    return offset_date(due_date, status.extension_days + status.grace_days)


__all__ = ["Verdict", "effective_due_date", "split_duration", "versus", "whole_seconds"]
