"""Submission timing: local dates, lateness verdicts and the grace budget."""

from asgn.timing.dates import (
    format_date,
    local_from_timestamp,
    now_local,
    offset_date,
    parse_date_arg,
    to_local,
    to_wall_clock,
)
from asgn.timing.grace import available_grace, check_grace_request, grant_grace
from asgn.timing.lateness import Verdict, effective_due_date, split_duration, versus

__all__ = [
    "Verdict",
    "available_grace",
    "check_grace_request",
    "effective_due_date",
    "format_date",
    "grant_grace",
    "local_from_timestamp",
    "now_local",
    "offset_date",
    "parse_date_arg",
    "split_duration",
    "to_local",
    "to_wall_clock",
    "versus",
]
