"""
asgn - unit tests for local date handling

File: tests/unit/timing/test_dates.py
"""

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from asgn.errors import DateOutOfRangeError, InvalidDateError, TimeConversionError
from asgn.timing.dates import (
    format_date,
    local_from_timestamp,
    offset_date,
    parse_date_arg,
    to_local,
    to_wall_clock,
)


def test_date_only_means_end_of_day() -> None:
    value = to_local(date(2026, 4, 1))

    assert value.tzinfo is not None
    assert value.replace(tzinfo=None) == datetime(2026, 4, 1, 23, 59, 59)


def test_wall_clock_inverts_to_local() -> None:
    end_of_day = to_local(date(2026, 4, 1))
    afternoon = to_local(datetime(2026, 4, 1, 14, 30))

    assert to_wall_clock(end_of_day) == date(2026, 4, 1)
    assert to_wall_clock(afternoon) == datetime(2026, 4, 1, 14, 30)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2026-05-06", datetime(2026, 5, 6, 23, 59, 59)),
        ("2026-05-06T08:15", datetime(2026, 5, 6, 8, 15)),
        ("2026-05-06 08:15:30", datetime(2026, 5, 6, 8, 15, 30)),
    ],
)
def test_parse_date_arg(text: str, expected: datetime) -> None:
    assert parse_date_arg(text).replace(tzinfo=None) == expected


@pytest.mark.parametrize("text", ["tomorrow", "2026-13-01", "2026-02-30", ""])
def test_parse_date_arg_rejects_garbage(text: str) -> None:
    with pytest.raises(InvalidDateError):
        parse_date_arg(text)


def test_offset_keeps_wall_clock_time() -> None:
    due = to_local(date(2026, 3, 1))

    shifted = offset_date(due, 30)

    assert shifted.replace(tzinfo=None) == datetime(2026, 3, 31, 23, 59, 59)
    assert shifted.time().replace(tzinfo=None) == time(23, 59, 59)


def test_offset_out_of_range_is_reported() -> None:
    due = to_local(datetime(9999, 12, 30, 12, 0))

    with pytest.raises(DateOutOfRangeError):
        offset_date(due, 5)


def test_negative_offset_moves_backwards() -> None:
    due = to_local(datetime(2026, 3, 10, 9, 0))

    assert offset_date(due, -2).replace(tzinfo=None) == datetime(2026, 3, 8, 9, 0)


def test_local_from_timestamp_round_trips_whole_seconds() -> None:
    now = datetime.now().astimezone().replace(microsecond=0)

    assert local_from_timestamp(int(now.timestamp())) == now


def test_local_from_timestamp_out_of_range() -> None:
    with pytest.raises(TimeConversionError):
        local_from_timestamp(10**20)


def test_format_date() -> None:
    assert format_date(None) == "-"
    assert format_date(to_local(datetime(2026, 1, 2, 3, 4, 5))) == "2026-01-02 03:04:05"
