"""
asgn - unit tests for ranking

File: tests/unit/scoring/test_rank.py

What this test file should cover
- Present values rank ahead of missing ones in both directions.
- Ties resolve by username, so member order never changes the result.
- Unknown metric names are rejected.
"""

from __future__ import annotations

from datetime import datetime

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from asgn.domain.rules import MetricKind, Rule, Ruleset
from asgn.domain.stats import StatBlock, StatBlockSet
from asgn.errors import UnknownMetricError
from asgn.scoring.rank import compare_optional, rank, render_metric

WHEN = datetime(2026, 3, 1, 12, 0).astimezone()
SCORE = Ruleset(
    rules=(
        Rule("runtime", kind=MetricKind.FLOAT),
        Rule("compile"),
        Rule("passes", kind=MetricKind.INT),
    )
)


def _stats(**scores: dict[str, object]) -> StatBlockSet:
    return StatBlockSet([StatBlock(name, WHEN, values) for name, values in scores.items()])  # type: ignore[arg-type]


def test_ascending_rank_puts_missing_last() -> None:
    stats = _stats(
        alice={"runtime": 2.5, "passes": 9},
        bob={"runtime": 1.0, "passes": 7},
        carol={"passes": 10},
    )

    table = rank(stats, ["alice", "bob", "carol", "dave"], SCORE, "runtime")

    assert table.headers == ["username", "runtime", "passes"]
    assert table.text_rows() == [
        ["bob", "1.0", "7"],
        ["alice", "2.5", "9"],
        ["carol", "NONE", "10"],
        ["dave", "NONE", "NONE"],
    ]


def test_descending_rank_still_puts_missing_last() -> None:
    stats = _stats(alice={"passes": 9}, bob={"passes": 12}, carol={})

    table = rank(stats, ["carol", "alice", "bob"], SCORE, "passes", descending=True)

    assert [row.username for row in table.rows] == ["bob", "alice", "carol"]


def test_mistyped_values_are_shown_as_none() -> None:
    stats = _stats(alice={"passes": 1.5, "runtime": True})

    table = rank(stats, ["alice"], SCORE, "passes")

    assert table.text_rows() == [["alice", "NONE", "NONE"]]


def test_unknown_metric_is_rejected() -> None:
    with pytest.raises(UnknownMetricError) as excinfo:
        rank(StatBlockSet(), ["alice"], SCORE, "compile")
    assert "runtime, passes" in excinfo.value.description

    with pytest.raises(UnknownMetricError):
        rank(StatBlockSet(), ["alice"], None, "runtime")


def test_compare_optional_and_render() -> None:
    assert compare_optional(None, None) == 0
    assert compare_optional(1, None) == -1
    assert compare_optional(None, 1, descending=True) == 1
    assert compare_optional(1, 2, descending=True) == 1
    assert render_metric(False) == "false"
    assert render_metric(None) == "NONE"


_NAMES = ["ann", "ben", "cat", "dan", "eve", "fay"]


@given(
    values=st.lists(
        st.one_of(st.none(), st.integers(min_value=-5, max_value=5)),
        min_size=len(_NAMES),
        max_size=len(_NAMES),
    ),
    order=st.permutations(_NAMES),
    descending=st.booleans(),
)
@settings(max_examples=80, derandomize=True, deadline=None)
def test_property_rank_ignores_member_order(
    values: list[int | None], order: list[str], descending: bool
) -> None:
    stats = StatBlockSet(
        [
            StatBlock(name, WHEN, {} if value is None else {"passes": value})
            for name, value in zip(_NAMES, values, strict=True)
        ]
    )

    baseline = rank(stats, _NAMES, SCORE, "passes", descending=descending)
    shuffled = rank(stats, order, SCORE, "passes", descending=descending)

    assert shuffled == baseline
    present = [row.values[1] for row in baseline.rows if row.values[1] is not None]
    assert present == sorted(present, reverse=descending)
    assert all(row.values[1] is None for row in baseline.rows[len(present) :])


def test_nan_metric_ranks_as_missing() -> None:
    stats = _stats(ann={"runtime": 2.0}, ben={"runtime": float("nan")}, cat={"runtime": 1.0})

    for order in (["ann", "ben", "cat"], ["cat", "ann", "ben"], ["ben", "cat", "ann"]):
        table = rank(stats, order, SCORE, "runtime")
        assert [row.username for row in table.rows] == ["cat", "ann", "ben"]
        assert table.rows[-1].cells()[1] == "NONE"


@given(
    values=st.lists(
        st.one_of(st.none(), st.floats(allow_nan=True, allow_infinity=True)),
        min_size=len(_NAMES),
        max_size=len(_NAMES),
    ),
    order=st.permutations(_NAMES),
    descending=st.booleans(),
)
@settings(max_examples=80, derandomize=True, deadline=None)
def test_property_float_rank_ignores_member_order(
    values: list[float | None], order: list[str], descending: bool
) -> None:
    stats = StatBlockSet(
        [
            StatBlock(name, WHEN, {} if value is None else {"runtime": value})
            for name, value in zip(_NAMES, values, strict=True)
        ]
    )

    baseline = rank(stats, _NAMES, SCORE, "runtime", descending=descending)
    shuffled = rank(stats, order, SCORE, "runtime", descending=descending)

    assert shuffled == baseline
    present = [row.values[0] for row in baseline.rows if row.values[0] is not None]
    assert present == sorted(present, reverse=descending)  # type: ignore[type-var]
