"""
asgn - member ranking by a score metric.

File: src/asgn/scoring/rank.py

Purpose
- Order course members by one metric column while showing every metric column
  of the assignment's score ruleset.

Functional requirements
- Present values rank before missing ones regardless of direction; two present
  values compare normally (reversed when descending).
- Ties are broken by username, so the result does not depend on the order in
  which members were listed.
- Missing, mistyped or NaN values are shown as ``NONE`` and rank as missing,
  never dropped.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from functools import cmp_to_key

from asgn.constants import NONE_PLACEHOLDER
from asgn.domain.rules import MetricKind, MetricValue, Ruleset
from asgn.domain.stats import StatBlockSet
from asgn.errors import UnknownMetricError


@dataclass(frozen=True, slots=True)
class RankRow:
    username: str
    values: tuple[MetricValue | None, ...]

    def cells(self) -> list[str]:
        return [self.username, *(render_metric(value) for value in self.values)]


@dataclass(frozen=True, slots=True)
class RankTable:
    columns: tuple[str, ...]
    rows: tuple[RankRow, ...]

    @property
    def headers(self) -> list[str]:
        return ["username", *self.columns]

    def text_rows(self) -> list[list[str]]:
        return [row.cells() for row in self.rows]


def render_metric(value: MetricValue | None) -> str:
    if value is None:
        return NONE_PLACEHOLDER
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def compare_optional(
    left: MetricValue | None, right: MetricValue | None, *, descending: bool = False
) -> int:
    """Three-way comparison with present values ahead of missing ones."""

    if left is None and right is None:
        return 0
    if right is None:
        return -1
    if left is None:
        return 1
    if left < right:
        result = -1
    elif left > right:
        result = 1
    else:
        result = 0
    return -result if descending else result


def rank(
    blocks: StatBlockSet,
    members: Iterable[str],
    score_ruleset: Ruleset | None,
    metric: str,
    descending: bool = False,
) -> RankTable:
    columns = score_ruleset.metric_targets() if score_ruleset is not None else ()
    if metric not in columns:
        raise UnknownMetricError(metric, columns)
    kinds: list[MetricKind | None] = [
        score_ruleset.metric_kind(column) if score_ruleset is not None else None
        for column in columns
    ]
    key_index = columns.index(metric)

    rows: list[RankRow] = []
    for username in dict.fromkeys(members):
        block = blocks.get_block(username)
        values: list[MetricValue | None] = []
        for column, kind in zip(columns, kinds, strict=True):
            value = block.get(column) if block is not None else None
            if value is not None and not _rankable(value, kind):
                value = None
            values.append(value)
        rows.append(RankRow(username=username, values=tuple(values)))

    def _compare(left: RankRow, right: RankRow) -> int:
        result = compare_optional(
            left.values[key_index], right.values[key_index], descending=descending
        )
        if result:
            return result
        return (left.username > right.username) - (left.username < right.username)

    return RankTable(columns=columns, rows=tuple(sorted(rows, key=cmp_to_key(_compare))))


def _rankable(value: MetricValue, kind: MetricKind | None) -> bool:
    if kind is None or not kind.accepts(value):
        return False
    return not (isinstance(value, float) and math.isnan(value))


__all__ = ["RankRow", "RankTable", "compare_optional", "rank", "render_metric"]
