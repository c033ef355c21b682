"""Stat-block refresh and member ranking."""

from asgn.scoring.rank import RankRow, RankTable, compare_optional, rank, render_metric
from asgn.scoring.refresh import (
    latest_score,
    load_stats,
    refresh_all_scores,
    refresh_scores,
    write_stats,
)

__all__ = [
    "RankRow",
    "RankTable",
    "compare_optional",
    "latest_score",
    "load_stats",
    "rank",
    "refresh_all_scores",
    "refresh_scores",
    "render_metric",
    "write_stats",
]
