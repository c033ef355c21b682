"""
asgn - score refresh.

File: src/asgn/scoring/refresh.py

Purpose
- Rebuild and re-score member submissions and persist the resulting stat blocks
  to ``<assignment>/.info/score.toml``.

Functional requirements
- A cached block is reused when its time is within one second of the live
  turn-in time; otherwise the submission is copied into a scratch directory,
  built (result ignored) and scored with metric harvesting.
- A fatal score stage yields an empty block rather than an error.
- One member's failure is reported and skipped; it never aborts the refresh.
"""

from __future__ import annotations

import tomllib
from datetime import datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Final

import structlog

from asgn.constants import (
    INTERNAL_DIR_NAME,
    SCORE_BUILD_DIR_NAME,
    SCORE_FILE_NAME,
    STAT_STALENESS_TOLERANCE_SECONDS,
)
from asgn.domain.stats import StatBlock, StatBlockSet
from asgn.errors import AsgnError, BadStatsError, ErrorLog, StatusFileError
from asgn.utils.fs import temp_directory
from asgn.utils.tomlio import load_toml_file, write_toml_file

if TYPE_CHECKING:
    from asgn.course.assignment import AssignmentSpec
    from asgn.course.context import Context
    from asgn.engine.commands import CommandExecutor
    from asgn.engine.runner import RuleEngine
    from asgn.ui.render import CLIRenderer

logger = structlog.get_logger(__name__)

_STALENESS_TOLERANCE: Final[timedelta] = timedelta(seconds=STAT_STALENESS_TOLERANCE_SECONDS)


def score_file_path(spec: AssignmentSpec) -> Path:
    return spec.info_path / SCORE_FILE_NAME


def load_stats(spec: AssignmentSpec) -> StatBlockSet:
    """Read the assignment's stat blocks; a missing file means none have been captured."""

    path = score_file_path(spec)
    if not path.exists():
        return StatBlockSet()
    try:
        return StatBlockSet.from_dict(load_toml_file(path))
    except OSError as exc:
        raise StatusFileError("Reading score file", path, str(exc)) from exc
    except (tomllib.TOMLDecodeError, ValueError) as exc:
        raise BadStatsError(path, str(exc)) from exc


def write_stats(spec: AssignmentSpec, stats: StatBlockSet) -> None:
    path = score_file_path(spec)
    try:
        write_toml_file(path, stats.to_dict())
    except OSError as exc:
        raise StatusFileError("Writing score file", path, str(exc)) from exc


def is_current(block: StatBlock, turn_in_time: datetime) -> bool:
    return abs(turn_in_time - block.time) <= _STALENESS_TOLERANCE


def latest_score(
    context: Context,
    spec: AssignmentSpec,
    old_stats: StatBlockSet,
    username: str,
    build_root: Path,
    engine: RuleEngine,
) -> StatBlock | None:
    """Current stat block for ``username``, or ``None`` when nothing is submitted."""

    turn_in_time = context.get_slot(spec, username).turn_in_time()
    if turn_in_time is None:
        return None

    cached = old_stats.get_block(username)
    if cached is not None and is_current(cached, turn_in_time):
        engine.renderer.status(f"{username} is already up-to-date.")
        return cached

    build_path = build_root / username
    spec.retrieve_sub(build_path, username)
    spec.run_ruleset(engine, spec.build, build_path)
    report = spec.run_ruleset(engine, spec.score, build_path, is_metric=True)
    scores = report.metrics if report.ok else {}
    return StatBlock(username=username, time=turn_in_time, scores=dict(scores))


def refresh_scores(
    context: Context,
    spec: AssignmentSpec,
    *,
    executor: CommandExecutor | None = None,
    renderer: CLIRenderer | None = None,
) -> StatBlockSet:
    """Re-score every member of the course for ``spec`` and write ``score.toml``."""

    engine = spec.rule_engine(context, executor=executor, renderer=renderer)
    out = engine.renderer
    old_stats = load_stats(spec)
    new_stats = StatBlockSet()

    scratch_parent = spec.info_path / INTERNAL_DIR_NAME / SCORE_BUILD_DIR_NAME
    with temp_directory(prefix="score-", parent=scratch_parent) as build_root:
        for member in context.members:
            try:
                block = latest_score(context, spec, old_stats, member, build_root, engine)
            except AsgnError as exc:
                logger.warning(
                    "member_score_failed", assignment=spec.name, user=member, error=str(exc)
                )
                out.error(exc.render())
                continue
            if block is None:
                out.status(f"{member} has no submission.")
                logger.info("member_has_no_submission", assignment=spec.name, user=member)
                continue
            new_stats.append(block)

    write_stats(spec, new_stats)
    logger.info("scores_refreshed", assignment=spec.name, blocks=len(new_stats))
    return new_stats


def refresh_all_scores(
    context: Context,
    *,
    executor: CommandExecutor | None = None,
    renderer: CLIRenderer | None = None,
) -> None:
    """Refresh every loadable assignment; failures are collected and raised together."""

    errors: list[AsgnError] = []
    for spec in context.loaded_assignments():
        try:
            refresh_scores(context, spec, executor=executor, renderer=renderer)
        except AsgnError as exc:
            errors.append(exc)
    ErrorLog(errors).raise_if_any()


__all__ = [
    "is_current",
    "latest_score",
    "load_stats",
    "refresh_all_scores",
    "refresh_scores",
    "score_file_path",
    "write_stats",
]
