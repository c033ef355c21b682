"""
asgn - submit and grade pipelines.

File: src/asgn/engine/pipeline.py

Purpose
- Chain the build, check, score and grade rulesets of an assignment.

Functional requirements
- Submit pipeline: build, check, score, each gated by ``on_submit``.
- Grade pipeline: build, check, score, each gated by ``on_grade``, then grade
  (ungated) unless an earlier stage was fatal.
- A fatal stage stops the pipeline; the outcome reports it instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Final, Protocol

import structlog

from asgn.domain.rules import Gate, Ruleset

if TYPE_CHECKING:
    from asgn.domain.rules import MetricValue
    from asgn.engine.runner import RuleEngine, RulesetReport

logger = structlog.get_logger(__name__)


class PipelineStage(StrEnum):
    BUILD = "build"
    CHECK = "check"
    SCORE = "score"
    GRADE = "grade"

    @property
    def title(self) -> str:
        return _STAGE_TITLES[self]


_STAGE_TITLES: Final[dict[PipelineStage, str]] = {
    PipelineStage.BUILD: "Building",
    PipelineStage.CHECK: "Checking",
    PipelineStage.SCORE: "Scoring",
    PipelineStage.GRADE: "Grading",
}

_GATED_STAGES: Final[tuple[PipelineStage, ...]] = (
    PipelineStage.BUILD,
    PipelineStage.CHECK,
    PipelineStage.SCORE,
)


class StagedRulesets(Protocol):
    """Anything exposing the four optional stage rulesets (an assignment spec)."""

    @property
    def build(self) -> Ruleset | None: ...

    @property
    def check(self) -> Ruleset | None: ...

    @property
    def score(self) -> Ruleset | None: ...

    @property
    def grade(self) -> Ruleset | None: ...


@dataclass(slots=True)
class PipelineOutcome:
    """Reports of the stages that actually ran, in execution order."""

    reports: dict[PipelineStage, RulesetReport] = field(default_factory=dict)
    fatal_stage: PipelineStage | None = None

    @property
    def ok(self) -> bool:
        return self.fatal_stage is None

    @property
    def stages_run(self) -> tuple[PipelineStage, ...]:
        return tuple(self.reports)

    @property
    def metrics(self) -> dict[str, MetricValue]:
        report = self.reports.get(PipelineStage.SCORE)
        return dict(report.metrics) if report is not None else {}


def run_submit_pipeline(
    engine: RuleEngine, rulesets: StagedRulesets, working_dir: Path
) -> PipelineOutcome:
    return _run_stages(engine, rulesets, Path(working_dir), Gate.ON_SUBMIT, grade=False)


def run_grade_pipeline(
    engine: RuleEngine, rulesets: StagedRulesets, working_dir: Path
) -> PipelineOutcome:
    return _run_stages(engine, rulesets, Path(working_dir), Gate.ON_GRADE, grade=True)


def _run_stages(
    engine: RuleEngine,
    rulesets: StagedRulesets,
    working_dir: Path,
    gate: Gate,
    *,
    grade: bool,
) -> PipelineOutcome:
    outcome = PipelineOutcome()
    for stage in _GATED_STAGES:
        report = engine.run_gated(
            getattr(rulesets, stage.value),
            gate,
            working_dir,
            stage.title,
            is_metric=stage is PipelineStage.SCORE,
        )
        if report is None:
            continue
        outcome.reports[stage] = report
        if report.fatal:
            outcome.fatal_stage = stage
            logger.info("pipeline_stopped", stage=stage.value, gate=gate.value)
            return outcome

    if grade:
        engine.renderer.hline(bold=True)
        engine.renderer.heading(PipelineStage.GRADE.title)
        report = engine.run_ruleset(rulesets.grade, working_dir)
        outcome.reports[PipelineStage.GRADE] = report
        if report.fatal:
            outcome.fatal_stage = PipelineStage.GRADE
    return outcome


__all__ = [
    "PipelineOutcome",
    "PipelineStage",
    "StagedRulesets",
    "run_grade_pipeline",
    "run_submit_pipeline",
]
