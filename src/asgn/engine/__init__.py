"""Ruleset execution engine: commands, rule runner and stage pipelines."""

from asgn.engine.commands import (
    CommandExecutor,
    CommandResult,
    CommandSpec,
    LocalSubprocessExecutor,
    build_make_command,
)
from asgn.engine.pipeline import (
    PipelineOutcome,
    PipelineStage,
    run_grade_pipeline,
    run_submit_pipeline,
)
from asgn.engine.runner import RuleEngine, RulesetReport, parse_metric, read_metric

__all__ = [
    "CommandExecutor",
    "CommandResult",
    "CommandSpec",
    "LocalSubprocessExecutor",
    "PipelineOutcome",
    "PipelineStage",
    "RuleEngine",
    "RulesetReport",
    "build_make_command",
    "parse_metric",
    "read_metric",
    "run_grade_pipeline",
    "run_submit_pipeline",
]
