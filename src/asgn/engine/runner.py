"""
asgn - ruleset execution engine.

File: src/asgn/engine/runner.py

Purpose
- Run the rules of a ruleset in order against a working directory, classify each
  outcome and harvest typed metrics from rule output files.

Functional requirements
- A rule passes iff its command exits with status 0.
- A failing rule without effective ``fail_okay`` is fatal: it raises
  ``FatalRuleError`` from ``run_rule`` and stops the ruleset.
- Counter invariant: ``passed + failed + not_reached == total``.
- Metric read or parse failures are logged warnings; the metric is omitted.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

import structlog

from asgn.domain.rules import Gate, MetricKind, MetricValue, Rule, Ruleset
from asgn.engine.commands import CommandExecutor, CommandSpec, LocalSubprocessExecutor
from asgn.errors import FatalRuleError
from asgn.ui.render import CLIRenderer
from asgn.utils.fs import set_public_mode

logger = structlog.get_logger(__name__)

CommandFactory = Callable[[str, Path], CommandSpec]

_INT_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")
_I64_MIN: Final[int] = -(2**63)
_I64_MAX: Final[int] = 2**63 - 1

FATAL_BANNER: Final[str] = "Execution cannot continue beyond this error."
NO_TARGETS: Final[str] = "No targets."


@dataclass(slots=True)
class RulesetReport:
    """Outcome counters and harvested metrics for one ruleset execution."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    fatal: bool = False
    metrics: dict[str, MetricValue] = field(default_factory=dict)

    @property
    def not_reached(self) -> int:
        return self.total - self.passed - self.failed

    @property
    def ok(self) -> bool:
        return not self.fatal

    def summary(self) -> str:
        return (
            f"{self.total} total targets - {self.passed} passed, "
            f"{self.failed} failed, {self.not_reached} not reached."
        )


def parse_metric(kind: MetricKind, text: str) -> MetricValue:
    """Parse the whole of ``text`` as ``kind``; raises ``ValueError`` when it does not fit."""

    value = text.strip()
    if kind is MetricKind.BOOL:
        if value == "true":
            return True
        if value == "false":
            return False
        raise ValueError(f"expected 'true' or 'false', got {value!r}")
    if kind is MetricKind.INT:
        if not _INT_PATTERN.fullmatch(value):
            raise ValueError(f"expected a decimal integer, got {value!r}")
        number = int(value)
        if not _I64_MIN <= number <= _I64_MAX:
            raise ValueError(f"integer {value} is outside the signed 64-bit range")
        return number
    if "_" in value:
        raise ValueError(f"expected a float, got {value!r}")
    return float(value)


def read_metric(path: Path, kind: MetricKind) -> MetricValue:
    """Read and parse a metric output file; ``OSError``/``ValueError`` propagate."""

    return parse_metric(kind, path.read_text(encoding="utf-8"))


class RuleEngine:
    """Executes rules through an injectable executor and reports through a renderer."""

    def __init__(
        self,
        command_factory: CommandFactory,
        *,
        executor: CommandExecutor | None = None,
        renderer: CLIRenderer | None = None,
    ) -> None:
        self._command_factory = command_factory
        self._executor = executor or LocalSubprocessExecutor()
        self._out = renderer or CLIRenderer()

    @property
    def renderer(self) -> CLIRenderer:
        return self._out

    def run_rule(self, rule: Rule, working_dir: Path, default_fail_okay: bool = False) -> bool:
        """Run one rule; ``True`` on pass, ``False`` on tolerated failure.

        Raises ``FatalRuleError`` when the rule fails and is not tolerated.
        """

        working_dir = Path(working_dir)
        self._out.status(rule.wait_text or f"Executing '{rule.target}'.")

        command = self._command_factory(rule.target, working_dir)
        self._out.detail(f"$ {command.display()}")
        result = self._executor.run(command)
        if result.stderr:
            self._out.text(result.stderr.rstrip("\n"))
        if not result.started:
            logger.warning(
                "rule_command_not_started",
                target=rule.target,
                command=command.display(),
                detail=result.stderr,
            )

        if result.passed:
            self._out.ok(rule.pass_text or f"'{rule.target}' passed.")
            artifact = working_dir / rule.target
            if artifact.exists():
                try:
                    set_public_mode(artifact)
                except OSError as exc:
                    logger.warning(
                        "artifact_mode_unchanged",
                        target=rule.target,
                        path=str(artifact),
                        error=str(exc),
                    )
            logger.info("rule_passed", target=rule.target)
            return True

        self._out.fail(rule.fail_text or f"'{rule.target}' failed.")
        if rule.help_text:
            self._out.advice(rule.help_text)

        tolerated = rule.effective_fail_okay(default_fail_okay)
        logger.info(
            "rule_failed",
            target=rule.target,
            returncode=result.returncode,
            tolerated=tolerated,
        )
        if tolerated:
            return False
        raise FatalRuleError(rule.target)

    def run_ruleset(
        self,
        ruleset: Ruleset | None,
        working_dir: Path,
        *,
        is_metric: bool = False,
    ) -> RulesetReport:
        if ruleset is None:
            self._out.text(NO_TARGETS)
            return RulesetReport()

        working_dir = Path(working_dir)
        report = RulesetReport(total=len(ruleset.rules))
        for rule in ruleset.rules:
            self._out.hline()
            try:
                passed = self.run_rule(rule, working_dir, bool(ruleset.fail_okay))
            except FatalRuleError:
                report.failed += 1
                report.fatal = True
                self._out.fail(FATAL_BANNER)
                break

            if not passed:
                report.failed += 1
                continue

            report.passed += 1
            if is_metric:
                self._harvest(rule, working_dir, report)

        self._out.hline()
        self._out.notice(report.summary())
        return report

    def run_gated(
        self,
        ruleset: Ruleset | None,
        gate: Gate,
        working_dir: Path,
        title: str,
        *,
        is_metric: bool = False,
    ) -> RulesetReport | None:
        """Run ``ruleset`` under ``title`` unless it is absent or closed for ``gate``."""

        if ruleset is None or not ruleset.gate_open(gate):
            return None
        self._out.hline(bold=True)
        self._out.heading(title)
        return self.run_ruleset(ruleset, working_dir, is_metric=is_metric)

    def _harvest(self, rule: Rule, working_dir: Path, report: RulesetReport) -> None:
        if rule.kind is None:
            logger.warning("metric_has_no_kind", target=rule.target)
            return
        path = working_dir / rule.target
        try:
            report.metrics[rule.target] = read_metric(path, rule.kind)
        except OSError as exc:
            logger.warning("metric_unreadable", target=rule.target, path=str(path), error=str(exc))
        except ValueError as exc:
            logger.warning(
                "metric_unparseable",
                target=rule.target,
                kind=rule.kind.value,
                error=str(exc),
            )


__all__ = [
    "CommandFactory",
    "FATAL_BANNER",
    "NO_TARGETS",
    "RuleEngine",
    "RulesetReport",
    "parse_metric",
    "read_metric",
]
