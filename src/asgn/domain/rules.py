"""
asgn - rule and ruleset models.

File: src/asgn/domain/rules.py

Purpose
- Describe the externally executed targets of an assignment and how their
  failures are tolerated.

Normative behavior
- Rule order is declaration order and is preserved through load and sync.
- A rule's own ``fail_okay`` overrides its ruleset's default, which in turn
  defaults to ``False``.
- A rule with a ``kind`` is a metric rule whose output file is parsed on pass.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Final

MetricValue = bool | int | float

_RULE_TEXT_FIELDS: Final[tuple[str, ...]] = ("wait_text", "pass_text", "fail_text", "help_text")
_RULE_FIELDS: Final[frozenset[str]] = frozenset(
    {"target", "fail_okay", "kind", *_RULE_TEXT_FIELDS}
)
_RULESET_FIELDS: Final[frozenset[str]] = frozenset({"on_grade", "on_submit", "fail_okay", "rules"})


class MetricKind(StrEnum):
    """Type a metric rule's output file is parsed as."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"

    def accepts(self, value: object) -> bool:
        """Return whether an already-parsed score value has this kind."""

        if self is MetricKind.BOOL:
            return isinstance(value, bool)
        if isinstance(value, bool):
            return False
        if self is MetricKind.INT:
            return isinstance(value, int)
        return isinstance(value, (int, float))


class Gate(StrEnum):
    """Ruleset flag consulted before gated execution."""

    ON_SUBMIT = "on_submit"
    ON_GRADE = "on_grade"


@dataclass(frozen=True, slots=True)
class Rule:
    target: str
    fail_okay: bool | None = None
    wait_text: str | None = None
    pass_text: str | None = None
    fail_text: str | None = None
    help_text: str | None = None
    kind: MetricKind | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.target, str) or not self.target.strip():
            raise ValueError("Rule.target must be a non-empty string")
        if self.fail_okay is not None and not isinstance(self.fail_okay, bool):
            raise ValueError(f"Rule {self.target!r}: fail_okay must be a boolean")
        for name in _RULE_TEXT_FIELDS:
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"Rule {self.target!r}: {name} must be a string")
        if self.kind is not None and not isinstance(self.kind, MetricKind):
            try:
                object.__setattr__(self, "kind", MetricKind(self.kind))
            except ValueError as exc:
                raise ValueError(
                    f"Rule {self.target!r}: kind must be one of bool, int, float"
                ) from exc

    @property
    def is_metric(self) -> bool:
        return self.kind is not None

    def effective_fail_okay(self, default: bool | None = None) -> bool:
        if self.fail_okay is not None:
            return self.fail_okay
        return bool(default)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Rule:
        _reject_unknown(payload, _RULE_FIELDS, "rule")
        if "target" not in payload:
            raise ValueError("rule is missing required field 'target'")
        return cls(
            target=payload["target"],
            fail_okay=payload.get("fail_okay"),
            wait_text=payload.get("wait_text"),
            pass_text=payload.get("pass_text"),
            fail_text=payload.get("fail_text"),
            help_text=payload.get("help_text"),
            kind=payload.get("kind"),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"target": self.target}
        if self.fail_okay is not None:
            payload["fail_okay"] = self.fail_okay
        for name in _RULE_TEXT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        if self.kind is not None:
            payload["kind"] = self.kind.value
        return payload


@dataclass(frozen=True, slots=True)
class Ruleset:
    rules: tuple[Rule, ...] = field(default_factory=tuple)
    on_grade: bool | None = None
    on_submit: bool | None = None
    fail_okay: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))
        for rule in self.rules:
            if not isinstance(rule, Rule):
                raise ValueError("Ruleset.rules must contain Rule instances")
        for name in ("on_grade", "on_submit", "fail_okay"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, bool):
                raise ValueError(f"Ruleset.{name} must be a boolean")

    def __len__(self) -> int:
        return len(self.rules)

    def gate_open(self, gate: Gate) -> bool:
        """Gated execution is skipped only when the flag is explicitly ``False``."""

        return getattr(self, gate.value) is not False

    def resolved_rules(self) -> tuple[Rule, ...]:
        """Rules with the ruleset's default tolerance folded into each one."""

        return tuple(
            rule if rule.fail_okay is not None else replace(rule, fail_okay=bool(self.fail_okay))
            for rule in self.rules
        )

    def metric_targets(self) -> tuple[str, ...]:
        """Distinct metric rule targets, in declaration order."""

        seen: dict[str, None] = {}
        for rule in self.rules:
            if rule.is_metric:
                seen.setdefault(rule.target, None)
        return tuple(seen)

    def metric_kind(self, target: str) -> MetricKind | None:
        """Kind of the last metric rule named ``target`` (later rules overwrite earlier ones)."""

        kind: MetricKind | None = None
        for rule in self.rules:
            if rule.target == target and rule.kind is not None:
                kind = rule.kind
        return kind

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Ruleset:
        _reject_unknown(payload, _RULESET_FIELDS, "ruleset")
        raw_rules = payload.get("rules", [])
        if not isinstance(raw_rules, Sequence) or isinstance(raw_rules, (str, bytes)):
            raise ValueError("ruleset 'rules' must be an array of tables")
        rules: list[Rule] = []
        for index, item in enumerate(raw_rules):
            if not isinstance(item, Mapping):
                raise ValueError(f"ruleset rule #{index} must be a table")
            rules.append(Rule.from_dict(item))
        return cls(
            rules=tuple(rules),
            on_grade=payload.get("on_grade"),
            on_submit=payload.get("on_submit"),
            fail_okay=payload.get("fail_okay"),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for name in ("on_grade", "on_submit", "fail_okay"):
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        payload["rules"] = [rule.to_dict() for rule in self.rules]
        return payload


def _reject_unknown(payload: Mapping[str, Any], allowed: frozenset[str], label: str) -> None:
    unknown = sorted(str(key) for key in payload if key not in allowed)
    if unknown:
        raise ValueError(f"{label} has unknown field(s): {', '.join(unknown)}")


__all__ = ["Gate", "MetricKind", "MetricValue", "Rule", "Ruleset"]
