"""
asgn - unit tests for rule and ruleset models

File: tests/unit/domain/test_rules.py

Purpose
- Validate rule parsing, fail_okay resolution, gating flags and metric columns.
"""

from __future__ import annotations

import pytest

from asgn.domain.rules import Gate, MetricKind, Rule, Ruleset


def test_rule_fail_okay_overrides_ruleset_default() -> None:
    strict = Rule(target="compile", fail_okay=False)
    lenient = Rule(target="lint", fail_okay=True)
    unset = Rule(target="style")

    assert strict.effective_fail_okay(True) is False
    assert lenient.effective_fail_okay(False) is True
    assert unset.effective_fail_okay(True) is True
    assert unset.effective_fail_okay(None) is False


def test_resolved_rules_fold_in_ruleset_default() -> None:
    ruleset = Ruleset(rules=(Rule("a"), Rule("b", fail_okay=False)), fail_okay=True)

    resolved = ruleset.resolved_rules()

    assert [rule.fail_okay for rule in resolved] == [True, False]
    assert ruleset.rules[0].fail_okay is None


def test_kind_string_is_coerced_and_invalid_kind_rejected() -> None:
    assert Rule(target="time", kind="float").kind is MetricKind.FLOAT  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="kind must be one of"):
        Rule(target="time", kind="string")  # type: ignore[arg-type]


@pytest.mark.parametrize("target", ["", "   "])
def test_blank_target_is_rejected(target: str) -> None:
    with pytest.raises(ValueError, match="target"):
        Rule(target=target)


def test_gate_is_closed_only_by_explicit_false() -> None:
    assert Ruleset().gate_open(Gate.ON_SUBMIT) is True
    assert Ruleset(on_submit=True).gate_open(Gate.ON_SUBMIT) is True
    assert Ruleset(on_submit=False).gate_open(Gate.ON_SUBMIT) is False
    assert Ruleset(on_submit=False).gate_open(Gate.ON_GRADE) is True


def test_metric_targets_are_distinct_and_ordered() -> None:
    ruleset = Ruleset(
        rules=(
            Rule("runtime", kind=MetricKind.FLOAT),
            Rule("compile"),
            Rule("passes", kind=MetricKind.INT),
            Rule("runtime", kind=MetricKind.INT),
        )
    )

    assert ruleset.metric_targets() == ("runtime", "passes")
    assert ruleset.metric_kind("runtime") is MetricKind.INT
    assert ruleset.metric_kind("compile") is None


def test_metric_kind_accepts_parsed_values() -> None:
    assert MetricKind.BOOL.accepts(True)
    assert not MetricKind.BOOL.accepts(1)
    assert MetricKind.INT.accepts(3)
    assert not MetricKind.INT.accepts(True)
    assert not MetricKind.INT.accepts(3.0)
    assert MetricKind.FLOAT.accepts(3)
    assert MetricKind.FLOAT.accepts(2.5)
    assert not MetricKind.FLOAT.accepts(False)


def test_ruleset_from_dict_preserves_order_and_flags() -> None:
    payload = {
        "on_submit": False,
        "fail_okay": True,
        "rules": [
            {"target": "lint", "help_text": "Run clang-format."},
            {"target": "compile", "fail_okay": False, "pass_text": "Compiled."},
            {"target": "runtime", "kind": "float"},
        ],
    }

    ruleset = Ruleset.from_dict(payload)

    assert [rule.target for rule in ruleset.rules] == ["lint", "compile", "runtime"]
    assert ruleset.on_submit is False
    assert ruleset.on_grade is None
    assert ruleset.to_dict() == payload


def test_ruleset_from_dict_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError, match="unknown field"):
        Ruleset.from_dict({"rules": [], "on_sumbit": True})
    with pytest.raises(ValueError, match="unknown field"):
        Ruleset.from_dict({"rules": [{"target": "a", "timeout": 3}]})


def test_ruleset_from_dict_requires_rule_targets() -> None:
    with pytest.raises(ValueError, match="missing required field 'target'"):
        Ruleset.from_dict({"rules": [{"fail_okay": True}]})
