"""Domain models for rules, rulesets and score snapshots."""

from asgn.domain.rules import Gate, MetricKind, MetricValue, Rule, Ruleset
from asgn.domain.stats import StatBlock, StatBlockSet

__all__ = [
    "Gate",
    "MetricKind",
    "MetricValue",
    "Rule",
    "Ruleset",
    "StatBlock",
    "StatBlockSet",
]
