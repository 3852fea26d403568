"""Scoring rules, one module per metric."""

from impactlens.scoring.rules import contracts, correctness, hygiene, risk, security, tests
from impactlens.scoring.rules.base import MetricDefinition, Rule, RuleGroup, rule

DEFAULT_METRICS: tuple[MetricDefinition, ...] = (
    correctness.METRIC,
    security.METRIC,
    tests.METRIC,
    contracts.METRIC,
    risk.METRIC,
    hygiene.METRIC,
)

__all__ = [
    "DEFAULT_METRICS",
    "MetricDefinition",
    "Rule",
    "RuleGroup",
    "rule",
]
