"""Rule objects and the metric definitions built from them.

A rule is a pure function of the ``ScoringContext`` returning a
``RuleOutcome``. Rules are grouped into weighted sub-metrics; a metric is
one or more groups. Every group starts at 100 and folds its rules' deltas in
order, clamping to 0..100 after each rule.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import MetricName, MetricResult, RuleOutcome

RuleCheck = Callable[[ScoringContext], RuleOutcome]
Summarizer = Callable[[MetricResult], str]


@dataclass(frozen=True, slots=True)
class Rule:
    rule_id: str  # "security.secrets"
    check: RuleCheck

    def evaluate(self, ctx: ScoringContext) -> RuleOutcome:
        return self.check(ctx)


@dataclass(frozen=True, slots=True)
class RuleGroup:
    name: str
    weight: float
    rules: tuple[Rule, ...]


@dataclass(frozen=True, slots=True)
class MetricDefinition:
    name: MetricName
    weight: float
    groups: tuple[RuleGroup, ...]
    suggestions: tuple[str, ...] = ()
    clean_summary: str = ""
    summarize: Summarizer | None = None


def rule(rule_id: str) -> Callable[[RuleCheck], Rule]:
    """Decorator turning a check function into a ``Rule``."""

    def wrap(check: RuleCheck) -> Rule:
        return Rule(rule_id=rule_id, check=check)

    return wrap
