"""Test Validation (20%): new logic should come with nearby tests."""

from __future__ import annotations

import re

from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import Issue, MetricName, MetricResult, RuleOutcome
from impactlens.scoring.rules.base import MetricDefinition, RuleGroup, rule

_NEW_LOGIC = (
    re.compile(r"(function|class|=>|if\s*\(|for\s*\(|while\s*\()"),
    re.compile(r"(def |class |async def )"),
)


@rule("tests.test_file")
def test_file_bonus(ctx: ScoringContext) -> RuleOutcome:
    if not ctx.is_test_file:
        return RuleOutcome.clean()
    return RuleOutcome(delta=10, tags=("test_file", "bonus=10"))


@rule("tests.coverage")
def coverage(ctx: ScoringContext) -> RuleOutcome:
    if ctx.is_test_file:
        return RuleOutcome.clean()
    code = ctx.changed_code
    if not any(p.search(code) for p in _NEW_LOGIC):
        return RuleOutcome(tags=("coverage=unknown",))

    count = len(ctx.nearby_tests)
    if count == 0:
        return RuleOutcome(
            delta=-40,
            issues=(Issue("No test coverage for changed code", ctx.first_changed_line),),
            tags=("new_logic", "coverage=none"),
        )
    if count < 2:
        return RuleOutcome(
            delta=-20,
            issues=(Issue("Partial test coverage (<60%)", ctx.first_changed_line),),
            tags=("new_logic", "coverage=partial"),
        )
    return RuleOutcome(tags=("new_logic", "coverage=good"))


def _summarize(result: MetricResult) -> str:
    if "test_file" in result.tags:
        return "Test file detected - new tests covering new logic"
    if result.issues:
        return "; ".join(i.message for i in result.issues)
    return "Tests appear present or unchanged"


METRIC = MetricDefinition(
    name=MetricName.TEST_VALIDATION,
    weight=0.20,
    groups=(RuleGroup("test_validation", 1.0, (test_file_bonus, coverage)),),
    suggestions=(
        "Add unit/integration tests for changed functions or branches",
        "Ensure meaningful assertions exist for new logic",
        "Rerun tests after fixing",
    ),
    summarize=_summarize,
)
