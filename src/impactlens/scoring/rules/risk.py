"""Change Risk (10%): diff size and control-flow growth."""

from __future__ import annotations

import re

from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import Issue, MetricName, RuleOutcome
from impactlens.scoring.rules.base import MetricDefinition, RuleGroup, rule

_CONTROL_FLOW = re.compile(r"(if|else|for|while|switch|catch|try)\s*\(")

LARGE_CHANGE = 200
RISKY_CHANGE = 100
COMPLEXITY_SPIKE = 5


@rule("risk.change_size")
def change_size(ctx: ScoringContext) -> RuleOutcome:
    size = ctx.delta.size
    if size <= LARGE_CHANGE:
        return RuleOutcome(tags=(f"change_size={size}",))
    return RuleOutcome(
        delta=-15,
        issues=(Issue(f"Large change ({size} lines)", ctx.first_changed_line),),
        tags=(f"change_size={size}",),
    )


@rule("risk.complexity_delta")
def complexity_delta(ctx: ScoringContext) -> RuleOutcome:
    current = len(_CONTROL_FLOW.findall(ctx.changed_code))
    baseline = len(_CONTROL_FLOW.findall(ctx.prior)) if ctx.prior else 0
    delta = current - baseline
    if delta <= COMPLEXITY_SPIKE:
        return RuleOutcome(tags=(f"complexity_delta={delta}",))
    return RuleOutcome(
        delta=-20,
        issues=(
            Issue(
                f"Complexity spike (+{delta} control flow statements)",
                ctx.first_changed_line,
            ),
        ),
        tags=(f"complexity_delta={delta}",),
    )


@rule("risk.large_edit")
def large_edit(ctx: ScoringContext) -> RuleOutcome:
    if ctx.delta.size <= RISKY_CHANGE:
        return RuleOutcome.clean()
    return RuleOutcome(
        delta=-20,
        issues=(Issue("High historical bug risk (large file change)", ctx.first_changed_line),),
    )


METRIC = MetricDefinition(
    name=MetricName.CHANGE_RISK,
    weight=0.10,
    groups=(RuleGroup("change_risk", 1.0, (change_size, complexity_delta, large_edit)),),
    suggestions=(
        "Split large changes into smaller commits",
        "Add tests to high-risk modules",
        "Refactor to simplify complex logic",
    ),
    clean_summary="Small change footprint",
)
