"""Confidence scorer: a fold over rule objects per metric."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

import structlog

from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import (
    ConfidenceResult,
    Issue,
    MetricResult,
    SubMetricResult,
    clamp_score,
    classify_status,
)
from impactlens.scoring.rules import DEFAULT_METRICS, MetricDefinition, RuleGroup

log = structlog.get_logger(__name__)


def aggregate(metrics: Sequence[MetricResult]) -> int:
    """``round(clamp(sum(score * weight) / sum(weight), 0, 100))``, 100 if no weight."""
    weight_total = sum(m.weight for m in metrics)
    if weight_total <= 0:
        return 100
    weighted = sum(m.score * m.weight for m in metrics)
    return clamp_score(weighted / weight_total)


class ConfidenceScorer:
    """Scores one edit against an ordered list of metric definitions."""

    def __init__(self, metrics: Sequence[MetricDefinition] = DEFAULT_METRICS) -> None:
        self._metrics = tuple(metrics)

    def score(self, ctx: ScoringContext) -> ConfidenceResult:
        results = tuple(self.evaluate_metric(definition, ctx) for definition in self._metrics)
        total = aggregate(results)
        status = classify_status(total)
        log.debug(
            "confidence_scored",
            path=ctx.path,
            total=total,
            status=status.value,
            changed_lines=len(ctx.changed_lines),
        )
        return ConfidenceResult(
            total=total,
            status=status,
            metrics=results,
            changed_line_count=len(ctx.changed_lines),
        )

    @staticmethod
    def evaluate_group(group: RuleGroup, ctx: ScoringContext) -> tuple[int, list[Issue], list[str]]:
        score = 100
        issues: list[Issue] = []
        tags: list[str] = []
        for rule in group.rules:
            outcome = rule.evaluate(ctx)
            score = clamp_score(score + outcome.delta)
            issues.extend(outcome.issues)
            tags.extend(outcome.tags)
        return score, issues, tags

    def evaluate_metric(self, definition: MetricDefinition, ctx: ScoringContext) -> MetricResult:
        subs: list[SubMetricResult] = []
        issues: list[Issue] = []
        tags: list[str] = []
        for group in definition.groups:
            score, group_issues, group_tags = self.evaluate_group(group, ctx)
            subs.append(
                SubMetricResult(
                    name=group.name,
                    score=score,
                    weight=group.weight,
                    issues=tuple(group_issues),
                )
            )
            issues.extend(group_issues)
            tags.extend(group_tags)

        group_weight = sum(s.weight for s in subs)
        if len(subs) == 1 or group_weight <= 0:
            score = subs[0].score if subs else 100
        else:
            score = clamp_score(sum(s.score * s.weight for s in subs) / group_weight)

        result = MetricResult(
            name=definition.name,
            score=score,
            weight=definition.weight,
            issues=tuple(issues),
            sub_metrics=tuple(subs) if len(subs) > 1 else (),
            tags=tuple(dict.fromkeys(tags)),
            suggestions=definition.suggestions,
        )
        if definition.summarize is not None:
            summary = definition.summarize(result)
        elif issues:
            summary = "; ".join(i.message for i in issues)
        else:
            summary = definition.clean_summary
        return replace(result, summary=summary)
