"""Confidence scoring: six weighted metrics over the changed lines of an edit."""

from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import (
    ConfidenceResult,
    ConfidenceStatus,
    Diagnostic,
    Issue,
    MetricName,
    MetricResult,
    RuleOutcome,
    Severity,
    SubMetricResult,
    classify_status,
)
from impactlens.scoring.scorer import ConfidenceScorer, aggregate

__all__ = [
    "ConfidenceResult",
    "ConfidenceScorer",
    "ConfidenceStatus",
    "Diagnostic",
    "Issue",
    "MetricName",
    "MetricResult",
    "RuleOutcome",
    "ScoringContext",
    "Severity",
    "SubMetricResult",
    "aggregate",
    "classify_status",
]
