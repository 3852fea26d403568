"""Scoring models - diagnostics in, typed metric results out."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    """Diagnostic severity level."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single diagnostic supplied by an external checker for the analyzed file.

    Lines are 1-based and inclusive.
    """

    line: int
    message: str
    severity: Severity = Severity.WARNING
    end_line: int | None = None
    source: str | None = None  # tool that produced this
    code: str | None = None  # "E501", "TS2345", "no-unused-vars"

    def touches(self, lines: Iterable[int]) -> bool:
        """True when any of ``lines`` falls within this diagnostic's range."""
        end = self.end_line if self.end_line is not None else self.line
        return any(self.line <= n <= end for n in lines)


class MetricName(Enum):
    """The closed set of confidence metrics."""

    CODE_CORRECTNESS = "Code Correctness"
    SECURITY = "Security"
    TEST_VALIDATION = "Test Validation"
    CONTRACTS = "Contracts & Architecture"
    CHANGE_RISK = "Change Risk"
    CODE_HYGIENE = "Code Hygiene"


class ConfidenceStatus(Enum):
    HIGH = "high"
    ACCEPTABLE = "acceptable"
    WARNING = "warning"
    CRITICAL = "critical"


def classify_status(total: int) -> ConfidenceStatus:
    """``>85`` high, ``70..85`` acceptable, ``50..69`` warning, ``<50`` critical."""
    if total > 85:
        return ConfidenceStatus.HIGH
    if total >= 70:
        return ConfidenceStatus.ACCEPTABLE
    if total >= 50:
        return ConfidenceStatus.WARNING
    return ConfidenceStatus.CRITICAL


def clamp_score(score: float) -> int:
    # Halves round up, never to even
    return int(max(0, min(100, math.floor(score + 0.5))))


@dataclass(frozen=True, slots=True)
class Issue:
    message: str
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "line": self.line}


@dataclass(frozen=True, slots=True)
class RuleOutcome:
    """What one rule found: a score delta, the issues behind it, and tags.

    Tags are short machine-readable findings (``"coverage=none"``,
    ``"breaking=add"``) that callers can test for without parsing messages.
    """

    delta: int = 0
    issues: tuple[Issue, ...] = ()
    tags: tuple[str, ...] = ()

    @classmethod
    def clean(cls) -> RuleOutcome:
        return _CLEAN


_CLEAN = RuleOutcome()


@dataclass(frozen=True, slots=True)
class SubMetricResult:
    """Score of one weighted group of rules inside a metric."""

    name: str
    score: int
    weight: float
    issues: tuple[Issue, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "weight": self.weight,
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass(frozen=True, slots=True)
class MetricResult:
    name: MetricName
    score: int
    weight: float
    issues: tuple[Issue, ...] = ()
    sub_metrics: tuple[SubMetricResult, ...] = ()
    tags: tuple[str, ...] = ()
    summary: str = ""
    suggestions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name.value,
            "score": self.score,
            "weight": self.weight,
            "issues": [i.to_dict() for i in self.issues],
            "sub_metrics": [s.to_dict() for s in self.sub_metrics],
            "tags": list(self.tags),
            "summary": self.summary,
            "suggestions": list(self.suggestions),
        }


@dataclass(frozen=True, slots=True)
class ConfidenceResult:
    """Aggregate confidence.

    ``total = round(clamp(sum(score * weight) / sum(weight), 0, 100))``; 100
    when every weight is zero.
    """

    total: int
    status: ConfidenceStatus
    metrics: tuple[MetricResult, ...] = field(default=())
    changed_line_count: int = 0

    def metric(self, name: MetricName) -> MetricResult:
        for m in self.metrics:
            if m.name is name:
                return m
        raise KeyError(name.value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "status": self.status.value,
            "metrics": [m.to_dict() for m in self.metrics],
            "changed_line_count": self.changed_line_count,
        }
