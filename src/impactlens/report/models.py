"""Impact report: what an edit changed and what it may affect.

Reports are plain frozen data with deterministic JSON (``serialize_report``);
all paths are relative to the project root, POSIX-separated.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

RiskLevel = Literal["low", "medium", "high"]

# risk_level thresholds
MAX_DOWNSTREAM_FOR_MEDIUM = 5
MAX_UNTESTED_FUNCTIONS_FOR_MEDIUM = 3


class IssueType(Enum):
    DOWNSTREAM = "downstream"
    TEST = "test"
    FUNCTION = "function"
    CLASS = "class"


@dataclass(frozen=True, slots=True)
class ImpactIssue:
    type: IssueType
    target: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "target": self.target}


@dataclass(frozen=True, slots=True)
class ImpactReport:
    """One analysis of one file.

    ``issues`` lists downstream files, then tests, then changed functions,
    then changed classes.
    """

    source_file: str
    functions: tuple[str, ...] = ()
    classes: tuple[str, ...] = ()
    downstream_files: tuple[str, ...] = ()
    tests: tuple[str, ...] = ()
    issues: tuple[ImpactIssue, ...] = ()
    reason: str | None = None  # why the report is empty, when it is

    @property
    def is_empty(self) -> bool:
        return not (self.functions or self.classes or self.downstream_files or self.tests)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "sourceFile": self.source_file,
            "functions": list(self.functions),
            "classes": list(self.classes),
            "downstreamFiles": list(self.downstream_files),
            "tests": list(self.tests),
            "issues": [i.to_dict() for i in self.issues],
        }
        if self.reason is not None:
            data["reason"] = self.reason
        return data


def create_empty_report(source_file: str, reason: str | None = None) -> ImpactReport:
    return ImpactReport(source_file=source_file, reason=reason)


def serialize_report(report: ImpactReport) -> str:
    """Stable, indented JSON for snapshots and debugging."""
    return json.dumps(report.to_dict(), indent=2)


def reports_equal(a: ImpactReport, b: ImpactReport) -> bool:
    """Compare the serialized forms (``reason`` included)."""
    return json.dumps(a.to_dict(), sort_keys=True) == json.dumps(b.to_dict(), sort_keys=True)


def risk_level(report: ImpactReport) -> RiskLevel:
    """``low`` when nothing changed; ``high`` for wide or untested changes."""
    if report.is_empty:
        return "low"
    if len(report.downstream_files) > MAX_DOWNSTREAM_FOR_MEDIUM:
        return "high"
    if not report.tests and len(report.functions) > MAX_UNTESTED_FUNCTIONS_FOR_MEDIUM:
        return "high"
    return "medium"
