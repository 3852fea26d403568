"""Impact report models and builder."""

from impactlens.report.builder import ImpactReportBuilder, relative_to_root
from impactlens.report.models import (
    ImpactIssue,
    ImpactReport,
    IssueType,
    create_empty_report,
    reports_equal,
    risk_level,
    serialize_report,
)

__all__ = [
    "ImpactIssue",
    "ImpactReport",
    "ImpactReportBuilder",
    "IssueType",
    "create_empty_report",
    "relative_to_root",
    "reports_equal",
    "risk_level",
    "serialize_report",
]
