"""Composes the semantic diff with dependency and test discovery."""

from __future__ import annotations

from pathlib import Path

import structlog

from impactlens.analysis.dependencies import DependencyScanner
from impactlens.analysis.discovery import TestDiscovery
from impactlens.analysis.models import ChangeSet
from impactlens.report.models import ImpactIssue, ImpactReport, IssueType, create_empty_report

log = structlog.get_logger(__name__)


def relative_to_root(path: str | Path, project_root: Path) -> str:
    """POSIX path relative to ``project_root``, or absolute when outside it."""
    p = Path(path)
    try:
        return p.resolve().relative_to(project_root.resolve()).as_posix()
    except ValueError:
        return p.as_posix()


class ImpactReportBuilder:
    """Builds an ``ImpactReport`` from a ``ChangeSet``.

    An empty change set short-circuits: no scans run and the report is empty.
    """

    def __init__(self, scanner: DependencyScanner, discovery: TestDiscovery) -> None:
        self._scanner = scanner
        self._discovery = discovery

    def build(
        self,
        source_file: Path,
        project_root: Path,
        changes: ChangeSet,
    ) -> ImpactReport:
        display = relative_to_root(source_file, project_root)
        if changes.is_empty:
            return create_empty_report(display)

        downstream = self._scanner.scan(source_file, changes)
        tests = self._discovery.find(source_file, project_root, changes.symbols)

        downstream_rel = tuple(relative_to_root(p, project_root) for p in downstream.files)
        test_rel = tuple(relative_to_root(p, project_root) for p in tests)

        issues = (
            *(ImpactIssue(IssueType.DOWNSTREAM, p) for p in downstream_rel),
            *(ImpactIssue(IssueType.TEST, p) for p in test_rel),
            *(ImpactIssue(IssueType.FUNCTION, f) for f in changes.changed_functions),
            *(ImpactIssue(IssueType.CLASS, c) for c in changes.changed_classes),
        )
        log.debug(
            "impact_report_built",
            source=display,
            functions=len(changes.changed_functions),
            classes=len(changes.changed_classes),
            downstream=len(downstream_rel),
            tests=len(test_rel),
        )
        return ImpactReport(
            source_file=display,
            functions=changes.changed_functions,
            classes=changes.changed_classes,
            downstream_files=downstream_rel,
            tests=test_rel,
            issues=tuple(issues),
        )
