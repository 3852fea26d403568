"""ImpactEngine - the long-lived entry point for change impact analysis.

Owns the session caches and the injected collaborators (VCS, filesystem,
configuration). One ``analyze_file`` call runs, in order:

1. current version (caller's buffer, else disk) and file guards
2. baseline resolution
3. line delta and semantic diff
4. impact report (dependency and test discovery)
5. confidence scoring
6. snapshot cache update

Files are independent: concurrent calls for different paths share nothing
but the caches, which are keyed by path.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from impactlens.analysis.dependencies import DependencyScanner
from impactlens.analysis.discovery import TestDiscovery
from impactlens.analysis.inventory import StructuralInventory
from impactlens.analysis.lines import compute_line_delta
from impactlens.analysis.models import ChangeSet, LineDelta, ParseStatus
from impactlens.analysis.semantic import SemanticDiffEngine
from impactlens.baseline.cache import RefCache, SnapshotCache
from impactlens.baseline.models import (
    REASON_BINARY_FILE,
    REASON_FILE_TOO_LARGE,
    Availability,
    BaselineResolution,
    Origin,
    RefType,
    SourceVersion,
)
from impactlens.baseline.resolver import BaselineResolver
from impactlens.config.loader import load_config
from impactlens.config.models import ImpactLensConfig
from impactlens.core.errors import AnalysisError
from impactlens.core.languages import detect_language, is_binary_path, looks_like_test_path
from impactlens.core.logging import clear_analysis_id, set_analysis_id
from impactlens.files.ops import Filesystem, LocalFilesystem
from impactlens.git.client import GitVcsClient, VcsClient
from impactlens.report.builder import ImpactReportBuilder, relative_to_root
from impactlens.report.models import ImpactReport, create_empty_report
from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import ConfidenceResult, Diagnostic
from impactlens.scoring.scorer import ConfidenceScorer

log = structlog.get_logger(__name__)

REASON_PARSE_FAILED = "parse_failed"


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Everything one ``analyze_file`` call produced."""

    report: ImpactReport
    confidence: ConfidenceResult
    baseline: BaselineResolution
    parse_status: ParseStatus
    line_delta: LineDelta
    current_version: SourceVersion | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "report": self.report.to_dict(),
            "confidence": self.confidence.to_dict(),
            "baseline": self.baseline.to_dict(),
            "parseStatus": self.parse_status.value,
            "lineDelta": {
                "added": list(self.line_delta.added),
                "removed": list(self.line_delta.removed),
                "modified": list(self.line_delta.modified),
            },
        }


class ImpactEngine:
    """Analyzes single-file edits within one project.

    Usage::

        engine = ImpactEngine.for_project(Path("."))
        result = engine.analyze_file(Path("src/pricing.ts"), buffer_text=editor_text)
        if result.parse_status is ParseStatus.FAILED:
            warn("could not tell what changed")
    """

    def __init__(
        self,
        project_root: Path,
        *,
        config: ImpactLensConfig | None = None,
        vcs: VcsClient | None = None,
        fs: Filesystem | None = None,
        inventory: StructuralInventory | None = None,
        scorer: ConfidenceScorer | None = None,
    ) -> None:
        self._root = project_root.resolve()
        self._config = config or ImpactLensConfig()
        self._vcs = vcs
        self._fs = fs or LocalFilesystem()
        self._snapshots = SnapshotCache()
        self._refs = RefCache()
        self._resolver = BaselineResolver(
            vcs=vcs,
            fs=self._fs,
            config=self._config.baseline,
            snapshots=self._snapshots,
            refs=self._refs,
        )
        self._semantic = SemanticDiffEngine(inventory)
        self._discovery = TestDiscovery(self._fs, self._config.scan)
        self._builder = ImpactReportBuilder(
            DependencyScanner(self._fs, self._config.scan),
            self._discovery,
        )
        self._scorer = scorer or ConfidenceScorer()

    @classmethod
    def for_project(cls, project_root: Path, config: ImpactLensConfig | None = None) -> ImpactEngine:
        """Engine over the local disk and the git repository containing ``project_root``."""
        config = config or load_config(project_root)
        vcs = GitVcsClient.for_path(project_root) if config.baseline.git_integration_enabled else None
        return cls(project_root, config=config, vcs=vcs)

    @property
    def project_root(self) -> Path:
        return self._root

    @property
    def config(self) -> ImpactLensConfig:
        return self._config

    @property
    def snapshots(self) -> SnapshotCache:
        return self._snapshots

    # =========================================================================
    # Analysis
    # =========================================================================

    def analyze_file(
        self,
        path: Path | str,
        buffer_text: str | None = None,
        diagnostics: Sequence[Diagnostic] = (),
        mode: str | None = None,
        target_ref: str | None = None,
    ) -> AnalysisResult:
        """Analyze the current version of ``path`` against its baseline.

        Raises:
            AnalysisError: No buffer was given and the file can't be read, or
                ``mode`` is not ``local``/``pr``.
        """
        file_path = self._absolute(path)
        analysis_id = set_analysis_id()
        bound = log.bind(path=relative_to_root(file_path, self._root))
        try:
            bound.debug("analysis_started", analysis_id=analysis_id, mode=mode)
            result = self._analyze(file_path, buffer_text, tuple(diagnostics), mode, target_ref)
            bound.info(
                "analysis_complete",
                ref_type=result.baseline.ref_type.value,
                reason=result.baseline.reason,
                parse_status=result.parse_status.value,
                functions=len(result.report.functions),
                downstream=len(result.report.downstream_files),
                tests=len(result.report.tests),
                confidence=result.confidence.total,
            )
            return result
        finally:
            clear_analysis_id()

    def _analyze(
        self,
        file_path: Path,
        buffer_text: str | None,
        diagnostics: tuple[Diagnostic, ...],
        mode: str | None,
        target_ref: str | None,
    ) -> AnalysisResult:
        display = relative_to_root(file_path, self._root)

        if is_binary_path(file_path):
            return self._rejected(display, REASON_BINARY_FILE)
        if buffer_text is None:
            size = self._fs.size(file_path)
            if size is not None and size > self._config.scan.max_file_size_bytes:
                return self._rejected(display, REASON_FILE_TOO_LARGE)
        current = self._current_version(file_path, buffer_text)
        if "\x00" in current.text:
            return self._rejected(display, REASON_BINARY_FILE, current)
        if len(current.text.encode("utf-8")) > self._config.scan.max_file_size_bytes:
            return self._rejected(display, REASON_FILE_TOO_LARGE, current)

        baseline = self._resolver.resolve(file_path, current, mode=mode, target_ref=target_ref)
        resolution = baseline.resolution
        language = detect_language(file_path)

        if baseline.is_empty or baseline.text == current.text:
            return AnalysisResult(
                report=create_empty_report(display),
                confidence=self._scorer.score(
                    self._scoring_context(display, file_path, current.text, None, LineDelta())
                ),
                baseline=resolution,
                parse_status=ParseStatus.NOT_ATTEMPTED,
                line_delta=LineDelta(),
                current_version=current,
            )

        delta = compute_line_delta(baseline.text, current.text)
        changes = self._semantic.diff(baseline.text, current.text, language)
        if changes.parse_status is ParseStatus.FAILED:
            report = create_empty_report(display, reason=REASON_PARSE_FAILED)
        else:
            report = self._builder.build(file_path, self._root, changes)

        confidence = self._scorer.score(
            self._scoring_context(
                display,
                file_path,
                current.text,
                baseline.text,
                delta,
                diagnostics=diagnostics,
                language=language,
            )
        )
        self._resolver.record_analysis(file_path, current.text, resolution)
        return AnalysisResult(
            report=report,
            confidence=confidence,
            baseline=resolution,
            parse_status=changes.parse_status,
            line_delta=delta,
            current_version=current,
        )

    def diff(self, before: str, after: str, path: Path | str) -> ChangeSet:
        """Semantic diff of two explicit versions of ``path``; no baseline, no caches."""
        return self._semantic.diff(before, after, detect_language(Path(path)))

    def _current_version(self, file_path: Path, buffer_text: str | None) -> SourceVersion:
        if buffer_text is not None:
            return SourceVersion(text=buffer_text, origin=Origin.BUFFER)
        read = self._fs.read(file_path)
        if not read.ok:
            raise AnalysisError.file_not_found(str(file_path))
        assert read.text is not None
        return SourceVersion(text=read.text, origin=Origin.DISK)

    def _scoring_context(
        self,
        display: str,
        file_path: Path,
        current: str,
        prior: str | None,
        delta: LineDelta,
        diagnostics: tuple[Diagnostic, ...] = (),
        language: str | None = None,
    ) -> ScoringContext:
        is_test = looks_like_test_path(display)
        nearby: tuple[str, ...] = ()
        if not delta.is_empty and not is_test:
            nearby = tuple(str(p) for p in self._discovery.nearby(file_path))
        return ScoringContext(
            path=display,
            current=current,
            delta=delta,
            prior=prior,
            diagnostics=diagnostics,
            language=language,
            nearby_tests=nearby,
            is_test_file=is_test,
        )

    def _rejected(
        self, display: str, reason: str, current: SourceVersion | None = None
    ) -> AnalysisResult:
        log.info("analysis_skipped", path=display, reason=reason)
        return AnalysisResult(
            report=create_empty_report(display, reason=reason),
            confidence=self._scorer.score(ScoringContext(path=display, current="")),
            baseline=BaselineResolution(
                ref_type=RefType.NONE,
                availability=Availability.UNAVAILABLE,
                reason=reason,
            ),
            parse_status=ParseStatus.NOT_ATTEMPTED,
            line_delta=LineDelta(),
            current_version=current,
        )

    # =========================================================================
    # Baseline management
    # =========================================================================

    def clear_baseline(self, path: Path | str) -> None:
        key = str(self._absolute(path))
        self._snapshots.discard(key)
        self._refs.discard_path(key)
        log.debug("baseline_cleared", path=key)

    def clear_all_baselines(self) -> None:
        self._snapshots.clear()
        self._refs.clear()
        log.debug("baselines_cleared")

    def update_baseline(self, path: Path | str, text: str | None = None) -> bool:
        """Make ``text`` (default: the file on disk) the snapshot baseline for ``path``.

        Returns False when no text was given and the file can't be read.
        """
        file_path = self._absolute(path)
        key = str(file_path)
        if text is None:
            read = self._fs.read(file_path)
            if not read.ok:
                log.debug("baseline_update_failed", path=key, error=read.error)
                return False
            text = read.text
        assert text is not None
        self._snapshots.put(key, text)
        self._refs.discard_path(key)
        log.debug("baseline_updated", path=key)
        return True

    def initialize_baseline_if_needed(self, path: Path | str) -> bool:
        """Seed the snapshot cache from disk if ``path`` has no entry yet.

        Returns True if an entry was created.
        """
        key = str(self._absolute(path))
        if key in self._snapshots:
            return False
        return self.update_baseline(path)

    def _absolute(self, path: Path | str) -> Path:
        p = Path(path)
        if not p.is_absolute():
            p = self._root / p
        return p.resolve()
