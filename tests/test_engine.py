"""End-to-end tests for ImpactEngine.

Projects live under ``tmp_path``; engines without a ``vcs`` exercise the
snapshot path, the ``git_project`` fixture exercises HEAD and merge-base
baselines against a real repository.
"""

from __future__ import annotations

from pathlib import Path

import pygit2
import pytest

from impactlens.analysis.models import ParseStatus
from impactlens.baseline.models import Availability, RefType
from impactlens.config.models import BaselineConfig, ImpactLensConfig, ScanConfig
from impactlens.core.errors import AnalysisError, ErrorCode
from impactlens.engine import REASON_PARSE_FAILED, ImpactEngine
from impactlens.git.client import GitVcsClient
from impactlens.report.models import IssueType, reports_equal
from impactlens.scoring.models import Diagnostic, MetricName, Severity

ADD_BEFORE = """\
export function add(a: number, b: number): number {
  return a + b;
}
"""
ADD_AFTER = ADD_BEFORE.replace("b: number)", "b: number, c: number)")
CALLER = 'import { add } from "./a";\n\nexport const total = add(1, 2);\n'


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "src" / "a.ts").write_text(ADD_BEFORE)
    (root / "src" / "b.ts").write_text(CALLER)
    return root


@pytest.fixture
def engine(project: Path) -> ImpactEngine:
    return ImpactEngine(project)


@pytest.fixture
def seeded(engine: ImpactEngine) -> ImpactEngine:
    """Engine whose snapshot for src/a.ts holds ADD_BEFORE."""
    engine.analyze_file("src/a.ts")
    return engine


@pytest.fixture
def git_project(temp_repo: pygit2.Repository, commit_file) -> Path:
    commit_file(temp_repo, "src/a.ts", ADD_BEFORE, "Add a.ts")
    commit_file(temp_repo, "src/b.ts", CALLER, "Add b.ts")
    return Path(temp_repo.workdir)


# =============================================================================
# Snapshot baselines
# =============================================================================


class TestSnapshotBaseline:
    """Without a repository the first sighting seeds the snapshot cache."""

    def test_first_analysis_is_empty(self, engine: ImpactEngine, project: Path) -> None:
        result = engine.analyze_file("src/a.ts")

        assert result.report.is_empty
        assert result.parse_status is ParseStatus.NOT_ATTEMPTED
        assert result.baseline.ref_type is RefType.SNAPSHOT
        assert result.baseline.reason == "fallback_from_no_repository"
        assert result.confidence.total == 100
        assert str(project.resolve() / "src" / "a.ts") in engine.snapshots

    def test_edit_after_first_sighting(self, seeded: ImpactEngine) -> None:
        result = seeded.analyze_file("src/a.ts", buffer_text=ADD_AFTER)

        assert result.report.functions == ("add",)
        assert result.report.downstream_files == ("src/b.ts",)
        assert result.baseline.ref_type is RefType.SNAPSHOT
        assert result.parse_status is ParseStatus.SUCCESS
        assert result.line_delta.modified == (1,)

    def test_buffer_differing_from_disk_on_first_sighting(self, engine: ImpactEngine) -> None:
        result = engine.analyze_file("src/a.ts", buffer_text=ADD_AFTER)
        assert result.report.functions == ("add",)

    def test_snapshot_advances_after_analysis(self, seeded: ImpactEngine) -> None:
        seeded.analyze_file("src/a.ts", buffer_text=ADD_AFTER)

        again = seeded.analyze_file("src/a.ts", buffer_text=ADD_AFTER)

        assert again.report.is_empty
        assert again.parse_status is ParseStatus.NOT_ATTEMPTED


# =============================================================================
# Semantic outcomes
# =============================================================================


class TestImpact:
    """What counts as a change, and what it affects."""

    def test_blank_line_is_not_a_change(self, seeded: ImpactEngine) -> None:
        buffer = ADD_BEFORE.replace("a + b;\n", "a + b;\n\n")

        result = seeded.analyze_file("src/a.ts", buffer_text=buffer)

        assert result.report.is_empty
        assert result.report.issues == ()
        assert result.parse_status is ParseStatus.SUCCESS
        assert not result.line_delta.is_empty

    def test_parameter_rename_is_not_a_change(self, seeded: ImpactEngine) -> None:
        buffer = ADD_BEFORE.replace("(a: number", "(x: number").replace("a + b", "x + b")
        assert seeded.analyze_file("src/a.ts", buffer_text=buffer).report.is_empty

    def test_added_parameter(self, seeded: ImpactEngine) -> None:
        result = seeded.analyze_file("src/a.ts", buffer_text=ADD_AFTER)

        assert [(i.type, i.target) for i in result.report.issues] == [
            (IssueType.DOWNSTREAM, "src/b.ts"),
            (IssueType.FUNCTION, "add"),
        ]
        contracts = result.confidence.metric(MetricName.CONTRACTS)
        assert contracts.score == 60
        assert "breaking=add" in contracts.tags
        assert "coverage=none" in result.confidence.metric(MetricName.TEST_VALIDATION).tags

    def test_related_tests_are_reported(self, seeded: ImpactEngine, project: Path) -> None:
        (project / "src" / "a.test.ts").write_text('import { add } from "./a";\n')

        result = seeded.analyze_file("src/a.ts", buffer_text=ADD_AFTER)

        assert "src/a.test.ts" in result.report.tests
        assert "coverage=partial" in result.confidence.metric(MetricName.TEST_VALIDATION).tags

    def test_parse_failure(self, seeded: ImpactEngine) -> None:
        result = seeded.analyze_file("src/a.ts", buffer_text="export function add(a: number {\n")

        assert result.parse_status is ParseStatus.FAILED
        assert result.report.is_empty
        assert result.report.reason == REASON_PARSE_FAILED

    def test_diagnostics_lower_correctness(self, seeded: ImpactEngine) -> None:
        clean = seeded.analyze_file("src/a.ts", buffer_text=ADD_AFTER)
        seeded.update_baseline("src/a.ts", ADD_BEFORE)
        noisy = seeded.analyze_file(
            "src/a.ts",
            buffer_text=ADD_AFTER,
            diagnostics=[Diagnostic(1, "Unexpected token", Severity.ERROR)],
        )

        def correctness(r):
            return r.confidence.metric(MetricName.CODE_CORRECTNESS).score

        assert correctness(noisy) < correctness(clean)

    def test_diff(self, engine: ImpactEngine) -> None:
        assert engine.diff(ADD_BEFORE, ADD_AFTER, "a.ts").changed_functions == ("add",)

    def test_to_dict(self, seeded: ImpactEngine) -> None:
        data = seeded.analyze_file("src/a.ts", buffer_text=ADD_AFTER).to_dict()

        assert data["report"]["sourceFile"] == "src/a.ts"
        assert data["baseline"]["refType"] == RefType.SNAPSHOT.value
        assert data["parseStatus"] == ParseStatus.SUCCESS.value
        assert data["lineDelta"]["modified"] == [1]


# =============================================================================
# Guards and errors
# =============================================================================


class TestGuards:
    """Files that are never analyzed."""

    def test_binary_extension(self, engine: ImpactEngine) -> None:
        result = engine.analyze_file("assets/logo.png")

        assert result.report.reason == "binary_file"
        assert result.baseline.availability is Availability.UNAVAILABLE
        assert result.baseline.ref_type is RefType.NONE

    def test_nul_byte_in_buffer(self, engine: ImpactEngine) -> None:
        result = engine.analyze_file("src/a.ts", buffer_text="abc\x00def")
        assert result.report.reason == "binary_file"
        assert result.current_version is not None

    def test_buffer_too_large(self, project: Path) -> None:
        engine = ImpactEngine(project, config=ImpactLensConfig(scan=ScanConfig(max_file_size_mb=0.0001)))
        result = engine.analyze_file("src/a.ts", buffer_text="x" * 200)
        assert result.report.reason == "file_too_large"

    def test_file_too_large_on_disk(self, project: Path) -> None:
        (project / "src" / "big.ts").write_text("x" * 200)
        engine = ImpactEngine(project, config=ImpactLensConfig(scan=ScanConfig(max_file_size_mb=0.0001)))
        result = engine.analyze_file("src/big.ts")
        assert result.report.reason == "file_too_large"
        assert result.current_version is None

    def test_missing_file(self, engine: ImpactEngine) -> None:
        with pytest.raises(AnalysisError) as exc_info:
            engine.analyze_file("src/missing.ts")
        assert exc_info.value.code == ErrorCode.ANALYSIS_FILE_NOT_FOUND

    def test_invalid_mode(self, engine: ImpactEngine) -> None:
        with pytest.raises(AnalysisError):
            engine.analyze_file("src/a.ts", buffer_text=ADD_AFTER, mode="nightly")


# =============================================================================
# Baseline management
# =============================================================================


class TestBaselineManagement:
    def test_update_baseline_with_text(self, engine: ImpactEngine) -> None:
        assert engine.update_baseline("src/a.ts", ADD_AFTER)
        assert engine.analyze_file("src/a.ts", buffer_text=ADD_AFTER).report.is_empty

    def test_update_baseline_from_disk(self, engine: ImpactEngine, project: Path) -> None:
        assert engine.update_baseline(project / "src" / "a.ts")
        assert engine.analyze_file("src/a.ts", buffer_text=ADD_AFTER).report.functions == ("add",)

    def test_update_baseline_missing_file(self, engine: ImpactEngine) -> None:
        assert not engine.update_baseline("src/missing.ts")

    def test_initialize_baseline_if_needed(self, engine: ImpactEngine) -> None:
        assert engine.initialize_baseline_if_needed("src/a.ts")
        assert not engine.initialize_baseline_if_needed("src/a.ts")

    def test_clear_baseline(self, seeded: ImpactEngine, project: Path) -> None:
        seeded.analyze_file("src/a.ts", buffer_text=ADD_AFTER)
        (project / "src" / "a.ts").write_text(ADD_AFTER)

        seeded.clear_baseline("src/a.ts")

        assert len(seeded.snapshots) == 0
        # Re-seeded from disk, which now matches the buffer
        assert seeded.analyze_file("src/a.ts", buffer_text=ADD_AFTER).report.is_empty

    def test_clear_all_baselines(self, seeded: ImpactEngine) -> None:
        seeded.analyze_file("src/b.ts")
        seeded.clear_all_baselines()
        assert len(seeded.snapshots) == 0

    def test_cache_disabled(self, project: Path) -> None:
        config = ImpactLensConfig(baseline=BaselineConfig(cache_enabled=False))
        engine = ImpactEngine(project, config=config)

        result = engine.analyze_file("src/a.ts", buffer_text=ADD_AFTER)

        assert result.report.functions == ("add",)
        assert len(engine.snapshots) == 0


# =============================================================================
# Git baselines
# =============================================================================


class TestGitBaselines:
    """HEAD and merge-base baselines from a real repository."""

    def test_head_baseline(self, git_project: Path, temp_repo: pygit2.Repository) -> None:
        engine = ImpactEngine(git_project, vcs=GitVcsClient.for_path(git_project))

        result = engine.analyze_file("src/a.ts", buffer_text=ADD_AFTER)

        assert result.baseline.ref_type is RefType.VCS_HEAD
        assert result.baseline.ref_name == "HEAD"
        assert result.baseline.commit_id == str(temp_repo.head.target)
        assert result.baseline.reason is None
        assert result.report.functions == ("add",)
        assert result.report.downstream_files == ("src/b.ts",)

    def test_repeated_analysis_is_idempotent(self, git_project: Path) -> None:
        engine = ImpactEngine(git_project, vcs=GitVcsClient.for_path(git_project))

        first = engine.analyze_file("src/a.ts", buffer_text=ADD_AFTER)
        second = engine.analyze_file("src/a.ts", buffer_text=ADD_AFTER)

        assert reports_equal(first.report, second.report)
        assert first.confidence == second.confidence
        assert len(engine.snapshots) == 0

    def test_untracked_file_falls_back(self, git_project: Path) -> None:
        (git_project / "src" / "new.ts").write_text(ADD_BEFORE)
        engine = ImpactEngine(git_project, vcs=GitVcsClient.for_path(git_project))

        result = engine.analyze_file("src/new.ts")

        assert result.baseline.ref_type is RefType.SNAPSHOT
        assert result.baseline.reason == "fallback_from_file_not_tracked"

    def test_pr_mode_uses_merge_base(
        self, git_project: Path, temp_repo: pygit2.Repository, commit_file
    ) -> None:
        main_commit = temp_repo.head.peel(pygit2.Commit)
        temp_repo.branches.local.create("feature", main_commit)
        temp_repo.checkout(temp_repo.branches.local["feature"])
        commit_file(temp_repo, "src/a.ts", ADD_AFTER, "Add c")
        engine = ImpactEngine(git_project, vcs=GitVcsClient.for_path(git_project))

        pr = engine.analyze_file("src/a.ts", mode="pr", target_ref="main")
        local = engine.analyze_file("src/a.ts", mode="local")

        assert pr.baseline.ref_type is RefType.VCS_MERGE_BASE
        assert pr.baseline.ref_name == "main"
        assert pr.baseline.commit_id == str(main_commit.id)
        assert pr.report.functions == ("add",)
        assert local.baseline.ref_type is RefType.VCS_HEAD
        assert local.report.is_empty

    def test_git_disabled(self, git_project: Path) -> None:
        config = ImpactLensConfig(baseline=BaselineConfig(git_integration_enabled=False))
        engine = ImpactEngine.for_project(git_project, config=config)

        result = engine.analyze_file("src/a.ts")

        assert result.baseline.ref_type is RefType.SNAPSHOT
        assert result.baseline.reason == "fallback_from_git_integration_disabled"

    def test_for_project_finds_repository(self, git_project: Path) -> None:
        engine = ImpactEngine.for_project(git_project, config=ImpactLensConfig())
        result = engine.analyze_file("src/a.ts", buffer_text=ADD_AFTER)
        assert result.baseline.ref_type is RefType.VCS_HEAD
