"""Baseline models - where the "before" text came from and why.

All models are frozen dataclasses; a resolution is produced once per
analysis and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RefType(Enum):
    """Kind of source the baseline text was taken from."""

    VCS_HEAD = "vcsHead"
    VCS_MERGE_BASE = "vcsMergeBase"
    VCS_COMMIT = "vcsCommit"
    SNAPSHOT = "snapshot"
    NONE = "none"

    @property
    def is_vcs(self) -> bool:
        return self in (RefType.VCS_HEAD, RefType.VCS_MERGE_BASE, RefType.VCS_COMMIT)


class Availability(Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class Origin(Enum):
    """Where the current (after) text came from."""

    BUFFER = "buffer"
    DISK = "disk"


# Machine-readable reasons attached to skips and fallbacks
REASON_MERGE_BASE_UNAVAILABLE = "merge_base_unavailable"
REASON_FILE_NOT_TRACKED = "file_not_tracked"
REASON_FILE_NOT_AT_REF = "file_not_at_ref"
REASON_GIT_REF_UNAVAILABLE = "git_ref_unavailable"
REASON_GIT_DISABLED = "git_integration_disabled"
REASON_NO_REPOSITORY = "no_repository"
REASON_CACHE_DISABLED = "cache_disabled"
REASON_NO_SNAPSHOT = "no_cached_snapshot"
REASON_USING_SNAPSHOT = "using_cached_snapshot"
REASON_FIRST_ANALYSIS = "first_analysis_initialized_from_disk"
REASON_BINARY_FILE = "binary_file"
REASON_FILE_TOO_LARGE = "file_too_large"


def git_error_reason(message: str) -> str:
    return f"git_error: {message}"


def disk_read_error_reason(message: str) -> str:
    return f"disk_read_error: {message}"


def fallback_reason(previous: str) -> str:
    return f"fallback_from_{previous}"


@dataclass(frozen=True, slots=True)
class SourceVersion:
    """The current content of a file and where it came from."""

    text: str
    origin: Origin


@dataclass(frozen=True, slots=True)
class BaselineResolution:
    """Outcome of baseline resolution: which source won, and why."""

    ref_type: RefType
    availability: Availability
    ref_name: str | None = None
    commit_id: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "refType": self.ref_type.value,
            "refName": self.ref_name,
            "commitId": self.commit_id,
            "availability": self.availability.value,
            "reason": self.reason,
        }


@dataclass(frozen=True, slots=True)
class ResolvedBaseline:
    """Baseline text plus its resolution.

    ``is_empty`` is set when resolution itself already decided there is
    nothing to analyze (first sighting equal to disk, or no baseline at all).
    """

    text: str
    resolution: BaselineResolution
    is_empty: bool = False


# ============================================================================
# Strategy results
# ============================================================================


@dataclass(frozen=True, slots=True)
class Ok:
    """A resolver strategy produced baseline text."""

    baseline: ResolvedBaseline


@dataclass(frozen=True, slots=True)
class Skip:
    """A resolver strategy declined; ``reason`` says why."""

    reason: str


StrategyResult = Ok | Skip
