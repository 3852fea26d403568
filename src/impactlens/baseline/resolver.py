"""Baseline resolution: an ordered chain of "before" sources.

Candidates, tried in order until one yields text:

1. ``pr`` mode only: the file at the merge-base of HEAD and the target ref.
2. The file at HEAD (requires the file to be tracked).
3. The session snapshot cache.
4. First sighting: the file on disk, which also seeds the snapshot cache.
   If it equals the current text the result is marked empty.
5. Nothing readable: the current text becomes its own baseline and the
   result is empty, ``refType=none``, ``availability=unavailable``.

Each candidate is a strategy returning ``Ok`` or ``Skip(reason)``; later
candidates see earlier skip reasons so every fallback names its cause.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from impactlens.baseline.cache import RefCache, SnapshotCache
from impactlens.baseline.models import (
    REASON_CACHE_DISABLED,
    REASON_FILE_NOT_AT_REF,
    REASON_FILE_NOT_TRACKED,
    REASON_FIRST_ANALYSIS,
    REASON_GIT_DISABLED,
    REASON_GIT_REF_UNAVAILABLE,
    REASON_MERGE_BASE_UNAVAILABLE,
    REASON_NO_REPOSITORY,
    REASON_NO_SNAPSHOT,
    REASON_USING_SNAPSHOT,
    Availability,
    BaselineResolution,
    Ok,
    RefType,
    ResolvedBaseline,
    Skip,
    SourceVersion,
    StrategyResult,
    disk_read_error_reason,
    fallback_reason,
    git_error_reason,
)
from impactlens.config.models import BaselineConfig
from impactlens.core.errors import AnalysisError, InternalError
from impactlens.files.ops import Filesystem
from impactlens.git.client import VcsClient

log = structlog.get_logger(__name__)

_MODES = ("local", "pr")


@dataclass(frozen=True, slots=True)
class ResolutionRequest:
    """Everything one resolution attempt needs."""

    path: Path
    cache_key: str
    current: SourceVersion
    mode: str
    target_ref: str


Strategy = Callable[[ResolutionRequest, Sequence[str]], StrategyResult]


def first_success(
    strategies: Sequence[Strategy],
    request: ResolutionRequest,
) -> tuple[ResolvedBaseline | None, list[str]]:
    """Run strategies in order; return the first ``Ok`` and all skip reasons seen."""
    skips: list[str] = []
    for strategy in strategies:
        result = strategy(request, skips)
        if isinstance(result, Ok):
            return result.baseline, skips
        log.debug(
            "baseline_candidate_skipped",
            strategy=strategy.__name__,
            path=str(request.path),
            reason=result.reason,
        )
        skips.append(result.reason)
    return None, skips


class BaselineResolver:
    """Resolves the "before" text for a file.

    Owns no state of its own: the snapshot and ref caches are injected so the
    engine can share and clear them.
    """

    def __init__(
        self,
        *,
        vcs: VcsClient | None,
        fs: Filesystem,
        config: BaselineConfig,
        snapshots: SnapshotCache,
        refs: RefCache,
    ) -> None:
        self._vcs = vcs
        self._fs = fs
        self._config = config
        self._snapshots = snapshots
        self._refs = refs

    # =========================================================================
    # Public API
    # =========================================================================

    def resolve(
        self,
        path: Path,
        current: SourceVersion,
        mode: str | None = None,
        target_ref: str | None = None,
    ) -> ResolvedBaseline:
        mode = mode or self._config.mode
        if mode not in _MODES:
            raise AnalysisError.invalid_mode(mode)

        request = ResolutionRequest(
            path=path,
            cache_key=str(path),
            current=current,
            mode=mode,
            target_ref=target_ref or self._config.pr_target_branch,
        )

        strategies: list[Strategy] = []
        if mode == "pr":
            strategies.append(self._from_merge_base)
        strategies.extend(
            (self._from_head, self._from_snapshot, self._from_disk, self._self_baseline)
        )

        baseline, skips = first_success(strategies, request)
        if baseline is None:
            raise InternalError.unexpected("baseline chain exhausted", path=str(path), skips=skips)

        log.debug(
            "baseline_resolved",
            path=str(path),
            ref_type=baseline.resolution.ref_type.value,
            reason=baseline.resolution.reason,
            is_empty=baseline.is_empty,
        )
        return baseline

    def record_analysis(self, path: Path, text: str, resolution: BaselineResolution) -> None:
        """Move the snapshot forward after an analysis.

        Only snapshot-derived baselines advance; a git baseline stays
        authoritative no matter how often the file is saved.
        """
        if resolution.ref_type is not RefType.SNAPSHOT or not self._config.cache_enabled:
            return
        self._snapshots.put(str(path), text)
        log.debug("snapshot_updated", path=str(path))

    # =========================================================================
    # Git strategies
    # =========================================================================

    def _git_unavailable(self) -> str | None:
        if not self._config.git_integration_enabled:
            return REASON_GIT_DISABLED
        if self._vcs is None:
            return REASON_NO_REPOSITORY
        return None

    def _from_merge_base(
        self,
        request: ResolutionRequest,
        skips: Sequence[str],  # noqa: ARG002
    ) -> StrategyResult:
        if reason := self._git_unavailable():
            return Skip(reason)
        assert self._vcs is not None
        try:
            head = self._vcs.current_ref()
            if head is None:
                return Skip(REASON_GIT_REF_UNAVAILABLE)

            key = RefCache.key(self._vcs.repo_root, request.cache_key, "pr", request.target_ref)
            if cached := self._refs.lookup(key, head):
                return Ok(cached)

            base = self._vcs.merge_base(request.target_ref)
            if base is None:
                return Skip(REASON_MERGE_BASE_UNAVAILABLE)
            text = self._vcs.read_at_ref(str(request.path), base)
            if text is None:
                return Skip(REASON_MERGE_BASE_UNAVAILABLE)
        except Exception as e:
            log.debug("merge_base_read_failed", path=str(request.path), exc_info=True)
            return Skip(git_error_reason(str(e)))

        baseline = ResolvedBaseline(
            text=text,
            resolution=BaselineResolution(
                ref_type=RefType.VCS_MERGE_BASE,
                availability=Availability.AVAILABLE,
                ref_name=request.target_ref,
                commit_id=base,
            ),
        )
        self._refs.store(key, head, baseline)
        return Ok(baseline)

    def _from_head(self, request: ResolutionRequest, skips: Sequence[str]) -> StrategyResult:
        if reason := self._git_unavailable():
            return Skip(reason)
        assert self._vcs is not None
        try:
            head = self._vcs.current_ref()
            if head is None:
                return Skip(REASON_GIT_REF_UNAVAILABLE)

            key = RefCache.key(self._vcs.repo_root, request.cache_key, request.mode, "HEAD")
            if cached := self._refs.lookup(key, head):
                return Ok(cached)

            if not self._vcs.is_tracked(str(request.path)):
                return Skip(REASON_FILE_NOT_TRACKED)
            text = self._vcs.read_at_ref(str(request.path), head)
            if text is None:
                return Skip(REASON_FILE_NOT_AT_REF)
        except Exception as e:
            log.debug("head_read_failed", path=str(request.path), exc_info=True)
            return Skip(git_error_reason(str(e)))

        baseline = ResolvedBaseline(
            text=text,
            resolution=BaselineResolution(
                ref_type=RefType.VCS_HEAD,
                availability=Availability.AVAILABLE,
                ref_name="HEAD",
                commit_id=head,
                reason=skips[-1] if skips else None,
            ),
        )
        self._refs.store(key, head, baseline)
        return Ok(baseline)

    # =========================================================================
    # Local strategies
    # =========================================================================

    def _from_snapshot(self, request: ResolutionRequest, skips: Sequence[str]) -> StrategyResult:
        if not self._config.cache_enabled:
            return Skip(REASON_CACHE_DISABLED)
        text = self._snapshots.get(request.cache_key)
        if text is None:
            return Skip(REASON_NO_SNAPSHOT)
        return Ok(
            ResolvedBaseline(
                text=text,
                resolution=BaselineResolution(
                    ref_type=RefType.SNAPSHOT,
                    availability=Availability.AVAILABLE,
                    reason=_snapshot_reason(skips, REASON_USING_SNAPSHOT),
                ),
            )
        )

    def _from_disk(self, request: ResolutionRequest, skips: Sequence[str]) -> StrategyResult:
        read = self._fs.read(request.path)
        if not read.ok:
            return Skip(disk_read_error_reason(read.error or "unreadable"))
        assert read.text is not None

        if self._config.cache_enabled:
            self._snapshots.put(request.cache_key, read.text)
        return Ok(
            ResolvedBaseline(
                text=read.text,
                resolution=BaselineResolution(
                    ref_type=RefType.SNAPSHOT,
                    availability=Availability.AVAILABLE,
                    reason=_snapshot_reason(skips, REASON_FIRST_ANALYSIS),
                ),
                is_empty=read.text == request.current.text,
            )
        )

    def _self_baseline(self, request: ResolutionRequest, skips: Sequence[str]) -> StrategyResult:
        if self._config.cache_enabled:
            self._snapshots.put(request.cache_key, request.current.text)
        return Ok(
            ResolvedBaseline(
                text=request.current.text,
                resolution=BaselineResolution(
                    ref_type=RefType.NONE,
                    availability=Availability.UNAVAILABLE,
                    reason=skips[-1] if skips else None,
                ),
                is_empty=True,
            )
        )


def _snapshot_reason(skips: Sequence[str], default: str) -> str:
    """``fallback_from_<reason>`` when a git candidate was skipped, else ``default``."""
    git_skips = [s for s in skips if s not in (REASON_CACHE_DISABLED, REASON_NO_SNAPSHOT)]
    return fallback_reason(git_skips[-1]) if git_skips else default
