"""Version-control reads consumed by the baseline resolver.

``VcsClient`` is the narrow interface the engine depends on. ``GitVcsClient``
implements it over pygit2. Every method returns ``None``/``False`` on failure
instead of raising; a single failed read simply moves the baseline chain to
its next candidate.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import pygit2
import structlog

from impactlens.git._internal.access import RepoAccess
from impactlens.git.errors import GitError, NotARepositoryError

log = structlog.get_logger(__name__)


@runtime_checkable
class VcsClient(Protocol):
    """Read-only view of a version-controlled working tree."""

    @property
    def repo_root(self) -> Path | None:
        """Working tree root, used to key the resolved-ref cache."""
        ...

    def is_tracked(self, path: str) -> bool: ...

    def current_ref(self) -> str | None:
        """Commit id HEAD points to, or None (unborn HEAD, no repo)."""
        ...

    def merge_base(self, ref: str) -> str | None:
        """Commit id of the merge-base of HEAD and ``ref``."""
        ...

    def read_at_ref(self, path: str, ref: str) -> str | None:
        """File text at ``ref``, or None if the path is absent there."""
        ...


def decode_blob(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


class GitVcsClient:
    """pygit2-backed ``VcsClient``.

    Usage::

        client = GitVcsClient.for_path(Path("src/pricing.ts"))
        head = client.current_ref()
        before = client.read_at_ref("src/pricing.ts", head)
    """

    def __init__(self, access: RepoAccess) -> None:
        self._access = access

    @classmethod
    def for_path(cls, path: Path | str) -> GitVcsClient | None:
        """Client for the repository containing ``path``, or None outside a repo."""
        try:
            return cls(RepoAccess.discover(path))
        except NotARepositoryError:
            log.debug("git_repo_not_found", path=str(path))
            return None

    @property
    def repo_root(self) -> Path | None:
        return self._access.path

    def is_tracked(self, path: str) -> bool:
        try:
            if self._access.is_in_index(path):
                return True
            head = self._access.head_commit()
            if head is None:
                return False
            self._access.blob_at(head, path)
            return True
        except (GitError, pygit2.GitError, OSError):
            return False

    def current_ref(self) -> str | None:
        try:
            head = self._access.head_commit()
        except pygit2.GitError as e:
            log.debug("git_head_unreadable", error=str(e))
            return None
        return str(head.id) if head is not None else None

    def merge_base(self, ref: str) -> str | None:
        try:
            head = self._access.must_head_commit()
            target = self._access.resolve_commit(ref)
        except (GitError, pygit2.GitError) as e:
            log.debug("git_merge_base_unresolved", ref=ref, error=str(e))
            return None
        oid = self._access.merge_base(head.id, target.id)
        return str(oid) if oid is not None else None

    def read_at_ref(self, path: str, ref: str) -> str | None:
        try:
            commit = self._access.resolve_commit(ref)
            return decode_blob(self._access.blob_at(commit, path))
        except (GitError, pygit2.GitError) as e:
            log.debug("git_read_at_ref_failed", path=path, ref=ref, error=str(e))
            return None
