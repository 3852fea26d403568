"""Repository access layer - owns pygit2.Repository and exposes computed facts."""

from __future__ import annotations

import contextlib
from pathlib import Path

import pygit2

from impactlens.git.errors import (
    GitError,
    NotARepositoryError,
    PathNotInTreeError,
    RefNotFoundError,
)


class RepoAccess:
    """Owns pygit2.Repository and provides normalized access to repo state."""

    def __init__(self, repo_path: Path | str) -> None:
        self._path = Path(repo_path)
        try:
            self._repo = pygit2.Repository(str(self._path))
        except pygit2.GitError as e:
            raise NotARepositoryError(str(self._path)) from e

    @classmethod
    def discover(cls, start: Path | str) -> RepoAccess:
        """Open the repository containing ``start`` (a file or directory)."""
        start_path = Path(start)
        if start_path.is_file():
            start_path = start_path.parent
        found = pygit2.discover_repository(str(start_path))
        if found is None:
            raise NotARepositoryError(str(start_path))
        return cls(found)

    @property
    def repo(self) -> pygit2.Repository:
        return self._repo

    @property
    def path(self) -> Path:
        return Path(self._repo.workdir) if self._repo.workdir else self._path

    # =========================================================================
    # Repository State Facts
    # =========================================================================

    @property
    def is_unborn(self) -> bool:
        return self._repo.head_is_unborn

    def head_commit(self) -> pygit2.Commit | None:
        if self.is_unborn:
            return None
        return self._repo.head.peel(pygit2.Commit)

    def must_head_commit(self) -> pygit2.Commit:
        commit = self.head_commit()
        if commit is None:
            raise GitError("HEAD has no commits (unborn branch)")
        return commit

    # =========================================================================
    # Resolution Helpers
    # =========================================================================

    def resolve_ref_oid(self, ref: str) -> pygit2.Oid:
        try:
            obj, _ = self._repo.resolve_refish(ref)
            return obj.id
        except (pygit2.GitError, KeyError, ValueError) as e:
            raise RefNotFoundError(ref) from e

    def resolve_commit(self, ref: str) -> pygit2.Commit:
        obj: pygit2.Object | None = self._repo.get(self.resolve_ref_oid(ref))
        if isinstance(obj, pygit2.Tag):
            obj = obj.peel(pygit2.Commit)  # type: ignore[assignment]
        if not isinstance(obj, pygit2.Commit):
            raise RefNotFoundError(f"{ref} is not a commit")
        return obj

    # =========================================================================
    # Normalization Helpers
    # =========================================================================

    def normalize_path(self, path: str | Path) -> str:
        """Repo-relative POSIX path as stored in git trees and the index."""
        p = Path(path)
        if p.is_absolute():
            with contextlib.suppress(ValueError):
                p = p.resolve().relative_to(self.path.resolve())
        return p.as_posix()

    # =========================================================================
    # Tree / Index Facts
    # =========================================================================

    def is_in_index(self, path: str | Path) -> bool:
        rel = self.normalize_path(path)
        index = self._repo.index
        index.read()
        return rel in index

    def blob_at(self, commit: pygit2.Commit, path: str | Path) -> bytes:
        """Raw blob content of ``path`` in ``commit``'s tree."""
        rel = self.normalize_path(path)
        try:
            tree_entry = commit.tree[rel]
        except KeyError as e:
            raise PathNotInTreeError(rel, str(commit.id)) from e

        blob = self._repo[tree_entry.id]
        if not isinstance(blob, pygit2.Blob):
            raise PathNotInTreeError(rel, str(commit.id))

        data = blob.data
        if isinstance(data, memoryview):
            data = bytes(data)
        return data

    # =========================================================================
    # Merge Base
    # =========================================================================

    def merge_base(self, oid1: pygit2.Oid, oid2: pygit2.Oid) -> pygit2.Oid | None:
        """Find merge base of two commits. Returns None if unrelated."""
        try:
            return self._repo.merge_base(oid1, oid2)
        except pygit2.GitError:
            return None
