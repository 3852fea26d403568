"""Session-lifetime caches owned by one engine instance.

Eviction policy: entries live until the owning engine is discarded or the
caller clears them (``discard``/``clear``). Keys are per file, so concurrent
analyses of different files never contend on an entry.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from impactlens.baseline.models import ResolvedBaseline


class SnapshotCache:
    """Last text seen as "saved", per file path."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, path: str) -> str | None:
        with self._lock:
            return self._entries.get(path)

    def put(self, path: str, text: str) -> None:
        with self._lock:
            self._entries[path] = text

    def discard(self, path: str) -> None:
        with self._lock:
            self._entries.pop(path, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


RefCacheKey = tuple[str, str, str, str]  # (repo_root, file_path, mode, target_ref)


@dataclass(frozen=True, slots=True)
class RefCacheEntry:
    head_id: str
    baseline: ResolvedBaseline


class RefCache:
    """Git-derived baselines keyed by ``(repo_root, file_path, mode, target_ref)``.

    An entry is only valid while HEAD still points at ``head_id``.
    """

    def __init__(self) -> None:
        self._entries: dict[RefCacheKey, RefCacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(repo_root: Path | None, file_path: str, mode: str, target_ref: str) -> RefCacheKey:
        return (str(repo_root or ""), file_path, mode, target_ref)

    def lookup(self, key: RefCacheKey, head_id: str | None) -> ResolvedBaseline | None:
        """Return the cached baseline if HEAD has not moved, else evict it."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if head_id is None or entry.head_id != head_id:
                del self._entries[key]
                return None
            return entry.baseline

    def store(self, key: RefCacheKey, head_id: str, baseline: ResolvedBaseline) -> None:
        with self._lock:
            self._entries[key] = RefCacheEntry(head_id=head_id, baseline=baseline)

    def discard_path(self, file_path: str) -> None:
        with self._lock:
            for key in [k for k in self._entries if k[1] == file_path]:
                del self._entries[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
