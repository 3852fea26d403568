"""Bounded depth-first directory walk shared by the dependency and test scans."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path

import structlog

from impactlens.analysis.models import ScanResult
from impactlens.core.excludes import is_excluded_dir
from impactlens.files.ops import Filesystem

log = structlog.get_logger(__name__)


def matches_any(name: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch(name, pattern) for pattern in patterns)


@dataclass
class DirectoryWalker:
    """Collects files under a root, skipping excluded directories.

    The walk stops once ``timeout_sec`` has elapsed; files found so far are
    kept and the result is flagged ``timed_out``.
    """

    fs: Filesystem
    extra_excludes: tuple[str, ...] = ()
    timeout_sec: float | None = None
    _deadline: float | None = field(default=None, init=False, repr=False)

    def walk(self, roots: Iterable[Path], accept: Callable[[Path], bool]) -> ScanResult:
        roots = list(roots)
        self._deadline = (
            time.monotonic() + self.timeout_sec if self.timeout_sec is not None else None
        )
        found: dict[str, None] = {}
        seen_dirs: set[str] = set()
        timed_out = False

        for root in roots:
            stack = [root]
            while stack:
                if self._expired():
                    timed_out = True
                    break
                directory = stack.pop()
                key = str(directory)
                if key in seen_dirs:
                    continue
                seen_dirs.add(key)

                subdirs: list[Path] = []
                for entry in self.fs.list_dir(directory):
                    if entry.is_dir:
                        if not is_excluded_dir(entry.name, self.extra_excludes):
                            subdirs.append(entry.path)
                    elif accept(entry.path):
                        found.setdefault(str(entry.path), None)
                # Reverse so the first subdirectory alphabetically is visited first
                stack.extend(reversed(subdirs))
            if timed_out:
                break

        if timed_out:
            log.warning("scan_timed_out", roots=[str(r) for r in roots], found=len(found))
        return ScanResult(files=tuple(found), timed_out=timed_out)

    def _expired(self) -> bool:
        return self._deadline is not None and time.monotonic() > self._deadline
