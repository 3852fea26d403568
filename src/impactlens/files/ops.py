"""Filesystem collaborator.

Pure filesystem I/O with explicit failures: nothing here raises for a
missing or unreadable path. Reads return a ``FileRead`` carrying either the
text or the error message; listings of unreadable directories are empty.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import structlog

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FileRead:
    """Outcome of reading one file."""

    text: str | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.text is not None


@dataclass(frozen=True, slots=True)
class DirEntry:
    """A single directory listing entry."""

    name: str
    path: Path
    is_dir: bool


class Filesystem(Protocol):
    """What the engine needs from a filesystem."""

    def read(self, path: Path) -> FileRead: ...

    def exists(self, path: Path) -> bool: ...

    def size(self, path: Path) -> int | None: ...

    def list_dir(self, path: Path) -> list[DirEntry]: ...


class LocalFilesystem:
    """``Filesystem`` over the local disk, decoding text as UTF-8."""

    def read(self, path: Path) -> FileRead:
        try:
            return FileRead(text=path.read_text(encoding="utf-8", errors="replace"))
        except OSError as e:
            return FileRead(text=None, error=e.strerror or str(e))

    def exists(self, path: Path) -> bool:
        return path.exists()

    def size(self, path: Path) -> int | None:
        try:
            return path.stat().st_size
        except OSError:
            return None

    def list_dir(self, path: Path) -> list[DirEntry]:
        entries: list[DirEntry] = []
        try:
            with os.scandir(path) as it:
                for entry in it:
                    try:
                        is_dir = entry.is_dir(follow_symlinks=False)
                    except OSError:
                        continue
                    entries.append(DirEntry(name=entry.name, path=Path(entry.path), is_dir=is_dir))
        except OSError as e:
            log.debug("list_dir_failed", path=str(path), error=str(e))
            return []
        entries.sort(key=lambda e: e.name)
        return entries
