"""Data models for structural inventory and semantic diff.

All models are frozen dataclasses; nothing here touches the filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DeclarationKind(Enum):
    FUNCTION = "function"
    CLASS = "class"


class ParseStatus(Enum):
    """Whether declarations could be collected for a text.

    ``FAILED`` means "couldn't tell": the declaration list is empty and must
    not be read as "no declarations".
    """

    SUCCESS = "success"
    FAILED = "failed"
    NOT_ATTEMPTED = "not_attempted"


@dataclass(frozen=True, slots=True)
class Declaration:
    """A named, located declaration.

    ``normalized_signature`` is parameter-name insensitive: it keeps parameter
    count, types, optional/default/rest markers and the return type.
    ``display_signature`` keeps the names, for humans.
    """

    name: str
    kind: DeclarationKind
    line: int
    normalized_signature: str
    display_signature: str = ""


@dataclass(frozen=True, slots=True)
class Inventory:
    """Declarations collected from one text."""

    declarations: tuple[Declaration, ...]
    status: ParseStatus
    language: str | None = None
    method: str = "none"  # "tree-sitter" | "heuristic" | "none"
    error: str | None = None

    def names(self, kind: DeclarationKind) -> list[str]:
        """Distinct names of ``kind`` in source order."""
        seen: dict[str, None] = {}
        for decl in self.declarations:
            if decl.kind is kind:
                seen.setdefault(decl.name, None)
        return list(seen)

    def first(self, name: str, kind: DeclarationKind) -> Declaration | None:
        for decl in self.declarations:
            if decl.kind is kind and decl.name == name:
                return decl
        return None

    @classmethod
    def failed(cls, language: str | None, error: str) -> Inventory:
        return cls(declarations=(), status=ParseStatus.FAILED, language=language, error=error)


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Symbols removed or whose normalized signature differs.

    Additions are never included. Order follows the before text.
    """

    changed_functions: tuple[str, ...] = ()
    changed_classes: tuple[str, ...] = ()
    parse_status: ParseStatus = ParseStatus.NOT_ATTEMPTED

    @property
    def is_empty(self) -> bool:
        return not self.changed_functions and not self.changed_classes

    @property
    def symbols(self) -> tuple[str, ...]:
        """All changed names, functions first, de-duplicated."""
        return tuple(dict.fromkeys((*self.changed_functions, *self.changed_classes)))


@dataclass(frozen=True, slots=True)
class LineDelta:
    """1-based line numbers changed between baseline and current text.

    ``added`` and ``modified`` index the current text, ``removed`` the baseline.
    """

    added: tuple[int, ...] = ()
    removed: tuple[int, ...] = ()
    modified: tuple[int, ...] = ()

    @property
    def changed_lines(self) -> tuple[int, ...]:
        """Lines of the current text touched by the edit (added + modified)."""
        return tuple(sorted({*self.added, *self.modified}))

    @property
    def size(self) -> int:
        return len(self.added) + len(self.removed) + len(self.modified)

    @property
    def is_empty(self) -> bool:
        return self.size == 0


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Files found by a directory scan, plus whether the scan finished."""

    files: tuple[str, ...] = ()
    timed_out: bool = False
    skipped: tuple[str, ...] = field(default=())
