"""Downstream file discovery.

A conservative textual heuristic, not a reference graph: a candidate file is
downstream when it imports the source file by name or relative path, or when
it mentions a changed symbol without defining that symbol itself. False
positives on common identifiers are accepted.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

import structlog

from impactlens.analysis.models import ChangeSet, ScanResult
from impactlens.analysis.walk import DirectoryWalker, matches_any
from impactlens.config.models import ScanConfig
from impactlens.files.ops import Filesystem

log = structlog.get_logger(__name__)


def import_patterns(source_path: Path) -> list[re.Pattern[str]]:
    """Patterns matching an import/require of ``source_path`` by sibling files.

    Matches on the base name (``./pricing``) and on the file name with its
    extension (``./pricing.ts``), for JS/TS ``import``/``require``/``from``
    and for Python ``from x import``/``import x``.
    """
    stem = re.escape(source_path.stem)
    name = re.escape(source_path.name)
    patterns: list[re.Pattern[str]] = []
    for target in (stem, name):
        quoted = rf"""['"](?:\.{{1,2}}/)*(?:[\w@.-]+/)*{target}['"]"""
        patterns.extend(
            (
                re.compile(rf"\bimport\b[^;\n]*{quoted}", re.I),
                re.compile(rf"\brequire\(\s*{quoted}\s*\)", re.I),
                re.compile(rf"\bfrom\s+{quoted}", re.I),
            )
        )
    patterns.extend(
        (
            re.compile(rf"^\s*from\s+\.*(?:[\w]+\.)*{stem}\s+import\b", re.M),
            re.compile(rf"^\s*import\s+(?:[\w]+\.)*{stem}\b", re.M),
        )
    )
    return patterns


def imports_source(content: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    return any(p.search(content) for p in patterns)


def definition_patterns(symbol: str) -> list[re.Pattern[str]]:
    """Patterns matching a definition of ``symbol`` in a candidate file."""
    s = re.escape(symbol)
    return [
        re.compile(rf"\bfunction\s*\*?\s*{s}\s*[<(]"),
        re.compile(rf"\bclass\s+{s}\b"),
        re.compile(rf"\b(?:const|let|var)\s+{s}\s*(?::[^=]*)?="),
        re.compile(rf"\bdef\s+{s}\s*\("),
        re.compile(rf"\bfunc\s+(?:\([^)]*\)\s*)?{s}\s*\("),
        re.compile(rf"\bfn\s+{s}\s*[<(]"),
        re.compile(rf"\b(?:public|private|protected|internal)\s+[^\n;=]*\b{s}\s*\("),
    ]


def references_symbol(content: str, symbol: str) -> bool:
    """True when ``content`` mentions ``symbol`` other than by defining it."""
    if not re.search(rf"(?<![\w$]){re.escape(symbol)}(?![\w$])", content):
        return False
    return not any(p.search(content) for p in definition_patterns(symbol))


class DependencyScanner:
    """Finds files in the source file's directory tree affected by a change."""

    def __init__(self, fs: Filesystem, config: ScanConfig | None = None) -> None:
        self._fs = fs
        self._config = config or ScanConfig()

    def _is_candidate(self, path: Path) -> bool:
        if not matches_any(path.name, self._config.source_patterns):
            return False
        size = self._fs.size(path)
        return size is None or size <= self._config.max_file_size_bytes

    def scan(self, source_path: Path, changes: ChangeSet) -> ScanResult:
        """Absolute, de-duplicated paths of downstream files, in walk order."""
        source_path = source_path.resolve()
        if changes.is_empty:
            return ScanResult()

        walker = DirectoryWalker(
            fs=self._fs,
            extra_excludes=tuple(self._config.extra_excluded_dirs),
            timeout_sec=self._config.timeout_sec,
        )
        candidates = walker.walk(
            [source_path.parent],
            lambda p: p.resolve() != source_path and self._is_candidate(p),
        )

        patterns = import_patterns(source_path)
        downstream: list[str] = []
        skipped: list[str] = []
        for candidate in candidates.files:
            read = self._fs.read(Path(candidate))
            if not read.ok:
                log.debug("downstream_candidate_unreadable", path=candidate, error=read.error)
                skipped.append(candidate)
                continue
            assert read.text is not None
            if imports_source(read.text, patterns) or any(
                references_symbol(read.text, symbol) for symbol in changes.symbols
            ):
                downstream.append(str(Path(candidate).resolve()))

        log.debug(
            "downstream_scan_done",
            source=str(source_path),
            candidates=len(candidates.files),
            downstream=len(downstream),
            timed_out=candidates.timed_out,
        )
        return ScanResult(
            files=tuple(dict.fromkeys(downstream)),
            timed_out=candidates.timed_out,
            skipped=tuple(skipped),
        )
