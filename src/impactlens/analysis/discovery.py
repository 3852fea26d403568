"""Test discovery for a source file.

Candidates are test files (by name pattern) under the project root and the
source file's own directory. A candidate is kept when any of these hold:

1. its cleaned name contains the source base name (``pricing.test.ts``,
   ``test_pricing.py``, ``pricing_test.go``)
2. it imports the source file
3. it references one of the changed symbols
4. it sits under a ``__tests__`` directory and mentions the source base name

Results are ordered by proximity: the source directory first, then
conventional test directories, then everything else.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

import structlog

from impactlens.analysis.dependencies import import_patterns, imports_source
from impactlens.analysis.walk import DirectoryWalker
from impactlens.config.models import ScanConfig
from impactlens.core.languages import TEST_DIR_NAMES, is_test_file
from impactlens.files.ops import Filesystem

log = structlog.get_logger(__name__)

_TEST_AFFIXES = re.compile(r"(?:\.(?:test|spec)$)|(?:^test_)|(?:_test$)|(?:Tests?$)")


def clean_test_stem(file_name: str) -> str:
    """``pricing.test.ts`` -> ``pricing``; ``test_pricing.py`` -> ``pricing``."""
    return _TEST_AFFIXES.sub("", Path(file_name).stem)


def is_related_test(test_name: str, source_stem: str) -> bool:
    """Name-based relation: the cleaned test name contains the source base name."""
    if not source_stem:
        return False
    return source_stem.lower() in clean_test_stem(test_name).lower()


def _proximity(path: Path, source_dir: Path, project_root: Path) -> int:
    if path.parent == source_dir:
        return 0
    try:
        rel = path.relative_to(project_root).as_posix()
    except ValueError:
        return 2
    for test_dir in TEST_DIR_NAMES:
        if rel.startswith(f"{test_dir}/") or f"/{test_dir}/" in f"/{rel}":
            return 1
    return 2


class TestDiscovery:
    """Locates test files related to a source file."""

    __test__ = False  # not a pytest class

    def __init__(self, fs: Filesystem, config: ScanConfig | None = None) -> None:
        self._fs = fs
        self._config = config or ScanConfig()

    def _is_test(self, path: Path) -> bool:
        if not is_test_file(path, tuple(self._config.test_patterns)):
            return False
        size = self._fs.size(path)
        return size is None or size <= self._config.max_file_size_bytes

    def nearby(self, source_path: Path) -> list[Path]:
        """Name-related test files under the source file's own directory.

        Cheaper than ``find``: no file is opened. Used as the coverage signal
        for scoring.
        """
        source_path = source_path.resolve()
        walker = DirectoryWalker(
            fs=self._fs,
            extra_excludes=tuple(self._config.extra_excluded_dirs),
            timeout_sec=self._config.timeout_sec,
        )
        result = walker.walk(
            [source_path.parent],
            lambda p: p.resolve() != source_path
            and self._is_test(p)
            and is_related_test(p.name, source_path.stem),
        )
        return [Path(p).resolve() for p in result.files]

    def find(
        self,
        source_path: Path,
        project_root: Path | None = None,
        symbols: Iterable[str] = (),
    ) -> list[Path]:
        """Test files for ``source_path``, absolute, de-duplicated."""
        source_path = source_path.resolve()
        source_dir = source_path.parent
        root = (project_root or source_dir).resolve()
        symbols = tuple(symbols)

        walker = DirectoryWalker(
            fs=self._fs,
            extra_excludes=tuple(self._config.extra_excluded_dirs),
            timeout_sec=self._config.timeout_sec,
        )
        roots = [source_dir] if source_dir == root else [source_dir, root]
        candidates = walker.walk(roots, lambda p: p.resolve() != source_path and self._is_test(p))

        patterns = import_patterns(source_path)
        stem = source_path.stem
        found: list[Path] = []
        for candidate in candidates.files:
            path = Path(candidate).resolve()
            if is_related_test(path.name, stem):
                found.append(path)
                continue
            read = self._fs.read(path)
            if not read.ok:
                log.debug("test_candidate_unreadable", path=candidate, error=read.error)
                continue
            assert read.text is not None
            content = read.text
            if imports_source(content, patterns):
                found.append(path)
            elif any(re.search(rf"(?<![\w$]){re.escape(s)}(?![\w$])", content) for s in symbols):
                found.append(path)
            elif "__tests__" in path.parts and (stem in content or source_path.name in content):
                found.append(path)

        unique = list(dict.fromkeys(found))
        unique.sort(key=lambda p: (_proximity(p, source_dir, root), str(p)))
        log.debug(
            "test_discovery_done",
            source=str(source_path),
            candidates=len(candidates.files),
            tests=len(unique),
            timed_out=candidates.timed_out,
        )
        return unique
