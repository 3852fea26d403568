"""Canonical language definitions.

This module defines the authoritative mapping of:
- File extensions → language names
- Tree-sitter grammar names (for StructuralInventory)
- Test file patterns (for TestDiscovery and the test-validation metric)
- Binary extensions (files rejected before analysis)

Grammar is None when declarations are collected by line heuristics instead
of a tree-sitter parse.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Language:
    """Canonical definition for a language name.

    Attributes:
        name: Unique identifier (lowercase, e.g., "python", "typescript")
        extensions: File extensions including dot (e.g., ".py", ".ts")
        grammar: Tree-sitter grammar name, or None if no grammar is wired up
        test_patterns: fnmatch globs for test file names
    """

    name: str
    extensions: frozenset[str]
    grammar: str | None = None
    test_patterns: tuple[str, ...] = ()


# =============================================================================
# Language Definitions
# =============================================================================

ALL_LANGUAGES: tuple[Language, ...] = (
    Language(
        name="typescript",
        extensions=frozenset({".ts", ".mts", ".cts"}),
        grammar="typescript",
        test_patterns=("*.test.ts", "*.spec.ts"),
    ),
    Language(
        name="tsx",
        extensions=frozenset({".tsx"}),
        grammar="tsx",
        test_patterns=("*.test.tsx", "*.spec.tsx"),
    ),
    Language(
        name="javascript",
        extensions=frozenset({".js", ".jsx", ".mjs", ".cjs"}),
        grammar="javascript",
        test_patterns=("*.test.js", "*.spec.js", "*.test.jsx", "*.spec.jsx"),
    ),
    Language(
        name="python",
        extensions=frozenset({".py", ".pyi"}),
        grammar="python",
        test_patterns=("test_*.py", "*_test.py"),
    ),
    Language(
        name="java",
        extensions=frozenset({".java"}),
        test_patterns=("*Test.java", "*Tests.java", "test_*.java", "*_test.java"),
    ),
    Language(
        name="csharp",
        extensions=frozenset({".cs"}),
        test_patterns=("*Test.cs", "*Tests.cs", "*.test.cs", "*.spec.cs"),
    ),
    Language(
        name="go",
        extensions=frozenset({".go"}),
        test_patterns=("*_test.go",),
    ),
    Language(
        name="rust",
        extensions=frozenset({".rs"}),
        test_patterns=("*_test.rs", "test_*.rs"),
    ),
)

LANGUAGES_BY_NAME: dict[str, Language] = {lang.name: lang for lang in ALL_LANGUAGES}

EXTENSION_TO_NAME: dict[str, str] = {
    ext: lang.name for lang in ALL_LANGUAGES for ext in lang.extensions
}

# Extensions the dependency scanner and test discovery will open
SOURCE_EXTENSIONS: frozenset[str] = frozenset(
    {".js", ".jsx", ".ts", ".tsx", ".py", ".java", ".cs", ".go", ".rs"}
)

BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".exe",
        ".dll",
        ".so",
        ".dylib",
        ".bin",
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".pdf",
        ".zip",
        ".tar",
        ".gz",
    }
)

# Directory names that conventionally hold tests
TEST_DIR_NAMES: tuple[str, ...] = (
    "test",
    "tests",
    "__tests__",
    "spec",
    "specs",
    "test-src",
    "src/test",
    "src/tests",
)

# Generic, cross-language test name globs (in addition to per-language patterns)
_GENERIC_TEST_PATTERNS: tuple[str, ...] = (
    "*.test.*",
    "*.spec.*",
    "test_*.*",
    "*_test.*",
)


def detect_language(path: str | Path) -> str | None:
    """Detect the language name for a file path by suffix, or None if unknown."""
    p = Path(path) if isinstance(path, str) else path
    return EXTENSION_TO_NAME.get(p.suffix.lower())


def get_grammar_name(name: str) -> str | None:
    """Get tree-sitter grammar name for a language.

    Returns None if declarations for the language come from line heuristics.
    """
    return LANGUAGES_BY_NAME[name].grammar if name in LANGUAGES_BY_NAME else None


def has_grammar(name: str) -> bool:
    """Check if name has a usable tree-sitter grammar."""
    return get_grammar_name(name) is not None


def is_source_file(path: str | Path) -> bool:
    p = Path(path) if isinstance(path, str) else path
    return p.suffix.lower() in SOURCE_EXTENSIONS


def is_binary_path(path: str | Path) -> bool:
    p = Path(path) if isinstance(path, str) else path
    return p.suffix.lower() in BINARY_EXTENSIONS


def is_test_file(path: str | Path, extra_patterns: tuple[str, ...] = ()) -> bool:
    """Check if a file name matches a known test file pattern.

    Patterns are ``fnmatch``-style globs matched against the file name.
    Only files with a source extension qualify.

    Args:
        path: File path (string or Path object).
        extra_patterns: Additional globs (e.g. from ``scan.test_patterns``).

    Returns:
        True if the file looks like a test file.
    """
    p = Path(path) if isinstance(path, str) else path
    if not is_source_file(p):
        return False
    name = p.name
    for pattern in (*_GENERIC_TEST_PATTERNS, *extra_patterns):
        if fnmatch(name, pattern):
            return True
    return any(
        fnmatch(name, pattern) for lang in ALL_LANGUAGES for pattern in lang.test_patterns
    )


def looks_like_test_path(path: str | Path) -> bool:
    """Loose check used for scoring: any path segment mentions test/spec."""
    lowered = str(path).lower()
    return "test" in lowered or "spec" in lowered
