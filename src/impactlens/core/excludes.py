"""Directory names that dependency and test scans never descend into.

Tier 0 (HARDCODED_DIRS): VCS internals and our own data. Always excluded.

Tier 1 (DEFAULT_PRUNABLE_DIRS): dependencies, caches and build outputs.
    Extended per project through ``scan.extra_excluded_dirs``.

Any directory whose name starts with "." is also skipped (see ``is_excluded_dir``).
"""

from __future__ import annotations

from collections.abc import Iterable

# =============================================================================
# Tier 0: HARDCODED - Never traverse
# =============================================================================

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        # impactlens data
        ".impactlens",
    )
)

# =============================================================================
# Tier 1: DEFAULT_PRUNABLE - Excluded by default
# =============================================================================

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # -------------------------------------------------------------------------
        # JavaScript/Node.js ecosystem
        # -------------------------------------------------------------------------
        "node_modules",
        "coverage",
        ".nyc_output",
        ".next",
        ".nuxt",
        # -------------------------------------------------------------------------
        # Python ecosystem
        # -------------------------------------------------------------------------
        "__pycache__",
        "venv",
        ".venv",
        ".tox",
        # -------------------------------------------------------------------------
        # Build outputs
        # -------------------------------------------------------------------------
        "dist",
        "build",
        "out",
        "target",  # Cargo / Maven
        "bin",  # .NET
        "obj",  # .NET intermediate
        # -------------------------------------------------------------------------
        # Vendored dependencies and editor state
        # -------------------------------------------------------------------------
        "vendor",
        ".vscode",
        ".idea",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def is_excluded_dir(dirname: str, extra: Iterable[str] = ()) -> bool:
    """Return True if a scan should not descend into ``dirname``."""
    if dirname.startswith("."):
        return True
    return dirname in PRUNABLE_DIRS or dirname in frozenset(extra)
