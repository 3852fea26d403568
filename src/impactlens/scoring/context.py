"""Inputs shared by every scoring rule."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import cached_property

from impactlens.analysis.models import LineDelta
from impactlens.scoring.models import Diagnostic


@dataclass(frozen=True)
class ScoringContext:
    """One edit, as the rules see it.

    Rules look only at the changed lines (added + modified, 1-based, indexing
    ``current``) plus small lookback windows into ``current``; ``prior`` is
    consulted for before/after comparisons only.
    """

    path: str
    current: str
    delta: LineDelta = field(default_factory=LineDelta)
    prior: str | None = None
    diagnostics: tuple[Diagnostic, ...] = ()
    language: str | None = None
    nearby_tests: tuple[str, ...] = ()
    is_test_file: bool = False

    @cached_property
    def lines(self) -> list[str]:
        return self.current.split("\n")

    @cached_property
    def changed_lines(self) -> tuple[int, ...]:
        return self.delta.changed_lines

    @cached_property
    def changed_pairs(self) -> list[tuple[int, str]]:
        """``(line_number, text)`` for every changed line present in ``current``."""
        lines = self.lines
        return [(n, lines[n - 1]) for n in self.changed_lines if 0 < n <= len(lines)]

    @cached_property
    def changed_code(self) -> str:
        return "\n".join(text for _, text in self.changed_pairs)

    @cached_property
    def relevant_diagnostics(self) -> tuple[Diagnostic, ...]:
        """Diagnostics whose range covers a changed line."""
        changed = self.changed_lines
        return tuple(d for d in self.diagnostics if d.touches(changed))

    @property
    def first_changed_line(self) -> int | None:
        return self.changed_lines[0] if self.changed_lines else None

    def lines_matching(self, pattern: re.Pattern[str]) -> list[int]:
        """Changed line numbers whose text matches ``pattern``."""
        return [n for n, text in self.changed_pairs if pattern.search(text)]

    def window_before(self, line: int, size: int = 5) -> str:
        """Up to ``size`` lines of ``current`` preceding ``line``."""
        start = max(0, line - 1 - size)
        return "\n".join(self.lines[start : line - 1])
