"""Fixtures for scoring tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from impactlens.analysis.models import LineDelta
from impactlens.scoring.context import ScoringContext

MakeContext = Callable[..., ScoringContext]


@pytest.fixture
def make_ctx() -> MakeContext:
    """Build a ScoringContext; by default every line of ``current`` counts as added."""

    def _make(
        current: str,
        changed: tuple[int, ...] | None = None,
        *,
        language: str | None = "typescript",
        path: str = "src/a.ts",
        **kwargs: Any,
    ) -> ScoringContext:
        if changed is None:
            changed = tuple(range(1, len(current.split("\n")) + 1))
        return ScoringContext(
            path=path,
            current=current,
            delta=LineDelta(added=changed),
            language=language,
            **kwargs,
        )

    return _make
