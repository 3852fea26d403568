"""Line-level deltas between a baseline and the current text.

Built on libgit2's patch machinery. Within a hunk, a run of removed lines
followed by a run of added lines is paired up line by line as *modified*;
whatever is left over on either side stays added or removed.
"""

from __future__ import annotations

from collections.abc import Iterable

import pygit2
import structlog

from impactlens.analysis.models import LineDelta

log = structlog.get_logger(__name__)


class _Collector:
    def __init__(self) -> None:
        self.added: set[int] = set()
        self.removed: set[int] = set()
        self.modified: set[int] = set()
        self._minus: list[int] = []
        self._plus: list[int] = []

    def flush(self) -> None:
        paired = min(len(self._minus), len(self._plus))
        self.modified.update(self._plus[:paired])
        self.removed.update(self._minus[paired:])
        self.added.update(self._plus[paired:])
        self._minus = []
        self._plus = []

    def feed(self, origin: str, old_lineno: int, new_lineno: int) -> None:
        if origin == "-":
            if self._plus:
                self.flush()
            self._minus.append(old_lineno)
        elif origin == "+":
            self._plus.append(new_lineno)
        elif origin == " ":
            self.flush()

    def delta(self) -> LineDelta:
        self.flush()
        return LineDelta(
            added=tuple(sorted(self.added)),
            removed=tuple(sorted(self.removed)),
            modified=tuple(sorted(self.modified)),
        )


def _collect(patches: Iterable[pygit2.Patch]) -> LineDelta:
    collector = _Collector()
    for patch in patches:
        for hunk in patch.hunks:
            for line in hunk.lines:
                collector.feed(line.origin, line.old_lineno, line.new_lineno)
            collector.flush()
    return collector.delta()


def compute_line_delta(before: str, after: str) -> LineDelta:
    """Added/removed/modified lines going from ``before`` to ``after``."""
    if before == after:
        return LineDelta()
    patch = pygit2.Patch.create_from(
        before.encode("utf-8"),
        after.encode("utf-8"),
        old_as_path="before",
        new_as_path="after",
        context_lines=0,
    )
    return _collect([patch])


def line_delta_from_patch_text(patch_text: str) -> LineDelta:
    """Line delta from unified-diff text (e.g. ``git diff`` output for one file).

    Unparseable text yields an empty delta.
    """
    if not patch_text.strip():
        return LineDelta()
    try:
        diff = pygit2.Diff.parse_diff(patch_text)
    except (pygit2.GitError, ValueError):
        log.debug("patch_parse_failed", exc_info=True)
        return LineDelta()
    return _collect(patch for patch in diff if patch is not None)


def changed_text(text: str, delta: LineDelta) -> str:
    """Lines of ``text`` at the delta's changed (added + modified) line numbers."""
    lines = text.splitlines()
    return "\n".join(lines[n - 1] for n in delta.changed_lines if 0 < n <= len(lines))
