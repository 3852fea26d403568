"""Semantic diff: which existing symbols changed their contract.

A symbol is changed when it was removed, or when its normalized signature
differs between the before and after texts. Body-only edits and additions
are not changes.
"""

from __future__ import annotations

import structlog

from impactlens.analysis.inventory import StructuralInventory
from impactlens.analysis.models import ChangeSet, DeclarationKind, Inventory, ParseStatus
from impactlens.analysis.signatures import (
    collapse_whitespace,
    extract_class_signature,
    extract_function_signature,
    strip_comments,
)

log = structlog.get_logger(__name__)


def is_cosmetic_change(before: str, after: str, language: str | None = None) -> bool:
    """True when the texts differ only in comments and whitespace."""
    if before == after:
        return True
    return collapse_whitespace(strip_comments(before, language)) == collapse_whitespace(
        strip_comments(after, language)
    )


class SemanticDiffEngine:
    """Computes a ``ChangeSet`` from two versions of one file."""

    def __init__(self, inventory: StructuralInventory | None = None) -> None:
        self._inventory = inventory or StructuralInventory()

    @property
    def inventory(self) -> StructuralInventory:
        return self._inventory

    def diff(self, before: str, after: str, language: str | None) -> ChangeSet:
        if before == after:
            return ChangeSet(parse_status=ParseStatus.NOT_ATTEMPTED)

        before_inv = self._inventory.collect(before, language)
        after_inv = self._inventory.collect(after, language)
        if ParseStatus.FAILED in (before_inv.status, after_inv.status):
            log.debug(
                "semantic_diff_parse_failed",
                language=language,
                before=before_inv.status.value,
                after=after_inv.status.value,
            )
            return ChangeSet(parse_status=ParseStatus.FAILED)

        return self.compare(before_inv, after_inv, before, after, language)

    def compare(
        self,
        before_inv: Inventory,
        after_inv: Inventory,
        before: str,
        after: str,
        language: str | None,
    ) -> ChangeSet:
        """Compare two successful inventories of ``before`` and ``after``."""
        functions = self._changed(
            DeclarationKind.FUNCTION, before_inv, after_inv, before, after, language
        )
        classes = self._changed(DeclarationKind.CLASS, before_inv, after_inv, before, after, language)
        log.debug(
            "semantic_diff_done",
            language=language,
            changed_functions=len(functions),
            changed_classes=len(classes),
        )
        return ChangeSet(
            changed_functions=tuple(functions),
            changed_classes=tuple(classes),
            parse_status=ParseStatus.SUCCESS,
        )

    def _changed(
        self,
        kind: DeclarationKind,
        before_inv: Inventory,
        after_inv: Inventory,
        before: str,
        after: str,
        language: str | None,
    ) -> list[str]:
        after_names = set(after_inv.names(kind))
        changed: list[str] = []
        for name in before_inv.names(kind):
            if name not in after_names:
                changed.append(name)
                continue
            old_sig = self.signature_of(name, kind, before, before_inv, language)
            new_sig = self.signature_of(name, kind, after, after_inv, language)
            # Unknown on either side is not evidence of a change
            if old_sig is None or new_sig is None:
                continue
            if old_sig != new_sig:
                changed.append(name)
        return changed

    @staticmethod
    def signature_of(
        name: str,
        kind: DeclarationKind,
        text: str,
        inventory: Inventory,
        language: str | None,
    ) -> str | None:
        """Normalized signature of ``name`` read from the full text.

        The first textual definition wins; the inventory's declaration is the
        fallback when no header pattern matches.
        """
        if kind is DeclarationKind.FUNCTION:
            sig = extract_function_signature(name, text, language)
        else:
            sig = extract_class_signature(name, text, language)
        if sig is not None:
            return sig
        decl = inventory.first(name, kind)
        if decl is None or not decl.normalized_signature:
            return None
        return decl.normalized_signature
