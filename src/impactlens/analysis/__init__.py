"""Structural analysis: inventory, semantic diff, line deltas, dependency and test scans."""

from impactlens.analysis.dependencies import DependencyScanner
from impactlens.analysis.discovery import TestDiscovery
from impactlens.analysis.inventory import StructuralInventory
from impactlens.analysis.lines import changed_text, compute_line_delta, line_delta_from_patch_text
from impactlens.analysis.models import (
    ChangeSet,
    Declaration,
    DeclarationKind,
    Inventory,
    LineDelta,
    ParseStatus,
    ScanResult,
)
from impactlens.analysis.semantic import SemanticDiffEngine, is_cosmetic_change

__all__ = [
    "ChangeSet",
    "Declaration",
    "DeclarationKind",
    "DependencyScanner",
    "Inventory",
    "LineDelta",
    "ParseStatus",
    "ScanResult",
    "SemanticDiffEngine",
    "StructuralInventory",
    "TestDiscovery",
    "changed_text",
    "compute_line_delta",
    "is_cosmetic_change",
    "line_delta_from_patch_text",
]
