"""Baseline ("before" version) resolution."""

from impactlens.baseline.cache import RefCache, SnapshotCache
from impactlens.baseline.models import (
    Availability,
    BaselineResolution,
    Origin,
    RefType,
    ResolvedBaseline,
    SourceVersion,
)
from impactlens.baseline.resolver import BaselineResolver

__all__ = [
    "Availability",
    "BaselineResolution",
    "BaselineResolver",
    "Origin",
    "RefCache",
    "RefType",
    "ResolvedBaseline",
    "SnapshotCache",
    "SourceVersion",
]
