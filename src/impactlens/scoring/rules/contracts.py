"""Contracts & Architecture (15%): breaking API changes, layering, schema edits.

A breaking change is an exported declaration on a changed line whose
normalized signature differs from the prior version. Body-only edits of an
exported function do not count; neither do brand-new exports.
"""

from __future__ import annotations

import re

from impactlens.analysis.signatures import extract_class_signature, extract_function_signature
from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import Issue, MetricName, RuleOutcome
from impactlens.scoring.rules.base import MetricDefinition, RuleGroup, rule

_EXPORTED_DECLARATIONS = (
    re.compile(r"\bexport\s+(?:default\s+)?(?:async\s+)?function\s*\*?\s*([A-Za-z_$][\w$]*)"),
    re.compile(r"\bexport\s+(?:default\s+)?(?:abstract\s+)?class\s+([A-Za-z_$][\w$]*)"),
    re.compile(r"\bexport\s+(?:const|let|var)\s+([A-Za-z_$][\w$]*)"),
    re.compile(r"\bmodule\.exports\s*=\s*(?:function|class)\s*([A-Za-z_$][\w$]*)"),
    re.compile(r"\bexports\.([A-Za-z_$][\w$]*)\s*="),
    re.compile(r"\bpublic\s+(?:static\s+)?(?:abstract\s+)?(?:final\s+)?(?:class|interface|enum)\s+(\w+)"),
    re.compile(r"^func\s+(?:\([^)]*\)\s*)?([A-Z]\w*)\s*\("),
    re.compile(r"^\s*pub\s+(?:async\s+)?fn\s+(\w+)"),
)
_PY_EXPORTED_DECLARATIONS = (
    re.compile(r"^(?:async\s+)?def\s+([A-Za-z]\w*)"),
    re.compile(r"^class\s+([A-Za-z]\w*)"),
)

_ARCHITECTURE_VIOLATIONS = (
    (re.compile(r"""from\s+['"]\.\./\.\./\.\."""), "Deep cross-layer import"),
    (re.compile(r"""import.*['"]\.\./\.\./models"""), "Direct model access from UI layer"),
)
_SCHEMA_CHANGE = re.compile(r"migration|ALTER TABLE|DROP TABLE|CREATE TABLE", re.I)


def exported_names(ctx: ScoringContext) -> list[tuple[str, int]]:
    """``(name, line)`` of exported declarations on changed lines, first sighting wins."""
    patterns = _EXPORTED_DECLARATIONS
    if ctx.language == "python":
        patterns = _PY_EXPORTED_DECLARATIONS
    found: dict[str, int] = {}
    for n, text in ctx.changed_pairs:
        for pattern in patterns:
            for match in pattern.finditer(text):
                found.setdefault(match.group(1), n)
    return list(found.items())


def signature_changed(name: str, prior: str, current: str, language: str | None) -> bool:
    """True when ``name`` exists in both texts with different normalized signatures."""
    for extract in (extract_function_signature, extract_class_signature):
        old = extract(name, prior, language)
        new = extract(name, current, language)
        if old is None and new is None:
            continue
        return old is not None and new is not None and old != new
    return False


@rule("contracts.breaking_api")
def breaking_api(ctx: ScoringContext) -> RuleOutcome:
    if ctx.prior is None:
        return RuleOutcome.clean()
    for name, line in exported_names(ctx):
        if signature_changed(name, ctx.prior, ctx.current, ctx.language):
            # Flagged once per edit
            return RuleOutcome(
                delta=-40,
                issues=(Issue(f"Breaking change in public API: {name}", line),),
                tags=(f"breaking={name}",),
            )
    return RuleOutcome.clean()


@rule("contracts.architecture")
def architecture(ctx: ScoringContext) -> RuleOutcome:
    delta = 0
    issues: list[Issue] = []
    for pattern, label in _ARCHITECTURE_VIOLATIONS:
        lines = ctx.lines_matching(pattern)
        if lines:
            delta -= 20
            issues.append(Issue(label, lines[0]))
    return RuleOutcome(delta=delta, issues=tuple(issues))


@rule("contracts.schema_change")
def schema_change(ctx: ScoringContext) -> RuleOutcome:
    lines = ctx.lines_matching(_SCHEMA_CHANGE)
    if not lines:
        return RuleOutcome.clean()
    return RuleOutcome(
        delta=-15,
        issues=(Issue("Database schema change detected", lines[0]),),
        tags=("backward_incompatible",),
    )


METRIC = MetricDefinition(
    name=MetricName.CONTRACTS,
    weight=0.15,
    groups=(RuleGroup("contracts", 1.0, (breaking_api, architecture, schema_change)),),
    suggestions=(
        "Maintain backward-compatible function signatures",
        "Avoid cross-layer imports or hidden coupling",
        "Document breaking changes clearly",
    ),
    clean_summary="No obvious breaking changes",
)
