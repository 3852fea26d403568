"""Code Hygiene (0%, informational): formatting, naming, documentation."""

from __future__ import annotations

import re

from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import Issue, MetricName, RuleOutcome
from impactlens.scoring.rules.base import MetricDefinition, RuleGroup, rule

_TRAILING_WS = re.compile(r"[\t ]+$")
_LEADING_WS = re.compile(r"^\s*")
_EXPORTED_CLASS = re.compile(r"(?:export|public)\s+(?:default\s+)?(?:abstract\s+)?class\s+(\w+)")
_EXPORTED_FUNCTION = re.compile(r"(?:export|public)\s+(?:default\s+)?(?:async\s+)?function\s+(\w+)")
_DOC_COMMENT = re.compile(r'/\*|//|"""')
_PY_TOP_LEVEL_DEF = re.compile(r"^(?:async\s+)?def\s+([A-Za-z]\w*)")
_PY_DOCSTRING = re.compile(r"""^\s*[rbuRBU]?(?:\"\"\"|''')""")


@rule("hygiene.formatting")
def formatting(ctx: ScoringContext) -> RuleOutcome:
    pairs = ctx.changed_pairs
    delta = 0
    issues: list[Issue] = []
    tags: list[str] = []

    tabbed = [n for n, text in pairs if "\t" in text]
    if tabbed:
        delta -= 10
        issues.append(Issue("Tabs detected (use spaces)", tabbed[0]))
        tags.append("tabs")

    trailing = [n for n, text in pairs if _TRAILING_WS.search(text)]
    if trailing:
        delta -= 5
        issues.append(Issue("Trailing whitespace", trailing[0]))
        tags.append("trailing-whitespace")

    indents = [
        len(_LEADING_WS.match(text).group(0))  # type: ignore[union-attr]
        for _, text in pairs
        if text.strip()
    ]
    if len(indents) > 1 and len(set(indents)) > 2:
        delta -= 5
        issues.append(Issue("Inconsistent indentation", ctx.first_changed_line))
        tags.append("indentation")

    return RuleOutcome(delta=delta, issues=tuple(issues), tags=tuple(tags))


@rule("hygiene.naming")
def naming(ctx: ScoringContext) -> RuleOutcome:
    for n, text in ctx.changed_pairs:
        cls = _EXPORTED_CLASS.search(text)
        if cls and cls.group(1)[:1].islower():
            return RuleOutcome(
                delta=-5,
                issues=(Issue(f"Potential naming convention issue: class {cls.group(1)}", n),),
                tags=("public-api-naming",),
            )
        fn = _EXPORTED_FUNCTION.search(text)
        if fn and "_" in fn.group(1).strip("_"):
            return RuleOutcome(
                delta=-5,
                issues=(Issue(f"Potential naming convention issue: function {fn.group(1)}", n),),
                tags=("public-api-naming",),
            )
    return RuleOutcome.clean()


@rule("hygiene.documentation")
def documentation(ctx: ScoringContext) -> RuleOutcome:
    code = ctx.changed_code
    for match in _EXPORTED_FUNCTION.finditer(code):
        before = code[max(0, match.start() - 200) : match.start()]
        if not _DOC_COMMENT.search(before):
            return _undocumented(ctx, match.group(1))

    if ctx.language == "python":
        lines = ctx.lines
        for n, text in ctx.changed_pairs:
            match = _PY_TOP_LEVEL_DEF.match(text)
            if match is None or match.group(1).startswith("_"):
                continue
            # Signature may wrap; the body starts after the line ending in ":"
            rest = lines[n - 1 :]
            end = next((i for i, line in enumerate(rest) if line.rstrip().endswith(":")), None)
            if end is None:
                continue
            body = next((line for line in rest[end + 1 :] if line.strip()), "")
            if not _PY_DOCSTRING.match(body):
                return _undocumented(ctx, match.group(1))
    return RuleOutcome.clean()


def _undocumented(ctx: ScoringContext, name: str) -> RuleOutcome:
    lines = ctx.lines_matching(re.compile(rf"\b(?:function|def)\s+{re.escape(name)}\b"))
    return RuleOutcome(
        delta=-10,
        issues=(Issue(f"Missing documentation for {name}", lines[0] if lines else None),),
        tags=(f"undocumented={name}",),
    )


METRIC = MetricDefinition(
    name=MetricName.CODE_HYGIENE,
    weight=0.0,
    groups=(RuleGroup("hygiene", 1.0, (formatting, naming, documentation)),),
    suggestions=(
        "Run code formatter (Prettier, Black, etc.)",
        "Add docstrings for new functions",
        "Use clear commit messages following team conventions",
    ),
    clean_summary="All good",
)
