"""Code Correctness (10%): six weighted sub-metrics over the changed lines.

=========  ======  ==========================================================
syntax     25%     syntax diagnostics, merge-conflict markers, bracket balance
type       20%     type diagnostics, ``any``/untyped params, unguarded access
static     25%     error diagnostics, unreachable code, missing return, eval
complexity 15%     control-flow count, nesting depth, diff size, repetition
style      10%     warning/info diagnostics, mixed naming, magic numbers
guards      5%     risky operations without nearby guards, unhandled async
=========  ======  ==========================================================
"""

from __future__ import annotations

import re
from collections import defaultdict

from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import Issue, MetricName, MetricResult, RuleOutcome, Severity
from impactlens.scoring.rules.base import MetricDefinition, RuleGroup, rule

_TYPED_LANGUAGES = frozenset({"typescript", "tsx"})

# =============================================================================
# Syntax & parse validity
# =============================================================================

_SYNTAX_WORDS = (
    "syntax",
    "parse",
    "unexpected",
    "expected",
    "unclosed",
    "missing",
    "invalid",
    "illegal",
)
_CONFLICT = re.compile(r"(<<<<<<<|>>>>>>>|=======)")
_OPEN = re.compile(r"[(\[{]")
_CLOSE = re.compile(r"[)\]}]")
_FUNCTION_HEAD = re.compile(r"function\s+\w+\s*\(")
_FUNCTION_HEAD_WITH_BRACE = re.compile(r"function\s+\w+\s*\([^)]*\)\s*\{")


@rule("correctness.syntax_diagnostics")
def syntax_diagnostics(ctx: ScoringContext) -> RuleOutcome:
    issues = [
        Issue(f"Syntax error: {d.message}", d.line)
        for d in ctx.relevant_diagnostics
        if d.severity is Severity.ERROR and any(w in d.message.lower() for w in _SYNTAX_WORDS)
    ]
    return RuleOutcome(delta=-40 * len(issues), issues=tuple(issues))


@rule("correctness.conflict_markers")
def conflict_markers(ctx: ScoringContext) -> RuleOutcome:
    lines = ctx.lines_matching(_CONFLICT)
    if not lines:
        return RuleOutcome.clean()
    return RuleOutcome(
        delta=-40,
        issues=tuple(Issue("Merge conflict markers detected", n) for n in lines),
        tags=("conflict_markers",),
    )


@rule("correctness.bracket_balance")
def bracket_balance(ctx: ScoringContext) -> RuleOutcome:
    opened = closed = 0
    suspects: list[Issue] = []
    lines = ctx.lines
    for n, text in ctx.changed_pairs:
        opened += len(_OPEN.findall(text))
        closed += len(_CLOSE.findall(text))
        if _FUNCTION_HEAD.search(text) and not _FUNCTION_HEAD_WITH_BRACE.search(text):
            following = lines[n : min(n + 9, len(lines))]
            if not any("}" in f for f in following) and n - 1 < len(lines) - 5:
                suspects.append(Issue("Function may be missing closing brace", n))
    if abs(opened - closed) <= 2:
        return RuleOutcome.clean()
    issues = suspects or [
        Issue(
            f"Potential unclosed brackets/braces ({opened} open, {closed} close)",
            ctx.first_changed_line,
        )
    ]
    return RuleOutcome(delta=-20, issues=tuple(issues))


# =============================================================================
# Type safety
# =============================================================================

_TYPE_WORDS = (
    "type",
    "typing",
    "incompatible",
    "assignment",
    "property",
    "method",
    "parameter",
    "argument",
)
_EXPLICIT_ANY = re.compile(r":\s*any\b")
_FUNCTION_PARAMS = re.compile(r"function\s+\w+\s*\(([^)]*)\)\s*\{")
_ARROW_PARAMS = re.compile(r"\(([^)]*)\)\s*=>")
_MEMBER_ACCESS = re.compile(r"\.\w+\s*[(\[]|\[")
_NULL_GUARD = re.compile(r"(?:if|assert|check|guard|validate)\s*\(.*?(?:null|undefined)", re.I)


@rule("correctness.type_diagnostics")
def type_diagnostics(ctx: ScoringContext) -> RuleOutcome:
    issues = [
        Issue(f"Type error: {d.message}", d.line)
        for d in ctx.relevant_diagnostics
        if d.severity is Severity.ERROR and any(w in d.message.lower() for w in _TYPE_WORDS)
    ]
    return RuleOutcome(delta=-20 * len(issues), issues=tuple(issues))


@rule("correctness.untyped")
def untyped(ctx: ScoringContext) -> RuleOutcome:
    if ctx.language not in _TYPED_LANGUAGES:
        return RuleOutcome.clean()
    found: list[Issue] = []
    for n, text in ctx.changed_pairs:
        if _EXPLICIT_ANY.search(text):
            found.append(Issue("Explicit any type", n))
            continue
        for pattern, label in (
            (_FUNCTION_PARAMS, "Function without types"),
            (_ARROW_PARAMS, "Arrow function without types"),
        ):
            match = pattern.search(text)
            if match:
                params = match.group(1).strip()
                if params and ":" not in params:
                    found.append(Issue(f"{label}: parameters without types", n))
                break
    if not found:
        return RuleOutcome.clean()
    return RuleOutcome(delta=-min(15, 5 * len(found)), issues=tuple(found[:10]))


@rule("correctness.unguarded_access")
def unguarded_access(ctx: ScoringContext) -> RuleOutcome:
    if _NULL_GUARD.search(ctx.changed_code):
        return RuleOutcome.clean()
    lines = ctx.lines_matching(_MEMBER_ACCESS)
    if not lines:
        return RuleOutcome.clean()
    return RuleOutcome(
        delta=-10,
        issues=tuple(Issue("Potential null/undefined access without checks", n) for n in lines[:3]),
    )


# =============================================================================
# Critical static bugs
# =============================================================================

_UNREACHABLE = (
    re.compile(r"return\s+.*;\s*[\r\n]+[^}]*[^\s;}]"),
    re.compile(r"throw\s+.*;\s*[\r\n]+[^}]*[^\s;}]"),
    re.compile(r"break\s*;\s*[\r\n]+[^}]*[^\s;}]"),
)
_EXIT_STATEMENT = re.compile(r"return\s+|throw\s+|break\s*")
_TYPED_FUNCTION = re.compile(r"function\s+\w+\s*\([^)]*\)\s*:\s*\w+\s*\{|:\s*Promise<\w+>")
_FIRST_BLOCK = re.compile(r"\{[^}]*\}")
_RETURN = re.compile(r"return\s+")
_DYNAMIC_EVAL = (
    (re.compile(r"\beval\s*\("), "eval()"),
    (re.compile(r"\bnew\s+Function\s*\("), "new Function()"),
    (re.compile(r"\bFunction\s*\("), "Function()"),
)


@rule("correctness.error_diagnostics")
def error_diagnostics(ctx: ScoringContext) -> RuleOutcome:
    issues = [
        Issue(f"Critical error: {d.message}", d.line)
        for d in ctx.relevant_diagnostics
        if d.severity is Severity.ERROR
    ]
    return RuleOutcome(delta=-40 * len(issues), issues=tuple(issues))


@rule("correctness.unreachable_code")
def unreachable_code(ctx: ScoringContext) -> RuleOutcome:
    code = ctx.changed_code
    if not any(p.search(code) for p in _UNREACHABLE):
        return RuleOutcome.clean()
    lines = ctx.lines_matching(_EXIT_STATEMENT)
    line = lines[0] if lines else ctx.first_changed_line
    return RuleOutcome(delta=-20, issues=(Issue("Potential unreachable code detected", line),))


@rule("correctness.missing_return")
def missing_return(ctx: ScoringContext) -> RuleOutcome:
    code = ctx.changed_code
    if not _TYPED_FUNCTION.search(code):
        return RuleOutcome.clean()
    body = _FIRST_BLOCK.search(code)
    if body is None or _RETURN.search(body.group(0)):
        return RuleOutcome.clean()
    lines = ctx.lines_matching(_FUNCTION_HEAD)
    line = lines[0] if lines else ctx.first_changed_line
    return RuleOutcome(delta=-20, issues=(Issue("Function may be missing return statement", line),))


@rule("correctness.dynamic_eval")
def dynamic_eval(ctx: ScoringContext) -> RuleOutcome:
    issues: list[Issue] = []
    for n, text in ctx.changed_pairs:
        for pattern, label in _DYNAMIC_EVAL:
            if pattern.search(text):
                issues.append(Issue(f"Unsafe {label} detected", n))
                break
    if not issues:
        return RuleOutcome.clean()
    return RuleOutcome(delta=-40, issues=tuple(issues), tags=("dynamic_eval",))


# =============================================================================
# Code smells & complexity
# =============================================================================

_BRANCHES = re.compile(r"\b(?:if|for|while|switch|catch|case)\b|&&|\|\|")
_LEADING_WS = re.compile(r"^\s*")


@rule("correctness.control_flow")
def control_flow(ctx: ScoringContext) -> RuleOutcome:
    count = len(_BRANCHES.findall(ctx.changed_code))
    if count <= 5:
        return RuleOutcome.clean()
    lines = ctx.lines_matching(_BRANCHES)
    line = lines[0] if lines else ctx.first_changed_line
    return RuleOutcome(
        delta=-15, issues=(Issue(f"High complexity ({count} control flow statements)", line),)
    )


@rule("correctness.nesting")
def nesting(ctx: ScoringContext) -> RuleOutcome:
    deepest, deepest_line = 0, None
    for n, text in ctx.changed_pairs:
        indent = len(_LEADING_WS.match(text).group(0))  # type: ignore[union-attr]
        if indent > deepest:
            deepest, deepest_line = indent, n
    if deepest <= 20:
        return RuleOutcome.clean()
    return RuleOutcome(
        delta=-10,
        issues=(
            Issue(f"Deeply nested code detected (indentation {deepest} spaces > 20)", deepest_line),
        ),
    )


@rule("correctness.diff_size")
def diff_size(ctx: ScoringContext) -> RuleOutcome:
    count = len(ctx.changed_lines)
    if count <= 50:
        return RuleOutcome.clean()
    return RuleOutcome(
        delta=-10,
        issues=(Issue(f"Large change ({count} lines) - consider splitting", ctx.first_changed_line),),
    )


@rule("correctness.repetition")
def repetition(ctx: ScoringContext) -> RuleOutcome:
    seen: dict[str, list[int]] = defaultdict(list)
    for n, text in ctx.changed_pairs:
        stripped = text.strip()
        if len(stripped) > 10:
            seen[stripped[:40]].append(n)
    for occurrences in seen.values():
        if len(occurrences) > 2:
            return RuleOutcome(
                delta=-5,
                issues=(
                    Issue(
                        f"Potential code duplication detected ({len(occurrences)} occurrences)",
                        occurrences[0],
                    ),
                ),
            )
    return RuleOutcome.clean()


# =============================================================================
# Standards & style
# =============================================================================

_CAMEL = re.compile(r"[a-z]+[A-Z]")
_SNAKE = re.compile(r"[a-z]+_[a-z]")
_MAGIC_NUMBER = re.compile(r"\b\d{3,}\b")
_NUMERIC_CONST = re.compile(r"const\s+\w+\s*=\s*\d")


@rule("correctness.style_diagnostics")
def style_diagnostics(ctx: ScoringContext) -> RuleOutcome:
    delta = 0
    issues: list[Issue] = []
    for d in ctx.relevant_diagnostics:
        if d.severity is Severity.WARNING:
            delta -= 10
            issues.append(Issue(f"Style violation: {d.message}", d.line))
        elif d.severity in (Severity.INFO, Severity.HINT):
            delta -= 3
            if not any(i.line == d.line for i in issues):
                issues.append(Issue(f"Style hint: {d.message}", d.line))
    return RuleOutcome(delta=delta, issues=tuple(issues))


@rule("correctness.mixed_naming")
def mixed_naming(ctx: ScoringContext) -> RuleOutcome:
    code = ctx.changed_code
    if not (_CAMEL.search(code) and _SNAKE.search(code)):
        return RuleOutcome.clean()
    lines = ctx.lines_matching(_CAMEL) or ctx.lines_matching(_SNAKE)
    line = lines[0] if lines else ctx.first_changed_line
    return RuleOutcome(
        delta=-5,
        issues=(Issue("Inconsistent naming convention (mixing camelCase and snake_case)", line),),
    )


@rule("correctness.magic_numbers")
def magic_numbers(ctx: ScoringContext) -> RuleOutcome:
    if _NUMERIC_CONST.search(ctx.changed_code):
        return RuleOutcome.clean()
    lines = ctx.lines_matching(_MAGIC_NUMBER)
    if not lines:
        return RuleOutcome.clean()
    return RuleOutcome(
        delta=-5,
        issues=tuple(
            Issue("Magic numbers detected - consider using named constants", n) for n in lines[:3]
        ),
    )


# =============================================================================
# Safety guards
# =============================================================================

_GUARDED = re.compile(r"(?:if|assert|guard|check)\s*\(.*?(?:null|undefined|\?\?)", re.I)
_VALIDATION = re.compile(r"validate|sanitize|check|assert", re.I)
_ERROR_HANDLING = re.compile(r"try|catch|error|exception", re.I)
_GUARD_NEARBY = re.compile(r"(?:if|assert|guard|check|validate)\s*\(")
_ASYNC = re.compile(r"async|await|Promise")
_RISKY_OPERATIONS = (
    (re.compile(r"\.get\s*\("), "Array/Map.get()"),
    (re.compile(r"\[[^\]]+\]"), "Array/index access"),
    (re.compile(r"\.split\s*\("), "String.split()"),
    (re.compile(r"JSON\.parse"), "JSON.parse()"),
    (re.compile(r"\beval\s*\("), "eval()"),
    (re.compile(r"\bFunction\s*\("), "Function()"),
)


@rule("correctness.risky_operations")
def risky_operations(ctx: ScoringContext) -> RuleOutcome:
    code = ctx.changed_code
    if not code:
        return RuleOutcome.clean()
    has_null_checks = bool(_GUARDED.search(code))
    unguarded: list[Issue] = []
    for pattern, label in _RISKY_OPERATIONS:
        for n in ctx.lines_matching(pattern):
            if not _GUARD_NEARBY.search(ctx.window_before(n)):
                unguarded.append(Issue(f"{label} without safety guards", n))
    if unguarded and not has_null_checks:
        return RuleOutcome(delta=-15, issues=tuple(unguarded[:5]))
    if has_null_checks or _VALIDATION.search(code):
        return RuleOutcome(delta=5, tags=("guards_present",))
    return RuleOutcome.clean()


@rule("correctness.unhandled_async")
def unhandled_async(ctx: ScoringContext) -> RuleOutcome:
    code = ctx.changed_code
    if _ERROR_HANDLING.search(code) or not _ASYNC.search(code):
        return RuleOutcome.clean()
    lines = ctx.lines_matching(_ASYNC)
    return RuleOutcome(
        delta=-5,
        issues=tuple(Issue("Async operations without error handling", n) for n in lines[:3]),
    )


# =============================================================================
# Metric
# =============================================================================


def _summarize(result: MetricResult) -> str:
    count = len(result.issues)
    if result.score >= 90:
        return "Excellent correctness - safe to commit"
    if result.score >= 70:
        return f"{count} minor issue(s) found - review recommended"
    if result.score >= 50:
        return f"Noticeable risk - {count} issue(s) found"
    return f"Critical problems - {count} issue(s) - block commit"


METRIC = MetricDefinition(
    name=MetricName.CODE_CORRECTNESS,
    weight=0.10,
    groups=(
        RuleGroup("syntax", 0.25, (syntax_diagnostics, conflict_markers, bracket_balance)),
        RuleGroup("type_safety", 0.20, (type_diagnostics, untyped, unguarded_access)),
        RuleGroup(
            "static_bugs",
            0.25,
            (error_diagnostics, unreachable_code, missing_return, dynamic_eval),
        ),
        RuleGroup("complexity", 0.15, (control_flow, nesting, diff_size, repetition)),
        RuleGroup("style", 0.10, (style_diagnostics, mixed_naming, magic_numbers)),
        RuleGroup("safety_guards", 0.05, (risky_operations, unhandled_async)),
    ),
    suggestions=(
        "Fix syntax and type errors before commit",
        "Remove unused or unsafe constructs",
        "Simplify control flow or refactor complex expressions",
        "Run auto-fix or apply style guide",
        "Add validation and null guards where needed",
    ),
    summarize=_summarize,
)
