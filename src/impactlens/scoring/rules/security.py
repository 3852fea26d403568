"""Security (25%): hardcoded secrets, dangerous APIs, unvalidated input."""

from __future__ import annotations

import re

from impactlens.scoring.context import ScoringContext
from impactlens.scoring.models import Issue, MetricName, MetricResult, RuleOutcome
from impactlens.scoring.rules.base import MetricDefinition, RuleGroup, rule

_SECRET_PATTERNS = (
    re.compile(r"""(api[_-]?key|apikey)\s*[:=]\s*['"]([A-Za-z0-9_\-]{8,})['"]""", re.I),
    re.compile(r"""(secret|secret[_-]?key|secretkey)\s*[:=]\s*['"]([A-Za-z0-9_\-]{8,})['"]""", re.I),
    re.compile(r"""(token|access[_-]?token|bearer)\s*[:=]\s*['"]([A-Za-z0-9_\-]{20,})['"]""", re.I),
    re.compile(r"""(password|pwd|passwd)\s*[:=]\s*['"](.{6,})['"]""", re.I),
    re.compile(r"""(private[_-]?key|privatekey)\s*[:=]\s*['"]-----BEGIN""", re.I),
)

_HIGH, _MEDIUM, _LOW = -50, -25, -10

_DANGEROUS_APIS = (
    (re.compile(r"\beval\s*\("), _HIGH, "eval() usage"),
    (re.compile(r"\bFunction\s*\("), _HIGH, "Function() constructor"),
    (re.compile(r"innerHTML\s*="), _MEDIUM, "innerHTML assignment"),
    (re.compile(r"dangerouslySetInnerHTML"), _MEDIUM, "dangerouslySetInnerHTML"),
    (re.compile(r"\bnew\s+Function\s*\("), _HIGH, "Function constructor"),
    (re.compile(r"document\.write\s*\("), _MEDIUM, "document.write()"),
    (re.compile(r"localStorage\.[^=]*="), _LOW, "localStorage write"),
)

_INPUT_SOURCES = (
    re.compile(r"userInput|req\.body|req\.query|req\.params", re.I),
    re.compile(r"getParameter|getQueryString", re.I),
)
_VALIDATION = re.compile(r"validate|sanitize|escape|encode", re.I)

_SEVERITY_LABEL = {_HIGH: "High", _MEDIUM: "Medium", _LOW: "Low"}


@rule("security.secrets")
def hardcoded_secrets(ctx: ScoringContext) -> RuleOutcome:
    for pattern in _SECRET_PATTERNS:
        lines = ctx.lines_matching(pattern)
        if lines:
            return RuleOutcome(
                delta=_HIGH,
                issues=(Issue("Hardcoded secret found", lines[0]),),
                tags=("vulnerability=High: Hardcoded secret detected",),
            )
    return RuleOutcome.clean()


@rule("security.dangerous_apis")
def dangerous_apis(ctx: ScoringContext) -> RuleOutcome:
    delta = 0
    issues: list[Issue] = []
    tags: list[str] = []
    for pattern, penalty, label in _DANGEROUS_APIS:
        lines = ctx.lines_matching(pattern)
        if lines:
            delta += penalty
            issues.append(Issue(label, lines[0]))
            tags.append(f"vulnerability={_SEVERITY_LABEL[penalty]}: {label}")
    return RuleOutcome(delta=delta, issues=tuple(issues), tags=tuple(tags))


@rule("security.input_validation")
def input_validation(ctx: ScoringContext) -> RuleOutcome:
    code = ctx.changed_code
    if not any(p.search(code) for p in _INPUT_SOURCES) or _VALIDATION.search(code):
        return RuleOutcome.clean()
    lines = [n for p in _INPUT_SOURCES for n in ctx.lines_matching(p)]
    return RuleOutcome(
        delta=_LOW,
        issues=(Issue("Missing input validation", min(lines) if lines else None),),
        tags=("vulnerability=Low: Potential missing input validation",),
    )


def _summarize(result: MetricResult) -> str:
    found = [t for t in result.tags if t.startswith("vulnerability=")]
    if not found:
        return "No security issues detected"
    return f"{len(found)} vulnerability/vulnerabilities found"


METRIC = MetricDefinition(
    name=MetricName.SECURITY,
    weight=0.25,
    groups=(
        RuleGroup("security", 1.0, (hardcoded_secrets, dangerous_apis, input_validation)),
    ),
    suggestions=(
        "Remove secrets and store in environment variables",
        "Use secure API wrappers or sanitization libraries",
        "Update vulnerable dependencies",
        "Implement proper input validation",
    ),
    summarize=_summarize,
)
