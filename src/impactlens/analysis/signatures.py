"""Signature normalization and text-level signature extraction.

A normalized signature answers "did the contract change": comments and
incidental whitespace are dropped, and parameter names are replaced by their
types (or ``_`` when untyped). Count, types, optional/default/rest markers
and the return type survive, so ``f(a: number)`` and ``f(x: number)``
normalize identically while ``f(a: number, b: string)`` does not.
"""

from __future__ import annotations

import re
from collections.abc import Callable

# ============================================================================
# Text helpers
# ============================================================================

_WS = re.compile(r"\s+")
_PUNCT_SPACE = re.compile(r"\s*([<>()\[\]{},:;|&=?*])\s*")

_OPENERS = "([{<"
_CLOSERS = ")]}>"
_QUOTES = "'\"`"

_HASH_COMMENT_LANGUAGES = frozenset({"python"})

# Characters that open a string literal; Rust lifetimes make ' ambiguous there
_STRING_QUOTES: dict[str, str] = {
    "python": "'\"",
    "rust": '"',
}

# How a single parameter spells its name and type
_PARAM_STYLE: dict[str, str] = {
    "typescript": "colon",
    "tsx": "colon",
    "javascript": "colon",
    "python": "colon",
    "rust": "colon",
    "java": "type_first",
    "csharp": "type_first",
    "go": "name_first",
}

_TS_PARAM_MODIFIERS = re.compile(r"^(?:(?:public|private|protected|readonly|override)\s+)+")
_RUST_SELF = frozenset({"self", "&self", "&mut self", "mut self"})


def mask_source(text: str, language: str | None = None, *, strings: bool = True) -> str:
    """Blank out comments (and string contents) without moving any offsets.

    Masked characters become spaces; newlines survive so line numbers hold.
    String delimiters are kept, only their contents are blanked.
    """
    hash_comments = language in _HASH_COMMENT_LANGUAGES
    quotes = _STRING_QUOTES.get(language or "", _QUOTES)
    out = list(text)
    n = len(text)

    def blank(start: int, end: int) -> None:
        for j in range(start, end):
            if out[j] != "\n":
                out[j] = " "

    i = 0
    while i < n:
        ch = text[i]
        if (ch == "#") if hash_comments else text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end < 0 else end
            blank(i, end)
            i = end
        elif not hash_comments and text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end < 0 else end + 2
            blank(i, end)
            i = end
        elif ch in quotes:
            delim = ch * 3 if hash_comments and text.startswith(ch * 3, i) else ch
            j = i + len(delim)
            closed = False
            while j < n:
                if text[j] == "\\":
                    j += 2
                    continue
                if text.startswith(delim, j):
                    closed = True
                    break
                if text[j] == "\n" and len(delim) == 1 and ch != "`":
                    break
                j += 1
            j = min(j, n)
            if strings:
                blank(i + len(delim), j)
            i = j + len(delim) if closed else j
        else:
            i += 1
    return "".join(out)


def strip_comments(text: str, language: str | None = None) -> str:
    return mask_source(text, language, strings=False)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to one space and drop it around punctuation."""
    return _PUNCT_SPACE.sub(r"\1", _WS.sub(" ", text).strip())


def _closes(ch: str, prev: str) -> bool:
    # "=>" and "->" are arrows, not closing angle brackets
    return ch in ")]}" or (ch == ">" and prev not in "=-")


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on ``sep`` outside brackets and string literals."""
    parts: list[str] = []
    buf: list[str] = []
    depth = 0
    quote: str | None = None
    prev = ""
    for ch in text:
        if quote:
            buf.append(ch)
            if ch == quote and prev != "\\":
                quote = None
        elif ch in _QUOTES:
            quote = ch
            buf.append(ch)
        elif ch == sep and depth == 0:
            parts.append("".join(buf))
            buf = []
        else:
            if ch in _OPENERS:
                depth += 1
            elif _closes(ch, prev):
                depth = max(0, depth - 1)
            buf.append(ch)
        prev = ch
    parts.append("".join(buf))
    return [p.strip() for p in parts if p.strip()]


def find_top_level(text: str, predicate: Callable[[str, int], bool]) -> int:
    """Index of the first position outside brackets/strings where ``predicate`` holds."""
    depth = 0
    quote: str | None = None
    prev = ""
    for i, ch in enumerate(text):
        if quote:
            if ch == quote and prev != "\\":
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif depth == 0 and predicate(text, i):
            return i
        elif ch in _OPENERS:
            depth += 1
        elif _closes(ch, prev):
            depth = max(0, depth - 1)
        prev = ch
    return -1


def _is_assign(text: str, i: int) -> bool:
    if text[i] != "=":
        return False
    before = text[i - 1] if i > 0 else ""
    after = text[i + 1] if i + 1 < len(text) else ""
    return after not in "=>" and before not in "=!<>"


def _is_colon(text: str, i: int) -> bool:
    return text[i] == ":" and (i + 1 >= len(text) or text[i + 1] != ":")


def scan_balanced(text: str, open_idx: int) -> int:
    """Index of the ``)`` matching the ``(`` at ``open_idx``, or -1."""
    depth = 0
    quote: str | None = None
    prev = ""
    for i in range(open_idx, len(text)):
        ch = text[i]
        if quote:
            if ch == quote and prev != "\\":
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        prev = ch
    return -1


# ============================================================================
# Normalization
# ============================================================================


def _normalize_param_colon(param: str, language: str | None) -> str:
    p = param.strip()
    if language == "rust" and collapse_whitespace(p) in _RUST_SELF:
        return collapse_whitespace(p)
    if p in ("*", "/"):
        return p

    prefix = ""
    for marker in ("...", "**", "*"):
        if p.startswith(marker):
            prefix = marker
            p = p[len(marker) :].lstrip()
            break
    p = _TS_PARAM_MODIFIERS.sub("", p)

    has_default = False
    eq = find_top_level(p, _is_assign)
    if eq >= 0:
        has_default = True
        p = p[:eq]

    type_text: str | None = None
    colon = find_top_level(p, _is_colon)
    if colon >= 0:
        name_part, type_text = p[:colon].strip(), p[colon + 1 :].strip()
    else:
        name_part = p.strip()

    optional = name_part.endswith("?")
    name_part = name_part.rstrip("?").strip()
    if not type_text and name_part[:1] in ("{", "["):
        # Destructuring: the bound keys are part of the contract
        type_text = name_part

    out = prefix + (collapse_whitespace(type_text) if type_text else "_")
    if optional:
        out += "?"
    if has_default:
        out += "="
    return out


def _normalize_param_type_first(param: str) -> str:
    p = param.strip()
    eq = find_top_level(p, _is_assign)
    has_default = eq >= 0
    if has_default:
        p = p[:eq]
    tokens = [t for t in _WS.sub(" ", p).strip().split(" ") if t and not t.startswith("@")]
    tokens = [t for t in tokens if t != "final"]
    if len(tokens) >= 2:
        tokens = tokens[:-1]
    return collapse_whitespace(" ".join(tokens)) + ("=" if has_default else "")


def _normalize_param_name_first(param: str) -> str:
    tokens = _WS.sub(" ", param).strip().split(" ")
    if len(tokens) >= 2:
        tokens = tokens[1:]
    return collapse_whitespace(" ".join(tokens))


def normalize_params(raw: str, language: str | None = None) -> str:
    """Name-insensitive canonical form of a parameter list (with or without parens)."""
    text = strip_comments(raw, language).strip()
    if text.startswith("(") and text.endswith(")"):
        text = text[1:-1]
    style = _PARAM_STYLE.get(language or "", "colon")
    normalized: list[str] = []
    for param in split_top_level(text):
        if style == "type_first":
            normalized.append(_normalize_param_type_first(param))
        elif style == "name_first":
            normalized.append(_normalize_param_name_first(param))
        else:
            normalized.append(_normalize_param_colon(param, language))
    return ",".join(normalized)


def display_params(raw: str, language: str | None = None) -> str:
    text = collapse_whitespace(strip_comments(raw, language))
    if not text.startswith("("):
        text = f"({text})"
    return text


def normalize_type(raw: str | None, language: str | None = None) -> str:
    if not raw:
        return ""
    text = collapse_whitespace(strip_comments(raw, language))
    for lead in ("->", ":"):
        if text.startswith(lead):
            text = text[len(lead) :].strip()
    return text


def build_signature(params: str, return_type: str = "") -> str:
    return f"({params})" + (f":{return_type}" if return_type else "")


# ============================================================================
# Text-level extraction
# ============================================================================

_JAVA_LIKE_NOT_TYPES = frozenset({"return", "new", "else", "throw", "await", "yield", "case"})


def _function_headers(name: str, language: str | None) -> list[tuple[re.Pattern[str], str]]:
    """Regexes ending just after the ``(`` that opens the parameter list."""
    n = re.escape(name)
    if language == "python":
        # Module level only; indented defs are methods or nested helpers
        return [(re.compile(rf"^(?:async[ \t]+)?def[ \t]+{n}[ \t]*\(", re.MULTILINE), "py")]
    if language == "rust":
        return [(re.compile(rf"\bfn\s+{n}\s*(?:<[^>(]*>)?\s*\("), "rust")]
    if language == "go":
        return [(re.compile(rf"\bfunc\s+(?:\([^)]*\)\s*)?{n}\s*(?:\[[^\]]*\])?\s*\("), "go")]
    if language in ("java", "csharp"):
        return [
            (
                re.compile(
                    r"^[ \t]*(?:(?:public|private|protected|internal|static|final|abstract|"
                    r"virtual|override|async|synchronized|sealed|extern|unsafe)[ \t]+)*"
                    rf"([\w<>\[\],.?]+(?:[ \t]*<[^>(]*>)?)[ \t]+{n}[ \t]*(?:<[^>(]*>)?[ \t]*\(",
                    re.MULTILINE,
                ),
                "java",
            )
        ]
    return [
        (re.compile(rf"\bfunction\b\s*\*?\s*{n}\s*(?:<[^>(]*>)?\s*\("), "js_decl"),
        (
            re.compile(
                rf"\b(?:const|let|var)\s+{n}\s*(?::[^=]*?)?=\s*(?:async\s+)?"
                r"(?:function\b\s*\*?\s*[\w$]*\s*)?(?:<[^>(]*>)?\s*\("
            ),
            "js_assign",
        ),
    ]


def _return_after(text: str, close_idx: int, flavor: str) -> tuple[str, str]:
    """Return-type text following ``)`` and what terminates it."""
    rest = text[close_idx + 1 :]
    stripped = rest.lstrip()
    if flavor == "py":
        if not stripped.startswith("->"):
            return "", ""
        end = find_top_level(stripped, lambda t, i: t[i] == ":")
        return stripped[2 : end if end >= 0 else len(stripped)], ":"
    if flavor in ("rust", "go"):
        end = find_top_level(stripped, lambda t, i: t[i] in "{;")
        body = stripped[: end if end >= 0 else len(stripped)]
        body = body.split(" where ", 1)[0]
        return body.strip().removeprefix("->"), "{"
    # TypeScript/JavaScript
    if not stripped.startswith(":"):
        arrow = "=>" if stripped.startswith("=>") else ""
        return "", arrow
    body = stripped[1:]
    end = find_top_level(
        body,
        lambda t, i: t[i] in "{;\n" or t.startswith("=>", i),
    )
    terminator = body[end : end + 2] if end >= 0 else ""
    return body[: end if end >= 0 else len(body)], "=>" if terminator == "=>" else terminator[:1]


def extract_function_signature(name: str, text: str, language: str | None = None) -> str | None:
    """Normalized signature of the first function named ``name`` in ``text``.

    Headers are searched in the masked text so commented-out code and string
    contents never match; parameters and return types are read from the text
    with only comments removed, which keeps literal types intact.
    """
    code = strip_comments(text, language)
    masked = mask_source(text, language)
    for pattern, flavor in _function_headers(name, language):
        for match in pattern.finditer(masked):
            if flavor == "java" and match.group(1) in _JAVA_LIKE_NOT_TYPES:
                continue
            open_idx = match.end() - 1
            close_idx = scan_balanced(code, open_idx)
            if close_idx < 0:
                continue
            params = code[open_idx : close_idx + 1]
            return_type, terminator = _return_after(code, close_idx, flavor)
            if flavor == "js_assign" and "function" not in match.group(0) and terminator != "=>":
                # "const x = (a + b) * 2" is not a function
                continue
            if flavor == "java":
                return_type = match.group(1)
            return build_signature(
                normalize_params(params, language), normalize_type(return_type, language)
            )

    if language in (None, "typescript", "tsx", "javascript"):
        bare = re.compile(
            rf"\b(?:const|let|var)\s+{re.escape(name)}\s*=\s*(?:async\s+)?([A-Za-z_$][\w$]*)\s*=>"
        )
        if match := bare.search(masked):
            return build_signature(normalize_params(match.group(1), language))
    return None


def _class_header(name: str, language: str | None) -> re.Pattern[str]:
    n = re.escape(name)
    if language == "python":
        return re.compile(rf"^[ \t]*class[ \t]+{n}\b", re.MULTILINE)
    if language == "go":
        return re.compile(rf"\btype\s+{n}\s+struct\b")
    if language == "rust":
        return re.compile(rf"\bstruct\s+{n}\b")
    return re.compile(rf"\bclass\s+{n}\b")


_ANY_CLASS = re.compile(r"^[ \t]*(?:export[ \t]+)?(?:default[ \t]+)?(?:abstract[ \t]+)?class[ \t]", re.M)
_CTOR: dict[str | None, re.Pattern[str]] = {
    "python": re.compile(r"^[ \t]*def[ \t]+__init__[ \t]*\(", re.MULTILINE),
}
_JS_CTOR = re.compile(r"\bconstructor\s*\(")


def extract_class_signature(name: str, text: str, language: str | None = None) -> str | None:
    """Normalized class contract: heritage clause plus constructor signature."""
    code = strip_comments(text, language)
    masked = mask_source(text, language)
    match = _class_header(name, language).search(masked)
    if match is None:
        return None

    rest = code[match.end() :]
    stop = ":" if language == "python" else "{"
    end = find_top_level(rest, lambda t, i: t[i] == stop or t[i] == ";")
    heritage = collapse_whitespace(rest[: end if end >= 0 else 0])

    body_start = match.end() + max(end, 0)
    next_class = _ANY_CLASS.search(masked, body_start + 1)
    body_end = next_class.start() if next_class else len(text)

    # Masked and comment-free text share offsets
    ctor_sig = ""
    ctor_pattern = _CTOR.get(language, _JS_CTOR)
    if ctor := ctor_pattern.search(masked, body_start, body_end):
        open_idx = ctor.end() - 1
        close_idx = scan_balanced(code, open_idx)
        if close_idx > 0:
            ctor_sig = build_signature(normalize_params(code[open_idx : close_idx + 1], language))

    signature = "class" + (f" {heritage}" if heritage else "")
    if ctor_sig:
        signature += f" new{ctor_sig}"
    return signature
