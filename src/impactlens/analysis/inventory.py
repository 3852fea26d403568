"""Structural inventory: named, located declarations of a source text.

Languages with a tree-sitter grammar (TypeScript, TSX, JavaScript, Python)
are parsed and walked; the others fall back to line patterns. Collected:

- named function declarations and named function expressions
- arrow functions / function expressions assigned to a named variable
- named class declarations

Methods are not collected on their own; a class's contract is its heritage
clause plus its constructor (see ``signatures.extract_class_signature``).

A text whose parse tree contains errors yields ``ParseStatus.FAILED`` and an
empty declaration list.
"""

from __future__ import annotations

import importlib
import re
from dataclasses import dataclass, field
from typing import Any

import structlog
import tree_sitter

from impactlens.analysis.models import Declaration, DeclarationKind, Inventory, ParseStatus
from impactlens.analysis.signatures import (
    build_signature,
    display_params,
    extract_class_signature,
    extract_function_signature,
    normalize_params,
    normalize_type,
)
from impactlens.core.languages import get_grammar_name

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GrammarSpec:
    """Where to load a tree-sitter grammar from."""

    grammar_module: str  # Python import ("tree_sitter_typescript")
    language_func: str = "language"  # e.g. "language_typescript", "language_tsx"


GRAMMARS: dict[str, GrammarSpec] = {
    "typescript": GrammarSpec("tree_sitter_typescript", "language_typescript"),
    "tsx": GrammarSpec("tree_sitter_typescript", "language_tsx"),
    "javascript": GrammarSpec("tree_sitter_javascript"),
    "python": GrammarSpec("tree_sitter_python"),
}

# ============================================================================
# Node types (tree-sitter grammars)
# ============================================================================

_JS_FUNCTION_NODES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
    }
)
_JS_FUNCTION_VALUES = frozenset(
    {"arrow_function", "function_expression", "function", "generator_function"}
)
_JS_CLASS_NODES = frozenset({"class_declaration", "abstract_class_declaration", "class"})

# ============================================================================
# Line heuristics (no grammar)
# ============================================================================

_HEURISTIC_FUNCTIONS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*([A-Za-z_$][\w$]*)"),
    re.compile(
        r"^\s*(?:export\s+)?(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*(?::[^=]*)?=\s*"
        r"(?:async\s+)?(?:function\b|\([^)]*\)\s*(?::[^=]*)?=>|[A-Za-z_$][\w$]*\s*=>)"
    ),
    re.compile(r"^\s*(?:async\s+)?def\s+([A-Za-z_]\w*)"),
    re.compile(r"^\s*func\s+(?:\([^)]*\)\s*)?([A-Za-z_]\w*)"),
    re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?(?:async\s+)?(?:unsafe\s+)?fn\s+([A-Za-z_]\w*)"),
    re.compile(
        r"^\s*(?:(?:public|private|protected|internal|static|final|abstract|virtual|override|"
        r"async|synchronized|sealed)\s+)+[\w<>\[\],.?]+\s+([A-Za-z_]\w*)\s*\("
    ),
)
_HEURISTIC_CLASSES: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"^\s*(?:export\s+)?(?:default\s+)?(?:public\s+|private\s+|internal\s+)?"
        r"(?:abstract\s+|static\s+|final\s+|sealed\s+|partial\s+)*class\s+([A-Za-z_$][\w$]*)"
    ),
    re.compile(r"^\s*type\s+([A-Za-z_]\w*)\s+struct\b"),
    re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?struct\s+([A-Za-z_]\w*)"),
)


def _text(node: Any) -> str:
    return str(node.text.decode("utf-8"))


@dataclass
class StructuralInventory:
    """Collects declarations from source text.

    Usage::

        inventory = StructuralInventory()
        result = inventory.collect(text, language="typescript")
        if result.status is ParseStatus.FAILED:
            ...
    """

    _parser: Any = field(default=None, repr=False)
    _languages: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()
        self._languages = {}

    # =========================================================================
    # Grammar loading
    # =========================================================================

    def _get_language(self, grammar_name: str) -> Any | None:
        """Get or load a tree-sitter language; None if the grammar isn't installed."""
        if grammar_name in self._languages:
            return self._languages[grammar_name]

        spec = GRAMMARS.get(grammar_name)
        if spec is None:
            return None
        try:
            mod = importlib.import_module(spec.grammar_module)
            lang = tree_sitter.Language(getattr(mod, spec.language_func)())
        except (ImportError, AttributeError):
            log.warning("grammar_unavailable", grammar=grammar_name, module=spec.grammar_module)
            lang = None
        self._languages[grammar_name] = lang
        return lang

    # =========================================================================
    # Public API
    # =========================================================================

    def collect(self, text: str, language: str | None) -> Inventory:
        grammar = get_grammar_name(language) if language else None
        ts_lang = self._get_language(grammar) if grammar else None
        if ts_lang is None:
            return self._collect_heuristic(text, language)

        self._parser.language = ts_lang
        tree = self._parser.parse(text.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            log.debug("parse_failed", language=language)
            return Inventory.failed(language, "syntax errors in parse tree")

        if language == "python":
            declarations = self._walk_python(root)
        else:
            declarations = self._walk_js(root, language)
        return Inventory(
            declarations=tuple(declarations),
            status=ParseStatus.SUCCESS,
            language=language,
            method="tree-sitter",
        )

    # =========================================================================
    # Tree walks
    # =========================================================================

    def _walk_js(self, root: Any, language: str | None) -> list[Declaration]:
        declarations: list[Declaration] = []

        def function_decl(name: str, fn_node: Any, at: Any) -> Declaration:
            params = fn_node.child_by_field_name("parameters")
            if params is None:
                params = fn_node.child_by_field_name("parameter")
            return_type = fn_node.child_by_field_name("return_type")
            params_text = _text(params) if params is not None else "()"
            ret = normalize_type(_text(return_type), language) if return_type is not None else ""
            return Declaration(
                name=name,
                kind=DeclarationKind.FUNCTION,
                line=at.start_point[0] + 1,
                normalized_signature=build_signature(normalize_params(params_text, language), ret),
                display_signature=display_params(params_text, language),
            )

        def walk(node: Any) -> None:
            if node.type in _JS_FUNCTION_NODES:
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    declarations.append(function_decl(_text(name_node), node, node))
            elif node.type == "variable_declarator":
                name_node = node.child_by_field_name("name")
                value = node.child_by_field_name("value")
                if (
                    name_node is not None
                    and name_node.type == "identifier"
                    and value is not None
                    and value.type in _JS_FUNCTION_VALUES
                ):
                    declarations.append(function_decl(_text(name_node), value, node))
            elif node.type in _JS_CLASS_NODES:
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    name = _text(name_node)
                    declarations.append(
                        Declaration(
                            name=name,
                            kind=DeclarationKind.CLASS,
                            line=node.start_point[0] + 1,
                            normalized_signature=extract_class_signature(
                                name, _text(node), language
                            )
                            or "class",
                        )
                    )
            for child in node.children:
                walk(child)

        walk(root)
        return declarations

    def _walk_python(self, root: Any) -> list[Declaration]:
        declarations: list[Declaration] = []

        def walk(node: Any, in_class: bool) -> None:
            if node.type == "function_definition":
                name_node = node.child_by_field_name("name")
                if name_node is not None and not in_class:
                    params = node.child_by_field_name("parameters")
                    return_type = node.child_by_field_name("return_type")
                    params_text = _text(params) if params is not None else "()"
                    ret = (
                        normalize_type(_text(return_type), "python") if return_type is not None else ""
                    )
                    declarations.append(
                        Declaration(
                            name=_text(name_node),
                            kind=DeclarationKind.FUNCTION,
                            line=node.start_point[0] + 1,
                            normalized_signature=build_signature(
                                normalize_params(params_text, "python"), ret
                            ),
                            display_signature=display_params(params_text, "python"),
                        )
                    )
                # Functions nested in a method are not methods themselves
                for child in node.children:
                    walk(child, False)
                return
            if node.type == "class_definition":
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    name = _text(name_node)
                    declarations.append(
                        Declaration(
                            name=name,
                            kind=DeclarationKind.CLASS,
                            line=node.start_point[0] + 1,
                            normalized_signature=extract_class_signature(
                                name, _text(node), "python"
                            )
                            or "class",
                        )
                    )
                for child in node.children:
                    walk(child, True)
                return
            for child in node.children:
                walk(child, in_class)

        walk(root, False)
        return declarations

    # =========================================================================
    # Line heuristics
    # =========================================================================

    def _collect_heuristic(self, text: str, language: str | None) -> Inventory:
        declarations: list[Declaration] = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            for pattern in _HEURISTIC_CLASSES:
                if match := pattern.match(line):
                    name = match.group(1)
                    declarations.append(
                        Declaration(
                            name=name,
                            kind=DeclarationKind.CLASS,
                            line=lineno,
                            normalized_signature=extract_class_signature(name, text, language)
                            or "class",
                        )
                    )
                    break
            else:
                for pattern in _HEURISTIC_FUNCTIONS:
                    if match := pattern.match(line):
                        name = match.group(1)
                        declarations.append(
                            Declaration(
                                name=name,
                                kind=DeclarationKind.FUNCTION,
                                line=lineno,
                                normalized_signature=extract_function_signature(
                                    name, text, language
                                )
                                or "",
                            )
                        )
                        break
        return Inventory(
            declarations=tuple(declarations),
            status=ParseStatus.SUCCESS,
            language=language,
            method="heuristic",
        )
