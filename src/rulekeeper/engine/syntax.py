"""Syntax tree adapter: tree-sitter parsing of submissions plus read-only node access."""

# rulekeeper:domain=engine

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from tree_sitter import Node as TSNode
    from tree_sitter import Tree

logger = logging.getLogger(__name__)

DEFAULT_DIALECT = "typescript"

# Node types for function-like values on the right of a declarator.
FUNCTION_VALUE_TYPES: frozenset[str] = frozenset(
    {"arrow_function", "function_expression", "function", "generator_function"}
)
FUNCTION_DECLARATION_TYPES: frozenset[str] = frozenset(
    {"function_declaration", "generator_function_declaration"}
)
# Statements that wrap a declaration without changing its meaning.
WRAPPER_TYPES: frozenset[str] = frozenset({"export_statement"})


# ---- Language loaders (lazy, handle ImportError) ----


def _load_typescript() -> Language:
    import tree_sitter_typescript as tstypescript

    return Language(tstypescript.language_typescript())


def _load_tsx() -> Language:
    import tree_sitter_typescript as tstypescript

    return Language(tstypescript.language_tsx())


_DIALECT_LOADERS: dict[str, Callable[[], Language]] = {
    "typescript": _load_typescript,
    "tsx": _load_tsx,
}

# Extension -> dialect. Plain JavaScript parses fine with the TypeScript grammar.
_EXTENSION_DIALECTS: dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "typescript",
    ".mjs": "typescript",
    ".cjs": "typescript",
    ".tsx": "tsx",
    ".jsx": "tsx",
}

_LANG_CACHE: dict[str, Language] = {}


class GrammarUnavailableError(RuntimeError):
    """Raised when the tree-sitter grammar for a dialect cannot be loaded."""


def supported_dialects() -> frozenset[str]:
    """Return the dialect names accepted by :func:`parse_code`."""
    return frozenset(_DIALECT_LOADERS)


def dialect_for_extension(extension: str) -> str:
    """Map a file extension to a dialect, falling back to :data:`DEFAULT_DIALECT`."""
    return _EXTENSION_DIALECTS.get(extension.lower(), DEFAULT_DIALECT)


def get_language(dialect: str = DEFAULT_DIALECT) -> Language:
    """Get the tree-sitter language for *dialect*, loading it on first use."""
    cached = _LANG_CACHE.get(dialect)
    if cached is not None:
        return cached

    loader = _DIALECT_LOADERS.get(dialect)
    if loader is None:
        msg = f"Unknown dialect '{dialect}', must be one of {sorted(_DIALECT_LOADERS)}"
        raise ValueError(msg)

    try:
        language = loader()
    except ImportError as exc:
        msg = f"Grammar for '{dialect}' is not installed: pip install tree-sitter-typescript"
        raise GrammarUnavailableError(msg) from exc

    _LANG_CACHE[dialect] = language
    return language


def clear_cache() -> None:
    """Clear the language cache (useful for testing)."""
    _LANG_CACHE.clear()


@dataclass(frozen=True)
class SyntaxTree:
    """A parsed submission. Read-only; lives for a single validation call."""

    tree: Tree
    source: bytes
    dialect: str = DEFAULT_DIALECT

    @property
    def root(self) -> TSNode:
        return self.tree.root_node

    @property
    def has_error(self) -> bool:
        """True when tree-sitter had to recover from syntax errors."""
        return self.root.has_error

    def walk(self) -> Iterator[TSNode]:
        """Yield every node (named and anonymous) in pre-order."""
        return walk(self.root)

    def slice(self, start: TSNode, end: TSNode) -> str:
        """Return the source text from the start of *start* to the end of *end*."""
        return self.source[start.start_byte : end.end_byte].decode("utf-8")

    def error_lines(self) -> list[int]:
        """Return 1-based line numbers of ERROR / missing nodes."""
        return sorted(
            {
                node.start_point.row + 1
                for node in self.walk()
                if node.type == "ERROR" or node.is_missing
            }
        )


def parse_code(code: str, dialect: str = DEFAULT_DIALECT) -> SyntaxTree:
    """Parse *code* with tree-sitter.

    tree-sitter always produces a tree; submissions with syntax errors come
    back as an error-recovered tree with ``has_error`` set.
    """
    source = code.encode("utf-8")
    parser = Parser(get_language(dialect))
    tree = SyntaxTree(tree=parser.parse(source), source=source, dialect=dialect)
    if tree.has_error:
        logger.warning(
            "Submission has syntax errors on line(s) %s; checking the recovered tree",
            ", ".join(str(line) for line in tree.error_lines()),
        )
    return tree


# ---- Node accessors ----


def kind_of(node: TSNode) -> str:
    return node.type


def children_of(node: TSNode) -> list[TSNode]:
    return list(node.children)


def parent_of(node: TSNode) -> TSNode | None:
    return node.parent


def named_children_of(node: TSNode) -> list[TSNode]:
    return list(node.named_children)


def field_of(node: TSNode, name: str) -> TSNode | None:
    """Child stored under grammar field *name*, or ``None``."""
    return node.child_by_field_name(name)


def text_of(node: TSNode | None) -> str:
    """Exact source slice covered by *node* (empty string for ``None``)."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def walk(node: TSNode) -> Iterator[TSNode]:
    """Pre-order traversal without recursion."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def unwrap(node: TSNode) -> TSNode:
    """Look through ``export`` / ``export default`` wrappers to the declaration."""
    if node.type not in WRAPPER_TYPES:
        return node
    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        return declaration
    for child in node.named_children:
        if child.type in FUNCTION_DECLARATION_TYPES:
            return child
    return node


def strip_parens(node: TSNode) -> TSNode:
    """Look through any number of ``( ... )`` around an expression."""
    while node.type == "parenthesized_expression" and node.named_child_count:
        node = node.named_children[0]
    return node


def function_name(node: TSNode) -> str | None:
    """Name of a function-like declaration, or ``None`` if *node* is not one.

    Function-likes are function declarations and variable declarators whose
    value is an arrow function or function expression, parenthesized or not.
    """
    if node.type in FUNCTION_DECLARATION_TYPES:
        return text_of(node.child_by_field_name("name")) or None
    if node.type == "variable_declarator":
        value = node.child_by_field_name("value")
        if value is not None:
            value = strip_parens(value)
        name = node.child_by_field_name("name")
        if value is not None and value.type in FUNCTION_VALUE_TYPES and name is not None:
            if name.type != "identifier":
                return None
            return text_of(name)
    return None


def top_level_functions(tree: SyntaxTree) -> list[TSNode]:
    """Function-likes that are direct children of the program."""
    found: list[TSNode] = []
    for child in tree.root.named_children:
        actual = unwrap(child)
        if actual.type in FUNCTION_DECLARATION_TYPES:
            found.append(actual)
        elif actual.type in ("lexical_declaration", "variable_declaration"):
            found.extend(
                declarator
                for declarator in actual.named_children
                if function_name(declarator) is not None
            )
    return found
