# rulekeeper:domain=engine
"""Construct detectors: one pure ``(tree, rules) -> violations`` function per rule kind."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rulekeeper.engine.imports import find_disallowed_imports
from rulekeeper.engine.syntax import (
    FUNCTION_DECLARATION_TYPES,
    children_of,
    field_of,
    function_name,
    kind_of,
    parent_of,
    text_of,
    top_level_functions,
)
from rulekeeper.engine.violations import (
    DisallowedConsole,
    DisallowedDeclarations,
    DisallowedHelperFunctions,
    DisallowedIfStatements,
    DisallowedLoops,
    DisallowedReassignment,
    MissingExpectedFunction,
)
from rulekeeper.engine.writer import Writer, sequence

if TYPE_CHECKING:
    from collections.abc import Callable

    from tree_sitter import Node as TSNode

    from rulekeeper.engine.rules import Rules
    from rulekeeper.engine.syntax import SyntaxTree
    from rulekeeper.engine.violations import RuleViolation

    Detector = Callable[[SyntaxTree, Rules], list[RuleViolation]]

# ---------------------------------------------------------------------------
# Node kinds
# ---------------------------------------------------------------------------

COMPOUND_ASSIGNMENT_OPERATORS: frozenset[str] = frozenset(
    {
        "+=",
        "-=",
        "*=",
        "/=",
        "|=",
        "||=",
        "&=",
        "&&=",
        "^=",
        "%=",
        "??=",
        "<<=",
        ">>=",
        ">>>=",
    }
)
UPDATE_OPERATORS: frozenset[str] = frozenset({"++", "--"})
LOOP_TYPES: frozenset[str] = frozenset({"for_statement", "while_statement", "do_statement"})
DECLARATION_TYPES: frozenset[str] = frozenset({"lexical_declaration", "variable_declaration"})
CONSOLE_REFERENCE_TYPES: frozenset[str] = frozenset(
    {"identifier", "shorthand_property_identifier"}
)


def _operator(node: TSNode) -> str | None:
    op = field_of(node, "operator")
    return kind_of(op) if op is not None else None


def _is_for_of(node: TSNode) -> bool:
    """``for_in_statement`` covers both ``for...in`` and ``for...of``."""
    if kind_of(node) != "for_in_statement":
        return False
    return any(kind_of(c) == "of" for c in children_of(node))


# ---------------------------------------------------------------------------
# Expected functions
# ---------------------------------------------------------------------------


def check_expected_functions(tree: SyntaxTree, rules: Rules) -> list[RuleViolation]:
    """At most one violation listing every expected top-level function that is missing."""
    if not rules.expected_functions:
        return []

    found = {function_name(node) for node in top_level_functions(tree)}
    missing = tuple(name for name in rules.expected_functions if name not in found)
    if not missing:
        return []
    return [MissingExpectedFunction(missing=missing)]


# ---------------------------------------------------------------------------
# Declaration kinds
# ---------------------------------------------------------------------------


def _declaration_keywords(tree: SyntaxTree) -> list[tuple[str, str]]:
    """``(kind, code)`` for every const/let/var keyword, in traversal order."""
    found: list[tuple[str, str]] = []
    for node in tree.walk():
        parent = parent_of(node)
        if parent is None or kind_of(node) not in ("const", "let", "var"):
            continue
        if kind_of(parent) in DECLARATION_TYPES:
            found.append((kind_of(node), text_of(parent)))
        elif kind_of(parent) == "for_in_statement":
            # `for (const x of xs)`: no declaration node, cut the head out by hand.
            left = field_of(parent, "left")
            code = tree.slice(node, left) if left is not None else kind_of(node)
            found.append((kind_of(node), code))
    return found


def _absent_declaration(
    keywords: list[tuple[str, str]], kind: str
) -> Writer[None, RuleViolation]:
    return Writer.error(
        None,
        [DisallowedDeclarations(disallowed=kind, code=code) for k, code in keywords if k == kind],
    )


def check_declarations(tree: SyntaxTree, rules: Rules) -> list[RuleViolation]:
    """One violation per keyword of a declaration kind missing from ``validDeclarations``."""
    valid = rules.valid_declarations
    if valid is None:
        return []

    keywords = _declaration_keywords(tree)
    steps = [
        (lambda _, kind=kind: _absent_declaration(keywords, kind))
        for kind in ("const", "let", "var")
        if kind not in valid
    ]
    _, log = sequence(None, steps).run()
    return log


# ---------------------------------------------------------------------------
# Reassignment
# ---------------------------------------------------------------------------


def _is_reassignment(node: TSNode) -> bool:
    if kind_of(node) == "assignment_expression":
        return True
    if kind_of(node) == "augmented_assignment_expression":
        return _operator(node) in COMPOUND_ASSIGNMENT_OPERATORS
    if kind_of(node) == "update_expression":
        return _operator(node) in UPDATE_OPERATORS
    return False


def check_reassignment(tree: SyntaxTree, rules: Rules) -> list[RuleViolation]:
    if not rules.disallows("reassignment"):
        return []
    return [
        DisallowedReassignment(code=text_of(node)) for node in tree.walk() if _is_reassignment(node)
    ]


# ---------------------------------------------------------------------------
# Loops / if statements
# ---------------------------------------------------------------------------


def check_loops(tree: SyntaxTree, rules: Rules) -> list[RuleViolation]:
    """Every for / for...of / while / do...while node, nested ones included."""
    if not rules.disallows("loops"):
        return []
    return [
        DisallowedLoops(code=text_of(node))
        for node in tree.walk()
        if kind_of(node) in LOOP_TYPES or _is_for_of(node)
    ]


def check_if_statements(tree: SyntaxTree, rules: Rules) -> list[RuleViolation]:
    """Every ``if`` node; each ``else if`` link is its own node."""
    if not rules.disallows("if-statements"):
        return []
    return [
        DisallowedIfStatements(code=text_of(node))
        for node in tree.walk()
        if kind_of(node) == "if_statement"
    ]


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------


def check_console(tree: SyntaxTree, rules: Rules) -> list[RuleViolation]:
    """One violation per ``console`` reference; property names like ``obj.console`` don't count."""
    if not rules.disallows("console"):
        return []
    violations: list[RuleViolation] = []
    for node in tree.walk():
        if kind_of(node) in CONSOLE_REFERENCE_TYPES and text_of(node) == "console":
            violations.append(DisallowedConsole(code=text_of(parent_of(node) or node)))
    return violations


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def check_helper_functions(tree: SyntaxTree, rules: Rules) -> list[RuleViolation]:
    """Function-likes at any depth whose name is not an expected function."""
    expected = rules.expected_functions
    if expected is None or not rules.disallows("helper-functions"):
        return []

    violations: list[RuleViolation] = []
    for node in tree.walk():
        kind = kind_of(node)
        if kind not in FUNCTION_DECLARATION_TYPES and kind != "variable_declarator":
            continue
        name = function_name(node)
        if name is not None and name not in expected:
            violations.append(DisallowedHelperFunctions(code=text_of(node)))
    return violations


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


def check_imports(tree: SyntaxTree, rules: Rules) -> list[RuleViolation]:
    if rules.allowed_imports is None:
        return []
    return list(find_disallowed_imports(tree, rules.allowed_imports))


# Output order follows this tuple.
DETECTORS: tuple[tuple[str, Detector], ...] = (
    ("expected-functions", check_expected_functions),
    ("declaration-kind", check_declarations),
    ("reassignment", check_reassignment),
    ("loops", check_loops),
    ("if-statements", check_if_statements),
    ("console-usage", check_console),
    ("helper-functions", check_helper_functions),
    ("import-allowlist", check_imports),
)
