# rulekeeper:domain=engine
"""Import allow-list matcher.

The flat ``allowedImports`` list is folded into a two-level pattern:

* ``"*"``            -> every module is allowed (later patterns are ignored)
* ``"module"``       -> every part of ``module`` is allowed
* ``"module.part"``  -> ``part`` is added to the parts allowed from ``module``

Each ``import`` statement is then checked against that pattern. A statement
from an unknown module, or one binding any name outside the module's part
set, yields exactly one :class:`DisallowedImport` for the whole statement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import TYPE_CHECKING

from rulekeeper.engine.rules import ALLOW_ALL_IMPORTS
from rulekeeper.engine.syntax import field_of, kind_of, named_children_of, text_of
from rulekeeper.engine.violations import DisallowedImport

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tree_sitter import Node as TSNode

    from rulekeeper.engine.syntax import SyntaxTree

# ---------------------------------------------------------------------------
# Pattern data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AllowAllParts:
    """Every export of the module may be imported."""


@dataclass(frozen=True)
class RegularParts:
    """Only the listed exports may be imported."""

    parts: tuple[str, ...] = ()


ModulePartPattern = AllowAllParts | RegularParts


@dataclass(frozen=True)
class AllowAllModules:
    """Any import is allowed."""


@dataclass(frozen=True)
class RegularModules:
    mapping: dict[str, ModulePartPattern] = field(default_factory=dict)


AllowedImportPattern = AllowAllModules | RegularModules


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


def _split_pattern(pattern: str) -> tuple[str, str]:
    """``"a.b.c"`` -> ``("a", "c")``: module before the first dot, part after the last."""
    return pattern.split(".", 1)[0], pattern.rsplit(".", 1)[1]


def add_pattern(current: AllowedImportPattern, pattern: str) -> AllowedImportPattern:
    """Fold one allow-list entry into *current*, returning a new pattern."""
    match current:
        case AllowAllModules():
            return current
        case RegularModules(mapping=mapping):
            if pattern == ALLOW_ALL_IMPORTS:
                return AllowAllModules()
            if "." not in pattern:
                return RegularModules({**mapping, pattern: AllowAllParts()})

            module, part = _split_pattern(pattern)
            match mapping.get(module):
                case AllowAllParts():
                    return current
                case RegularParts(parts=parts):
                    return RegularModules({**mapping, module: RegularParts((*parts, part))})
                case None:
                    return RegularModules({**mapping, module: RegularParts((part,))})
                case other:
                    msg = f"Unhandled module pattern: {other!r}"
                    raise TypeError(msg)
        case _:
            msg = f"Unhandled import pattern: {current!r}"
            raise TypeError(msg)


def build_pattern(patterns: Iterable[str]) -> AllowedImportPattern:
    """Fold *patterns* left to right, starting from an empty module map."""
    return reduce(add_pattern, patterns, RegularModules())


# ---------------------------------------------------------------------------
# Match
# ---------------------------------------------------------------------------


def import_source(node: TSNode) -> str:
    """Module specifier of an import statement with its quotes stripped."""
    source = field_of(node, "source")
    if source is None:
        # TypeScript `import x = require("m")`
        for child in named_children_of(node):
            if kind_of(child) == "import_require_clause":
                source = field_of(child, "source")
    return text_of(source).strip("\"'`")


def bound_names(node: TSNode) -> list[str]:
    """Names an import statement brings in, checked against the part set.

    Default, namespace and ``import x = require()`` forms contribute their local
    identifier; a named specifier contributes its original exported name,
    never the ``as`` alias.
    """
    names: list[str] = []
    clause = None
    for child in named_children_of(node):
        if kind_of(child) == "import_clause":
            clause = child
        elif kind_of(child) == "import_require_clause":
            names.extend(
                text_of(c) for c in named_children_of(child) if kind_of(c) == "identifier"
            )
    if clause is None:
        return names

    for child in named_children_of(clause):
        if kind_of(child) == "identifier":
            names.append(text_of(child))
        elif kind_of(child) == "namespace_import":
            names.extend(
                text_of(c) for c in named_children_of(child) if kind_of(c) == "identifier"
            )
        elif kind_of(child) == "named_imports":
            for spec in named_children_of(child):
                if kind_of(spec) != "import_specifier":
                    continue
                original = field_of(spec, "name")
                names.append(text_of(original).strip("\"'"))
    return names


def check_import(
    node: TSNode, module: str, pattern: AllowedImportPattern
) -> DisallowedImport | None:
    """Return a violation for one import statement, or ``None`` if it is allowed."""
    match pattern:
        case AllowAllModules():
            return None
        case RegularModules(mapping=mapping):
            match mapping.get(module):
                case None:
                    return DisallowedImport(name=module, code=text_of(node))
                case AllowAllParts():
                    return None
                case RegularParts(parts=parts):
                    unmatched = [name for name in bound_names(node) if name not in parts]
                    if unmatched:
                        return DisallowedImport(name=module, code=text_of(node))
                    return None
                case other:
                    msg = f"Unhandled module pattern: {other!r}"
                    raise TypeError(msg)
        case _:
            msg = f"Unhandled import pattern: {pattern!r}"
            raise TypeError(msg)


def find_disallowed_imports(
    tree: SyntaxTree, allowed_imports: Iterable[str]
) -> list[DisallowedImport]:
    """Check every import statement in *tree* against *allowed_imports*."""
    pattern = build_pattern(allowed_imports)
    violations: list[DisallowedImport] = []
    for node in tree.walk():
        if kind_of(node) != "import_statement":
            continue
        violation = check_import(node, import_source(node), pattern)
        if violation is not None:
            violations.append(violation)
    return violations
