"""Tests for rulekeeper.engine.imports — allow-list pattern building and matching."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rulekeeper.engine.enforcer import validate
from rulekeeper.engine.imports import (
    AllowAllModules,
    AllowAllParts,
    RegularModules,
    RegularParts,
    add_pattern,
    bound_names,
    build_pattern,
    import_source,
)
from rulekeeper.engine.syntax import parse_code
from rulekeeper.engine.violations import DisallowedImport

if TYPE_CHECKING:
    from collections.abc import Callable

    from rulekeeper.engine.rules import Rules


IMPORTS_SOURCE = """import { Array as abc, pipe as def } from "effect"
import * as fs from "node:fs"
import lodash from "lodash"
"""


def _first_import(source: str):  # noqa: ANN202
    tree = parse_code(source)
    return next(n for n in tree.walk() if n.type == "import_statement")


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


class TestBuildPattern:
    def test_empty_list(self) -> None:
        assert build_pattern([]) == RegularModules({})

    def test_wildcard_allows_everything(self) -> None:
        assert build_pattern(["*"]) == AllowAllModules()

    def test_wildcard_short_circuits_later_patterns(self) -> None:
        assert build_pattern(["*", "effect.pipe", "lodash"]) == AllowAllModules()

    def test_wildcard_after_modules(self) -> None:
        assert build_pattern(["lodash", "*"]) == AllowAllModules()

    def test_whole_module(self) -> None:
        assert build_pattern(["lodash"]) == RegularModules({"lodash": AllowAllParts()})

    def test_parts_accumulate_in_order(self) -> None:
        assert build_pattern(["effect.pipe", "effect.Array"]) == RegularModules(
            {"effect": RegularParts(("pipe", "Array"))}
        )

    def test_parts_after_whole_module_are_ignored(self) -> None:
        assert build_pattern(["effect", "effect.pipe"]) == RegularModules(
            {"effect": AllowAllParts()}
        )

    def test_whole_module_replaces_parts(self) -> None:
        assert build_pattern(["effect.pipe", "effect"]) == RegularModules(
            {"effect": AllowAllParts()}
        )

    def test_deep_pattern_uses_first_and_last_segment(self) -> None:
        assert build_pattern(["a.b.c"]) == RegularModules({"a": RegularParts(("c",))})

    def test_add_pattern_does_not_mutate(self) -> None:
        start = RegularModules({"effect": RegularParts(("pipe",))})
        add_pattern(start, "effect.Array")
        assert start == RegularModules({"effect": RegularParts(("pipe",))})


# ---------------------------------------------------------------------------
# Import statement helpers
# ---------------------------------------------------------------------------


class TestImportNodes:
    def test_source_double_quotes(self) -> None:
        assert import_source(_first_import('import x from "effect"\n')) == "effect"

    def test_source_single_quotes(self) -> None:
        assert import_source(_first_import("import x from 'effect'\n")) == "effect"

    def test_bound_names_use_original_specifier_name(self) -> None:
        node = _first_import('import { Array as abc, pipe } from "effect"\n')
        assert bound_names(node) == ["Array", "pipe"]

    def test_bound_names_default_and_namespace(self) -> None:
        assert bound_names(_first_import('import React from "react"\n')) == ["React"]
        assert bound_names(_first_import('import * as E from "effect"\n')) == ["E"]

    def test_bound_names_default_plus_named(self) -> None:
        node = _first_import('import React, { useState } from "react"\n')
        assert bound_names(node) == ["React", "useState"]

    def test_require_import(self) -> None:
        node = _first_import('import fs = require("node:fs")\n')
        assert import_source(node) == "node:fs"
        assert bound_names(node) == ["fs"]

    def test_side_effect_import_binds_nothing(self) -> None:
        assert bound_names(_first_import('import "polyfill"\n')) == []


# ---------------------------------------------------------------------------
# Matching through validate()
# ---------------------------------------------------------------------------


class TestAllowedImports:
    def test_absent_allows_everything(self, make_rules: Callable[..., Rules]) -> None:
        assert validate(IMPORTS_SOURCE, make_rules()) == []

    def test_empty_flags_every_import(self, make_rules: Callable[..., Rules]) -> None:
        result = validate(IMPORTS_SOURCE, make_rules(allowedImports=[]))
        assert [v.name for v in result] == ["effect", "node:fs", "lodash"]  # type: ignore[union-attr]
        assert all(isinstance(v, DisallowedImport) for v in result)

    def test_violation_carries_whole_statement(self, make_rules: Callable[..., Rules]) -> None:
        result = validate('import lodash from "lodash"\n', make_rules(allowedImports=[]))
        assert result == [DisallowedImport(name="lodash", code='import lodash from "lodash"')]

    def test_alias_checked_by_original_name(self, make_rules: Callable[..., Rules]) -> None:
        source = 'import { Array as abc, pipe as def } from "effect"\n'
        rules = make_rules(allowedImports=["effect.pipe", "effect.Array"])
        assert validate(source, rules) == []

    def test_alias_name_is_not_enough(self, make_rules: Callable[..., Rules]) -> None:
        source = 'import { Array as pipe } from "effect"\n'
        rules = make_rules(allowedImports=["effect.pipe"])
        assert len(validate(source, rules)) == 1

    def test_wildcard(self, make_rules: Callable[..., Rules]) -> None:
        rules = make_rules(allowedImports=["*", "effect.pipe"])
        assert validate(IMPORTS_SOURCE, rules) == []

    def test_whole_modules(self, make_rules: Callable[..., Rules]) -> None:
        rules = make_rules(allowedImports=["effect", "lodash"])
        result = validate(IMPORTS_SOURCE, rules)
        assert result == [DisallowedImport(name="node:fs", code='import * as fs from "node:fs"')]

    def test_several_unmatched_names_yield_one_violation(
        self, make_rules: Callable[..., Rules]
    ) -> None:
        source = 'import { Option, Either, pipe } from "effect"\n'
        rules = make_rules(allowedImports=["effect.pipe"])
        assert validate(source, rules) == [
            DisallowedImport(name="effect", code='import { Option, Either, pipe } from "effect"')
        ]

    def test_default_import_checked_against_parts(
        self, make_rules: Callable[..., Rules]
    ) -> None:
        rules = make_rules(allowedImports=["react.React"])
        assert validate('import React from "react"\n', rules) == []
        assert len(validate('import Preact from "react"\n', rules)) == 1

    def test_side_effect_import(self, make_rules: Callable[..., Rules]) -> None:
        source = 'import "effect"\n'
        assert validate(source, make_rules(allowedImports=["effect.pipe"])) == []
        assert len(validate(source, make_rules(allowedImports=["lodash"]))) == 1

    def test_require_import_checked_by_local_name(
        self, make_rules: Callable[..., Rules]
    ) -> None:
        source = 'import x = require("m")\n'
        assert validate(source, make_rules(allowedImports=["m.x"])) == []
        assert validate(source, make_rules(allowedImports=["m.y"])) == [
            DisallowedImport(name="m", code='import x = require("m")')
        ]
        assert validate(source, make_rules(allowedImports=["m"])) == []

    def test_each_statement_checked_separately(self, make_rules: Callable[..., Rules]) -> None:
        source = 'import { pipe } from "effect"\nimport { Option } from "effect"\n'
        result = validate(source, make_rules(allowedImports=["effect.pipe"]))
        assert result == [DisallowedImport(name="effect", code='import { Option } from "effect"')]
