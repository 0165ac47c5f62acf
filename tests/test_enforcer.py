"""Tests for rulekeeper.engine.enforcer — detector orchestration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rulekeeper.engine.detectors import DETECTORS
from rulekeeper.engine.enforcer import enforce, validate, validate_code
from rulekeeper.engine.rules import Rules
from rulekeeper.engine.syntax import parse_code
from rulekeeper.engine.violations import (
    DisallowedConsole,
    DisallowedDeclarations,
    DisallowedHelperFunctions,
    DisallowedIfStatements,
    DisallowedImport,
    DisallowedLoops,
    DisallowedReassignment,
    MissingExpectedFunction,
    tag_of,
)

if TYPE_CHECKING:
    from collections.abc import Callable


EVERYTHING_SOURCE = """import { readFile } from "fs"

function helper() {
  let total = 0
  for (const x of [1, 2]) {
    total += x
  }
  if (total > 1) {
    console.log(total)
  }
  return total
}
"""

ALL_RULES = {
    "expectedFunctions": ["main"],
    "validDeclarations": ["const"],
    "allowedImports": [],
    "disallow": ["reassignment", "loops", "if-statements", "console", "helper-functions"],
}


class TestOrdering:
    def test_detector_names_are_fixed(self) -> None:
        assert [name for name, _ in DETECTORS] == [
            "expected-functions",
            "declaration-kind",
            "reassignment",
            "loops",
            "if-statements",
            "console-usage",
            "helper-functions",
            "import-allowlist",
        ]

    def test_violations_grouped_by_detector(self, make_rules: Callable[..., Rules]) -> None:
        result = validate(EVERYTHING_SOURCE, make_rules(**ALL_RULES))
        assert [type(v) for v in result] == [
            MissingExpectedFunction,
            DisallowedDeclarations,
            DisallowedReassignment,
            DisallowedLoops,
            DisallowedIfStatements,
            DisallowedConsole,
            DisallowedHelperFunctions,
            DisallowedImport,
        ]

    def test_tags_are_stable(self, make_rules: Callable[..., Rules]) -> None:
        result = validate(EVERYTHING_SOURCE, make_rules(**ALL_RULES))
        assert tag_of(result[0]) == "MissingExpectedFunction"
        assert tag_of(result[-1]) == "DisallowedImport"


class TestCollectAll:
    def test_empty_rules_never_flag(self) -> None:
        assert validate(EVERYTHING_SOURCE, Rules()) == []

    def test_empty_source(self, make_rules: Callable[..., Rules]) -> None:
        result = validate("", make_rules(**ALL_RULES))
        assert result == [MissingExpectedFunction(missing=("main",))]

    def test_idempotent(self, make_rules: Callable[..., Rules]) -> None:
        rules = make_rules(**ALL_RULES)
        assert validate(EVERYTHING_SOURCE, rules) == validate(EVERYTHING_SOURCE, rules)

    def test_rules_are_independent(self, make_rules: Callable[..., Rules]) -> None:
        loops_only = validate(EVERYTHING_SOURCE, make_rules(disallow=["loops"]))
        console_only = validate(EVERYTHING_SOURCE, make_rules(disallow=["console"]))
        both = validate(EVERYTHING_SOURCE, make_rules(disallow=["loops", "console"]))
        assert both == loops_only + console_only

    def test_tree_is_the_writer_value(self, make_rules: Callable[..., Rules]) -> None:
        tree, violations = validate_code("const x = 1\n", make_rules(disallow=["loops"])).run()
        assert tree.root.type == "program"
        assert violations == []

    def test_enforce_on_parsed_tree(self, make_rules: Callable[..., Rules]) -> None:
        tree = parse_code("while (true) {}\n")
        _, violations = enforce(tree, make_rules(disallow=["loops"])).run()
        assert violations == [DisallowedLoops(code="while (true) {}")]

    def test_tsx_dialect(self, make_rules: Callable[..., Rules]) -> None:
        source = "const App = () => <div>{console.log(1)}</div>\n"
        result = validate(source, make_rules(disallow=["console"]), dialect="tsx")
        assert len(result) == 1
        assert isinstance(result[0], DisallowedConsole)

    def test_syntax_errors_still_checked(self, make_rules: Callable[..., Rules]) -> None:
        source = "while (true) {}\nconst = ;\n"
        result = validate(source, make_rules(disallow=["loops"]))
        assert DisallowedLoops(code="while (true) {}") in result
