"""Rule validation engine: rules schema, violations, detectors, import matcher."""

# rulekeeper:domain=engine

from rulekeeper.engine.enforcer import enforce, validate, validate_code
from rulekeeper.engine.rules import (
    Rules,
    RulesError,
    RulesParseError,
    RulesSchemaError,
    load_rules,
    parse_rules,
    parse_rules_text,
)
from rulekeeper.engine.syntax import SyntaxTree, parse_code
from rulekeeper.engine.violations import (
    DisallowedConsole,
    DisallowedDeclarations,
    DisallowedHelperFunctions,
    DisallowedIfStatements,
    DisallowedImport,
    DisallowedLoops,
    DisallowedReassignment,
    MissingExpectedFunction,
    RuleViolation,
    describe,
    violation_to_dict,
)
from rulekeeper.engine.writer import Writer, sequence

__all__ = [
    "DisallowedConsole",
    "DisallowedDeclarations",
    "DisallowedHelperFunctions",
    "DisallowedIfStatements",
    "DisallowedImport",
    "DisallowedLoops",
    "DisallowedReassignment",
    "MissingExpectedFunction",
    "RuleViolation",
    "Rules",
    "RulesError",
    "RulesParseError",
    "RulesSchemaError",
    "SyntaxTree",
    "Writer",
    "describe",
    "enforce",
    "load_rules",
    "parse_code",
    "parse_rules",
    "parse_rules_text",
    "sequence",
    "validate",
    "validate_code",
    "violation_to_dict",
]
