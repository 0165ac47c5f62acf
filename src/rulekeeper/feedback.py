# rulekeeper:service=tui
"""Feedback text for the interactive editor: rules text + code in, message out."""

from __future__ import annotations

import json

from rulekeeper.engine.enforcer import validate
from rulekeeper.engine.rules import RulesParseError, RulesSchemaError, parse_rules_text
from rulekeeper.engine.violations import violation_to_dict

CANNOT_PARSE_RULES = "Cannot parse rules"

SAMPLE_RULES = """{
  "expectedFunctions": ["f"],
  "validDeclarations": ["const"],
  "allowedImports": ["*"],
  "disallow": [
    "reassignment",
    "loops",
    "if-statements",
    "console",
    "helper-functions"
  ]
}"""


def generate_feedback(code: str, rules_text: str) -> str:
    """Render the feedback pane contents.

    Rules that are not JSON and rules that don't match the schema are
    reported as plain messages; otherwise the violation list is returned
    as indented JSON (``[]`` when the code is clean).
    """
    try:
        rules = parse_rules_text(rules_text)
    except RulesParseError:
        return CANNOT_PARSE_RULES
    except RulesSchemaError as exc:
        return f"Rules do not match schema: {exc}"

    violations = validate(code, rules)
    return json.dumps([violation_to_dict(v) for v in violations], indent=2)
