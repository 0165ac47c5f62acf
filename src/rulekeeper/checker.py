# rulekeeper:service=cli
"""Check orchestrator: load rules, read the submission, validate, format results."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rulekeeper.engine.enforcer import validate_code
from rulekeeper.engine.rules import RulesError, load_rules
from rulekeeper.engine.syntax import DEFAULT_DIALECT, GrammarUnavailableError
from rulekeeper.engine.violations import code_of, describe, tag_of, violation_to_dict

if TYPE_CHECKING:
    from pathlib import Path

    from rulekeeper.engine.rules import Rules
    from rulekeeper.engine.violations import RuleViolation


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CheckError(Exception):
    """Raised when a check cannot run (bad rules file, missing grammar)."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class CheckResult:
    """Result of checking one submission."""

    violations: list[RuleViolation] = field(default_factory=list)
    rules: dict[str, list[str]] = field(default_factory=dict)
    source_name: str = "<stdin>"
    syntax_error_lines: list[int] = field(default_factory=list)
    elapsed_ms: float = 0.0


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def check_code(
    code: str,
    rules: Rules,
    *,
    source_name: str = "<stdin>",
    dialect: str = DEFAULT_DIALECT,
) -> CheckResult:
    """Validate *code* against already loaded *rules*.

    Raises
    ------
    CheckError
        When the grammar for *dialect* is not available.
    """
    start = time.monotonic()
    try:
        tree, violations = validate_code(code, rules, dialect=dialect).run()
    except (GrammarUnavailableError, ValueError) as exc:
        raise CheckError(str(exc)) from exc

    return CheckResult(
        violations=violations,
        rules=rules.to_dict(),
        source_name=source_name,
        syntax_error_lines=tree.error_lines() if tree.has_error else [],
        elapsed_ms=(time.monotonic() - start) * 1000,
    )


def check_file(
    code: str,
    rules_path: Path,
    *,
    source_name: str = "<stdin>",
    dialect: str = DEFAULT_DIALECT,
) -> CheckResult:
    """Load rules from *rules_path* and validate *code* against them.

    Raises
    ------
    CheckError
        When the rules file cannot be parsed or does not match the schema.
    """
    try:
        rules = load_rules(rules_path)
    except RulesError as exc:
        msg = f"Invalid rules file {rules_path}: {exc}"
        raise CheckError(msg) from exc
    return check_code(code, rules, source_name=source_name, dialect=dialect)


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def _indent(code: str, prefix: str = "    ") -> list[str]:
    return [f"{prefix}{line}" for line in code.strip("\n").splitlines()]


def format_rich(result: CheckResult) -> str:
    """Format a CheckResult as human-readable text.

    Example output with violations::

        Checked main.ts against 3 rule(s)

        x DisallowedLoops
          Loops are not allowed
            for (let i = 0; i < 3; i++) {}

        1 violation found (2.1ms)
    """
    lines: list[str] = []
    lines.append(f"Checked {result.source_name} against {len(result.rules)} rule(s)")
    if result.syntax_error_lines:
        joined = ", ".join(str(n) for n in result.syntax_error_lines)
        lines.append(f"⚠ Syntax errors on line(s) {joined}; results may be incomplete")
    lines.append("")

    elapsed_str = f"{result.elapsed_ms:.1f}ms"
    if not result.violations:
        lines.append(f"✓ No violations found ({elapsed_str})")
        return "\n".join(lines)

    for v in result.violations:
        lines.append(f"✗ {tag_of(v)}")
        lines.append(f"  {describe(v)}")
        code = code_of(v)
        if code:
            lines.extend(_indent(code))
        lines.append("")

    count = len(result.violations)
    noun = "violation" if count == 1 else "violations"
    lines.append(f"{count} {noun} found ({elapsed_str})")
    return "\n".join(lines)


def format_json(result: CheckResult) -> str:
    """Format a CheckResult as structured JSON with ``violations`` and ``summary``."""
    output: dict[str, object] = {
        "violations": [violation_to_dict(v) for v in result.violations],
        "summary": {
            "source": result.source_name,
            "rules": result.rules,
            "violations_count": len(result.violations),
            "syntax_error_lines": result.syntax_error_lines,
            "elapsed_ms": result.elapsed_ms,
        },
    }
    return json.dumps(output, indent=2)


def format_porcelain(result: CheckResult) -> str:
    """One line per violation: ``tag:detail:code`` with newlines in code collapsed.

    Returns empty string when there are no violations.
    """
    lines: list[str] = []
    for v in result.violations:
        data = violation_to_dict(v)
        if "missing" in data:
            detail = ",".join(data["missing"])  # type: ignore[arg-type]
        else:
            detail = str(data.get("disallowed", data.get("name", "")))
        code = " ".join((code_of(v) or "").split())
        lines.append(f"{tag_of(v)}:{detail}:{code}")
    return "\n".join(lines)
