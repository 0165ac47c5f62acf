# rulekeeper:domain=engine
"""Rule enforcer: parse once, run every detector, collect all violations in order."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rulekeeper.engine.detectors import DETECTORS
from rulekeeper.engine.syntax import DEFAULT_DIALECT, parse_code
from rulekeeper.engine.writer import Writer, sequence

if TYPE_CHECKING:
    from collections.abc import Callable

    from rulekeeper.engine.detectors import Detector
    from rulekeeper.engine.rules import Rules
    from rulekeeper.engine.syntax import SyntaxTree
    from rulekeeper.engine.violations import RuleViolation

logger = logging.getLogger(__name__)


def _step(
    name: str, detector: Detector, rules: Rules
) -> Callable[[SyntaxTree], Writer[SyntaxTree, RuleViolation]]:
    def run(tree: SyntaxTree) -> Writer[SyntaxTree, RuleViolation]:
        found = detector(tree, rules)
        if found:
            logger.debug("%s: %d violation(s)", name, len(found))
        return Writer.error(tree, found)

    return run


def enforce(tree: SyntaxTree, rules: Rules) -> Writer[SyntaxTree, RuleViolation]:
    """Run all detectors over an already parsed *tree*."""
    return sequence(tree, [_step(name, detector, rules) for name, detector in DETECTORS])


def validate_code(
    code: str, rules: Rules, *, dialect: str = DEFAULT_DIALECT
) -> Writer[SyntaxTree, RuleViolation]:
    """Parse *code* and run every detector; the tree stays available as the writer value."""
    return enforce(parse_code(code, dialect), rules)


def validate(code: str, rules: Rules, *, dialect: str = DEFAULT_DIALECT) -> list[RuleViolation]:
    """Check *code* against *rules* and return every violation.

    Violations come out grouped by detector in a fixed order (expected
    functions, declarations, reassignment, loops, if statements, console,
    helper functions, imports) and in source order within a detector. A
    detector whose rule is absent contributes nothing.
    """
    _, violations = validate_code(code, rules, dialect=dialect).run()
    return violations
