"""rulekeeper TUI -- interactive rule checker.

Requires the 'textual' package: pip install rulekeeper[tui]
"""

from __future__ import annotations


def launch(*, code: str = "", rules: str | None = None) -> None:
    """Launch the rule checker with optional initial *code* and *rules* text.

    Raises ImportError if textual is not installed.
    """
    from rulekeeper.tui.app import RuleKeeperApp

    app = RuleKeeperApp(code=code, rules=rules)
    app.run()
