"""rulekeeper: rule enforcement for coding-exercise submissions."""

__version__ = "0.4.0"
