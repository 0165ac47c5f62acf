# rulekeeper:domain=engine
"""Rule schema: decode and validate rules documents (JSON or YAML)."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

import yaml

if TYPE_CHECKING:
    from pathlib import Path

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DECLARATION_KINDS: tuple[str, ...] = ("const", "let", "var")
DISALLOW_OPTIONS: frozenset[str] = frozenset(
    {"reassignment", "loops", "if-statements", "console", "helper-functions"}
)
ALLOW_ALL_IMPORTS = "*"

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class RulesError(ValueError):
    """Base class for problems with a rules document."""


class RulesParseError(RulesError):
    """The rules text is not valid JSON/YAML."""


class RulesSchemaError(RulesError):
    """The rules document decodes but does not match the schema."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Rules:
    """Active constraints for one submission.

    Every field is optional: ``None`` means the constraint is not imposed,
    which is different from an empty tuple (e.g. ``allowed_imports=()``
    forbids every import).
    """

    expected_functions: tuple[str, ...] | None = None
    valid_declarations: tuple[str, ...] | None = None
    allowed_imports: tuple[str, ...] | None = None
    disallow: frozenset[str] | None = None

    def disallows(self, option: str) -> bool:
        return self.disallow is not None and option in self.disallow

    def to_dict(self) -> dict[str, list[str]]:
        """Serialize back to the camelCase document shape, omitting absent fields."""
        data: dict[str, list[str]] = {}
        if self.expected_functions is not None:
            data["expectedFunctions"] = list(self.expected_functions)
        if self.valid_declarations is not None:
            data["validDeclarations"] = list(self.valid_declarations)
        if self.allowed_imports is not None:
            data["allowedImports"] = list(self.allowed_imports)
        if self.disallow is not None:
            data["disallow"] = sorted(self.disallow)
        return data


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_string_list(data: dict[str, object], key: str) -> tuple[str, ...] | None:
    """Return ``data[key]`` as a tuple of strings, or ``None`` when the key is absent."""
    if key not in data:
        return None
    raw = data[key]
    if not isinstance(raw, list):
        msg = f"rules: '{key}' must be a list of strings"
        raise RulesSchemaError(msg)
    for idx, item in enumerate(raw):
        if not isinstance(item, str):
            msg = f"rules: '{key}' item at index {idx} must be a string, got {type(item).__name__}"
            raise RulesSchemaError(msg)
    return tuple(raw)


def _check_choices(key: str, values: tuple[str, ...], allowed: frozenset[str]) -> None:
    for value in values:
        if value not in allowed:
            msg = f"rules: invalid {key} entry '{value}', must be one of {sorted(allowed)}"
            raise RulesSchemaError(msg)


def parse_rules(data: object) -> Rules:
    """Validate a decoded rules document and return a :class:`Rules`.

    Unknown keys are ignored. Raises :class:`RulesSchemaError` on type or
    value errors.
    """
    if not isinstance(data, dict):
        msg = "rules: document must be a JSON object"
        raise RulesSchemaError(msg)

    expected = _parse_string_list(data, "expectedFunctions")
    declarations = _parse_string_list(data, "validDeclarations")
    allowed_imports = _parse_string_list(data, "allowedImports")
    disallow = _parse_string_list(data, "disallow")

    if declarations is not None:
        _check_choices("validDeclarations", declarations, frozenset(DECLARATION_KINDS))
    if disallow is not None:
        _check_choices("disallow", disallow, DISALLOW_OPTIONS)

    return Rules(
        # Ordered sets: keep first occurrence.
        expected_functions=tuple(dict.fromkeys(expected)) if expected is not None else None,
        valid_declarations=tuple(dict.fromkeys(declarations)) if declarations is not None else None,
        allowed_imports=allowed_imports,
        disallow=frozenset(disallow) if disallow is not None else None,
    )


def parse_rules_text(text: str) -> Rules:
    """Decode JSON rules text and validate it.

    Raises :class:`RulesParseError` when *text* is not JSON and
    :class:`RulesSchemaError` when it does not match the schema.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Cannot parse rules: {exc}"
        raise RulesParseError(msg) from exc
    return parse_rules(data)


def load_rules(rules_path: Path) -> Rules:
    """Load a rules file. ``.yml``/``.yaml`` files go through YAML, everything else JSON."""
    text = rules_path.read_text(encoding="utf-8")
    if rules_path.suffix.lower() not in (".yml", ".yaml"):
        return parse_rules_text(text)

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Cannot parse rules: {exc}"
        raise RulesParseError(msg) from exc
    if data is None:
        data = {}
    return parse_rules(data)
