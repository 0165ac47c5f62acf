# rulekeeper:domain=engine
"""Violation model: one frozen record per rule kind."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class MissingExpectedFunction:
    """Required top-level functions that were not found."""

    missing: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.missing:
            msg = "MissingExpectedFunction.missing must not be empty"
            raise ValueError(msg)


@dataclass(frozen=True)
class DisallowedDeclarations:
    disallowed: str  # "const" | "let" | "var"
    code: str


@dataclass(frozen=True)
class DisallowedReassignment:
    code: str


@dataclass(frozen=True)
class DisallowedLoops:
    code: str


@dataclass(frozen=True)
class DisallowedIfStatements:
    code: str


@dataclass(frozen=True)
class DisallowedImport:
    name: str  # module specifier without quotes
    code: str  # the whole import statement


@dataclass(frozen=True)
class DisallowedConsole:
    code: str


@dataclass(frozen=True)
class DisallowedHelperFunctions:
    code: str


RuleViolation = (
    MissingExpectedFunction
    | DisallowedDeclarations
    | DisallowedReassignment
    | DisallowedLoops
    | DisallowedIfStatements
    | DisallowedImport
    | DisallowedConsole
    | DisallowedHelperFunctions
)

VIOLATION_TYPES: tuple[type[RuleViolation], ...] = (
    MissingExpectedFunction,
    DisallowedDeclarations,
    DisallowedReassignment,
    DisallowedLoops,
    DisallowedIfStatements,
    DisallowedImport,
    DisallowedConsole,
    DisallowedHelperFunctions,
)


def tag_of(violation: RuleViolation) -> str:
    """Variant name used as ``_tag`` when serializing."""
    return type(violation).__name__


def violation_to_dict(violation: RuleViolation) -> dict[str, object]:
    """Serialize as ``{"_tag": "<VariantName>", ...fields}``."""
    data: dict[str, object] = {"_tag": tag_of(violation)}
    for key, value in asdict(violation).items():
        data[key] = list(value) if isinstance(value, tuple) else value
    return data


def describe(violation: RuleViolation) -> str:
    """One-line human-readable explanation of *violation*."""
    match violation:
        case MissingExpectedFunction(missing=missing):
            names = ", ".join(missing)
            return f"Missing expected function(s): {names}"
        case DisallowedDeclarations(disallowed=kind):
            return f"'{kind}' declarations are not allowed"
        case DisallowedReassignment():
            return "Reassignment is not allowed"
        case DisallowedLoops():
            return "Loops are not allowed"
        case DisallowedIfStatements():
            return "If statements are not allowed"
        case DisallowedImport(name=name):
            return f"Import from '{name}' is not allowed"
        case DisallowedConsole():
            return "Using console is not allowed"
        case DisallowedHelperFunctions():
            return "Helper functions are not allowed"
        case _:
            msg = f"Unhandled violation type: {type(violation).__name__}"
            raise TypeError(msg)


def code_of(violation: RuleViolation) -> str | None:
    """Offending source text, or ``None`` for violations without a location."""
    match violation:
        case MissingExpectedFunction():
            return None
        case (
            DisallowedDeclarations(code=code)
            | DisallowedReassignment(code=code)
            | DisallowedLoops(code=code)
            | DisallowedIfStatements(code=code)
            | DisallowedImport(code=code)
            | DisallowedConsole(code=code)
            | DisallowedHelperFunctions(code=code)
        ):
            return code
        case _:
            msg = f"Unhandled violation type: {type(violation).__name__}"
            raise TypeError(msg)
