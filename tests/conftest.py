"""Shared test fixtures for rulekeeper."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from rulekeeper.engine.rules import Rules, parse_rules
from rulekeeper.engine.syntax import clear_cache

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clear_lang_cache() -> None:
    """Clear language cache before each test to avoid cross-test pollution."""
    clear_cache()


@pytest.fixture()
def make_rules() -> Callable[..., Rules]:
    """Build Rules from camelCase keyword arguments, going through schema validation."""

    def _make(**fields: object) -> Rules:
        return parse_rules(dict(fields))

    return _make


@pytest.fixture()
def rules_file(tmp_path: Path) -> Callable[[dict[str, object]], Path]:
    """Write a rules document to ``rules.json`` and return its path."""

    def _write(data: dict[str, object]) -> Path:
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
