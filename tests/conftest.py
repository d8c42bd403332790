"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import List

import pytest

from ts_validator.analysis.validation import ValidationRuleSet
from ts_validator.analysis.visitor import visit_module
from ts_validator.models.violation import Violation
from ts_validator.parsers.typescript import TypeScriptParser


@pytest.fixture
def fixtures_path() -> Path:
    """Return the path to test fixtures."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def express_app_path(fixtures_path: Path) -> Path:
    """Express app with validated and unvalidated handlers."""
    return fixtures_path / "express_app"


@pytest.fixture
def safe_app_path(fixtures_path: Path) -> Path:
    """Express app where every handler validates its input."""
    return fixtures_path / "safe_app"


@pytest.fixture
def broken_app_path(fixtures_path: Path) -> Path:
    """App containing a file with a syntax error."""
    return fixtures_path / "broken_app"


@pytest.fixture(scope="session")
def ts_parser() -> TypeScriptParser:
    return TypeScriptParser()


@pytest.fixture
def analyze(ts_parser):
    """Parse a snippet and return its violations."""
    def _analyze(source: str, rules: ValidationRuleSet = ValidationRuleSet.ZOD_STRICT) -> List[Violation]:
        parsed = ts_parser.parse_source(source, "test.ts")
        return visit_module(parsed.source_map, parsed.module, rules)
    return _analyze
