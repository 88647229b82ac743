"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from luastyle.config import config_from_mapping
from luastyle.engine import Linter
from luastyle.rules import RULES


def only(*rule_ids, **parameters):
    """Config with just `rule_ids` enabled; keyword args go to whichever rule declares them."""
    rules = {}
    for rule_id in rule_ids:
        declared = {p.name for p in RULES[rule_id].parameters}
        params = {k: v for k, v in parameters.items() if k in declared}
        rules[rule_id] = {"enabled": True, "parameters": params}
    return config_from_mapping({"default_enabled": False, "rules": rules})


def lint(source, *rule_ids, **parameters):
    """Lint `source` with only the given rules enabled and return the FileResult."""
    return Linter(only(*rule_ids, **parameters)).lint_source(source, "test.lua")


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def clean_file(fixtures_dir):
    return fixtures_dir / "clean.lua"


@pytest.fixture
def messy_file(fixtures_dir):
    return fixtures_dir / "messy.lua"
