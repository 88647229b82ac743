"""
luastyle.rules - Style rule registry.

Importing this package registers every rule in a fixed order; that order is
also the order rules run in.
"""

from luastyle.rules.base import RULES, ParamSpec, Rule, register, report, report_at
from luastyle.rules import (  # noqa: F401  (registration side effect)
    quoting,
    indentation,
    spacing,
    commas,
    declarations,
    naming,
    semicolons,
    layout,
    comments,
)


def all_rules() -> list:
    """Registered rules in run order."""
    return list(RULES.values())


__all__ = [
    "RULES",
    "ParamSpec",
    "Rule",
    "all_rules",
    "register",
    "report",
    "report_at",
]
