"""
Rule capability and registry.

A rule is any object with `rule_id`, `description`, `severity`,
`parameters` and a `check(source, options)` method returning violations.
Rules are registered once, in a fixed order, and never hold state between
calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from luastyle.errors import ConfigError
from luastyle.lexer import Token
from luastyle.reporting import Severity, Violation
from luastyle.structure import SourceFile


@dataclass(frozen=True)
class ParamSpec:
    """A rule parameter with its default and accepted values."""
    name: str
    type: type
    default: Any
    choices: Optional[Tuple[Any, ...]] = None
    minimum: Optional[int] = None
    description: str = ""

    def validate(self, value: Any, where: str) -> Any:
        # bool is an int subclass; keep them apart
        if self.type is int and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigError(f"{where}.{self.name} must be an integer, got {value!r}")
        if not isinstance(value, self.type):
            raise ConfigError(f"{where}.{self.name} must be {self.type.__name__}, got {value!r}")
        if self.choices is not None and value not in self.choices:
            allowed = "|".join(str(c) for c in self.choices)
            raise ConfigError(f"{where}.{self.name} must be one of {allowed}, got {value!r}")
        if self.minimum is not None and value < self.minimum:
            raise ConfigError(f"{where}.{self.name} must be >= {self.minimum}, got {value!r}")
        return value


class Rule(Protocol):
    rule_id: str
    description: str
    severity: Severity
    parameters: Tuple[ParamSpec, ...]

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        ...


RULES: Dict[str, Rule] = {}


def register(cls):
    """Class decorator: instantiate the rule and add it to the registry."""
    rule = cls()
    if rule.rule_id in RULES:
        raise ValueError(f"duplicate rule id {rule.rule_id!r}")
    RULES[rule.rule_id] = rule
    return cls


def report(rule: Rule, source: SourceFile, token: Token, message: str) -> Violation:
    """Build a violation anchored at `token`."""
    return Violation(
        rule_id=rule.rule_id,
        line=token.line,
        column=token.column,
        offset=token.offset,
        message=message,
        severity=rule.severity,
        path=source.path,
    )


def report_at(rule: Rule, source: SourceFile, offset: int, line: int, column: int, message: str) -> Violation:
    """Build a violation at an explicit position."""
    return Violation(
        rule_id=rule.rule_id,
        line=line,
        column=column,
        offset=offset,
        message=message,
        severity=rule.severity,
        path=source.path,
    )
