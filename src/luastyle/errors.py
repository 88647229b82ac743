"""
Tooling faults.

Style violations are ordinary output and never raised. Everything here is a
fault in the linter's own operation: malformed input, bad configuration, or a
rule that crashed.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional


class LuaStyleError(Exception):
    """Base class for luastyle tooling faults."""


class MalformedLiteral(LuaStyleError):
    """A string or comment literal is not terminated."""

    def __init__(self, message: str, offset: int, line: int, column: int):
        self.offset = offset
        self.line = line
        self.column = column
        super().__init__(f"{message} starting at line {line}, column {column}")


class ConfigError(LuaStyleError):
    """Configuration could not be loaded or failed validation."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class RuleFault(LuaStyleError):
    """A rule raised while checking a file."""

    def __init__(self, rule_id: str, cause: BaseException):
        self.rule_id = rule_id
        self.cause = cause
        super().__init__(f"rule '{rule_id}' failed: {type(cause).__name__}: {cause}")


@dataclass(frozen=True)
class Diagnostic:
    """A tooling fault attributed to the component that raised it."""
    component: str  # "tokenizer", "config", "rule:<id>", "io", "pool"
    message: str
    path: str = "<unknown>"
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: error: {self.component}: {self.message}"

    def to_dict(self) -> dict:
        return asdict(self)
