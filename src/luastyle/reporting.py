"""
Reporting and output formatting.

Handles:
- Violation dataclass
- Ordering (path, line, column, rule id)
- Human-readable output
- JSON output
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

from luastyle.errors import Diagnostic


class Severity(Enum):
    """Violation severity levels."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Violation:
    """A single style non-conformance."""
    rule_id: str
    line: int
    column: int
    offset: int
    message: str
    severity: Severity = Severity.WARNING
    path: str = "<unknown>"

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: [{self.rule_id}] {self.message}"

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "rule_id": self.rule_id,
            "message": self.message,
            "severity": self.severity.value,
        }


def sort_key(v: Violation) -> tuple:
    return (v.path, v.line, v.column, v.rule_id)


class Reporter:
    """Collects violations and diagnostics and formats them."""

    def __init__(self) -> None:
        self._violations: List[Violation] = []
        self.diagnostics: List[Diagnostic] = []
        self.files_checked = 0

    def add(self, violation: Violation) -> None:
        self._violations.append(violation)

    def extend(self, violations: Iterable[Violation]) -> None:
        self._violations.extend(violations)

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def violations(self) -> List[Violation]:
        """All violations, ordered by path, line, column, then rule id."""
        return sorted(self._violations, key=sort_key)

    @property
    def has_faults(self) -> bool:
        return bool(self.diagnostics)

    def render_human(self) -> str:
        """Render violations as `<path>:<line>:<column>: [<rule>] <message>` lines."""
        lines = [str(v) for v in self.violations]
        count = len(self._violations)
        if count:
            lines.append("")
            lines.append(f"{count} violation(s) in {self.files_checked} file(s)")
        return "\n".join(lines)

    def render_diagnostics(self) -> str:
        ordered = sorted(self.diagnostics, key=lambda d: (d.path, d.line, d.column, d.component))
        return "\n".join(str(d) for d in ordered)

    def render_json(self) -> str:
        """Render violations and diagnostics as JSON."""
        payload = {
            "files_checked": self.files_checked,
            "violations": [v.to_dict() for v in self.violations],
            "diagnostics": [
                d.to_dict()
                for d in sorted(self.diagnostics, key=lambda d: (d.path, d.line, d.column, d.component))
            ],
        }
        return json.dumps(payload, indent=2)
