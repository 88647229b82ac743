"""Indentation width consistency."""

from __future__ import annotations

from typing import Any, List, Mapping

from luastyle.lexer import TokenType
from luastyle.reporting import Severity, Violation
from luastyle.rules.base import ParamSpec, register, report
from luastyle.structure import SourceFile


@register
class IndentationRule:
    """Leading whitespace must be a multiple of the configured width."""

    rule_id = "indentation"
    description = "Indent with a consistent multiple of the indent width"
    severity = Severity.WARNING
    parameters = (
        ParamSpec("indentWidth", int, 4, minimum=1, description="Columns per indent level"),
    )

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        width = options["indentWidth"]
        tokens = source.tokens
        issues = []
        for i, tok in enumerate(tokens):
            if tok.type is not TokenType.WHITESPACE or tok.column != 1:
                continue
            # Whitespace-only lines belong to trailing-whitespace.
            if i + 1 >= len(tokens) or tokens[i + 1].type is TokenType.NEWLINE:
                continue
            text = tok.text
            if " " in text and "\t" in text:
                issues.append(report(self, source, tok, "Mixed tabs and spaces in indentation"))
                continue
            columns = text.count("\t") * width + text.count(" ")
            if columns % width:
                issues.append(report(
                    self, source, tok,
                    f"Indentation of {columns} is not a multiple of {width}",
                ))
        return issues
