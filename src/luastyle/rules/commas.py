"""Comma placement in table constructors."""

from __future__ import annotations

from typing import Any, List, Mapping

from luastyle.lexer import TokenType
from luastyle.reporting import Severity, Violation
from luastyle.rules.base import ParamSpec, register, report
from luastyle.structure import SourceFile


SEPARATORS = (",", ";")


@register
class TrailingCommaRule:
    """Trailing separators in tables follow the configured policy; no leading commas."""

    rule_id = "trailing-comma"
    description = "Place commas at line ends and follow the trailing comma policy"
    severity = Severity.WARNING
    parameters = (
        ParamSpec("trailingComma", str, "forbid", choices=("forbid", "require"),
                  description="Whether the last field of a table takes a separator"),
    )

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        tokens = source.tokens
        structure = source.structure
        policy = options["trailingComma"]
        issues = []

        for start in structure.line_starts.values():
            if tokens[start].is_a(TokenType.PUNCTUATION, ","):
                issues.append(report(self, source, tokens[start],
                                     "Leading comma; place commas at the end of the line"))

        for open_idx, close_idx in structure.bracket_match.items():
            if tokens[open_idx].text != "{":
                continue
            last = structure.prev_sig(close_idx)
            if last is None or last == open_idx:
                continue
            last_tok = tokens[last]
            has_separator = last_tok.type is TokenType.PUNCTUATION and last_tok.text in SEPARATORS
            if policy == "forbid" and has_separator:
                issues.append(report(self, source, last_tok,
                                     "Trailing separator in table constructor"))
            elif policy == "require" and not has_separator:
                if tokens[close_idx].line == last_tok.line:
                    continue
                issues.append(report(self, source, last_tok,
                                     "Missing trailing comma in multi-line table constructor"))
        return issues
