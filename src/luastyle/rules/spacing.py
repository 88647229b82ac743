"""Spacing around block keywords, braces and control-keyword parentheses."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from luastyle.lexer import Token, TokenType
from luastyle.reporting import Severity, Violation
from luastyle.rules.base import register, report
from luastyle.structure import SourceFile


# Keywords that must be separated from a following "(" by one space.
CONTROL_KEYWORDS = frozenset({
    "if", "elseif", "while", "until", "return", "and", "or", "not", "in",
})

# "{" after one of these opens a value and needs one space before it.
BRACE_LEADERS = frozenset({"=", ","})


@register
class SpacingRule:
    """Exactly one space before `then`, `do`, `{` and after control keywords."""

    rule_id = "spacing"
    description = "Use exactly one space before then/do/{ and after control keywords"
    severity = Severity.WARNING
    parameters = ()

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        tokens = source.tokens
        structure = source.structure
        issues = []
        for i in structure.sig:
            tok = tokens[i]
            if tok.is_a(TokenType.KEYWORD, "then") or tok.is_a(TokenType.KEYWORD, "do"):
                issue = self._one_space_before(source, i)
            elif tok.is_a(TokenType.PUNCTUATION, "{"):
                prev = structure.prev_sig(i)
                if prev is None or not self._leads_brace(tokens[prev]):
                    continue
                issue = self._one_space_before(source, i)
            elif tok.is_a(TokenType.PUNCTUATION, "("):
                prev = structure.prev_sig(i)
                if prev is None or not tokens[prev].is_a(TokenType.KEYWORD):
                    continue
                if tokens[prev].text not in CONTROL_KEYWORDS:
                    continue
                issue = self._one_space_before(source, i)
            else:
                continue
            if issue is not None:
                issues.append(issue)
        return issues

    @staticmethod
    def _leads_brace(tok: Token) -> bool:
        if tok.type is TokenType.KEYWORD:
            return True
        return tok.text in BRACE_LEADERS and tok.type in (TokenType.OPERATOR, TokenType.PUNCTUATION)

    def _one_space_before(self, source: SourceFile, index: int) -> Optional[Violation]:
        tokens = source.tokens
        tok = tokens[index]
        if index == 0 or tokens[index - 1].type is TokenType.NEWLINE:
            return None
        prev = tokens[index - 1]
        if prev.type is TokenType.WHITESPACE:
            # Indentation, not spacing.
            if prev.column == 1:
                return None
            if prev.text != " ":
                return report(self, source, prev, f"Expected exactly one space before '{tok.text}'")
            return None
        if prev.type is TokenType.COMMENT:
            return None
        return report(self, source, tok, f"Missing space before '{tok.text}'")
