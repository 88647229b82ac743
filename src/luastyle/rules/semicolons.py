"""Statement terminators."""

from __future__ import annotations

from typing import Any, List, Mapping

from luastyle.lexer import Token, TokenType
from luastyle.reporting import Severity, Violation
from luastyle.rules.base import ParamSpec, register, report, report_at
from luastyle.structure import SourceFile, Structure, continues_expression, resumes_expression


# Tokens a simple statement can end with.
VALUE_KEYWORDS = frozenset({"nil", "true", "false", "break", "return"})
VALUE_CLOSERS = frozenset({")", "]", "}"})

# Statements starting with these are block headers/closers, not simple statements.
NON_SIMPLE_STARTS = frozenset({"until", "if", "elseif", "else", "while", "for", "end", "then", "do"})


def _ends_value(tok: Token) -> bool:
    if tok.type in (TokenType.IDENTIFIER, TokenType.NUMBER, TokenType.STRING):
        return True
    if tok.type is TokenType.KEYWORD:
        return tok.text in VALUE_KEYWORDS
    if tok.type is TokenType.PUNCTUATION:
        return tok.text in VALUE_CLOSERS
    return tok.is_a(TokenType.OPERATOR, "...")


def _is_function_header(structure: Structure, close_idx: int) -> bool:
    """True if `close_idx` is the `)` ending a function's parameter list."""
    tokens = structure.tokens
    opener = next((o for o, c in structure.bracket_match.items() if c == close_idx), None)
    if opener is None:
        return False
    j = structure.prev_sig(opener)
    while j is not None and (tokens[j].type is TokenType.IDENTIFIER or tokens[j].text in (".", ":")):
        j = structure.prev_sig(j)
    return j is not None and tokens[j].is_a(TokenType.KEYWORD, "function")


def statement_start(structure: Structure, index: int) -> int:
    """First token of the (possibly multi-line) statement containing `index`."""
    tokens = structure.tokens
    start = structure.line_starts[tokens[index].line]
    while True:
        prev = structure.prev_sig(start)
        if prev is None:
            return start
        if structure.bracket_depth[start] > 0 or resumes_expression(tokens[start]) \
                or continues_expression(tokens[prev]):
            start = structure.line_starts[tokens[prev].line]
            continue
        return start


@register
class SemicolonRule:
    """Simple statements end with `;` (or never do, when not required)."""

    rule_id = "semicolons"
    description = "Terminate simple statements with a semicolon"
    severity = Severity.WARNING
    parameters = (
        ParamSpec("requireSemicolons", bool, True,
                  description="Require (true) or forbid (false) statement-ending semicolons"),
    )

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        structure = source.structure
        if options["requireSemicolons"]:
            return self._missing(source, structure)
        return self._unnecessary(source, structure)

    def _missing(self, source: SourceFile, structure: Structure) -> List[Violation]:
        tokens = source.tokens
        issues = []
        for end in structure.line_ends.values():
            tok = tokens[end]
            if structure.bracket_depth[end] != 0 or not _ends_value(tok):
                continue
            nxt = structure.next_sig(end)
            if nxt is not None and resumes_expression(tokens[nxt]):
                continue
            if tok.is_a(TokenType.PUNCTUATION, ")") and _is_function_header(structure, end):
                continue
            first = tokens[statement_start(structure, end)]
            if first.type is TokenType.KEYWORD and first.text in NON_SIMPLE_STARTS:
                continue
            offset, line, column = tok.end_position
            issues.append(report_at(self, source, offset, line, column,
                                    "Missing semicolon at end of statement"))
        return issues

    def _unnecessary(self, source: SourceFile, structure: Structure) -> List[Violation]:
        tokens = source.tokens
        issues = []
        for end in structure.line_ends.values():
            tok = tokens[end]
            if tok.is_a(TokenType.PUNCTUATION, ";") and structure.bracket_depth[end] == 0:
                issues.append(report(self, source, tok, "Unnecessary semicolon"))
        return issues
