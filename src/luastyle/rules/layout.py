"""Line-oriented layout rules: file ending, blank lines, line length, trailing whitespace."""

from __future__ import annotations

from typing import Any, List, Mapping

from luastyle.lexer import TokenType, iter_lines
from luastyle.reporting import Severity, Violation
from luastyle.rules.base import ParamSpec, register, report, report_at
from luastyle.structure import CLOSING_BRACKETS, SourceFile, resumes_expression


# Keywords that may follow a block's `end` on the very next line.
BLOCK_CONTINUATIONS = frozenset({"end", "else", "elseif", "until"})


@register
class EofNewlineRule:
    """The file ends with exactly one line break."""

    rule_id = "eof-newline"
    description = "End the file with a single newline"
    severity = Severity.WARNING
    parameters = ()

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        tokens = source.tokens
        if not tokens:
            return []
        last = tokens[-1]
        if last.type is not TokenType.NEWLINE:
            offset, line, column = last.end_position
            return [report_at(self, source, offset, line, column, "Missing newline at end of file")]

        trailing = []
        for tok in reversed(tokens):
            if tok.type is TokenType.NEWLINE:
                trailing.append(tok)
            elif tok.type is not TokenType.WHITESPACE:
                break
        if len(trailing) > 1:
            # Point at the first surplus line break.
            return [report(self, source, trailing[-2], "Multiple blank lines at end of file")]
        return []


@register
class BlankLineAfterBlockRule:
    """A block's closing `end` is followed by a blank line before the next statement."""

    rule_id = "blank-line-after-block"
    description = "Leave a blank line after a block ends"
    severity = Severity.INFO
    parameters = ()

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        tokens = source.tokens
        structure = source.structure
        issues = []
        for closer in sorted(structure.closer_of):
            tok = tokens[closer]
            if tok.text != "end" or structure.line_ends.get(tok.line) != closer:
                continue
            nxt = structure.next_sig(closer)
            if nxt is None:
                continue
            following = tokens[nxt]
            if following.line != tok.line + 1:
                continue
            # Only code on the next line counts; a comment there is a separate concern.
            if structure.line_starts.get(following.line) != nxt:
                continue
            if following.type is TokenType.KEYWORD and following.text in BLOCK_CONTINUATIONS:
                continue
            if following.type is TokenType.PUNCTUATION and following.text in CLOSING_BRACKETS:
                continue
            if resumes_expression(following):
                continue
            issues.append(report(self, source, tok, "Missing blank line after block"))
        return issues


@register
class MaxLineLengthRule:
    """Lines stay within the configured length."""

    rule_id = "max-line-length"
    description = "Keep lines within the maximum length"
    severity = Severity.WARNING
    parameters = (
        ParamSpec("maxLineLength", int, 100, minimum=1, description="Maximum characters per line"),
    )

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        limit = options["maxLineLength"]
        issues = []
        for number, (offset, line) in enumerate(iter_lines(source.text), start=1):
            if len(line) > limit:
                issues.append(report_at(
                    self, source, offset + limit, number, limit + 1,
                    f"Line is {len(line)} characters long (maximum {limit})",
                ))
        return issues


@register
class TrailingWhitespaceRule:
    """No spaces or tabs before a line break or the end of the file."""

    rule_id = "trailing-whitespace"
    description = "Remove trailing whitespace"
    severity = Severity.WARNING
    parameters = ()

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        tokens = source.tokens
        issues = []
        for i, tok in enumerate(tokens):
            at_line_end = i + 1 == len(tokens) or tokens[i + 1].type is TokenType.NEWLINE
            if not at_line_end:
                continue
            if tok.type is TokenType.WHITESPACE:
                issues.append(report(self, source, tok, "Trailing whitespace"))
            elif tok.type is TokenType.COMMENT and not tok.is_block_comment:
                stripped = tok.text.rstrip(" \t")
                if len(stripped) != len(tok.text):
                    issues.append(report_at(
                        self, source, tok.offset + len(stripped), tok.line,
                        tok.column + len(stripped), "Trailing whitespace",
                    ))
        return issues
