"""Comment marker style."""

from __future__ import annotations

from typing import Any, List, Mapping

from luastyle.lexer import TokenType
from luastyle.reporting import Severity, Violation
from luastyle.rules.base import register, report
from luastyle.structure import SourceFile


@register
class CommentStyleRule:
    """`--` is followed by a space: `-- note`, not `--note`."""

    rule_id = "comment-style"
    description = "Put a space after the line comment marker"
    severity = Severity.INFO
    parameters = ()

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        issues = []
        for tok in source.tokens:
            if tok.type is not TokenType.COMMENT or tok.is_block_comment:
                continue
            body = tok.text[2:]
            # Empty comments, `---` doc comments, and `--]]` block closers are fine.
            if not body or body[0] in (" ", "\t", "-") or body.startswith("]]"):
                continue
            issues.append(report(self, source, tok, "Missing space after '--' in comment"))
        return issues
