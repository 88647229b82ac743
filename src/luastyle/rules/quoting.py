"""Quote style for short string literals."""

from __future__ import annotations

from typing import Any, List, Mapping

from luastyle.lexer import TokenType
from luastyle.reporting import Severity, Violation
from luastyle.rules.base import ParamSpec, register, report
from luastyle.structure import SourceFile


QUOTE_CHARS = {"single": "'", "double": '"'}


@register
class QuotingRule:
    """Flag short strings that use the non-preferred quote character."""

    rule_id = "quoting"
    description = "Use the configured quote character for string literals"
    severity = Severity.WARNING
    parameters = (
        ParamSpec("quoteStyle", str, "single", choices=("single", "double"),
                  description="Preferred quote character"),
    )

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        preferred = QUOTE_CHARS[options["quoteStyle"]]
        other = QUOTE_CHARS["double" if options["quoteStyle"] == "single" else "single"]
        issues = []
        for tok in source.tokens:
            if tok.type is not TokenType.STRING or tok.quote != other:
                continue
            # Switching quotes would force an escape; leave it alone.
            if preferred in tok.text[1:-1]:
                continue
            issues.append(report(
                self, source, tok,
                f"Use {options['quoteStyle']} quotes for string literals",
            ))
        return issues
