"""One local declaration per statement."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from luastyle.lexer import TokenType
from luastyle.reporting import Severity, Violation
from luastyle.rules.base import register, report
from luastyle.structure import SourceFile, Structure


def declared_names(structure: Structure, local_idx: int) -> tuple[list[int], Optional[int]]:
    """
    Names declared by the `local` at `local_idx`.

    Returns the identifier token indices and the index of the `=` that
    follows them (None for a bare declaration). Attributes such as
    `<const>` are skipped.
    """
    tokens = structure.tokens
    names: list[int] = []
    j = structure.next_sig(local_idx)
    while j is not None and tokens[j].type is TokenType.IDENTIFIER:
        names.append(j)
        j = structure.next_sig(j)
        if j is not None and tokens[j].is_a(TokenType.OPERATOR, "<"):
            # <const> / <close>
            close = structure.next_sig(structure.next_sig(j) or j)
            j = structure.next_sig(close) if close is not None else None
        if j is None or not tokens[j].is_a(TokenType.PUNCTUATION, ","):
            break
        j = structure.next_sig(j)
    if j is not None and tokens[j].is_a(TokenType.OPERATOR, "="):
        return names, j
    return names, None


@register
class DeclarationStyleRule:
    """Flag `local a, b = 1, 2`: each local belongs in its own statement."""

    rule_id = "declaration-style"
    description = "Declare each local variable in its own statement"
    severity = Severity.WARNING
    parameters = ()

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        tokens = source.tokens
        structure = source.structure
        issues = []
        for i in structure.sig:
            if not tokens[i].is_a(TokenType.KEYWORD, "local"):
                continue
            names, assign = declared_names(structure, i)
            if len(names) < 2:
                continue
            if assign is not None:
                _, commas = structure.expression_list(structure.next_sig(assign))
                # `local ok, err = pcall(f)` captures multiple returns and cannot be split.
                if commas == 0:
                    continue
            issues.append(report(
                self, source, tokens[i],
                f"Comma-chained local declaration of {len(names)} names; declare each on its own",
            ))
        return issues
