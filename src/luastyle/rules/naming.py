"""
Naming case by declared role.

Roles and the case each one takes:
- variables, functions, parameters, loop variables, fields: lowerCamelCase
- constructor-style functions (the body calls `setmetatable` or returns a
  table constructor): CapitalCase
- constants: UPPER_SNAKE_CASE
- a single leading underscore marks a private name and is stripped before
  the case check

When one name could satisfy several roles the priority is
constant > constructor > variable/function. Names whose role cannot be read
from local context (bare global assignments, table keys, metamethods) are
not checked.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional

from luastyle.lexer import Token, TokenType
from luastyle.reporting import Severity, Violation
from luastyle.rules.base import register, report
from luastyle.rules.declarations import declared_names
from luastyle.structure import Block, SourceFile, Structure


LOWER_CAMEL = re.compile(r"^[a-z][a-zA-Z0-9]*$")
CAPITAL = re.compile(r"^[A-Z](?=.*[a-z])[a-zA-Z0-9]*$")
UPPER_SNAKE = re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*$")

# A CapitalCase value bound to one of these is a class or module table.
CLASS_VALUE_LEADERS = frozenset({"{", "setmetatable", "require", "function"})


def strip_private(name: str) -> str:
    """Drop one leading underscore (privacy marker)."""
    if name.startswith("_") and not name.startswith("__"):
        return name[1:]
    return name


def case_of(name: str) -> Optional[str]:
    """'constant', 'capital', 'lower', or None when the name fits no convention."""
    if UPPER_SNAKE.match(name):
        return "constant"
    if CAPITAL.match(name):
        return "capital"
    if LOWER_CAMEL.match(name):
        return "lower"
    return None


def is_constructor(structure: Structure, block: Optional[Block]) -> Optional[bool]:
    """Whether a function body looks like a constructor; None if the body is unknown."""
    if block is None or block.end is None:
        return None
    body = structure.body(block)
    for n, tok in enumerate(body):
        if tok.is_a(TokenType.IDENTIFIER, "setmetatable"):
            return True
        if tok.is_a(TokenType.KEYWORD, "return") and n + 1 < len(body) \
                and body[n + 1].is_a(TokenType.PUNCTUATION, "{"):
            return True
    return False


@register
class NamingRule:
    """Identifiers follow the case convention of their declared role."""

    rule_id = "naming"
    description = "Name variables, functions, constants and fields by their role"
    severity = Severity.WARNING
    parameters = ()

    def check(self, source: SourceFile, options: Mapping[str, Any]) -> List[Violation]:
        tokens = source.tokens
        structure = source.structure
        issues: List[Violation] = []

        for i in structure.sig:
            tok = tokens[i]
            if tok.is_a(TokenType.KEYWORD, "local"):
                issues.extend(self._check_local(source, i))
            elif tok.is_a(TokenType.KEYWORD, "function"):
                issues.extend(self._check_function(source, i))
            elif tok.is_a(TokenType.KEYWORD, "for"):
                issues.extend(self._check_loop_vars(source, i))
            elif tok.type is TokenType.IDENTIFIER:
                issue = self._check_field(source, i)
                if issue is not None:
                    issues.append(issue)
        return issues

    # ------------------------------------------------------------------

    def _variable(self, source: SourceFile, tok: Token, what: str = "Variable") -> Optional[Violation]:
        name = strip_private(tok.text)
        if not name:
            return None
        kind = case_of(name)
        if kind in ("lower", "constant"):
            return None
        return report(self, source, tok, f"{what} '{tok.text}' should be lowerCamelCase")

    def _function_name(self, source: SourceFile, tok: Token, block: Optional[Block]) -> Optional[Violation]:
        name = strip_private(tok.text)
        if not name:
            return None
        kind = case_of(name)
        if kind == "lower":
            return None
        if kind == "capital":
            constructor = is_constructor(source.structure, block)
            if constructor is None or constructor:
                return None
            return report(self, source, tok,
                          f"Function '{tok.text}' is CapitalCase but is not a constructor; "
                          f"use lowerCamelCase")
        return report(self, source, tok, f"Function '{tok.text}' should be lowerCamelCase")

    def _check_local(self, source: SourceFile, local_idx: int) -> List[Violation]:
        tokens = source.tokens
        structure = source.structure
        names, assign = declared_names(structure, local_idx)
        if not names:
            return []  # `local function` is handled with the function keyword
        value_idx = structure.next_sig(assign) if assign is not None else None
        value = tokens[value_idx] if value_idx is not None else None

        issues = []
        if len(names) == 1 and value is not None and value.is_a(TokenType.KEYWORD, "function"):
            issue = self._function_name(source, tokens[names[0]], structure.block_at.get(value_idx))
            return [issue] if issue is not None else []

        for n, name_idx in enumerate(names):
            name_tok = tokens[name_idx]
            if case_of(strip_private(name_tok.text)) == "capital":
                # Only the first name lines up with the first value.
                if n == 0 and value is not None and value.text in CLASS_VALUE_LEADERS:
                    continue
            issue = self._variable(source, name_tok)
            if issue is not None:
                issues.append(issue)
        return issues

    def _check_function(self, source: SourceFile, func_idx: int) -> List[Violation]:
        tokens = source.tokens
        structure = source.structure
        block = structure.block_at.get(func_idx)
        issues = []

        j = structure.next_sig(func_idx)
        name_tok: Optional[Token] = None
        while j is not None and tokens[j].type is TokenType.IDENTIFIER:
            name_tok = tokens[j]
            j = structure.next_sig(j)
            if j is None or tokens[j].text not in (".", ":"):
                break
            j = structure.next_sig(j)
        if name_tok is not None and not name_tok.text.startswith("__"):
            issue = self._function_name(source, name_tok, block)
            if issue is not None:
                issues.append(issue)

        if j is None or not tokens[j].is_a(TokenType.PUNCTUATION, "("):
            return issues
        close = structure.bracket_match.get(j)
        if close is None:
            return issues
        for k in structure.sig:
            if j < k < close and tokens[k].type is TokenType.IDENTIFIER:
                issue = self._variable(source, tokens[k], "Parameter")
                if issue is not None:
                    issues.append(issue)
        return issues

    def _check_loop_vars(self, source: SourceFile, for_idx: int) -> List[Violation]:
        tokens = source.tokens
        structure = source.structure
        issues = []
        j = structure.next_sig(for_idx)
        while j is not None and tokens[j].type is TokenType.IDENTIFIER:
            issue = self._variable(source, tokens[j], "Loop variable")
            if issue is not None:
                issues.append(issue)
            j = structure.next_sig(j)
            if j is None or not tokens[j].is_a(TokenType.PUNCTUATION, ","):
                break
            j = structure.next_sig(j)
        return issues

    def _check_field(self, source: SourceFile, idx: int) -> Optional[Violation]:
        """`obj.field = value` assignments."""
        tokens = source.tokens
        structure = source.structure
        prev = structure.prev_sig(idx)
        nxt = structure.next_sig(idx)
        if prev is None or nxt is None:
            return None
        if not tokens[prev].is_a(TokenType.PUNCTUATION, "."):
            return None
        if not tokens[nxt].is_a(TokenType.OPERATOR, "="):
            return None
        tok = tokens[idx]
        if tok.text.startswith("__"):
            return None
        name = strip_private(tok.text)
        kind = case_of(name)
        if kind in ("lower", "constant"):
            return None
        if kind == "capital":
            value = structure.next_sig(nxt)
            if value is not None and tokens[value].text in CLASS_VALUE_LEADERS:
                return None
        return report(self, source, tok, f"Field '{tok.text}' should be lowerCamelCase")
