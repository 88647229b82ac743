"""
Lightweight structure over a token stream.

Rules work on tokens, but several need a little more context than a flat
stream: which `end` closes which block, how deep inside brackets a token
sits, which tokens start a line. `Structure` derives that once per file so
rules can share it without re-scanning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, List, Optional, Tuple

from luastyle.lexer import Token, TokenType, significant


OPENING_BRACKETS = {"(": ")", "[": "]", "{": "}"}
CLOSING_BRACKETS = frozenset(OPENING_BRACKETS.values())

# Keywords that can only begin (or close) a statement, never continue an expression.
STATEMENT_KEYWORDS = frozenset({
    "local", "return", "if", "for", "while", "repeat", "do", "end",
    "else", "elseif", "until", "break", "goto", "then",
})


def continues_expression(tok: Token) -> bool:
    """True if an expression cannot end at `tok` (binary operator, opener, separator)."""
    if tok.type is TokenType.OPERATOR:
        return tok.text != "..."
    if tok.type is TokenType.PUNCTUATION:
        return tok.text in ("(", "[", "{", ",", ".", ":")
    return tok.is_a(TokenType.KEYWORD, "and") or tok.is_a(TokenType.KEYWORD, "or") \
        or tok.is_a(TokenType.KEYWORD, "not")


def resumes_expression(tok: Token) -> bool:
    """True if a line starting with `tok` carries on the previous line's expression."""
    if tok.type is TokenType.OPERATOR:
        return tok.text not in ("-", "#", "~", "...")
    if tok.type is TokenType.PUNCTUATION:
        return tok.text in (".", ":", ",") or tok.text in CLOSING_BRACKETS
    return tok.is_a(TokenType.KEYWORD, "and") or tok.is_a(TokenType.KEYWORD, "or")


@dataclass
class Block:
    """A keyword block: function/if/while/for/do/repeat and its closer."""
    kind: str
    start: int                 # token index of the opening keyword
    end: Optional[int] = None  # token index of `end`/`until`, None if unclosed
    awaiting_do: bool = False


class Structure:
    """Block and bracket structure for one token list."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.sig = significant(tokens)
        self.block_at: Dict[int, Block] = {}      # opener index -> block
        self.closer_of: Dict[int, Block] = {}     # closer index -> block
        self.bracket_depth: Dict[int, int] = {}   # sig index -> open bracket count
        self.bracket_match: Dict[int, int] = {}   # opening bracket -> closing bracket
        self._scan()

    def _scan(self) -> None:
        # Unmatched closers are skipped; rules treat such code as ambiguous.
        stack: List[Block] = []
        brackets: List[int] = []
        for i in self.sig:
            tok = self.tokens[i]
            self.bracket_depth[i] = len(brackets)

            if tok.type is TokenType.PUNCTUATION:
                if tok.text in OPENING_BRACKETS:
                    brackets.append(i)
                elif tok.text in CLOSING_BRACKETS:
                    if brackets and OPENING_BRACKETS[self.tokens[brackets[-1]].text] == tok.text:
                        self.bracket_match[brackets.pop()] = i
                    self.bracket_depth[i] = len(brackets)
                continue

            if tok.type is not TokenType.KEYWORD:
                continue

            word = tok.text
            if word in ("function", "if", "repeat", "while", "for"):
                block = Block(kind=word, start=i, awaiting_do=word in ("while", "for"))
                stack.append(block)
                self.block_at[i] = block
            elif word == "do":
                if stack and stack[-1].awaiting_do:
                    stack[-1].awaiting_do = False
                else:
                    block = Block(kind="do", start=i)
                    stack.append(block)
                    self.block_at[i] = block
            elif word in ("end", "until"):
                expected_repeat = word == "until"
                if stack and (stack[-1].kind == "repeat") == expected_repeat:
                    block = stack.pop()
                    block.end = i
                    self.closer_of[i] = block

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def next_sig(self, index: int) -> Optional[int]:
        """Index of the next significant token after `index`."""
        for j in range(index + 1, len(self.tokens)):
            if not self.tokens[j].is_trivia:
                return j
        return None

    def prev_sig(self, index: int) -> Optional[int]:
        """Index of the previous significant token before `index`."""
        for j in range(index - 1, -1, -1):
            if not self.tokens[j].is_trivia:
                return j
        return None

    def expression_list(self, first: Optional[int]) -> Tuple[List[int], int]:
        """
        Walk an expression list starting at token `first`.

        Returns the significant token indices that belong to it and the number
        of top-level commas. The list ends at a `;`, a statement keyword, an
        unmatched closing bracket, or a line break after a token that can end
        an expression. Keyword blocks (`function ... end`) are skipped whole.
        """
        if first is None:
            return [], 0
        base = self.bracket_depth[first]
        members: List[int] = []
        commas = 0
        j: Optional[int] = first
        last: Optional[Token] = None
        while j is not None:
            tok = self.tokens[j]
            depth = self.bracket_depth[j]
            if depth < base:
                break
            if depth == base:
                if (last is not None and tok.line != last.line
                        and not continues_expression(last) and not resumes_expression(tok)):
                    break
                if tok.is_a(TokenType.PUNCTUATION, ";"):
                    break
                if tok.type is TokenType.KEYWORD and tok.text in STATEMENT_KEYWORDS:
                    break
                if tok.is_a(TokenType.PUNCTUATION, ","):
                    commas += 1
            members.append(j)
            block = self.block_at.get(j)
            if block is not None:
                if block.end is None:
                    break
                members.extend(k for k in self.sig if j < k <= block.end)
                j = block.end
            last = self.tokens[j]
            j = self.next_sig(j)
        return members, commas

    def body(self, block: Block) -> List[Token]:
        """Significant tokens between a block's opener and closer."""
        if block.end is None:
            return []
        return [self.tokens[i] for i in self.sig if block.start < i < block.end]

    @cached_property
    def line_starts(self) -> Dict[int, int]:
        """Line number -> index of the first significant token on that line."""
        starts: Dict[int, int] = {}
        for i in self.sig:
            starts.setdefault(self.tokens[i].line, i)
        return starts

    @cached_property
    def line_ends(self) -> Dict[int, int]:
        """Line number -> index of the last significant token starting on that line."""
        ends: Dict[int, int] = {}
        for i in self.sig:
            ends[self.tokens[i].line] = i
        return ends


@dataclass(frozen=True)
class SourceFile:
    """A tokenized source file handed to every rule."""
    path: str
    text: str
    tokens: List[Token] = field(default_factory=list)

    @cached_property
    def structure(self) -> Structure:
        return Structure(self.tokens)
