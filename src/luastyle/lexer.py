"""
Lua Lexer (Tokenizer)

Converts raw Lua source into a lossless stream of tokens.
Whitespace, line breaks and comments are first-class tokens, so joining the
text of every token reproduces the input exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

from luastyle.errors import MalformedLiteral


class TokenType(Enum):
    """Kinds of tokens in Lua source."""
    STRING = "string"            # 'a', "b", [[c]]
    IDENTIFIER = "identifier"    # foo, _bar, Baz2
    KEYWORD = "keyword"          # local, function, then, end
    NUMBER = "number"            # 42, 0.5, 1e10, 0xff
    OPERATOR = "operator"        # + - * / // % ^ # == ~= .. = ...
    PUNCTUATION = "punctuation"  # ( ) { } [ ] ; : :: , .
    COMMENT = "comment"          # -- line, --[[ block ]]
    WHITESPACE = "whitespace"    # spaces, tabs, form feeds
    NEWLINE = "newline"          # \n, \r\n, \r


KEYWORDS = frozenset({
    "and", "break", "do", "else", "elseif", "end", "false", "for",
    "function", "goto", "if", "in", "local", "nil", "not", "or",
    "repeat", "return", "then", "true", "until", "while",
})

# Longest first so greedy matching picks "..." over "..".
OPERATORS = (
    "...", "..", "==", "~=", "<=", ">=", "<<", ">>", "//",
    "+", "-", "*", "/", "%", "^", "#", "&", "~", "|", "<", ">", "=",
)

PUNCTUATION = ("::", "(", ")", "{", "}", "[", "]", ";", ":", ",", ".")

TRIVIA = frozenset({TokenType.WHITESPACE, TokenType.NEWLINE, TokenType.COMMENT})

# The only line breaks Lua recognises; str.splitlines also splits on \f, \x85 and others.
LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    text: str
    offset: int
    line: int
    column: int

    @property
    def kind(self) -> str:
        return self.type.value

    @property
    def end_offset(self) -> int:
        return self.offset + len(self.text)

    @property
    def end_position(self) -> tuple[int, int, int]:
        """(offset, line, column) just past the end of the token."""
        breaks = LINE_BREAK.findall(self.text)
        if not breaks:
            return self.end_offset, self.line, self.column + len(self.text)
        tail = LINE_BREAK.split(self.text)[-1]
        return self.end_offset, self.line + len(breaks), len(tail) + 1

    @property
    def is_trivia(self) -> bool:
        return self.type in TRIVIA

    @property
    def quote(self) -> Optional[str]:
        """Opening quote of a short string, None for long strings and non-strings."""
        if self.type is TokenType.STRING and self.text[:1] in ("'", '"'):
            return self.text[0]
        return None

    @property
    def is_long_string(self) -> bool:
        return self.type is TokenType.STRING and self.text.startswith("[")

    @property
    def is_block_comment(self) -> bool:
        return self.type is TokenType.COMMENT and _long_bracket_level(self.text, 2) >= 0

    def is_a(self, type_: TokenType, text: Optional[str] = None) -> bool:
        return self.type is type_ and (text is None or self.text == text)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, L{self.line}:{self.column})"


def _long_bracket_level(text: str, pos: int) -> int:
    """Level of a long bracket opening at text[pos] ("[[" -> 0, "[==[" -> 2), or -1."""
    if pos >= len(text) or text[pos] != "[":
        return -1
    i = pos + 1
    while i < len(text) and text[i] == "=":
        i += 1
    if i < len(text) and text[i] == "[":
        return i - pos - 1
    return -1


class Lexer:
    """
    Tokenizer for Lua source.

    Usage:
        lexer = Lexer(source_text)
        tokens = lexer.tokenize_all()
    """

    def __init__(self, source: str, filename: str = "<unknown>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.length = len(source)

    def _current(self) -> Optional[str]:
        """Get current character or None if at end."""
        if self.pos >= self.length:
            return None
        return self.source[self.pos]

    def _peek(self, offset: int = 1) -> Optional[str]:
        """Peek ahead by offset characters."""
        pos = self.pos + offset
        if pos >= self.length:
            return None
        return self.source[pos]

    def _advance(self, count: int = 1) -> None:
        """Advance count characters, keeping line/column in step."""
        for _ in range(count):
            ch = self._current()
            if ch is None:
                return
            self.pos += 1
            if ch == "\n" or (ch == "\r" and self._current() != "\n"):
                self.line += 1
                self.column = 1
            else:
                self.column += 1

    def _fault(self, message: str, offset: int, line: int, column: int) -> MalformedLiteral:
        return MalformedLiteral(f"{self.filename}: {message}", offset, line, column)

    def _read_long_bracket(self, level: int, what: str, start: tuple[int, int, int]) -> None:
        """Consume a long bracket body up to and including its matching closer."""
        closer = "]" + "=" * level + "]"
        end = self.source.find(closer, self.pos)
        if end < 0:
            raise self._fault(f"unterminated {what}", *start)
        self._advance(end + len(closer) - self.pos)

    def _read_short_string(self, quote_char: str, start: tuple[int, int, int]) -> None:
        """Read a quoted string, handling escapes. An escaped newline continues it."""
        self._advance()  # opening quote
        while True:
            ch = self._current()
            if ch is None or ch in ("\n", "\r"):
                raise self._fault("unterminated string", *start)
            if ch == quote_char:
                self._advance()
                return
            if ch == "\\":
                self._advance()
                if self._current() == "\r" and self._peek() == "\n":
                    self._advance()
                self._advance()
                continue
            self._advance()

    def _read_comment(self, start: tuple[int, int, int]) -> None:
        """Read a comment: '--' to end of line, or a long-bracket block."""
        self._advance(2)
        level = _long_bracket_level(self.source, self.pos)
        if level >= 0:
            self._advance(level + 2)
            self._read_long_bracket(level, "block comment", start)
            return
        while self._current() is not None and self._current() not in ("\n", "\r"):
            self._advance()

    def _read_number(self) -> None:
        """Read a numeric literal (decimal, hex, fractional, exponent)."""
        exponent_chars = "eE"
        if self._current() == "0" and self._peek() in ("x", "X"):
            self._advance(2)
            exponent_chars = "pP"
        while True:
            ch = self._current()
            if ch is None:
                return
            if ch in exponent_chars and self._peek() in ("+", "-"):
                self._advance(2)
            elif ch.isalnum() or ch == "_" or ch == ".":
                if ch == "." and self._peek() == ".":
                    return  # concatenation: 1..x
                self._advance()
            else:
                return

    def _read_run(self, chars: str) -> None:
        while self._current() is not None and self._current() in chars:
            self._advance()

    def tokenize(self) -> Iterator[Token]:
        """Generate tokens from the source."""
        src = self.source
        while self.pos < self.length:
            ch = src[self.pos]
            start = (self.pos, self.line, self.column)

            if ch in (" ", "\t", "\f", "\v"):
                self._read_run(" \t\f\v")
                kind = TokenType.WHITESPACE
            elif ch in ("\n", "\r"):
                self._advance(2 if src.startswith("\r\n", self.pos) else 1)
                kind = TokenType.NEWLINE
            elif src.startswith("--", self.pos):
                self._read_comment(start)
                kind = TokenType.COMMENT
            elif ch in ("'", '"'):
                self._read_short_string(ch, start)
                kind = TokenType.STRING
            elif ch == "[" and _long_bracket_level(src, self.pos) >= 0:
                level = _long_bracket_level(src, self.pos)
                self._advance(level + 2)
                self._read_long_bracket(level, "long string", start)
                kind = TokenType.STRING
            elif ch.isdigit() or (ch == "." and (self._peek() or "").isdigit()):
                self._read_number()
                kind = TokenType.NUMBER
            elif ch == "_" or ch.isalpha():
                while self._current() is not None and (self._current() == "_" or self._current().isalnum()):
                    self._advance()
                word = src[start[0]:self.pos]
                kind = TokenType.KEYWORD if word in KEYWORDS else TokenType.IDENTIFIER
            else:
                kind = self._read_symbol()

            yield Token(kind, src[start[0]:self.pos], start[0], start[1], start[2])

    def _read_symbol(self) -> TokenType:
        for op in OPERATORS:
            if self.source.startswith(op, self.pos):
                self._advance(len(op))
                return TokenType.OPERATOR
        for punct in PUNCTUATION:
            if self.source.startswith(punct, self.pos):
                self._advance(len(punct))
                return TokenType.PUNCTUATION
        # Unknown character: keep it so the stream stays lossless.
        self._advance()
        return TokenType.PUNCTUATION

    def tokenize_all(self) -> List[Token]:
        """Convenience method to get all tokens as a list."""
        return list(self.tokenize())


def tokenize(source: str, filename: str = "<unknown>") -> List[Token]:
    """Tokenize source text."""
    return Lexer(source, filename).tokenize_all()


def iter_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (offset, line text without its break) for each line of `text`."""
    start = 0
    for match in LINE_BREAK.finditer(text):
        yield start, text[start:match.start()]
        start = match.end()
    if start < len(text):
        yield start, text[start:]


def significant(tokens: List[Token]) -> List[int]:
    """Indices of the tokens that are not whitespace, line breaks or comments."""
    return [i for i, tok in enumerate(tokens) if not tok.is_trivia]
