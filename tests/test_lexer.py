"""
Tests for the luastyle lexer.
"""

import pytest

from luastyle.errors import MalformedLiteral
from luastyle.lexer import Lexer, TokenType, iter_lines, tokenize


def kinds(source):
    return [(t.type, t.text) for t in tokenize(source)]


class TestBasicTokens:
    """Token kinds for ordinary statements."""

    def test_empty_source(self):
        assert tokenize("") == []

    def test_local_declaration(self):
        """`local foo = "Bob";` splits into keyword, identifier, operator, string, punctuation."""
        assert kinds('local foo = "Bob";') == [
            (TokenType.KEYWORD, "local"),
            (TokenType.WHITESPACE, " "),
            (TokenType.IDENTIFIER, "foo"),
            (TokenType.WHITESPACE, " "),
            (TokenType.OPERATOR, "="),
            (TokenType.WHITESPACE, " "),
            (TokenType.STRING, '"Bob"'),
            (TokenType.PUNCTUATION, ";"),
        ]

    def test_kind_names(self):
        tokens = tokenize("x -- hi\n")
        assert [t.kind for t in tokens] == ["identifier", "whitespace", "comment", "newline"]

    def test_multi_char_operators(self):
        ops = [t.text for t in tokenize("a ~= b .. c ... d // e == f <= g >> h")
               if t.type is TokenType.OPERATOR]
        assert ops == ["~=", "..", "...", "//", "==", "<=", ">>"]

    def test_label_delimiter(self):
        tokens = [t for t in tokenize("::top::") if not t.is_trivia]
        assert [(t.type, t.text) for t in tokens] == [
            (TokenType.PUNCTUATION, "::"),
            (TokenType.IDENTIFIER, "top"),
            (TokenType.PUNCTUATION, "::"),
        ]

    def test_numbers(self):
        nums = [t.text for t in tokenize("0x1F 3.14 1e-5 .5 0x1p4") if t.type is TokenType.NUMBER]
        assert nums == ["0x1F", "3.14", "1e-5", ".5", "0x1p4"]

    def test_number_followed_by_concat(self):
        assert kinds("1..x") == [
            (TokenType.NUMBER, "1"),
            (TokenType.OPERATOR, ".."),
            (TokenType.IDENTIFIER, "x"),
        ]

    def test_keywords_vs_identifiers(self):
        tokens = tokenize("ending end")
        assert tokens[0].type is TokenType.IDENTIFIER
        assert tokens[2].type is TokenType.KEYWORD

    def test_unknown_character_is_kept(self):
        tokens = tokenize("a $ b")
        assert tokens[2].type is TokenType.PUNCTUATION
        assert tokens[2].text == "$"


class TestPositions:
    """Line, column and offset bookkeeping."""

    def test_line_and_column(self):
        tokens = tokenize("a\n  b")
        b = tokens[-1]
        assert (b.text, b.line, b.column, b.offset) == ("b", 2, 3, 4)

    def test_crlf_is_one_newline(self):
        tokens = tokenize("a\r\nb")
        assert tokens[1].type is TokenType.NEWLINE
        assert tokens[1].text == "\r\n"
        assert (tokens[2].line, tokens[2].column) == (2, 1)

    def test_offsets_are_monotonic(self):
        tokens = tokenize("local t = { 'a', [[b\nc]], --[[ d ]] 1 }\nreturn t")
        offsets = [t.offset for t in tokens]
        assert offsets == sorted(offsets)
        for prev, nxt in zip(tokens, tokens[1:]):
            assert prev.end_offset == nxt.offset

    def test_end_position_spans_line_breaks(self):
        token = tokenize("[[a\r\nbc]]")[0]
        assert token.end_position == (9, 2, 5)

    def test_end_position_single_line(self):
        token = tokenize("  abc")[1]
        assert token.end_position == (5, 1, 6)

    def test_iter_lines_uses_lua_line_breaks(self):
        assert list(iter_lines("a\fb\r\nc\x85\rd")) == [(0, "a\fb"), (5, "c\x85"), (8, "d")]


class TestStrings:
    """Short and long string literals."""

    def test_single_and_double_quotes(self):
        single, double = [t for t in tokenize("'a' \"b\"") if t.type is TokenType.STRING]
        assert single.quote == "'"
        assert double.quote == '"'

    def test_escaped_quote(self):
        strings = [t for t in tokenize(r'x = "a\"b"') if t.type is TokenType.STRING]
        assert [s.text for s in strings] == [r'"a\"b"']

    def test_escaped_newline_continues_string(self):
        strings = [t for t in tokenize('x = "a\\\nb"') if t.type is TokenType.STRING]
        assert strings[0].text == '"a\\\nb"'

    def test_long_string(self):
        tok = [t for t in tokenize("x = [[a\nb]]") if t.type is TokenType.STRING][0]
        assert tok.is_long_string
        assert tok.quote is None
        assert tok.text == "[[a\nb]]"

    def test_long_string_with_level(self):
        tok = [t for t in tokenize("x = [==[a]]b]==]") if t.type is TokenType.STRING][0]
        assert tok.text == "[==[a]]b]==]"

    def test_index_is_not_long_string(self):
        tokens = [t for t in tokenize("t[ [[k]] ]") if not t.is_trivia]
        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER, TokenType.PUNCTUATION, TokenType.STRING, TokenType.PUNCTUATION,
        ]


class TestComments:
    """Line and block comments."""

    def test_line_comment_stops_at_newline(self):
        tokens = tokenize("-- note\nx")
        assert tokens[0].text == "-- note"
        assert not tokens[0].is_block_comment
        assert tokens[1].type is TokenType.NEWLINE

    def test_block_comment(self):
        tokens = tokenize("--[[ a\nb ]] x")
        assert tokens[0].type is TokenType.COMMENT
        assert tokens[0].is_block_comment
        assert tokens[0].text == "--[[ a\nb ]]"

    def test_conventional_block_comment_closer(self):
        tokens = tokenize("--[[\nold code\n--]]\nx")
        assert tokens[0].text == "--[[\nold code\n--]]"
        assert tokens[-1].text == "x"

    def test_leveled_block_comment(self):
        tokens = tokenize("--[=[ a ]] b ]=]")
        assert len(tokens) == 1
        assert tokens[0].is_block_comment


class TestMalformedLiterals:
    """Unterminated literals raise MalformedLiteral at their start."""

    def test_unterminated_string_at_eof(self):
        with pytest.raises(MalformedLiteral) as exc:
            tokenize('x = "abc')
        assert (exc.value.offset, exc.value.line, exc.value.column) == (4, 1, 5)

    def test_unescaped_newline_in_string(self):
        with pytest.raises(MalformedLiteral) as exc:
            tokenize("local s = 'a\nb'")
        assert exc.value.offset == 10

    def test_unterminated_block_comment(self):
        with pytest.raises(MalformedLiteral) as exc:
            tokenize("x = 1\n--[[ never closed")
        assert (exc.value.line, exc.value.column) == (2, 1)

    def test_unterminated_long_string(self):
        with pytest.raises(MalformedLiteral):
            tokenize("x = [==[ a ]]")


class TestProperties:
    """Losslessness and determinism."""

    SAMPLES = [
        "",
        "local foo = 'bar';\n",
        "if(x) then\n\treturn x\nend",
        "local t = {\n    a = 1,\n    [\"b\"] = [[long\nstring]],\n}  \n",
        "--[==[ header ]==]\nfunction M:go(...) return ... end -- tail\r\n",
        "x = 0xFF // 2 ~= 3 and #t > 0 or not y\n\n\n",
        "weird $ ` chars\f\v\n",
    ]

    @pytest.mark.parametrize("source", SAMPLES)
    def test_lossless(self, source):
        assert "".join(t.text for t in tokenize(source)) == source

    @pytest.mark.parametrize("source", SAMPLES)
    def test_deterministic(self, source):
        assert tokenize(source) == tokenize(source)

    def test_tokens_are_immutable(self):
        tok = tokenize("x")[0]
        with pytest.raises(AttributeError):
            tok.text = "y"

    def test_lexer_class_matches_function(self):
        assert Lexer("a = 1").tokenize_all() == tokenize("a = 1")
