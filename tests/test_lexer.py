"""Tests for CXQL lexer — tokenization, f-string modes and positions."""

import pytest

from cxql.lexer import Lexer, Token, TokenType, tokenize


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def lex(source: str) -> list[Token]:
    """Convenience: tokenize source and return the token list."""
    return Lexer(source).tokenize()


def types(source: str) -> list[TokenType]:
    """Return just the token types (excluding EOF) for quick assertions."""
    return [t.type for t in lex(source) if t.type != TokenType.EOF]


def values(source: str) -> list[str]:
    """Return just the token values (excluding EOF)."""
    return [t.value for t in lex(source) if t.type != TokenType.EOF]


# ---------------------------------------------------------------------------
# Empty / Minimal Input
# ---------------------------------------------------------------------------

class TestEmptyInput:
    def test_empty_string(self):
        tokens = lex("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_whitespace_only(self):
        assert types("   \t \r\n  \n") == []

    def test_comment_only(self):
        assert types("# nothing to see here") == []

    def test_comment_runs_to_end_of_line(self):
        assert values("# first\n42 # second\n7") == ["42", "7"]

    def test_module_level_tokenize(self):
        assert [t.type for t in tokenize("a + 1")] == [t.type for t in lex("a + 1")]


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

class TestNumbers:
    def test_integer(self):
        tokens = lex("42")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == "42"

    @pytest.mark.parametrize("text", ["3.14", "1e10", "1.5e-3", "2E+5", "0.0"])
    def test_single_number_token(self, text):
        assert types(text) == [TokenType.NUMBER]
        assert values(text) == [text]

    def test_trailing_dot_is_member_access(self):
        assert types("1.") == [TokenType.NUMBER, TokenType.DOT]

    def test_dot_then_name(self):
        assert types("3.x") == [TokenType.NUMBER, TokenType.DOT, TokenType.IDENTIFIER]

    def test_exponent_without_digits_is_not_consumed(self):
        assert values("1e") == ["1", "e"]
        assert types("1e+") == [TokenType.NUMBER, TokenType.IDENTIFIER, TokenType.PLUS]


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------

class TestStrings:
    def test_double_quoted(self):
        tokens = lex('"hello"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == '"hello"'

    def test_single_quoted(self):
        assert values("'it works'") == ["'it works'"]

    def test_escaped_quote_stays_inside(self):
        assert types('"a\\"b"') == [TokenType.STRING]
        assert values('"a\\"b"') == ['"a\\"b"']

    def test_other_quote_is_plain_text(self):
        assert values('"it\'s"') == ['"it\'s"']

    def test_unterminated_string_is_one_invalid_token(self):
        tokens = lex('let x = "abc\nlet y = 2')
        assert tokens[3].type == TokenType.INVALID
        assert tokens[3].value == '"abc\nlet y = 2'
        assert tokens[4].type == TokenType.EOF


# ---------------------------------------------------------------------------
# Identifiers and words
# ---------------------------------------------------------------------------

class TestWords:
    def test_identifier_with_dash_and_underscore(self):
        assert types("my-var_2") == [TokenType.IDENTIFIER]

    def test_spaced_minus_is_subtraction(self):
        assert types("a - b") == [TokenType.IDENTIFIER, TokenType.MINUS, TokenType.IDENTIFIER]

    def test_booleans_and_null(self):
        assert types("true false null") == [TokenType.BOOLEAN, TokenType.BOOLEAN, TokenType.NULL]

    def test_word_operators(self):
        assert types("and or not") == [TokenType.AND, TokenType.OR, TokenType.NOT]

    def test_statement_keywords_are_identifiers(self):
        assert types("let connect if else with as where") == [TokenType.IDENTIFIER] * 7

    def test_word_prefix_is_not_keyword(self):
        assert types("android nullable") == [TokenType.IDENTIFIER, TokenType.IDENTIFIER]

    def test_variable_reference(self):
        tokens = lex("$HOME")
        assert tokens[0].type == TokenType.VARIABLE
        assert tokens[0].value == "$HOME"


# ---------------------------------------------------------------------------
# Operators and delimiters
# ---------------------------------------------------------------------------

class TestOperators:
    def test_two_char_operators(self):
        assert types("=> == != <= >=") == [
            TokenType.ARROW,
            TokenType.DOUBLE_EQUALS,
            TokenType.NOT_EQUALS,
            TokenType.LTE,
            TokenType.GTE,
        ]

    def test_single_char_operators(self):
        assert types("+ - * / % | . = < >") == [
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.STAR,
            TokenType.SLASH,
            TokenType.PERCENT,
            TokenType.PIPE,
            TokenType.DOT,
            TokenType.EQUALS,
            TokenType.LT,
            TokenType.GT,
        ]

    def test_delimiters(self):
        assert types(": , ( ) [ ] { }") == [
            TokenType.COLON,
            TokenType.COMMA,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.LBRACKET,
            TokenType.RBRACKET,
            TokenType.LBRACE,
            TokenType.RBRACE,
        ]

    def test_no_spaces_needed(self):
        assert types("f(x)=>1") == [
            TokenType.IDENTIFIER,
            TokenType.LPAREN,
            TokenType.IDENTIFIER,
            TokenType.RPAREN,
            TokenType.ARROW,
            TokenType.NUMBER,
        ]


# ---------------------------------------------------------------------------
# Invalid input
# ---------------------------------------------------------------------------

class TestInvalid:
    def test_unknown_character(self):
        tokens = lex("a @ b")
        assert tokens[1].type == TokenType.INVALID
        assert tokens[1].value == "@"
        assert tokens[2].type == TokenType.IDENTIFIER

    def test_lone_bang(self):
        assert types("!") == [TokenType.INVALID]

    def test_dollar_without_name(self):
        assert types("$1") == [TokenType.INVALID, TokenType.NUMBER]
        assert values("$") == ["$"]


# ---------------------------------------------------------------------------
# F-strings
# ---------------------------------------------------------------------------

class TestFStrings:
    def test_simple_interpolation(self):
        assert types('$"Hi {name}!"') == [
            TokenType.FSTRING_START,
            TokenType.FSTRING_TEXT,
            TokenType.LBRACE,
            TokenType.IDENTIFIER,
            TokenType.RBRACE,
            TokenType.FSTRING_TEXT,
            TokenType.FSTRING_END,
        ]
        assert values('$"Hi {name}!"')[1] == "Hi "

    def test_empty_fstring(self):
        assert types('$""') == [TokenType.FSTRING_START, TokenType.FSTRING_END]

    def test_text_keeps_whitespace_and_symbols(self):
        assert values('$" a # b } c "') == ['$"', " a # b } c ", '"']

    def test_record_inside_interpolation(self):
        assert types('$"{ {a: 1}.a }"') == [
            TokenType.FSTRING_START,
            TokenType.LBRACE,
            TokenType.LBRACE,
            TokenType.IDENTIFIER,
            TokenType.COLON,
            TokenType.NUMBER,
            TokenType.RBRACE,
            TokenType.DOT,
            TokenType.IDENTIFIER,
            TokenType.RBRACE,
            TokenType.FSTRING_END,
        ]

    def test_nested_fstring(self):
        toks = types('$"a{$"b{c}"}d"')
        assert toks.count(TokenType.FSTRING_START) == 2
        assert toks.count(TokenType.FSTRING_END) == 2
        assert toks[-2:] == [TokenType.FSTRING_TEXT, TokenType.FSTRING_END]

    def test_code_resumes_after_fstring(self):
        assert types('$"x" + 1') == [
            TokenType.FSTRING_START,
            TokenType.FSTRING_TEXT,
            TokenType.FSTRING_END,
            TokenType.PLUS,
            TokenType.NUMBER,
        ]

    def test_unterminated_fstring_reaches_eof(self):
        assert types('$"abc') == [TokenType.FSTRING_START, TokenType.FSTRING_TEXT]


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------

class TestPositions:
    def test_line_column_and_offsets(self):
        tokens = lex("let x = 1")
        assert (tokens[0].line, tokens[0].column, tokens[0].start, tokens[0].end) == (1, 1, 0, 3)
        assert (tokens[1].column, tokens[1].start) == (5, 4)
        assert (tokens[3].column, tokens[3].start, tokens[3].end) == (9, 8, 9)

    def test_multiline_positions(self):
        tokens = lex("a\n  b")
        assert (tokens[1].line, tokens[1].column, tokens[1].start) == (2, 3, 4)

    def test_eof_position(self):
        tokens = lex("ab\n")
        assert tokens[-1].type == TokenType.EOF
        assert (tokens[-1].line, tokens[-1].start) == (2, 3)

    def test_value_matches_source_slice(self):
        source = 'let msg = $"n={n}" | upper()'
        for tok in lex(source):
            assert source[tok.start:tok.end] == tok.value
