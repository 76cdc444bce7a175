"""CXQL lexer — scans source text into a flat list of tokens.

The lexer never fails: characters it does not recognise become ``INVALID``
tokens and the parser reports them.  F-strings are scanned with a small mode
stack.  ``$"`` enters text mode, a ``{`` inside the text enters code mode for
the interpolation, and the ``}`` that balances it drops back to text mode, so
an interpolation can hold any expression, nested f-strings included.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


# ---------------------------------------------------------------------------
# Token types
# ---------------------------------------------------------------------------

class TokenType(Enum):
    # Literals
    NUMBER = auto()
    STRING = auto()
    BOOLEAN = auto()
    NULL = auto()
    VARIABLE = auto()

    # Identifiers (statement keywords and block labels are identifiers too)
    IDENTIFIER = auto()

    # F-strings
    FSTRING_START = auto()  # $"
    FSTRING_TEXT = auto()
    FSTRING_END = auto()    # "

    # Operators
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *
    SLASH = auto()          # /
    PERCENT = auto()        # %
    PIPE = auto()           # |
    ARROW = auto()          # =>
    DOT = auto()            # .
    EQUALS = auto()         # =
    DOUBLE_EQUALS = auto()  # ==
    NOT_EQUALS = auto()     # !=
    LT = auto()             # <
    GT = auto()             # >
    LTE = auto()            # <=
    GTE = auto()            # >=
    AND = auto()
    OR = auto()
    NOT = auto()

    # Delimiters
    COLON = auto()          # :
    COMMA = auto()          # ,
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACKET = auto()       # [
    RBRACKET = auto()       # ]
    LBRACE = auto()         # {
    RBRACE = auto()         # }

    # Structure
    INVALID = auto()
    EOF = auto()


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

# Words with a token type of their own.  Statement keywords such as ``let``
# stay IDENTIFIER and are recognised by the parser in context.
WORD_TOKENS: dict[str, TokenType] = {
    "true": TokenType.BOOLEAN,
    "false": TokenType.BOOLEAN,
    "null": TokenType.NULL,
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
}

TWO_CHAR_TOKENS: dict[str, TokenType] = {
    "=>": TokenType.ARROW,
    "==": TokenType.DOUBLE_EQUALS,
    "!=": TokenType.NOT_EQUALS,
    "<=": TokenType.LTE,
    ">=": TokenType.GTE,
}

SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "|": TokenType.PIPE,
    ".": TokenType.DOT,
    "=": TokenType.EQUALS,
    "<": TokenType.LT,
    ">": TokenType.GT,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
}

WHITESPACE = (" ", "\t", "\r", "\n")


# ---------------------------------------------------------------------------
# Token dataclass
# ---------------------------------------------------------------------------

@dataclass
class Token:
    type: TokenType
    value: str
    line: int
    column: int
    start: int = 0
    end: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, L{self.line}:{self.column})"


def _is_ident_start(ch: str) -> bool:
    return "a" <= ch <= "z" or "A" <= ch <= "Z"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_ident_char(ch: str) -> bool:
    return _is_ident_start(ch) or _is_digit(ch) or ch in ("_", "-")


# Lexer modes
_CODE = "code"
_INTERPOLATION = "interpolation"
_TEXT = "text"


@dataclass
class _Mode:
    kind: str
    depth: int = 0  # open '{' not yet closed inside this code frame


# ---------------------------------------------------------------------------
# Lexer
# ---------------------------------------------------------------------------

class Lexer:
    """Scans CXQL source text and produces a flat list of Token objects."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos: int = 0
        self.line: int = 1
        self.col: int = 1
        self.tokens: list[Token] = []
        self.modes: list[_Mode] = [_Mode(_CODE)]

    # -- Character-level helpers -------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at EOF."""
        if self.pos < len(self.source):
            return self.source[self.pos]
        return ""

    def peek(self) -> str:
        """Look ahead one character without consuming it."""
        next_pos = self.pos + 1
        if next_pos < len(self.source):
            return self.source[next_pos]
        return ""

    def advance(self) -> str:
        """Consume and return the current character, advancing position."""
        ch = self._current()
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _emit(self, token_type: TokenType, start: int, line: int, col: int) -> Token:
        tok = Token(token_type, self.source[start:self.pos], line, col, start, self.pos)
        self.tokens.append(tok)
        return tok

    # -- Main entry point --------------------------------------------------

    def tokenize(self) -> list[Token]:
        """Scan the entire source and return a list of tokens ending with EOF."""
        while not self._at_end():
            if self.modes[-1].kind == _TEXT:
                self._scan_fstring_text()
            else:
                self._scan_code()

        # An f-string still open here is reported by the parser, anchored at
        # its FSTRING_START token.
        self.tokens.append(Token(TokenType.EOF, "", self.line, self.col, self.pos, self.pos))
        return self.tokens

    def _scan_code(self) -> None:
        """Scan one token (or skip one piece of trivia) in code mode."""
        ch = self._current()
        start, line, col = self.pos, self.line, self.col

        if ch in WHITESPACE:
            self.advance()
            return

        if ch == "#":
            self._skip_comment()
            return

        if ch in ('"', "'"):
            self._read_string(ch)
            return

        if _is_digit(ch):
            self._read_number()
            return

        if _is_ident_start(ch):
            self._read_word()
            return

        if ch == "$":
            self._read_dollar()
            return

        if ch == "{":
            self.modes[-1].depth += 1
            self.advance()
            self._emit(TokenType.LBRACE, start, line, col)
            return

        if ch == "}":
            mode = self.modes[-1]
            if mode.depth > 0:
                mode.depth -= 1
            elif mode.kind == _INTERPOLATION:
                self.modes.pop()
            self.advance()
            self._emit(TokenType.RBRACE, start, line, col)
            return

        # Multi-character operators (must check before single-char)
        two = self.source[self.pos:self.pos + 2]
        if two in TWO_CHAR_TOKENS:
            self.advance()
            self.advance()
            self._emit(TWO_CHAR_TOKENS[two], start, line, col)
            return

        self.advance()
        self._emit(SINGLE_CHAR_TOKENS.get(ch, TokenType.INVALID), start, line, col)

    def _scan_fstring_text(self) -> None:
        """Scan one token inside the literal part of an f-string."""
        start, line, col = self.pos, self.line, self.col
        ch = self._current()

        if ch == '"':
            self.advance()
            self.modes.pop()
            self._emit(TokenType.FSTRING_END, start, line, col)
            return

        if ch == "{":
            self.advance()
            self.modes.append(_Mode(_INTERPOLATION))
            self._emit(TokenType.LBRACE, start, line, col)
            return

        while not self._at_end() and self._current() not in ('"', "{"):
            self.advance()
        self._emit(TokenType.FSTRING_TEXT, start, line, col)

    # -- Token readers -----------------------------------------------------

    def _skip_comment(self) -> None:
        """Consume from # to end of line (or end of source)."""
        while not self._at_end() and self._current() != "\n":
            self.advance()

    def _read_string(self, quote: str) -> None:
        """Read a quoted string; escapes are kept verbatim in the lexeme.

        An unterminated string swallows the rest of the input as a single
        INVALID token.
        """
        start, line, col = self.pos, self.line, self.col
        self.advance()  # consume opening quote

        while not self._at_end():
            ch = self._current()
            if ch == "\\":
                self.advance()
                if self._at_end():
                    break
                self.advance()
                continue
            self.advance()
            if ch == quote:
                self._emit(TokenType.STRING, start, line, col)
                return

        self._emit(TokenType.INVALID, start, line, col)

    def _read_number(self) -> None:
        """Read ``[0-9]+(\\.[0-9]+)?([eE][+-]?[0-9]+)?``."""
        start, line, col = self.pos, self.line, self.col

        while _is_digit(self._current()):
            self.advance()

        # Optional decimal part
        if self._current() == "." and _is_digit(self.peek()):
            self.advance()  # consume '.'
            while _is_digit(self._current()):
                self.advance()

        # Optional exponent, only when digits actually follow
        if self._current() in ("e", "E"):
            lookahead = self.pos + 1
            if self.source[lookahead:lookahead + 1] in ("+", "-"):
                lookahead += 1
            if _is_digit(self.source[lookahead:lookahead + 1]):
                while self.pos < lookahead:
                    self.advance()
                while _is_digit(self._current()):
                    self.advance()

        self._emit(TokenType.NUMBER, start, line, col)

    def _read_word(self) -> None:
        """Read ``[a-zA-Z][a-zA-Z0-9_-]*`` as an identifier or word operator."""
        start, line, col = self.pos, self.line, self.col
        while _is_ident_char(self._current()):
            self.advance()
        word = self.source[start:self.pos]
        self._emit(WORD_TOKENS.get(word, TokenType.IDENTIFIER), start, line, col)

    def _read_dollar(self) -> None:
        """Read ``$"`` (f-string opener) or ``$name`` (variable reference)."""
        start, line, col = self.pos, self.line, self.col
        self.advance()  # consume '$'

        if self._current() == '"':
            self.advance()
            self.modes.append(_Mode(_TEXT))
            self._emit(TokenType.FSTRING_START, start, line, col)
            return

        if _is_ident_start(self._current()):
            while _is_ident_char(self._current()):
                self.advance()
            self._emit(TokenType.VARIABLE, start, line, col)
            return

        self._emit(TokenType.INVALID, start, line, col)


def tokenize(source: str) -> list[Token]:
    """Convenience: scan *source* and return its tokens."""
    return Lexer(source).tokenize()
