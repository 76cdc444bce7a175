"""CXQL error types with source location info."""

from __future__ import annotations


class CxqlError(Exception):
    def __init__(self, message: str, line: int = 0, column: int = 0, offset: int = 0):
        self.message = message
        self.line = line
        self.column = column
        self.offset = offset
        super().__init__(f"Line {line}, Col {column}: {message}")


class ParseError(CxqlError):
    """A production failed to match.

    ``expected`` names the tokens or constructs that would have been accepted,
    ``found`` describes the token actually seen.
    """

    def __init__(
        self,
        message: str,
        line: int = 0,
        column: int = 0,
        offset: int = 0,
        expected: tuple[str, ...] = (),
        found: str = "",
    ):
        self.expected = expected
        self.found = found
        super().__init__(message, line, column, offset)


class LexerError(ParseError):
    """An invalid token (unrecognised character or unterminated string)."""


class FormatError(CxqlError):
    pass


class ConfigError(CxqlError):
    pass
