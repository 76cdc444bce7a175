"""CXQL — lexer, parser and formatter for the CXQL pipeline language."""

from cxql.lexer import Lexer, Token, TokenType, tokenize
from cxql.parser import Parser, ParserOptions, ParseResult, parse
from cxql.formatter import Formatter, pretty_print
from cxql.errors import CxqlError, ParseError, LexerError, FormatError, ConfigError

__all__ = [
    "Lexer", "Token", "TokenType", "tokenize",
    "Parser", "ParserOptions", "ParseResult", "parse",
    "Formatter", "pretty_print",
    "CxqlError", "ParseError", "LexerError", "FormatError", "ConfigError",
]
