"""CXQL parser — recursive-descent parser producing an AST from tokens.

Expressions are parsed by precedence climbing with one method per level,
each calling into the next-tighter level for its operands:

    0  =>                 right        parse_arrow
    1  or                 left         parse_or
    2  and                left         parse_and
    3  not                prefix       parse_not
    4  == !=              left         parse_equality
    5  < > <= >=          left         parse_comparison
    6  + - |              left         parse_additive
    7  * / %              left         parse_multiplicative
    8  unary -            prefix       parse_unary
    9  call (...)         postfix      parse_postfix
    10 member .name       postfix      parse_postfix

A ``not`` or ``x =>`` met where an operand is expected starts a prefix form
that extends as far right as possible, so ``a | x => x | b`` pipes ``a``
into ``x => x | b``.  Nesting deeper than ``MAX_NESTING`` is a syntax error.

The parser never stops at the first error.  Statements are recovery points:
a failed statement is recorded in ``Parser.errors``, replaced by an
``ErrorNode`` and skipped up to the next statement boundary.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable

from cxql.lexer import Lexer, Token, TokenType, SINGLE_CHAR_TOKENS, TWO_CHAR_TOKENS
from cxql.errors import ParseError, LexerError
from cxql.ast_nodes import (
    Program,
    LetStatement,
    ConnectStatement,
    WithStatement,
    Block,
    IfExpression,
    BinaryExpression,
    UnaryExpression,
    LogicalNotExpression,
    Pipeline,
    ArrowExpression,
    MemberExpression,
    FunctionCall,
    KeywordArgument,
    LabeledBlock,
    ListLiteral,
    Property,
    RecordLiteral,
    Identifier,
    NumberLiteral,
    StringLiteral,
    BooleanLiteral,
    NullLiteral,
    VariableReference,
    FStringLiteral,
    ErrorNode,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Keywords and precedence
# ---------------------------------------------------------------------------

# Words that can never name a value.  ``if`` starts an if-expression instead.
RESERVED_WORDS = frozenset({"let", "connect", "if", "else", "with", "as"})

# Labels allowed in front of a record body inside an argument list.
BLOCK_LABELS = frozenset({"where", "with", "set", "using", "params"})

# Error recovery stops in front of these words.
SYNC_WORDS = frozenset({"let", "connect", "if", "with"})

# Deepest expression nesting accepted before a syntax error is reported.
MAX_NESTING = 32

BINARY_PRECEDENCE: dict[str, int] = {
    "*": 7, "/": 7, "%": 7,
    "+": 6, "-": 6, "|": 6,
    "<": 5, ">": 5, "<=": 5, ">=": 5,
    "==": 4, "!=": 4,
    "and": 2,
    "or": 1,
}

_EQUALITY_OPS = {TokenType.DOUBLE_EQUALS: "==", TokenType.NOT_EQUALS: "!="}
_COMPARISON_OPS = {TokenType.LT: "<", TokenType.GT: ">", TokenType.LTE: "<=", TokenType.GTE: ">="}
_ADDITIVE_OPS = {TokenType.PLUS: "+", TokenType.MINUS: "-", TokenType.PIPE: "|"}
_MULTIPLICATIVE_OPS = {TokenType.STAR: "*", TokenType.SLASH: "/", TokenType.PERCENT: "%"}

_OPENERS = {
    TokenType.LPAREN: TokenType.RPAREN,
    TokenType.LBRACKET: TokenType.RBRACKET,
    TokenType.LBRACE: TokenType.RBRACE,
}

_TYPE_DESCRIPTIONS: dict[TokenType, str] = {
    token_type: repr(text)
    for text, token_type in {**SINGLE_CHAR_TOKENS, **TWO_CHAR_TOKENS}.items()
}
_TYPE_DESCRIPTIONS.update({
    TokenType.LBRACE: "'{'",
    TokenType.RBRACE: "'}'",
    TokenType.IDENTIFIER: "identifier",
    TokenType.STRING: "string",
    TokenType.FSTRING_END: "'\"'",
    TokenType.EOF: "end of input",
})


def _describe(tok: Token) -> str:
    if tok.type == TokenType.EOF:
        return "end of input"
    if tok.type == TokenType.FSTRING_TEXT:
        return "f-string text"
    return repr(tok.value)


def _number_value(raw: str) -> int | float:
    if any(ch in raw for ch in ".eE"):
        return float(raw)
    return int(raw)


def _track_bracket(pending: list[TokenType], token_type: TokenType) -> None:
    """Maintain the stack of closers still owed by the skipped tokens."""
    if token_type in _OPENERS:
        pending.append(_OPENERS[token_type])
    elif token_type in pending:
        while pending.pop() != token_type:
            pass


@dataclass
class ParserOptions:
    # Also accept the older ``connect <expr> as <alias>`` statement form.
    legacy_connect: bool = False


@dataclass
class ParseResult:
    tree: Program
    errors: list[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class Parser:
    """Recursive-descent parser for the CXQL language.

    Consumes a flat list of tokens (from the Lexer) and produces an AST
    rooted at a ``Program`` node.  Syntax errors are collected in
    ``self.errors`` rather than raised.
    """

    def __init__(self, tokens: list[Token], options: ParserOptions | None = None) -> None:
        self.tokens = tokens
        self.options = options or ParserOptions()
        self.pos: int = 0
        self.errors: list[ParseError] = []
        self._speculating: int = 0
        self._depth: int = 0

    # -- Navigation helpers ------------------------------------------------

    def current(self) -> Token:
        """Return the token at the current position, or an EOF token if past end."""
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        # Synthesise an EOF token so callers never crash
        last = self.tokens[-1] if self.tokens else Token(TokenType.EOF, "", 1, 1)
        return Token(TokenType.EOF, "", last.line, last.column, last.end, last.end)

    def peek(self, offset: int = 1) -> Token:
        """Look ahead *offset* tokens without consuming."""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.current() if self.pos >= len(self.tokens) else self.tokens[-1]

    def previous(self) -> Token:
        """Return the most recently consumed token."""
        return self.tokens[self.pos - 1] if self.pos > 0 else self.current()

    def advance(self) -> Token:
        """Consume and return the current token.  EOF is never consumed."""
        tok = self.current()
        if tok.type != TokenType.EOF:
            self.pos += 1
        return tok

    def at_end(self) -> bool:
        """Check whether the current token is EOF."""
        return self.current().type == TokenType.EOF

    def check(self, token_type: TokenType) -> bool:
        return self.current().type == token_type

    def check_word(self, word: str) -> bool:
        tok = self.current()
        return tok.type == TokenType.IDENTIFIER and tok.value == word

    def match(self, *types: TokenType) -> Token | None:
        """If the current token matches any of *types*, consume and return it; else None."""
        if self.current().type in types:
            return self.advance()
        return None

    def expect(self, token_type: TokenType, description: str | None = None) -> Token:
        """Consume the current token if it matches *token_type*, else raise ParseError."""
        if self.current().type != token_type:
            raise self._error(description or _TYPE_DESCRIPTIONS.get(token_type, token_type.name.lower()))
        return self.advance()

    def expect_word(self, word: str) -> Token:
        """Consume the identifier *word* (a keyword in this position)."""
        if not self.check_word(word):
            raise self._error(f"'{word}'")
        return self.advance()

    def expect_name(self, description: str = "identifier") -> Token:
        """Consume an identifier that is not a reserved word."""
        tok = self.current()
        if tok.type != TokenType.IDENTIFIER or tok.value in RESERVED_WORDS:
            raise self._error(description)
        return self.advance()

    # -- Errors and positions ----------------------------------------------

    def _error(self, expected: str | tuple[str, ...], tok: Token | None = None) -> ParseError:
        """Build (not raise) the error for an unexpected token."""
        tok = tok or self.current()
        if isinstance(expected, str):
            expected = (expected,)
        found = _describe(tok)
        if tok.type == TokenType.INVALID:
            if tok.value[:1] in ('"', "'"):
                message = "Unterminated string literal"
            else:
                message = f"Unrecognized character {tok.value!r}"
            return LexerError(message, tok.line, tok.column, tok.start, expected, found)
        return ParseError(
            f"Expected {' or '.join(expected)} but got {found}",
            tok.line,
            tok.column,
            tok.start,
            expected,
            found,
        )

    def _span(self, first: Token | Any) -> dict:
        """Position fields for a node from *first* (token or node) to the last consumed token."""
        col = first.column if isinstance(first, Token) else first.col
        end = max(self.previous().end, first.start) if self.pos > 0 else first.start
        return {"start": first.start, "end": end, "line": first.line, "col": col}

    # -- Top-level ---------------------------------------------------------

    def parse(self) -> Program:
        """Parse the full token stream into a ``Program`` AST node."""
        body: list = []
        while not self.at_end():
            body.append(self._recovering(self.parse_statement, in_block=False))
        self.errors.sort(key=lambda err: err.offset)
        eof = self.current()
        return Program(body=tuple(body), start=0, end=eof.end, line=1, col=1)

    # -- Error recovery ----------------------------------------------------

    def _recovering(self, parse: Callable[[], Any], in_block: bool) -> Any:
        """Run *parse*; on a syntax error record it and skip to a statement boundary.

        While speculating the error propagates instead, so the trial can be
        abandoned without leaving anything behind.
        """
        start_pos = self.pos
        first = self.current()
        try:
            return parse()
        except ParseError as err:
            if self._speculating:
                raise
            self.errors.append(err)
            if self.pos == start_pos:
                self.advance()
            self._synchronize(start_pos, in_block)
            logger.debug("recovered from %s; resuming at %r", err, self.current())
            return ErrorNode(message=err.message, **self._span(first))

    def _synchronize(self, start_pos: int, in_block: bool) -> None:
        """Skip tokens up to the next statement boundary.

        Brackets opened by the failed statement are closed first, so the '}'
        of a half-parsed record does not end the enclosing block.
        """
        pending: list[TokenType] = []
        for tok in self.tokens[start_pos:self.pos]:
            _track_bracket(pending, tok.type)

        while not self.at_end():
            tok = self.current()
            if in_block and tok.type == TokenType.RBRACE and TokenType.RBRACE not in pending:
                return
            if not pending and tok.type == TokenType.IDENTIFIER and tok.value in SYNC_WORDS:
                return
            _track_bracket(pending, tok.type)
            self.advance()

    def _parse_first_of(self, *alternatives: Callable[[], Any]) -> Any:
        """Try each alternative on a speculative cursor; return the first that parses.

        Nothing is recorded while speculating and the cursor is reset after a
        failed attempt.  If every alternative fails, the one that got farthest
        into the input (later alternatives win ties) decides the outcome.
        Inside an enclosing trial its error is raised as is.  Otherwise it is
        run again for real so recovery inside it records the error.
        """
        start = self.pos
        farthest: tuple[Callable[[], Any], ParseError] | None = None
        for alternative in alternatives:
            self._speculating += 1
            try:
                return alternative()
            except ParseError as err:
                self.pos = start
                if farthest is None or err.offset >= farthest[1].offset:
                    farthest = (alternative, err)
            finally:
                self._speculating -= 1

        alternative, err = farthest
        if self._speculating:
            raise err
        logger.debug("no alternative matched at %r; reporting %s", self.current(), alternative.__name__)
        return alternative()

    @contextmanager
    def _nested(self):
        """Count one level of expression nesting, failing past ``MAX_NESTING``."""
        self._depth += 1
        try:
            if self._depth > MAX_NESTING:
                tok = self.current()
                raise ParseError(
                    "Expression nested too deeply",
                    tok.line,
                    tok.column,
                    tok.start,
                    ("expression",),
                    _describe(tok),
                )
            yield
        finally:
            self._depth -= 1

    # -- Statement parsing -------------------------------------------------

    def parse_statement(self):
        """Parse a single statement: let, connect, with, or a bare expression."""
        tok = self.current()
        if tok.type == TokenType.IDENTIFIER:
            if tok.value == "let":
                return self.parse_let()
            if tok.value == "connect":
                return self.parse_connect()
            if tok.value == "with":
                return self.parse_with()
        return self.parse_expression()

    def parse_let(self) -> LetStatement:
        """Parse ``let name = expr``."""
        tok = self.expect_word("let")
        name = self.expect_name("variable name")
        self.expect(TokenType.EQUALS)
        value = self.parse_expression()
        return LetStatement(name=name.value, value=value, **self._span(tok))

    def parse_connect(self) -> ConnectStatement:
        """Parse ``connect(source, as="alias")``.

        With ``legacy_connect`` enabled the older ``connect source as alias``
        form is tried as well.
        """
        tok = self.expect_word("connect")
        if self.options.legacy_connect:
            source, alias = self._parse_first_of(self._parse_connect_call, self._parse_connect_legacy)
        else:
            source, alias = self._parse_connect_call()
        return ConnectStatement(source=source, alias=alias, **self._span(tok))

    def _parse_connect_call(self) -> tuple[Any, str]:
        self.expect(TokenType.LPAREN)
        source = self.parse_expression()
        self.expect(TokenType.COMMA)
        self.expect_word("as")
        self.expect(TokenType.EQUALS)
        alias = self.expect(TokenType.STRING, "alias string")
        self.match(TokenType.COMMA)
        self.expect(TokenType.RPAREN)
        return source, alias.value[1:-1]

    def _parse_connect_legacy(self) -> tuple[Any, str]:
        source = self.parse_expression()
        self.expect_word("as")
        if self.check(TokenType.STRING):
            return source, self.advance().value[1:-1]
        return source, self.expect_name("alias").value

    def parse_with(self) -> WithStatement:
        """Parse ``with alias { ... }``."""
        tok = self.expect_word("with")
        alias = self.expect_name("alias")
        body = self.parse_block()
        return WithStatement(alias=alias.value, body=body, **self._span(tok))

    # -- Blocks and control flow -------------------------------------------

    def parse_block(self) -> Block:
        """Parse ``{ let ... let ... [result] }``.

        Each ``let`` and the trailing result expression is a recovery point.
        """
        tok = self.expect(TokenType.LBRACE)
        statements: list = []
        result = None

        while not self.check(TokenType.RBRACE) and not self.at_end():
            if result is None and self.check_word("let"):
                statements.append(self._recovering(self.parse_let, in_block=True))
            elif result is None:
                result = self._recovering(self.parse_expression, in_block=True)
                if isinstance(result, ErrorNode):
                    statements.append(result)
                    result = None
            else:
                self._recovering(self._reject_after_result, in_block=True)

        self.expect(TokenType.RBRACE)
        return Block(statements=tuple(statements), result=result, **self._span(tok))

    def _reject_after_result(self):
        raise self._error("'}'")

    def parse_if(self) -> IfExpression:
        """Parse ``if {cond} {then} [else {otherwise}]``; every part is a block."""
        tok = self.expect_word("if")
        condition = self.parse_block()
        consequent = self.parse_block()
        alternative = None
        if self.check_word("else"):
            self.advance()
            alternative = self.parse_block()
        return IfExpression(
            condition=condition,
            consequent=consequent,
            alternative=alternative,
            **self._span(tok),
        )

    # -- Expression parsing (recursive descent by precedence) --------------

    def parse_expression(self):
        """Entry point for expression parsing — lowest precedence."""
        with self._nested():
            return self.parse_arrow()

    def parse_arrow(self):
        """Parse ``param => body`` (right-associative)."""
        tok = self.current()
        if (
            tok.type == TokenType.IDENTIFIER
            and tok.value not in RESERVED_WORDS
            and self.peek().type == TokenType.ARROW
        ):
            self.advance()  # consume parameter
            self.advance()  # consume =>
            with self._nested():
                body = self.parse_arrow()
            return ArrowExpression(parameter=tok.value, body=body, **self._span(tok))
        return self.parse_or()

    def _parse_left_assoc(self, operand: Callable[[], Any], operators: dict[TokenType, str]):
        left = operand()
        while self.current().type in operators:
            op = operators[self.advance().type]
            right = operand()
            left = BinaryExpression(left=left, op=op, right=right, **self._span(left))
        return left

    def parse_or(self):
        return self._parse_left_assoc(self.parse_and, {TokenType.OR: "or"})

    def parse_and(self):
        return self._parse_left_assoc(self.parse_not, {TokenType.AND: "and"})

    def parse_not(self):
        """Parse ``not`` prefix; its operand binds at equality level."""
        if self.check(TokenType.NOT):
            tok = self.advance()
            with self._nested():
                operand = self.parse_not()
            return LogicalNotExpression(operand=operand, **self._span(tok))
        return self.parse_equality()

    def parse_equality(self):
        return self._parse_left_assoc(self.parse_comparison, _EQUALITY_OPS)

    def parse_comparison(self):
        return self._parse_left_assoc(self.parse_additive, _COMPARISON_OPS)

    def parse_additive(self):
        """Parse ``+``, ``-`` and ``|``, which share one left-associative level.

        A run of ``|`` operators becomes a single flat ``Pipeline``; a
        parenthesized pipeline used as a stage stays nested.
        """
        left = self.parse_multiplicative()
        chain: Pipeline | None = None

        while self.current().type in _ADDITIVE_OPS:
            op = _ADDITIVE_OPS[self.advance().type]
            right = self.parse_multiplicative()
            if op != "|":
                left = BinaryExpression(left=left, op=op, right=right, **self._span(left))
                chain = None
            elif left is chain:
                left = chain = Pipeline(stages=chain.stages + (right,), **self._span(left))
            else:
                left = chain = Pipeline(stages=(left, right), **self._span(left))
        return left

    def parse_multiplicative(self):
        return self._parse_left_assoc(self.parse_unary, _MULTIPLICATIVE_OPS)

    def parse_unary(self):
        """Parse unary ``-`` prefix."""
        if self.check(TokenType.MINUS):
            tok = self.advance()
            with self._nested():
                operand = self.parse_unary()
            return UnaryExpression(op="-", operand=operand, **self._span(tok))
        return self.parse_postfix()

    def parse_postfix(self):
        """Parse postfix operations: ``.name`` member access and ``(args)`` calls."""
        node = self.parse_primary()

        while True:
            if self.check(TokenType.DOT):
                self.advance()  # consume '.'
                name = self.expect(TokenType.IDENTIFIER, "property name")
                node = MemberExpression(object=node, property=name.value, **self._span(node))
            elif self.check(TokenType.LPAREN):
                node = self._parse_call(node)
            else:
                break

        return node

    # -- Calls ---------------------------------------------------------------

    def _parse_call(self, callee) -> FunctionCall:
        """Parse a function call ``(arg1, name = value, where { ... }, ...)``."""
        self.expect(TokenType.LPAREN)
        arguments = self._parse_comma_separated(TokenType.RPAREN, self._parse_argument)
        self.expect(TokenType.RPAREN)
        return FunctionCall(callee=callee, arguments=tuple(arguments), **self._span(callee))

    def _parse_argument(self):
        """Parse one call argument: labeled block, keyword argument or expression."""
        tok = self.current()
        if tok.type == TokenType.IDENTIFIER:
            nxt = self.peek()
            if tok.value in BLOCK_LABELS and (
                nxt.type == TokenType.LBRACE
                or (
                    nxt.type == TokenType.COLON
                    and self.peek(2).type == TokenType.IDENTIFIER
                    and self.peek(3).type == TokenType.LBRACE
                )
            ):
                return self._parse_labeled_block()
            if nxt.type == TokenType.EQUALS:
                return self._parse_keyword_argument()
        return self.parse_expression()

    def _parse_keyword_argument(self) -> KeywordArgument:
        """Parse ``name = expr``."""
        name = self.expect(TokenType.IDENTIFIER)
        self.expect(TokenType.EQUALS)
        value = self.parse_expression()
        return KeywordArgument(name=name.value, value=value, **self._span(name))

    def _parse_labeled_block(self) -> LabeledBlock:
        """Parse ``label { ... }`` or ``label: Type { ... }``; the body is always a record."""
        label = self.expect(TokenType.IDENTIFIER)
        type_tag = None
        if self.match(TokenType.COLON):
            type_tag = self.expect(TokenType.IDENTIFIER, "type name").value
        body = self._parse_record_literal()
        return LabeledBlock(label=label.value, type_tag=type_tag, body=body, **self._span(label))

    def _parse_comma_separated(self, closer: TokenType, parse_item: Callable[[], Any]) -> list:
        """Parse ``item, item, ...`` up to (not including) *closer*; a trailing comma is allowed."""
        items: list = []
        while not self.check(closer):
            items.append(parse_item())
            if not self.match(TokenType.COMMA):
                break
        return items

    # -- Primary expressions -----------------------------------------------

    def parse_primary(self):
        """Parse primary (atomic) expressions."""
        tok = self.current()

        if tok.type == TokenType.NUMBER:
            self.advance()
            return NumberLiteral(value=_number_value(tok.value), raw=tok.value, **self._span(tok))

        if tok.type == TokenType.STRING:
            self.advance()
            return self._string_literal(tok)

        if tok.type == TokenType.BOOLEAN:
            self.advance()
            return BooleanLiteral(value=tok.value == "true", **self._span(tok))

        if tok.type == TokenType.NULL:
            self.advance()
            return NullLiteral(**self._span(tok))

        if tok.type == TokenType.VARIABLE:
            self.advance()
            return VariableReference(name=tok.value[1:], **self._span(tok))

        if tok.type == TokenType.FSTRING_START:
            return self._parse_fstring()

        # Prefix forms in operand position: ``a | x => x``, ``a == not b``
        if tok.type == TokenType.NOT:
            return self.parse_not()

        if tok.type == TokenType.IDENTIFIER:
            if tok.value == "if":
                return self.parse_if()
            if tok.value not in RESERVED_WORDS and self.peek().type == TokenType.ARROW:
                return self.parse_arrow()
            if tok.value in RESERVED_WORDS:
                raise self._error("expression")
            self.advance()
            return Identifier(name=tok.value, **self._span(tok))

        # Grouped expression: ( expr )
        if tok.type == TokenType.LPAREN:
            self.advance()  # consume '('
            node = self.parse_expression()
            self.expect(TokenType.RPAREN)
            return node

        if tok.type == TokenType.LBRACKET:
            return self._parse_list_literal()

        # Record literal or block: both are brace-delimited and may be empty
        if tok.type == TokenType.LBRACE:
            return self._parse_first_of(self._parse_record_literal, self.parse_block)

        raise self._error("expression")

    def _string_literal(self, tok: Token) -> StringLiteral:
        return StringLiteral(value=tok.value[1:-1], quote=tok.value[0], **self._span(tok))

    def _parse_list_literal(self) -> ListLiteral:
        """Parse ``[expr, expr, ...]``."""
        tok = self.expect(TokenType.LBRACKET)
        elements = self._parse_comma_separated(TokenType.RBRACKET, self.parse_expression)
        self.expect(TokenType.RBRACKET)
        return ListLiteral(elements=tuple(elements), **self._span(tok))

    def _parse_record_literal(self) -> RecordLiteral:
        """Parse ``{ key: value, "key": value, ... }``.  Duplicate keys are kept."""
        tok = self.expect(TokenType.LBRACE)
        properties = self._parse_comma_separated(TokenType.RBRACE, self._parse_property)
        self.expect(TokenType.RBRACE)
        return RecordLiteral(properties=tuple(properties), **self._span(tok))

    def _parse_property(self) -> Property:
        """Parse ``key: value`` — the key is an identifier or a string literal."""
        tok = self.current()
        if tok.type == TokenType.STRING:
            self.advance()
            key = self._string_literal(tok)
        elif tok.type == TokenType.IDENTIFIER:
            self.advance()
            key = Identifier(name=tok.value, **self._span(tok))
        else:
            raise self._error("property key")
        self.expect(TokenType.COLON)
        value = self.parse_expression()
        return Property(key=key, value=value, **self._span(tok))

    def _parse_fstring(self) -> FStringLiteral:
        """Parse ``$"text {expr} text"``; each interpolation is a full expression."""
        tok = self.expect(TokenType.FSTRING_START)
        parts: list = []

        while True:
            cur = self.current()
            if cur.type == TokenType.FSTRING_END:
                self.advance()
                break
            if cur.type == TokenType.FSTRING_TEXT:
                self.advance()
                parts.append(cur.value)
            elif cur.type == TokenType.LBRACE:
                self.advance()
                try:
                    parts.append(self.parse_expression())
                    self.expect(TokenType.RBRACE)
                except ParseError as err:
                    if not self.at_end():
                        raise
                    raise self._unterminated_fstring(tok) from err
            else:
                # The lexer only leaves an f-string unclosed at end of input
                raise self._unterminated_fstring(tok)

        return FStringLiteral(parts=tuple(parts), **self._span(tok))

    def _unterminated_fstring(self, tok: Token) -> ParseError:
        """Error for an f-string still open at end of input, anchored at its ``$"``."""
        return ParseError(
            "Unterminated f-string",
            tok.line,
            tok.column,
            tok.start,
            ("'\"'",),
            _describe(self.current()),
        )


def parse(source: str, options: ParserOptions | None = None) -> ParseResult:
    """Tokenize and parse *source*, returning the tree and every syntax error."""
    parser = Parser(Lexer(source).tokenize(), options)
    tree = parser.parse()
    return ParseResult(tree=tree, errors=parser.errors)
