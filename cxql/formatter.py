"""CXQL formatter — walks the AST and emits canonical CXQL source code.

Parentheses are inserted from the precedence table only where the tree needs
them, so formatting a parsed program and parsing the result again yields an
equal tree.
"""

from __future__ import annotations

from cxql.ast_nodes import (
    Node,
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
    RecordLiteral,
    Identifier,
    NumberLiteral,
    StringLiteral,
    BooleanLiteral,
    NullLiteral,
    VariableReference,
    FStringLiteral,
)
from cxql.errors import FormatError
from cxql.parser import BINARY_PRECEDENCE

_PRIMARY = 11


def _precedence(node: Node) -> int:
    """Binding level of *node* as an operand (higher binds tighter)."""
    if isinstance(node, ArrowExpression):
        return 0
    if isinstance(node, BinaryExpression):
        return BINARY_PRECEDENCE[node.op]
    if isinstance(node, Pipeline):
        return BINARY_PRECEDENCE["|"]
    if isinstance(node, LogicalNotExpression):
        return 3
    if isinstance(node, UnaryExpression):
        return 8
    if isinstance(node, FunctionCall):
        return 9
    if isinstance(node, MemberExpression):
        return 10
    return _PRIMARY


class Formatter:
    """Format a CXQL AST (a whole ``Program`` or any single node) as source."""

    def __init__(self, node: Node, indent: int = 2) -> None:
        self.node = node
        self.indent = indent
        self.indent_level: int = 0

    def format(self) -> str:
        """Format the node; a program gets one statement per line."""
        if isinstance(self.node, Program):
            lines = [self._emit_statement(stmt) for stmt in self.node.body]
            return "\n".join(lines) + "\n" if lines else ""
        return self._emit_statement(self.node)

    def _indent(self) -> str:
        """Return the current indentation string."""
        return " " * (self.indent * self.indent_level)

    # -- Statement emission ------------------------------------------------

    def _emit_statement(self, node) -> str:
        if isinstance(node, LetStatement):
            return f"let {node.name} = {self._emit_expr(node.value)}"
        if isinstance(node, ConnectStatement):
            return f"connect({self._emit_expr(node.source)}, as={self._quote(node.alias)})"
        if isinstance(node, WithStatement):
            return f"with {node.alias} {self._emit_block(node.body)}"
        return self._emit_expr(node)

    def _emit_block(self, block: Block) -> str:
        """Emit a block: ``{}``, inline ``{ result }``, or one statement per line."""
        if not block.statements:
            if block.result is None:
                return "{}"
            return f"{{ {self._emit_expr(block.result)} }}"

        self.indent_level += 1
        lines = [self._indent() + self._emit_statement(stmt) for stmt in block.statements]
        if block.result is not None:
            lines.append(self._indent() + self._emit_expr(block.result))
        self.indent_level -= 1
        return "{\n" + "\n".join(lines) + "\n" + self._indent() + "}"

    # -- Expression emission -----------------------------------------------

    def _wrap(self, node, min_precedence: int) -> str:
        """Emit *node*, parenthesized if it binds looser than *min_precedence*."""
        text = self._emit_expr(node)
        if _precedence(node) < min_precedence:
            return f"({text})"
        return text

    def _emit_expr(self, node) -> str:
        """Emit an expression, returning a CXQL expression string."""
        if isinstance(node, NumberLiteral):
            return node.raw or repr(node.value)
        if isinstance(node, StringLiteral):
            return f"{node.quote}{node.value}{node.quote}"
        if isinstance(node, BooleanLiteral):
            return "true" if node.value else "false"
        if isinstance(node, NullLiteral):
            return "null"
        if isinstance(node, Identifier):
            return node.name
        if isinstance(node, VariableReference):
            return f"${node.name}"
        if isinstance(node, FStringLiteral):
            return self._emit_fstring(node)
        if isinstance(node, ListLiteral):
            return "[" + ", ".join(self._emit_expr(e) for e in node.elements) + "]"
        if isinstance(node, RecordLiteral):
            return self._emit_record(node)
        if isinstance(node, Block):
            return self._emit_block(node)
        if isinstance(node, IfExpression):
            return self._emit_if(node)
        if isinstance(node, MemberExpression):
            return f"{self._wrap(node.object, 9)}.{node.property}"
        if isinstance(node, FunctionCall):
            return self._emit_call(node)
        if isinstance(node, UnaryExpression):
            return f"{node.op}{self._wrap(node.operand, 8)}"
        if isinstance(node, LogicalNotExpression):
            return f"not {self._wrap(node.operand, 3)}"
        if isinstance(node, BinaryExpression):
            return self._emit_binary(node)
        if isinstance(node, Pipeline):
            return self._emit_pipeline(node)
        if isinstance(node, ArrowExpression):
            return f"{node.parameter} => {self._emit_expr(node.body)}"

        raise FormatError(
            f"Cannot format {type(node).__name__}",
            getattr(node, "line", 0),
            getattr(node, "col", 0),
            getattr(node, "start", 0),
        )

    def _emit_binary(self, node: BinaryExpression) -> str:
        level = BINARY_PRECEDENCE[node.op]
        left = self._wrap(node.left, level)
        right = self._wrap(node.right, level + 1)
        return f"{left} {node.op} {right}"

    def _emit_pipeline(self, node: Pipeline) -> str:
        """Emit ``a | b | c``; a pipeline used as the first stage keeps its parentheses."""
        level = BINARY_PRECEDENCE["|"]
        first, *rest = node.stages
        parts = [self._wrap(first, level + 1 if isinstance(first, Pipeline) else level)]
        parts.extend(self._wrap(stage, level + 1) for stage in rest)
        return " | ".join(parts)

    def _emit_call(self, node: FunctionCall) -> str:
        args = ", ".join(self._emit_argument(arg) for arg in node.arguments)
        return f"{self._wrap(node.callee, 9)}({args})"

    def _emit_argument(self, node) -> str:
        if isinstance(node, KeywordArgument):
            return f"{node.name}={self._emit_expr(node.value)}"
        if isinstance(node, LabeledBlock):
            label = node.label if node.type_tag is None else f"{node.label}: {node.type_tag}"
            return f"{label} {self._emit_record(node.body)}"
        return self._emit_expr(node)

    def _emit_record(self, node: RecordLiteral) -> str:
        if not node.properties:
            return "{}"
        props = ", ".join(
            f"{self._emit_expr(prop.key)}: {self._emit_expr(prop.value)}"
            for prop in node.properties
        )
        return "{" + props + "}"

    def _emit_if(self, node: IfExpression) -> str:
        text = f"if {self._emit_block(node.condition)} {self._emit_block(node.consequent)}"
        if node.alternative is not None:
            text += f" else {self._emit_block(node.alternative)}"
        return text

    def _emit_fstring(self, node: FStringLiteral) -> str:
        pieces = []
        for part in node.parts:
            if isinstance(part, str):
                pieces.append(part)
            else:
                pieces.append("{" + self._emit_expr(part) + "}")
        return '$"' + "".join(pieces) + '"'

    @staticmethod
    def _quote(text: str) -> str:
        return f"'{text}'" if '"' in text else f'"{text}"'


def pretty_print(node: Node, indent: int = 2) -> str:
    """Convenience: format *node* with a fresh ``Formatter``."""
    return Formatter(node, indent).format()
