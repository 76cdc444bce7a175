"""CXQL AST node definitions.

Every node is a frozen dataclass carrying ``start``/``end`` character offsets
and the ``line``/``col`` of its first token.  A single ``Node`` base class
provides these fields so concrete nodes only declare syntactic data.  The
position fields are left out of ``==`` and ``repr``: two trees parsed from
differently formatted text compare equal when their structure matches.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any, Iterator


# ── Base ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Node:
    """Base class for every AST node."""
    start: int = field(default=0, compare=False, repr=False)
    end: int = field(default=0, compare=False, repr=False)
    line: int = field(default=0, compare=False, repr=False)
    col: int = field(default=0, compare=False, repr=False)


# ── Program and statements ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Program(Node):
    body: tuple = ()


@dataclass(frozen=True)
class LetStatement(Node):
    name: str = ""
    value: Any = None


@dataclass(frozen=True)
class ConnectStatement(Node):
    source: Any = None
    alias: str = ""


@dataclass(frozen=True)
class WithStatement(Node):
    alias: str = ""
    body: Block | None = None


@dataclass(frozen=True)
class Block(Node):
    statements: tuple = ()
    result: Any = None


@dataclass(frozen=True)
class IfExpression(Node):
    condition: Block | None = None
    consequent: Block | None = None
    alternative: Block | None = None


# ── Operators ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BinaryExpression(Node):
    left: Any = None
    op: str = ""
    right: Any = None


@dataclass(frozen=True)
class UnaryExpression(Node):
    op: str = "-"
    operand: Any = None


@dataclass(frozen=True)
class LogicalNotExpression(Node):
    operand: Any = None


@dataclass(frozen=True)
class Pipeline(Node):
    stages: tuple = ()


@dataclass(frozen=True)
class ArrowExpression(Node):
    parameter: str = ""
    body: Any = None


# ── Access and calls ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MemberExpression(Node):
    object: Any = None
    property: str = ""


@dataclass(frozen=True)
class FunctionCall(Node):
    callee: Any = None
    arguments: tuple = ()


@dataclass(frozen=True)
class KeywordArgument(Node):
    name: str = ""
    value: Any = None


@dataclass(frozen=True)
class LabeledBlock(Node):
    label: str = ""
    type_tag: str | None = None
    body: RecordLiteral | None = None


# ── Composite literals ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class ListLiteral(Node):
    elements: tuple = ()


@dataclass(frozen=True)
class Property(Node):
    key: Any = None  # Identifier or StringLiteral
    value: Any = None

    @property
    def key_name(self) -> str:
        if isinstance(self.key, StringLiteral):
            return self.key.text
        return self.key.name


@dataclass(frozen=True)
class RecordLiteral(Node):
    properties: tuple = ()


# ── Simple literals ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Identifier(Node):
    name: str = ""


@dataclass(frozen=True)
class NumberLiteral(Node):
    value: int | float = 0
    raw: str = field(default="", compare=False)


_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


@dataclass(frozen=True)
class StringLiteral(Node):
    value: str = ""  # text between the quotes, escapes kept verbatim
    quote: str = field(default='"', compare=False)

    @property
    def text(self) -> str:
        """The string contents with backslash escapes resolved."""
        return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), self.value)


@dataclass(frozen=True)
class BooleanLiteral(Node):
    value: bool = False


@dataclass(frozen=True)
class NullLiteral(Node):
    pass


@dataclass(frozen=True)
class VariableReference(Node):
    name: str = ""


@dataclass(frozen=True)
class FStringLiteral(Node):
    # Text segments are plain strings, interpolations are expression nodes.
    parts: tuple = ()


# ── Error recovery ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ErrorNode(Node):
    message: str = ""


# ── Traversal ───────────────────────────────────────────────────────────────

def _data_fields(node: Node) -> Iterator[tuple[str, Any]]:
    for f in dataclasses.fields(node):
        if f.compare:
            yield f.name, getattr(node, f.name)


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of *node* in source order."""
    for _, value in _data_fields(node):
        if isinstance(value, Node):
            yield value
        elif isinstance(value, tuple):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Depth-first, pre-order traversal of *node* and all its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))


def node_at(root: Node, offset: int) -> Node | None:
    """Return the deepest node whose span contains *offset*, or None."""
    if not root.start <= offset < root.end:
        return None
    found = root
    while True:
        for child in iter_child_nodes(found):
            if child.start <= offset < child.end:
                found = child
                break
        else:
            return found


class NodeVisitor:
    """Walks a tree calling ``visit_<ClassName>`` for each node.

    Nodes without a dedicated method go through ``generic_visit``, which
    visits the children.  Subclasses decide whether to recurse.
    """

    def visit(self, node: Node) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: Node) -> None:
        for child in iter_child_nodes(node):
            self.visit(child)


# ── Dumping ─────────────────────────────────────────────────────────────────

def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def to_dict(node: Any) -> Any:
    """Convert a tree to plain dicts/lists (JSON-ready), spans included."""
    if isinstance(node, Node):
        out: dict[str, Any] = {"type": type(node).__name__}
        for name, value in _data_fields(node):
            out[name] = to_dict(value)
        out["span"] = [node.start, node.end]
        return out
    if isinstance(node, tuple):
        return [to_dict(item) for item in node]
    return node


def to_sexp(node: Node, indent: int = 0) -> str:
    """Render a tree as indented S-expression text, one node per line."""
    pad = "  " * indent
    scalars: list[str] = []
    children: list[str] = []
    for name, value in _data_fields(node):
        if isinstance(value, Node):
            children.append(f"{pad}  {name}: {to_sexp(value, indent + 1).lstrip()}")
        elif isinstance(value, tuple):
            for item in value:
                if isinstance(item, Node):
                    children.append(to_sexp(item, indent + 1))
                else:
                    children.append(f"{pad}  {item!r}")
        elif value is not None:
            scalars.append(f"{name}: {value!r}")

    head = f"{pad}({_snake_case(type(node).__name__)}"
    if scalars:
        head += " " + " ".join(scalars)
    if not children:
        return head + ")"
    return head + "\n" + "\n".join(children) + ")"
