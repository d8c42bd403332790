"""
Syntax node model consumed by the analysis engine.

The parser adapter lowers the tree-sitter concrete syntax tree into this
small, closed set of node classes. Every construct the analysis does not
care about becomes an ``Other`` node that only carries its children, so
traversal still reaches nested calls, member accesses and identifiers.

Binding positions (declared names, parameters, assignment targets) are
``BindingIdent`` nodes; only expression-position identifiers are ``Ident``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union


@dataclass(frozen=True)
class Span:
    """Half-open byte range ``[lo, hi)`` in the source file."""

    lo: int
    hi: int


@dataclass(frozen=True)
class Node:
    """Base class for all syntax nodes."""

    span: Span

    def children(self) -> Iterator["Node"]:
        return iter(())


# === Member properties ===
# These are not nodes: only the expression inside a computed property
# is visited.


@dataclass(frozen=True)
class IdentProp:
    """Plain property name, as in ``req.body``."""

    name: str


@dataclass(frozen=True)
class ComputedProp:
    """Computed property, as in ``req["body"]`` or ``data[key]``."""

    expr: Node


@dataclass(frozen=True)
class PrivateProp:
    """Private name property, as in ``this.#secret``."""

    name: str


MemberProp = Union[IdentProp, ComputedProp, PrivateProp]


# === Nodes ===


@dataclass(frozen=True)
class Module(Node):
    """Root of a parsed file."""

    body: Tuple[Node, ...] = ()

    def children(self) -> Iterator[Node]:
        return iter(self.body)


@dataclass(frozen=True)
class Call(Node):
    """Call expression ``callee(args...)``."""

    callee: Node
    args: Tuple[Node, ...] = ()

    def children(self) -> Iterator[Node]:
        yield self.callee
        yield from self.args


@dataclass(frozen=True)
class Member(Node):
    """Property access ``obj.prop`` or ``obj[expr]``."""

    obj: Node
    prop: MemberProp

    def children(self) -> Iterator[Node]:
        yield self.obj
        if isinstance(self.prop, ComputedProp):
            yield self.prop.expr


@dataclass(frozen=True)
class Ident(Node):
    """Identifier used as an expression (a read of a binding)."""

    name: str


@dataclass(frozen=True)
class BindingIdent(Node):
    """Identifier in a binding position (declaration, parameter, assignment target)."""

    name: str


@dataclass(frozen=True)
class Lit(Node):
    """Literal value. ``kind`` is one of Str, Num, BigInt, Bool, Null, Regex, Tpl."""

    kind: str
    raw: str

    def debug(self) -> str:
        return f"{self.kind}({self.raw})"


@dataclass(frozen=True)
class Arrow(Node):
    """Arrow function literal ``(params) => body``."""

    params: Tuple[Node, ...]
    body: Node

    def children(self) -> Iterator[Node]:
        yield from self.params
        yield self.body


@dataclass(frozen=True)
class VarDeclarator(Node):
    """Single ``name = init`` entry of a ``const``/``let``/``var`` declaration."""

    name: Node
    init: Optional[Node] = None

    def children(self) -> Iterator[Node]:
        yield self.name
        if self.init is not None:
            yield self.init


@dataclass(frozen=True)
class ObjectPattern(Node):
    """Object destructuring pattern ``{ a, b: c, ...rest }``."""

    props: Tuple[Node, ...] = ()

    def children(self) -> Iterator[Node]:
        return iter(self.props)


@dataclass(frozen=True)
class KeyValuePatProp(Node):
    """
    ``key: value`` entry of an object pattern.

    ``key`` is the property name when it is a plain identifier and None for
    string, numeric and computed keys. ``key_expr`` holds the expression of
    a computed key.
    """

    key: Optional[str]
    value: Node
    key_expr: Optional[Node] = None

    def children(self) -> Iterator[Node]:
        if self.key_expr is not None:
            yield self.key_expr
        yield self.value


@dataclass(frozen=True)
class AssignPatProp(Node):
    """Shorthand entry of an object pattern, ``{ key }`` or ``{ key = default }``."""

    key: str
    default: Optional[Node] = None

    def children(self) -> Iterator[Node]:
        if self.default is not None:
            yield self.default


@dataclass(frozen=True)
class Other(Node):
    """Any other construct, identified by its tree-sitter node type."""

    kind: str
    nodes: Tuple[Node, ...] = ()

    def children(self) -> Iterator[Node]:
        return iter(self.nodes)


class NodeVisitor:
    """
    Depth-first pre-order visitor, in the manner of ``ast.NodeVisitor``.

    ``visit`` dispatches to ``visit_<ClassName>`` when defined and falls back
    to ``generic_visit``, which visits the children in source order.
    """

    def visit(self, node: Node) -> None:
        method = getattr(self, "visit_" + node.__class__.__name__, self.generic_visit)
        method(node)

    def generic_visit(self, node: Node) -> None:
        for child in node.children():
            self.visit(child)


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(current.children())))
