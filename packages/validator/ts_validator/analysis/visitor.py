"""
Route handler discovery and request input tracking.

``AnalyzerVisitor`` walks a whole module looking for handler registrations
such as ``router.post("/users", (req, res) => { ... })``. Each handler body
is scanned by a fresh ``ControllerVisitor`` which:

1. marks the handler validated once a validation call is visited,
2. reports ``req.body`` / ``req.params`` / ``req.query`` accesses,
3. tracks local aliases of those fields and reports their use.

The validated flag is read when each node is visited, so only validation
calls that come earlier in the tree suppress a report. Branches, loops and
early returns are not modeled.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ts_validator.analysis.validation import ValidationRuleSet, is_validation_call
from ts_validator.models.violation import RequestField, Violation, ViolationKind
from ts_validator.parsers.nodes import (
    Arrow,
    AssignPatProp,
    BindingIdent,
    Call,
    ComputedProp,
    Ident,
    IdentProp,
    KeyValuePatProp,
    Lit,
    Member,
    MemberProp,
    Module,
    Node,
    NodeVisitor,
    ObjectPattern,
    VarDeclarator,
    walk,
)
from ts_validator.parsers.typescript import SourceMap

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"get", "post", "put", "delete"})

REQUEST_OBJECT = "req"


def member_name(prop: MemberProp) -> str:
    """Render a member property for violation messages."""
    if isinstance(prop, IdentProp):
        return prop.name
    if isinstance(prop, ComputedProp):
        expr = prop.expr
        if isinstance(expr, Lit):
            return f"[computed: {expr.debug()}]"
        if isinstance(expr, Ident):
            return f"[computed: {expr.name}]"
        return "[computed]"
    return "[unsupported]"


def handler_of(call: Call) -> Optional[Arrow]:
    """
    Return the arrow function registered by a route call, if any.

    Matches ``<anything>.get|post|put|delete(..., (req, res) => ...)``: the
    method name must be a plain property and the last argument an arrow
    function literal.
    """
    callee = call.callee
    if not isinstance(callee, Member) or not isinstance(callee.prop, IdentProp):
        return None
    if callee.prop.name not in HTTP_METHODS or not call.args:
        return None
    last_arg = call.args[-1]
    if isinstance(last_arg, Arrow):
        return last_arg
    return None


def request_field_of(node: Optional[Node]) -> Optional[RequestField]:
    """Return F when ``node`` is exactly ``req.F`` for a tracked field F."""
    if not isinstance(node, Member):
        return None
    if not isinstance(node.obj, Ident) or node.obj.name != REQUEST_OBJECT:
        return None
    if not isinstance(node.prop, IdentProp):
        return None
    return RequestField.lookup(node.prop.name)


class ControllerVisitor(NodeVisitor):
    """Scans one handler body with its own alias map and validated flag."""

    def __init__(self, source_map: SourceMap, rules: ValidationRuleSet):
        self.source_map = source_map
        self.rules = rules
        self.aliases: Dict[str, RequestField] = {}
        self.found_validation = False
        self.violations: List[Violation] = []

    def _report(self, node: Node, kind: ViolationKind, message: str) -> None:
        loc = self.source_map.lookup_span(node.span)
        logger.debug(
            f"{kind.value} at {loc.file}:{loc.line}:{loc.column}: "
            f"{self.source_map.snippet(node.span)}"
        )
        self.violations.append(Violation(
            file=loc.file,
            line=loc.line,
            column=loc.column,
            kind=kind,
            message=message,
        ))

    def visit_Call(self, node: Call) -> None:
        if is_validation_call(node, self.rules):
            self.found_validation = True
        self.generic_visit(node)

    def visit_Member(self, node: Member) -> None:
        obj = node.obj
        if isinstance(obj, Ident) and not self.found_validation:
            if obj.name == REQUEST_OBJECT:
                field = request_field_of(node)
                if field is not None:
                    self._report(
                        node,
                        ViolationKind.DIRECT_ACCESS,
                        f"Unvalidated direct access: req.{field.value}",
                    )
            elif obj.name in self.aliases:
                field = self.aliases[obj.name]
                self._report(
                    node,
                    ViolationKind.INDIRECT_ACCESS,
                    f"Unvalidated indirect access: {obj.name}.{member_name(node.prop)}"
                    f" → req.{field.value}",
                )
        self.generic_visit(node)

    def visit_Ident(self, node: Ident) -> None:
        field = self.aliases.get(node.name)
        if field is not None and not self.found_validation:
            self._report(
                node,
                ViolationKind.ALIAS,
                f"Unvalidated aliased access to req.{field.value} via `{node.name}`",
            )

    def visit_VarDeclarator(self, node: VarDeclarator) -> None:
        self._record_aliases(node)
        self.generic_visit(node)

    def _record_aliases(self, node: VarDeclarator) -> None:
        # const data = req.body;
        if isinstance(node.name, BindingIdent):
            field = request_field_of(node.init)
            if field is not None:
                self.aliases[node.name.name] = field
            return

        # const { body, query: q } = req;
        if isinstance(node.name, ObjectPattern):
            init = node.init
            if not isinstance(init, Ident) or init.name != REQUEST_OBJECT:
                return
            for prop in node.name.props:
                if isinstance(prop, (KeyValuePatProp, AssignPatProp)) and prop.key is not None:
                    field = RequestField.lookup(prop.key)
                    if field is not None:
                        self.aliases[prop.key] = field


class AnalyzerVisitor(NodeVisitor):
    """Finds route handlers in a module and scans each one."""

    def __init__(self, source_map: SourceMap, rules: ValidationRuleSet):
        self.source_map = source_map
        self.rules = rules
        self.violations: List[Violation] = []

    def visit_Call(self, node: Call) -> None:
        handler = handler_of(node)
        if handler is not None:
            controller = ControllerVisitor(self.source_map, self.rules)
            controller.visit(handler.body)
            self.violations.extend(controller.violations)

        # Nested handlers are scanned again with their own scope
        self.generic_visit(node)


def visit_module(source_map: SourceMap, module: Module, rules: ValidationRuleSet) -> List[Violation]:
    """Analyze one module and return its violations in traversal order."""
    visitor = AnalyzerVisitor(source_map, rules)
    visitor.visit(module)
    return visitor.violations


def count_controllers(module: Module) -> int:
    """Count route handler registrations in a module."""
    return sum(
        1 for node in walk(module)
        if isinstance(node, Call) and handler_of(node) is not None
    )
