"""
TypeScript parser adapter built on tree-sitter.

Parses ``.ts`` / ``.tsx`` sources with the tree-sitter TypeScript grammars and
lowers the concrete syntax tree into the node model in
``ts_validator.parsers.nodes``. A ``SourceMap`` keeps the original bytes so
any node span can be resolved to a file, line and column.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import tree_sitter
import tree_sitter_typescript
from rich.cells import cell_len

from ts_validator.errors import ParseError
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
    ObjectPattern,
    Other,
    PrivateProp,
    Span,
    VarDeclarator,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceLocation:
    """Resolved position of a byte offset."""

    file: str
    line: int    # 1-based
    column: int  # 1-based, in display cells


TAB_WIDTH = 4


class SourceMap:
    """Maps byte offsets of one file to line/column positions."""

    def __init__(self, file_name: str, source: bytes):
        self.file_name = file_name.replace("\\", "/")
        self.source = source
        self._line_starts: List[int] = [0]
        for index, byte in enumerate(source):
            if byte == 0x0A:
                self._line_starts.append(index + 1)

    def lookup(self, offset: int) -> SourceLocation:
        """
        Resolve a byte offset to a 1-based line and display column.

        The column is the terminal width of the text before the offset: a tab
        counts as ``TAB_WIDTH`` cells, wide (CJK, emoji) characters as two and
        combining marks as none.
        """
        line_index = bisect.bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[line_index]
        prefix = self.source[line_start:offset].decode("utf-8", errors="replace")
        width = cell_len(prefix.replace("\t", " " * TAB_WIDTH))
        return SourceLocation(self.file_name, line_index + 1, width + 1)

    def lookup_span(self, span: Span) -> SourceLocation:
        return self.lookup(span.lo)

    def snippet(self, span: Span) -> str:
        """Source text covered by ``span``."""
        return self.source[span.lo:span.hi].decode("utf-8", errors="replace")


@dataclass
class ParsedModule:
    """A parsed file: its path, node tree and source map."""

    path: Path
    module: Module
    source_map: SourceMap


# Node types that only carry type information and are never traversed
TYPE_ONLY_NODES = {
    "type_annotation",
    "type_arguments",
    "type_parameters",
    "interface_declaration",
    "type_alias_declaration",
    "ambient_declaration",
    "implements_clause",
    "asserts_annotation",
    "type_predicate_annotation",
    "opting_type_annotation",
    "omitting_type_annotation",
    "adding_type_annotation",
    "index_signature",
    "abstract_method_signature",
}

TYPE_ONLY_FIELDS = {"type", "return_type", "type_parameters", "type_arguments"}

IGNORED_NODES = {"comment", "html_comment"}

# Fields whose child is a binding (pattern), per parent node type
BINDING_FIELDS = {
    "variable_declarator": {"name"},
    "arrow_function": {"parameter", "parameters"},
    "function_declaration": {"name", "parameters"},
    "function_expression": {"name", "parameters"},
    "function": {"name", "parameters"},
    "generator_function": {"name", "parameters"},
    "generator_function_declaration": {"name", "parameters"},
    "method_definition": {"parameters"},
    "catch_clause": {"parameter"},
    "for_in_statement": {"left"},
    "assignment_expression": {"left"},
    "augmented_assignment_expression": {"left"},
    "required_parameter": {"pattern"},
    "optional_parameter": {"pattern"},
    "assignment_pattern": {"left"},
    "object_assignment_pattern": {"left"},
    "pair_pattern": {"value"},
}

# Pattern containers whose unnamed-field children are bindings too
PATTERN_CONTAINERS = {"array_pattern", "rest_pattern", "formal_parameters"}

# Expressions that may appear where a pattern is expected (assignment targets)
ASSIGNMENT_TARGETS = {
    "member_expression",
    "subscript_expression",
    "parenthesized_expression",
    "non_null_expression",
}

# Constructs that declare or re-export names without evaluating expressions
OPAQUE_NODES = {
    "import_statement",
    "import_alias",
    "export_clause",
    "namespace_export",
    "jsx_closing_element",
}

LITERAL_KINDS = {
    "string": "Str",
    "number": "Num",
    "true": "Bool",
    "false": "Bool",
    "null": "Null",
    "regex": "Regex",
}


class _Lowering:
    """Converts one tree-sitter tree into the node model."""

    def __init__(self, source: bytes):
        self.source = source

    def text(self, ts_node: tree_sitter.Node) -> str:
        return self.source[ts_node.start_byte:ts_node.end_byte].decode("utf-8", errors="replace")

    @staticmethod
    def span(ts_node: tree_sitter.Node) -> Span:
        return Span(ts_node.start_byte, ts_node.end_byte)

    @staticmethod
    def fields(ts_node: tree_sitter.Node) -> Iterator[Tuple[Optional[str], tree_sitter.Node]]:
        """Yield ``(field_name, child)`` for each named, non-comment child."""
        cursor = ts_node.walk()
        if not cursor.goto_first_child():
            return
        while True:
            child = cursor.node
            if child.is_named and child.type not in IGNORED_NODES:
                yield cursor.field_name, child
            if not cursor.goto_next_sibling():
                break

    def named(self, ts_node: tree_sitter.Node) -> List[tree_sitter.Node]:
        return [child for _, child in self.fields(ts_node)]

    def lower(self, ts_node: tree_sitter.Node, binding: bool = False) -> Node:
        kind = ts_node.type

        if binding:
            if kind in ("identifier", "shorthand_property_identifier_pattern"):
                return BindingIdent(self.span(ts_node), self.text(ts_node))
            if kind == "object_pattern":
                return self.object_pattern(ts_node)
            if kind in ASSIGNMENT_TARGETS:
                binding = False

        if kind == "program":
            statements = [c for c in self.named(ts_node) if c.type not in TYPE_ONLY_NODES]
            return Module(self.span(ts_node), tuple(self.lower(c) for c in statements))
        if kind == "identifier":
            return Ident(self.span(ts_node), self.text(ts_node))
        if kind == "call_expression":
            return self.call(ts_node)
        if kind == "member_expression":
            return self.member(ts_node)
        if kind == "subscript_expression":
            return self.subscript(ts_node)
        if kind == "arrow_function":
            return self.arrow(ts_node)
        if kind == "variable_declarator":
            return self.declarator(ts_node)
        if kind in LITERAL_KINDS:
            return self.literal(ts_node)
        if kind == "template_string" and not any(
            c.type == "template_substitution" for c in self.named(ts_node)
        ):
            return Lit(self.span(ts_node), "Tpl", self.text(ts_node))
        if kind in ("as_expression", "satisfies_expression"):
            # Keep the expression operand, drop the asserted type
            operands = self.named(ts_node)[:1]
            return Other(self.span(ts_node), kind, tuple(self.lower(c) for c in operands))
        if kind in OPAQUE_NODES:
            return Other(self.span(ts_node), kind)
        if kind in ("jsx_opening_element", "jsx_self_closing_element"):
            attributes = [c for f, c in self.fields(ts_node) if f != "name"]
            return Other(self.span(ts_node), kind, tuple(self.lower(c) for c in attributes))

        return self.generic(ts_node, binding)

    def generic(self, ts_node: tree_sitter.Node, binding: bool) -> Other:
        kind = ts_node.type
        binding_fields = BINDING_FIELDS.get(kind, set())
        children = []
        for field, child in self.fields(ts_node):
            if field in TYPE_ONLY_FIELDS or child.type in TYPE_ONLY_NODES:
                continue
            child_binding = field in binding_fields or (
                binding and field is None and kind in PATTERN_CONTAINERS
            )
            children.append(self.lower(child, child_binding))
        return Other(self.span(ts_node), kind, tuple(children))

    def call(self, ts_node: tree_sitter.Node) -> Node:
        function = ts_node.child_by_field_name("function")
        arguments = ts_node.child_by_field_name("arguments")
        if function is None or arguments is None or arguments.type != "arguments":
            # Tagged template literals are not calls
            return self.generic(ts_node, False)
        callee = self.lower(function)
        args = tuple(self.lower(arg) for arg in self.named(arguments))
        return Call(self.span(ts_node), callee, args)

    def member(self, ts_node: tree_sitter.Node) -> Node:
        obj = ts_node.child_by_field_name("object")
        prop = ts_node.child_by_field_name("property")
        if obj is None or prop is None:
            return self.generic(ts_node, False)
        member_prop: MemberProp
        if prop.type == "private_property_identifier":
            member_prop = PrivateProp(self.text(prop))
        else:
            member_prop = IdentProp(self.text(prop))
        return Member(self.span(ts_node), self.lower(obj), member_prop)

    def subscript(self, ts_node: tree_sitter.Node) -> Node:
        obj = ts_node.child_by_field_name("object")
        index = ts_node.child_by_field_name("index")
        if obj is None or index is None:
            return self.generic(ts_node, False)
        return Member(self.span(ts_node), self.lower(obj), ComputedProp(self.lower(index)))

    def arrow(self, ts_node: tree_sitter.Node) -> Node:
        params: List[Node] = []
        body: Optional[Node] = None
        for field, child in self.fields(ts_node):
            if field in ("parameter", "parameters"):
                params.append(self.lower(child, binding=True))
            elif field == "body":
                body = self.lower(child)
        if body is None:
            return self.generic(ts_node, False)
        return Arrow(self.span(ts_node), tuple(params), body)

    def declarator(self, ts_node: tree_sitter.Node) -> Node:
        name = ts_node.child_by_field_name("name")
        value = ts_node.child_by_field_name("value")
        if name is None:
            return self.generic(ts_node, False)
        init = self.lower(value) if value is not None else None
        return VarDeclarator(self.span(ts_node), self.lower(name, binding=True), init)

    def literal(self, ts_node: tree_sitter.Node) -> Lit:
        raw = self.text(ts_node)
        kind = LITERAL_KINDS[ts_node.type]
        if kind == "Num" and raw.endswith("n"):
            kind = "BigInt"
        return Lit(self.span(ts_node), kind, raw)

    def object_pattern(self, ts_node: tree_sitter.Node) -> ObjectPattern:
        props: List[Node] = []
        for child in self.named(ts_node):
            if child.type == "pair_pattern":
                props.append(self.pair_pattern(child))
            elif child.type == "shorthand_property_identifier_pattern":
                props.append(AssignPatProp(self.span(child), self.text(child)))
            elif child.type == "object_assignment_pattern":
                left = child.child_by_field_name("left")
                right = child.child_by_field_name("right")
                if left is not None and left.type == "shorthand_property_identifier_pattern":
                    default = self.lower(right) if right is not None else None
                    props.append(AssignPatProp(self.span(child), self.text(left), default))
                else:
                    props.append(self.generic(child, True))
            else:
                props.append(self.lower(child, binding=True))
        return ObjectPattern(self.span(ts_node), tuple(props))

    def pair_pattern(self, ts_node: tree_sitter.Node) -> Node:
        key = ts_node.child_by_field_name("key")
        value = ts_node.child_by_field_name("value")
        if key is None or value is None:
            return self.generic(ts_node, True)
        key_name: Optional[str] = None
        key_expr: Optional[Node] = None
        if key.type == "property_identifier":
            key_name = self.text(key)
        elif key.type == "computed_property_name":
            inner = self.named(key)
            if inner:
                key_expr = self.lower(inner[0])
        return KeyValuePatProp(self.span(ts_node), key_name, self.lower(value, binding=True), key_expr)


def _first_error(ts_node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """Find the first ERROR or MISSING node in document order."""
    if ts_node.type == "ERROR" or ts_node.is_missing:
        return ts_node
    for child in ts_node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


class TypeScriptParser:
    """Parses TypeScript and TSX sources into ``ParsedModule`` objects."""

    def __init__(self):
        self._languages = {
            False: tree_sitter.Language(tree_sitter_typescript.language_typescript()),
            True: tree_sitter.Language(tree_sitter_typescript.language_tsx()),
        }
        self._parsers = {
            tsx: tree_sitter.Parser(language) for tsx, language in self._languages.items()
        }

    def parse_source(self, source: str, file_name: str, tsx: bool = False) -> ParsedModule:
        """
        Parse source text.

        Args:
            source: TypeScript source code
            file_name: Name recorded in locations
            tsx: Use the TSX grammar

        Returns:
            The parsed module

        Raises:
            ParseError: If the source contains syntax errors
        """
        data = source.encode("utf-8")
        source_map = SourceMap(file_name, data)
        tree = self._parsers[tsx].parse(data)
        root = tree.root_node

        if root.has_error:
            error = _first_error(root)
            if error is not None:
                loc = source_map.lookup(error.start_byte)
                raise ParseError(source_map.file_name, loc.line, loc.column)
            raise ParseError(source_map.file_name)

        module = _Lowering(data).lower(root)
        if not isinstance(module, Module):
            module = Module(Span(root.start_byte, root.end_byte), (module,))
        return ParsedModule(path=Path(file_name), module=module, source_map=source_map)

    def parse_file(self, path: Path) -> ParsedModule:
        """
        Read and parse a file; ``.tsx`` files use the TSX grammar.

        Raises:
            ParseError: If the file contains syntax errors
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not valid UTF-8
        """
        source = path.read_text(encoding="utf-8")
        parsed = self.parse_source(source, str(path), tsx=path.suffix == ".tsx")
        parsed.path = path
        logger.debug(f"Parsed {path} successfully")
        return parsed
