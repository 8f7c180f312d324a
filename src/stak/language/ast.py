"""
Stak Abstract Syntax Tree (AST) Definitions
===========================================

This module defines the node types produced by the Stak parser and
walked by the evaluator.

Node Hierarchy
--------------
Node (base)
├── ChunkNode - ordered sequence of nodes (root and multi-node bodies)
├── Literals
│   ├── StringLiteral - "text"
│   ├── CharLiteral - 'c'
│   ├── IntLiteral - 42
│   ├── FloatLiteral - 2.5
│   └── BooleanLiteral - true / false
├── Names and bindings
│   ├── IdentifierNode - operation call or consuming variable read
│   ├── TakeNode - (a b): pop values into variables
│   ├── CopyToNode - {a b}: copy the top value into variables
│   └── CopyNode - @x / @{a b}: push variables without consuming them
└── Control
    ├── IfNode - if ... [else ...] end
    ├── RepeatNode - repeat ... end
    └── MacroNode - macro name (types) ... end

Design Notes
------------
- All nodes are dataclasses; each stores the Position it covers
- A node owns its children, so the tree is acyclic by construction
- Take/CopyTo names are kept in pop order, as the lexer produced them
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from stak.errors import Position
from stak.language.lexer import Token
from stak.runtime.values import Type, Value


# =============================================================================
# AST Node Base Class
# =============================================================================

@dataclass
class Node:
    """
    Base class for all AST nodes.

    Attributes:
        position: Source span covered by this node
    """
    position: Position

    def __repr__(self) -> str:
        """Default representation showing node type."""
        return f"{self.__class__.__name__}@{self.position}"


@dataclass
class ChunkNode(Node):
    """
    An ordered sequence of nodes executed left to right.

    The parser returns a ChunkNode as the root of every program, and uses
    one for any control-block body holding other than exactly one node.

    Attributes:
        nodes: Child nodes in source order
    """
    nodes: list[Node] = field(default_factory=list)


# =============================================================================
# Literal Nodes
# =============================================================================

@dataclass
class Literal(Node):
    """Base class for nodes that push a constant."""

    def to_value(self) -> Value:
        raise NotImplementedError


@dataclass
class StringLiteral(Literal):
    value: str = ""

    def to_value(self) -> Value:
        return Value.string(self.value)


@dataclass
class CharLiteral(Literal):
    value: str = ""

    def to_value(self) -> Value:
        return Value.char(self.value)


@dataclass
class IntLiteral(Literal):
    value: int = 0

    def to_value(self) -> Value:
        return Value.integer(self.value)


@dataclass
class FloatLiteral(Literal):
    value: float = 0.0

    def to_value(self) -> Value:
        return Value.floating(self.value)


@dataclass
class BooleanLiteral(Literal):
    value: bool = False

    def to_value(self) -> Value:
        return Value.boolean(self.value)


# =============================================================================
# Name and Binding Nodes
# =============================================================================

@dataclass
class IdentifierNode(Node):
    """
    A bare identifier.

    Resolved at run time: a registered operation is dispatched, otherwise
    the variable of that name is read and its binding removed.

    Attributes:
        name: The identifier text
    """
    name: str = ""


@dataclass
class TakeNode(Node):
    """
    Pop one value per name into variables.

    Attributes:
        names: Identifiers in pop order (last-declared first)
    """
    names: tuple[str, ...] = ()


@dataclass
class CopyToNode(Node):
    """
    Bind every name to the current top of stack without popping.

    Attributes:
        names: Identifiers in pop order, as for TakeNode
    """
    names: tuple[str, ...] = ()


@dataclass
class CopyNode(Node):
    """
    Push copies of variables without consuming their bindings.

    The wrapped token is kept as a token rather than a node because only
    an identifier or a {...} group is meaningful here, and that is
    checked when the node runs.

    Attributes:
        token: The token that followed '@'
    """
    token: Optional[Token] = None


# =============================================================================
# Control Nodes
# =============================================================================

@dataclass
class IfNode(Node):
    """
    Conditional execution on a Boolean popped from the stack.

    Attributes:
        body: Executed when the Boolean is true
        else_body: Executed when it is false (optional)
    """
    body: Optional[Node] = None
    else_body: Optional[Node] = None


@dataclass
class RepeatNode(Node):
    """
    Counted loop on an Int popped from the stack.

    Attributes:
        body: Executed count times
    """
    body: Optional[Node] = None


@dataclass
class MacroNode(Node):
    """
    A user operation definition.

    Running this node registers body under name as an overload whose
    signature is parameter_types, alongside the built-in operations.

    Attributes:
        name: Operation name being defined
        parameter_types: Required stack types, deepest first
        body: The operation body
    """
    name: str = ""
    parameter_types: tuple[Type, ...] = ()
    body: Optional[Node] = None


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclass and override visit_<NodeClass> methods. The evaluator and the
    pretty printer are both visitors.

    Example:
        class NameCollector(ASTVisitor):
            def __init__(self):
                self.names = []

            def visit_IdentifierNode(self, node):
                self.names.append(node.name)
    """

    def visit(self, node: Node) -> Any:
        """
        Visit a node by dispatching to the appropriate method.

        Args:
            node: The AST node to visit

        Returns:
            The result of the visit method (varies by visitor)
        """
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Node) -> None:
        """Visit every child node of a node without handling the node itself."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, Node):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, Node):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(ast))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: Node) -> str:
        """Print the AST and return it as a string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _nested(self, label: str, node: Node) -> None:
        self._emit(label)
        self.indent_level += 1
        self.visit(node)
        self.indent_level -= 1

    def visit_ChunkNode(self, node: ChunkNode):
        self._emit("Chunk")
        self.indent_level += 1
        for child in node.nodes:
            self.visit(child)
        self.indent_level -= 1

    def visit_StringLiteral(self, node: StringLiteral):
        self._emit(f"String: {node.to_value()!r}")

    def visit_CharLiteral(self, node: CharLiteral):
        self._emit(f"Char: {node.to_value()!r}")

    def visit_IntLiteral(self, node: IntLiteral):
        self._emit(f"Int: {node.value}")

    def visit_FloatLiteral(self, node: FloatLiteral):
        self._emit(f"Float: {node.to_value()!r}")

    def visit_BooleanLiteral(self, node: BooleanLiteral):
        self._emit(f"Boolean: {node.to_value()!r}")

    def visit_IdentifierNode(self, node: IdentifierNode):
        self._emit(f"Identifier: {node.name}")

    def visit_TakeNode(self, node: TakeNode):
        self._emit(f"Take: ({' '.join(reversed(node.names))})")

    def visit_CopyToNode(self, node: CopyToNode):
        self._emit(f"CopyTo: {{{' '.join(reversed(node.names))}}}")

    def visit_CopyNode(self, node: CopyNode):
        self._emit(f"Copy: @{node.token}")

    def visit_IfNode(self, node: IfNode):
        self._emit("If")
        self.indent_level += 1
        self._nested("Then:", node.body)
        if node.else_body is not None:
            self._nested("Else:", node.else_body)
        self.indent_level -= 1

    def visit_RepeatNode(self, node: RepeatNode):
        self._nested("Repeat", node.body)

    def visit_MacroNode(self, node: MacroNode):
        signature = " ".join(str(t) for t in node.parameter_types)
        self._nested(f"Macro: {node.name} [{signature}]", node.body)
