"""
Stak Evaluator
==============

The Program is the whole run-time state of a Stak session: the operand
stack, the variable table, and the operation registry. It evaluates an
AST by walking it depth-first, left to right.

Evaluation Rules
----------------
| Node        | Effect                                                  |
|-------------|---------------------------------------------------------|
| Chunk       | run children in order, stop at the first error          |
| literal     | push the value                                          |
| (a b)       | pop one value per name into variables                   |
| {a b}       | bind every name to the current top, nothing popped      |
| @x, @{a b}  | push variable values, bindings kept                     |
| identifier  | dispatch an operation, else read and REMOVE a variable  |
| if          | pop a bool, run the matching branch                     |
| repeat      | pop an int, run the body that many times                |
| macro       | register the body as an overload                        |

Errors are never rolled back: whatever the instructions before a
failure did to the stack and variables stays in place, so an
interactive user can inspect the state after an error.
"""

from typing import Iterator, Optional
import logging

from stak.errors import (
    ExecutionError,
    InternalError,
    NoMatchingOverloadError,
    OperandTypeError,
    OperationCopyError,
    Position,
    StackUnderflowError,
    UnknownIdentifierError,
)
from stak.language.ast import (
    ASTVisitor,
    Node,
    ChunkNode,
    Literal,
    IdentifierNode,
    TakeNode,
    CopyToNode,
    CopyNode,
    IfNode,
    RepeatNode,
    MacroNode,
)
from stak.language.lexer import TokenType
from stak.runtime.dispatch import BodyOperation, Implementation, OverloadSet, Signature
from stak.runtime.values import Type, Value


logger = logging.getLogger(__name__)


# =============================================================================
# Operand Stack
# =============================================================================

class Stack:
    """
    The operand stack. The last element is the top.

    Supports len() and indexing (``stack[-1]`` is the top), which is all
    the dispatcher needs to match signatures.
    """

    def __init__(self, values: Optional[list[Value]] = None):
        self._values: list[Value] = list(values or [])

    def push(self, value: Value) -> None:
        self._values.append(value)

    def pop(self) -> Value:
        return self._values.pop()

    def peek(self, depth: int = 0) -> Value:
        """Value depth places below the top, without removing it."""
        return self._values[-1 - depth]

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> Value:
        return self._values[index]

    def __iter__(self) -> Iterator[Value]:
        return iter(self._values)

    def __str__(self) -> str:
        """Space-separated literal forms, bottom first."""
        return " ".join(repr(value) for value in self._values)

    def __repr__(self) -> str:
        return f"Stack({self._values!r})"


# =============================================================================
# Program
# =============================================================================

class Program(ASTVisitor):
    """
    Evaluates Stak ASTs against persistent state.

    Create one per session with Program.std_program() and call run() for
    every chunk of input. State carries over between calls.

    Attributes:
        stack: The operand stack
        variables: Bound variables (reading one removes it)
        operations: Operation name to overload set
        trace: Log every evaluated node at DEBUG level
    """

    def __init__(self):
        self.stack = Stack()
        self.variables: dict[str, Value] = {}
        self.operations: dict[str, OverloadSet] = {}
        self.trace = False

    @classmethod
    def std_program(cls) -> "Program":
        """Create a Program with the built-in operation library registered."""
        from stak.runtime.builtins import register_builtins

        program = cls()
        register_builtins(program)
        return program

    def define(self, name: str, signature: Signature, implementation: Implementation) -> None:
        """Add an overload to the named operation, creating it if needed."""
        if name not in self.operations:
            self.operations[name] = OverloadSet(name)
        self.operations[name].define(signature, implementation)

    def run(self, node: Node) -> None:
        """
        Evaluate an AST.

        Args:
            node: Usually the root ChunkNode returned by the parser

        Raises:
            ExecutionError: On the first run-time error
        """
        self.visit(node)

    def visit(self, node: Node) -> None:
        if self.trace:
            logger.debug(f"{node.position}: {node.__class__.__name__} | stack: {self.stack}")
        super().visit(node)

    def generic_visit(self, node: Node) -> None:
        raise InternalError(f"no evaluation rule for {node.__class__.__name__}")

    # =========================================================================
    # Sequencing and Literals
    # =========================================================================

    def visit_ChunkNode(self, node: ChunkNode) -> None:
        for child in node.nodes:
            self.visit(child)

    def _visit_literal(self, node: Literal) -> None:
        self.stack.push(node.to_value())

    visit_StringLiteral = _visit_literal
    visit_CharLiteral = _visit_literal
    visit_IntLiteral = _visit_literal
    visit_FloatLiteral = _visit_literal
    visit_BooleanLiteral = _visit_literal

    # =========================================================================
    # Bindings
    # =========================================================================

    def visit_TakeNode(self, node: TakeNode) -> None:
        # Check the depth up front so an underflow pops nothing
        if len(self.stack) < len(node.names):
            missing = node.names[len(self.stack)]
            raise StackUnderflowError(
                f"cannot take value to '{missing}' due to stack underflow",
                node.position,
            )

        for name in node.names:
            self.variables[name] = self.stack.pop()

    def visit_CopyToNode(self, node: CopyToNode) -> None:
        if not node.names:
            return
        if not self.stack:
            raise StackUnderflowError(
                f"cannot copy value to '{node.names[0]}' due to stack underflow",
                node.position,
            )

        value = self.stack.peek()
        for name in node.names:
            self.variables[name] = value

    def visit_CopyNode(self, node: CopyNode) -> None:
        token = node.token

        if token.type == TokenType.IDENTIFIER:
            self.stack.push(self._copy_variable(token.value, token.position))
            return

        if token.type == TokenType.COPY_TO:
            # Names are stored in pop order; push them back in source order
            values = [self._copy_variable(name, token.position) for name in reversed(token.value)]
            for value in values:
                self.stack.push(value)
            return

        raise ExecutionError(
            f"expected identifier or copy-to-identifiers, got {token.kind}",
            token.position,
        )

    def _copy_variable(self, name: str, position: Position) -> Value:
        if name in self.variables:
            return self.variables[name]
        if name in self.operations:
            raise OperationCopyError(name, position)
        raise UnknownIdentifierError(name, position)

    def visit_IdentifierNode(self, node: IdentifierNode) -> None:
        overloads = self.operations.get(node.name)
        if overloads is not None:
            overload = overloads.select(self.stack)
            if overload is None:
                arity = overloads.min_arity()
                if len(self.stack) < arity:
                    raise StackUnderflowError(
                        f"'{node.name}' needs at least {arity} values on the stack, found {len(self.stack)}",
                        node.position,
                    )
                raise NoMatchingOverloadError(node.name, overloads.signatures(), node.position)
            try:
                overload.implementation.invoke(self)
            except ExecutionError as e:
                raise e.locate(node.position)
            return

        # Variable reads consume the binding
        if node.name in self.variables:
            self.stack.push(self.variables.pop(node.name))
            return

        raise UnknownIdentifierError(node.name, node.position)

    # =========================================================================
    # Control Flow
    # =========================================================================

    def _pop_operand(self, construct: str, expected: Type, node: Node) -> Value:
        """Pop the operand of a control construct, leaving it in place on error."""
        if not self.stack:
            raise StackUnderflowError(
                f"couldn't perform '{construct}' control-flow operation due to stack underflow",
                node.position,
            )
        top = self.stack.peek()
        if top.type is not expected:
            raise OperandTypeError(construct, str(expected), str(top.type), node.position)
        return self.stack.pop()

    def visit_IfNode(self, node: IfNode) -> None:
        condition = self._pop_operand("if", Type.BOOLEAN, node)
        if condition.data:
            self.visit(node.body)
        elif node.else_body is not None:
            self.visit(node.else_body)

    def visit_RepeatNode(self, node: RepeatNode) -> None:
        count = self._pop_operand("repeat", Type.INT, node)
        for _ in range(count.data):
            self.visit(node.body)

    def visit_MacroNode(self, node: MacroNode) -> None:
        self.define(node.name, node.parameter_types, BodyOperation(node.body))
        signature = " ".join(str(t) for t in node.parameter_types)
        logger.debug(f"Defined macro [{signature}] {node.name}")
