"""
Stak Error Hierarchy
====================

This module defines the exception hierarchy for the Stak interpreter.
All language-level exceptions inherit from StakError, allowing callers
to catch every lexing, parsing, and execution failure with a single
except clause.

Exception Hierarchy
-------------------
StakError (base)
├── LexError - malformed literal or group, empty id, bad number
├── ParseError - syntax errors in the token stream
│   ├── UnexpectedTokenError - token where an operand was expected
│   └── UnterminatedBlockError - if/repeat/macro without 'end'
└── ExecutionError (runtime failures)
    ├── StackUnderflowError - not enough values on the stack
    ├── UnknownIdentifierError - neither an operation nor a bound variable
    ├── OperationCopyError - '@' applied to an operation name
    ├── NoMatchingOverloadError - no signature fits the stack shape
    ├── OperandTypeError - wrong value type for if/repeat
    └── OperandError - operand value rejected by a built-in

InternalError is NOT a StakError: it signals a violated
precondition inside the interpreter (a native operation receiving types
the dispatcher should have rejected) rather than a mistake in user code.

Error Message Format
--------------------
Errors carry an optional Position. Once a collaborator attaches the
source line and filename (see stak.session), the message renders as:

    script.stk:3:7: error: unknown id 'foo'
        1 2 + foo
              ^^^
    hint: bind it first with (foo) or {foo}
"""

from dataclasses import dataclass, replace
from typing import Optional


# =============================================================================
# Source Position Tracking
# =============================================================================

@dataclass(frozen=True)
class Position:
    """
    An immutable span of source text.

    Positions are attached to tokens and AST nodes purely for diagnostics;
    they never influence execution.

    Attributes:
        start: Offset of the first character (0-indexed)
        end: Offset one past the last character
        line: Line of the first character (1-indexed)
        end_line: Line of the last character
        column: Column of the first character (1-indexed)
        end_column: Column one past the last character on end_line
    """
    start: int
    end: int
    line: int
    end_line: int
    column: int
    end_column: int

    @classmethod
    def zero(cls) -> "Position":
        """Zero-width position at the very start of the input."""
        return cls(0, 0, 1, 1, 1, 1)

    def extend(self, other: "Position") -> "Position":
        """
        Return the union of this span and another.

        Only the end bound moves, and only forward, so extending with an
        earlier span leaves the position unchanged.
        """
        if other.end <= self.end:
            return self
        return replace(
            self,
            end=other.end,
            end_line=other.end_line,
            end_column=other.end_column,
        )

    def __str__(self) -> str:
        """Format as 'line:column' for error messages."""
        return f"{self.line}:{self.column}"


# =============================================================================
# Base Exception Class
# =============================================================================

class StakError(Exception):
    """
    Base exception for all Stak language errors.

    Attributes:
        message: The error description
        position: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
        filename: Name of the source the position refers to (optional)
    """

    def __init__(
        self,
        message: str,
        position: Optional[Position] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        filename: Optional[str] = None,
    ):
        self.message = message
        self.position = position
        self.hint = hint
        self.source_line = source_line
        self.filename = filename
        super().__init__(self._format_message())

    def locate(self, position: Position) -> "StakError":
        """Fill in the position if the raiser did not know it."""
        if self.position is None:
            self.position = position
            self.args = (self._format_message(),)
        return self

    def attach_source(self, source: str, filename: str) -> "StakError":
        """
        Record the offending source line so the message can show context.

        Called by the session layer, which is the only place that still
        holds the original text once tokens and nodes have been built.

        Args:
            source: The complete source text that was executed
            filename: Name used as the location prefix

        Returns:
            self, to allow ``raise error.attach_source(...)``
        """
        self.filename = filename
        if self.position is not None:
            lines = source.split("\n")
            if 0 < self.position.line <= len(lines):
                self.source_line = lines[self.position.line - 1].rstrip("\r")
        self.args = (self._format_message(),)
        return self

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            script.stk:1:5: error: unknown id 'x'
                1 2 x
                    ^
        """
        parts = []

        # Location prefix
        if self.position is not None:
            prefix = f"{self.filename}:{self.position}" if self.filename else str(self.position)
            parts.append(f"{prefix}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret underline
        if self.source_line is not None and self.position is not None:
            parts.append(f"    {self.source_line}")
            if self.position.end_line == self.position.line:
                width = max(1, self.position.end_column - self.position.column)
            else:
                width = max(1, len(self.source_line) - self.position.column + 1)
            padding = " " * (4 + self.position.column - 1)
            parts.append(f"{padding}{'^' * width}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class InternalError(Exception):
    """
    A broken interpreter invariant.

    Raised when a native operation is handed operands that the dispatch
    registry should never have let through. This indicates a bug in a
    signature table, not in the program being run.
    """
    pass


# =============================================================================
# Front-End Errors
# =============================================================================

class LexError(StakError):
    """
    Error while tokenizing source text.

    Examples:
        - Unterminated string or character literal
        - Non-identifier inside a (...) or {...} group
        - A number that is neither a valid integer nor a valid float
        - '@' at the very end of the input
    """
    pass


class ParseError(StakError):
    """Syntax error in the token stream."""
    pass


class UnexpectedTokenError(ParseError):
    """
    A token appeared where no construct accepts it.

    Typical causes are a stray 'end' or 'else', or a 'macro' header that
    is missing its name.
    """

    def __init__(
        self,
        found: str,
        position: Optional[Position] = None,
        expected: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = f"expected {expected}" if expected else None
        super().__init__(
            f"unexpected token {found}",
            position=position,
            hint=hint,
        )


class UnterminatedBlockError(ParseError):
    """A control block ran off the end of the input without 'end'."""

    def __init__(self, keyword: str, position: Optional[Position] = None):
        self.keyword = keyword
        super().__init__(
            f"unterminated '{keyword}' block",
            position=position,
            hint=f"close the '{keyword}' block with 'end'",
        )


# =============================================================================
# Execution Errors
# =============================================================================

class ExecutionError(StakError):
    """
    Error raised while evaluating an AST.

    Execution errors abort the current run immediately. The stack and
    variable table are left exactly as the instructions completed before
    the failure left them, so an interactive session can inspect them.
    """
    pass


class StackUnderflowError(ExecutionError):
    """A construct needed more values than the stack holds."""
    pass


class UnknownIdentifierError(ExecutionError):
    """
    Reference to an identifier that is neither an operation nor bound.

    Variable reads consume their binding, so reading the same variable
    twice without rebinding it also ends up here.
    """

    def __init__(self, identifier: str, position: Optional[Position] = None):
        self.identifier = identifier
        super().__init__(
            f"unknown id '{identifier}'",
            position=position,
            hint=f"bind it first with ({identifier}) or {{{identifier}}}",
        )


class OperationCopyError(ExecutionError):
    """'@name' where name refers to an operation rather than a variable."""

    def __init__(self, identifier: str, position: Optional[Position] = None):
        self.identifier = identifier
        super().__init__(
            f"cannot copy an operation, '{identifier}' is defined as an operation",
            position=position,
        )


class NoMatchingOverloadError(ExecutionError):
    """
    No registered signature of an operation fits the current stack.

    The message lists every signature registered under the name so the
    user can see which operand types would have been accepted.
    """

    def __init__(
        self,
        operation: str,
        signatures: list[str],
        position: Optional[Position] = None,
    ):
        self.operation = operation
        self.signatures = signatures
        listing = "\n".join(signatures)
        super().__init__(
            f"no definition of '{operation}' matches the current stack, "
            f"the following are defined:\n{listing}",
            position=position,
        )


class OperandTypeError(ExecutionError):
    """A control construct found the wrong type of value on the stack."""

    def __init__(
        self,
        construct: str,
        expected: str,
        actual: str,
        position: Optional[Position] = None,
    ):
        self.construct = construct
        self.expected_type = expected
        self.actual_type = actual
        super().__init__(
            f"'{construct}' expected a {expected} value on top of the stack, got {actual}",
            position=position,
        )


class OperandError(ExecutionError):
    """
    A built-in rejected an operand value its signature allows.

    Raised for integer division by zero and for indexing into an
    empty string. Operands are checked before anything is popped.
    """
    pass
