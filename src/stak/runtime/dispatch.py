"""
Stak Operation Dispatch
=======================

Operations in Stak are overloaded on the types of the values currently
on top of the stack. Every operation name owns an OverloadSet: an
ordered list of (signature, implementation) candidates.

Matching
--------
A signature is a tuple of Types, written deepest-first, so ``[str int]``
means "an int on top, with a str just below it". A candidate matches
when the stack is at least as deep as the signature and each required
type matches the corresponding value, comparing the top of the stack
against the last entry, then moving down. ``any`` matches every type.

Tie-break
---------
Candidates are tried in registration order and the first match wins.
Defining an identical signature a second time replaces the earlier
implementation in its original slot, so re-definition never changes
which candidate is found first.

Implementations
---------------
- NativeOperation: a Python function that manipulates the Program
- BodyOperation: an AST body evaluated against the same Program
  (used for user macros)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator, Optional, Sequence, Union
import logging

from stak.runtime.values import Type, Value

if TYPE_CHECKING:
    from stak.language.ast import Node
    from stak.runtime.program import Program


logger = logging.getLogger(__name__)

Signature = tuple[Type, ...]


# =============================================================================
# Implementations
# =============================================================================

@dataclass(frozen=True)
class NativeOperation:
    """
    A built-in operation implemented in Python.

    The function may assume the stack shape its signature promised;
    the dispatcher only calls it after a successful match.
    """
    function: Callable[["Program"], None]

    def invoke(self, program: "Program") -> None:
        self.function(program)


@dataclass(frozen=True)
class BodyOperation:
    """An operation whose implementation is an AST body."""
    body: "Node"

    def invoke(self, program: "Program") -> None:
        program.run(self.body)


Implementation = Union[NativeOperation, BodyOperation]


@dataclass
class Overload:
    """One candidate of an overload set."""
    signature: Signature
    implementation: Implementation

    def matches(self, values: Sequence[Value]) -> bool:
        """Check this signature against the top of a stack (top = last)."""
        if len(values) < len(self.signature):
            return False
        for depth, required in enumerate(reversed(self.signature), start=1):
            if not required.matches(values[-depth].type):
                return False
        return True

    def describe(self, name: str) -> str:
        """Format as '[int int] +' for error listings."""
        types = " ".join(str(t) for t in self.signature)
        return f"[{types}] {name}"


# =============================================================================
# Overload Set
# =============================================================================

class OverloadSet:
    """
    All candidates registered under one operation name.

    Example:
        add = OverloadSet("+")
        add.define((Type.INT, Type.INT), NativeOperation(add_numbers))
        overload = add.select(stack)
    """

    def __init__(self, name: str):
        self.name = name
        self._overloads: list[Overload] = []

    def define(self, signature: Sequence[Type], implementation: Implementation) -> Optional[Implementation]:
        """
        Register a candidate.

        Args:
            signature: Required types, deepest first
            implementation: What to run when the signature matches

        Returns:
            The implementation that was replaced, if the exact signature
            was already defined
        """
        signature = tuple(signature)
        for overload in self._overloads:
            if overload.signature == signature:
                previous = overload.implementation
                overload.implementation = implementation
                logger.debug(f"Redefined {overload.describe(self.name)}")
                return previous

        self._overloads.append(Overload(signature, implementation))
        return None

    def select(self, values: Sequence[Value]) -> Optional[Overload]:
        """
        Find the first candidate whose signature fits the stack.

        Args:
            values: Stack contents, bottom first

        Returns:
            The matching Overload, or None
        """
        for overload in self._overloads:
            if overload.matches(values):
                logger.debug(f"Dispatching {overload.describe(self.name)}")
                return overload
        return None

    def min_arity(self) -> int:
        """Fewest stack values any candidate needs."""
        return min((len(overload.signature) for overload in self._overloads), default=0)

    def signatures(self) -> list[str]:
        """Every registered signature, formatted for display."""
        return [overload.describe(self.name) for overload in self._overloads]

    def __iter__(self) -> Iterator[Overload]:
        return iter(self._overloads)

    def __len__(self) -> int:
        return len(self._overloads)
