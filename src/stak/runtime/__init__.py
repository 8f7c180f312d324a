"""
Stak Runtime
============

Everything that exists while a Stak program runs:

- **values**: the Type enumeration and the immutable Value
- **dispatch**: overload sets and type-directed operation selection
- **builtins**: the standard operation library
- **program**: the operand stack and the tree-walking evaluator

Only the value and dispatch layers are re-exported here; import the
evaluator from ``stak.runtime.program`` (or simply from ``stak``).
"""

from stak.runtime.values import Type, Value
from stak.runtime.dispatch import BodyOperation, NativeOperation, Overload, OverloadSet

__all__ = [
    "Type",
    "Value",
    "BodyOperation",
    "NativeOperation",
    "Overload",
    "OverloadSet",
]
