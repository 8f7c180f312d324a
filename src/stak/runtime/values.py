"""
Stak Value and Type Model
=========================

Runtime values are small immutable tagged scalars. Each value carries
a Type used only for dispatch: operations are selected by comparing the
types on top of the stack against registered signatures.

Supported Types
---------------
| Type    | Python payload | Literal     | Display |
|---------|----------------|-------------|---------|
| str     | str            | "text"      | text    |
| char    | str (len 1)    | 'c'         | c       |
| int     | int (64-bit)   | 42          | 42      |
| float   | float          | 2.5         | 2.5     |
| bool    | bool           | true        | true    |

The extra type ``any`` appears only in signatures. It matches every
concrete type, on either side of the comparison, but no value ever
has it.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Union
import math


# =============================================================================
# Type Enumeration
# =============================================================================

class Type(Enum):
    """Dispatch type of a value, plus the ANY wildcard."""
    ANY = auto()
    STRING = auto()
    CHAR = auto()
    INT = auto()
    FLOAT = auto()
    BOOLEAN = auto()

    def matches(self, other: "Type") -> bool:
        """Wildcard-aware equality: ANY matches everything."""
        return self is Type.ANY or other is Type.ANY or self is other

    def __str__(self) -> str:
        return TYPE_NAMES[self]


TYPE_NAMES: dict[Type, str] = {
    Type.ANY: "any",
    Type.STRING: "str",
    Type.CHAR: "char",
    Type.INT: "int",
    Type.FLOAT: "float",
    Type.BOOLEAN: "bool",
}

# Reverse lookup used when parsing macro signatures
TYPES_BY_NAME: dict[str, Type] = {name: typ for typ, name in TYPE_NAMES.items()}

INT_BITS = 64


def wrap_int(value: int) -> int:
    """Wrap an integer into the signed 64-bit range (two's complement)."""
    value &= (1 << INT_BITS) - 1
    if value >= 1 << (INT_BITS - 1):
        value -= 1 << INT_BITS
    return value


def format_float(value: float) -> str:
    """
    Display form of a float.

    Integral floats print without a fractional part (``2.0`` shows as
    ``2``), matching how values are rendered when joined into strings.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


# =============================================================================
# Value Representation
# =============================================================================

Payload = Union[str, int, float, bool]


@dataclass(frozen=True, eq=False)
class Value:
    """
    An immutable runtime value.

    Use the named constructors rather than building Values directly so
    the payload always agrees with the type.

    Attributes:
        type: Concrete type (never ANY)
        data: The Python payload
    """
    type: Type
    data: Payload

    @classmethod
    def string(cls, data: str) -> "Value":
        return cls(Type.STRING, data)

    @classmethod
    def char(cls, data: str) -> "Value":
        return cls(Type.CHAR, data)

    @classmethod
    def integer(cls, data: int) -> "Value":
        return cls(Type.INT, wrap_int(data))

    @classmethod
    def floating(cls, data: float) -> "Value":
        return cls(Type.FLOAT, float(data))

    @classmethod
    def boolean(cls, data: bool) -> "Value":
        return cls(Type.BOOLEAN, bool(data))

    def __eq__(self, other: object) -> bool:
        """Structural equality. Values of different types are never equal."""
        if not isinstance(other, Value):
            return NotImplemented
        return self.type is other.type and self.data == other.data

    def __hash__(self) -> int:
        return hash((self.type, self.data))

    def __repr__(self) -> str:
        """Literal-like form used when printing the stack."""
        if self.type == Type.STRING:
            return '"' + self.data + '"'
        if self.type == Type.CHAR:
            return f"'{self.data}'"
        if self.type == Type.BOOLEAN:
            return "true" if self.data else "false"
        if self.type == Type.FLOAT:
            text = format_float(self.data)
            if text.lstrip("-").isdigit():
                text += ".0"
            return text
        return str(self.data)

    def __str__(self) -> str:
        """Plain display form used by 'join'."""
        if self.type == Type.BOOLEAN:
            return "true" if self.data else "false"
        if self.type == Type.FLOAT:
            return format_float(self.data)
        return str(self.data)
