"""
Stak Built-in Operation Library
===============================

Native implementations of the standard operations, and the table that
registers them with a Program.

Every function here receives the Program and works directly on its
stack. Signatures are declared in STANDARD_OPERATIONS; a function may
assume the operands its signature promised, because the dispatcher only
calls it after a successful match. Operand VALUES that a signature
cannot rule out (a zero divisor, an empty string to index) are checked
before anything is popped, so a rejected call leaves the stack intact.

Numeric Promotion
-----------------
Arithmetic and comparison accept every Int/Float pairing. Two Ints give
an Int (wrapped to 64 bits); any Float operand promotes both sides to
Float. Division always produces a Float.

Stack Effects
-------------
Written ``before -- after`` with the top on the right:

    drop    a --
    copy    a -- a a
    swap    a b -- b a
    over    a b -- a b a
    .       s i -- c          s i j -- s'
    pos     s t -- i true     s t -- false
    split   s t -- p1 ... pn n
    join    v1 ... vn sep -- s
"""

from typing import TYPE_CHECKING, Callable
import logging
import math
import operator

from stak.errors import InternalError, OperandError
from stak.runtime.dispatch import NativeOperation, Signature
from stak.runtime.values import Type, Value

if TYPE_CHECKING:
    from stak.runtime.program import Program


logger = logging.getLogger(__name__)

NativeFunction = Callable[["Program"], None]

ANY = Type.ANY
STR = Type.STRING
CHAR = Type.CHAR
INT = Type.INT
FLOAT = Type.FLOAT
BOOL = Type.BOOLEAN

# Registration order is the dispatch tie-break order
NUMERIC_PAIRS: list[Signature] = [
    (INT, INT),
    (FLOAT, FLOAT),
    (INT, FLOAT),
    (FLOAT, INT),
]


def _unexpected(name: str, *values: Value) -> InternalError:
    """Error for operands the signature table should have rejected."""
    types = ", ".join(str(value.type) for value in values)
    return InternalError(f"'{name}' received unexpected operand types: {types}")


# =============================================================================
# Stack Manipulation
# =============================================================================

def stack_length(program: "Program") -> None:
    program.stack.push(Value.integer(len(program.stack)))


def drop(program: "Program") -> None:
    program.stack.pop()


def copy(program: "Program") -> None:
    program.stack.push(program.stack.peek())


def swap(program: "Program") -> None:
    b = program.stack.pop()
    a = program.stack.pop()
    program.stack.push(b)
    program.stack.push(a)


def over(program: "Program") -> None:
    program.stack.push(program.stack.peek(1))


# =============================================================================
# Arithmetic
# =============================================================================

def _float_divide(a: float, b: float) -> float:
    """IEEE-754 division: x/0 is a signed infinity and 0/0 is NaN."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _int_remainder(a: int, b: int) -> int:
    """Remainder truncated toward zero; the result takes the dividend's sign."""
    remainder = abs(a) % abs(b)
    return -remainder if a < 0 else remainder


def _float_remainder(a: float, b: float) -> float:
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


def _int_power(a: int, b: int) -> int:
    # Negative exponents clamp to zero; reduce modulo 2**64 to stay in range
    return pow(a, max(b, 0), 1 << 64)


def _float_power(a: float, b: float) -> float:
    if a == 0 and b < 0:
        return math.inf
    if a < 0 and not b.is_integer():
        return math.nan
    try:
        return a ** b
    except OverflowError:
        return math.copysign(math.inf, a) if b % 2 == 1 else math.inf


def _numeric(
    name: str,
    int_op: Callable[[int, int], int],
    float_op: Callable[[float, float], float],
) -> NativeFunction:
    """Build a binary numeric operation with Int/Float promotion."""

    def operation(program: "Program") -> None:
        b = program.stack.pop()
        a = program.stack.pop()
        if a.type is INT and b.type is INT:
            program.stack.push(Value.integer(int_op(a.data, b.data)))
        elif a.type in (INT, FLOAT) and b.type in (INT, FLOAT):
            program.stack.push(Value.floating(float_op(float(a.data), float(b.data))))
        else:
            raise _unexpected(name, a, b)

    operation.__name__ = f"numeric_{name}"
    return operation


add_numbers = _numeric("+", operator.add, operator.add)
subtract = _numeric("-", operator.sub, operator.sub)
multiply_numbers = _numeric("*", operator.mul, operator.mul)
power = _numeric("pow", _int_power, _float_power)
_remainder = _numeric("%", _int_remainder, _float_remainder)


def divide(program: "Program") -> None:
    b = program.stack.pop()
    a = program.stack.pop()
    if a.type not in (INT, FLOAT) or b.type not in (INT, FLOAT):
        raise _unexpected("/", a, b)
    program.stack.push(Value.floating(_float_divide(float(a.data), float(b.data))))


def remainder(program: "Program") -> None:
    divisor = program.stack.peek()
    dividend = program.stack.peek(1)
    if dividend.type is INT and divisor.type is INT and divisor.data == 0:
        raise OperandError("integer remainder by zero")
    _remainder(program)


def concatenate(program: "Program") -> None:
    b = program.stack.pop()
    a = program.stack.pop()
    if a.type is not STR or b.type not in (STR, CHAR):
        raise _unexpected("+", a, b)
    program.stack.push(Value.string(a.data + b.data))


def repeat_text(program: "Program") -> None:
    count = program.stack.pop()
    text = program.stack.pop()
    if text.type not in (STR, CHAR) or count.type is not INT:
        raise _unexpected("*", text, count)
    program.stack.push(Value.string(text.data * max(count.data, 0)))


# =============================================================================
# Logic and Comparison
# =============================================================================

def _logical(name: str, op: Callable[[bool, bool], bool]) -> NativeFunction:
    def operation(program: "Program") -> None:
        b = program.stack.pop()
        a = program.stack.pop()
        program.stack.push(Value.boolean(op(a.data, b.data)))

    operation.__name__ = f"logical_{name}"
    return operation


logical_and = _logical("and", operator.and_)
logical_or = _logical("or", operator.or_)


def logical_not(program: "Program") -> None:
    value = program.stack.pop()
    program.stack.push(Value.boolean(not value.data))


def equal(program: "Program") -> None:
    b = program.stack.pop()
    a = program.stack.pop()
    program.stack.push(Value.boolean(a == b))


def not_equal(program: "Program") -> None:
    b = program.stack.pop()
    a = program.stack.pop()
    program.stack.push(Value.boolean(a != b))


def _comparison(name: str, op: Callable[[float, float], bool]) -> NativeFunction:
    """Build an ordering operation; mixed Int/Float compares as Float."""

    def operation(program: "Program") -> None:
        b = program.stack.pop()
        a = program.stack.pop()
        if a.type is INT and b.type is INT:
            program.stack.push(Value.boolean(op(a.data, b.data)))
        elif a.type in (INT, FLOAT) and b.type in (INT, FLOAT):
            program.stack.push(Value.boolean(op(float(a.data), float(b.data))))
        else:
            raise _unexpected(name, a, b)

    operation.__name__ = f"compare_{name}"
    return operation


less = _comparison("<", operator.lt)
greater = _comparison(">", operator.gt)
less_equal = _comparison("<=", operator.le)
greater_equal = _comparison(">=", operator.ge)


# =============================================================================
# Strings
# =============================================================================

def _indexable(program: "Program", depth: int, name: str) -> str:
    """Peek the string operand of an index operation, rejecting empty ones."""
    text = program.stack.peek(depth)
    if text.type is not STR:
        raise _unexpected(name, text)
    if not text.data:
        raise OperandError(f"'{name}' cannot index into an empty string")
    return text.data


def string_length(program: "Program") -> None:
    text = program.stack.pop()
    program.stack.push(Value.integer(len(text.data)))


def char_at(program: "Program") -> None:
    text = _indexable(program, 1, ".")
    index = program.stack.pop()
    program.stack.pop()
    program.stack.push(Value.char(text[index.data % len(text)]))


def substring(program: "Program") -> None:
    text = _indexable(program, 2, ".")
    start = program.stack.peek(1).data % len(text)
    end = program.stack.peek().data % len(text)
    if start > end:
        raise OperandError(f"substring start {start} is after its end {end}")

    for _ in range(3):
        program.stack.pop()
    program.stack.push(Value.string(text[start:end]))


def reverse(program: "Program") -> None:
    text = program.stack.pop()
    program.stack.push(Value.string(text.data[::-1]))


def position_of(program: "Program") -> None:
    needle = program.stack.pop()
    haystack = program.stack.pop()
    index = haystack.data.find(needle.data)
    if index >= 0:
        program.stack.push(Value.integer(index))
        program.stack.push(Value.boolean(True))
    else:
        program.stack.push(Value.boolean(False))


def remove_at(program: "Program") -> None:
    text = _indexable(program, 1, "remove")
    index = program.stack.pop()
    program.stack.pop()
    program.stack.push(Value.char(text[index.data % len(text)]))


def count_occurrences(program: "Program") -> None:
    needle = program.stack.pop()
    haystack = program.stack.pop()
    text = haystack.data

    # Substring matches may overlap: "aaa" holds "aa" twice
    count = sum(1 for start in range(len(text)) if text.startswith(needle.data, start))
    program.stack.push(Value.integer(count))


def split(program: "Program") -> None:
    separator = program.stack.pop()
    text = program.stack.pop()

    if separator.data:
        parts = text.data.split(separator.data)
    else:
        # An empty separator splits between every character
        parts = ["", *text.data, ""]

    for part in parts:
        program.stack.push(Value.string(part))
    program.stack.push(Value.integer(len(parts)))


def join(program: "Program") -> None:
    separator = program.stack.pop()
    values = []
    while program.stack:
        values.append(program.stack.pop())
    values.reverse()
    program.stack.push(Value.string(separator.data.join(str(value) for value in values)))


# =============================================================================
# Registration Table
# =============================================================================

STANDARD_OPERATIONS: list[tuple[str, Signature, NativeFunction]] = [
    ("LEN", (), stack_length),
    ("len", (STR,), string_length),
    ("drop", (ANY,), drop),
    ("copy", (ANY,), copy),
    ("swap", (ANY, ANY), swap),
    ("over", (ANY, ANY), over),
    *[("+", pair, add_numbers) for pair in NUMERIC_PAIRS],
    ("+", (STR, STR), concatenate),
    ("+", (STR, CHAR), concatenate),
    *[("-", pair, subtract) for pair in NUMERIC_PAIRS],
    *[("*", pair, multiply_numbers) for pair in NUMERIC_PAIRS],
    ("*", (STR, INT), repeat_text),
    ("*", (CHAR, INT), repeat_text),
    *[("/", pair, divide) for pair in NUMERIC_PAIRS],
    *[("%", pair, remainder) for pair in NUMERIC_PAIRS],
    ("and", (BOOL, BOOL), logical_and),
    ("or", (BOOL, BOOL), logical_or),
    ("not", (BOOL,), logical_not),
    ("=", (ANY, ANY), equal),
    ("!=", (ANY, ANY), not_equal),
    *[("<", pair, less) for pair in NUMERIC_PAIRS],
    *[(">", pair, greater) for pair in NUMERIC_PAIRS],
    *[("<=", pair, less_equal) for pair in NUMERIC_PAIRS],
    *[(">=", pair, greater_equal) for pair in NUMERIC_PAIRS],
    (".", (STR, INT), char_at),
    (".", (STR, INT, INT), substring),
    ("rev", (STR,), reverse),
    ("pos", (STR, STR), position_of),
    ("pos", (STR, CHAR), position_of),
    ("remove", (STR, INT), remove_at),
    ("count", (STR, CHAR), count_occurrences),
    ("count", (STR, STR), count_occurrences),
    ("split", (STR, CHAR), split),
    ("split", (STR, STR), split),
    ("join", (CHAR,), join),
    ("join", (STR,), join),
    *[("pow", pair, power) for pair in NUMERIC_PAIRS],
]


def register_builtins(program: "Program") -> None:
    """Register the standard operation library with a Program."""
    for name, signature, function in STANDARD_OPERATIONS:
        program.define(name, signature, NativeOperation(function))
    logger.debug(f"Registered {len(STANDARD_OPERATIONS)} built-in overloads")
