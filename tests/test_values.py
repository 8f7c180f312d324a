# =============================================================================
# test_values.py - Value and Type Model Tests
# =============================================================================
# Tests for runtime values: construction, 64-bit wrapping, equality, and
# the literal/display forms used by the stack printer and 'join'.
# =============================================================================

import math

import pytest
from stak.runtime.values import Type, Value, TYPES_BY_NAME, format_float, wrap_int


class TestType:
    """Test dispatch types and the ANY wildcard."""

    def test_exact_match(self):
        assert Type.INT.matches(Type.INT)
        assert not Type.INT.matches(Type.FLOAT)

    def test_any_matches_both_ways(self):
        assert Type.ANY.matches(Type.STRING)
        assert Type.STRING.matches(Type.ANY)

    def test_names(self):
        assert str(Type.STRING) == "str"
        assert str(Type.BOOLEAN) == "bool"
        assert TYPES_BY_NAME["float"] is Type.FLOAT


class TestIntegerWrapping:
    """Test 64-bit two's complement wrapping."""

    def test_in_range_unchanged(self):
        assert wrap_int(-5) == -5

    def test_overflow(self):
        assert wrap_int(2 ** 63) == -(2 ** 63)

    def test_underflow(self):
        assert wrap_int(-(2 ** 63) - 1) == 2 ** 63 - 1

    def test_constructor_wraps(self):
        assert Value.integer(2 ** 64 + 3).data == 3


class TestEquality:
    """Test structural equality of values."""

    def test_same_kind_and_content(self):
        assert Value.string("a") == Value.string("a")
        assert Value.integer(1) != Value.integer(2)

    def test_different_kinds_never_equal(self):
        assert Value.integer(1) != Value.floating(1.0)
        assert Value.char("a") != Value.string("a")
        assert Value.boolean(True) != Value.integer(1)

    def test_hashable(self):
        assert len({Value.integer(1), Value.integer(1), Value.floating(1.0)}) == 2


class TestFormatting:
    """Test literal (repr) and display (str) forms."""

    def test_literal_forms(self):
        assert repr(Value.string("ab")) == '"ab"'
        assert repr(Value.char("c")) == "'c'"
        assert repr(Value.integer(-3)) == "-3"
        assert repr(Value.boolean(False)) == "false"

    def test_float_literal_keeps_point(self):
        assert repr(Value.floating(2.0)) == "2.0"
        assert repr(Value.floating(2.5)) == "2.5"

    def test_display_forms(self):
        assert str(Value.string("ab")) == "ab"
        assert str(Value.char("c")) == "c"
        assert str(Value.boolean(True)) == "true"
        assert str(Value.floating(2.0)) == "2"

    @pytest.mark.parametrize("value, text", [
        (0.5, "0.5"),
        (3.0, "3"),
        (math.inf, "inf"),
        (-math.inf, "-inf"),
        (math.nan, "NaN"),
    ])
    def test_format_float(self, value, text):
        assert format_float(value) == text
