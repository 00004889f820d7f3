"""
Tests for runtime values, textual formatting and control signals.
"""

import math

import pytest

from greenlang.runtime import (
    Value, VOID_VALUE, INT64_MIN, INT64_MAX,
    int_val, float_val, bool_val, string_val, from_python, format_value, wrap_int64,
    ControlSignal, SignalKind, NORMAL, BREAK, CONTINUE, YIELD, return_signal,
)
from greenlang.types import INT, FLOAT, BOOL, STRING, VOID, resolve_type_name


# --- Value Tests ---

class TestValues:
    """Test runtime value wrappers."""

    def test_int_value(self):
        """Test integer value creation."""
        v = int_val(42)
        assert v.data == 42
        assert v.type == INT

    def test_float_value(self):
        """Test float value creation."""
        v = float_val(3.5)
        assert v.data == 3.5
        assert v.type == FLOAT

    def test_bool_value(self):
        """Test boolean value creation."""
        assert bool_val(True).data is True
        assert bool_val(0).data is False
        assert bool_val(True).type == BOOL

    def test_string_value(self):
        """Test string value creation."""
        v = string_val("hello")
        assert v.data == "hello"
        assert v.type == STRING

    def test_void_value(self):
        """The void marker is its own kind."""
        assert VOID_VALUE.is_void
        assert VOID_VALUE.type == VOID
        assert not int_val(0).is_void

    def test_values_compare_by_kind_and_data(self):
        """Equal data of different kinds are different values."""
        assert int_val(1) == int_val(1)
        assert int_val(1) != float_val(1.0)

    def test_repr(self):
        assert repr(int_val(7)) == "Value(7, int)"


class TestInt64:
    """Test 64-bit integer wrapping."""

    def test_in_range_unchanged(self):
        assert wrap_int64(123) == 123
        assert wrap_int64(INT64_MIN) == INT64_MIN
        assert wrap_int64(INT64_MAX) == INT64_MAX

    def test_overflow_wraps(self):
        """One past the maximum wraps to the minimum."""
        assert wrap_int64(INT64_MAX + 1) == INT64_MIN
        assert int_val(INT64_MAX + 1).data == INT64_MIN

    def test_underflow_wraps(self):
        assert wrap_int64(INT64_MIN - 1) == INT64_MAX


class TestFromPython:
    """Test host value conversion."""

    def test_kinds_inferred(self):
        assert from_python(True) == bool_val(True)
        assert from_python(3) == int_val(3)
        assert from_python(2.5) == float_val(2.5)
        assert from_python("x") == string_val("x")
        assert from_python(None) is VOID_VALUE

    def test_value_passes_through(self):
        v = int_val(9)
        assert from_python(v) is v

    def test_unsupported_type(self):
        with pytest.raises(ValueError, match="cannot convert list"):
            from_python([1, 2])


# --- Formatting Tests ---

class TestFormatting:
    """Test the textual form written by print."""

    def test_int(self):
        assert format_value(int_val(-12)) == "-12"

    def test_bool(self):
        assert format_value(bool_val(True)) == "true"
        assert format_value(bool_val(False)) == "false"

    def test_string_is_raw(self):
        assert format_value(string_val("a b")) == "a b"

    def test_integral_float(self):
        """Integral floats print without a fractional part."""
        assert format_value(float_val(4.0)) == "4"
        assert format_value(float_val(-0.0)) == "-0"

    def test_fractional_float(self):
        assert format_value(float_val(2.5)) == "2.5"
        assert str(float_val(0.1)) == "0.1"

    def test_no_exponent_notation(self):
        """Small and large floats print positionally."""
        assert format_value(float_val(1e-07)) == "0.0000001"
        assert format_value(float_val(1.5e-10)) == "0.00000000015"
        assert format_value(float_val(1e23)) == "100000000000000000000000"
        assert format_value(float_val(-2.5e16)) == "-25000000000000000"

    def test_special_floats(self):
        assert format_value(float_val(math.inf)) == "inf"
        assert format_value(float_val(-math.inf)) == "-inf"
        assert format_value(float_val(math.nan)) == "NaN"

    def test_void(self):
        assert format_value(VOID_VALUE) == "void"


# --- Signal Tests ---

class TestSignals:
    """Test control signals."""

    def test_normal(self):
        assert NORMAL.is_normal
        assert not BREAK.is_normal
        assert not YIELD.is_normal

    def test_return_carries_value(self):
        signal = return_signal(int_val(5))
        assert signal.kind is SignalKind.RETURN
        assert signal.value == int_val(5)
        assert repr(signal) == "Return(Value(5, int))"

    def test_repr(self):
        assert repr(CONTINUE) == "Continue"
        assert repr(ControlSignal(SignalKind.BREAK)) == "Break"


# --- Kind Tests ---

class TestKinds:
    """Test primitive kinds."""

    def test_resolve_type_name(self):
        assert resolve_type_name("int") is INT
        assert resolve_type_name("string") is STRING
        assert resolve_type_name("void") is None

    def test_no_implicit_promotion(self):
        """Test that an int value does not fit a float slot."""
        assert FLOAT.is_assignable_from(FLOAT)
        assert not FLOAT.is_assignable_from(INT)
        assert str(BOOL) == "bool"
