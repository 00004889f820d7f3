"""
Runtime value wrappers for the Green interpreter.

Values pair raw Python data with a Green kind so every operator can check
its operands at runtime. Ints are kept in the signed 64-bit range.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..types import Type, INT, FLOAT, BOOL, STRING, VOID


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class Value:
    """
    A runtime value with its kind.

    The `data` field holds the Python object (int, float, str, bool or None
    for void). The `type` field holds the Green kind.
    """
    data: Any
    type: Type

    def __repr__(self) -> str:
        return f"Value({self.data!r}, {self.type})"

    def __str__(self) -> str:
        return format_value(self)

    @property
    def is_void(self) -> bool:
        return self.type == VOID


def wrap_int64(n: int) -> int:
    """Reduce an int to the signed 64-bit range (two's complement)."""
    if INT64_MIN <= n <= INT64_MAX:
        return n
    return (n - INT64_MIN) % (2 ** 64) + INT64_MIN


# Convenience constructors for primitive values

def int_val(n: int) -> Value:
    """Create an integer value."""
    return Value(wrap_int64(int(n)), INT)


def float_val(x: float) -> Value:
    """Create a float value."""
    return Value(float(x), FLOAT)


def bool_val(b: bool) -> Value:
    """Create a boolean value."""
    return Value(bool(b), BOOL)


def string_val(s: str) -> Value:
    """Create a string value."""
    return Value(str(s), STRING)


VOID_VALUE = Value(None, VOID)


def from_python(data: Any) -> Value:
    """Wrap a host Python value, inferring its kind."""
    if isinstance(data, Value):
        return data
    if isinstance(data, bool):
        return bool_val(data)
    if isinstance(data, int):
        return int_val(data)
    if isinstance(data, float):
        return float_val(data)
    if isinstance(data, str):
        return string_val(data)
    if data is None:
        return VOID_VALUE
    raise ValueError(f"cannot convert {type(data).__name__} to a Green value")


def _format_float(x: float) -> str:
    """Shortest round-tripping digits, positional (never an exponent); integral values drop the fraction."""
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    text = format(Decimal(repr(x)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_value(value: Value) -> str:
    """The textual form of a value, as written by print."""
    if value.type == BOOL:
        return "true" if value.data else "false"
    if value.type == FLOAT:
        return _format_float(value.data)
    if value.type == INT:
        return str(value.data)
    if value.type == STRING:
        return value.data
    return "void"
