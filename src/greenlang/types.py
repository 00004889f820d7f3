"""
Value kinds for the Green language.

The language has four scalar kinds (int, float, bool, string) plus a void
marker produced by functions that return nothing. Kinds never convert into
each other implicitly: an int is not assignable to a float slot.
"""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class PrimitiveType:
    """A scalar kind, compared by its source spelling."""
    spelling: str

    @property
    def name(self) -> str:
        return self.spelling

    def is_assignable_from(self, other: "PrimitiveType") -> bool:
        """Whether a slot of this kind may hold a value of `other`; only identical kinds match."""
        return self.spelling == other.spelling

    def __str__(self) -> str:
        return self.spelling


INT = PrimitiveType("int")
FLOAT = PrimitiveType("float")
BOOL = PrimitiveType("bool")
STRING = PrimitiveType("string")

# Result of a function without a declared return type
VOID = PrimitiveType("void")

Type = PrimitiveType


# Kinds a parser may name in declarations; ``void`` is not spellable
BUILTIN_TYPES: Dict[str, PrimitiveType] = {t.spelling: t for t in (INT, FLOAT, BOOL, STRING)}


def resolve_type_name(name: str) -> Optional[PrimitiveType]:
    """The kind spelled `name`, or None."""
    return BUILTIN_TYPES.get(name)


def is_numeric(t: PrimitiveType) -> bool:
    """Int and float are the kinds with arithmetic and ordering."""
    return t in (INT, FLOAT)
