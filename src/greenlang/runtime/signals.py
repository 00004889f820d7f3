"""
Control signals threaded through statement execution.

Every statement produces a signal instead of raising: composite statements
inspect the signal of each child and decide whether to keep going. Return,
break and continue therefore unwind as plain data, and a coroutine can be
suspended in the middle of that unwinding.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .values import Value


class SignalKind(Enum):
    """Outcome of executing a statement."""
    NORMAL = auto()
    BREAK = auto()
    CONTINUE = auto()
    RETURN = auto()
    YIELD = auto()


@dataclass(frozen=True)
class ControlSignal:
    """A signal; only RETURN carries a value."""
    kind: SignalKind
    value: Optional[Value] = None

    @property
    def is_normal(self) -> bool:
        return self.kind is SignalKind.NORMAL

    def __repr__(self) -> str:
        if self.kind is SignalKind.RETURN:
            return f"Return({self.value!r})"
        return self.kind.name.capitalize()


NORMAL = ControlSignal(SignalKind.NORMAL)
BREAK = ControlSignal(SignalKind.BREAK)
CONTINUE = ControlSignal(SignalKind.CONTINUE)
YIELD = ControlSignal(SignalKind.YIELD)


def return_signal(value: Value) -> ControlSignal:
    """Create a RETURN signal carrying a value (the void marker for bare return)."""
    return ControlSignal(SignalKind.RETURN, value)
