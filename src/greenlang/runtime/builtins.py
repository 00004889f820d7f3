"""
Built-in function registry for the Green interpreter.

The language ships a single built-in, ``print``, which writes the textual
form of its arguments to the configured output sink.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .values import Value, VOID_VALUE, format_value
from ..config import RuntimeConfig
from ..errors import error_arity, error_type_mismatch
from ..source import SourceSpan


@dataclass
class BuiltinFunction:
    """
    A built-in function with its implementation and arity.

    `max_args` of None means variadic.
    """
    name: str
    implementation: Callable[[List[Value]], Value]
    min_args: int = 0
    max_args: Optional[int] = None
    doc: str = ""

    def __call__(self, args: List[Value], span: Optional[SourceSpan] = None) -> Value:
        if len(args) < self.min_args or (self.max_args is not None and len(args) > self.max_args):
            if self.max_args is None:
                expected = f"at least {self.min_args}"
            elif self.max_args == self.min_args:
                expected = str(self.min_args)
            else:
                expected = f"{self.min_args} to {self.max_args}"
            raise error_arity(self.name, expected, len(args), span)
        return self.implementation(args)


class BuiltinRegistry:
    """
    Registry of built-in functions for one interpreter.

    Functions are registered by name and looked up before user declarations.
    """

    def __init__(self, config: Optional[RuntimeConfig] = None):
        self.config = config or RuntimeConfig()
        self._functions: Dict[str, BuiltinFunction] = {}
        self._register_all()

    def get_function(self, name: str) -> Optional[BuiltinFunction]:
        """Look up a function by name."""
        return self._functions.get(name)

    def register(self, func: BuiltinFunction) -> None:
        """Register a function."""
        self._functions[func.name] = func

    def names(self) -> List[str]:
        return list(self._functions)

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def _register_all(self) -> None:
        """Register all built-in functions."""
        self._register_io_functions()

    # --- I/O Functions ---

    def _register_io_functions(self) -> None:
        """Register output functions."""
        config = self.config

        def _print(args: List[Value]) -> Value:
            for arg in args:
                if arg.is_void:
                    raise error_type_mismatch("int, float, bool or string", "void",
                                              "argument of 'print'")
            config.write_line(" ".join(format_value(arg) for arg in args))
            return VOID_VALUE

        self.register(BuiltinFunction(
            "print",
            _print,
            min_args=1,
            doc="Write the values, separated by spaces, as one line of output.",
        ))
