"""
Global declaration table.

Built once when a program is loaded and read-only afterwards. Every
Environment and coroutine instance of a run shares the same table by
reference, so no locking is involved.
"""

from enum import Enum, auto
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from .ast import CoroutineDecl, Declaration, FunctionDecl, Program
from .errors import error_duplicate_name


class DeclarationKind(Enum):
    """The kind of a global declaration."""
    FUNCTION = auto()
    COROUTINE = auto()


class DeclarationTable:
    """Name → declaration index for functions and coroutines."""

    def __init__(self, declarations: Iterable[Declaration] = (),
                 reserved: Iterable[str] = ()):
        functions: Dict[str, FunctionDecl] = {}
        coroutines: Dict[str, CoroutineDecl] = {}
        reserved = frozenset(reserved)

        for decl in declarations:
            if decl.name in reserved:
                raise error_duplicate_name(decl.name, "the built-in functions", decl.span)
            if decl.name in functions or decl.name in coroutines:
                raise error_duplicate_name(decl.name, "the global declarations", decl.span)
            if isinstance(decl, FunctionDecl):
                functions[decl.name] = decl
            else:
                coroutines[decl.name] = decl

        self._functions: Mapping[str, FunctionDecl] = MappingProxyType(functions)
        self._coroutines: Mapping[str, CoroutineDecl] = MappingProxyType(coroutines)

    @classmethod
    def from_program(cls, program: Program, reserved: Iterable[str] = ()) -> "DeclarationTable":
        """Index every declaration of a program."""
        return cls(program.declarations, reserved)

    @property
    def functions(self) -> Mapping[str, FunctionDecl]:
        return self._functions

    @property
    def coroutines(self) -> Mapping[str, CoroutineDecl]:
        return self._coroutines

    def function(self, name: str) -> Optional[FunctionDecl]:
        """Look up a function by name."""
        return self._functions.get(name)

    def coroutine(self, name: str) -> Optional[CoroutineDecl]:
        """Look up a coroutine by name."""
        return self._coroutines.get(name)

    def kind_of(self, name: str) -> Optional[DeclarationKind]:
        """Which kind of declaration a name refers to, if any."""
        if name in self._functions:
            return DeclarationKind.FUNCTION
        if name in self._coroutines:
            return DeclarationKind.COROUTINE
        return None

    def __contains__(self, name: str) -> bool:
        return name in self._functions or name in self._coroutines

    def __len__(self) -> int:
        return len(self._functions) + len(self._coroutines)
