"""
Environments for the Green interpreter.

An Environment is a chain of scopes plus a reference to the shared global
declaration table. One scope is pushed per block and per call; lookups walk
outward; a name may be shadowed in an inner scope but not redefined in the
same one.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from .values import Value
from ..declarations import DeclarationTable
from ..errors import (
    error_duplicate_name, error_type_mismatch, error_undefined_name,
    error_unset_variable,
)
from ..source import SourceSpan
from ..types import Type


@dataclass
class Binding:
    """A variable slot: its declared kind and current value (None while unset)."""
    type: Type
    value: Optional[Value] = None


@dataclass
class Scope:
    """
    A single scope containing variable bindings.

    Scopes form a chain via the `parent` field for lexical scoping.
    """
    variables: Dict[str, Binding] = field(default_factory=dict)
    parent: Optional["Scope"] = None
    name: str = "anonymous"  # For debugging

    def get(self, name: str) -> Optional[Binding]:
        """Look up a binding in this scope or parent scopes."""
        scope: Optional[Scope] = self
        while scope is not None:
            binding = scope.variables.get(name)
            if binding is not None:
                return binding
            scope = scope.parent
        return None

    def lookup_local(self, name: str) -> Optional[Binding]:
        """Look up a binding in this scope only."""
        return self.variables.get(name)

    def contains(self, name: str) -> bool:
        """Check if a variable exists in this scope or parents."""
        return self.get(name) is not None


@dataclass
class Environment:
    """
    The scope chain of one execution (the main body, a call, or a coroutine
    instance), plus the global declaration table it can see.
    """
    declarations: DeclarationTable = field(default_factory=DeclarationTable)
    current_scope: Scope = field(default_factory=lambda: Scope(name="global"))
    owner: str = "main"  # Declaration whose body runs here

    def lookup(self, name: str, span: Optional[SourceSpan] = None) -> Value:
        """The value bound to a name; NameError if absent or unset."""
        binding = self.current_scope.get(name)
        if binding is None:
            raise error_undefined_name(name, span)
        if binding.value is None:
            raise error_unset_variable(name, span)
        return binding.value

    def define(self, name: str, value: Optional[Value], var_type: Optional[Type] = None,
               span: Optional[SourceSpan] = None) -> None:
        """
        Install a new binding in the innermost scope.

        `var_type` defaults to the value's kind. Outer bindings may be
        shadowed; a second definition in the same scope fails.
        """
        if self.current_scope.lookup_local(name) is not None:
            raise error_duplicate_name(name, f"scope '{self.current_scope.name}'", span)
        if var_type is None:
            var_type = value.type
        elif value is not None and not var_type.is_assignable_from(value.type):
            raise error_type_mismatch(str(var_type), str(value.type),
                                      f"declaration of '{name}'", span)
        self.current_scope.variables[name] = Binding(var_type, value)

    def assign(self, name: str, value: Value, span: Optional[SourceSpan] = None) -> None:
        """Update the nearest enclosing binding of a name."""
        binding = self.current_scope.get(name)
        if binding is None:
            raise error_undefined_name(name, span)
        if not binding.type.is_assignable_from(value.type):
            raise error_type_mismatch(str(binding.type), str(value.type),
                                      f"assignment to '{name}'", span)
        binding.value = value

    def push_scope(self, name: str = "block") -> Scope:
        """Open a nested scope."""
        self.current_scope = Scope(parent=self.current_scope, name=name)
        return self.current_scope

    def pop_scope(self) -> None:
        """Close the innermost scope."""
        if self.current_scope.parent is None:
            raise RuntimeError("cannot pop the outermost scope")
        self.current_scope = self.current_scope.parent

    @contextmanager
    def new_scope(self, name: str = "block") -> Iterator[Scope]:
        """
        Context manager bracketing a nested scope.

        The scope is released on every exit path, including when a
        generator holding it is closed while suspended.

        Usage:
            with env.new_scope("while-body"):
                env.define("i", int_val(0))
        """
        old_scope = self.current_scope
        self.push_scope(name)
        try:
            yield self.current_scope
        finally:
            self.current_scope = old_scope

    @property
    def depth(self) -> int:
        """Number of scopes in the chain."""
        count = 0
        scope: Optional[Scope] = self.current_scope
        while scope is not None:
            count += 1
            scope = scope.parent
        return count
