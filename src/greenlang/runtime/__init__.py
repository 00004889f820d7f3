"""
Green Runtime - Tree-walking evaluator with cooperative coroutines.

This module provides:
- Interpreter: Executes a program's main body and drives coroutines
- Value: Runtime value wrappers with kind metadata
- Environment: Scope chain management
- CoroutineExecutor: Suspendable coroutine instances
- ProcessTrace: @process events for the sequence-diagram generator
- BuiltinRegistry: Built-in function implementations
"""

from .values import (
    Value,
    VOID_VALUE,
    INT64_MIN,
    INT64_MAX,
    int_val,
    float_val,
    bool_val,
    string_val,
    from_python,
    format_value,
    wrap_int64,
)

from .signals import (
    ControlSignal,
    SignalKind,
    NORMAL,
    BREAK,
    CONTINUE,
    YIELD,
    return_signal,
)

from .context import (
    Binding,
    Scope,
    Environment,
)

from .builtins import (
    BuiltinFunction,
    BuiltinRegistry,
)

from .coroutines import (
    CoroutineState,
    CoroutineInstance,
    CoroutineExecutor,
)

from .trace import (
    EventKind,
    ProcessEvent,
    ProcessTrace,
)

from .interpreter import (
    Interpreter,
    ExecutionResult,
    run_program,
)

__all__ = [
    # Values
    "Value",
    "VOID_VALUE",
    "INT64_MIN",
    "INT64_MAX",
    "int_val",
    "float_val",
    "bool_val",
    "string_val",
    "from_python",
    "format_value",
    "wrap_int64",
    # Signals
    "ControlSignal",
    "SignalKind",
    "NORMAL",
    "BREAK",
    "CONTINUE",
    "YIELD",
    "return_signal",
    # Context
    "Binding",
    "Scope",
    "Environment",
    # Builtins
    "BuiltinFunction",
    "BuiltinRegistry",
    # Coroutines
    "CoroutineState",
    "CoroutineInstance",
    "CoroutineExecutor",
    # Trace
    "EventKind",
    "ProcessEvent",
    "ProcessTrace",
    # Interpreter
    "Interpreter",
    "ExecutionResult",
    "run_program",
]
