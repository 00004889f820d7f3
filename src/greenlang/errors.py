"""
Runtime errors and diagnostics for the Green evaluator.

Every failure of a run is reported as a category plus a message. Error codes
use the E4xx range reserved for runtime errors:

- E401: NameError            (undefined or unset name)
- E402: DuplicateNameError   (name already defined in the same scope/table)
- E403: TypeError            (operand, condition, argument or binding kind)
- E404: DivisionByZero       (int division by zero)
- E405: ArityError           (wrong number of call arguments)
- E406: MissingReturnError   (typed function finished without a value)
- E407: ControlFlowError     (break/continue/yield outside its construct)
- E408: IllegalStateError    (resume of a completed or running instance)
- E409: RecursionLimit       (call depth above the configured limit)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from .source import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ErrorCategory(Enum):
    """Category names surfaced to the outer layer."""
    NAME = "NameError"
    DUPLICATE_NAME = "DuplicateNameError"
    TYPE = "TypeError"
    DIVISION_BY_ZERO = "DivisionByZero"
    ARITY = "ArityError"
    MISSING_RETURN = "MissingReturnError"
    CONTROL_FLOW = "ControlFlowError"
    ILLEGAL_STATE = "IllegalStateError"
    RECURSION_LIMIT = "RecursionLimit"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E401, W401, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: Optional[SourceSpan] = None
    category: Optional[ErrorCategory] = None
    hints: List[str] = field(default_factory=list)

    def format(self) -> str:
        """Format the diagnostic for display."""
        header = f"{self.severity.value}[{self.code}]: {self.message}"
        if self.span is not None:
            header = f"{self.span.start}: {header}"
        parts = [header]
        for hint in self.hints:
            parts.append(f"    = hint: {hint}")
        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        data = {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value if self.category else None,
            "hints": self.hints,
        }
        if self.span is not None:
            data["range"] = {
                "start": {"line": self.span.start.line, "column": self.span.start.column},
                "end": {"line": self.span.end.line, "column": self.span.end.column},
            }
        return data


class GreenError(Exception):
    """Base exception for Green errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()


class GreenRuntimeError(GreenError):
    """An unrecoverable error of the evaluation in progress."""

    category: ErrorCategory

    @property
    def message(self) -> str:
        return self.diagnostic.message

    def as_pair(self) -> Tuple[str, str]:
        """The ``(category, message)`` pair reported to the outer layer."""
        return self.category.value, self.diagnostic.message


class UndefinedNameError(GreenRuntimeError):
    """E401: a name is not bound anywhere in the scope chain."""
    category = ErrorCategory.NAME


class DuplicateNameError(GreenRuntimeError):
    """E402: a name is already defined in the same scope."""
    category = ErrorCategory.DUPLICATE_NAME


class RuntimeTypeError(GreenRuntimeError):
    """E403: a value has the wrong kind for where it is used."""
    category = ErrorCategory.TYPE


class DivisionByZeroError(GreenRuntimeError):
    """E404: integer division by zero."""
    category = ErrorCategory.DIVISION_BY_ZERO


class ArityError(GreenRuntimeError):
    """E405: a call passes the wrong number of arguments."""
    category = ErrorCategory.ARITY


class MissingReturnError(GreenRuntimeError):
    """E406: a function with a declared return type produced no value."""
    category = ErrorCategory.MISSING_RETURN


class ControlFlowError(GreenRuntimeError):
    """E407: break/continue/yield reached a boundary it may not cross."""
    category = ErrorCategory.CONTROL_FLOW


class IllegalStateError(GreenRuntimeError):
    """E408: a coroutine instance cannot be resumed in its current state."""
    category = ErrorCategory.ILLEGAL_STATE


class RecursionLimitError(GreenRuntimeError):
    """E409: nested calls exceeded the configured depth."""
    category = ErrorCategory.RECURSION_LIMIT


def _error(cls, code: str, message: str, span: Optional[SourceSpan] = None,
           hints: Optional[List[str]] = None) -> GreenRuntimeError:
    diag = Diagnostic(
        code=code,
        message=message,
        severity=ErrorSeverity.ERROR,
        span=span,
        category=cls.category,
        hints=hints or [],
    )
    return cls(diag)


# --- Name errors ---

def error_undefined_name(name: str, span: Optional[SourceSpan] = None) -> UndefinedNameError:
    """E401: Undefined variable."""
    return _error(UndefinedNameError, "E401", f"undefined variable '{name}'", span)


def error_undefined_function(name: str, span: Optional[SourceSpan] = None) -> UndefinedNameError:
    """E401: Call of an undefined function."""
    return _error(UndefinedNameError, "E401", f"undefined function '{name}'", span)


def error_undefined_coroutine(name: str, span: Optional[SourceSpan] = None) -> UndefinedNameError:
    """E401: Instantiation of an undefined coroutine."""
    return _error(UndefinedNameError, "E401", f"undefined coroutine '{name}'", span)


def error_undefined_task(name: str, span: Optional[SourceSpan] = None) -> UndefinedNameError:
    """E401: Resume of a name with no coroutine instance bound."""
    return _error(UndefinedNameError, "E401", f"no coroutine instance named '{name}'", span)


def error_unset_variable(name: str, span: Optional[SourceSpan] = None) -> UndefinedNameError:
    """E401: Variable declared without initializer and read before assignment."""
    return _error(UndefinedNameError, "E401",
                  f"variable '{name}' used before initialization", span)


def error_duplicate_name(name: str, where: str = "this scope",
                         span: Optional[SourceSpan] = None) -> DuplicateNameError:
    """E402: Name already defined."""
    return _error(DuplicateNameError, "E402", f"'{name}' is already defined in {where}", span)


# --- Type errors ---

def error_type_mismatch(expected: str, found: str, context: str,
                        span: Optional[SourceSpan] = None) -> RuntimeTypeError:
    """E403: Value of the wrong kind."""
    return _error(RuntimeTypeError, "E403",
                  f"type mismatch in {context}: expected '{expected}', found '{found}'", span)


def error_operand_types(operator: str, left: str, right: Optional[str] = None,
                        span: Optional[SourceSpan] = None) -> RuntimeTypeError:
    """E403: Operator applied to unsupported operand kinds."""
    if right is None:
        message = f"operator '{operator}' cannot be applied to '{left}'"
    else:
        message = f"operator '{operator}' cannot be applied to '{left}' and '{right}'"
    hints = []
    if right is not None and {left, right} == {"int", "float"}:
        hints.append("int and float are never converted implicitly")
    return _error(RuntimeTypeError, "E403", message, span, hints)


def error_condition_not_bool(construct: str, found: str,
                             span: Optional[SourceSpan] = None) -> RuntimeTypeError:
    """E403: Non-bool condition."""
    return _error(RuntimeTypeError, "E403",
                  f"{construct} condition must be 'bool', found '{found}'", span)


def error_not_callable(name: str, span: Optional[SourceSpan] = None) -> RuntimeTypeError:
    """E403: Coroutine used as a function."""
    return _error(RuntimeTypeError, "E403",
                  f"coroutine '{name}' is not callable", span,
                  ["coroutines are instantiated, then resumed"])


def error_not_a_coroutine(name: str, span: Optional[SourceSpan] = None) -> RuntimeTypeError:
    """E403: Function used where a coroutine is required."""
    return _error(RuntimeTypeError, "E403", f"'{name}' is a function, not a coroutine", span)


# --- Arithmetic ---

def error_division_by_zero(span: Optional[SourceSpan] = None) -> DivisionByZeroError:
    """E404: Integer division by zero."""
    return _error(DivisionByZeroError, "E404", "integer division by zero", span)


# --- Calls ---

def error_arity(name: str, expected: Union[int, str], found: int,
                span: Optional[SourceSpan] = None) -> ArityError:
    """E405: Wrong number of arguments."""
    return _error(ArityError, "E405",
                  f"'{name}' takes {expected} argument(s), {found} given", span)


def error_missing_return(name: str, return_type: str,
                         span: Optional[SourceSpan] = None) -> MissingReturnError:
    """E406: Typed function finished without returning a value."""
    return _error(MissingReturnError, "E406",
                  f"function '{name}' must return a value of type '{return_type}'", span)


# --- Control flow ---

def error_control_flow(statement: str, boundary: str,
                       span: Optional[SourceSpan] = None) -> ControlFlowError:
    """E407: break/continue/yield outside its legal construct."""
    return _error(ControlFlowError, "E407",
                  f"'{statement}' outside of {boundary}", span)


def error_illegal_state(instance: str, state: str,
                        span: Optional[SourceSpan] = None) -> IllegalStateError:
    """E408: Resume of an instance that cannot run."""
    return _error(IllegalStateError, "E408",
                  f"cannot resume coroutine instance '{instance}': it is {state}", span)


def error_recursion_limit(name: str, limit: int,
                          span: Optional[SourceSpan] = None) -> RecursionLimitError:
    """E409: Too many nested calls."""
    return _error(RecursionLimitError, "E409",
                  f"call depth limit of {limit} exceeded calling '{name}'", span)


# --- Warnings ---

def warning_resume_completed(instance: str, span: Optional[SourceSpan] = None) -> Diagnostic:
    """W401: Resume of a completed instance ignored (non-strict mode)."""
    return Diagnostic(
        code="W401",
        message=f"coroutine instance '{instance}' already finished; resume ignored",
        severity=ErrorSeverity.WARNING,
        span=span,
    )


class DiagnosticCollector:
    """Collects diagnostics during a run."""

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1

    def add_error(self, error: GreenError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    def format_all(self) -> str:
        """Format all diagnostics for display."""
        parts = [d.format() for d in self.diagnostics]
        if self._error_count > 0:
            parts.append(f"{self._error_count} error(s), {self.warning_count} warning(s)")
        elif self.warning_count > 0:
            parts.append(f"{self.warning_count} warning(s)")
        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self._error_count,
            "warning_count": self.warning_count,
        }
