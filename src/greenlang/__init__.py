"""
Green language evaluator.

This package provides:
- AST: Node classes for programs built by an external parser (or by hand)
- Runtime: Tree-walking interpreter with cooperative coroutines
- Diagnostics: Categorized runtime errors
- Process trace: Events feeding the sequence-diagram generator

Usage:
    from greenlang import (
        Program, Block, ExprStmt, Call, int_lit, RuntimeConfig, run_program,
    )

    program = Program(main=Block([ExprStmt(Call("print", [int_lit(42)]))]))
    result = run_program(program, RuntimeConfig(output=lines.append))
    if not result.success:
        print(f"{result.error_category}: {result.error_message}")
"""

import logging

from .source import (
    SourceLocation,
    SourceSpan,
    span_at,
)

from .types import (
    PrimitiveType,
    Type,
    INT,
    FLOAT,
    BOOL,
    STRING,
    VOID,
    resolve_type_name,
)

from .ast import (
    # Base
    AstNode,
    DocComment,
    BinaryOperator,
    UnaryOperator,
    # Expressions
    Expression,
    Literal,
    VariableRef,
    BinaryOp,
    UnaryOp,
    Call,
    # Statements
    Statement,
    Block,
    VarDecl,
    Assign,
    ExprStmt,
    If,
    While,
    Return,
    Break,
    Continue,
    Yield,
    CreateCoroutine,
    Resume,
    ProcessNote,
    # Declarations
    Parameter,
    FunctionDecl,
    CoroutineDecl,
    Program,
    # Helpers
    int_lit,
    float_lit,
    bool_lit,
    string_lit,
    format_ast,
)

from .errors import (
    ErrorCategory,
    ErrorSeverity,
    Diagnostic,
    DiagnosticCollector,
    GreenError,
    GreenRuntimeError,
    UndefinedNameError,
    DuplicateNameError,
    RuntimeTypeError,
    DivisionByZeroError,
    ArityError,
    MissingReturnError,
    ControlFlowError,
    IllegalStateError,
    RecursionLimitError,
)

from .config import RuntimeConfig
from .declarations import DeclarationKind, DeclarationTable
from .log import configure_logging, get_logger

from .runtime import (
    Value,
    VOID_VALUE,
    Environment,
    CoroutineState,
    CoroutineInstance,
    EventKind,
    ProcessEvent,
    ProcessTrace,
    Interpreter,
    ExecutionResult,
    run_program,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Source
    "SourceLocation",
    "SourceSpan",
    "span_at",
    # Types
    "PrimitiveType",
    "Type",
    "INT",
    "FLOAT",
    "BOOL",
    "STRING",
    "VOID",
    "resolve_type_name",
    # AST
    "AstNode",
    "DocComment",
    "BinaryOperator",
    "UnaryOperator",
    "Expression",
    "Literal",
    "VariableRef",
    "BinaryOp",
    "UnaryOp",
    "Call",
    "Statement",
    "Block",
    "VarDecl",
    "Assign",
    "ExprStmt",
    "If",
    "While",
    "Return",
    "Break",
    "Continue",
    "Yield",
    "CreateCoroutine",
    "Resume",
    "ProcessNote",
    "Parameter",
    "FunctionDecl",
    "CoroutineDecl",
    "Program",
    "int_lit",
    "float_lit",
    "bool_lit",
    "string_lit",
    "format_ast",
    # Errors
    "ErrorCategory",
    "ErrorSeverity",
    "Diagnostic",
    "DiagnosticCollector",
    "GreenError",
    "GreenRuntimeError",
    "UndefinedNameError",
    "DuplicateNameError",
    "RuntimeTypeError",
    "DivisionByZeroError",
    "ArityError",
    "MissingReturnError",
    "ControlFlowError",
    "IllegalStateError",
    "RecursionLimitError",
    # Config and logging
    "RuntimeConfig",
    "DeclarationKind",
    "DeclarationTable",
    "configure_logging",
    "get_logger",
    # Runtime
    "Value",
    "VOID_VALUE",
    "Environment",
    "CoroutineState",
    "CoroutineInstance",
    "EventKind",
    "ProcessEvent",
    "ProcessTrace",
    "Interpreter",
    "ExecutionResult",
    "run_program",
]
