"""
Tree-walking interpreter for Green programs.

Evaluates AST nodes directly. Statement execution is written as generator
functions so that a coroutine body can be suspended at any ``yield`` and
resumed later with its scopes intact; outside coroutines the same
generators are simply driven to completion.
"""

import math
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, Iterator, List, Optional, Sequence, Union

from .builtins import BuiltinRegistry
from .context import Environment, Scope
from .coroutines import CoroutineExecutor, CoroutineInstance, CoroutineState
from .signals import (
    ControlSignal, SignalKind, NORMAL, BREAK, CONTINUE, YIELD, return_signal,
)
from .trace import EventKind, ProcessTrace
from .values import (
    Value, VOID_VALUE, int_val, float_val, bool_val, string_val, from_python,
)
from ..ast import (
    Program, Block, FunctionDecl, DocComment,
    Statement, VarDecl, Assign, ExprStmt, If, While, Return, Break, Continue,
    Yield, CreateCoroutine, Resume, ProcessNote,
    Expression, Literal, VariableRef, BinaryOp, UnaryOp, Call,
    BinaryOperator, UnaryOperator,
    ARITHMETIC_OPERATORS, COMPARISON_OPERATORS, LOGICAL_OPERATORS,
)
from ..config import RuntimeConfig
from ..declarations import DeclarationTable
from ..errors import (
    Diagnostic, DiagnosticCollector, GreenRuntimeError,
    error_arity, error_condition_not_bool, error_control_flow,
    error_division_by_zero, error_missing_return, error_not_a_coroutine,
    error_not_callable, error_operand_types, error_recursion_limit,
    error_type_mismatch, error_undefined_coroutine, error_undefined_function,
    error_undefined_task,
)
from ..log import get_logger
from ..source import SourceSpan
from ..types import INT, FLOAT, BOOL, STRING, is_numeric


logger = get_logger(__name__)

StatementRun = Generator[ControlSignal, None, ControlSignal]

HOST_OWNER = "host"

# Python frames one language-level call may occupy, with room for nested
# if/while blocks inside the body
FRAMES_PER_CALL = 32

_LITERAL_CONSTRUCTORS = {
    INT: int_val,
    FLOAT: float_val,
    BOOL: bool_val,
    STRING: string_val,
}


@dataclass
class ExecutionResult:
    """Result of running a program."""
    success: bool
    error: Optional[GreenRuntimeError] = None
    diagnostics: DiagnosticCollector = field(default_factory=DiagnosticCollector)
    trace: Optional[ProcessTrace] = None
    tasks: Dict[str, CoroutineState] = field(default_factory=dict)

    @property
    def error_category(self) -> Optional[str]:
        """Category name of the error that aborted the run."""
        if self.error is None:
            return None
        return self.error.category.value

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return self.error.message

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics.diagnostics if d.code.startswith("W")]


class Interpreter:
    """
    Tree-walking interpreter for Green programs.

    One interpreter runs one program at a time. ``run`` loads a program and
    executes its main body; hosts that schedule coroutines themselves call
    ``load`` and then ``create``, ``resume`` and ``call``.
    """

    def __init__(self, config: Optional[RuntimeConfig] = None):
        self.config = config or RuntimeConfig()
        self.builtins = BuiltinRegistry(self.config)
        self.coroutines = CoroutineExecutor(self)
        self.program: Optional[Program] = None
        self.declarations = DeclarationTable()
        self.tasks: Dict[str, CoroutineInstance] = {}
        self.trace = ProcessTrace()
        self.diagnostics = DiagnosticCollector()
        self._call_depth = 0
        self._overflow_callee: Optional[str] = None

    # --- Driver API ---

    def load(self, program: Program, name: str = "") -> None:
        """
        Index a program's declarations and reset all per-run state.

        Raises DuplicateNameError when two declarations share a name or a
        declaration reuses a built-in name.
        """
        self.program = None
        self.tasks = {}
        self.trace = ProcessTrace(program_name=name)
        self.diagnostics = DiagnosticCollector()
        self._call_depth = 0
        self.declarations = DeclarationTable.from_program(program, self.builtins.names())
        self.program = program
        logger.debug("loaded program %r: %d function(s), %d coroutine(s)",
                     name, len(self.declarations.functions),
                     len(self.declarations.coroutines))

    def run(self, program: Program, name: str = "") -> ExecutionResult:
        """
        Load a program and execute its main body.

        Errors do not escape: the run stops at the first one and the result
        carries its category and message.
        """
        try:
            self.load(program, name)
            with self._host_boundary("main"):
                globals_env = Environment(self.declarations, Scope(name="global"), owner="main")
                signal = self._run_to_completion(program.main, globals_env, "main")
                self._reject_loop_signal(signal)
        except GreenRuntimeError as e:
            logger.debug("run aborted: %s", e.message)
            self.diagnostics.add_error(e)
            return self._result(success=False, error=e)

        return self._result(success=True)

    def create(self, coroutine: str, task: Optional[str] = None) -> CoroutineInstance:
        """Create an instance of a coroutine and bind it in the task table."""
        self._require_loaded()
        return self._create_instance(task or coroutine, coroutine, HOST_OWNER)

    def resume(self, instance: Union[CoroutineInstance, str]) -> CoroutineState:
        """Resume an instance (or the task bound to a name) until it yields or finishes."""
        self._require_loaded()
        if isinstance(instance, str):
            instance = self._task(instance)
        with self._host_boundary(instance.name):
            return self._resume_instance(instance, HOST_OWNER)

    def call(self, name: str, args: Sequence[Any] = ()) -> Value:
        """Call a built-in or declared function with host values."""
        self._require_loaded()
        values = [from_python(arg) for arg in args]
        builtin = self.builtins.get_function(name)
        if builtin is not None:
            return builtin(values)
        with self._host_boundary(name):
            return self._call_function(self._function(name), values, HOST_OWNER)

    def _require_loaded(self) -> None:
        if self.program is None:
            raise RuntimeError("no program loaded")

    def _result(self, success: bool, error: Optional[GreenRuntimeError] = None) -> ExecutionResult:
        return ExecutionResult(
            success=success,
            error=error,
            diagnostics=self.diagnostics,
            trace=self.trace,
            tasks={name: inst.state for name, inst in self.tasks.items()},
        )

    @contextmanager
    def _host_boundary(self, name: str) -> Iterator[None]:
        """
        Size the Python stack for `max_call_depth` nested calls.

        The interpreter limit is raised for the duration of the entry point
        and restored afterwards. Should the Python stack still run out, the
        failure is reported as the recursion limit of the innermost callee.
        """
        previous = sys.getrecursionlimit()
        needed = previous + self.config.max_call_depth * FRAMES_PER_CALL
        sys.setrecursionlimit(needed)
        self._overflow_callee = None
        try:
            yield
        except RecursionError:
            callee = self._overflow_callee or name
            raise error_recursion_limit(callee, self.config.max_call_depth) from None
        finally:
            sys.setrecursionlimit(previous)

    # --- Bodies ---

    def execute_body(self, block: Block, env: Environment, scope_name: str) -> StatementRun:
        """The suspendable execution of a body block in its own scope."""
        return self._execute_block(block, env, scope_name)

    def _run_to_completion(self, block: Block, env: Environment, scope_name: str) -> ControlSignal:
        """Run a body that may not suspend (main body or function call)."""
        steps = self._execute_block(block, env, scope_name)
        try:
            next(steps)
        except StopIteration as stop:
            return stop.value
        steps.close()
        raise error_control_flow("yield", "a coroutine body")

    def _reject_loop_signal(self, signal: ControlSignal) -> None:
        if signal.kind is SignalKind.BREAK:
            raise error_control_flow("break", "a while loop")
        if signal.kind is SignalKind.CONTINUE:
            raise error_control_flow("continue", "a while loop")

    # --- Statements ---

    def _execute_block(self, block: Block, env: Environment, scope_name: str = "block") -> StatementRun:
        """Execute statements in a fresh scope until one produces a non-normal signal."""
        with env.new_scope(scope_name):
            for stmt in block.statements:
                signal = yield from self._execute_statement(stmt, env)
                if not signal.is_normal:
                    return signal
        return NORMAL

    def _execute_statement(self, stmt: Statement, env: Environment) -> StatementRun:
        """Execute a statement."""
        if isinstance(stmt, VarDecl):
            self._execute_var_decl(stmt, env)
        elif isinstance(stmt, Assign):
            env.assign(stmt.name, self._evaluate(stmt.value, env), stmt.span)
        elif isinstance(stmt, ExprStmt):
            self._evaluate(stmt.expression, env)
        elif isinstance(stmt, If):
            return (yield from self._execute_if(stmt, env))
        elif isinstance(stmt, While):
            return (yield from self._execute_while(stmt, env))
        elif isinstance(stmt, Return):
            return self._execute_return(stmt, env)
        elif isinstance(stmt, Break):
            return BREAK
        elif isinstance(stmt, Continue):
            return CONTINUE
        elif isinstance(stmt, Yield):
            yield YIELD
        elif isinstance(stmt, CreateCoroutine):
            self._create_instance(stmt.name, stmt.coroutine, env.owner, stmt.span)
        elif isinstance(stmt, Resume):
            self._resume_instance(self._task(stmt.name, stmt.span), env.owner, stmt.span)
        elif isinstance(stmt, ProcessNote):
            if self.config.trace_process:
                self.trace.record(EventKind.NOTE, env.owner, stmt.note, env.owner)
        else:
            raise RuntimeError(f"Unknown statement type: {type(stmt).__name__}")
        return NORMAL

    def _execute_var_decl(self, stmt: VarDecl, env: Environment) -> None:
        """Execute a variable declaration."""
        value = None
        if stmt.initializer is not None:
            value = self._evaluate(stmt.initializer, env)
        env.define(stmt.name, value, stmt.var_type, stmt.span)
        self._record(stmt.doc, EventKind.DECLARE, stmt.name, env.owner)

    def _execute_if(self, stmt: If, env: Environment) -> StatementRun:
        """Execute an if statement."""
        if self._eval_condition(stmt.condition, env, "if"):
            return (yield from self._execute_block(stmt.then_branch, env, "if-then"))
        if stmt.else_branch is not None:
            return (yield from self._execute_block(stmt.else_branch, env, "if-else"))
        return NORMAL

    def _execute_while(self, stmt: While, env: Environment) -> StatementRun:
        """Execute a while loop; each iteration gets a fresh scope."""
        while self._eval_condition(stmt.condition, env, "while"):
            signal = yield from self._execute_block(stmt.body, env, "while-body")
            if signal.kind is SignalKind.BREAK:
                break
            if signal.kind is SignalKind.RETURN:
                return signal
        return NORMAL

    def _execute_return(self, stmt: Return, env: Environment) -> ControlSignal:
        if stmt.value is None:
            return return_signal(VOID_VALUE)
        return return_signal(self._evaluate(stmt.value, env))

    # --- Coroutines ---

    def _task(self, name: str, span: Optional[SourceSpan] = None) -> CoroutineInstance:
        instance = self.tasks.get(name)
        if instance is None:
            raise error_undefined_task(name, span)
        return instance

    def _create_instance(self, task: str, coroutine: str, owner: str,
                         span: Optional[SourceSpan] = None) -> CoroutineInstance:
        decl = self.declarations.coroutine(coroutine)
        if decl is None:
            if self.declarations.function(coroutine) is not None:
                raise error_not_a_coroutine(coroutine, span)
            raise error_undefined_coroutine(coroutine, span)
        instance = self.coroutines.create(decl, task)
        self.tasks[task] = instance
        self._record(decl.doc, EventKind.CREATE, decl.name, owner, task)
        return instance

    def _resume_instance(self, instance: CoroutineInstance, owner: str,
                         span: Optional[SourceSpan] = None) -> CoroutineState:
        self._record(instance.declaration.doc, EventKind.RESUME,
                     instance.declaration.name, owner, instance.name)
        return self.coroutines.resume(instance, span)

    def _record(self, doc: Optional[DocComment], kind: EventKind, name: str, owner: str,
                instance: Optional[str] = None) -> None:
        """Append a process event when the construct is @process-tagged."""
        if self.config.trace_process and doc is not None and doc.is_process:
            self.trace.record(kind, name, doc.note, owner, instance)

    # --- Functions ---

    def _function(self, name: str, span: Optional[SourceSpan] = None) -> FunctionDecl:
        decl = self.declarations.function(name)
        if decl is None:
            if self.declarations.coroutine(name) is not None:
                raise error_not_callable(name, span)
            raise error_undefined_function(name, span)
        return decl

    def _call_function(self, decl: FunctionDecl, args: List[Value], owner: str,
                       span: Optional[SourceSpan] = None) -> Value:
        """
        Invoke a declared function.

        The body runs in a scope chain that holds only the parameters; the
        caller's variables are not visible.
        """
        if len(args) != len(decl.parameters):
            raise error_arity(decl.name, len(decl.parameters), len(args), span)
        if self._call_depth >= self.config.max_call_depth:
            raise error_recursion_limit(decl.name, self.config.max_call_depth, span)

        env = Environment(self.declarations, Scope(name=f"call {decl.name}"), owner=decl.name)
        for param, arg in zip(decl.parameters, args):
            if arg.type != param.param_type:
                raise error_type_mismatch(str(param.param_type), str(arg.type),
                                          f"argument '{param.name}' of '{decl.name}'", span)
            env.define(param.name, arg, param.param_type, param.span)

        self._record(decl.doc, EventKind.CALL, decl.name, owner)
        logger.debug("call %s (depth %d)", decl.name, self._call_depth + 1)

        self._call_depth += 1
        try:
            signal = self._run_to_completion(decl.body, env, "function-body")
        except RecursionError:
            if self._overflow_callee is None:
                self._overflow_callee = decl.name
            raise
        finally:
            self._call_depth -= 1

        self._reject_loop_signal(signal)
        return self._check_return(decl, signal, span)

    def _check_return(self, decl: FunctionDecl, signal: ControlSignal,
                      span: Optional[SourceSpan]) -> Value:
        """Match the body's outcome against the declared return type."""
        value = signal.value if signal.kind is SignalKind.RETURN else VOID_VALUE
        if decl.return_type is None:
            return value
        if value.is_void:
            raise error_missing_return(decl.name, str(decl.return_type), span)
        if value.type != decl.return_type:
            raise error_type_mismatch(str(decl.return_type), str(value.type),
                                      f"return value of '{decl.name}'", span)
        return value

    # --- Expressions ---

    def _evaluate(self, expr: Expression, env: Environment) -> Value:
        """Evaluate an expression to produce a Value."""
        if isinstance(expr, Literal):
            return self._eval_literal(expr)
        elif isinstance(expr, VariableRef):
            return env.lookup(expr.name, expr.span)
        elif isinstance(expr, BinaryOp):
            return self._eval_binary_op(expr, env)
        elif isinstance(expr, UnaryOp):
            return self._eval_unary_op(expr, env)
        elif isinstance(expr, Call):
            return self._eval_call(expr, env)
        else:
            raise RuntimeError(f"Unknown expression type: {type(expr).__name__}")

    def _eval_literal(self, lit: Literal) -> Value:
        """Evaluate a literal value."""
        constructor = _LITERAL_CONSTRUCTORS.get(lit.literal_type)
        if constructor is None:
            raise RuntimeError(f"Unknown literal type: {lit.literal_type}")
        return constructor(lit.value)

    def _eval_condition(self, expr: Expression, env: Environment, construct: str) -> bool:
        value = self._evaluate(expr, env)
        if value.type != BOOL:
            raise error_condition_not_bool(construct, str(value.type), expr.span)
        return value.data

    def _eval_binary_op(self, op: BinaryOp, env: Environment) -> Value:
        """Evaluate a binary operation."""
        if op.operator in LOGICAL_OPERATORS:
            return self._eval_logical(op, env)

        left = self._evaluate(op.left, env)
        right = self._evaluate(op.right, env)
        if left.type != right.type or left.is_void:
            raise error_operand_types(str(op.operator), str(left.type), str(right.type), op.span)

        if op.operator in ARITHMETIC_OPERATORS:
            if left.type == INT:
                return self._int_arithmetic(op, left.data, right.data)
            if left.type == FLOAT:
                return float_val(_float_arithmetic(op.operator, left.data, right.data))
            raise error_operand_types(str(op.operator), str(left.type), str(right.type), op.span)

        if op.operator not in COMPARISON_OPERATORS:
            raise RuntimeError(f"Unknown binary operator: {op.operator}")
        if op.operator == BinaryOperator.EQ:
            return bool_val(left.data == right.data)
        elif op.operator == BinaryOperator.NE:
            return bool_val(left.data != right.data)

        if not is_numeric(left.type):
            raise error_operand_types(str(op.operator), str(left.type), str(right.type), op.span)
        if op.operator == BinaryOperator.LT:
            return bool_val(left.data < right.data)
        elif op.operator == BinaryOperator.LE:
            return bool_val(left.data <= right.data)
        elif op.operator == BinaryOperator.GT:
            return bool_val(left.data > right.data)
        return bool_val(left.data >= right.data)

    def _eval_logical(self, op: BinaryOp, env: Environment) -> Value:
        """``and``/``or`` short-circuit; ``xor`` always evaluates both sides."""
        left = self._evaluate(op.left, env)
        if left.type != BOOL:
            raise error_operand_types(str(op.operator), str(left.type), span=op.span)

        if op.operator == BinaryOperator.AND and not left.data:
            return bool_val(False)
        if op.operator == BinaryOperator.OR and left.data:
            return bool_val(True)

        right = self._evaluate(op.right, env)
        if right.type != BOOL:
            raise error_operand_types(str(op.operator), str(left.type), str(right.type), op.span)
        if op.operator == BinaryOperator.XOR:
            return bool_val(left.data != right.data)
        return bool_val(right.data)

    def _int_arithmetic(self, op: BinaryOp, a: int, b: int) -> Value:
        # int_val wraps results to 64 bits
        if op.operator == BinaryOperator.ADD:
            return int_val(a + b)
        elif op.operator == BinaryOperator.SUB:
            return int_val(a - b)
        elif op.operator == BinaryOperator.MUL:
            return int_val(a * b)
        if b == 0:
            raise error_division_by_zero(op.span)
        quotient = abs(a) // abs(b)
        if (a < 0) != (b < 0):
            quotient = -quotient
        return int_val(quotient)

    def _eval_unary_op(self, op: UnaryOp, env: Environment) -> Value:
        """Evaluate a unary operation."""
        operand = self._evaluate(op.operand, env)

        if op.operator == UnaryOperator.NOT:
            if operand.type != BOOL:
                raise error_operand_types(str(op.operator), str(operand.type), span=op.span)
            return bool_val(not operand.data)

        if not is_numeric(operand.type):
            raise error_operand_types(str(op.operator), str(operand.type), span=op.span)
        if op.operator == UnaryOperator.MINUS:
            if operand.type == INT:
                return int_val(-operand.data)
            return float_val(-operand.data)
        return operand

    def _eval_call(self, call: Call, env: Environment) -> Value:
        """Evaluate a call; built-ins take precedence over declarations."""
        builtin = self.builtins.get_function(call.name)
        if builtin is not None:
            args = [self._evaluate(arg, env) for arg in call.arguments]
            return builtin(args, call.span)

        decl = self._function(call.name, call.span)
        if len(call.arguments) != len(decl.parameters):
            raise error_arity(decl.name, len(decl.parameters), len(call.arguments), call.span)
        args = [self._evaluate(arg, env) for arg in call.arguments]
        return self._call_function(decl, args, env.owner, call.span)


def _float_arithmetic(operator: BinaryOperator, a: float, b: float) -> float:
    """IEEE-754 double arithmetic, including division by zero."""
    if operator == BinaryOperator.ADD:
        return a + b
    elif operator == BinaryOperator.SUB:
        return a - b
    elif operator == BinaryOperator.MUL:
        return a * b
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, math.copysign(1.0, a) * math.copysign(1.0, b))
    return a / b


# Convenience function for simple execution
def run_program(program: Program, config: Optional[RuntimeConfig] = None,
                name: str = "") -> ExecutionResult:
    """
    Run a program with a fresh interpreter.

    This is a convenience wrapper around Interpreter.run():

        result = run_program(program, RuntimeConfig(output=lines.append))
        if not result.success:
            print(f"{result.error_category}: {result.error_message}")
    """
    return Interpreter(config).run(program, name)
