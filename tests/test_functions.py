"""
Tests for the function invoker and the declaration table.
"""

import sys

import pytest

from greenlang import (
    Program, Block, VarDecl, Assign, ExprStmt, If, Return, Call, VariableRef,
    BinaryOp, BinaryOperator, FunctionDecl, CoroutineDecl, Parameter,
    DeclarationTable, DeclarationKind, DuplicateNameError, ArityError,
    RecursionLimitError, RuntimeConfig, Interpreter, run_program,
    int_lit, float_lit, string_lit, INT, FLOAT, STRING,
)


def var(name):
    return VariableRef(name)


def binop(left, op, right):
    return BinaryOp(left, BinaryOperator(op), right)


def print_stmt(*args):
    return ExprStmt(Call("print", list(args)))


def run_main(*statements, declarations=(), **settings):
    lines = []
    result = run_program(
        Program(list(declarations), Block(list(statements))),
        RuntimeConfig(output=lines.append, **settings),
    )
    return result, lines


ADD = FunctionDecl("add", [Parameter("a", INT), Parameter("b", INT)], INT, Block([
    Return(binop(var("a"), "+", var("b"))),
]))

FACTORIAL = FunctionDecl("factorial", [Parameter("n", INT)], INT, Block([
    If(binop(var("n"), "<=", int_lit(1)), Block([Return(int_lit(1))])),
    Return(binop(var("n"), "*", Call("factorial", [binop(var("n"), "-", int_lit(1))]))),
]))

# rsum(n) = n + rsum(n - 1), nesting n + 1 calls
RSUM = FunctionDecl("rsum", [Parameter("n", INT)], INT, Block([
    If(binop(var("n"), "==", int_lit(0)),
       Block([Return(int_lit(0))]),
       Block([Return(binop(var("n"), "+", Call("rsum", [binop(var("n"), "-", int_lit(1))])))])),
]))

FOREVER = FunctionDecl("forever", [Parameter("n", INT)], INT, Block([
    Return(Call("forever", [binop(var("n"), "+", int_lit(1))])),
]))


# --- Invocation Tests ---

class TestInvocation:
    """Test calling declared functions."""

    def test_return_value(self):
        result, lines = run_main(print_stmt(Call("add", [int_lit(2), int_lit(3)])),
                                 declarations=[ADD])
        assert result.success
        assert lines == ["5"]

    def test_recursion(self):
        result, lines = run_main(print_stmt(Call("factorial", [int_lit(10)])),
                                 declarations=[FACTORIAL])
        assert lines == ["3628800"]

    def test_void_function_falls_off_end(self):
        """A function without a return type may finish without returning."""
        greet = FunctionDecl("greet", [Parameter("who", STRING)], None, Block([
            print_stmt(string_lit("hello"), var("who")),
        ]))
        result, lines = run_main(ExprStmt(Call("greet", [string_lit("green")])),
                                 declarations=[greet])
        assert result.success
        assert lines == ["hello green"]

    def test_void_function_bare_return(self):
        f = FunctionDecl("f", [], None, Block([Return(), print_stmt(int_lit(1))]))
        result, lines = run_main(ExprStmt(Call("f")), declarations=[f])
        assert result.success
        assert lines == []

    def test_no_access_to_caller_locals(self):
        """Test that a call scope holds only the parameters."""
        peek = FunctionDecl("peek", [], INT, Block([Return(var("secret"))]))
        result, _ = run_main(
            VarDecl("secret", INT, int_lit(42)),
            print_stmt(Call("peek")),
            declarations=[peek],
        )
        assert result.error_category == "NameError"

    def test_parameters_are_local_copies(self):
        bump = FunctionDecl("bump", [Parameter("x", INT)], INT, Block([
            Assign("x", binop(var("x"), "+", int_lit(1))),
            Return(var("x")),
        ]))
        result, lines = run_main(
            VarDecl("x", INT, int_lit(1)),
            print_stmt(Call("bump", [var("x")])),
            print_stmt(var("x")),
            declarations=[bump],
        )
        assert lines == ["2", "1"]

    def test_host_call(self):
        interp = Interpreter(RuntimeConfig(output=[].append))
        interp.load(Program([ADD]))
        assert interp.call("add", [20, 22]).data == 42

    def test_host_call_builtin(self):
        lines = []
        interp = Interpreter(RuntimeConfig(output=lines.append))
        interp.load(Program())
        interp.call("print", ["hi", 2.5])
        assert lines == ["hi 2.5"]

    def test_host_call_requires_load(self):
        with pytest.raises(RuntimeError, match="no program loaded"):
            Interpreter().call("add", [1, 2])


# --- Invocation Errors ---

class TestInvocationErrors:
    """Test arity, kind and return checks."""

    def test_too_few_arguments(self):
        result, _ = run_main(print_stmt(Call("add", [int_lit(1)])), declarations=[ADD])
        assert result.error_category == "ArityError"
        assert result.error_message == "'add' takes 2 argument(s), 1 given"

    def test_arity_checked_before_arguments(self):
        """Arguments of a call with the wrong arity are not evaluated."""
        result, lines = run_main(
            ExprStmt(Call("add", [Call("print", [int_lit(1)])])),
            declarations=[ADD],
        )
        assert result.error_category == "ArityError"
        assert lines == []

    def test_argument_kind_mismatch(self):
        result, _ = run_main(print_stmt(Call("add", [int_lit(1), float_lit(2.0)])),
                             declarations=[ADD])
        assert result.error_category == "TypeError"
        assert "argument 'b' of 'add'" in result.error_message

    def test_missing_return(self):
        """A typed function that falls off the end fails."""
        f = FunctionDecl("f", [], INT, Block([print_stmt(int_lit(1))]))
        result, lines = run_main(print_stmt(Call("f")), declarations=[f])
        assert result.error_category == "MissingReturnError"
        assert lines == ["1"]

    def test_bare_return_in_typed_function(self):
        f = FunctionDecl("f", [], FLOAT, Block([Return()]))
        result, _ = run_main(print_stmt(Call("f")), declarations=[f])
        assert result.error_category == "MissingReturnError"

    def test_wrong_return_kind(self):
        f = FunctionDecl("f", [], FLOAT, Block([Return(int_lit(1))]))
        result, _ = run_main(print_stmt(Call("f")), declarations=[f])
        assert result.error_category == "TypeError"
        assert "return value of 'f'" in result.error_message

    def test_coroutine_not_callable(self):
        worker = CoroutineDecl("Worker", Block([]))
        result, _ = run_main(ExprStmt(Call("Worker")), declarations=[worker])
        assert result.error_category == "TypeError"
        assert "not callable" in result.error_message

    def test_recursion_limit(self):
        result, _ = run_main(print_stmt(Call("forever", [int_lit(0)])),
                             declarations=[FOREVER], max_call_depth=20)
        assert result.error_category == "RecursionLimit"
        assert "limit of 20" in result.error_message

    def test_recursion_up_to_default_limit(self):
        """Test that nesting exactly max_call_depth calls succeeds."""
        depth = RuntimeConfig().max_call_depth
        result, lines = run_main(print_stmt(Call("rsum", [int_lit(depth - 1)])),
                                 declarations=[RSUM])
        assert result.success, result.error_message
        assert lines == [str(depth * (depth - 1) // 2)]

    def test_recursion_past_default_limit(self):
        """Test that one call past max_call_depth fails naming the callee."""
        depth = RuntimeConfig().max_call_depth
        result, _ = run_main(print_stmt(Call("rsum", [int_lit(depth)])),
                             declarations=[RSUM])
        assert result.error.diagnostic.code == "E409"
        assert result.error_message == \
            f"call depth limit of {depth} exceeded calling 'rsum'"

    def test_deep_configured_limit(self):
        """A raised limit is honoured beyond the default Python stack."""
        result, lines = run_main(print_stmt(Call("rsum", [int_lit(399)])),
                                 declarations=[RSUM], max_call_depth=400)
        assert result.success, result.error_message
        assert lines == ["79800"]

    def test_python_recursion_limit_restored(self):
        before = sys.getrecursionlimit()
        run_main(print_stmt(Call("rsum", [int_lit(5)])), declarations=[RSUM])
        assert sys.getrecursionlimit() == before

    def test_host_call_errors_raise(self):
        interp = Interpreter(RuntimeConfig(max_call_depth=10))
        interp.load(Program([ADD, FOREVER]))
        with pytest.raises(ArityError):
            interp.call("add", [1])
        with pytest.raises(RecursionLimitError):
            interp.call("forever", [0])


# --- Declaration Table ---

class TestDeclarationTable:
    """Test global declaration indexing."""

    def test_lookup(self):
        worker = CoroutineDecl("Worker", Block([]))
        table = DeclarationTable.from_program(Program([ADD, worker]))
        assert table.function("add") is ADD
        assert table.coroutine("Worker") is worker
        assert table.function("Worker") is None
        assert table.kind_of("add") is DeclarationKind.FUNCTION
        assert table.kind_of("Worker") is DeclarationKind.COROUTINE
        assert table.kind_of("nope") is None
        assert "add" in table
        assert len(table) == 2

    def test_read_only(self):
        table = DeclarationTable([ADD])
        with pytest.raises(TypeError):
            table.functions["sub"] = ADD

    def test_duplicate_declarations(self):
        """Test that a function and a coroutine cannot share a name."""
        clash = CoroutineDecl("add", Block([]))
        with pytest.raises(DuplicateNameError, match="global declarations"):
            DeclarationTable([ADD, clash])

    def test_builtin_name_reserved(self):
        shadow = FunctionDecl("print", [], None, Block([]))
        result, _ = run_main(declarations=[shadow])
        assert result.error_category == "DuplicateNameError"
        assert "built-in functions" in result.error_message

    def test_duplicate_parameters(self):
        f = FunctionDecl("f", [Parameter("a", INT), Parameter("a", INT)], None, Block([]))
        result, _ = run_main(ExprStmt(Call("f", [int_lit(1), int_lit(2)])), declarations=[f])
        assert result.error_category == "DuplicateNameError"
