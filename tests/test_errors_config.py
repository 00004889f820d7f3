"""
Tests for diagnostics, runtime configuration and logging setup.
"""

import logging

import pytest

from greenlang import (
    Program, Block, ExprStmt, Call, BinaryOp, BinaryOperator, VariableRef,
    ErrorCategory, ErrorSeverity, DiagnosticCollector, RuntimeConfig,
    configure_logging, format_ast, run_program, span_at, int_lit, Return,
)
from greenlang.ast import COMPARISON_OPERATORS, print_ast
from greenlang.errors import (
    error_arity, error_division_by_zero, error_operand_types,
    error_undefined_name, warning_resume_completed,
)
from greenlang.log import get_logger


# --- Diagnostic Tests ---

class TestDiagnostics:
    """Test error formatting and the (category, message) pair."""

    def test_as_pair(self):
        err = error_undefined_name("x")
        assert err.as_pair() == ("NameError", "undefined variable 'x'")
        assert err.category is ErrorCategory.NAME

    def test_format_with_span(self):
        err = error_division_by_zero(span_at(3, 7, 5))
        assert str(err) == "3:7: error[E404]: integer division by zero"

    def test_hint_for_mixed_numbers(self):
        err = error_operand_types("+", "int", "float")
        assert err.diagnostic.hints == ["int and float are never converted implicitly"]
        assert "= hint:" in err.diagnostic.format()

    def test_arity_message(self):
        assert error_arity("f", "at least 1", 0).message == \
            "'f' takes at least 1 argument(s), 0 given"

    def test_to_json(self):
        data = error_undefined_name("x", span_at(1, 2, filename="main.gr")).diagnostic.to_json()
        assert data["code"] == "E401"
        assert data["category"] == "NameError"
        assert data["range"]["start"] == {"line": 1, "column": 2}

    def test_collector(self):
        collector = DiagnosticCollector()
        collector.add_error(error_undefined_name("x"))
        collector.add(warning_resume_completed("t"))
        assert collector.error_count == 1
        assert collector.warning_count == 1
        assert collector.has_errors and collector.has_warnings
        assert collector.format_all().endswith("1 error(s), 1 warning(s)")
        assert collector.to_json()["warning_count"] == 1

    def test_warning_severity(self):
        assert warning_resume_completed("t").severity is ErrorSeverity.WARNING

    def test_run_result_carries_diagnostic(self):
        program = Program(main=Block([ExprStmt(Call("print", [
            BinaryOp(int_lit(1), BinaryOperator.DIV, int_lit(0)),
        ]))]))
        result = run_program(program, RuntimeConfig(output=[].append))
        assert result.error.as_pair() == ("DivisionByZero", "integer division by zero")
        assert result.diagnostics.error_count == 1


# --- Configuration Tests ---

class TestRuntimeConfig:
    """Test runtime settings."""

    def test_defaults(self):
        config = RuntimeConfig()
        assert config.strict_resume is True
        assert config.trace_process is True
        assert config.max_call_depth == 100

    def test_from_env(self):
        config = RuntimeConfig.from_env({
            "GREENLANG_STRICT_RESUME": "false",
            "GREENLANG_MAX_CALL_DEPTH": "12",
            "GREENLANG_TRACE_PROCESS": "0",
        })
        assert config.strict_resume is False
        assert config.max_call_depth == 12
        assert config.trace_process is False

    def test_overrides_win(self):
        config = RuntimeConfig.from_env({"GREENLANG_MAX_CALL_DEPTH": "12"}, max_call_depth=5)
        assert config.max_call_depth == 5

    def test_unknown_override(self):
        with pytest.raises(KeyError, match="unknown runtime setting 'colour'"):
            RuntimeConfig.from_env({}, colour="green")

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "green.yaml"
        path.write_text("strict_resume: false\nmax_call_depth: 64\n")
        config = RuntimeConfig.from_file(path)
        assert config.strict_resume is False
        assert config.max_call_depth == 64

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "green.json"
        path.write_text('{"trace_process": false}')
        assert RuntimeConfig.from_file(path).trace_process is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_file(tmp_path / "absent.yaml")

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="must hold a mapping"):
            RuntimeConfig.from_file(path)

    def test_to_dict(self):
        assert RuntimeConfig(max_call_depth=7).to_dict() == {
            "trace_process": True,
            "strict_resume": True,
            "max_call_depth": 7,
        }

    def test_output_sink(self):
        lines = []
        RuntimeConfig(output=lines.append).write_line("hi")
        assert lines == ["hi"]

    def test_stdout_default(self, capsys):
        RuntimeConfig().write_line("to stdout")
        assert capsys.readouterr().out == "to stdout\n"


# --- Logging Tests ---

class TestLogging:
    """Test package logging setup."""

    def test_get_logger_namespaced(self):
        assert get_logger("custom").name == "greenlang.custom"
        assert get_logger("greenlang.runtime").name == "greenlang.runtime"

    def test_configure_logging_once(self, monkeypatch):
        monkeypatch.setenv("GREENLANG_LOG_LEVEL", "debug")
        logger = configure_logging()
        configure_logging()
        consoles = [h for h in logger.handlers if getattr(h, "_greenlang_console", False)]
        assert len(consoles) == 1
        assert logger.level == logging.DEBUG
        logger.removeHandler(consoles[0])
        logger.setLevel(logging.NOTSET)

    def test_runs_log_at_debug(self, caplog):
        program = Program(main=Block([ExprStmt(Call("print", [VariableRef("ghost")]))]))
        with caplog.at_level(logging.DEBUG, logger="greenlang"):
            run_program(program, RuntimeConfig(output=[].append))
        assert any("run aborted" in r.getMessage() for r in caplog.records)


# --- AST Formatting ---

class TestFormatAst:
    """Test debug rendering of trees."""

    def test_print_ast(self, capsys):
        print_ast(Return(int_lit(3)))
        out = capsys.readouterr().out
        assert out.startswith("Return\n")
        assert "value: 3" in out

    def test_format_call(self):
        text = format_ast(Call("print", [int_lit(1)]))
        assert text.splitlines()[0] == "Call"
        assert "name: print" in text
        assert "Literal" in text

    def test_program_partitions_declarations(self):
        from greenlang import FunctionDecl, CoroutineDecl
        f = FunctionDecl("f", [], None, Block([]))
        c = CoroutineDecl("C", Block([]))
        program = Program([f, c])
        assert program.functions == [f]
        assert program.coroutines == [c]

    def test_comparison_operators(self):
        assert {str(op) for op in COMPARISON_OPERATORS} == {"==", "!=", "<", "<=", ">", ">="}
