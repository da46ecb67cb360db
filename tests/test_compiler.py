"""
Zeb Compiler Tests
==================

Tests for the compiler facade: compilation results, error capture,
options and file handling.
"""

import pytest

from zebc.lang.compiler import (
    ZebCompiler,
    CompilerOptions,
    CompilerResult,
    compile_zeb,
)
from zebc.lang.ast import Assign, Exit, IntegerLiteral, VariableReference, EndFor
from zebc.lang.errors import (
    CompileError,
    ErrorKind,
    UndeclaredVariableError,
    InvalidCharacterError,
)


class TestCompileSource:
    """compile_source() results."""

    def test_success(self):
        result = ZebCompiler().compile_source("x = 5\nexit x + 2", "ok.zb")
        assert result.success
        assert result.error is None
        assert result.error_kind is None
        assert result.filename == "ok.zb"
        assert result.assembly.startswith("global _start\n_start:\n")
        assert len(result.ast.statements) == 2
        # x = 5 NEWLINE exit x + 2 EOF
        assert result.token_count == 9

    def test_syntax_error_captured(self):
        result = ZebCompiler().compile_source("exit 1 +")
        assert not result.success
        assert result.assembly == ""
        assert result.ast is None
        assert result.error_kind == ErrorKind.SYNTAX

    def test_lexer_error_captured(self):
        result = ZebCompiler().compile_source("exit $")
        assert isinstance(result.error, InvalidCharacterError)
        assert result.error_kind == ErrorKind.SYNTAX

    def test_codegen_error_captured(self):
        result = ZebCompiler().compile_source("exit y")
        assert not result.success
        assert result.ast is not None
        assert result.assembly == ""
        assert result.error_kind == ErrorKind.UNDECLARED_VARIABLE

    @pytest.mark.parametrize("source,kind", [
        ("exit foo(1)", ErrorKind.UNDECLARED_FUNCTION),
        ("exit 4 / 2", ErrorKind.UNSUPPORTED_OPERATOR),
        ("endfor", ErrorKind.NOT_IMPLEMENTED),
        ("exit (1", ErrorKind.SYNTAX),
    ])
    def test_error_kinds(self, source, kind):
        assert ZebCompiler().compile_source(source).error_kind == kind

    def test_codegen_error_gets_source_line(self):
        result = ZebCompiler().compile_source("x = 1\nexit x + y", "prog.zb")
        error = result.error
        assert error.source_line == "exit x + y"
        assert str(error).splitlines() == [
            "prog.zb:2:10: error: undeclared variable 'y'",
            "    exit x + y",
            "             ^",
        ]

    def test_raise_for_error(self):
        result = ZebCompiler().compile_source("exit nope")
        with pytest.raises(UndeclaredVariableError):
            result.raise_for_error()

    def test_raise_for_error_on_success_is_noop(self):
        ZebCompiler().compile_source("exit 0").raise_for_error()

    def test_comments_option(self):
        options = CompilerOptions(output_comments=True)
        result = ZebCompiler(options).compile_source("exit 3")
        assert "    ; exit 3\n" in result.assembly


class TestCompileStatements:
    """Compiling an already-built AST."""

    def test_success(self, run_asm):
        result = ZebCompiler().compile_statements([
            Assign("x", IntegerLiteral(5)),
            Exit(VariableReference("x")),
        ])
        assert result.success
        assert result.filename == "<ast>"
        assert result.token_count == 0
        assert run_asm(result.assembly).exit_status == 5

    def test_error_captured(self):
        result = ZebCompiler().compile_statements([EndFor()])
        assert result.error_kind == ErrorKind.NOT_IMPLEMENTED
        assert result.error.source_line is None

    def test_malformed_tree_captured(self):
        result = ZebCompiler().compile_statements([
            Assign("x", IntegerLiteral(1)),
            Exit(VariableReference(None)),
        ])
        assert not result.success
        assert result.assembly == ""
        assert result.error_kind == ErrorKind.MALFORMED_PROGRAM

    def test_non_integer_literal_not_emitted(self):
        result = ZebCompiler().compile_statements([Exit(IntegerLiteral("rbx"))])
        assert not result.success
        assert result.error_kind == ErrorKind.MALFORMED_PROGRAM


class TestCompileFile:
    """compile_file() reads sources from disk."""

    def test_compile_file(self, tmp_path):
        path = tmp_path / "seven.zb"
        path.write_text("exit 7\n", encoding="utf-8")
        result = ZebCompiler().compile_file(path)
        assert result.success
        assert result.filename == str(path)

    def test_error_location_uses_path(self, tmp_path):
        path = tmp_path / "bad.zb"
        path.write_text("exit q\n", encoding="utf-8")
        result = ZebCompiler().compile_file(path)
        assert str(result.error).startswith(f"{path}:1:6: error:")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ZebCompiler().compile_file(tmp_path / "missing.zb")


class TestOptions:
    """CompilerOptions defaults and environment overrides."""

    def test_defaults(self):
        assert CompilerOptions().output_comments is False

    @pytest.mark.parametrize("value,expected", [
        ("1", True),
        ("true", True),
        ("YES", True),
        ("0", False),
        ("off", False),
    ])
    def test_from_env(self, monkeypatch, value, expected):
        monkeypatch.setenv("ZEB_COMMENTS", value)
        assert CompilerOptions.from_env().output_comments is expected

    def test_from_env_unset(self, monkeypatch):
        monkeypatch.delenv("ZEB_COMMENTS", raising=False)
        assert CompilerOptions.from_env() == CompilerOptions()


class TestCompileZeb:
    """The compile_zeb() convenience function."""

    def test_returns_assembly(self, run_asm):
        assert run_asm(compile_zeb("exit 6 * 7")).exit_status == 42

    def test_raises_compile_error(self):
        with pytest.raises(CompileError):
            compile_zeb("exit 1 % 2")

    def test_result_type(self):
        assert isinstance(ZebCompiler().compile_source(""), CompilerResult)
