"""
Zeb Compiler Main Module
========================

This module provides the main compiler interface for Zeb. It
orchestrates the compilation process:

    Source → Lex → Parse → Generate → Assembly

Usage
-----
Command line:
    $ zeb hello.zb -o hello.asm

Programmatic:
    >>> from zebc.lang import ZebCompiler
    >>> result = ZebCompiler().compile_source("exit 7")
    >>> result.success
    True

The output is x86-64 NASM assembly for Linux. Assemble and link it with:

    $ nasm -f elf64 hello.asm -o hello.o && ld hello.o -o hello

Error Handling
--------------
Compilation stops at the first error. User-facing errors (CompileError)
are captured in the CompilerResult, which reports the error and its
ErrorKind instead of assembly. Internal compiler errors propagate.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from zebc.lang.lexer import ZLexer
from zebc.lang.parser import ZParser
from zebc.lang.codegen import CodeGenerator
from zebc.lang.ast import Program, Statement
from zebc.lang.errors import CompileError, ErrorKind

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        output_comments: Emit each statement as a '; ...' comment line
                         ahead of its generated code.
    """
    output_comments: bool = False

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create options from environment variables.

        Environment variables (all optional):
            ZEB_COMMENTS: "1"/"true"/"yes" turns on statement comments
        """
        options = cls()
        if comments := os.environ.get("ZEB_COMMENTS"):
            options.output_comments = comments.strip().lower() in ("1", "true", "yes", "on")
        return options


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Exactly one of `assembly` (on success) or `error` (on failure) is
    meaningful.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        assembly: Generated assembly code (empty on failure)
        ast: Parsed program (if parsing succeeded)
        token_count: Number of tokens lexed (0 when compiling an AST directly)
        error: The error that stopped compilation
    """
    filename: str = ""
    success: bool = False
    assembly: str = ""
    ast: Optional[Program] = None
    token_count: int = 0
    error: Optional[CompileError] = None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        """Category of the failure, or None on success."""
        if self.error is None:
            return None
        return self.error.kind

    def raise_for_error(self) -> None:
        """Re-raise the captured error, if any."""
        if self.error is not None:
            raise self.error


class ZebCompiler:
    """
    Zeb to x86-64 compiler.

    Example:
        compiler = ZebCompiler()
        result = compiler.compile_file("hello.zb")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile Zeb source code to assembly.

        Args:
            source: Zeb source code string
            filename: Source filename for error messages

        Returns:
            CompilerResult with the assembly or the error
        """
        result = CompilerResult(filename=filename)

        try:
            tokens = self._lex(source, filename)
            result.token_count = len(tokens)

            result.ast = self._parse(tokens, filename, source.splitlines())

            result.assembly = self._generate(result.ast, source.splitlines())
            result.success = True
        except CompileError as e:
            logger.debug("compilation of %s failed: %s", filename, e.message)
            result.error = e

        if result.success:
            logger.debug(
                "compiled %s: %d tokens, %d statements",
                filename, result.token_count, len(result.ast.statements),
            )
        return result

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """
        Compile a Zeb source file.

        Raises:
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def compile_statements(
        self, statements: Iterable[Statement], filename: str = "<ast>"
    ) -> CompilerResult:
        """Compile an already-parsed statement sequence."""
        program = Program(statements=list(statements))
        result = CompilerResult(filename=filename, ast=program)
        try:
            result.assembly = self._generate(program)
            result.success = True
        except CompileError as e:
            result.error = e
        return result

    def _lex(self, source: str, filename: str) -> list:
        """Tokenize source."""
        return list(ZLexer(source, filename).tokenize())

    def _parse(self, tokens: list, filename: str, source_lines: list[str]) -> Program:
        """Parse tokens into AST."""
        return ZParser(tokens, filename, source_lines).parse()

    def _generate(self, program: Program, source_lines: Optional[list[str]] = None) -> str:
        """Generate assembly, attaching source context to codegen errors."""
        generator = CodeGenerator(output_comments=self.options.output_comments)
        try:
            return generator.generate(program)
        except CompileError as e:
            raise _with_source_line(e, source_lines or [])


def _with_source_line(error: CompileError, source_lines: list[str]) -> CompileError:
    """Fill in the source line of an error raised without one."""
    location = error.location
    if error.source_line is None and location and 0 < location.line <= len(source_lines):
        error.source_line = source_lines[location.line - 1]
        error.args = (error._format_message(),)
    return error


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_zeb(source: str, filename: str = "<input>") -> str:
    """
    Compile Zeb source and return the assembly.

    Raises:
        CompileError: If the program does not compile
    """
    result = ZebCompiler().compile_source(source, filename)
    result.raise_for_error()
    return result.assembly
