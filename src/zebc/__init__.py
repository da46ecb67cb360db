"""
Zeb Toolchain - Ahead-of-Time Compiler for the Zeb Language
===========================================================

This package compiles Zeb programs to x86-64 NASM assembly for Linux.

Main Components
---------------
- **lang**: the compiler (lexer, parser, AST, code generator)
- **cli**: the `zeb` command-line tool

Quick Start
-----------
Compile a program:
    >>> from zebc import ZebCompiler
    >>> result = ZebCompiler().compile_file("hello.zb")
    >>> if result.success:
    ...     print(result.assembly)

Or use the command-line tool:
    $ zeb hello.zb -o hello.asm
    $ nasm -f elf64 hello.asm -o hello.o && ld hello.o -o hello
"""

__version__ = "0.1.0"

from zebc.errors import ZebError, SourceLocation
from zebc.lang import (
    ZebCompiler,
    CompilerOptions,
    CompilerResult,
    compile_zeb,
    ErrorKind,
    CompileError,
    InternalCompilerError,
)

__all__ = [
    "__version__",
    "ZebError",
    "SourceLocation",
    "ZebCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_zeb",
    "ErrorKind",
    "CompileError",
    "InternalCompilerError",
]
