#!/usr/bin/env python3
"""
Zeb Compiler Demo
=================

This script demonstrates the programmatic compiler API:
1. Compile source text and inspect the result
2. Build a program from AST nodes directly
3. Handle a compile error without raising

Usage:
    python examples/compile_demo.py

To turn the printed assembly into an executable on Linux x86-64:
    nasm -f elf64 out.asm -o out.o && ld out.o -o out && ./out; echo $?
"""

from pathlib import Path

from zebc.lang import ZebCompiler, CompilerOptions
from zebc.lang.ast import ASTPrinter, Assign, Exit, InfixOp, IntegerLiteral, VariableReference


def main():
    compiler = ZebCompiler(CompilerOptions(output_comments=True))

    # ==========================================================================
    # 1. Compile a source file
    # ==========================================================================

    source_path = Path(__file__).with_name("count.zb")
    result = compiler.compile_file(source_path)
    print(f"{source_path.name}: {result.token_count} tokens")
    print(ASTPrinter().print(result.ast))
    print(result.assembly)

    # ==========================================================================
    # 2. Compile an AST built by hand
    # ==========================================================================

    result = compiler.compile_statements([
        Assign("x", IntegerLiteral(5)),
        Exit(InfixOp(VariableReference("x"), "+", IntegerLiteral(2))),
    ])
    print(result.assembly)

    # ==========================================================================
    # 3. Errors are reported in the result
    # ==========================================================================

    result = compiler.compile_source("total = 3\nexit totl * 2", "typo.zb")
    print(f"success={result.success} kind={result.error_kind.name}")
    print(result.error)


if __name__ == "__main__":
    main()
