"""
Zeb Language Compiler
=====================

This package implements a compiler for Zeb, a small imperative language,
targeting x86-64 Linux. It provides:

- A lexer (tokenizer) for Zeb source code
- A recursive descent parser producing an AST
- A stack-machine code generator emitting NASM assembly

Pipeline
--------
    Zeb Source → Lexer → Parser → AST → Code Generator → Assembly

The generated assembly is assembled with nasm and linked with ld.

Usage
-----
>>> from zebc.lang import compile_zeb
>>> print(compile_zeb("x = 5\\nexit x + 2"))

Language
--------
Supported:
- Assignment:       x = 5
- Exit status:      exit x + 2
- Counting loops:   for i in range(10)
- Arithmetic:       + - * with parentheses and unary minus
- Built-ins:        print(expr), range(expr)

Not supported:
- Loop bodies (endfor parses but is rejected by the generator)
- Division and modulo (parse, rejected by the generator)
- Functions, types other than 64-bit integers

Memory Model
------------
- Every value is a 64-bit integer in an 8-byte stack slot
- Variables are the stack slots their defining expressions were pushed to
- RAX and RBX are the only scratch registers
"""

from zebc.lang.compiler import (
    ZebCompiler,
    CompilerOptions,
    CompilerResult,
    compile_zeb,
)
from zebc.lang.errors import (
    ErrorKind,
    CompileError,
    ZebSyntaxError,
    CodeGenError,
    UndeclaredVariableError,
    UndeclaredFunctionError,
    UnsupportedOperatorError,
    NotImplementedFeatureError,
    MalformedProgramError,
    InternalCompilerError,
    StackUnderflowError,
)
from zebc.lang.lexer import ZLexer, ZTokenType, ZToken
from zebc.lang.parser import ZParser, parse_source
from zebc.lang.codegen import CodeGenerator, generate_assembly
from zebc.lang.ast import (
    ASTNode,
    Program,
    Statement,
    Expression,
    Exit,
    Assign,
    For,
    EndFor,
    IntegerLiteral,
    VariableReference,
    InfixOp,
    Call,
    ASTPrinter,
)

__all__ = [
    # Main API
    "ZebCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_zeb",
    # Errors
    "ErrorKind",
    "CompileError",
    "ZebSyntaxError",
    "CodeGenError",
    "UndeclaredVariableError",
    "UndeclaredFunctionError",
    "UnsupportedOperatorError",
    "NotImplementedFeatureError",
    "MalformedProgramError",
    "InternalCompilerError",
    "StackUnderflowError",
    # Lexer
    "ZLexer",
    "ZTokenType",
    "ZToken",
    # Parser
    "ZParser",
    "parse_source",
    # Code Generator
    "CodeGenerator",
    "generate_assembly",
    # AST Nodes
    "ASTNode",
    "Program",
    "Statement",
    "Expression",
    "Exit",
    "Assign",
    "For",
    "EndFor",
    "IntegerLiteral",
    "VariableReference",
    "InfixOp",
    "Call",
    "ASTPrinter",
]
