"""
Zeb Compiler Error Hierarchy
============================

This module defines the exception hierarchy for the Zeb compiler.
All exceptions inherit from ZebError so that callers can handle the
whole toolchain uniformly.

Exception Hierarchy
-------------------
CompileError (base for all user-facing compile errors)
├── ZebSyntaxError - lexer and parser syntax errors
│   ├── InvalidCharacterError - unexpected character
│   ├── UnexpectedTokenError - token does not fit the grammar
│   └── MissingTokenError - required token absent
└── CodeGenError - code generation errors
    ├── UndeclaredVariableError - reference to an unbound name
    ├── UndeclaredFunctionError - call to something other than print/range
    ├── UnsupportedOperatorError - infix operator outside + - *
    ├── NotImplementedFeatureError - construct the generator does not lower
    └── MalformedProgramError - AST node of an unknown shape

InternalCompilerError (compiler defects, never caused by user input)
└── StackUnderflowError - evaluation stack depth would go negative

Error Message Format
--------------------
Compile errors include source location information when it is known:

    filename:line:column: error: description
        source_line_text
            ^ (pointer to error location)
    hint: suggestion for fixing

Example:
    count.zb:2:6: error: undeclared variable 'totl'
        exit totl + 1
             ^
    hint: did you mean 'total'?
"""

import difflib
from enum import Enum
from typing import Iterable, Optional

from zebc.errors import ZebError, SourceLocation


# =============================================================================
# Error Kinds
# =============================================================================

class ErrorKind(Enum):
    """Failure categories a compilation result can report."""
    SYNTAX = "syntax"
    UNDECLARED_VARIABLE = "undeclared-variable"
    UNDECLARED_FUNCTION = "undeclared-function"
    UNSUPPORTED_OPERATOR = "unsupported-operator"
    NOT_IMPLEMENTED = "not-implemented"
    MALFORMED_PROGRAM = "malformed-program"


# =============================================================================
# Base Compile Exception
# =============================================================================

class CompileError(ZebError):
    """
    Base exception for all user-facing Zeb compiler errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
        kind: The ErrorKind reported in compilation results
    """

    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            count.zb:2:6: error: undeclared variable 'totl'
                exit totl + 1
                     ^
            hint: did you mean 'total'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Syntax Errors (Lexer and Parser)
# =============================================================================

class ZebSyntaxError(CompileError):
    """
    Syntax error in Zeb source code.

    Raised when the lexer or parser encounters text that cannot be
    tokenized or parsed according to the Zeb grammar.

    Examples:
        - Invalid character in source
        - Missing operand after an operator
        - Integer literal that does not fit in 64 bits
    """
    kind = ErrorKind.SYNTAX


class InvalidCharacterError(ZebSyntaxError):
    """Invalid character in source code."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


class UnexpectedTokenError(ZebSyntaxError):
    """
    Unexpected token during parsing.

    Raised when the parser encounters a token that doesn't match
    the expected grammar rule.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(ZebSyntaxError):
    """Required token is missing (e.g. ')' after a call argument)."""

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected '{expected}'",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(CompileError):
    """
    Error during code generation.

    Raised when the code generator meets a program it cannot lower.
    Code generation stops at the first error and produces no assembly.
    """
    pass


class UndeclaredVariableError(CodeGenError):
    """
    Reference to a variable with no earlier assignment or for-binding.

    The generator suggests similarly-named variables when this error
    occurs, helping to catch typos.
    """

    kind = ErrorKind.UNDECLARED_VARIABLE

    def __init__(
        self,
        identifier: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        known_names: Optional[Iterable[str]] = None,
    ):
        self.identifier = identifier
        self.similar_identifiers = difflib.get_close_matches(
            identifier, sorted(known_names or []), n=3
        )

        hint = None
        if self.similar_identifiers:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_identifiers)
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undeclared variable '{identifier}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndeclaredFunctionError(CodeGenError):
    """Call to a function other than the built-ins print() and range()."""

    kind = ErrorKind.UNDECLARED_FUNCTION

    def __init__(
        self,
        function_name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.function_name = function_name
        super().__init__(
            f"undeclared function '{function_name}'",
            location=location,
            hint="the available built-ins are print() and range()",
            source_line=source_line,
        )


class UnsupportedOperatorError(CodeGenError):
    """
    Infix operator the generator cannot lower.

    Only '+', '-' and '*' are supported. Division and modulo parse
    but are rejected here.
    """

    kind = ErrorKind.UNSUPPORTED_OPERATOR

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operator = operator
        super().__init__(
            f"unsupported operator '{operator}'",
            location=location,
            hint="supported operators are '+', '-' and '*'",
            source_line=source_line,
        )


class NotImplementedFeatureError(CodeGenError):
    """
    Language construct that parses but is not lowered.

    Examples:
        - endfor (loop bodies)
        - for-loops over anything other than range(...)
    """

    kind = ErrorKind.NOT_IMPLEMENTED

    def __init__(
        self,
        feature: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        alternative: Optional[str] = None,
    ):
        self.feature = feature
        super().__init__(
            f"not implemented: {feature}",
            location=location,
            hint=alternative,
            source_line=source_line,
        )


class MalformedProgramError(CodeGenError):
    """
    AST node the generator cannot lower as built.

    Raised for nodes of an unknown type, and for known nodes whose fields
    hold the wrong kind of value (e.g. a literal that is not a 64-bit
    integer). The parser never produces either; they come from trees
    built by hand.
    """

    kind = ErrorKind.MALFORMED_PROGRAM

    def __init__(
        self,
        node: object,
        location: Optional[SourceLocation] = None,
        detail: Optional[str] = None,
    ):
        self.node = node
        self.detail = detail
        if detail is None:
            message = f"unrecognized program node {type(node).__name__}"
        else:
            message = f"malformed {type(node).__name__} node: {detail}"
        super().__init__(message, location=location)


# =============================================================================
# Internal Errors
# =============================================================================

class InternalCompilerError(ZebError):
    """
    Defect in the compiler itself.

    These errors are never caused by the program being compiled and are
    not captured in compilation results; they propagate to the caller.
    """
    pass


class StackUnderflowError(InternalCompilerError):
    """A pop was emitted while the evaluation stack depth was zero."""

    def __init__(self, register: str):
        self.register = register
        super().__init__(
            f"internal error: evaluation stack underflow popping into {register}"
        )
