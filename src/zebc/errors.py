"""
Zeb Toolchain Error Hierarchy
=============================

This module defines the root of the exception hierarchy for the Zeb
toolchain. All exceptions inherit from ZebError, allowing callers to
catch every toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
ZebError (base)
├── CompileError (user-facing, see zebc.lang.errors)
│   ├── ZebSyntaxError - lexer and parser errors
│   └── CodeGenError - code generation errors
└── InternalCompilerError (compiler bugs, see zebc.lang.errors)
    └── StackUnderflowError - evaluation stack bookkeeping went negative

Design Philosophy
-----------------
User-facing errors capture source location information (filename, line,
column) when it is known. Internal errors never carry a user location:
they describe a defect in the compiler itself, not in the program being
compiled.
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class ZebError(Exception):
    """
    Base exception for all Zeb toolchain errors.

        try:
            compile_zeb(source)
        except ZebError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
