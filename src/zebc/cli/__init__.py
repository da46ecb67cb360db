"""
Zeb Command-Line Interface
==========================

This package provides the command-line tools for the Zeb toolchain:

- **zeb**: Zeb to x86-64 assembly compiler

Each tool is implemented as a Click-based CLI application with
help text and consistent exit codes.
"""

__all__ = ["zeb"]
