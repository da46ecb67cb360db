"""
x86-64 Code Generator for Zeb
=============================

This module generates x86-64 NASM assembly (Linux, static, no libc) from
the Zeb AST. It is the last stage of the compiler: the output is meant to
be assembled with nasm and linked with ld by the caller.

Code Generation Strategy
------------------------
The generator uses a stack-machine evaluation model:

1. Every expression leaves exactly one 64-bit value on top of the stack
2. Binary operations pop the right operand into RBX, the left into RAX,
   combine them in RAX and push the result
3. A variable is the stack slot its defining expression was pushed into;
   the slot never moves, so its address is computed relative to RSP from
   the current stack depth

Register Usage
--------------
| Register | Usage                                        |
|----------|----------------------------------------------|
| RAX      | Scratch A: left operand, result, loop bound  |
| RBX      | Scratch B: right operand, loop counter       |
| RDI      | Exit status for the exit syscall             |
| RSP      | Evaluation stack                             |

print() additionally uses RCX, RDX, RSI, RDI and R8 while formatting.

Stack Addressing
----------------
The generator counts pushed 8-byte slots in an EvaluationStack. A
variable bound when the depth was d, read when the depth is s, lives at

    [rsp + (s - d - 1) * 8]

Only EvaluationStack.push/pop may change the depth, and each call emits
the matching instruction, so the count cannot drift from the code.

Loop Lowering
-------------
range(n) lowers to a counting loop with labels loopN / exitN. The loop
variable owns a single slot that is overwritten on each iteration:

        pop rax             ; bound
        mov rbx, 0
        push rbx            ; loop variable slot
        loop0:
            mov [rsp], rbx
            inc rbx
            cmp rax, rbx
            jle exit0
            jmp loop0
        exit0:

Generated Assembly Format
-------------------------
    global _start
    _start:
        mov rax, 5
        push rax
        ...

Usage
-----
>>> from zebc.lang.parser import parse_source
>>> from zebc.lang.codegen import CodeGenerator
>>> asm = CodeGenerator().generate(parse_source("exit 7"))
>>> print(asm)
global _start
_start:
    mov rax, 7
    push rax
    mov rax, 60
    pop rdi
    syscall
"""

import logging
from typing import Iterable, Optional, Union

from zebc.errors import SourceLocation
from zebc.lang.ast import (
    INT64_MIN,
    INT64_MAX,
    ASTNode,
    ASTVisitor,
    ASTPrinter,
    Program,
    Statement,
    Exit,
    Assign,
    For,
    EndFor,
    IntegerLiteral,
    VariableReference,
    InfixOp,
    Call,
)
from zebc.lang.errors import (
    UndeclaredVariableError,
    UndeclaredFunctionError,
    UnsupportedOperatorError,
    NotImplementedFeatureError,
    MalformedProgramError,
    InternalCompilerError,
    StackUnderflowError,
)

logger = logging.getLogger(__name__)


PROLOGUE = "global _start\n_start:\n"

# Size of one evaluation stack slot in bytes
SLOT_SIZE = 8

# Linux x86-64 syscall numbers
SYS_WRITE = 1
SYS_EXIT = 60
STDOUT = 1

# Scratch buffer for print(): 20 digits, sign and newline
PRINT_BUFFER_SIZE = 32

ARITHMETIC_INSTRUCTIONS = {
    "+": "add rax, rbx",
    "-": "sub rax, rbx",
    "*": "imul rbx",
}


# =============================================================================
# Assembly Output
# =============================================================================

class AssemblyEmitter:
    """
    Append-only assembly text buffer.

    Lines are indented four spaces per level: level 1 for statement code,
    level 2 for code nested inside a loop.
    """

    INDENT = "    "

    def __init__(self, prologue: str = PROLOGUE):
        self._parts: list[str] = [prologue]

    def emit(self, line: str, level: int = 1) -> None:
        """Append one instruction (or label) line."""
        self._parts.append(f"{self.INDENT * level}{line}\n")

    def label(self, name: str, level: int = 1) -> None:
        self.emit(f"{name}:", level)

    def comment(self, text: str, level: int = 1) -> None:
        self.emit(f"; {text}", level)

    @property
    def text(self) -> str:
        return "".join(self._parts)


class EvaluationStack:
    """
    Compile-time model of the run-time evaluation stack.

    The depth counts 8-byte slots pushed since program start. It can
    only change through push() and pop(), which emit the corresponding
    instruction at the same time.
    """

    def __init__(self, emitter: AssemblyEmitter):
        self._emitter = emitter
        self._depth = 0

    @property
    def depth(self) -> int:
        return self._depth

    def push(self, register: str, level: int = 1) -> int:
        """Emit a push; return the slot index the value now occupies."""
        self._emitter.emit(f"push {register}", level)
        self._depth += 1
        return self._depth - 1

    def pop(self, register: str, level: int = 1) -> None:
        if self._depth == 0:
            raise StackUnderflowError(register)
        self._emitter.emit(f"pop {register}", level)
        self._depth -= 1

    def offset_of(self, slot: int) -> int:
        """Byte offset from RSP of the slot recorded at depth `slot`."""
        return (self._depth - slot - 1) * SLOT_SIZE


class LabelAllocator:
    """Mints loop label pairs from a strictly increasing counter."""

    def __init__(self):
        self._loops = 0
        self._prints = 0

    @property
    def loop_counter(self) -> int:
        return self._loops

    def next_loop(self) -> tuple[str, str]:
        """Return (loopN, exitN) and advance the counter."""
        n = self._loops
        self._loops += 1
        logger.debug("minted loop labels loop%d/exit%d", n, n)
        return f"loop{n}", f"exit{n}"

    def next_print(self) -> str:
        """Return the label prefix for one inlined print sequence."""
        n = self._prints
        self._prints += 1
        return f"print{n}"


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator(ASTVisitor):
    """
    Generates x86-64 assembly from a Zeb program.

    The generator walks the statements once, top to bottom. Any error
    aborts generation; no partial assembly is returned.

    Attributes:
        output_comments: Emit a '; <statement>' line before each statement
    """

    BUILTINS = ("print", "range")

    def __init__(self, output_comments: bool = False):
        self.output_comments = output_comments
        self._reset()

    def _reset(self) -> None:
        self._emitter = AssemblyEmitter()
        self._stack = EvaluationStack(self._emitter)
        self._labels = LabelAllocator()
        self._variables: dict[str, int] = {}

    # =========================================================================
    # Generator State (read-only views)
    # =========================================================================

    @property
    def stack_pointer(self) -> int:
        return self._stack.depth

    @property
    def loop_counter(self) -> int:
        return self._labels.loop_counter

    @property
    def variables(self) -> dict[str, int]:
        return dict(self._variables)

    @property
    def assembly(self) -> str:
        return self._emitter.text

    # =========================================================================
    # Entry Point
    # =========================================================================

    def generate(self, program: Union[Program, Iterable[Statement]]) -> str:
        """
        Generate assembly for a program.

        Args:
            program: A Program node or an ordered sequence of statements

        Returns:
            Assembly text beginning with the entry prologue

        Raises:
            CodeGenError: On the first statement that cannot be lowered
            StackUnderflowError: If the generator's own bookkeeping is wrong
        """
        self._reset()

        statements = program.statements if isinstance(program, Program) else list(program)
        for stmt in statements:
            if not isinstance(stmt, Statement):
                raise MalformedProgramError(stmt, self._location_of(stmt))
            self._check_fields(stmt)
            if self.output_comments:
                self._emitter.comment(ASTPrinter.statement_str(stmt))
            logger.debug("lowering %s at depth %d", type(stmt).__name__, self._stack.depth)
            self.visit(stmt)

        logger.debug(
            "generated %d statements, final depth %d, %d loops",
            len(statements), self._stack.depth, self._labels.loop_counter,
        )
        return self._emitter.text

    @staticmethod
    def _location_of(node: object) -> Optional[SourceLocation]:
        return getattr(node, "location", None)

    def _check_fields(self, node: ASTNode) -> None:
        """
        Reject a known node whose fields hold values the generator cannot
        emit. Child nodes are checked when they are lowered.

        Raises:
            MalformedProgramError: naming the offending field
        """
        detail = None
        if isinstance(node, IntegerLiteral):
            value = node.value
            if isinstance(value, bool) or not isinstance(value, int):
                detail = f"value {value!r} is not an integer"
            elif not INT64_MIN <= value <= INT64_MAX:
                detail = f"value {value} does not fit in 64 bits"
        elif isinstance(node, (VariableReference, Call, Assign, For)):
            if not isinstance(node.name, str) or not node.name:
                detail = f"name {node.name!r} is not an identifier"
        elif isinstance(node, InfixOp):
            if not isinstance(node.operator, str):
                detail = f"operator {node.operator!r} is not a string"

        if detail is not None:
            raise MalformedProgramError(node, self._location_of(node), detail)

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_Exit(self, node: Exit) -> None:
        self._generate_expression(node.expression)
        self._emitter.emit(f"mov rax, {SYS_EXIT}")
        self._stack.pop("rdi")
        self._emitter.emit("syscall")

    def visit_Assign(self, node: Assign) -> None:
        # Depth before lowering is the slot the value's final push lands in.
        # The name is published afterwards so "x = x + 1" reads the old x.
        slot = self._stack.depth
        self._generate_expression(node.expression)
        self._variables[node.name] = slot

    def visit_For(self, node: For) -> None:
        iterable = node.expression
        if isinstance(iterable, Call):
            self._check_fields(iterable)
        if not (isinstance(iterable, Call) and iterable.name == "range"):
            raise NotImplementedFeatureError(
                "for-loop over something other than range(...)",
                self._location_of(iterable) or node.location,
                alternative="write 'for i in range(n)'",
            )
        slot = self._stack.depth
        self._generate_expression(iterable)
        self._variables[node.name] = slot

    def visit_EndFor(self, node: EndFor) -> None:
        raise NotImplementedFeatureError(
            "loop bodies (endfor)",
            node.location,
            alternative="a for statement currently only counts; remove the endfor",
        )

    # =========================================================================
    # Expressions
    # =========================================================================

    def _generate_expression(self, expr) -> None:
        """Lower an expression; the stack depth grows by exactly one."""
        entry_depth = self._stack.depth
        if not isinstance(expr, (IntegerLiteral, VariableReference, InfixOp, Call)):
            raise MalformedProgramError(expr, self._location_of(expr))
        self._check_fields(expr)
        self.visit(expr)
        if self._stack.depth != entry_depth + 1:
            raise InternalCompilerError(
                f"internal error: {type(expr).__name__} left depth "
                f"{self._stack.depth}, expected {entry_depth + 1}"
            )

    def visit_IntegerLiteral(self, node: IntegerLiteral) -> None:
        self._emitter.emit(f"mov rax, {node.value}")
        self._stack.push("rax")

    def visit_VariableReference(self, node: VariableReference) -> None:
        slot = self._variables.get(node.name)
        if slot is None:
            raise UndeclaredVariableError(
                node.name, node.location, known_names=self._variables.keys()
            )
        self._emitter.emit(f"mov rax, [rsp + {self._stack.offset_of(slot)}]")
        self._stack.push("rax")

    def visit_InfixOp(self, node: InfixOp) -> None:
        self._generate_expression(node.left)
        self._generate_expression(node.right)

        instruction = ARITHMETIC_INSTRUCTIONS.get(node.operator)
        if instruction is None:
            raise UnsupportedOperatorError(node.operator, node.location)

        self._stack.pop("rbx")
        self._stack.pop("rax")
        self._emitter.emit(instruction)
        self._stack.push("rax")

    def visit_Call(self, node: Call) -> None:
        self._generate_expression(node.argument)
        if node.name not in self.BUILTINS:
            raise UndeclaredFunctionError(node.name, node.location)

        if node.name == "print":
            self._generate_print()
        else:
            self._generate_range()

    # =========================================================================
    # Built-ins
    # =========================================================================

    def _generate_range(self) -> None:
        """
        Lower range() whose bound is on top of the stack.

        Replaces the bound with the loop variable slot, so the net effect
        together with the bound's push is +1.
        """
        loop_label, exit_label = self._labels.next_loop()

        self._stack.pop("rax")
        self._emitter.emit("mov rbx, 0")
        self._stack.push("rbx")
        self._emitter.label(loop_label)
        self._emitter.emit("mov [rsp], rbx", 2)
        self._emitter.emit("inc rbx", 2)
        self._emitter.emit("cmp rax, rbx", 2)
        self._emitter.emit(f"jle {exit_label}", 2)
        self._emitter.emit(f"jmp {loop_label}", 2)
        self._emitter.label(exit_label)

    def _generate_print(self) -> None:
        """
        Write the top-of-stack value to stdout as signed decimal plus newline.

        The value stays on the stack. The digit buffer below RSP is released
        before returning and no variable is addressed while it is live.
        """
        prefix = self._labels.next_print()
        digits, next_digit, write = f"{prefix}_digits", f"{prefix}_next", f"{prefix}_write"
        emit = self._emitter.emit

        emit("mov rax, [rsp]")
        emit(f"sub rsp, {PRINT_BUFFER_SIZE}")
        emit(f"lea rsi, [rsp + {PRINT_BUFFER_SIZE}]")
        emit("dec rsi")
        emit("mov byte [rsi], 10")
        emit("mov r8, rax")
        emit("test rax, rax")
        emit(f"jns {digits}")
        emit("neg rax")
        self._emitter.label(digits)
        emit("mov rcx, 10")
        self._emitter.label(next_digit)
        emit("xor rdx, rdx", 2)
        emit("div rcx", 2)
        emit("add dl, 48", 2)
        emit("dec rsi", 2)
        emit("mov [rsi], dl", 2)
        emit("test rax, rax", 2)
        emit(f"jnz {next_digit}", 2)
        emit("test r8, r8")
        emit(f"jns {write}")
        emit("dec rsi")
        emit("mov byte [rsi], 45")
        self._emitter.label(write)
        emit(f"mov rax, {SYS_WRITE}")
        emit(f"mov rdi, {STDOUT}")
        emit(f"lea rdx, [rsp + {PRINT_BUFFER_SIZE}]")
        emit("sub rdx, rsi")
        emit("syscall")
        emit(f"add rsp, {PRINT_BUFFER_SIZE}")


# =============================================================================
# Convenience Functions
# =============================================================================

def generate_assembly(program: Union[Program, Iterable[Statement]]) -> str:
    """Generate assembly for a program with a fresh generator."""
    return CodeGenerator().generate(program)
