"""
Zeb Test Configuration
======================

pytest fixtures shared by the Zeb test suite.

It provides:
- run_asm: executes generated assembly on a small x86-64 interpreter that
  understands exactly the instructions the code generator emits, so exit
  statuses and printed output can be checked without nasm or ld
- compile_and_run: compiles Zeb source and runs it through run_asm
"""

from dataclasses import dataclass, field

import pytest

from zebc.lang import compile_zeb


MASK64 = (1 << 64) - 1
REGISTERS = ("rax", "rbx", "rcx", "rdx", "rsi", "rdi", "r8", "rsp")
STACK_TOP = 0x7FFF_F000


def to_signed(value: int) -> int:
    value &= MASK64
    return value - (1 << 64) if value >> 63 else value


@dataclass
class RunResult:
    """Outcome of an interpreted program."""
    exit_status: int            # Low byte of RDI, as the shell sees it
    exit_value: int             # Full signed RDI at the exit syscall
    stdout: str = ""
    steps: int = 0
    max_stack_bytes: int = 0


@dataclass
class Machine:
    """Interpreter for the x86-64 subset emitted by the code generator."""
    lines: list[str]
    regs: dict = field(default_factory=lambda: {r: 0 for r in REGISTERS})
    memory: dict = field(default_factory=dict)
    stdout: bytearray = field(default_factory=bytearray)
    flags_value: int = 0

    def __post_init__(self):
        self.regs["rsp"] = STACK_TOP
        self.labels = {}
        self.program = []
        for raw in self.lines:
            line = raw.split(";", 1)[0].strip()
            if not line or line.startswith("global "):
                continue
            if line.endswith(":"):
                self.labels[line[:-1]] = len(self.program)
                continue
            mnemonic, _, rest = line.partition(" ")
            operands = [op.strip() for op in rest.split(",")] if rest else []
            self.program.append((mnemonic, operands))

    # --- memory -----------------------------------------------------------

    def load(self, addr: int, size: int) -> int:
        return int.from_bytes(
            bytes(self.memory.get(addr + i, 0) for i in range(size)), "little"
        )

    def store(self, addr: int, value: int, size: int) -> None:
        for i, byte in enumerate((value & ((1 << (8 * size)) - 1)).to_bytes(size, "little")):
            self.memory[addr + i] = byte

    # --- operands ---------------------------------------------------------

    def operand(self, text: str):
        size = 8
        if text.startswith("byte "):
            size, text = 1, text[5:].strip()
        if text.startswith("["):
            inner = text[1:-1]
            base, _, disp = inner.partition("+")
            addr = self.regs[base.strip()] + (int(disp) if disp else 0)
            return ("mem", addr, size)
        if text in REGISTERS:
            return ("reg", text, 8)
        if text == "dl":
            return ("dl", "rdx", 1)
        return ("imm", int(text), size)

    def read(self, op) -> int:
        kind, where, size = op
        if kind == "reg":
            return self.regs[where]
        if kind == "dl":
            return self.regs["rdx"] & 0xFF
        if kind == "mem":
            return self.load(where, size)
        return where & MASK64

    def write(self, op, value: int) -> None:
        kind, where, size = op
        if kind == "reg":
            self.regs[where] = value & MASK64
        elif kind == "dl":
            self.regs["rdx"] = (self.regs["rdx"] & ~0xFF & MASK64) | (value & 0xFF)
        elif kind == "mem":
            self.store(where, value, size)
        else:
            raise AssertionError(f"cannot write to immediate {where}")

    # --- execution --------------------------------------------------------

    def run(self, max_steps: int = 1_000_000) -> RunResult:
        pc = 0
        steps = 0
        lowest_rsp = STACK_TOP
        while pc < len(self.program):
            steps += 1
            if steps > max_steps:
                raise AssertionError("program did not terminate")
            mnemonic, ops = self.program[pc]
            pc += 1

            if mnemonic in ("jmp", "je", "jle", "jns", "jnz"):
                taken = {
                    "jmp": True,
                    "je": self.flags_value == 0,
                    "jle": self.flags_value <= 0,
                    "jns": self.flags_value >= 0,
                    "jnz": self.flags_value != 0,
                }[mnemonic]
                if taken:
                    pc = self.labels[ops[0]]
                continue

            if mnemonic == "syscall":
                number = self.regs["rax"]
                if number == 60:
                    rdi = to_signed(self.regs["rdi"])
                    return RunResult(
                        exit_status=rdi & 0xFF,
                        exit_value=rdi,
                        stdout=self.stdout.decode(),
                        steps=steps,
                        max_stack_bytes=STACK_TOP - lowest_rsp,
                    )
                if number == 1:
                    start, length = self.regs["rsi"], self.regs["rdx"]
                    self.stdout.extend(self.load(start + i, 1) for i in range(length))
                    self.regs["rax"] = length
                    continue
                raise AssertionError(f"unexpected syscall {number}")

            if mnemonic == "push":
                self.regs["rsp"] -= 8
                self.store(self.regs["rsp"], self.regs[ops[0]], 8)
            elif mnemonic == "pop":
                self.regs[ops[0]] = self.load(self.regs["rsp"], 8)
                self.regs["rsp"] += 8
            elif mnemonic == "mov":
                dst, src = self.operand(ops[0]), self.operand(ops[1])
                if dst[0] == "mem" and src[0] == "dl":
                    dst = ("mem", dst[1], 1)
                self.write(dst, self.read(src))
            elif mnemonic == "lea":
                self.write(self.operand(ops[0]), self.operand(ops[1])[1])
            elif mnemonic in ("add", "sub", "xor"):
                dst, src = self.operand(ops[0]), self.operand(ops[1])
                a, b = self.read(dst), self.read(src)
                value = {"add": a + b, "sub": a - b, "xor": a ^ b}[mnemonic]
                self.write(dst, value)
            elif mnemonic == "cmp":
                a = to_signed(self.read(self.operand(ops[0])))
                b = to_signed(self.read(self.operand(ops[1])))
                self.flags_value = a - b
            elif mnemonic == "test":
                a = self.read(self.operand(ops[0]))
                b = self.read(self.operand(ops[1]))
                self.flags_value = to_signed(a & b)
            elif mnemonic in ("inc", "dec", "neg"):
                op = self.operand(ops[0])
                value = self.read(op)
                self.write(op, {"inc": value + 1, "dec": value - 1, "neg": -value}[mnemonic])
            elif mnemonic == "imul":
                product = to_signed(self.regs["rax"]) * to_signed(self.regs[ops[0]])
                self.regs["rax"] = product & MASK64
                self.regs["rdx"] = (product >> 64) & MASK64
            elif mnemonic == "div":
                dividend = (self.regs["rdx"] << 64) | self.regs["rax"]
                divisor = self.regs[ops[0]]
                self.regs["rax"] = (dividend // divisor) & MASK64
                self.regs["rdx"] = dividend % divisor
            else:
                raise AssertionError(f"unknown instruction {mnemonic} {ops}")

            lowest_rsp = min(lowest_rsp, self.regs["rsp"])

        raise AssertionError("program fell off the end without exiting")


@pytest.fixture
def run_asm():
    """Run assembly text and return a RunResult."""
    def _run(assembly: str, max_steps: int = 1_000_000) -> RunResult:
        return Machine(assembly.splitlines()).run(max_steps)
    return _run


@pytest.fixture
def compile_and_run(run_asm):
    """Compile Zeb source and run it; the program must end with exit."""
    def _run(source: str) -> RunResult:
        return run_asm(compile_zeb(source))
    return _run
