"""
Native Execution Tests
======================

Assemble generated code with nasm, link it with ld and run the
executable. Skipped unless both tools are installed on Linux x86-64.
"""

import platform
import shutil
import subprocess

import pytest

from zebc.lang import compile_zeb


pytestmark = [
    pytest.mark.native,
    pytest.mark.skipif(
        platform.system() != "Linux" or platform.machine() not in ("x86_64", "AMD64"),
        reason="generated code targets Linux x86-64",
    ),
    pytest.mark.skipif(
        shutil.which("nasm") is None or shutil.which("ld") is None,
        reason="nasm and ld are required",
    ),
]


@pytest.fixture
def build_and_run(tmp_path):
    """Compile, assemble, link and run a program; return the process."""
    def _run(source: str) -> subprocess.CompletedProcess:
        asm = tmp_path / "prog.asm"
        obj = tmp_path / "prog.o"
        exe = tmp_path / "prog"
        asm.write_text(compile_zeb(source, "prog.zb"), encoding="utf-8")
        subprocess.run(["nasm", "-f", "elf64", str(asm), "-o", str(obj)], check=True)
        subprocess.run(["ld", str(obj), "-o", str(exe)], check=True)
        return subprocess.run([str(exe)], capture_output=True, text=True, timeout=10)
    return _run


def test_exit_status(build_and_run):
    assert build_and_run("x = 5\nexit x + 2").returncode == 7


def test_negative_exit_status(build_and_run):
    assert build_and_run("exit 5 - 8").returncode == 253


def test_loop(build_and_run):
    assert build_and_run("n = 4\nfor i in range(n * 10)\nexit i - n").returncode == 35


def test_print(build_and_run):
    process = build_and_run("a = print(-15)\nb = print(a * a)\nexit 0")
    assert process.stdout == "-15\n225\n"
    assert process.returncode == 0
