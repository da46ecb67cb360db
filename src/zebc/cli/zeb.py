"""
zeb - Zeb Compiler Command-Line Interface
=========================================

This module implements the command-line interface for the Zeb compiler.

Usage Examples
--------------
Basic compilation:
    $ zeb count.zb

With output file:
    $ zeb count.zb -o out.asm

Inspect the front end:
    $ zeb --tokens count.zb
    $ zeb --ast count.zb

Full pipeline to an executable:
    $ zeb count.zb && nasm -f elf64 count.asm -o count.o && ld count.o -o count
"""

import logging
from pathlib import Path
from typing import Optional

import click

from zebc import __version__
from zebc.lang import ZebCompiler, CompilerOptions
from zebc.lang.ast import ASTPrinter
from zebc.lang.lexer import ZLexer
from zebc.cli.errors import handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output assembly file (default: input.asm)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print tokens and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "-c", "--comments",
    is_flag=True,
    help="Annotate the assembly with the source statements "
         "(default from ZEB_COMMENTS)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="zeb")
def main(
    input_file: Path,
    output: Optional[Path],
    tokens: bool,
    ast: bool,
    comments: bool,
    verbose: bool,
) -> None:
    """
    Compile a Zeb program to x86-64 assembly.

    INPUT_FILE is the Zeb source file (.zb) to compile.

    \b
    Examples:
        zeb count.zb                 # Outputs count.asm
        zeb count.zb -o out.asm      # Specify output file
        zeb --ast count.zb           # Show the parsed program
        zeb -v count.zb              # Verbose output

    \b
    Language:
        x = 5                        # assignment
        exit x + 2                   # exit status
        for i in range(10)           # counting loop
        y = print(x * 3)             # print a value
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".asm")

    options = CompilerOptions.from_env()
    if comments:
        options.output_comments = True

    try:
        source = input_file.read_text(encoding="utf-8")

        if tokens:
            for token in ZLexer(source, str(input_file)).tokenize():
                click.echo(repr(token))
            return

        if verbose:
            click.echo(f"Compiling {input_file}...")

        result = ZebCompiler(options).compile_source(source, str(input_file))
        # The tree is shown even when code generation failed afterwards
        if ast and result.ast is not None:
            click.echo(ASTPrinter().print(result.ast))
            return

        result.raise_for_error()

        output.write_text(result.assembly, encoding="utf-8")

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens")
            click.echo(f"Parsed: {len(result.ast.statements)} statements")
            click.echo(f"Wrote {len(result.assembly)} bytes to {output}")

        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
