"""
plc0 - PL/0 Compiler Command-Line Interface
===========================================

Usage Examples
--------------
Show the token stream:
    $ plc0 tokenize prog.pl0

Compile to an instruction listing:
    $ plc0 compile prog.pl0 -o prog.s

Compile and execute:
    $ plc0 run prog.pl0

Execute an existing listing:
    $ plc0 run --listing prog.s
"""

import logging
from pathlib import Path
from typing import Optional

import click

from plc0 import __version__
from plc0.compiler import CompilerOptions, Plc0Compiler
from plc0.instruction import Operation, parse_instructions
from plc0.cli.errors import handle_cli_exception
from plc0.vm import StackMachine, run_program


# =============================================================================
# CLI Context
# =============================================================================

class Context:
    """Options shared by every subcommand."""

    def __init__(self) -> None:
        self.verbose: bool = False
        self.options = CompilerOptions.from_env()

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )

    def compiler(self) -> Plc0Compiler:
        return Plc0Compiler(self.options)


pass_context = click.make_pass_decorator(Context, ensure=True)

SOURCE_FILE = click.Path(dir_okay=False, path_type=Path)


# =============================================================================
# CLI Definition
# =============================================================================

@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.option(
    "--max-integer",
    type=click.IntRange(min=0),
    default=None,
    help="Largest accepted integer literal (default: 2147483647)",
)
@click.option(
    "--no-context",
    is_flag=True,
    help="Do not show the source line under error messages",
)
@click.version_option(version=__version__, prog_name="plc0")
@pass_context
def main(ctx: Context, verbose: bool, max_integer: Optional[int], no_context: bool) -> None:
    """
    Compile PL/0 programs to stack-machine instructions.

    \b
    Example program:
        begin
            const c = 5;
            var x;
            x = c + 1;
            print(x);
        end
    """
    ctx.verbose = verbose
    if max_integer is not None:
        ctx.options.max_integer = max_integer
    if no_context:
        ctx.options.source_context = False
    ctx.setup_logging()


@main.command()
@click.argument("input_file", type=SOURCE_FILE)
@pass_context
def tokenize(ctx: Context, input_file: Path) -> None:
    """Print the tokens of INPUT_FILE, one per line."""
    try:
        source = _read(input_file)
        for token in ctx.compiler().tokenize(source, str(input_file)):
            click.echo(repr(token))
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


@main.command("compile")
@click.argument("input_file", type=SOURCE_FILE)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output listing file (default: stdout)",
)
@pass_context
def compile_command(ctx: Context, input_file: Path, output: Optional[Path]) -> None:
    """Compile INPUT_FILE to an instruction listing."""
    try:
        source = _read(input_file)
        result = ctx.compiler().compile_source(source, str(input_file))

        if output is None:
            click.echo(result.listing(), nl=False)
            return

        output.write_text(result.listing(), encoding="utf-8")
        if ctx.verbose:
            click.echo(f"Symbols: {result.symbols.offsets()}")
            click.echo(f"Frame size: {result.frame_size}")
        click.echo(f"Compiled {input_file} -> {output}")
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


@main.command()
@click.argument("input_file", type=SOURCE_FILE)
@click.option(
    "--listing",
    is_flag=True,
    help="INPUT_FILE is an instruction listing rather than PL/0 source",
)
@click.option(
    "--frame-size",
    type=click.IntRange(min=0),
    default=None,
    help="Cells to reserve when running a listing (default: highest offset + 1)",
)
@pass_context
def run(ctx: Context, input_file: Path, listing: bool, frame_size: Optional[int]) -> None:
    """Compile and execute INPUT_FILE, printing every written value."""
    if frame_size is not None and not listing:
        raise click.UsageError("--frame-size only applies together with --listing")

    try:
        text = _read(input_file)

        if listing:
            instructions = parse_instructions(text)
            if frame_size is None:
                offsets = [i.operand for i in instructions if i.operation in (Operation.LOD, Operation.STO)]
                frame_size = max(offsets, default=-1) + 1
            StackMachine(instructions, frame_size, output=click.echo).run()
        else:
            result = ctx.compiler().compile_source(text, str(input_file))
            run_program(result, output=click.echo)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


def _read(path: Path) -> str:
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return path.read_text(encoding="utf-8")


if __name__ == "__main__":
    main()
