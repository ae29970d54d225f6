"""
a64asm - ARM64 Subset Assembler Command-Line Interface
======================================================

Assembles pre-tokenized, raw or pseudocode input into raw little-endian
machine code. The machine code goes to standard output (or ``-o``), and
the symbol listing goes to standard error (or ``-s``), so the two never
mix.

Usage Examples
--------------
Pre-tokenized input from stdin:
    $ a64asm < prog.tok > prog.bin

Raw assembly with a symbol file:
    $ a64asm --raw prog.s -o prog.bin -s prog.sym

Pseudocode, inspecting the pipeline:
    $ a64asm --high prog.hl --emit-ir
    $ a64asm --high prog.hl --emit-asm

Listing file:
    $ a64asm --raw prog.s -o prog.bin -l prog.lst
"""

import logging
from pathlib import Path
from typing import Optional, TextIO

import click

from a64asm import __version__
from a64asm.assembler import Assembler, InputMode, group_lines, render_line, write_tokenized
from a64asm.cli.errors import handle_cli_exception
from a64asm.highlevel import format_ir, parse_pseudocode

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.File("r"),
    default="-",
)
@click.option(
    "--tokenized", "mode",
    flag_value=InputMode.TOKENIZED.value,
    default=True,
    help="Input is pre-tokenized 'TOKEN_TYPE lexeme' lines (default)",
)
@click.option(
    "--raw", "mode",
    flag_value=InputMode.RAW.value,
    help="Input is raw ARM64 assembly text",
)
@click.option(
    "--high", "mode",
    flag_value=InputMode.HIGH.value,
    help="Input is high-level pseudocode",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write machine code to a file (default: stdout)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the symbol listing to a file (default: stderr)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "--emit-ir",
    is_flag=True,
    help="Print the IR of pseudocode input and exit (requires --high)",
)
@click.option(
    "--emit-asm",
    is_flag=True,
    help="Print the input as assembly statements and exit",
)
@click.option(
    "--emit-tokens",
    is_flag=True,
    help="Print the input in pre-tokenized format and exit",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (on stderr)",
)
@click.version_option(version=__version__, prog_name="a64asm")
def main(
    input_file: TextIO,
    mode: str,
    output: Optional[Path],
    symbols: Optional[Path],
    listing: Optional[Path],
    emit_ir: bool,
    emit_asm: bool,
    emit_tokens: bool,
    verbose: bool,
) -> None:
    """
    Assemble a small ARM64 subset to raw machine code.

    INPUT_FILE is the program to assemble; omit it or pass - to read
    standard input.

    \b
    Examples:
        a64asm prog.tok > prog.bin         # Pre-tokenized input
        a64asm --raw prog.s -o prog.bin    # Raw assembly
        a64asm --high prog.hl --emit-asm   # Show lowered assembly
    """
    setup_logging(verbose)
    input_mode = InputMode(mode)

    if sum([emit_ir, emit_asm, emit_tokens]) > 1:
        raise click.UsageError("--emit-ir, --emit-asm and --emit-tokens are mutually exclusive")
    if emit_ir and input_mode != InputMode.HIGH:
        raise click.UsageError("--emit-ir requires --high")

    try:
        source = input_file.read()
        filename = input_file.name
        logger.info(f"Assembling {filename} ({input_mode.value})")

        if emit_ir:
            click.echo(format_ir(parse_pseudocode(source, filename)), nl=False)
            return

        asm = Assembler(input_mode)
        tokens = asm.tokenize(source, filename=filename)

        if emit_tokens:
            click.echo(write_tokenized(tokens), nl=False)
            return

        if emit_asm:
            for line in group_lines(tokens):
                click.echo(render_line(line))
            return

        code = asm.assemble_tokens(tokens)

        # Outputs are written only once assembly has fully succeeded
        if output is not None:
            asm.write_binary(output)
            logger.info(f"Wrote {len(code)} bytes to {output}")
        else:
            with click.open_file("-", "wb") as stdout:
                stdout.write(code)
                stdout.flush()

        if symbols is not None:
            asm.write_symbols(symbols)
            logger.info(f"Wrote symbols to {symbols}")
        else:
            click.echo(asm.get_symbol_listing(), err=True, nl=False)

        if listing is not None:
            asm.write_listing(listing)
            logger.info(f"Wrote listing to {listing}")

        logger.info(f"Assembly complete: {len(code)} bytes, {len(asm.get_symbols())} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Input")


if __name__ == "__main__":
    main()
