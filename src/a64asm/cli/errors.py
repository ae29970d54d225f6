"""
CLI Error Handling
==================

Maps failures of the a64asm command to messages on stderr and exit codes.

| Failure                                  | Exit code      |
|------------------------------------------|----------------|
| any A64Error (assembly, pseudocode)      | BUILD_ERROR    |
| bad option value, unreadable input file  | INVALID_ARGS   |
| anything else                            | INTERNAL_ERROR |

Toolchain errors are printed exactly as formatted by the exception, which
already starts with ``error:`` (or ``file:line: error:``).
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from a64asm.errors import A64Error


class ExitCode(IntEnum):
    """Exit codes of the a64asm command."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Assembly, parsing or lowering error
    INVALID_ARGS = 2     # Invalid arguments or unreadable input
    INTERNAL_ERROR = 3   # Unexpected internal error


# Errors caused by what the user passed on the command line
INPUT_ERRORS = (
    click.BadParameter,
    FileNotFoundError,
    PermissionError,
    IsADirectoryError,
    UnicodeDecodeError,
)


def exit_code_for(error: Exception) -> ExitCode:
    """Classify an exception raised while running the command."""
    if isinstance(error, A64Error):
        return ExitCode.BUILD_ERROR
    if isinstance(error, INPUT_ERRORS):
        return ExitCode.INVALID_ARGS
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception and exit.

    Args:
        error: The exception that was raised
        verbose: If True, print the traceback of internal errors
        error_type: Prefix for input errors (e.g., "Input")

    Raises:
        SystemExit: Always, with the code from exit_code_for
    """
    code = exit_code_for(error)

    if code == ExitCode.BUILD_ERROR:
        click.echo(str(error), err=True)

    elif code == ExitCode.INVALID_ARGS:
        prefix = f"{error_type} error: " if error_type else "Error: "
        if isinstance(error, UnicodeDecodeError):
            click.echo(f"{prefix}input is not valid text ({error.reason})", err=True)
        else:
            click.echo(f"{prefix}{error}", err=True)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()

    sys.exit(code)
