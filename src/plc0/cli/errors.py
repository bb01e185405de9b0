"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the plc0 commands.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from plc0.errors import Plc0Error


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Compilation, listing or execution error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception raised by a command and exit.

    Compiler errors are already formatted with their location, so they are
    printed as-is.

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, Plc0Error):
        click.echo(str(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
