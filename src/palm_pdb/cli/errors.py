"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from palm_pdb.errors import PalmError


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    CODEC_ERROR = 1      # A record failed to decode, encode or round-trip
    INVALID_ARGS = 2     # Invalid arguments or unreadable input files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for the CLI tools.

    Formats the error message, optionally prints the traceback for
    internal errors, and exits with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Decode")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, PalmError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.CODEC_ERROR)

    elif isinstance(error, (click.BadParameter, ValueError)):
        # Invalid command-line arguments or input text
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        # Unexpected internal error
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
