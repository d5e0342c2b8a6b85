"""
CLI Error Handling
==================

Maps exceptions to messages and exit codes for the gyrotap command.

Program errors name the offending PRG file on its own line, followed by
what is wrong with it. Asset errors add a hint about where the loader
PRGs are looked up. Everything unexpected is reported as an internal
error, with a traceback in verbose mode.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from gyrotap.errors import (
    AssetError,
    GyrotapError,
    InvalidArgumentError,
    ProgramError,
)


class ExitCode(IntEnum):
    """Exit codes of the gyrotap command."""
    SUCCESS = 0
    CONVERSION_ERROR = 1  # Program validation, asset or tape errors
    INVALID_ARGS = 2      # Invalid arguments or missing files
    INTERNAL_ERROR = 3    # Unexpected internal error


ASSET_HINT = "Use --assets or set GYROTAP_ASSET_DIR to the folder holding the loader PRGs"


def describe_error(error: Exception) -> tuple[list[str], ExitCode]:
    """
    Work out the lines to print for an error and the exit code to use.

    Returns:
        The message lines (without the "Error: " prefix) and the exit code
    """
    if isinstance(error, ProgramError):
        if error.path is None:
            return [error.message], ExitCode.CONVERSION_ERROR
        return [f"Cannot convert {error.path}", error.message], ExitCode.CONVERSION_ERROR

    if isinstance(error, AssetError):
        return [str(error), ASSET_HINT], ExitCode.CONVERSION_ERROR

    if isinstance(error, (InvalidArgumentError, click.BadParameter)):
        return [str(error)], ExitCode.INVALID_ARGS

    if isinstance(error, GyrotapError):
        return [str(error)], ExitCode.CONVERSION_ERROR

    if isinstance(error, (FileNotFoundError, PermissionError)):
        if error.filename and error.strerror:
            return [f"{error.filename}: {error.strerror}"], ExitCode.INVALID_ARGS
        return [str(error)], ExitCode.INVALID_ARGS

    return [], ExitCode.INTERNAL_ERROR


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception and exit with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always
    """
    lines, code = describe_error(error)

    if code is ExitCode.INTERNAL_ERROR:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
    else:
        click.echo(f"Error: {lines[0]}", err=True)
        for line in lines[1:]:
            click.echo(f"  {line}", err=True)

    sys.exit(code)
