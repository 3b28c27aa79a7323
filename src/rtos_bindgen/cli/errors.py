"""
rtos-macrogen Error Reporting
=============================

Maps exceptions raised by the rtos-macrogen commands onto diagnostics and
exit codes:

| Exception               | Exit code      | Output                                 |
|-------------------------|----------------|----------------------------------------|
| MacroBatchError         | BUILD_ERROR    | batch report, then the failed names    |
| MacroError              | BUILD_ERROR    | located diagnostic, as formatted       |
| BindgenError            | BUILD_ERROR    | "<stage> error: ..."                   |
| ValueError, OSError     | INVALID_ARGS   | "Error: ..."                           |
| anything else           | INTERNAL_ERROR | "Internal error: ..." (traceback, -v)  |
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from rtos_bindgen.errors import BindgenError
from rtos_bindgen.fnmacro.errors import MacroBatchError, MacroError


class ExitCode(IntEnum):
    """Exit codes of rtos-macrogen."""
    SUCCESS = 0
    BUILD_ERROR = 1      # At least one macro was not translated
    INVALID_ARGS = 2     # Bad option value or unreadable header
    INTERNAL_ERROR = 3   # Bug in the transpiler


def failed_macros_summary(error: MacroBatchError) -> str:
    """
    Name the macros a batch failed on and how to get past them.

    Example:
        not translated: MASK, FLAGS
        hint: pass --keep-going, or --skip MASK --skip FLAGS
    """
    names = error.macro_names
    skips = " ".join(f"--skip {name}" for name in names)
    return f"not translated: {', '.join(names)}\nhint: pass --keep-going, or {skips}"


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    stage: str | None = None,
) -> NoReturn:
    """
    Report an exception raised by a command and exit.

    Args:
        error: The exception that was raised
        verbose: Print the traceback of internal errors
        stage: Names the failing step in generic messages ("Translation")

    Raises:
        SystemExit: Always
    """
    if isinstance(error, MacroBatchError):
        click.echo(str(error), err=True)
        if error.macro_names:
            click.echo(failed_macros_summary(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    if isinstance(error, MacroError):
        click.echo(str(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    if isinstance(error, BindgenError):
        click.echo(f"{stage or 'Generator'} error: {error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    if isinstance(error, (ValueError, OSError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)
