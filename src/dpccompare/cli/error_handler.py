"""
CLI Error Handling Utilities

Consistent error output and exit codes across commands.
"""

from __future__ import annotations

import logging
import sys

from pydantic import ValidationError
from rich.console import Console

from dpccompare.cli.json_formatter import format_error_output
from dpccompare.shared.errors import (
    ApplicationError,
    DpcCompareError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    SecurityError,
)
from dpccompare.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2


def _describe(error: Exception) -> tuple[str, int]:
    if isinstance(error, (ApplicationError, SecurityError)):
        return f"Configuration error: {error.message}", EXIT_CONFIG_ERROR
    if isinstance(error, InfrastructureError):
        return f"Service error: {error.message}", EXIT_ERROR
    if isinstance(error, DpcCompareError):
        return error.message, EXIT_ERROR
    if isinstance(error, ValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in error.errors()
        )
        return f"Invalid input: {problems}", EXIT_ERROR
    return f"Unexpected error: {error}", EXIT_ERROR


def handle_cli_error(
    error: Exception,
    command: str,
    *,
    json_output: bool = False,
    console: Console | None = None,
) -> int:
    """Report an error raised by a command.

    Args:
        error: The exception that occurred
        command: The CLI command being executed
        json_output: Emit a JSON error document on stdout
        console: Console used for human-readable output (default: stderr)

    Returns:
        Exit code for the command
    """
    message, exit_code = _describe(error)

    wrapped = (
        error
        if isinstance(error, DpcCompareError)
        else ApplicationError(
            code=ErrorCode.CLI_COMMAND_FAILED,
            message=message,
            context=ErrorContext(operation=command),
            original_error=error,
        )
    )
    log_operation_error(logger, wrapped, operation=command, level=logging.DEBUG)

    if json_output:
        sys.stdout.write(format_error_output(command, [message]).decode("utf-8") + "\n")
    else:
        (console or Console(stderr=True)).print(f"[bold red]Error:[/bold red] {message}", markup=True, highlight=False)

    return exit_code
