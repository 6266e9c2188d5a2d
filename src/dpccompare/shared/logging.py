"""
Structured logging for dpccompare.

Helper functions that record operation outcomes with context so that tier
degradations and fallbacks can be traced from the logs alone.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from dpccompare.shared.errors import DpcCompareError, ErrorContext

# LogRecord attributes set through ``extra=`` that end up in JSON lines
_STRUCTURED_FIELDS = ("error_code", "operation", "context", "duration_ms", "result_info")

_LEVEL_STYLES = {
    "logging.level.debug": "cyan",
    "logging.level.info": "green",
    "logging.level.warning": "yellow",
    "logging.level.error": "red bold",
    "logging.level.critical": "red bold reverse",
    "log.time": "dim cyan",
}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with any structured extras attached."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _STRUCTURED_FIELDS:
            if hasattr(record, field):
                entry[field] = getattr(record, field)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_structured_logger(
    name: str = "dpccompare",
    level: str = "INFO",
    log_file: str | None = None,
    *,
    use_rich_console: bool = True,
) -> logging.Logger:
    """
    Configure the package logger.

    Console output goes to stderr so ``--json`` command output stays clean.

    Args:
        name: Logger name (default: "dpccompare")
        level: Log level name (default: "INFO")
        log_file: Optional path of a JSON-lines log file
        use_rich_console: Use rich console output instead of JSON on stderr

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    console: logging.Handler
    if use_rich_console:
        console = RichHandler(
            console=Console(theme=Theme(_LEVEL_STYLES), stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            log_time_format="[%H:%M:%S]",
        )
    else:
        console = logging.StreamHandler()
        console.setFormatter(StructuredFormatter())
    console.setLevel(logger.level)
    logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def _context_to_dict(context: dict[str, Any] | ErrorContext | None) -> dict[str, Any]:
    if context is None:
        return {}
    if isinstance(context, ErrorContext):
        return context.safe_dict()
    return dict(context)


def log_operation_error(
    logger: logging.Logger,
    error: DpcCompareError,
    operation: str | None = None,
    additional_context: dict[str, Any] | ErrorContext | None = None,
    *,
    level: int = logging.ERROR,
) -> None:
    """
    Record a DpcCompareError with its structured context.

    Args:
        logger: Logger instance
        error: The error to record
        operation: Operation name (defaults to the error context's operation)
        additional_context: Extra context merged into the record
        level: Log level; degradations that are handled use WARNING
    """
    context = {**error.context.safe_dict(), **_context_to_dict(additional_context)}
    logger.log(
        level,
        error.message,
        extra={
            "error_code": error.code.name,
            "context": context,
            "operation": operation or error.context.operation,
        },
        exc_info=error.original_error is not None and level >= logging.ERROR,
    )


def log_operation_success(
    logger: logging.Logger,
    operation: str,
    duration_ms: float,
    result_info: dict[str, Any] | None = None,
    context: dict[str, Any] | ErrorContext | None = None,
) -> None:
    """Record a completed operation at DEBUG level."""
    logger.debug(
        "%s finished in %.1f ms",
        operation,
        duration_ms,
        extra={
            "operation": operation,
            "duration_ms": duration_ms,
            "result_info": result_info or {},
            "context": _context_to_dict(context),
        },
    )


def log_api_call(
    logger: logging.Logger,
    endpoint: str,
    method: str = "GET",
    status_code: int | None = None,
    duration_ms: float | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    """
    Record an outbound API call.

    Responses below 400 are logged at DEBUG. Error statuses and calls
    that got no response at all are logged at WARNING, since every
    caller has a fallback.
    """
    api_context: dict[str, Any] = {"endpoint": endpoint, "method": method, **(context or {})}
    if duration_ms is not None:
        api_context["duration_ms"] = round(duration_ms, 1)

    if status_code is None:
        level, outcome = logging.WARNING, "got no response"
    else:
        api_context["status_code"] = status_code
        level = logging.WARNING if status_code >= 400 else logging.DEBUG
        outcome = f"returned {status_code}"

    logger.log(
        level,
        "%s %s %s",
        method,
        endpoint,
        outcome,
        extra={"operation": "api_call", "context": api_context},
    )
