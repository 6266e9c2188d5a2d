"""
JSON Output Formatter for the dpccompare CLI

Machine-readable output for commands run with ``--json``.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import orjson

_DUMP_OPTIONS = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2


def _envelope(success: bool, command: str, data: Any, errors: list[str], warnings: list[str]) -> dict[str, Any]:
    return {
        "success": success,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
        "warnings": warnings,
    }


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[str] | None = None,
    warnings: list[str] | None = None,
) -> bytes:
    """
    Wrap command output in the standard ``--json`` envelope.

    Any error message forces ``success`` to False. If ``data`` cannot be
    encoded, an error envelope describing the failure is returned instead.
    """
    errors = errors or []
    payload = _envelope(success and not errors, command, safe_json_serialize(data), errors, warnings or [])
    try:
        return orjson.dumps(payload, option=_DUMP_OPTIONS)
    except TypeError as e:
        fallback = _envelope(False, command, None, [f"JSON serialization failed: {e}"], [])
        return orjson.dumps(fallback, option=_DUMP_OPTIONS)


def safe_json_serialize(obj: Any) -> Any:  # noqa: PLR0911
    """
    Convert an object into JSON-serializable data.

    Pydantic models go through ``model_dump_json`` so enums and datetimes are
    rendered the way the models define them.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (list, tuple)):
        return [safe_json_serialize(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): safe_json_serialize(v) for k, v in obj.items()}
    if hasattr(obj, "model_dump_json"):
        return orjson.loads(obj.model_dump_json())
    if is_dataclass(obj) and not isinstance(obj, type):
        return safe_json_serialize(asdict(obj))
    return str(obj)


def format_success_output(command: str, data: Any, warnings: list[str] | None = None) -> bytes:
    return format_json_output(success=True, command=command, data=data, warnings=warnings)


def format_error_output(command: str, errors: list[str]) -> bytes:
    return format_json_output(success=False, command=command, errors=errors)
