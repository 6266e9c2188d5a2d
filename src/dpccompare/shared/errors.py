"""Exception hierarchy for dpccompare.

Every failure raised by the package is a :class:`DpcCompareError` carrying
an :class:`ErrorCode` and an :class:`ErrorContext`. The comparison
orchestrator turns service failures into estimate fallbacks; the CLI turns
whatever reaches it into an exit code.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from dpccompare.services.http_client import ApiErrorInfo

ContextValue = Union[str, int, float, bool]

# additional_data keys replaced by "****" in safe_dict()
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("api_key",)


class ErrorCode(str, Enum):
    """Stable identifiers for every failure the package reports."""

    # External services
    MARKETPLACE_API_ERROR = "MARKETPLACE_API_ERROR"
    GEOCODING_FAILED = "GEOCODING_FAILED"
    DRUG_PRICING_ERROR = "DRUG_PRICING_ERROR"

    # Bad arguments
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Settings
    MISSING_CONFIG = "MISSING_CONFIG"
    INVALID_CONFIG = "INVALID_CONFIG"

    COMPARISON_FAILED = "COMPARISON_FAILED"
    CLI_COMMAND_FAILED = "CLI_COMMAND_FAILED"


def _to_context_value(key: str, val: Any) -> ContextValue:
    if isinstance(val, (str, int, float, bool)):
        return val
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, Decimal):
        return float(val)
    if isinstance(val, Path):
        return str(val)
    raise TypeError(f"additional_data[{key!r}] has unsupported type {type(val).__name__}")


@dataclass(frozen=True)
class ErrorContext:
    """Where an error happened and the values needed to diagnose it.

    ``additional_data`` is normalized on construction: None values are
    dropped; Enum, Decimal and Path values become plain scalars.
    """

    operation: str | None = None
    additional_data: dict[str, ContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is None:
            return
        if not isinstance(self.additional_data, dict):
            raise TypeError(f"additional_data must be a dict, not {type(self.additional_data).__name__}")
        normalized = {
            key: _to_context_value(key, val) for key, val in self.additional_data.items() if val is not None
        }
        object.__setattr__(self, "additional_data", normalized)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Return the context for logs with secrets masked.

        >>> ErrorContext(operation="x", additional_data={"api_key": "k"}).safe_dict()
        {'operation': 'x', 'additional_data': {'api_key': '****'}}
        """
        masked = SAFE_DICT_MASK_KEYS if mask_keys is None else mask_keys
        extra = {key: "****" if key in masked else val for key, val in (self.additional_data or {}).items()}

        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        data["additional_data"] = extra
        return data


class DpcCompareError(Exception):
    """Root of every error the package raises.

    Args:
        code: What went wrong
        message: Text shown to users
        context: Operation and diagnostic values
        original_error: Lower-level exception being wrapped
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": None if self.original_error is None else str(self.original_error),
        }


class InfrastructureError(DpcCompareError):
    """Infrastructure-related errors.

    These errors occur when interacting with external systems like
    the geocoder, the marketplace API or the drug pricing datastore.
    """


class ApplicationError(DpcCompareError):
    """Application-level errors (configuration, command handling)."""


class SecurityError(DpcCompareError):
    """Security-related errors such as missing or placeholder API keys."""


class MarketplaceApiError(InfrastructureError):
    """Marketplace API failure carrying the normalized error shape.

    Every marketplace failure (non-2xx, network, timeout, undecodable body)
    is raised as this type so callers only ever handle one error.
    """

    def __init__(
        self,
        error_info: ApiErrorInfo,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.error_info = error_info
        super().__init__(
            code=ErrorCode.MARKETPLACE_API_ERROR,
            message=error_info.message,
            context=context,
            original_error=original_error,
        )

    @property
    def status(self) -> int:
        return self.error_info.status

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["error_info"] = self.error_info.to_dict()
        return data


class DrugPricingError(InfrastructureError):
    """Drug pricing datastore failure."""

