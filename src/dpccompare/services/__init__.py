"""External data services: HTTP transport, caching, geography, marketplace and drug pricing."""

from .http_client import ApiErrorInfo, HttpFailure, HttpResult, HttpSuccess, JsonHttpClient
from .rate_gate import RateGate
from .ttl_cache import CacheStats, TTLCache

__all__ = [
    "ApiErrorInfo",
    "CacheStats",
    "HttpFailure",
    "HttpResult",
    "HttpSuccess",
    "JsonHttpClient",
    "RateGate",
    "TTLCache",
]
