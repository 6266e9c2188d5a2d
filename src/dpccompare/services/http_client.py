"""Async JSON HTTP client returning tagged results.

Every external call in dpccompare goes through :class:`JsonHttpClient`.
Instead of raising library-specific exceptions it returns either
:class:`HttpSuccess` or :class:`HttpFailure`, the latter always carrying the
same :class:`ApiErrorInfo` shape whether the failure was a non-2xx response,
a timeout, a connection error or an undecodable body.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Union

import aiohttp

from dpccompare.shared.constants import HTTPStatusCodes, NetworkConfig
from dpccompare.shared.logging import log_api_call

logger = logging.getLogger(__name__)

QueryValue = Union[str, int, float]


@dataclass(frozen=True)
class ApiErrorInfo:
    """Normalized error shape: ``{status, code, message, details?}``."""

    status: int
    code: int
    message: str
    details: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": self.status,
            "code": self.code,
            "message": self.message,
        }
        if self.details is not None:
            data["details"] = self.details
        return data


@dataclass(frozen=True)
class HttpSuccess:
    data: Any
    status: int = HTTPStatusCodes.OK

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class HttpFailure:
    error: ApiErrorInfo

    @property
    def ok(self) -> bool:
        return False


HttpResult = Union[HttpSuccess, HttpFailure]


def transport_failure(message: str) -> HttpFailure:
    """Build the failure used when no usable HTTP response was received."""
    return HttpFailure(
        ApiErrorInfo(
            status=NetworkConfig.UNKNOWN_ERROR_STATUS,
            code=NetworkConfig.UNKNOWN_ERROR_CODE,
            message=message,
        )
    )


def _error_from_response(status: int, reason: str, body: Any) -> ApiErrorInfo:
    code = NetworkConfig.UNKNOWN_ERROR_CODE
    message = reason or f"HTTP {status}"
    if isinstance(body, dict):
        body_code = body.get("code")
        if isinstance(body_code, int) and not isinstance(body_code, bool):
            code = body_code
        elif isinstance(body_code, str) and body_code.isdigit():
            code = int(body_code)
        body_message = body.get("message")
        if isinstance(body_message, str) and body_message:
            message = body_message
    return ApiErrorInfo(status=status, code=code, message=message, details=body)


@dataclass
class _RequestStats:
    requests: int = 0
    failures: int = 0
    last_request_time: float = field(default=0.0)


class JsonHttpClient:
    """Thin aiohttp wrapper for JSON APIs.

    The session is created on first use. A session passed in by the caller
    is never closed by this client.

    Args:
        base_url: API root; request paths are appended to it
        timeout: Total request timeout in seconds
        default_params: Query parameters merged into every request
        headers: Extra headers sent with every request
        session: Optional pre-built aiohttp session
    """

    def __init__(
        self,
        base_url: str,
        timeout: float,
        default_params: dict[str, QueryValue] | None = None,
        headers: dict[str, str] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._default_params = dict(default_params or {})
        self._headers = {
            "User-Agent": NetworkConfig.USER_AGENT,
            "Accept": NetworkConfig.ACCEPT_JSON,
            **(headers or {}),
        }
        self._session = session
        self._owns_session = session is None
        self._stats = _RequestStats()

    async def __aenter__(self) -> JsonHttpClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _build_url(self, path: str) -> str:
        if not path:
            return self.base_url
        return f"{self.base_url}/{path.lstrip('/')}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self._headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True
            logger.debug("HTTP session opened for %s", self.base_url)
        return self._session

    async def _send(
        self,
        method: str,
        url: str,
        params: dict[str, QueryValue],
        json_body: Any = None,
    ) -> tuple[int, str, Any]:
        """Issue one request and decode its body.

        Returns:
            ``(status, reason, body)``; body is None for an empty or
            non-JSON error response

        Raises:
            aiohttp.ClientError: On connection failures
            asyncio.TimeoutError: When the request exceeds the timeout
            ValueError: When a 2xx response body is not valid JSON
        """
        session = self._get_session()
        async with session.request(
            method,
            url,
            params=params,
            json=json_body,
        ) as response:
            text = await response.text()
            body: Any = None
            if text:
                try:
                    body = json.loads(text)
                except ValueError:
                    if HTTPStatusCodes.is_success(response.status):
                        raise
            return response.status, response.reason or "", body

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, QueryValue] | None = None,
        json: Any = None,  # noqa: A002
    ) -> HttpResult:
        """Send a request and return a tagged result.

        Args:
            method: HTTP method
            path: Path relative to ``base_url``
            params: Query parameters (merged over ``default_params``)
            json: JSON request body

        Returns:
            HttpSuccess with the decoded body, or HttpFailure with ApiErrorInfo
        """
        url = self._build_url(path)
        query = {**self._default_params, **(params or {})}
        start = time.time()
        self._stats.requests += 1
        self._stats.last_request_time = start

        try:
            status, reason, body = await self._send(method, url, query, json)
        except asyncio.TimeoutError:
            self._stats.failures += 1
            log_api_call(logger, path, method, duration_ms=(time.time() - start) * 1000)
            return transport_failure(f"Request timed out after {self.timeout}s")
        except aiohttp.ClientError as e:
            self._stats.failures += 1
            log_api_call(logger, path, method, duration_ms=(time.time() - start) * 1000)
            return transport_failure(f"Network error: {e}")
        except ValueError as e:
            self._stats.failures += 1
            log_api_call(logger, path, method, duration_ms=(time.time() - start) * 1000)
            return transport_failure(f"Invalid JSON response: {e}")

        duration_ms = (time.time() - start) * 1000
        log_api_call(logger, path, method, status_code=status, duration_ms=duration_ms)

        if HTTPStatusCodes.is_success(status):
            return HttpSuccess(data=body, status=status)

        self._stats.failures += 1
        return HttpFailure(_error_from_response(status, reason, body))

    async def get(self, path: str, params: dict[str, QueryValue] | None = None) -> HttpResult:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        json: Any = None,  # noqa: A002
        params: dict[str, QueryValue] | None = None,
    ) -> HttpResult:
        return await self.request("POST", path, params=params, json=json)

    def stats(self) -> dict[str, Any]:
        return {
            "requests": self._stats.requests,
            "failures": self._stats.failures,
            "last_request_time": self._stats.last_request_time,
        }

    async def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.debug("HTTP session closed for %s", self.base_url)
        if self._owns_session:
            self._session = None
