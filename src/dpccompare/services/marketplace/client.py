"""Healthcare.gov Marketplace API client.

Every method serializes its request into a cache key, checks the TTL cache,
and on a miss calls the API with the key injected as the ``apikey`` query
parameter. Any failure, whether an API error response, a transport problem
or a response that does not match the schema, is raised as
:class:`~dpccompare.shared.errors.MarketplaceApiError`.
"""

from __future__ import annotations

import logging
import time
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from dpccompare.services.http_client import ApiErrorInfo, HttpFailure, JsonHttpClient
from dpccompare.services.marketplace.models import (
    EligibilityRequest,
    EligibilityResponse,
    PlanDetailsRequest,
    PlanDetailsResponse,
    PlanSearchFilter,
    PlanSearchRequest,
    PlanSearchResponse,
    SLCSPRequest,
    SLCSPResponse,
)
from dpccompare.services.ttl_cache import CacheStats, TTLCache
from dpccompare.shared.constants import (
    CacheKeyPrefix,
    CacheTTL,
    ComparisonDefaults,
    MarketplaceConfig,
    NetworkConfig,
)
from dpccompare.shared.errors import ErrorCode, ErrorContext, MarketplaceApiError, SecurityError
from dpccompare.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def is_placeholder_api_key(api_key: str | None) -> bool:
    """True for an empty key or the documented placeholder value."""
    return not api_key or not api_key.strip() or api_key.strip() == MarketplaceConfig.PLACEHOLDER_API_KEY


class MarketplaceClient:
    """Cached client for the CMS Marketplace API.

    Args:
        api_key: Marketplace API key
        base_url: API root (default: production v1 endpoint)
        timeout: Request timeout in seconds
        enable_cache: Cache successful responses
        cache_ttl: Cache TTL in seconds
        cache: Pre-built response cache (overrides enable_cache/cache_ttl)
        http: Pre-built HTTP client (overrides base_url/timeout)

    Raises:
        SecurityError: If the API key is empty or the placeholder value
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = MarketplaceConfig.BASE_URL,
        timeout: float = MarketplaceConfig.TIMEOUT,
        *,
        enable_cache: bool = True,
        cache_ttl: float = CacheTTL.MARKETPLACE,
        cache: TTLCache[str, Any] | None = None,
        http: JsonHttpClient | None = None,
    ) -> None:
        if is_placeholder_api_key(api_key):
            error = SecurityError(
                code=ErrorCode.MISSING_CONFIG,
                message=(
                    "Healthcare.gov API key is required. "
                    f"Get one at {MarketplaceConfig.KEY_REQUEST_URL}"
                ),
                context=ErrorContext(operation="marketplace_client_init"),
            )
            log_operation_error(logger, error)
            raise error

        if cache is None:
            cache = TTLCache(ttl_seconds=cache_ttl, name="marketplace", enabled=enable_cache)
        self.cache: TTLCache[str, Any] = cache
        if http is None:
            http = JsonHttpClient(
                base_url=base_url,
                timeout=timeout,
                default_params={MarketplaceConfig.API_KEY_PARAM: api_key},
                headers={"Content-Type": NetworkConfig.CONTENT_TYPE_JSON},
            )
        self.http = http

    async def __aenter__(self) -> MarketplaceClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _fetch(
        self,
        operation: str,
        cache_key: str,
        method: str,
        path: str,
        response_model: type[ResponseT],
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> ResponseT:
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Marketplace cache hit for %s", operation)
            return response_model.model_validate(cached)

        start = time.time()
        outcome = await self.http.request(method, path, params=params, json=json_body)

        if isinstance(outcome, HttpFailure):
            raise self._api_error(operation, outcome.error)

        try:
            parsed = response_model.model_validate(outcome.data)
        except ValidationError as e:
            raise self._api_error(
                operation,
                ApiErrorInfo(
                    status=NetworkConfig.UNKNOWN_ERROR_STATUS,
                    code=NetworkConfig.UNKNOWN_ERROR_CODE,
                    message=f"Unexpected {response_model.__name__} shape: {e.error_count()} error(s)",
                ),
                original_error=e,
            ) from e

        self.cache.set(cache_key, outcome.data)
        log_operation_success(
            logger,
            operation=operation,
            duration_ms=(time.time() - start) * 1000,
        )
        return parsed

    def _api_error(
        self,
        operation: str,
        error_info: ApiErrorInfo,
        original_error: Exception | None = None,
    ) -> MarketplaceApiError:
        error = MarketplaceApiError(
            error_info,
            context=ErrorContext(
                operation=operation,
                additional_data={"status": error_info.status, "api_code": error_info.code},
            ),
            original_error=original_error,
        )
        log_operation_error(logger, error, level=logging.WARNING)
        return error

    async def search_plans(self, request: PlanSearchRequest) -> PlanSearchResponse:
        """Search plans for a household and place.

        Raises:
            MarketplaceApiError: On any API or transport failure
        """
        return await self._fetch(
            "marketplace_search_plans",
            request.cache_key(CacheKeyPrefix.PLANS),
            "POST",
            MarketplaceConfig.PLANS_SEARCH_PATH,
            PlanSearchResponse,
            json_body=request.to_payload(),
        )

    async def search_catastrophic_plans(self, request: PlanSearchRequest) -> PlanSearchResponse:
        """Search catastrophic plans, bypassing the age/hardship restriction."""
        catastrophic = request.model_copy(
            update={
                "filter": PlanSearchFilter(metal=[ComparisonDefaults.CATASTROPHIC_METAL]),
                "catastrophic_override": True,
            }
        )
        return await self.search_plans(catastrophic)

    async def get_plan_details(self, request: PlanDetailsRequest) -> PlanDetailsResponse:
        """Fetch one plan.

        With a household the premium is computed for it (POST); otherwise
        the plan is fetched as-is (GET).
        """
        path = MarketplaceConfig.PLAN_DETAILS_PATH.format(plan_id=request.plan_id)
        cache_key = request.cache_key(CacheKeyPrefix.PLAN)

        if request.household is not None:
            body: dict[str, Any] = {"household": request.household.to_payload()}
            if request.year is not None:
                body["year"] = request.year
            return await self._fetch(
                "marketplace_plan_details",
                cache_key,
                "POST",
                path,
                PlanDetailsResponse,
                json_body=body,
            )

        return await self._fetch(
            "marketplace_plan_details",
            cache_key,
            "GET",
            path,
            PlanDetailsResponse,
            params={"year": request.year} if request.year is not None else None,
        )

    async def get_eligibility_estimates(self, request: EligibilityRequest) -> EligibilityResponse:
        return await self._fetch(
            "marketplace_eligibility",
            request.cache_key(CacheKeyPrefix.ELIGIBILITY),
            "POST",
            MarketplaceConfig.ELIGIBILITY_PATH,
            EligibilityResponse,
            json_body=request.to_payload(),
        )

    async def get_slcsp(self, request: SLCSPRequest) -> SLCSPResponse:
        """Second lowest cost silver plan premium."""
        return await self._fetch(
            "marketplace_slcsp",
            request.cache_key(CacheKeyPrefix.SLCSP),
            "POST",
            MarketplaceConfig.SLCSP_PATH,
            SLCSPResponse,
            json_body=request.to_payload(),
        )

    async def get_lowest_cost_bronze_plan(self, request: SLCSPRequest) -> SLCSPResponse:
        return await self._fetch(
            "marketplace_lcbp",
            request.cache_key(CacheKeyPrefix.LCBP),
            "POST",
            MarketplaceConfig.LCBP_PATH,
            SLCSPResponse,
            json_body=request.to_payload(),
        )

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    async def close(self) -> None:
        await self.http.close()
