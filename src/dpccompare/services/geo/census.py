"""US Census Bureau geocoder client.

Resolves a ZIP code to its county FIPS identifier through the free
``onelineaddress`` endpoint. The endpoint has an undocumented quota of about
2,500 requests per day, so every network call is gated by a
:class:`~dpccompare.services.rate_gate.RateGate`, and results are kept in a
long-lived TTL cache.

All lookups return ``None`` instead of raising; callers fall back to
coarser data.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from typing import Any

from dpccompare.services.geo.tables import STATE_FIPS_TO_ABBREV, normalize_zip
from dpccompare.services.http_client import HttpFailure, JsonHttpClient
from dpccompare.services.rate_gate import RateGate
from dpccompare.services.ttl_cache import TTLCache
from dpccompare.shared.constants import CacheTTL, CensusConfig
from dpccompare.shared.errors import ErrorCode, ErrorContext, InfrastructureError
from dpccompare.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FipsLookupResult:
    """County identified for one ZIP code."""

    county_fips: str
    state_fips: str
    county_name: str
    state_name: str
    state_abbrev: str
    cached: bool = False


def parse_geocoder_response(payload: Any) -> FipsLookupResult | None:
    """Extract the county from a geocoder response body.

    Reads ``result.addressMatches[0].geographies.Counties[0]``.

    Returns:
        The lookup result, or None when there is no match or no county data
    """
    if not isinstance(payload, dict):
        return None
    result = payload.get("result") or {}
    matches = result.get("addressMatches") if isinstance(result, dict) else None
    if not matches:
        return None

    first = matches[0] or {}
    counties = (first.get("geographies") or {}).get("Counties") or []
    if not counties:
        return None

    county = counties[0]
    state_fips = str(county.get("STATE") or "")
    county_code = str(county.get("COUNTY") or "")
    if len(state_fips) != 2 or len(county_code) != 3:
        return None

    address = first.get("addressComponents") or {}
    return FipsLookupResult(
        county_fips=f"{state_fips}{county_code}",
        state_fips=state_fips,
        county_name=county.get("BASENAME") or county.get("NAME") or "",
        state_name=address.get("state") or "",
        state_abbrev=STATE_FIPS_TO_ABBREV.get(state_fips, ""),
        cached=False,
    )


class CensusGeocoder:
    """Rate-gated, cached ZIP to county FIPS lookups.

    Args:
        rate_gate: Shared daily request budget
        cache: Cache for lookup results (geography TTL)
        http: HTTP client; built from ``base_url``/``timeout`` when omitted
        base_url: Geocoder root URL
        timeout: Request timeout in seconds
        benchmark: Census benchmark name
        vintage: Census vintage name
    """

    def __init__(
        self,
        rate_gate: RateGate | None = None,
        cache: TTLCache[str, FipsLookupResult] | None = None,
        http: JsonHttpClient | None = None,
        base_url: str = CensusConfig.BASE_URL,
        timeout: float = CensusConfig.TIMEOUT,
        benchmark: str = CensusConfig.BENCHMARK,
        vintage: str = CensusConfig.VINTAGE,
    ) -> None:
        self.rate_gate = rate_gate if rate_gate is not None else RateGate()
        self.cache: TTLCache[str, FipsLookupResult] = (
            cache if cache is not None else TTLCache(ttl_seconds=CacheTTL.GEOGRAPHY, name="census")
        )
        self.http = http if http is not None else JsonHttpClient(base_url=base_url, timeout=timeout)
        self.benchmark = benchmark
        self.vintage = vintage

    async def lookup_fips(self, zip_code: str) -> FipsLookupResult | None:
        """Look up the county FIPS identifier for a ZIP code.

        Args:
            zip_code: ``NNNNN`` or ``NNNNN-NNNN``

        Returns:
            FipsLookupResult (``cached=True`` on a cache hit), or None when the
            ZIP is malformed, the daily budget is spent, or the geocoder fails
        """
        clean_zip = normalize_zip(zip_code)
        if clean_zip is None:
            logger.warning("Invalid ZIP code format: %r", zip_code)
            return None

        cached = self.cache.get(clean_zip)
        if cached is not None:
            return replace(cached, cached=True)

        if not self.rate_gate.try_consume():
            logger.warning("Geocoder daily budget reached, skipping lookup for %s", clean_zip)
            return None

        start = time.time()
        outcome = await self.http.get(
            CensusConfig.ONELINE_ADDRESS_PATH,
            params={
                "address": clean_zip,
                "benchmark": self.benchmark,
                "vintage": self.vintage,
                "layers": CensusConfig.LAYERS,
                "format": "json",
            },
        )

        if isinstance(outcome, HttpFailure):
            error = InfrastructureError(
                code=ErrorCode.GEOCODING_FAILED,
                message=f"Geocoder request failed: {outcome.error.message}",
                context=ErrorContext(
                    operation="census_lookup_fips",
                    additional_data={"zip_code": clean_zip, "status": outcome.error.status},
                ),
            )
            log_operation_error(logger, error, level=logging.WARNING)
            return None

        result = parse_geocoder_response(outcome.data)
        if result is None:
            logger.warning("No county match for ZIP %s", clean_zip)
            return None

        self.cache.set(clean_zip, result)
        log_operation_success(
            logger,
            operation="census_lookup_fips",
            duration_ms=(time.time() - start) * 1000,
            result_info={"county_fips": result.county_fips, "county_name": result.county_name},
        )
        logger.info(
            "Resolved ZIP %s to %s, %s (FIPS %s)",
            clean_zip,
            result.county_name,
            result.state_abbrev,
            result.county_fips,
        )
        return result

    async def batch_lookup_fips(
        self,
        zip_codes: list[str],
        delay_seconds: float = CensusConfig.BATCH_DELAY,
    ) -> dict[str, FipsLookupResult]:
        """Look up several ZIP codes sequentially.

        Duplicates are looked up once. ``delay_seconds`` is slept after every
        lookup to stay gentle on the geocoder.

        Returns:
            Mapping of input ZIP to result; failed lookups are omitted
        """
        results: dict[str, FipsLookupResult] = {}
        for zip_code in dict.fromkeys(zip_codes):
            result = await self.lookup_fips(zip_code)
            if result is not None:
                results[zip_code] = result
            if delay_seconds > 0:
                await asyncio.sleep(delay_seconds)
        return results

    async def prewarm_cache(self, zip_codes: list[str]) -> int:
        """Populate the cache ahead of time.

        Returns:
            Cache size after the pre-warm
        """
        logger.info("Pre-warming geocoder cache with %d ZIP codes", len(zip_codes))
        await self.batch_lookup_fips(zip_codes, delay_seconds=CensusConfig.PREWARM_DELAY)
        size = len(self.cache)
        logger.info("Geocoder cache pre-warm complete, size: %d", size)
        return size

    def is_cached(self, zip_code: str) -> bool:
        clean_zip = normalize_zip(zip_code)
        return clean_zip is not None and clean_zip in self.cache

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Geocoder cache cleared")

    def stats(self) -> dict[str, Any]:
        cache_stats = self.cache.stats()
        return {
            "size": cache_stats.size,
            "hits": cache_stats.hits,
            "misses": cache_stats.misses,
            "daily_requests": self.rate_gate.budget.count_today,
            "remaining_requests": self.rate_gate.remaining(),
        }

    async def close(self) -> None:
        await self.http.close()
