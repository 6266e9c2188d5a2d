"""ZIP code to county resolution cascade.

Tiers, each tried only when the previous one misses:

1. runtime cache of earlier live resolutions
2. static table of major-metro ZIP codes
3. live Census geocoder lookup (rate-gated); written through to tier 1
4. most populous county of the ZIP's state (always succeeds)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from dpccompare.services.geo.census import CensusGeocoder
from dpccompare.services.geo.tables import (
    DEFAULT_COUNTY_FIPS,
    DEFAULT_STATE,
    STATE_FIPS_TO_ABBREV,
    ZIP_COUNTY_FALLBACK,
    normalize_zip,
    state_default_county,
    state_for_zip,
)
from dpccompare.services.ttl_cache import TTLCache
from dpccompare.shared.constants import CacheTTL
from dpccompare.shared.errors import DpcCompareError, ErrorCode, ErrorContext, InfrastructureError
from dpccompare.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D", re.ASCII)


class ResolutionTier(str, Enum):
    RUNTIME_CACHE = "runtime_cache"
    STATIC_FALLBACK = "static_fallback"
    LIVE_GEOCODER = "live_geocoder"
    STATE_DEFAULT = "state_default"


@dataclass(frozen=True)
class CountyResolution:
    """Resolved county and the tier that produced it."""

    county_fips: str
    tier: ResolutionTier
    state: str | None = None


class GeoResolver:
    """Resolve ZIP codes to county FIPS identifiers without ever failing.

    Args:
        geocoder: Live geocoder; tier 3 is skipped when None
        runtime_cache: Cache of live resolutions (geography TTL)
        fallback_table: Static ZIP to county table (defaults to major metros)
    """

    def __init__(
        self,
        geocoder: CensusGeocoder | None = None,
        runtime_cache: TTLCache[str, str] | None = None,
        fallback_table: dict[str, str] | None = None,
    ) -> None:
        self.geocoder = geocoder
        self.runtime_cache: TTLCache[str, str] = (
            runtime_cache if runtime_cache is not None else TTLCache(ttl_seconds=CacheTTL.GEOGRAPHY, name="county")
        )
        self.fallback_table = dict(ZIP_COUNTY_FALLBACK if fallback_table is None else fallback_table)
        self._tier_counts: dict[ResolutionTier, int] = {tier: 0 for tier in ResolutionTier}

    async def resolve_county(
        self,
        zip_code: str,
        state_hint: str | None = None,
    ) -> CountyResolution:
        """Resolve a ZIP code to a county.

        Args:
            zip_code: Raw ZIP input; malformed values go straight to the state default
            state_hint: State used by the last tier when the ZIP prefix is unknown

        Returns:
            CountyResolution; ``county_fips`` is always a 5-character identifier
        """
        clean_zip = normalize_zip(zip_code)

        if clean_zip is not None:
            cached = self.runtime_cache.get(clean_zip)
            if cached is not None:
                return self._resolved(cached, ResolutionTier.RUNTIME_CACHE)

            static = self.fallback_table.get(clean_zip)
            if static is not None:
                return self._resolved(static, ResolutionTier.STATIC_FALLBACK)

            live = await self._lookup_live(clean_zip)
            if live is not None:
                self.runtime_cache.set(clean_zip, live)
                return self._resolved(live, ResolutionTier.LIVE_GEOCODER)
        else:
            logger.warning("Malformed ZIP code %r, using state default county", zip_code)

        return self._state_default(zip_code, clean_zip, state_hint)

    async def resolve_county_fips(self, zip_code: str, state_hint: str | None = None) -> str:
        """Resolve a ZIP code and return only the county identifier."""
        resolution = await self.resolve_county(zip_code, state_hint)
        return resolution.county_fips

    async def _lookup_live(self, clean_zip: str) -> str | None:
        if self.geocoder is None:
            return None
        try:
            result = await self.geocoder.lookup_fips(clean_zip)
        except DpcCompareError as e:
            log_operation_error(logger, e, level=logging.WARNING)
            return None
        except Exception as e:  # noqa: BLE001
            error = InfrastructureError(
                code=ErrorCode.GEOCODING_FAILED,
                message=f"Unexpected geocoder failure: {e}",
                context=ErrorContext(
                    operation="resolve_county_live",
                    additional_data={"zip_code": clean_zip},
                ),
                original_error=e,
            )
            log_operation_error(logger, error, level=logging.WARNING)
            return None

        if result is None:
            logger.warning("Live geocoding unavailable for ZIP %s, falling back", clean_zip)
            return None
        return result.county_fips

    def _state_default(
        self,
        raw_zip: str,
        clean_zip: str | None,
        state_hint: str | None,
    ) -> CountyResolution:
        prefix_source = clean_zip or _NON_DIGITS.sub("", raw_zip or "")
        state = state_for_zip(prefix_source)
        county = state_default_county(state)

        if county is None and state_hint:
            state = state_hint.strip().upper()
            county = state_default_county(state)

        if county is None:
            state = DEFAULT_STATE
            county = DEFAULT_COUNTY_FIPS

        logger.info("Using state default county %s for ZIP %r (%s)", county, raw_zip, state)
        self._tier_counts[ResolutionTier.STATE_DEFAULT] += 1
        return CountyResolution(county_fips=county, tier=ResolutionTier.STATE_DEFAULT, state=state)

    def _resolved(self, county_fips: str, tier: ResolutionTier) -> CountyResolution:
        self._tier_counts[tier] += 1
        logger.debug("County %s resolved from %s", county_fips, tier.value)
        return CountyResolution(
            county_fips=county_fips,
            tier=tier,
            state=STATE_FIPS_TO_ABBREV.get(county_fips[:2]),
        )

    def add_mapping(self, zip_code: str, county_fips: str) -> None:
        """Seed the runtime cache with a known mapping."""
        clean_zip = normalize_zip(zip_code)
        if clean_zip is None or len(county_fips) != 5 or not county_fips.isdigit():
            logger.warning("Ignoring invalid mapping %r -> %r", zip_code, county_fips)
            return
        self.runtime_cache.set(clean_zip, county_fips)

    def stats(self) -> dict[str, Any]:
        cache_stats = self.runtime_cache.stats()
        return {
            "runtime_cache_size": cache_stats.size,
            "fallback_table_size": len(self.fallback_table),
            "tiers": {tier.value: count for tier, count in self._tier_counts.items()},
        }

    async def close(self) -> None:
        if self.geocoder is not None:
            await self.geocoder.close()
