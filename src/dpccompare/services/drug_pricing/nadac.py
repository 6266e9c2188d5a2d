"""NADAC drug pricing client.

Queries the CMS National Average Drug Acquisition Cost (NADAC) datastore and
turns wholesale per-unit costs into estimated retail prices. NADAC is
updated weekly, so results are cached for seven days.
"""

from __future__ import annotations

import asyncio
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Literal

from dpccompare.services.http_client import HttpFailure, JsonHttpClient
from dpccompare.services.ttl_cache import TTLCache
from dpccompare.shared.constants import (
    CacheKeyPrefix,
    CacheTTL,
    DrugPricingDefaults,
    NadacConfig,
)
from dpccompare.shared.errors import DrugPricingError, ErrorCode, ErrorContext
from dpccompare.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

PharmacyType = Literal["retail", "discount"]

_NON_DIGITS = re.compile(r"\D")


def _round_cents(amount: float) -> float:
    return math.floor(amount * 100 + 0.5) / 100


@dataclass(frozen=True)
class DrugPricing:
    """Wholesale cost and retail estimates for one NDC."""

    ndc: str
    drug_name: str
    nadac_per_unit: float
    pricing_unit: str
    estimated_retail_per_unit: float
    estimated_30_day_wholesale: float
    estimated_30_day_retail: float
    estimated_90_day_wholesale: float
    estimated_90_day_retail: float
    is_generic: bool
    is_otc: bool
    effective_date: str
    source: str = "NADAC"


@dataclass(frozen=True)
class NadacSearchResult:
    drugs: list[DrugPricing]
    total_count: int
    search_term: str
    cached: bool


def calculate_retail_price(
    nadac_per_unit: float,
    quantity: int,
    is_generic: bool,
    pharmacy_type: PharmacyType = "retail",
) -> float:
    """Estimate what a pharmacy charges for ``quantity`` units.

    Args:
        nadac_per_unit: Wholesale cost per unit
        quantity: Units dispensed
        is_generic: Generic drugs carry a higher retail markup than brands
        pharmacy_type: "discount" applies the lower discount-pharmacy markup

    Returns:
        Price including the dispensing fee, rounded to cents
    """
    if pharmacy_type == "discount":
        markup = DrugPricingDefaults.DISCOUNT_PHARMACY_MARKUP
    elif is_generic:
        markup = DrugPricingDefaults.GENERIC_MARKUP
    else:
        markup = DrugPricingDefaults.BRAND_MARKUP

    subtotal = nadac_per_unit * quantity * (1 + markup)
    return _round_cents(subtotal + DrugPricingDefaults.DISPENSING_FEE)


def parse_nadac_record(record: dict[str, Any]) -> DrugPricing:
    """Convert one datastore row into a DrugPricing."""
    try:
        nadac_per_unit = float(record.get("nadac_per_unit") or 0)
    except (TypeError, ValueError):
        nadac_per_unit = 0.0

    is_generic = record.get("classification_for_rate_setting") == DrugPricingDefaults.GENERIC_CLASSIFICATION
    markup = DrugPricingDefaults.GENERIC_MARKUP if is_generic else DrugPricingDefaults.BRAND_MARKUP
    units = DrugPricingDefaults.UNITS_PER_MONTH

    retail_90 = calculate_retail_price(nadac_per_unit, units * 3, is_generic) * (
        1 - DrugPricingDefaults.NINETY_DAY_DISCOUNT
    )

    return DrugPricing(
        ndc=str(record.get("ndc") or ""),
        drug_name=str(record.get("ndc_description") or ""),
        nadac_per_unit=nadac_per_unit,
        pricing_unit=str(record.get("pricing_unit") or ""),
        estimated_retail_per_unit=nadac_per_unit * (1 + markup),
        estimated_30_day_wholesale=_round_cents(nadac_per_unit * units),
        estimated_30_day_retail=calculate_retail_price(nadac_per_unit, units, is_generic),
        estimated_90_day_wholesale=_round_cents(nadac_per_unit * units * 3),
        estimated_90_day_retail=_round_cents(retail_90),
        is_generic=is_generic,
        is_otc=record.get("otc") == DrugPricingDefaults.OTC_FLAG,
        effective_date=str(record.get("effective_date") or ""),
    )


def _condition_params(prop: str, value: str, operator: str, limit: int) -> dict[str, str | int]:
    return {
        "limit": limit,
        "conditions[0][property]": prop,
        "conditions[0][value]": value,
        "conditions[0][operator]": operator,
    }


class DrugPricingClient:
    """Client for the NADAC datastore query endpoint.

    Args:
        cache: Result cache (drug pricing TTL)
        http: HTTP client; built from ``base_url``/``timeout`` when omitted
        dataset_id: NADAC dataset identifier
    """

    def __init__(
        self,
        cache: TTLCache[str, list[DrugPricing]] | None = None,
        http: JsonHttpClient | None = None,
        base_url: str = NadacConfig.BASE_URL,
        dataset_id: str = NadacConfig.DATASET_ID,
        timeout: float = NadacConfig.TIMEOUT,
    ) -> None:
        self.cache: TTLCache[str, list[DrugPricing]] = (
            cache if cache is not None else TTLCache(ttl_seconds=CacheTTL.DRUG_PRICING, name="nadac")
        )
        self.http = http if http is not None else JsonHttpClient(base_url=base_url, timeout=timeout)
        self.query_path = f"/{dataset_id}/0"

    async def search_drugs(
        self,
        search_term: str,
        limit: int = NadacConfig.DEFAULT_SEARCH_LIMIT,
    ) -> NadacSearchResult:
        """Search drugs by description.

        Args:
            search_term: Name fragment, e.g. "metformin"
            limit: Maximum number of rows

        Returns:
            NadacSearchResult (``cached=True`` when served from cache)

        Raises:
            DrugPricingError: If the datastore query fails
        """
        normalized = search_term.strip().upper()
        cache_key = f"{CacheKeyPrefix.DRUG_SEARCH}:{normalized}:{limit}"

        cached = self.cache.get(cache_key)
        if cached is not None:
            return NadacSearchResult(
                drugs=cached,
                total_count=len(cached),
                search_term=search_term,
                cached=True,
            )

        outcome = await self.http.get(
            self.query_path,
            params=_condition_params("ndc_description", f"%{normalized}%", "LIKE", limit),
        )

        if isinstance(outcome, HttpFailure):
            error = DrugPricingError(
                code=ErrorCode.DRUG_PRICING_ERROR,
                message=f"Failed to search NADAC database: {outcome.error.message}",
                context=ErrorContext(
                    operation="nadac_search_drugs",
                    additional_data={"search_term": normalized, "status": outcome.error.status},
                ),
            )
            log_operation_error(logger, error)
            raise error

        data = outcome.data if isinstance(outcome.data, dict) else {}
        rows = data.get("results") or []
        drugs = [parse_nadac_record(row) for row in rows if isinstance(row, dict)]
        self.cache.set(cache_key, drugs)

        return NadacSearchResult(
            drugs=drugs,
            total_count=int(data.get("count") or len(drugs)),
            search_term=search_term,
            cached=False,
        )

    async def lookup_by_ndc(self, ndc: str) -> DrugPricing | None:
        """Look up a single National Drug Code; returns None when absent or on failure."""
        clean_ndc = _NON_DIGITS.sub("", ndc)
        cache_key = f"{CacheKeyPrefix.DRUG_NDC}:{clean_ndc}"

        cached = self.cache.get(cache_key)
        if cached:
            return cached[0]

        outcome = await self.http.get(
            self.query_path,
            params=_condition_params("ndc", clean_ndc, "=", 1),
        )
        if isinstance(outcome, HttpFailure):
            logger.warning("NADAC lookup failed for NDC %s: %s", clean_ndc, outcome.error.message)
            return None

        rows = outcome.data.get("results") if isinstance(outcome.data, dict) else None
        if not rows:
            return None

        drug = parse_nadac_record(rows[0])
        self.cache.set(cache_key, [drug])
        return drug

    async def get_pricing_for_multiple_drugs(
        self,
        drug_names: list[str],
    ) -> dict[str, DrugPricing | None]:
        """Price several drugs, a few requests at a time.

        A drug whose search fails maps to None.
        """
        results: dict[str, DrugPricing | None] = {}
        size = NadacConfig.BATCH_CHUNK_SIZE

        for start in range(0, len(drug_names), size):
            chunk = drug_names[start : start + size]
            outcomes = await asyncio.gather(
                *(self.search_drugs(name, 1) for name in chunk),
                return_exceptions=True,
            )
            for name, outcome in zip(chunk, outcomes):
                if isinstance(outcome, DrugPricingError):
                    results[name] = None
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    results[name] = outcome.drugs[0] if outcome.drugs else None
            await asyncio.sleep(NadacConfig.BATCH_DELAY)

        return results

    def calculate_retail_price(
        self,
        nadac_per_unit: float,
        quantity: int,
        is_generic: bool,
        pharmacy_type: PharmacyType = "retail",
    ) -> float:
        return calculate_retail_price(nadac_per_unit, quantity, is_generic, pharmacy_type)

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("NADAC cache cleared")

    def cache_stats(self) -> dict[str, Any]:
        return {"size": len(self.cache), "keys": self.cache.keys()[:20]}

    async def close(self) -> None:
        await self.http.close()
