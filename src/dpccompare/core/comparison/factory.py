"""Construction of fully wired comparison services from Settings."""

from __future__ import annotations

import logging

from dpccompare.config.models.settings import Settings
from dpccompare.core.comparison.orchestrator import ComparisonOrchestrator
from dpccompare.services.drug_pricing.nadac import DrugPricingClient
from dpccompare.services.geo.census import CensusGeocoder
from dpccompare.services.geo.resolver import GeoResolver
from dpccompare.services.marketplace.client import MarketplaceClient
from dpccompare.services.rate_gate import RateGate
from dpccompare.services.ttl_cache import TTLCache
from dpccompare.shared.constants import MarketplaceConfig

logger = logging.getLogger(__name__)

# The orchestrator owns and closes its collaborators
ComparisonService = ComparisonOrchestrator


def create_geo_resolver(settings: Settings, rate_gate: RateGate | None = None) -> GeoResolver:
    census = settings.api.census
    geocoder = CensusGeocoder(
        rate_gate=rate_gate if rate_gate is not None else RateGate(max_daily_budget=census.max_daily_requests),
        cache=TTLCache(ttl_seconds=settings.cache.geography_ttl, name="census"),
        base_url=census.base_url,
        timeout=census.timeout,
        benchmark=census.benchmark,
        vintage=census.vintage,
    )
    return GeoResolver(
        geocoder=geocoder,
        runtime_cache=TTLCache(ttl_seconds=settings.cache.geography_ttl, name="county"),
    )


def create_marketplace_client(settings: Settings) -> MarketplaceClient | None:
    """Build the marketplace client, or None when no real API key is set."""
    marketplace = settings.api.marketplace
    if not marketplace.is_configured:
        logger.warning(
            "Healthcare.gov API key not configured; comparisons will use estimates. "
            "Request a key at %s",
            MarketplaceConfig.KEY_REQUEST_URL,
        )
        return None

    return MarketplaceClient(
        api_key=marketplace.api_key,
        base_url=marketplace.base_url,
        timeout=marketplace.timeout,
        cache=TTLCache(
            ttl_seconds=min(marketplace.cache_ttl, settings.cache.marketplace_ttl),
            name="marketplace",
            enabled=marketplace.enable_cache,
        ),
    )


def create_comparison_service(settings: Settings) -> ComparisonService:
    """Build an orchestrator with its own rate gate, caches and clients.

    Use it as an async context manager so HTTP sessions are closed::

        async with create_comparison_service(settings) as service:
            result = await service.compare(profile)
    """
    return ComparisonOrchestrator(
        geo_resolver=create_geo_resolver(settings),
        marketplace_client=create_marketplace_client(settings),
        default_income=settings.comparison.default_income,
        plan_limit=settings.comparison.plan_limit,
        use_api_data=settings.comparison.use_api_data,
    )


def create_drug_pricing_client(settings: Settings) -> DrugPricingClient:
    nadac = settings.api.nadac
    return DrugPricingClient(
        cache=TTLCache(ttl_seconds=settings.cache.drug_pricing_ttl, name="nadac"),
        base_url=nadac.base_url,
        dataset_id=nadac.dataset_id,
        timeout=nadac.timeout,
    )
