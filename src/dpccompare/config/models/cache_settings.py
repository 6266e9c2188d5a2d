"""Cache configuration model.

Each data source keeps its own in-memory cache with its own TTL.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dpccompare.shared.constants import CacheTTL


class CacheSettings(BaseModel):
    geography_ttl: int = Field(
        default=CacheTTL.GEOGRAPHY,
        gt=0,
        description="ZIP to county cache TTL in seconds",
    )
    marketplace_ttl: int = Field(
        default=CacheTTL.MARKETPLACE,
        gt=0,
        description="Marketplace response cache TTL in seconds",
    )
    drug_pricing_ttl: int = Field(
        default=CacheTTL.DRUG_PRICING,
        gt=0,
        description="NADAC result cache TTL in seconds",
    )


__all__ = ["CacheSettings"]
