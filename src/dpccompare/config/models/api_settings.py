"""External API configuration models.

Marketplace, Census geocoder and NADAC settings. The marketplace API key is
masked in ``repr`` so settings objects can be logged safely.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dpccompare.shared.constants import CacheTTL, CensusConfig, MarketplaceConfig, NadacConfig


class MarketplaceSettings(BaseModel):
    """Healthcare.gov Marketplace API configuration.

    Security: api_key is hidden from ``repr`` to keep it out of logs.
    """

    api_key: str = Field(
        default="",
        repr=False,
        description="Healthcare.gov Marketplace API key",
    )
    base_url: str = Field(default=MarketplaceConfig.BASE_URL, description="API root URL")
    timeout: float = Field(default=MarketplaceConfig.TIMEOUT, gt=0, description="Request timeout in seconds")
    enable_cache: bool = Field(default=True, description="Cache successful responses")
    cache_ttl: int = Field(default=CacheTTL.MARKETPLACE, gt=0, description="Response cache TTL in seconds")

    @property
    def is_configured(self) -> bool:
        key = self.api_key.strip()
        return bool(key) and key != MarketplaceConfig.PLACEHOLDER_API_KEY

    def __repr__(self) -> str:
        masked_key = "****" if self.api_key else "[empty]"
        return (
            f"MarketplaceSettings("
            f"api_key={masked_key}, "
            f"base_url={self.base_url!r}, "
            f"timeout={self.timeout}, "
            f"enable_cache={self.enable_cache})"
        )


class CensusSettings(BaseModel):
    """Census Bureau geocoder configuration."""

    base_url: str = Field(default=CensusConfig.BASE_URL)
    timeout: float = Field(default=CensusConfig.TIMEOUT, gt=0)
    max_daily_requests: int = Field(
        default=CensusConfig.MAX_DAILY_REQUESTS,
        gt=0,
        description="Daily request budget (the free tier allows about 2,500)",
    )
    benchmark: str = Field(default=CensusConfig.BENCHMARK)
    vintage: str = Field(default=CensusConfig.VINTAGE)


class NadacSettings(BaseModel):
    base_url: str = Field(default=NadacConfig.BASE_URL)
    dataset_id: str = Field(default=NadacConfig.DATASET_ID)
    timeout: float = Field(default=NadacConfig.TIMEOUT, gt=0)


class APISettings(BaseModel):
    """Container for all external API configurations."""

    marketplace: MarketplaceSettings = Field(default_factory=MarketplaceSettings)
    census: CensusSettings = Field(default_factory=CensusSettings)
    nadac: NadacSettings = Field(default_factory=NadacSettings)


__all__ = [
    "APISettings",
    "CensusSettings",
    "MarketplaceSettings",
    "NadacSettings",
]
