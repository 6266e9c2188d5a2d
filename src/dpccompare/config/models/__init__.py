"""Configuration models."""

from .api_settings import APISettings, CensusSettings, MarketplaceSettings, NadacSettings
from .app_settings import AppSettings, LoggingSettings
from .cache_settings import CacheSettings
from .comparison_settings import ComparisonSettings
from .settings import Settings

__all__ = [
    "APISettings",
    "AppSettings",
    "CacheSettings",
    "CensusSettings",
    "ComparisonSettings",
    "LoggingSettings",
    "MarketplaceSettings",
    "NadacSettings",
    "Settings",
]
