"""dpccompare Configuration Module

Configuration models and the settings loader.
"""

from __future__ import annotations

from .loader import get_config, load_settings, reload_config
from .models import (
    APISettings,
    AppSettings,
    CacheSettings,
    CensusSettings,
    ComparisonSettings,
    LoggingSettings,
    MarketplaceSettings,
    NadacSettings,
    Settings,
)

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
    "get_config",
    "load_settings",
    "reload_config",
]
