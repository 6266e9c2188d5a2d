"""
dpccompare Constants Module

Centralized constants so magic values live in one place.
"""

from .cache import CacheKeyPrefix, CacheTTL
from .comparison import (
    AGE_PREMIUM_FACTORS,
    SENIOR_PREMIUM_FACTOR,
    STATE_PREMIUM_MULTIPLIERS,
    ComparisonDefaults,
    CostSharingDefaults,
    DpcPlanDefaults,
    OutOfPocketDefaults,
    TraditionalPlanDefaults,
)
from .http_codes import HTTPStatusCodes
from .network import CensusConfig, MarketplaceConfig, NadacConfig, NetworkConfig
from .pricing import DrugPricingDefaults
from .system import BASE_DAY, BASE_HOUR, BASE_MINUTE, BASE_SECOND

__all__ = [
    "AGE_PREMIUM_FACTORS",
    "BASE_DAY",
    "BASE_HOUR",
    "BASE_MINUTE",
    "BASE_SECOND",
    "SENIOR_PREMIUM_FACTOR",
    "STATE_PREMIUM_MULTIPLIERS",
    "CacheKeyPrefix",
    "CacheTTL",
    "CensusConfig",
    "ComparisonDefaults",
    "CostSharingDefaults",
    "DpcPlanDefaults",
    "DrugPricingDefaults",
    "HTTPStatusCodes",
    "MarketplaceConfig",
    "NadacConfig",
    "NetworkConfig",
    "OutOfPocketDefaults",
    "TraditionalPlanDefaults",
]
