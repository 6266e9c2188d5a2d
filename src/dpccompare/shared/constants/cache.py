"""
Cache Configuration Constants

Each data source has its own TTL; caches are never shared between sources.
"""

from .system import BASE_DAY, BASE_HOUR


class CacheTTL:
    """TTL per data source, in seconds."""

    GEOGRAPHY = 30 * BASE_DAY  # county FIPS codes rarely change
    MARKETPLACE = 24 * BASE_HOUR
    DRUG_PRICING = 7 * BASE_DAY  # NADAC updates weekly


class CacheKeyPrefix:
    """Prefixes of marketplace cache keys."""

    PLANS = "plans"
    PLAN = "plan"
    ELIGIBILITY = "eligibility"
    SLCSP = "slcsp"
    LCBP = "lcbp"
    DRUG_SEARCH = "search"
    DRUG_NDC = "ndc"
