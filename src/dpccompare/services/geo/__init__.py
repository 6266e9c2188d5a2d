"""Geography services: ZIP to county FIPS resolution."""

from .census import CensusGeocoder, FipsLookupResult
from .resolver import CountyResolution, GeoResolver, ResolutionTier
from .tables import (
    STATE_COUNTY_DEFAULTS,
    ZIP_COUNTY_FALLBACK,
    normalize_zip,
    state_for_zip,
)

__all__ = [
    "STATE_COUNTY_DEFAULTS",
    "ZIP_COUNTY_FALLBACK",
    "CensusGeocoder",
    "CountyResolution",
    "FipsLookupResult",
    "GeoResolver",
    "ResolutionTier",
    "normalize_zip",
    "state_for_zip",
]
