"""Prescription drug pricing from the NADAC datastore."""

from .nadac import (
    DrugPricing,
    DrugPricingClient,
    NadacSearchResult,
    calculate_retail_price,
    parse_nadac_record,
)

__all__ = [
    "DrugPricing",
    "DrugPricingClient",
    "NadacSearchResult",
    "calculate_retail_price",
    "parse_nadac_record",
]
