"""Which states can be queried through the Healthcare.gov API.

State lists reflect the 2025 enrollment period. States running their own
exchange platform are not reachable through the federal API.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MarketplaceType(str, Enum):
    FEDERAL = "federal"
    STATE_BASED = "state-based"
    STATE_BASED_FEDERAL_PLATFORM = "state-based-federal-platform"


@dataclass(frozen=True)
class MarketplaceInfo:
    type: MarketplaceType
    name: str
    supports_api: bool
    website: str | None = None
    reason: str | None = None


# State-based exchanges on their own platform
STATE_BASED_EXCHANGES: dict[str, str] = {
    "CA": "Covered California",
    "CO": "Connect for Health Colorado",
    "CT": "Access Health CT",
    "DC": "DC Health Link",
    "ID": "Your Health Idaho",
    "MA": "Massachusetts Health Connector",
    "MD": "Maryland Health Connection",
    "MN": "MNsure",
    "NV": "Nevada Health Link",
    "NJ": "Get Covered New Jersey",
    "NY": "NY State of Health",
    "PA": "Pennie",
    "RI": "HealthSource RI",
    "VT": "Vermont Health Connect",
    "WA": "Washington Healthplanfinder",
}

# State-based exchanges enrolling through Healthcare.gov
STATE_BASED_ON_FEDERAL_PLATFORM: frozenset[str] = frozenset({"AR", "KY", "ME", "NM", "OR"})

FEDERAL_MARKETPLACE_STATES: frozenset[str] = frozenset(
    {
        "AL", "AK", "AZ", "DE", "FL", "GA", "HI", "IL", "IN", "IA",
        "KS", "LA", "MI", "MS", "MO", "MT", "NE", "NH", "NC", "ND",
        "OH", "OK", "SC", "SD", "TN", "TX", "UT", "VA", "WV", "WI", "WY",
    }
)  # fmt: skip

HEALTHCARE_GOV_NAME = "Healthcare.gov"
HEALTHCARE_GOV_WEBSITE = "https://www.healthcare.gov"


def get_marketplace_info(state: str) -> MarketplaceInfo:
    """Classify a state's marketplace.

    Unknown codes are treated as federal marketplace states.
    """
    code = state.strip().upper()

    if code in STATE_BASED_EXCHANGES:
        return MarketplaceInfo(
            type=MarketplaceType.STATE_BASED,
            name=STATE_BASED_EXCHANGES[code],
            supports_api=False,
            reason="State operates its own marketplace platform separate from Healthcare.gov",
        )

    if code in STATE_BASED_ON_FEDERAL_PLATFORM:
        return MarketplaceInfo(
            type=MarketplaceType.STATE_BASED_FEDERAL_PLATFORM,
            name=f"{code} State Marketplace (Federal Platform)",
            supports_api=True,
            reason="State uses Healthcare.gov platform but may have limited API access",
        )

    return MarketplaceInfo(
        type=MarketplaceType.FEDERAL,
        name=HEALTHCARE_GOV_NAME,
        supports_api=True,
        website=HEALTHCARE_GOV_WEBSITE,
    )


def supports_marketplace_api(state: str) -> bool:
    return get_marketplace_info(state).supports_api


def get_api_unavailable_message(state: str) -> str:
    """User-facing explanation of why live plan data is missing for a state."""
    code = state.strip().upper()
    info = get_marketplace_info(code)

    if info.type is MarketplaceType.STATE_BASED:
        return (
            f"{code} uses {info.name}, a state-run marketplace. "
            "Visit their website for official plan pricing."
        )
    if info.type is MarketplaceType.STATE_BASED_FEDERAL_PLATFORM:
        return f"{code} uses a state-based marketplace on the federal platform. API access may be limited."
    return f"Marketplace data temporarily unavailable for {code}."
