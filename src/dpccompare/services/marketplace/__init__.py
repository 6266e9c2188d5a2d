"""Healthcare.gov marketplace services."""

from .client import MarketplaceClient, is_placeholder_api_key
from .models import (
    EligibilityRequest,
    EligibilityResponse,
    Household,
    MarketplacePlan,
    Person,
    Place,
    PlanDetailsRequest,
    PlanDetailsResponse,
    PlanSearchFilter,
    PlanSearchRequest,
    PlanSearchResponse,
    SLCSPRequest,
    SLCSPResponse,
    validate_plan,
)
from .states import (
    MarketplaceInfo,
    MarketplaceType,
    get_api_unavailable_message,
    get_marketplace_info,
    supports_marketplace_api,
)

__all__ = [
    "EligibilityRequest",
    "EligibilityResponse",
    "Household",
    "MarketplaceClient",
    "MarketplaceInfo",
    "MarketplacePlan",
    "MarketplaceType",
    "Person",
    "Place",
    "PlanDetailsRequest",
    "PlanDetailsResponse",
    "PlanSearchFilter",
    "PlanSearchRequest",
    "PlanSearchResponse",
    "SLCSPRequest",
    "SLCSPResponse",
    "get_api_unavailable_message",
    "get_marketplace_info",
    "is_placeholder_api_key",
    "supports_marketplace_api",
    "validate_plan",
]
