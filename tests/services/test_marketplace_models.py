"""Tests for marketplace schemas and state classification."""

from __future__ import annotations

import pytest

from dpccompare.services.marketplace.models import (
    EligibilityResponse,
    PlanSearchResponse,
    validate_plan,
)
from dpccompare.services.marketplace.states import (
    MarketplaceType,
    get_api_unavailable_message,
    get_marketplace_info,
    supports_marketplace_api,
)


class TestValidatePlan:
    """Test plan validation rules."""

    def test_numeric_premium_normalized(self, silver_plan) -> None:
        plan = validate_plan(silver_plan)

        assert plan is not None
        assert plan.premium.premium == 420.0
        assert plan.monthly_premium == 300.0

    def test_premium_object_accepted(self, catastrophic_plan) -> None:
        raw = {**catastrophic_plan, "premium": {"premium": 210.0}}

        plan = validate_plan(raw)

        assert plan is not None
        assert plan.monthly_premium == 210.0

    @pytest.mark.parametrize("missing", ["id", "name", "metal_level", "premium", "benefits"])
    def test_missing_required_field_rejected(self, silver_plan, missing: str) -> None:
        raw = {k: v for k, v in silver_plan.items() if k != missing}

        assert validate_plan(raw) is None

    def test_missing_deductible_rejected(self, silver_plan) -> None:
        raw = {**silver_plan, "benefits": {"primary_care_visit": "$20"}}

        assert validate_plan(raw) is None

    def test_empty_metal_level_rejected(self, silver_plan) -> None:
        assert validate_plan({**silver_plan, "metal_level": ""}) is None

    def test_search_response_skips_invalid_plans(self, silver_plan) -> None:
        response = PlanSearchResponse.model_validate({"plans": [{"id": "broken"}, silver_plan], "total": 2})

        assert response.first_valid_plan().id == silver_plan["id"]
        assert len(response.plans) == 2

    def test_eligibility_single_estimate_wrapped(self) -> None:
        response = EligibilityResponse.model_validate({"estimates": {"aptc": 120.5, "csr": "73%"}})

        assert response.estimates[0].aptc == 120.5


class TestMarketplaceStates:
    """Test state marketplace classification."""

    def test_federal_state(self) -> None:
        info = get_marketplace_info("nc")

        assert info.type is MarketplaceType.FEDERAL
        assert info.supports_api is True
        assert info.name == "Healthcare.gov"

    def test_state_based_exchange(self) -> None:
        info = get_marketplace_info("NY")

        assert info.type is MarketplaceType.STATE_BASED
        assert info.name == "NY State of Health"
        assert info.supports_api is False
        assert info.reason

    def test_state_based_on_federal_platform(self) -> None:
        info = get_marketplace_info("OR")

        assert info.type is MarketplaceType.STATE_BASED_FEDERAL_PLATFORM
        assert supports_marketplace_api("OR") is True

    def test_unknown_code_treated_as_federal(self) -> None:
        assert get_marketplace_info("ZZ").type is MarketplaceType.FEDERAL

    def test_unavailable_messages(self) -> None:
        assert "Covered California" in get_api_unavailable_message("CA")
        assert "federal platform" in get_api_unavailable_message("KY")
        assert get_api_unavailable_message("TX") == "Marketplace data temporarily unavailable for TX."
