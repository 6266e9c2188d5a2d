"""Tests for the comparison orchestrator."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest

from dpccompare.core.comparison.models import (
    ComparisonInput,
    ComparisonOptions,
    DataOrigin,
    RecommendedPlan,
)
from dpccompare.core.comparison.orchestrator import (
    REASON_DISABLED,
    REASON_NOT_CONFIGURED,
    ComparisonOrchestrator,
)
from dpccompare.services.geo.resolver import GeoResolver
from dpccompare.services.http_client import ApiErrorInfo
from dpccompare.services.marketplace.client import MarketplaceClient
from dpccompare.services.marketplace.models import PlanSearchRequest, PlanSearchResponse
from dpccompare.services.marketplace.states import MarketplaceType
from dpccompare.shared.errors import ApplicationError, ErrorCode, MarketplaceApiError

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _responder(silver: list[dict], catastrophic: list[dict] | Exception):
    async def search_plans(request):
        if request.filter.metal == ["catastrophic"]:
            if isinstance(catastrophic, Exception):
                raise catastrophic
            return PlanSearchResponse(plans=catastrophic, total=len(catastrophic))
        return PlanSearchResponse(plans=silver, total=len(silver))

    return search_plans


@pytest.fixture
def marketplace() -> Mock:
    client = Mock(spec=MarketplaceClient)
    client.search_plans = AsyncMock(return_value=PlanSearchResponse())
    client.close = AsyncMock()
    return client


@pytest.fixture
def make_orchestrator(marketplace):
    def _make(**kwargs) -> ComparisonOrchestrator:
        kwargs.setdefault("marketplace_client", marketplace)
        return ComparisonOrchestrator(
            geo_resolver=GeoResolver(),
            clock=lambda: FIXED_NOW,
            **kwargs,
        )

    return _make


@pytest.fixture
def nc_profile() -> ComparisonInput:
    return ComparisonInput(
        age=40,
        zip_code="27701",
        state="NC",
        annual_doctor_visits=4,
        prescription_count=2,
    )


class TestEstimateOnly:
    """Test paths that never touch the marketplace."""

    @pytest.mark.asyncio
    async def test_state_based_exchange_uses_estimates(self, make_orchestrator, marketplace) -> None:
        orchestrator = make_orchestrator()
        profile = ComparisonInput(age=25, zip_code="90210", state="CA", annual_doctor_visits=2)

        result = await orchestrator.compare(profile)

        marketplace.search_plans.assert_not_awaited()
        assert result.traditional_premium == 384
        assert result.traditional_total_annual == 6178
        assert result.dpc_monthly_fee == 75
        assert result.dpc_annual_fee == 900
        assert result.catastrophic_premium == 1380
        assert result.dpc_total_annual == 2280
        assert result.annual_savings == 3898
        assert result.percentage_savings == pytest.approx(3898 / 6178 * 100)
        assert result.recommended_plan is RecommendedPlan.DPC_CATASTROPHIC
        assert result.data_source.traditional is DataOrigin.ESTIMATE
        assert result.data_source.catastrophic is DataOrigin.ESTIMATE
        assert result.data_source.marketplace_type is MarketplaceType.STATE_BASED
        assert result.data_source.marketplace_name == "Covered California"
        assert result.plan_details is None

    @pytest.mark.asyncio
    async def test_ny_short_circuits_with_reason(self, make_orchestrator, marketplace) -> None:
        profile = ComparisonInput(age=50, zip_code="10001", state="NY")

        result = await make_orchestrator().compare(profile)

        marketplace.search_plans.assert_not_awaited()
        assert result.data_source.marketplace_name == "NY State of Health"
        assert result.data_source.api_unavailable_reason == (
            "State operates its own marketplace platform separate from Healthcare.gov"
        )

    @pytest.mark.asyncio
    async def test_live_data_disabled_per_request(self, make_orchestrator, marketplace, nc_profile) -> None:
        result = await make_orchestrator().compare(nc_profile, ComparisonOptions(use_api_data=False))

        marketplace.search_plans.assert_not_awaited()
        assert result.data_source.traditional is DataOrigin.ESTIMATE
        assert result.data_source.catastrophic is DataOrigin.ESTIMATE
        assert result.data_source.api_unavailable_reason == REASON_DISABLED

    @pytest.mark.asyncio
    async def test_live_data_disabled_by_default_setting(self, make_orchestrator, marketplace, nc_profile) -> None:
        orchestrator = make_orchestrator(use_api_data=False)

        result = await orchestrator.compare(nc_profile)

        marketplace.search_plans.assert_not_awaited()
        assert result.data_source.api_unavailable_reason == REASON_DISABLED

    @pytest.mark.asyncio
    async def test_missing_client_uses_estimates(self, make_orchestrator, nc_profile) -> None:
        orchestrator = make_orchestrator(marketplace_client=None)

        result = await orchestrator.compare(nc_profile)

        assert result.data_source.api_unavailable_reason == REASON_NOT_CONFIGURED
        assert orchestrator.check_api_availability().available is False

    @pytest.mark.asyncio
    async def test_malformed_zip_skips_live_data(self, make_orchestrator, marketplace) -> None:
        profile = ComparisonInput(age=30, zip_code="27-01", state="NC")

        result = await make_orchestrator().compare(profile)

        marketplace.search_plans.assert_not_awaited()
        assert result.data_source.api_unavailable_reason == "'27-01' is not a valid ZIP code"
        assert result.traditional_total_annual > 0

    @pytest.mark.asyncio
    async def test_idempotent_apart_from_timestamp(self, marketplace) -> None:
        orchestrator = ComparisonOrchestrator(geo_resolver=GeoResolver(), marketplace_client=marketplace)
        profile = ComparisonInput(age=33, zip_code="75201", state="TX", chronic_conditions=["asthma"])
        options = ComparisonOptions(use_api_data=False)

        first = await orchestrator.compare(profile, options)
        second = await orchestrator.compare(profile, options)

        exclude = {"data_source": {"last_updated"}}
        assert first.model_dump(exclude=exclude) == second.model_dump(exclude=exclude)


class TestLiveData:
    """Test live plan usage and per-half fallback."""

    @pytest.mark.asyncio
    async def test_both_halves_live(
        self, make_orchestrator, marketplace, nc_profile, silver_plan, catastrophic_plan
    ) -> None:
        marketplace.search_plans.side_effect = _responder([silver_plan], [catastrophic_plan])

        result = await make_orchestrator().compare(nc_profile, ComparisonOptions(income=42000))

        assert result.data_source.traditional is DataOrigin.API
        assert result.data_source.catastrophic is DataOrigin.API
        assert result.data_source.api_unavailable_reason is None
        assert result.data_source.last_updated == FIXED_NOW
        assert result.traditional_premium == 300
        assert result.traditional_total_annual == 6980
        assert result.catastrophic_premium == 2520
        assert result.dpc_total_annual == 3420
        assert result.annual_savings == 3560
        assert result.plan_details.traditional_plan.id == silver_plan["id"]
        assert result.plan_details.catastrophic_plan.id == catastrophic_plan["id"]

        first_request = marketplace.search_plans.await_args_list[0].args[0]
        assert first_request.place.countyfips == "37063"
        assert first_request.place.zipcode == "27701"
        assert first_request.year == 2026
        assert first_request.household.income == 42000
        assert first_request.household.people[0].age == 40
        assert first_request.sort == "premium"
        assert first_request.order == "asc"
        assert marketplace.search_plans.await_count == 2

    @pytest.mark.asyncio
    async def test_catastrophic_failure_falls_back_for_that_half(
        self, make_orchestrator, marketplace, nc_profile, silver_plan
    ) -> None:
        marketplace.search_plans.side_effect = _responder(
            [silver_plan],
            MarketplaceApiError(ApiErrorInfo(status=503, code=9999, message="Service Unavailable")),
        )

        result = await make_orchestrator().compare(nc_profile)

        assert result.data_source.traditional is DataOrigin.API
        assert result.data_source.catastrophic is DataOrigin.ESTIMATE
        assert result.data_source.api_unavailable_reason == "Service Unavailable"
        assert result.plan_details.traditional_plan is not None
        assert result.plan_details.catastrophic_plan is None
        assert result.catastrophic_premium == 120 * 12

    @pytest.mark.asyncio
    async def test_no_valid_plan_reason(self, make_orchestrator, marketplace, nc_profile, silver_plan) -> None:
        marketplace.search_plans.side_effect = _responder([silver_plan], [{"id": "broken"}])

        result = await make_orchestrator().compare(nc_profile)

        assert result.data_source.catastrophic is DataOrigin.ESTIMATE
        assert result.data_source.api_unavailable_reason == (
            "No valid catastrophic plan available for county 37063"
        )

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self, make_orchestrator, marketplace, nc_profile) -> None:
        marketplace.search_plans.side_effect = RuntimeError("socket closed")

        result = await make_orchestrator().compare(nc_profile)

        assert result.data_source.traditional is DataOrigin.ESTIMATE
        assert result.data_source.catastrophic is DataOrigin.ESTIMATE
        assert result.data_source.api_unavailable_reason == "RuntimeError: socket closed"

    @pytest.mark.asyncio
    async def test_tie_recommends_traditional(
        self, make_orchestrator, marketplace, silver_plan, catastrophic_plan
    ) -> None:
        silver = {**silver_plan, "premium": 100.0, "premium_w_credit": None}
        silver["benefits"] = {"deductible": {"individual": 0}}
        catastrophic = {**catastrophic_plan, "premium": 25.0}
        marketplace.search_plans.side_effect = _responder([silver], [catastrophic])
        profile = ComparisonInput(age=40, zip_code="27701", state="NC")

        result = await make_orchestrator().compare(profile)

        assert result.traditional_total_annual == 1200
        assert result.dpc_total_annual == 1200
        assert result.annual_savings == 0
        assert result.percentage_savings == 0
        assert result.recommended_plan is RecommendedPlan.TRADITIONAL

    @pytest.mark.asyncio
    async def test_idempotent_with_warm_marketplace_cache(
        self, fake_http, nc_profile, silver_plan, catastrophic_plan
    ) -> None:
        client = MarketplaceClient(
            api_key="real-key",
            http=fake_http(
                (200, "OK", {"plans": [silver_plan], "total": 1}),
                (200, "OK", {"plans": [catastrophic_plan], "total": 1}),
            ),
        )
        orchestrator = ComparisonOrchestrator(
            geo_resolver=GeoResolver(),
            marketplace_client=client,
            clock=lambda: FIXED_NOW,
        )

        first = await orchestrator.compare(nc_profile)
        second = await orchestrator.compare(nc_profile)

        assert client.http._send.await_count == 2
        assert client.cache_stats().hits == 2
        assert first.data_source.traditional is DataOrigin.API
        assert first.data_source.catastrophic is DataOrigin.API
        exclude = {"data_source": {"last_updated"}}
        assert first.model_dump_json(exclude=exclude) == second.model_dump_json(exclude=exclude)

    @pytest.mark.asyncio
    async def test_invalid_search_request_falls_back(self, make_orchestrator, marketplace, nc_profile) -> None:
        orchestrator = make_orchestrator()

        with patch.object(orchestrator, "_search_request", side_effect=lambda *_: PlanSearchRequest.model_validate({})):
            result = await orchestrator.compare(nc_profile)

        marketplace.search_plans.assert_not_awaited()
        assert result.data_source.traditional is DataOrigin.ESTIMATE
        assert result.data_source.catastrophic is DataOrigin.ESTIMATE
        assert result.data_source.api_unavailable_reason.startswith("ValidationError")

    @pytest.mark.asyncio
    async def test_close_releases_clients(self, make_orchestrator, marketplace) -> None:
        async with make_orchestrator() as orchestrator:
            assert orchestrator.check_api_availability().available is True

        marketplace.close.assert_awaited_once()


class TestEstimateScenario:
    """Los Angeles profile with live data switched off."""

    @pytest.mark.asyncio
    async def test_savings_equal_difference_of_estimates(self, make_orchestrator, marketplace) -> None:
        profile = ComparisonInput(age=25, zip_code="90001", state="CA", annual_doctor_visits=2)

        result = await make_orchestrator().compare(profile, ComparisonOptions(use_api_data=False))

        marketplace.search_plans.assert_not_awaited()
        assert result.annual_savings == result.traditional_total_annual - result.dpc_total_annual
        assert result.recommended_plan is RecommendedPlan.DPC_CATASTROPHIC
        assert result.breakdown.traditional.total == result.traditional_total_annual
        assert result.breakdown.dpc.total == result.dpc_total_annual


class TestConstruction:
    """Test constructor validation."""

    @pytest.mark.parametrize("plan_limit", [0, -1, 101, 500])
    def test_plan_limit_out_of_range_rejected(self, marketplace, plan_limit: int) -> None:
        with pytest.raises(ApplicationError) as exc_info:
            ComparisonOrchestrator(geo_resolver=GeoResolver(), marketplace_client=marketplace, plan_limit=plan_limit)

        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.context.additional_data == {"plan_limit": plan_limit}

    @pytest.mark.parametrize("plan_limit", [1, 100])
    def test_plan_limit_bounds_accepted(self, marketplace, plan_limit: int) -> None:
        orchestrator = ComparisonOrchestrator(
            geo_resolver=GeoResolver(), marketplace_client=marketplace, plan_limit=plan_limit
        )

        assert orchestrator.plan_limit == plan_limit
