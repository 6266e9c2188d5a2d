"""Cost comparison orchestration.

:class:`ComparisonOrchestrator` compares traditional insurance against a DPC
membership with catastrophic coverage. It uses live Healthcare.gov plans
where it can and falls back to static estimates per half, so ``compare``
always returns a complete result. Which halves are live is recorded in
``ComparisonResult.data_source``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from dpccompare.core.comparison.estimator import (
    calculate_dpc_fee,
    estimate_dpc_costs,
    estimate_traditional_costs,
)
from dpccompare.core.comparison.models import (
    Breakdown,
    ComparisonInput,
    ComparisonOptions,
    ComparisonResult,
    CostBreakdown,
    DataOrigin,
    DataSource,
    PlanDetails,
    RecommendedPlan,
)
from dpccompare.core.comparison.plan_costs import (
    extract_catastrophic_costs,
    extract_traditional_costs,
)
from dpccompare.services.geo.resolver import GeoResolver
from dpccompare.services.geo.tables import normalize_zip
from dpccompare.services.marketplace.client import MarketplaceClient
from dpccompare.services.marketplace.models import (
    Household,
    MarketplacePlan,
    Person,
    Place,
    PlanSearchFilter,
    PlanSearchRequest,
)
from dpccompare.services.marketplace.states import MarketplaceInfo, get_marketplace_info
from dpccompare.shared.constants import ComparisonDefaults
from dpccompare.shared.errors import (
    ApplicationError,
    DpcCompareError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
)
from dpccompare.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)

MONTHS = ComparisonDefaults.MONTHS_PER_YEAR

REASON_DISABLED = "Live marketplace data disabled for this request"
REASON_NOT_CONFIGURED = "Healthcare.gov API client not configured. Using estimates."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ApiAvailability:
    available: bool
    message: str


@dataclass
class _HalfOutcome:
    plan: MarketplacePlan | None = None
    reason: str | None = None


class ComparisonOrchestrator:
    """Compare traditional insurance with DPC + catastrophic coverage.

    Args:
        geo_resolver: ZIP to county resolution
        marketplace_client: Live plan source; None runs estimate-only
        clock: Returns the current time (stamps ``last_updated`` and picks the default year)
        default_income: Household income used when the caller gives none
        plan_limit: Plans requested per search
        use_api_data: Default for requests that do not set ``use_api_data``

    Raises:
        ApplicationError: If plan_limit is outside 1..100
    """

    def __init__(
        self,
        geo_resolver: GeoResolver,
        marketplace_client: MarketplaceClient | None = None,
        clock: Callable[[], datetime] = _utcnow,
        *,
        default_income: float = ComparisonDefaults.INCOME,
        plan_limit: int = ComparisonDefaults.PLAN_LIMIT,
        use_api_data: bool = True,
    ) -> None:
        if not 1 <= plan_limit <= ComparisonDefaults.MAX_PLAN_LIMIT:
            error = ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"plan_limit must be between 1 and {ComparisonDefaults.MAX_PLAN_LIMIT}, got {plan_limit}",
                context=ErrorContext(
                    operation="comparison_orchestrator_init",
                    additional_data={"plan_limit": plan_limit},
                ),
            )
            log_operation_error(logger, error)
            raise error

        self.geo_resolver = geo_resolver
        self.marketplace_client = marketplace_client
        self._clock = clock
        self.default_income = default_income
        self.plan_limit = plan_limit
        self.use_api_data = use_api_data

    async def __aenter__(self) -> ComparisonOrchestrator:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP sessions of the collaborators."""
        await self.geo_resolver.close()
        if self.marketplace_client is not None:
            await self.marketplace_client.close()

    def check_api_availability(self) -> ApiAvailability:
        if self.marketplace_client is None:
            return ApiAvailability(available=False, message=REASON_NOT_CONFIGURED)
        return ApiAvailability(
            available=True,
            message="Healthcare.gov API is configured and available.",
        )

    def _unavailable_reason(
        self,
        marketplace: MarketplaceInfo,
        options: ComparisonOptions,
    ) -> str | None:
        if not marketplace.supports_api:
            return marketplace.reason or f"{marketplace.name} is not served by Healthcare.gov"
        use_api_data = self.use_api_data if options.use_api_data is None else options.use_api_data
        if use_api_data is False:
            return REASON_DISABLED
        if self.marketplace_client is None:
            return REASON_NOT_CONFIGURED
        return None

    async def compare(
        self,
        profile: ComparisonInput,
        options: ComparisonOptions | None = None,
    ) -> ComparisonResult:
        """Compare annual costs for a health profile.

        Args:
            profile: Age, location and expected utilization
            options: Income, plan year and live-data override

        Returns:
            Fully populated ComparisonResult; degradation shows only in ``data_source``
        """
        options = options or ComparisonOptions()
        start = time.time()
        now = self._clock()
        marketplace = get_marketplace_info(profile.state)

        traditional_half = _HalfOutcome()
        catastrophic_half = _HalfOutcome()

        reason = self._unavailable_reason(marketplace, options)
        if reason is None:
            try:
                traditional_half, catastrophic_half = await self._fetch_live_plans(profile, options, now)
            except ValidationError as e:
                reason = self._record_failure("build_plan_search", e)
                traditional_half, catastrophic_half = _HalfOutcome(reason=reason), _HalfOutcome(reason=reason)
        else:
            logger.info("Using estimates for %s: %s", profile.state, reason)
            traditional_half.reason = catastrophic_half.reason = reason

        traditional = self._traditional_costs(profile, traditional_half)
        dpc = self._dpc_costs(profile, catastrophic_half)

        annual_savings = traditional.total - dpc.total
        percentage_savings = annual_savings / traditional.total * 100 if traditional.total else 0.0
        recommended = RecommendedPlan.DPC_CATASTROPHIC if annual_savings > 0 else RecommendedPlan.TRADITIONAL

        reasons = [r for r in dict.fromkeys((traditional_half.reason, catastrophic_half.reason)) if r]
        has_plan = traditional_half.plan is not None or catastrophic_half.plan is not None

        result = ComparisonResult(
            traditional_premium=traditional.premiums / MONTHS,
            traditional_deductible=traditional.deductible,
            traditional_out_of_pocket=traditional.out_of_pocket,
            traditional_total_annual=traditional.total,
            dpc_monthly_fee=dpc.premiums / MONTHS,
            dpc_annual_fee=dpc.premiums,
            catastrophic_premium=dpc.catastrophic_premium or 0,
            catastrophic_deductible=dpc.deductible,
            catastrophic_out_of_pocket=dpc.out_of_pocket,
            dpc_total_annual=dpc.total,
            annual_savings=annual_savings,
            percentage_savings=percentage_savings,
            recommended_plan=recommended,
            breakdown=Breakdown(traditional=traditional, dpc=dpc),
            data_source=DataSource(
                traditional=DataOrigin.ESTIMATE if traditional_half.plan is None else DataOrigin.API,
                catastrophic=DataOrigin.ESTIMATE if catastrophic_half.plan is None else DataOrigin.API,
                marketplace_type=marketplace.type,
                marketplace_name=marketplace.name,
                api_unavailable_reason="; ".join(reasons) or None,
                last_updated=now,
            ),
            plan_details=(
                PlanDetails(
                    traditional_plan=traditional_half.plan,
                    catastrophic_plan=catastrophic_half.plan,
                )
                if has_plan
                else None
            ),
        )

        log_operation_success(
            logger,
            operation="compare",
            duration_ms=(time.time() - start) * 1000,
            result_info={
                "recommended_plan": recommended.value,
                "traditional_source": result.data_source.traditional.value,
                "catastrophic_source": result.data_source.catastrophic.value,
            },
        )
        return result

    def _traditional_costs(self, profile: ComparisonInput, half: _HalfOutcome) -> CostBreakdown:
        if half.plan is not None:
            try:
                return extract_traditional_costs(half.plan, profile)
            except (AttributeError, TypeError, ValueError) as e:
                half.reason = self._record_failure("extract_traditional_costs", e)
                half.plan = None
        return estimate_traditional_costs(profile)

    def _dpc_costs(self, profile: ComparisonInput, half: _HalfOutcome) -> CostBreakdown:
        if half.plan is not None:
            try:
                return extract_catastrophic_costs(
                    half.plan,
                    calculate_dpc_fee(len(profile.chronic_conditions)),
                )
            except (AttributeError, TypeError, ValueError) as e:
                half.reason = self._record_failure("extract_catastrophic_costs", e)
                half.plan = None
        return estimate_dpc_costs(profile)

    async def _fetch_live_plans(
        self,
        profile: ComparisonInput,
        options: ComparisonOptions,
        now: datetime,
    ) -> tuple[_HalfOutcome, _HalfOutcome]:
        zip_code = normalize_zip(profile.zip_code)
        if zip_code is None:
            reason = f"'{profile.zip_code}' is not a valid ZIP code"
            logger.warning("Skipping live marketplace data: %s", reason)
            return _HalfOutcome(reason=reason), _HalfOutcome(reason=reason)

        resolution = await self.geo_resolver.resolve_county(zip_code, state_hint=profile.state)
        household = Household(
            income=self.default_income if options.income is None else options.income,
            people=[Person(age=profile.age, aptc_eligible=True, uses_tobacco=False, gender="Male")],
        )
        place = Place(state=profile.state, countyfips=resolution.county_fips, zipcode=zip_code)
        year = options.year or now.year

        traditional = await self._first_valid_plan(
            self._search_request(household, place, year, ComparisonDefaults.BENCHMARK_METAL)
        )
        catastrophic = await self._first_valid_plan(
            self._search_request(household, place, year, ComparisonDefaults.CATASTROPHIC_METAL)
        )
        return traditional, catastrophic

    def _search_request(
        self,
        household: Household,
        place: Place,
        year: int,
        metal: str,
    ) -> PlanSearchRequest:
        return PlanSearchRequest(
            household=household,
            place=place,
            market="Individual",
            year=year,
            filter=PlanSearchFilter(metal=[metal]),
            sort="premium",
            order="asc",
            limit=self.plan_limit,
        )

    async def _first_valid_plan(self, request: PlanSearchRequest) -> _HalfOutcome:
        metal = request.filter.metal[0] if request.filter and request.filter.metal else "any"
        client = self.marketplace_client
        if client is None:
            return _HalfOutcome(reason=REASON_NOT_CONFIGURED)

        try:
            response = await client.search_plans(request)
        except DpcCompareError as e:
            log_operation_error(logger, e, additional_context={"metal": metal}, level=logging.WARNING)
            return _HalfOutcome(reason=e.message)
        except Exception as e:  # noqa: BLE001
            return _HalfOutcome(reason=self._record_failure(f"search_{metal}_plans", e))

        plan = response.first_valid_plan()
        if plan is None:
            logger.info("No valid %s plan in %d result(s), using estimate", metal, len(response.plans))
            return _HalfOutcome(reason=f"No valid {metal} plan available for county {request.place.countyfips}")
        return _HalfOutcome(plan=plan)

    def _record_failure(self, operation: str, error: Exception) -> str:
        wrapped = InfrastructureError(
            code=ErrorCode.COMPARISON_FAILED,
            message=f"{type(error).__name__}: {error}",
            context=ErrorContext(operation=operation),
            original_error=error,
        )
        log_operation_error(logger, wrapped)
        return wrapped.message
