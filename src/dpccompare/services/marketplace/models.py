"""Healthcare.gov Marketplace API request and response models.

Response models ignore unknown fields so that API additions do not break
parsing. Plans are validated one by one through :func:`validate_plan`; a plan
missing a required field is dropped instead of failing the whole response.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)


class _RequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict[str, Any]:
        """JSON body sent to the API (unset optional fields omitted)."""
        return self.model_dump(mode="json", exclude_none=True)

    def cache_key(self, prefix: str) -> str:
        """``prefix:`` followed by the canonical JSON of the request."""
        return f"{prefix}:{json.dumps(self.to_payload(), sort_keys=True, separators=(',', ':'))}"


class _ResponseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# Requests


class Place(_RequestModel):
    state: str = Field(min_length=2, max_length=2)
    countyfips: str = Field(min_length=5, max_length=5)
    zipcode: str = Field(min_length=5, max_length=5)


class Person(_RequestModel):
    age: int | None = Field(default=None, ge=0)
    dob: str | None = None
    aptc_eligible: bool | None = None
    gender: str | None = None
    uses_tobacco: bool | None = None
    is_pregnant: bool | None = None
    is_parent: bool | None = None


class Household(_RequestModel):
    income: float = Field(ge=0)
    people: list[Person]
    effective_date: str | None = None
    unemployment_received: bool | None = None
    has_mec: bool | None = None


class RangeFilter(_RequestModel):
    min: float | None = None
    max: float | None = None


class PlanSearchFilter(_RequestModel):
    metal: list[str] | None = None
    type: list[str] | None = None
    issuer: list[str] | None = None
    hsa_eligible: bool | None = None
    quality_rating: int | None = Field(default=None, ge=1, le=5)
    child_dental: bool | None = None
    premium: RangeFilter | None = None
    deductible: RangeFilter | None = None


class PlanSearchRequest(_RequestModel):
    household: Household
    place: Place
    market: Literal["Individual", "SHOP"] = "Individual"
    year: int | None = None
    filter: PlanSearchFilter | None = None
    sort: Literal["premium", "deductible", "oopc", "total_costs", "quality_rating"] | None = None
    order: Literal["asc", "desc"] | None = None
    offset: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=1, le=100)
    aptc_override: float | None = None
    csr_override: str | None = None
    catastrophic_override: bool | None = None


class PlanDetailsRequest(_RequestModel):
    plan_id: str = Field(min_length=1)
    household: Household | None = None
    year: int | None = None


class EligibilityRequest(_RequestModel):
    household: Household
    place: Place
    market: Literal["Individual", "SHOP"] = "Individual"
    year: int | None = None


class SLCSPRequest(_RequestModel):
    household: Household
    place: Place
    year: int | None = None


# Responses


class PremiumBreakdown(_ResponseModel):
    premium: float
    premium_tax_credit: float | None = None
    premium_w_credit: float | None = None


class Deductible(_ResponseModel):
    individual: float | None = None
    family: float | None = None
    combined: float | None = None


class MaximumOutOfPocket(_ResponseModel):
    individual: float | None = None
    family: float | None = None
    network_tier: str | None = None
    csr_variant: str | None = None


class BenefitCoverage(_ResponseModel):
    name: str
    covered: bool = False
    cost_sharing: str | None = None
    explanation: str | None = None


class PlanBenefits(_ResponseModel):
    deductible: Deductible
    maximum_out_of_pocket: MaximumOutOfPocket | None = None
    primary_care_visit: str | None = None
    specialist_visit: str | None = None
    emergency_room: str | None = None
    urgent_care: str | None = None
    generic_drugs: str | None = None
    preferred_brand_drugs: str | None = None
    non_preferred_brand_drugs: str | None = None
    specialty_drugs: str | None = None
    benefits: list[BenefitCoverage] | None = None


class Issuer(_ResponseModel):
    id: str | None = None
    name: str | None = None


class MarketplacePlan(_ResponseModel):
    """One plan from a search or details response.

    ``premium`` is accepted either as a breakdown object or as a bare number
    with ``premium_w_credit`` next to it.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    metal_level: str = Field(min_length=1)
    type: str | None = None
    issuer: Issuer | None = None
    premium: PremiumBreakdown
    benefits: PlanBenefits
    quality_rating: float | None = None
    hsa_eligible: bool | None = None
    network_tier: str | None = None
    is_new: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_premium(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("premium"), (int, float)) and not isinstance(
            data.get("premium"), bool
        ):
            data = dict(data)
            data["premium"] = {
                "premium": data["premium"],
                "premium_w_credit": data.get("premium_w_credit"),
            }
        return data

    @property
    def monthly_premium(self) -> float:
        return self.premium.premium_w_credit or self.premium.premium


class PlanSearchResponse(_ResponseModel):
    """Search result; ``plans`` holds raw plan objects, see :func:`validate_plan`."""

    plans: list[dict[str, Any]] = Field(default_factory=list)
    total: int = 0
    offset: int = 0
    limit: int | None = None

    def first_valid_plan(self) -> MarketplacePlan | None:
        for raw in self.plans:
            plan = validate_plan(raw)
            if plan is not None:
                return plan
        return None


class PlanDetailsResponse(MarketplacePlan):
    formulary_url: str | None = None
    sbc_url: str | None = None


class EligibilityEstimate(_ResponseModel):
    aptc: float = 0
    csr: str | None = None
    fpl_percent: float | None = None
    medicaid_chip: bool | None = None
    catastrophic_eligible: bool | None = None


class EligibilityResponse(_ResponseModel):
    estimates: list[EligibilityEstimate] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _wrap_single_estimate(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("estimates"), dict):
            data = {**data, "estimates": [data["estimates"]]}
        return data


class SLCSPResponse(_ResponseModel):
    """Benchmark plan premium (SLCSP or lowest cost bronze)."""

    premium: float | None = None
    plan_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "premium" not in data and "slcsp_premium" in data:
            data = {**data, "premium": data["slcsp_premium"]}
        plan = data.get("plan")
        if isinstance(plan, dict) and "plan_id" not in data:
            data = {**data, "plan_id": plan.get("id")}
        return data


def validate_plan(raw: Any) -> MarketplacePlan | None:
    """Validate one raw plan object.

    Required: ``id``, ``name``, ``metal_level``, ``premium`` and
    ``benefits.deductible``.

    Returns:
        The parsed plan, or None if a required field is missing or invalid
    """
    try:
        return MarketplacePlan.model_validate(raw)
    except ValidationError as e:
        plan_id = raw.get("id") if isinstance(raw, dict) else None
        logger.info("Skipping invalid marketplace plan %s: %d error(s)", plan_id, e.error_count())
        return None
