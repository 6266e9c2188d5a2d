"""Cost comparison input and result models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dpccompare.services.marketplace.models import MarketplacePlan
from dpccompare.services.marketplace.states import MarketplaceType


class RecommendedPlan(str, Enum):
    TRADITIONAL = "TRADITIONAL"
    DPC_CATASTROPHIC = "DPC_CATASTROPHIC"


class DataOrigin(str, Enum):
    """Where one half of a comparison came from."""

    API = "api"
    ESTIMATE = "estimate"


class ComparisonInput(BaseModel):
    """Health profile being compared.

    ``zip_code`` is not validated here; a malformed ZIP still produces a
    comparison, resolved from the state default county.
    """

    model_config = ConfigDict(frozen=True)

    age: int = Field(ge=0, le=120)
    zip_code: str
    state: str = Field(min_length=2, max_length=2)
    chronic_conditions: list[str] = Field(default_factory=list)
    annual_doctor_visits: int = Field(default=0, ge=0)
    prescription_count: int = Field(default=0, ge=0)

    @field_validator("state")
    @classmethod
    def _upper_state(cls, value: str) -> str:
        return value.strip().upper()


class ComparisonOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    income: float | None = Field(default=None, ge=0)
    year: int | None = Field(default=None, ge=2014)
    use_api_data: bool | None = None


class CostBreakdown(BaseModel):
    """Annual cost components of one half of the comparison.

    For the DPC half ``premiums`` is the DPC membership fee and
    ``catastrophic_premium`` the annual catastrophic plan premium.
    """

    premiums: float
    deductible: float
    copays: float
    prescriptions: float
    out_of_pocket: float
    total: float
    catastrophic_premium: float | None = None


class Breakdown(BaseModel):
    traditional: CostBreakdown
    dpc: CostBreakdown


class DataSource(BaseModel):
    traditional: DataOrigin
    catastrophic: DataOrigin
    marketplace_type: MarketplaceType
    marketplace_name: str
    api_unavailable_reason: str | None = None
    last_updated: datetime


class PlanDetails(BaseModel):
    traditional_plan: MarketplacePlan | None = None
    catastrophic_plan: MarketplacePlan | None = None


class ComparisonResult(BaseModel):
    """Traditional insurance versus DPC + catastrophic coverage.

    Premium and fee fields named ``*_premium``/``*_monthly_fee`` are monthly
    except ``catastrophic_premium``, which is annual. Everything else is annual.
    """

    traditional_premium: float
    traditional_deductible: float
    traditional_out_of_pocket: float
    traditional_total_annual: float

    dpc_monthly_fee: float
    dpc_annual_fee: float
    catastrophic_premium: float
    catastrophic_deductible: float
    catastrophic_out_of_pocket: float
    dpc_total_annual: float

    annual_savings: float
    percentage_savings: float
    recommended_plan: RecommendedPlan

    breakdown: Breakdown
    data_source: DataSource
    plan_details: PlanDetails | None = None
