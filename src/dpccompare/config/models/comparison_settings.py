"""Cost comparison defaults."""

from __future__ import annotations

from pydantic import BaseModel, Field

from dpccompare.shared.constants import ComparisonDefaults


class ComparisonSettings(BaseModel):
    default_income: float = Field(
        default=ComparisonDefaults.INCOME,
        ge=0,
        description="Household income used when a request gives none",
    )
    plan_limit: int = Field(
        default=ComparisonDefaults.PLAN_LIMIT,
        ge=1,
        le=ComparisonDefaults.MAX_PLAN_LIMIT,
        description="Plans requested per marketplace search",
    )
    use_api_data: bool = Field(
        default=True,
        description="Use live marketplace data when available",
    )


__all__ = ["ComparisonSettings"]
