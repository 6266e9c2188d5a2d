"""Cost extraction from live marketplace plans.

Cost-sharing strings come in several forms ("$35", "$35 Copay after
deductible", "30% Coinsurance after deductible", "No Charge"). A dollar amount
wins; otherwise a coinsurance percentage is applied to an assumed service
cost; otherwise a fixed default is used.
"""

from __future__ import annotations

import re

from dpccompare.core.comparison.models import ComparisonInput, CostBreakdown
from dpccompare.services.marketplace.models import MarketplacePlan
from dpccompare.shared.constants import ComparisonDefaults, CostSharingDefaults

MONTHS = ComparisonDefaults.MONTHS_PER_YEAR

_DOLLAR_AMOUNT = re.compile(r"\$\s*(\d[\d,]*(?:\.\d+)?)")
_PERCENTAGE = re.compile(r"(\d+(?:\.\d+)?)\s*%")


def parse_cost_sharing(cost_sharing: str | None, assumed_cost: float, default: float) -> float:
    """Per-use cost from a cost-sharing string.

    Args:
        cost_sharing: Raw string from the plan benefits
        assumed_cost: Service cost a coinsurance percentage applies to
        default: Value used when neither a dollar amount nor a percentage is present

    Example:
        >>> parse_cost_sharing("30% Coinsurance after deductible", 200, 35)
        60.0
    """
    if not cost_sharing:
        return default

    dollar = _DOLLAR_AMOUNT.search(cost_sharing)
    if dollar:
        return float(dollar.group(1).replace(",", ""))

    percent = _PERCENTAGE.search(cost_sharing)
    if percent:
        return assumed_cost * float(percent.group(1)) / 100

    return default


def extract_copay_amount(cost_sharing: str | None) -> float:
    return parse_cost_sharing(
        cost_sharing,
        CostSharingDefaults.AVERAGE_VISIT_COST,
        CostSharingDefaults.DEFAULT_COPAY,
    )


def extract_prescription_cost(cost_sharing: str | None) -> float:
    return parse_cost_sharing(
        cost_sharing,
        CostSharingDefaults.AVERAGE_GENERIC_DRUG_COST,
        CostSharingDefaults.DEFAULT_GENERIC_RX,
    )


def plan_deductible(plan: MarketplacePlan) -> float:
    return plan.benefits.deductible.individual or 0


def extract_traditional_costs(plan: MarketplacePlan, profile: ComparisonInput) -> CostBreakdown:
    """Annual costs of a benchmark plan for the given profile."""
    annual_premium = plan.monthly_premium * MONTHS
    deductible = plan_deductible(plan)
    copays = profile.annual_doctor_visits * extract_copay_amount(plan.benefits.primary_care_visit)
    prescriptions = (
        profile.prescription_count * extract_prescription_cost(plan.benefits.generic_drugs) * MONTHS
    )
    out_of_pocket = copays + prescriptions

    return CostBreakdown(
        premiums=annual_premium,
        deductible=deductible,
        copays=copays,
        prescriptions=prescriptions,
        out_of_pocket=out_of_pocket,
        total=annual_premium + deductible + out_of_pocket,
    )


def extract_catastrophic_costs(plan: MarketplacePlan, dpc_monthly_fee: float) -> CostBreakdown:
    """Annual costs of a catastrophic plan paired with a DPC membership.

    Primary care and generic prescriptions are covered by the practice, so
    copays, prescriptions and out-of-pocket are zero.
    """
    catastrophic_premium = plan.monthly_premium * MONTHS
    dpc_annual_fee = dpc_monthly_fee * MONTHS

    return CostBreakdown(
        premiums=dpc_annual_fee,
        catastrophic_premium=catastrophic_premium,
        deductible=plan_deductible(plan),
        copays=0,
        prescriptions=0,
        out_of_pocket=0,
        total=catastrophic_premium + dpc_annual_fee,
    )
