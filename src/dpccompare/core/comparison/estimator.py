"""Static cost estimates used when live marketplace data is unavailable.

All functions are pure. Premiums are whole dollars, rounded half up.
"""

from __future__ import annotations

import math

from dpccompare.core.comparison.models import ComparisonInput, CostBreakdown
from dpccompare.shared.constants import (
    AGE_PREMIUM_FACTORS,
    SENIOR_PREMIUM_FACTOR,
    STATE_PREMIUM_MULTIPLIERS,
    ComparisonDefaults,
    DpcPlanDefaults,
    OutOfPocketDefaults,
    TraditionalPlanDefaults,
)

MONTHS = ComparisonDefaults.MONTHS_PER_YEAR


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def age_premium_factor(age: int) -> float:
    for upper_bound, factor in AGE_PREMIUM_FACTORS:
        if age < upper_bound:
            return factor
    return SENIOR_PREMIUM_FACTOR


def calculate_traditional_premium(age: int, state: str) -> int:
    """Estimated monthly premium of a traditional plan.

    Example:
        >>> calculate_traditional_premium(25, "CA")
        384
    """
    premium = TraditionalPlanDefaults.BASE_MONTHLY_PREMIUM * age_premium_factor(age)
    premium *= STATE_PREMIUM_MULTIPLIERS.get(state.upper(), 1.0)
    return round_half_up(premium)


def calculate_catastrophic_premium(age: int, state: str) -> int:
    """Estimated monthly premium of a catastrophic plan."""
    traditional = calculate_traditional_premium(age, state)
    return round_half_up(traditional * DpcPlanDefaults.CATASTROPHIC_PREMIUM_RATIO)


def calculate_dpc_fee(chronic_condition_count: int) -> int:
    """Monthly DPC membership fee; complex patients pay more."""
    fee = DpcPlanDefaults.BASE_MONTHLY_FEE
    if chronic_condition_count > DpcPlanDefaults.MANY_CONDITIONS_THRESHOLD:
        fee += DpcPlanDefaults.MANY_CONDITIONS_SURCHARGE
    elif chronic_condition_count > 0:
        fee += DpcPlanDefaults.FEW_CONDITIONS_SURCHARGE
    return fee


def estimate_traditional_costs(profile: ComparisonInput) -> CostBreakdown:
    annual_premium = calculate_traditional_premium(profile.age, profile.state) * MONTHS
    deductible = TraditionalPlanDefaults.DEDUCTIBLE
    copays = profile.annual_doctor_visits * TraditionalPlanDefaults.COPAY_PER_VISIT
    prescriptions = profile.prescription_count * TraditionalPlanDefaults.GENERIC_RX_PER_MONTH * MONTHS
    out_of_pocket = copays + prescriptions

    return CostBreakdown(
        premiums=annual_premium,
        deductible=deductible,
        copays=copays,
        prescriptions=prescriptions,
        out_of_pocket=out_of_pocket,
        total=annual_premium + deductible + out_of_pocket,
    )


def estimate_dpc_costs(profile: ComparisonInput) -> CostBreakdown:
    """DPC membership plus catastrophic coverage.

    DPC covers primary care, so there are no copays; prescriptions are
    assumed cheaper through the practice.
    """
    dpc_annual_fee = calculate_dpc_fee(len(profile.chronic_conditions)) * MONTHS
    catastrophic_annual = calculate_catastrophic_premium(profile.age, profile.state) * MONTHS
    prescriptions = profile.prescription_count * DpcPlanDefaults.DPC_RX_PER_MONTH * MONTHS

    return CostBreakdown(
        premiums=dpc_annual_fee,
        catastrophic_premium=catastrophic_annual,
        deductible=DpcPlanDefaults.CATASTROPHIC_DEDUCTIBLE,
        copays=0,
        prescriptions=prescriptions,
        out_of_pocket=prescriptions,
        total=dpc_annual_fee + catastrophic_annual + prescriptions,
    )


def estimate_out_of_pocket_costs(chronic_conditions: list[str], annual_visits: int) -> int:
    """Rough yearly out-of-pocket spending for a health profile."""
    costs = OutOfPocketDefaults.BASE
    costs += len(chronic_conditions) * OutOfPocketDefaults.PER_CHRONIC_CONDITION
    if annual_visits > OutOfPocketDefaults.VISIT_THRESHOLD:
        costs += (annual_visits - OutOfPocketDefaults.VISIT_THRESHOLD) * OutOfPocketDefaults.PER_EXTRA_VISIT
    return costs
