"""
Cost Comparison Constants

Assumptions used by the estimator and the plan cost extraction rules.
All amounts are US dollars.
"""


class TraditionalPlanDefaults:
    """Traditional insurance assumptions."""

    BASE_MONTHLY_PREMIUM = 400
    DEDUCTIBLE = 1500
    COPAY_PER_VISIT = 35
    GENERIC_RX_PER_MONTH = 30


class DpcPlanDefaults:
    """DPC membership and catastrophic plan assumptions."""

    BASE_MONTHLY_FEE = 75
    FEW_CONDITIONS_SURCHARGE = 10  # 1-2 chronic conditions
    MANY_CONDITIONS_SURCHARGE = 25  # more than 2
    MANY_CONDITIONS_THRESHOLD = 2
    CATASTROPHIC_PREMIUM_RATIO = 0.3
    CATASTROPHIC_DEDUCTIBLE = 8000
    DPC_RX_PER_MONTH = 15


class CostSharingDefaults:
    """Fallbacks for parsing marketplace cost-sharing strings."""

    AVERAGE_VISIT_COST = 200
    AVERAGE_GENERIC_DRUG_COST = 50
    DEFAULT_COPAY = 35
    DEFAULT_GENERIC_RX = 30


class OutOfPocketDefaults:
    """Health-profile out-of-pocket estimate."""

    BASE = 500
    PER_CHRONIC_CONDITION = 1000
    VISIT_THRESHOLD = 6
    PER_EXTRA_VISIT = 150


class ComparisonDefaults:
    """Marketplace request defaults used by the orchestrator."""

    INCOME = 50000
    PLAN_LIMIT = 5
    # Healthcare.gov caps /plans/search at 100 results per page
    MAX_PLAN_LIMIT = 100
    BENCHMARK_METAL = "silver"
    CATASTROPHIC_METAL = "catastrophic"
    MONTHS_PER_YEAR = 12


# (upper age bound exclusive, premium factor); the last factor applies above all bounds
AGE_PREMIUM_FACTORS: tuple[tuple[int, float], ...] = (
    (30, 0.8),
    (40, 0.9),
    (50, 1.0),
    (60, 1.3),
)
SENIOR_PREMIUM_FACTOR = 1.8

STATE_PREMIUM_MULTIPLIERS: dict[str, float] = {
    "CA": 1.2,
    "NY": 1.3,
    "FL": 1.1,
    "TX": 0.9,
}
