"""Traditional insurance versus DPC + catastrophic cost comparison."""

from .estimator import (
    calculate_catastrophic_premium,
    calculate_dpc_fee,
    calculate_traditional_premium,
    estimate_dpc_costs,
    estimate_out_of_pocket_costs,
    estimate_traditional_costs,
)
from .factory import ComparisonService, create_comparison_service, create_drug_pricing_client
from .models import (
    ComparisonInput,
    ComparisonOptions,
    ComparisonResult,
    CostBreakdown,
    DataOrigin,
    DataSource,
    RecommendedPlan,
)
from .orchestrator import ApiAvailability, ComparisonOrchestrator

__all__ = [
    "ApiAvailability",
    "ComparisonInput",
    "ComparisonOptions",
    "ComparisonOrchestrator",
    "ComparisonResult",
    "ComparisonService",
    "CostBreakdown",
    "DataOrigin",
    "DataSource",
    "RecommendedPlan",
    "calculate_catastrophic_premium",
    "calculate_dpc_fee",
    "calculate_traditional_premium",
    "create_comparison_service",
    "create_drug_pricing_client",
    "estimate_dpc_costs",
    "estimate_out_of_pocket_costs",
    "estimate_traditional_costs",
]
