"""Tests for cost extraction from live plans."""

from __future__ import annotations

import pytest

from dpccompare.core.comparison.models import ComparisonInput
from dpccompare.core.comparison.plan_costs import (
    extract_catastrophic_costs,
    extract_copay_amount,
    extract_prescription_cost,
    extract_traditional_costs,
    parse_cost_sharing,
)
from dpccompare.services.marketplace.models import validate_plan


class TestParseCostSharing:
    """Test cost-sharing string parsing."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("$35", 35.0),
            ("$35 Copay after deductible", 35.0),
            ("$1,250.50 Copay", 1250.5),
            ("30% Coinsurance after deductible", 60.0),
            ("No Charge", 35.0),
            (None, 35.0),
            ("", 35.0),
        ],
    )
    def test_copay(self, text: str | None, expected: float) -> None:
        assert extract_copay_amount(text) == expected

    def test_dollar_amount_wins_over_percentage(self) -> None:
        assert parse_cost_sharing("20% Coinsurance, max $40", 200, 35) == 40.0

    def test_prescription_percentage_uses_drug_cost(self) -> None:
        assert extract_prescription_cost("50% Coinsurance") == 25.0
        assert extract_prescription_cost("No Charge after deductible") == 30.0


class TestExtractCosts:
    """Test annual cost breakdowns from plans."""

    def test_traditional_costs(self, silver_plan) -> None:
        plan = validate_plan(silver_plan)
        profile = ComparisonInput(
            age=40,
            zip_code="27701",
            state="NC",
            annual_doctor_visits=4,
            prescription_count=2,
        )

        costs = extract_traditional_costs(plan, profile)

        assert costs.premiums == 3600
        assert costs.deductible == 3000
        assert costs.copays == 140
        assert costs.prescriptions == 240
        assert costs.out_of_pocket == 380
        assert costs.total == 6980

    def test_catastrophic_costs(self, catastrophic_plan) -> None:
        plan = validate_plan(catastrophic_plan)

        costs = extract_catastrophic_costs(plan, dpc_monthly_fee=75)

        assert costs.premiums == 900
        assert costs.catastrophic_premium == 2520
        assert costs.deductible == 9450
        assert costs.out_of_pocket == 0
        assert costs.total == 3420

    def test_missing_individual_deductible_counts_as_zero(self, catastrophic_plan) -> None:
        raw = {**catastrophic_plan, "benefits": {"deductible": {"family": 18900}}}

        costs = extract_catastrophic_costs(validate_plan(raw), dpc_monthly_fee=75)

        assert costs.deductible == 0
