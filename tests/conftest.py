"""
Pytest configuration and shared fixtures for dpccompare tests.

Network access is never used: HTTP clients get their ``_send`` hook replaced
by an AsyncMock returning ``(status, reason, body)`` tuples.
"""

from __future__ import annotations

import os
from datetime import date
from unittest.mock import AsyncMock

import pytest

from dpccompare.services.http_client import JsonHttpClient

# Settings must never pick up a developer's real key
for _name in ("HEALTHCARE_GOV_API_KEY", "DPC_COMPARE_API__MARKETPLACE__API_KEY", "DPC_COMPARE_CONFIG"):
    os.environ.pop(_name, None)


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeToday:
    """Manually advanced calendar date."""

    def __init__(self, start: date = date(2025, 1, 15)) -> None:
        self.today = start

    def __call__(self) -> date:
        return self.today


def make_http_client(*responses: tuple[int, str, object], base_url: str = "https://api.test") -> JsonHttpClient:
    """Create a JsonHttpClient whose transport replays the given responses."""
    client = JsonHttpClient(base_url=base_url, timeout=5)
    client._send = AsyncMock(side_effect=list(responses))  # type: ignore[method-assign]
    return client


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_today() -> FakeToday:
    return FakeToday()


@pytest.fixture
def census_payload() -> dict:
    """Census geocoder answer for Beverly Hills, CA."""
    return {
        "result": {
            "addressMatches": [
                {
                    "geographies": {
                        "Counties": [
                            {
                                "STATE": "06",
                                "COUNTY": "037",
                                "NAME": "Los Angeles County",
                            }
                        ]
                    }
                }
            ]
        }
    }


@pytest.fixture
def silver_plan() -> dict:
    """Raw benchmark plan as returned by /plans/search."""
    return {
        "id": "12345NC0010001",
        "name": "Blue Silver 3000",
        "metal_level": "Silver",
        "type": "HMO",
        "premium": 420.0,
        "premium_w_credit": 300.0,
        "issuer": {"id": "12345", "name": "Blue Cross NC"},
        "benefits": {
            "deductible": {"individual": 3000},
            "primary_care_visit": "$35 Copay after deductible",
            "generic_drugs": "$10",
        },
    }


@pytest.fixture
def catastrophic_plan() -> dict:
    return {
        "id": "12345NC0020002",
        "name": "Catastrophic Saver",
        "metal_level": "Catastrophic",
        "type": "EPO",
        "premium": 210.0,
        "benefits": {
            "deductible": {"individual": 9450},
            "primary_care_visit": "No Charge after deductible",
            "generic_drugs": "No Charge after deductible",
        },
    }


@pytest.fixture
def fake_http():
    """Factory for JsonHttpClient instances replaying canned responses."""
    return make_http_client
