"""Tests for NADAC drug pricing lookups."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from dpccompare.services.drug_pricing.nadac import (
    DrugPricingClient,
    calculate_retail_price,
    parse_nadac_record,
)
from dpccompare.services.http_client import JsonHttpClient
from dpccompare.services.ttl_cache import TTLCache
from dpccompare.shared.errors import DrugPricingError

METFORMIN = {
    "ndc": "00093104801",
    "ndc_description": "METFORMIN HCL 500 MG TABLET",
    "nadac_per_unit": "0.05",
    "pricing_unit": "EA",
    "classification_for_rate_setting": "G",
    "otc": "N",
    "effective_date": "2025-01-08",
}


@pytest.fixture
def make_client(fake_http):
    def _make(*responses) -> DrugPricingClient:
        return DrugPricingClient(cache=TTLCache(ttl_seconds=60, name="nadac"), http=fake_http(*responses))

    return _make


class TestRetailPricing:
    """Test markup and dispensing fee arithmetic."""

    def test_generic_markup(self) -> None:
        assert calculate_retail_price(0.05, 30, is_generic=True) == 11.80

    def test_brand_markup(self) -> None:
        assert calculate_retail_price(2.0, 30, is_generic=False) == 79.00

    def test_discount_pharmacy_markup(self) -> None:
        assert calculate_retail_price(2.0, 30, is_generic=False, pharmacy_type="discount") == 76.00

    def test_parse_record(self) -> None:
        drug = parse_nadac_record(METFORMIN)

        assert drug.is_generic is True
        assert drug.is_otc is False
        assert drug.estimated_30_day_wholesale == 1.50
        assert drug.estimated_30_day_retail == 11.80
        assert drug.estimated_90_day_wholesale == 4.50
        assert drug.estimated_90_day_retail == 13.86
        assert drug.estimated_retail_per_unit == pytest.approx(0.06)
        assert drug.source == "NADAC"

    def test_parse_record_with_bad_price(self) -> None:
        drug = parse_nadac_record({**METFORMIN, "nadac_per_unit": "n/a"})

        assert drug.nadac_per_unit == 0.0
        assert drug.estimated_30_day_retail == 10.00


class TestDrugPricingClient:
    """Test datastore queries and caching."""

    @pytest.mark.asyncio
    async def test_search_builds_like_condition(self, make_client) -> None:
        client = make_client((200, "OK", {"results": [METFORMIN], "count": 12}))

        result = await client.search_drugs(" metformin ", limit=5)

        assert result.total_count == 12
        assert result.cached is False
        assert result.drugs[0].ndc == "00093104801"
        params = client.http._send.await_args.args[2]
        assert params["conditions[0][value]"] == "%METFORMIN%"
        assert params["conditions[0][operator]"] == "LIKE"
        assert params["limit"] == 5

    @pytest.mark.asyncio
    async def test_search_served_from_cache(self, make_client) -> None:
        client = make_client((200, "OK", {"results": [METFORMIN]}))

        await client.search_drugs("metformin", limit=5)
        again = await client.search_drugs("METFORMIN", limit=5)

        assert again.cached is True
        assert client.http._send.await_count == 1
        assert client.cache_stats()["keys"] == ["search:METFORMIN:5"]

    @pytest.mark.asyncio
    async def test_search_failure_raises(self, make_client) -> None:
        client = make_client((500, "Internal Server Error", None))

        with pytest.raises(DrugPricingError):
            await client.search_drugs("metformin")

    @pytest.mark.asyncio
    async def test_lookup_by_ndc_strips_formatting(self, make_client) -> None:
        client = make_client((200, "OK", {"results": [METFORMIN]}))

        drug = await client.lookup_by_ndc("0093-1048-01")

        assert drug is not None and drug.drug_name.startswith("METFORMIN")
        params = client.http._send.await_args.args[2]
        assert params["conditions[0][value]"] == "0093104801"
        assert params["conditions[0][operator]"] == "="

    @pytest.mark.asyncio
    async def test_lookup_by_ndc_failure_returns_none(self, make_client) -> None:
        client = make_client((503, "Service Unavailable", None), (200, "OK", {"results": []}))

        assert await client.lookup_by_ndc("00093104801") is None
        assert await client.lookup_by_ndc("00093104801") is None

    @pytest.mark.asyncio
    async def test_multiple_drugs_maps_failures_to_none(self) -> None:
        async def respond(method, url, params, json_body=None):
            if "LISINOPRIL" in params["conditions[0][value]"]:
                return 500, "Internal Server Error", None
            return 200, "OK", {"results": [METFORMIN]}

        http = JsonHttpClient(base_url="https://api.test", timeout=5)
        http._send = AsyncMock(side_effect=respond)  # type: ignore[method-assign]
        client = DrugPricingClient(cache=TTLCache(ttl_seconds=60), http=http)

        with patch("dpccompare.services.drug_pricing.nadac.asyncio.sleep") as sleep:
            results = await client.get_pricing_for_multiple_drugs(["metformin", "lisinopril"])

        assert results["metformin"] is not None
        assert results["lisinopril"] is None
        sleep.assert_awaited_once()

    def test_client_exposes_retail_calculation(self) -> None:
        client = DrugPricingClient(cache=TTLCache(ttl_seconds=60))

        assert client.calculate_retail_price(0.05, 30, True) == 11.80
