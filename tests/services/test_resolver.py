"""Tests for the ZIP to county resolution cascade."""

from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import pytest

from dpccompare.services.geo.census import CensusGeocoder, FipsLookupResult
from dpccompare.services.geo.resolver import GeoResolver, ResolutionTier
from dpccompare.services.geo.tables import normalize_zip, state_for_zip
from dpccompare.services.rate_gate import RateGate
from dpccompare.services.ttl_cache import TTLCache
from dpccompare.shared.errors import ErrorCode, InfrastructureError


def _fips(county_fips: str) -> FipsLookupResult:
    return FipsLookupResult(
        county_fips=county_fips,
        state_fips=county_fips[:2],
        county_name="Test County",
        state_name="",
        state_abbrev="",
    )


@pytest.fixture
def geocoder() -> Mock:
    mock = Mock(spec=CensusGeocoder)
    mock.lookup_fips = AsyncMock(return_value=None)
    mock.close = AsyncMock()
    return mock


class TestGeoResolver:
    """Test tier ordering and the write-through of live results."""

    @pytest.mark.asyncio
    async def test_static_table_answers_before_network(self, geocoder) -> None:
        resolver = GeoResolver(geocoder=geocoder)

        resolution = await resolver.resolve_county("27701")

        assert resolution.county_fips == "37063"
        assert resolution.tier == ResolutionTier.STATIC_FALLBACK
        geocoder.lookup_fips.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_live_result_written_through_to_runtime_cache(self, geocoder) -> None:
        geocoder.lookup_fips.return_value = _fips("37081")
        resolver = GeoResolver(geocoder=geocoder)

        first = await resolver.resolve_county("27401")
        second = await resolver.resolve_county("27401")

        assert first.tier == ResolutionTier.LIVE_GEOCODER
        assert second.tier == ResolutionTier.RUNTIME_CACHE
        assert second.county_fips == "37081"
        assert geocoder.lookup_fips.await_count == 1

    @pytest.mark.asyncio
    async def test_runtime_cache_wins_over_static_table(self, geocoder) -> None:
        resolver = GeoResolver(geocoder=geocoder)
        resolver.add_mapping("27701", "37135")

        resolution = await resolver.resolve_county("27701")

        assert resolution.county_fips == "37135"
        assert resolution.tier == ResolutionTier.RUNTIME_CACHE

    @pytest.mark.asyncio
    async def test_denied_gate_falls_back_to_state_default_without_caching(self, fake_today) -> None:
        gate = RateGate(max_daily_budget=1, today=fake_today)
        gate.try_consume()
        live = CensusGeocoder(rate_gate=gate, http=Mock())
        resolver = GeoResolver(geocoder=live, fallback_table={})

        resolution = await resolver.resolve_county("90210")

        assert resolution.county_fips == "06037"
        assert resolution.tier == ResolutionTier.STATE_DEFAULT
        assert resolution.state == "CA"
        assert len(resolver.runtime_cache) == 0
        assert not live.is_cached("90210")

    @pytest.mark.asyncio
    async def test_geocoder_exception_is_contained(self, geocoder) -> None:
        geocoder.lookup_fips.side_effect = RuntimeError("boom")
        resolver = GeoResolver(geocoder=geocoder, fallback_table={})

        resolution = await resolver.resolve_county("77002")

        assert resolution.county_fips == "48201"
        assert resolution.tier == ResolutionTier.STATE_DEFAULT

    @pytest.mark.asyncio
    async def test_geocoder_domain_error_is_contained(self, geocoder) -> None:
        geocoder.lookup_fips.side_effect = InfrastructureError(ErrorCode.GEOCODING_FAILED, "down")
        resolver = GeoResolver(geocoder=geocoder, fallback_table={})

        resolution = await resolver.resolve_county("10002")

        assert resolution.county_fips == "36061"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("zip_code", "state_hint", "expected"),
        [
            ("abc", None, "37063"),
            ("abc", "tx", "48201"),
            ("9021", None, "06037"),
            ("902", "CA", "06037"),
            ("", None, "37063"),
        ],
    )
    async def test_malformed_zip_goes_straight_to_state_default(
        self, geocoder, zip_code: str, state_hint: str | None, expected: str
    ) -> None:
        resolver = GeoResolver(geocoder=geocoder)

        resolution = await resolver.resolve_county(zip_code, state_hint=state_hint)

        assert resolution.county_fips == expected
        assert resolution.tier == ResolutionTier.STATE_DEFAULT
        geocoder.lookup_fips.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zip_prefix_beats_state_hint(self) -> None:
        resolver = GeoResolver(fallback_table={})

        assert await resolver.resolve_county_fips("90211", state_hint="NC") == "06037"

    @pytest.mark.asyncio
    async def test_without_geocoder_skips_live_tier(self) -> None:
        resolver = GeoResolver(runtime_cache=TTLCache(ttl_seconds=60), fallback_table={})

        resolution = await resolver.resolve_county("27401")

        assert resolution.tier == ResolutionTier.STATE_DEFAULT
        assert resolution.county_fips == "37063"

    def test_add_mapping_ignores_invalid_input(self) -> None:
        resolver = GeoResolver()
        resolver.add_mapping("bad", "37063")
        resolver.add_mapping("27401", "3706")

        assert resolver.stats()["runtime_cache_size"] == 0

    @pytest.mark.asyncio
    async def test_stats_count_tiers(self, geocoder) -> None:
        resolver = GeoResolver(geocoder=geocoder)
        await resolver.resolve_county("27701")
        await resolver.resolve_county("bad")

        tiers = resolver.stats()["tiers"]
        assert tiers["static_fallback"] == 1
        assert tiers["state_default"] == 1
        await resolver.close()
        geocoder.close.assert_awaited_once()


class TestResolutionProperties:
    """Every input resolves to a 5-digit county identifier."""

    @pytest.mark.asyncio
    async def test_sweep_of_valid_zips(self) -> None:
        resolver = GeoResolver()

        for prefix in range(0, 100):
            county = await resolver.resolve_county_fips(f"{prefix:02d}123")
            assert len(county) == 5
            assert county.isdigit()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("zip_code", ["1", "123456", "ABCDE", "12 45", "27701-12", "-", "２７７０１"])
    async def test_malformed_zips_still_resolve(self, zip_code: str) -> None:
        resolution = await GeoResolver().resolve_county(zip_code)

        assert len(resolution.county_fips) == 5
        assert resolution.tier == ResolutionTier.STATE_DEFAULT


class TestZipHelpers:
    """Test ZIP normalization and prefix lookup."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("27701", "27701"),
            (" 27701 ", "27701"),
            ("90210-1234", "90210"),
            ("9021", None),
            ("902101", None),
            ("90210-12", None),
            ("abcde", None),
            ("", None),
            (None, None),
        ],
    )
    def test_normalize_zip(self, raw: str | None, expected: str | None) -> None:
        assert normalize_zip(raw) == expected

    def test_state_for_zip_uses_first_two_digits(self) -> None:
        assert state_for_zip("90001") == "CA"
        assert state_for_zip("9") is None
