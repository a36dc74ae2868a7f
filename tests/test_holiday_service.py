"""Tests for the cache-first holiday service."""

import httpx
import pytest

from calendar_app.errors import ProviderNotConfiguredError, UpstreamError
from calendar_app.models.schemas import Country
from calendar_app.services.holiday_service import (
    COUNTRIES_CACHE_KEY, DEFAULT_COUNTRIES, HolidayService,
)

from conftest import FakeProvider, holiday


def test_cache_key():
    assert HolidayService.cache_key("us", 2024, 2) == "holidays_US_2024_2"
    assert HolidayService.cache_key("GB", 2024) == "holidays_GB_2024_all"


class TestGetHolidays:

    @pytest.mark.asyncio
    async def test_fetches_once_then_serves_from_cache(self, service, provider):
        provider.holidays[("US", 2024, 2)] = [holiday("2024-02-19", "Presidents' Day")]

        first = await service.get_holidays("US", 2024, 2)
        second = await service.get_holidays("US", 2024, 2)

        assert first == second
        assert [h.name for h in first] == ["Presidents' Day"]
        assert provider.calls == [("US", 2024, 2)]

    @pytest.mark.asyncio
    async def test_empty_result_is_cached(self, service, provider):
        assert await service.get_holidays("US", 2024, 8) == []
        assert await service.get_holidays("US", 2024, 8) == []
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_refetches_after_expiry(self, service, provider, clock):
        await service.get_holidays("US", 2024, 2)
        clock.advance(61)
        await service.get_holidays("US", 2024, 2)
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        UpstreamError("API Error: quota exceeded"),
        httpx.ConnectError("connection refused"),
    ])
    async def test_stale_value_served_when_provider_fails(self, service, provider, clock, error):
        provider.holidays[("US", 2024, 2)] = [holiday("2024-02-19")]
        await service.get_holidays("US", 2024, 2)
        clock.advance(61)
        provider.error = error

        stale = await service.get_holidays("US", 2024, 2)

        assert [h.date for h in stale] == ["2024-02-19"]
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_error_raised_without_cached_value(self, service, provider):
        provider.error = UpstreamError("API Error: boom")
        with pytest.raises(UpstreamError):
            await service.get_holidays("US", 2024, 2)

    @pytest.mark.asyncio
    async def test_not_configured_propagates(self, service, provider):
        provider.error = ProviderNotConfiguredError("Calendarific API key is not configured")
        with pytest.raises(ProviderNotConfiguredError):
            await service.get_holidays("US", 2024)

    @pytest.mark.asyncio
    async def test_prewarm_reports_failures(self, service, provider):
        provider.holidays[("US", 2024, 1)] = [holiday("2024-01-01"), holiday("2024-01-15")]

        async def flaky(country, year, month=None):
            if country == "GB":
                raise UpstreamError("API Error: unsupported")
            return await FakeProvider.fetch_holidays(provider, country, year, month)

        provider.fetch_holidays = flaky
        results = await service.prewarm(["US", "GB"], 2024, 1)

        assert results == {"US": 2, "GB": None}
        assert service.cache.get("holidays_US_2024_1") is not None


class TestCountries:

    @pytest.mark.asyncio
    async def test_defaults_when_not_configured(self, cache):
        service = HolidayService(cache, FakeProvider(configured=False))
        countries = await service.get_supported_countries()

        assert len(countries) == len(DEFAULT_COUNTRIES) == 15
        assert countries[0].name == "Argentina"
        assert [c.name for c in countries] == sorted(c.name for c in countries)
        assert countries[0].flag == "https://flagsapi.com/AR/flat/32.png"

    @pytest.mark.asyncio
    async def test_defaults_when_provider_fails(self, service, provider):
        provider.error = httpx.ReadTimeout("timed out")
        countries = await service.get_supported_countries()
        assert len(countries) == 15
        assert not service.cache.has(COUNTRIES_CACHE_KEY)

    @pytest.mark.asyncio
    async def test_provider_countries_sorted_and_cached(self, service, provider):
        provider.countries = [Country(iso="NL", name="Netherlands"), Country(iso="BE", name="Belgium")]

        countries = await service.get_supported_countries()
        provider.countries = []

        assert [c.iso for c in countries] == ["BE", "NL"]
        assert await service.get_supported_countries() == countries

    @pytest.mark.asyncio
    async def test_popular_keeps_popular_order(self, cache):
        service = HolidayService(cache, FakeProvider(configured=False))
        popular = await service.popular_countries()
        assert [c.iso for c in popular[:3]] == ["US", "GB", "CA"]
        assert len(popular) == 15

    @pytest.mark.asyncio
    async def test_search_ranks_exact_then_prefix(self, cache):
        service = HolidayService(cache, FakeProvider(configured=False))

        united = await service.search_countries("united")
        assert [c.name for c in united] == ["United Kingdom", "United States"]

        us = await service.search_countries("us")
        assert us[0].iso == "US"
        assert "Australia" in [c.name for c in us]

    @pytest.mark.asyncio
    async def test_find_country(self, cache):
        service = HolidayService(cache, FakeProvider(configured=False))
        assert (await service.find_country("jp")).name == "Japan"
        assert await service.find_country("XX") is None


class TestCalendars:

    @pytest.mark.asyncio
    async def test_calendar_data(self, service, provider):
        provider.holidays[("US", 2024, 2)] = [holiday("2024-02-14", "Valentine")]

        data = await service.get_calendar_data("US", 2024, 2)

        assert data.month_name == "February"
        assert data.total_holidays == 1
        assert len(data.calendar) == 5
        stats = data.week_color_stats
        assert (stats.total_weeks, stats.default_weeks, stats.light_weeks, stats.dark_weeks) == (5, 4, 1, 0)

    @pytest.mark.asyncio
    async def test_quarter_calendar(self, service, provider):
        provider.holidays[("US", 2024, 1)] = [holiday("2024-01-01"), holiday("2024-01-15")]
        provider.holidays[("US", 2024, 2)] = [holiday("2024-02-19")]

        quarter = await service.get_quarter_calendar("US", 2024, 1)

        assert quarter.quarter_name == "First Quarter (Jan - Mar)"
        assert [m.month for m in quarter.months] == [1, 2, 3]
        assert quarter.total_holidays == 3
        assert provider.calls == [("US", 2024, 1), ("US", 2024, 2), ("US", 2024, 3)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quarter", [0, 5])
    async def test_quarter_out_of_range(self, service, quarter):
        with pytest.raises(ValueError):
            await service.get_quarter_calendar("US", 2024, quarter)
