"""
Holiday Service
===============
Cache-first access to the holiday provider, plus calendar assembly.

  get_holidays           — cache hit, else provider fetch + cache set;
                           on provider failure serve the expired entry if any
  get_supported_countries — cached 24h; falls back to DEFAULT_COUNTRIES
  get_calendar_data      — one month grid with week colour stats
  get_quarter_calendar   — the three month grids of a quarter

Created once in the app lifespan and shared by every request.
"""

import calendar
import httpx
import logging
from typing import Dict, Iterable, List, Optional

from calendar_app.errors import HolidayServiceError
from calendar_app.models.schemas import (
    CalendarResponse, Country, HolidayRecord, QuarterCalendar, WeekColorStats,
)
from calendar_app.providers.base import BaseHolidayProvider
from calendar_app.providers.calendarific import FLAG_URL
from calendar_app.services.cache import HolidayCache
from calendar_app.services.calendar_builder import build_calendar

logger = logging.getLogger(__name__)

COUNTRIES_CACHE_KEY = "supported_countries"
COUNTRIES_TTL_SECONDS = 24 * 60 * 60

POPULAR_CODES = [
    "US", "GB", "CA", "AU", "DE", "FR", "IT", "ES",
    "JP", "IN", "CN", "BR", "MX", "AR", "ZA",
]

DEFAULT_COUNTRIES = [
    Country(iso=iso, name=name, flag=FLAG_URL.format(iso=iso))
    for iso, name in [
        ("US", "United States"),
        ("CA", "Canada"),
        ("GB", "United Kingdom"),
        ("FR", "France"),
        ("DE", "Germany"),
        ("IT", "Italy"),
        ("ES", "Spain"),
        ("AU", "Australia"),
        ("JP", "Japan"),
        ("IN", "India"),
        ("CN", "China"),
        ("BR", "Brazil"),
        ("MX", "Mexico"),
        ("AR", "Argentina"),
        ("ZA", "South Africa"),
    ]
]

QUARTER_NAMES = {
    1: "First Quarter (Jan - Mar)",
    2: "Second Quarter (Apr - Jun)",
    3: "Third Quarter (Jul - Sep)",
    4: "Fourth Quarter (Oct - Dec)",
}

# Errors that trigger the stale-cache fallback
FETCH_ERRORS = (HolidayServiceError, httpx.HTTPError)


class HolidayService:
    def __init__(self, cache: HolidayCache, provider: BaseHolidayProvider):
        self.cache = cache
        self.provider = provider

    @staticmethod
    def cache_key(country: str, year: int, month: Optional[int] = None) -> str:
        return f"holidays_{country.upper()}_{year}_{month or 'all'}"

    # ──────────────────────────────────────────
    # Holidays
    # ──────────────────────────────────────────

    async def get_holidays(
        self, country: str, year: int, month: Optional[int] = None
    ) -> List[HolidayRecord]:
        key = self.cache_key(country, year, month)
        # Read the stale copy first: a plain get() evicts expired entries.
        stale = self.cache.get(key, include_expired=True)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            holidays = await self.provider.fetch_holidays(country, year, month)
        except FETCH_ERRORS as e:
            logger.error(f"[{country}] Holiday fetch failed ({year}/{month or 'all'}): {e}")
            if stale is not None:
                logger.warning(f"[{country}] Returning expired cache data for {key}")
                return stale
            raise

        self.cache.set(key, holidays)
        logger.info(f"[{country}] {len(holidays)} holidays cached for {year}/{month or 'all'}.")
        return holidays

    async def prewarm(
        self, countries: Iterable[str], year: int, month: Optional[int] = None
    ) -> Dict[str, Optional[int]]:
        """Fetch each country into the cache. Maps country → holiday count, None on failure."""
        results: Dict[str, Optional[int]] = {}
        for country in countries:
            try:
                results[country] = len(await self.get_holidays(country, year, month))
                logger.info(f"[{country}] Prewarmed {year}/{month or 'all'}: {results[country]} holidays")
            except FETCH_ERRORS as e:
                logger.warning(f"[{country}] Prewarm failed: {e}")
                results[country] = None
        return results

    # ──────────────────────────────────────────
    # Countries
    # ──────────────────────────────────────────

    async def get_supported_countries(self) -> List[Country]:
        cached = self.cache.get(COUNTRIES_CACHE_KEY)
        if cached is not None:
            return cached

        if not self.provider.is_configured:
            return _sorted_by_name(DEFAULT_COUNTRIES)

        try:
            countries = await self.provider.fetch_countries()
        except FETCH_ERRORS as e:
            logger.error(f"Country list fetch failed, using defaults: {e}")
            return _sorted_by_name(DEFAULT_COUNTRIES)

        countries = _sorted_by_name(countries)
        self.cache.set(COUNTRIES_CACHE_KEY, countries, COUNTRIES_TTL_SECONDS)
        return countries

    async def popular_countries(self) -> List[Country]:
        by_iso = {c.iso: c for c in await self.get_supported_countries()}
        return [by_iso[code] for code in POPULAR_CODES if code in by_iso]

    async def search_countries(self, query: str) -> List[Country]:
        """Name or ISO substring match; exact matches first, then prefixes, then by name."""
        needle = query.strip().lower()
        matches = [
            c for c in await self.get_supported_countries()
            if needle in c.name.lower() or needle in c.iso.lower()
        ]

        def rank(c: Country):
            name, iso = c.name.lower(), c.iso.lower()
            if needle in (name, iso):
                return (0, name)
            if name.startswith(needle) or iso.startswith(needle):
                return (1, name)
            return (2, name)

        return sorted(matches, key=rank)

    async def find_country(self, iso: str) -> Optional[Country]:
        iso = iso.upper()
        return next((c for c in await self.get_supported_countries() if c.iso == iso), None)

    # ──────────────────────────────────────────
    # Calendars
    # ──────────────────────────────────────────

    async def get_calendar_data(self, country: str, year: int, month: int) -> CalendarResponse:
        holidays = await self.get_holidays(country, year, month)
        grid = build_calendar(year, month, holidays)
        return CalendarResponse(
            country=country,
            year=year,
            month=month,
            month_name=grid.month_name,
            holidays=holidays,
            calendar=grid.weeks,
            total_holidays=len(holidays),
            week_color_stats=WeekColorStats.from_weeks(grid.weeks),
        )

    async def get_quarter_calendar(self, country: str, year: int, quarter: int) -> QuarterCalendar:
        if quarter not in QUARTER_NAMES:
            raise ValueError(f"Quarter must be between 1 and 4, got {quarter}")
        first_month = (quarter - 1) * 3 + 1
        months = [
            await self.get_calendar_data(country, year, month)
            for month in range(first_month, first_month + 3)
        ]
        return QuarterCalendar(
            country=country,
            year=year,
            quarter=quarter,
            quarter_name=QUARTER_NAMES[quarter],
            months=months,
            total_holidays=sum(m.total_holidays for m in months),
        )


def month_name(month: int) -> str:
    return calendar.month_name[month]


def _sorted_by_name(countries: List[Country]) -> List[Country]:
    return sorted(countries, key=lambda c: c.name.lower())
