import httpx
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from calendar_app.errors import HolidayServiceError, ProviderNotConfiguredError, UpstreamError
from calendar_app.models.schemas import HolidayRecord
from calendar_app.services.cache import HolidayCache
from calendar_app.services.calendar_builder import build_calendar
from calendar_app.services.consecutive import find_consecutive_weeks
from calendar_app.services.holiday_service import HolidayService, month_name
from calendar_app.services.validation import (
    get_cache, get_holiday_service, holiday_params, require_development, validate_quarter,
)

router = APIRouter()

PREWARM_COUNTRIES = ["US", "GB", "CA", "AU", "DE", "FR"]


def _dump(models) -> list:
    return [m.model_dump(mode="json", by_alias=True) for m in models]


def _service_error(e: Exception) -> HTTPException:
    if isinstance(e, ProviderNotConfiguredError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, (UpstreamError, httpx.HTTPError)):
        return HTTPException(status_code=502, detail=f"Holiday provider error: {e}")
    return HTTPException(status_code=500, detail=str(e) or "Failed to fetch holidays")


async def _fetch(service: HolidayService, country: str, year: int, month: Optional[int] = None) -> List[HolidayRecord]:
    try:
        return await service.get_holidays(country, year, month)
    except (HolidayServiceError, httpx.HTTPError) as e:
        raise _service_error(e)


# ──────────────────────────────────────────────
# Development-only cache management
# Must stay above /{country}/{year}, which also matches /stats/cache.
# ──────────────────────────────────────────────

@router.get("/stats/cache", summary="Cache statistics (development only)",
            dependencies=[Depends(require_development)])
async def get_cache_stats(cache: HolidayCache = Depends(get_cache)):
    return {
        "success": True,
        "data":    {"cache": cache.stats(), "keys": cache.keys()},
        "message": "Cache statistics",
    }


@router.delete("/cache/{key}", summary="Delete one cache key (development only)",
               dependencies=[Depends(require_development)])
async def delete_cache_key(key: str, cache: HolidayCache = Depends(get_cache)):
    deleted = cache.delete(key)
    return {
        "success": True,
        "message": f"Cache key '{key}' deleted" if deleted else f"Cache key '{key}' not found",
    }


@router.delete("/cache", summary="Clear the cache (development only)",
               dependencies=[Depends(require_development)])
async def clear_cache(cache: HolidayCache = Depends(get_cache)):
    cache.clear()
    return {"success": True, "message": "All cache cleared"}


@router.post("/prewarm", summary="Prewarm popular countries (development only)",
             dependencies=[Depends(require_development)])
async def prewarm_cache(
    countries: Optional[List[str]] = Body(default=None, embed=True),
    service: HolidayService = Depends(get_holiday_service),
):
    """Fetch the current month for a set of countries so the first requests are cache hits."""
    today = date.today()
    targets = [c.upper() for c in countries] if countries else PREWARM_COUNTRIES
    results = await service.prewarm(targets, today.year, today.month)
    return {
        "success": True,
        "data": {
            "countries": targets,
            "year":      today.year,
            "month":     today.month,
            "results":   results,
        },
        "message": f"Cache prewarmed for {len(targets)} countries for {today.year}/{today.month}",
    }


# ──────────────────────────────────────────────
# Calendars
# ──────────────────────────────────────────────

@router.get("/calendar/{country}/{year}/{month}", summary="Month calendar with week colouring")
async def get_calendar(
    country: str, year: str, month: str,
    service: HolidayService = Depends(get_holiday_service),
):
    """
    Monday-first week grid for one month.
    Weeks are coloured by holiday count (default / light / dark) and carry
    their consecutive-holiday runs.
    """
    params = holiday_params(country, year, month)
    try:
        data = await service.get_calendar_data(params.country, params.year, params.month)
    except (HolidayServiceError, httpx.HTTPError) as e:
        raise _service_error(e)
    return {
        "success": True,
        "data":    data.model_dump(mode="json", by_alias=True),
        "message": f"Calendar data for {data.month_name} {params.year} in {params.country}",
    }


@router.get("/calendar/{country}/{year}/{month}/consecutive", summary="Weeks with consecutive holidays")
async def get_consecutive_weeks(
    country: str, year: str, month: str,
    service: HolidayService = Depends(get_holiday_service),
):
    params = holiday_params(country, year, month)
    holidays = await _fetch(service, params.country, params.year, params.month)
    grid = build_calendar(params.year, params.month, holidays)
    weeks = find_consecutive_weeks(grid)
    return {
        "success": True,
        "data": {
            "country":   params.country,
            "year":      params.year,
            "month":     params.month,
            "monthName": grid.month_name,
            "weeks":     _dump(weeks),
            "totalWeeks": len(weeks),
        },
        "message": f"Found {len(weeks)} weeks with consecutive holidays in {grid.month_name} {params.year}",
    }


@router.get("/quarter/{country}/{year}/{quarter}", summary="Three month calendars of a quarter")
async def get_quarter(
    country: str, year: str, quarter: str,
    service: HolidayService = Depends(get_holiday_service),
):
    params = holiday_params(country, year)
    quarter_value, err = validate_quarter(quarter)
    if err:
        raise HTTPException(status_code=400, detail={"message": "Validation failed", "errors": [err]})
    try:
        data = await service.get_quarter_calendar(params.country, params.year, quarter_value)
    except (HolidayServiceError, httpx.HTTPError) as e:
        raise _service_error(e)
    return {
        "success": True,
        "data":    data.model_dump(mode="json", by_alias=True),
        "message": f"{data.quarter_name} {params.year} in {params.country}",
    }


# ──────────────────────────────────────────────
# Holiday lists
# ──────────────────────────────────────────────

@router.get("/{country}/{year}", summary="All holidays of a year")
async def get_year_holidays(
    country: str, year: str,
    service: HolidayService = Depends(get_holiday_service),
):
    params = holiday_params(country, year)
    holidays = await _fetch(service, params.country, params.year)
    return {
        "success": True,
        "data": {
            "country":       params.country,
            "year":          params.year,
            "totalHolidays": len(holidays),
            "holidays":      _dump(holidays),
        },
        "message": f"Found {len(holidays)} holidays for {params.country} in {params.year}",
    }


@router.get("/{country}/{year}/{month}", summary="Holidays of one month")
async def get_month_holidays(
    country: str, year: str, month: str,
    service: HolidayService = Depends(get_holiday_service),
):
    params = holiday_params(country, year, month)
    holidays = await _fetch(service, params.country, params.year, params.month)
    name = month_name(params.month)
    return {
        "success": True,
        "data": {
            "country":       params.country,
            "year":          params.year,
            "month":         params.month,
            "monthName":     name,
            "totalHolidays": len(holidays),
            "holidays":      _dump(holidays),
        },
        "message": f"Found {len(holidays)} holidays for {params.country} in {name} {params.year}",
    }
