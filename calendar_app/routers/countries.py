import httpx
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from calendar_app.errors import HolidayServiceError
from calendar_app.services.holiday_service import HolidayService
from calendar_app.services.validation import get_holiday_service

logger = logging.getLogger(__name__)

router = APIRouter()

SAMPLE_SIZE = 5


def _dump(countries) -> list:
    return [c.model_dump(mode="json") for c in countries]


@router.get("", summary="All supported countries")
async def get_countries(service: HolidayService = Depends(get_holiday_service)):
    """Sorted by name. Falls back to a built-in list when the provider is unavailable."""
    countries = await service.get_supported_countries()
    return {
        "success": True,
        "data":    {"countries": _dump(countries), "totalCountries": len(countries)},
        "message": f"Found {len(countries)} supported countries",
    }


@router.get("/popular", summary="Commonly used countries")
async def get_popular_countries(service: HolidayService = Depends(get_holiday_service)):
    countries = await service.popular_countries()
    return {
        "success": True,
        "data":    {"countries": _dump(countries), "totalCountries": len(countries)},
        "message": f"Found {len(countries)} popular countries",
    }


@router.get("/search/{query}", summary="Search countries by name or ISO code")
async def search_countries(query: str, service: HolidayService = Depends(get_holiday_service)):
    if len(query.strip()) < 2:
        raise HTTPException(status_code=400, detail="Query must be at least 2 characters long")
    countries = await service.search_countries(query)
    return {
        "success": True,
        "data": {
            "countries":      _dump(countries),
            "totalCountries": len(countries),
            "query":          query.strip(),
        },
        "message": f"Found {len(countries)} countries matching '{query.strip()}'",
    }


@router.get("/{iso}", summary="Country details with sample holidays")
async def get_country(iso: str, service: HolidayService = Depends(get_holiday_service)):
    if len(iso) != 2:
        raise HTTPException(status_code=400, detail="Country ISO code must be 2 characters long")

    country = await service.find_country(iso)
    if country is None:
        raise HTTPException(status_code=404, detail=f"Country with ISO code '{iso.upper()}' not found")

    year = date.today().year
    try:
        holidays = await service.get_holidays(country.iso, year)
    except (HolidayServiceError, httpx.HTTPError) as e:
        logger.info(f"[{country.iso}] No sample holidays: {e}")
        holidays = []

    return {
        "success": True,
        "data": {
            "country":               country.model_dump(mode="json"),
            "sampleYear":            year,
            "sampleHolidays":        [h.model_dump(mode="json") for h in holidays[:SAMPLE_SIZE]],
            "totalHolidaysThisYear": len(holidays),
        },
        "message": f"Country details for {country.name}",
    }
