"""
Request helpers
===============
Path-parameter validation and access to the shared services.

  validate_country / validate_year / validate_month / validate_quarter
      — return the cleaned value or an error string
  holiday_params
      — collects every error and raises HTTPException(400) listing them
  get_holiday_service / get_cache
      — the instances created in the app lifespan (app.state)
"""

import os
import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from fastapi import Depends, HTTPException, Request

from calendar_app.services.cache import HolidayCache
from calendar_app.services.holiday_service import HolidayService

APP_ENV  = os.getenv("APP_ENV", "production")
MIN_YEAR = 2000
MAX_YEARS_AHEAD = 5

_COUNTRY_RE = re.compile(r"^[A-Z]{2}$")

Result = Tuple[Optional[object], Optional[str]]


@dataclass(frozen=True)
class HolidayParams:
    country: str
    year: int
    month: Optional[int] = None


def validate_country(country: Optional[str]) -> Result:
    if not country or not country.strip():
        return None, "Country code is required"
    code = country.strip().upper()
    if len(code) != 2:
        return None, "Country code must be 2 characters long (ISO 3166-1 alpha-2)"
    if not _COUNTRY_RE.match(code):
        return None, "Country code must contain only letters"
    return code, None


def validate_year(year: Optional[str]) -> Result:
    if year is None or not str(year).strip():
        return None, "Year is required"
    try:
        value = int(str(year).strip())
    except ValueError:
        return None, "Year must be a valid number"
    max_year = date.today().year + MAX_YEARS_AHEAD
    if not MIN_YEAR <= value <= max_year:
        return None, f"Year must be between {MIN_YEAR} and {max_year}"
    return value, None


def validate_month(month: Optional[str]) -> Result:
    if month is None or not str(month).strip():
        return None, "Month is required"
    try:
        value = int(str(month).strip())
    except ValueError:
        return None, "Month must be a valid number"
    if not 1 <= value <= 12:
        return None, "Month must be between 1 and 12"
    return value, None


def validate_quarter(quarter: Optional[str]) -> Result:
    try:
        value = int(str(quarter).strip())
    except ValueError:
        return None, "Quarter must be a valid number"
    if not 1 <= value <= 4:
        return None, "Quarter must be between 1 and 4"
    return value, None


def holiday_params(country: str, year: str, month: Optional[str] = None) -> HolidayParams:
    """Validate route parameters; raise 400 with every error found."""
    errors: List[str] = []
    country_value, err = validate_country(country)
    if err:
        errors.append(err)
    year_value, err = validate_year(year)
    if err:
        errors.append(err)
    month_value = None
    if month is not None:
        month_value, err = validate_month(month)
        if err:
            errors.append(err)

    if errors:
        raise HTTPException(status_code=400, detail={"message": "Validation failed", "errors": errors})
    return HolidayParams(country=country_value, year=year_value, month=month_value)


def require_development() -> None:
    """Cache management endpoints are only exposed when APP_ENV=development."""
    if APP_ENV != "development":
        raise HTTPException(status_code=403, detail="Only available in development mode.")


def get_holiday_service(request: Request) -> HolidayService:
    service = getattr(request.app.state, "holiday_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Holiday service not initialised.")
    return service


def get_cache(service: HolidayService = Depends(get_holiday_service)) -> HolidayCache:
    return service.cache
