"""
Calendarific Holiday Provider
=============================
Holidays:  GET {base}/holidays?api_key=..&country=us&year=2024[&month=2]&type=national
Countries: GET {base}/countries?api_key=..

Every response is wrapped as { meta: {code, error_detail}, response: {...} };
meta.code other than 200 is an API error even when the HTTP status is 200.

Holiday entry fields used:
  name           — display name
  description    — long text (falls back to name)
  date.iso       — "2024-02-14" or a full timestamp for seasons/observances
  type           — list of tags, e.g. ["National holiday"]
  primary_type   — main tag
  canonical_url, urlid, locations, states
"""

import httpx
import logging
import os
from typing import List, Optional

from calendar_app.errors import ProviderNotConfiguredError, UpstreamError
from calendar_app.models.schemas import Country, HolidayRecord
from calendar_app.providers.base import BaseHolidayProvider

logger = logging.getLogger(__name__)

API_KEY  = os.getenv("CALENDARIFIC_API_KEY", "")
BASE_URL = os.getenv("CALENDARIFIC_BASE_URL", "https://calendarific.com/api/v2")

PLACEHOLDER_KEY = "your_api_key_here"
REQUEST_TIMEOUT = 10
FLAG_URL = "https://flagsapi.com/{iso}/flat/32.png"


class CalendarificProvider(BaseHolidayProvider):
    provider_id   = "calendarific"
    provider_name = "Calendarific"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = API_KEY if api_key is None else api_key
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self._transport = transport
        if not self.is_configured:
            logger.warning("[Calendarific] API key not configured — set CALENDARIFIC_API_KEY")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_KEY

    async def _get(self, path: str, params: dict) -> dict:
        """GET an endpoint and return its `response` object."""
        if not self.is_configured:
            raise ProviderNotConfiguredError("Calendarific API key is not configured")

        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=self._transport) as client:
            resp = await client.get(
                f"{self.base_url}/{path}",
                params={"api_key": self.api_key, **params},
            )
            resp.raise_for_status()
            try:
                payload = resp.json()
            except ValueError as e:
                raise UpstreamError(f"API Error: invalid JSON ({e})") from e

        if not isinstance(payload, dict):
            raise UpstreamError("API Error: unexpected response shape")
        meta = payload.get("meta") or {}
        if meta.get("code") != 200:
            raise UpstreamError(f"API Error: {meta.get('error_detail') or 'Unknown error'}")
        response = payload.get("response")
        if not isinstance(response, dict):
            raise UpstreamError("API Error: response body missing")
        return response

    # ──────────────────────────────────────────
    # Holidays
    # ──────────────────────────────────────────

    async def fetch_holidays(
        self, country: str, year: int, month: Optional[int] = None
    ) -> List[HolidayRecord]:
        params = {"country": country.lower(), "year": year, "type": "national"}
        if month:
            params["month"] = month

        logger.info(f"[Calendarific] Fetching holidays {country}/{year}/{month or 'all'}")
        response = await self._get("holidays", params)

        holidays: List[HolidayRecord] = []
        for entry in response.get("holidays") or []:
            try:
                holidays.append(HolidayRecord.from_provider(entry))
            except ValueError as e:
                logger.warning(f"[Calendarific] Dropping holiday {entry.get('name')!r}: {e}")

        logger.info(f"[Calendarific] {len(holidays)} holidays fetched for {country}/{year}.")
        return holidays

    # ──────────────────────────────────────────
    # Countries
    # ──────────────────────────────────────────

    async def fetch_countries(self) -> List[Country]:
        logger.info("[Calendarific] Fetching supported countries")
        response = await self._get("countries", {})

        countries: List[Country] = []
        for entry in response.get("countries") or []:
            iso = (entry.get("iso-3166") or "").upper()
            if not iso:
                continue
            countries.append(Country(
                iso=iso,
                name=entry.get("country_name", iso),
                supported_languages=entry.get("supported_languages"),
                flag=FLAG_URL.format(iso=iso),
            ))

        logger.info(f"[Calendarific] {len(countries)} countries fetched.")
        return countries
