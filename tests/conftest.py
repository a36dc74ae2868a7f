"""Pytest configuration for the holiday calendar tests."""

import pytest
from fastapi.testclient import TestClient
from typing import Dict, List, Optional, Tuple

from calendar_app.main import app
from calendar_app.models.schemas import Country, HolidayRecord
from calendar_app.providers.base import BaseHolidayProvider
from calendar_app.services.cache import HolidayCache
from calendar_app.services.holiday_service import HolidayService
from calendar_app.services.validation import get_holiday_service


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeProvider(BaseHolidayProvider):
    provider_id = "fake"
    provider_name = "Fake"

    def __init__(self, configured: bool = True):
        self.holidays: Dict[Tuple[str, int, Optional[int]], List[HolidayRecord]] = {}
        self.countries: List[Country] = []
        self.error: Optional[Exception] = None
        self.calls: List[Tuple[str, int, Optional[int]]] = []
        self.configured = configured

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def fetch_holidays(self, country, year, month=None):
        self.calls.append((country, year, month))
        if self.error:
            raise self.error
        return list(self.holidays.get((country, year, month), []))

    async def fetch_countries(self):
        if self.error:
            raise self.error
        return list(self.countries)


def holiday(date: str, name: str = "Holiday", **kwargs) -> HolidayRecord:
    return HolidayRecord(date=date, name=name, **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return HolidayCache(default_ttl=60, clock=clock)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def service(cache, provider):
    return HolidayService(cache, provider)


@pytest.fixture
def client(service):
    """Test client wired to a fresh service; the lifespan (and scheduler) is not started."""
    app.dependency_overrides[get_holiday_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
