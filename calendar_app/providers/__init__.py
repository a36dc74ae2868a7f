"""
Provider registry — maps provider_id to a provider factory.

To add a new holiday source:
  1. Create calendar_app/providers/yoursource.py extending BaseHolidayProvider
  2. Import it here and add it to PROVIDERS
"""

import os
from typing import Callable

from calendar_app.providers.base import BaseHolidayProvider
from calendar_app.providers.calendarific import CalendarificProvider

DEFAULT_PROVIDER = os.getenv("HOLIDAY_PROVIDER", "calendarific")


# ── Registry ──────────────────────────────────
PROVIDERS: dict[str, Callable[[], BaseHolidayProvider]] = {
    "calendarific": CalendarificProvider,
}


def get_provider(provider_id: str = DEFAULT_PROVIDER) -> BaseHolidayProvider:
    factory = PROVIDERS.get(provider_id)
    if factory is None:
        raise KeyError(f"Unknown holiday provider '{provider_id}'")
    return factory()
