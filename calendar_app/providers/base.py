from abc import ABC, abstractmethod
from typing import List, Optional
from calendar_app.models.schemas import Country, HolidayRecord


class BaseHolidayProvider(ABC):
    """
    Abstract base class for upstream holiday-data sources.
    Add a provider by creating a file in calendar_app/providers/ and extending this class.
    """
    provider_id: str
    provider_name: str

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def fetch_holidays(
        self, country: str, year: int, month: Optional[int] = None
    ) -> List[HolidayRecord]: ...

    @abstractmethod
    async def fetch_countries(self) -> List[Country]: ...
