from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import Any, Optional, List, Union
from datetime import date, datetime
from enum import Enum


# ──────────────────────────────────────────────
# Shared
# ──────────────────────────────────────────────

class _Frozen(BaseModel):
    """Immutable record, serialised with camelCase aliases."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)


def normalize_holiday_date(value: Any) -> str:
    """
    Reduce a provider date to a plain "YYYY-MM-DD" calendar string.

    Accepts a date, a datetime, "2024-02-14" or a full ISO timestamp
    ("2024-03-10T02:00:00-08:00", "2024-03-10T02:00:00Z"). The calendar date
    is read from the timestamp's own wall clock and is never shifted into
    another timezone.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid holiday date: {value!r}")
    raw = value.strip()
    if len(raw) == 10:
        return date.fromisoformat(raw).isoformat()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw).date().isoformat()


# ──────────────────────────────────────────────
# Holidays & countries
# ──────────────────────────────────────────────

class HolidayRecord(_Frozen):
    date: str                                   # "YYYY-MM-DD"
    name: str
    description: Optional[str] = None
    type: List[str] = []                        # e.g. ["National holiday"]
    primary_type: Optional[str] = None
    canonical_url: Optional[str] = None
    urlid: Optional[str] = None
    locations: str = "All"
    states: Union[str, List[Any]] = "All"       # "All" or provider state objects

    @property
    def display_type(self) -> str:
        """primary_type, then the first type tag, then "default"."""
        if self.primary_type:
            return self.primary_type
        if self.type:
            return self.type[0]
        return "default"

    @classmethod
    def from_provider(cls, raw: dict) -> "HolidayRecord":
        """Build a record from a Calendarific holiday object. Raises ValueError on a bad date."""
        raw_date = raw.get("date")
        if isinstance(raw_date, dict):
            raw_date = raw_date.get("iso")
        raw_type = raw.get("type") or []
        if isinstance(raw_type, str):
            raw_type = [raw_type]
        return cls(
            date=normalize_holiday_date(raw_date),
            name=raw.get("name", "Unknown"),
            description=raw.get("description") or raw.get("name"),
            type=raw_type,
            primary_type=raw.get("primary_type"),
            canonical_url=raw.get("canonical_url") or None,
            urlid=raw.get("urlid") or None,
            locations=raw.get("locations") or "All",
            states=raw.get("states") or "All",
        )


class Country(_Frozen):
    iso: str
    name: str
    supported_languages: Optional[int] = None
    flag: Optional[str] = None


# ──────────────────────────────────────────────
# Calendar grid
# ──────────────────────────────────────────────

class WeekColor(str, Enum):
    default = "default"     # no holidays in the month part of the week
    light = "light"         # exactly one
    dark = "dark"           # two or more


class RunKind(str, Enum):
    pair = "pair"           # two adjacent holidays
    block = "block"         # three or more, emphasises the whole week


class ConsecutiveRun(_Frozen):
    start: int                                  # index into Week.days
    end: int                                    # inclusive
    dates: List[str] = []

    @computed_field
    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @computed_field
    @property
    def kind(self) -> RunKind:
        return RunKind.block if self.length >= 3 else RunKind.pair


class Day(_Frozen):
    date: str                                   # "YYYY-MM-DD"
    day: int
    is_current_month: bool = Field(alias="isCurrentMonth")
    is_holiday: bool = Field(alias="isHoliday")
    is_today: bool = Field(alias="isToday")
    highlight: Optional[RunKind] = None


class Week(_Frozen):
    days: List[Day]
    holiday_count: int = Field(alias="holidayCount")
    week_color: WeekColor = Field(alias="weekColor")
    week_number: int = Field(alias="weekNumber")
    consecutive_runs: List[ConsecutiveRun] = Field(default=[], alias="consecutiveRuns")
    emphasized: bool = False


class CalendarGrid(_Frozen):
    year: int
    month: int
    month_name: str = Field(alias="monthName")
    weeks: List[Week]
    total_holidays: int = Field(alias="totalHolidays")


# ──────────────────────────────────────────────
# API responses
# ──────────────────────────────────────────────

class WeekColorStats(_Frozen):
    total_weeks: int = Field(alias="totalWeeks")
    default_weeks: int = Field(alias="defaultWeeks")
    light_weeks: int = Field(alias="lightWeeks")
    dark_weeks: int = Field(alias="darkWeeks")

    @classmethod
    def from_weeks(cls, weeks: List[Week]) -> "WeekColorStats":
        return cls(
            total_weeks=len(weeks),
            default_weeks=sum(1 for w in weeks if w.week_color == WeekColor.default),
            light_weeks=sum(1 for w in weeks if w.week_color == WeekColor.light),
            dark_weeks=sum(1 for w in weeks if w.week_color == WeekColor.dark),
        )


class CalendarResponse(_Frozen):
    country: str
    year: int
    month: int
    month_name: str = Field(alias="monthName")
    holidays: List[HolidayRecord] = []
    calendar: List[Week] = []
    total_holidays: int = Field(alias="totalHolidays")
    week_color_stats: WeekColorStats = Field(alias="weekColorStats")


class QuarterCalendar(_Frozen):
    country: str
    year: int
    quarter: int
    quarter_name: str = Field(alias="quarterName")
    months: List[CalendarResponse] = []
    total_holidays: int = Field(alias="totalHolidays")
