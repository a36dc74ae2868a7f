"""
Calendar Builder
================
Turns (year, month, holidays) into a Monday-first grid of 7-day weeks.

  • the grid starts on the Monday on or before the 1st and ends with the
    row that contains the last day of the month (4 to 6 rows)
  • padding days from the neighbouring months are included but never
    count as current-month or towards a week's holiday total
  • week colour: 0 holidays → default, 1 → light, 2+ → dark
  • each week is annotated with its consecutive-holiday runs

All dates are plain "YYYY-MM-DD" strings; nothing here deals in timestamps.
"""

import calendar
import logging
import math
import os
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from calendar_app.models.schemas import (
    CalendarGrid, Day, HolidayRecord, Week, WeekColor,
    normalize_holiday_date,
)
from calendar_app.services.consecutive import annotate_week

logger = logging.getLogger(__name__)

CALENDAR_TIMEZONE = ZoneInfo(os.getenv("CALENDAR_TIMEZONE", "UTC"))


def build_calendar(
    year: int,
    month: int,
    holidays: Iterable[HolidayRecord],
    today: Optional[date] = None,
) -> CalendarGrid:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    if today is None:
        today = current_date()

    first_day = date(year, month, 1)
    last_day = date(year, month, calendar.monthrange(year, month)[1])
    cursor = first_day - timedelta(days=first_day.isoweekday() - 1)

    record_dates = _holiday_dates(holidays)
    holiday_dates = set(record_dates)
    today_str = today.isoformat()

    weeks: List[Week] = []
    while cursor <= last_day:
        days: List[Day] = []
        for _ in range(7):
            date_str = cursor.isoformat()
            days.append(Day(
                date=date_str,
                day=cursor.day,
                is_current_month=(cursor.year, cursor.month) == (year, month),
                is_holiday=date_str in holiday_dates,
                is_today=date_str == today_str,
            ))
            cursor += timedelta(days=1)

        holiday_count = sum(1 for d in days if d.is_current_month and d.is_holiday)
        week = Week(
            days=days,
            holiday_count=holiday_count,
            week_color=_week_color(holiday_count),
            week_number=week_number(date.fromisoformat(days[0].date)),
        )
        weeks.append(annotate_week(week))

    month_prefix = f"{year:04d}-{month:02d}-"
    return CalendarGrid(
        year=year,
        month=month,
        month_name=calendar.month_name[month],
        weeks=weeks,
        total_holidays=sum(1 for d in record_dates if d.startswith(month_prefix)),
    )


def week_number(day: date) -> int:
    """
    Week-of-year of a date: ceil((days since Jan 1 + weekday of Jan 1 + 1) / 7),
    with the weekday of Jan 1 counted Sunday = 0 … Saturday = 6.
    """
    jan1 = date(day.year, 1, 1)
    jan1_weekday = jan1.isoweekday() % 7
    return math.ceil(((day - jan1).days + jan1_weekday + 1) / 7)


def current_date() -> date:
    return datetime.now(CALENDAR_TIMEZONE).date()


def _week_color(holiday_count: int) -> WeekColor:
    if holiday_count >= 2:
        return WeekColor.dark
    if holiday_count == 1:
        return WeekColor.light
    return WeekColor.default


def _holiday_dates(holidays: Iterable[HolidayRecord]) -> List[str]:
    """Normalised date of every usable record, one entry per record."""
    dates: List[str] = []
    for holiday in holidays:
        try:
            dates.append(normalize_holiday_date(holiday.date))
        except ValueError:
            logger.warning(f"Skipping holiday with malformed date: {holiday.name!r} ({holiday.date!r})")
    return dates
