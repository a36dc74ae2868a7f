"""Tests for record types and date normalisation."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from calendar_app.models.schemas import (
    CalendarResponse, HolidayRecord, WeekColorStats, normalize_holiday_date,
)
from calendar_app.services.calendar_builder import build_calendar


class TestNormalizeHolidayDate:

    @pytest.mark.parametrize("value, expected", [
        ("2024-02-14", "2024-02-14"),
        (" 2024-02-14 ", "2024-02-14"),
        ("2024-03-10T02:00:00-08:00", "2024-03-10"),
        ("2024-12-31T23:00:00Z", "2024-12-31"),
        ("2024-01-01T00:30:00+14:00", "2024-01-01"),
        ("2024-06-21T12:00:00", "2024-06-21"),
        (date(2024, 7, 4), "2024-07-04"),
        (datetime(2024, 7, 4, 23, 59, tzinfo=timezone.utc), "2024-07-04"),
    ])
    def test_valid(self, value, expected):
        assert normalize_holiday_date(value) == expected

    @pytest.mark.parametrize("value", ["", "   ", None, 20240214, "2024-02-30", "14/02/2024", "not a date"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            normalize_holiday_date(value)


class TestHolidayRecord:

    def test_from_provider(self):
        record = HolidayRecord.from_provider({
            "name": "Christmas Day",
            "description": "",
            "date": {"iso": "2024-12-25", "datetime": {"year": 2024}},
            "type": ["National holiday"],
            "primary_type": "Federal Holiday",
            "canonical_url": "https://calendarific.com/holiday/us/christmas-day",
            "urlid": "us/christmas-day",
        })
        assert record.date == "2024-12-25"
        assert record.description == "Christmas Day"
        assert record.locations == "All"
        assert record.states == "All"
        assert record.type == ["National holiday"]

    def test_from_provider_timestamp_date(self):
        record = HolidayRecord.from_provider({
            "name": "March Equinox",
            "date": {"iso": "2024-03-19T20:06:24-07:00"},
            "type": "Season",
        })
        assert record.date == "2024-03-19"
        assert record.type == ["Season"]

    def test_from_provider_bad_date(self):
        with pytest.raises(ValueError):
            HolidayRecord.from_provider({"name": "Broken", "date": {"iso": "soon"}})

    @pytest.mark.parametrize("kwargs, expected", [
        ({"primary_type": "Federal Holiday", "type": ["National holiday"]}, "Federal Holiday"),
        ({"type": ["Observance", "Season"]}, "Observance"),
        ({}, "default"),
    ])
    def test_display_type_resolution(self, kwargs, expected):
        assert HolidayRecord(date="2024-01-01", name="x", **kwargs).display_type == expected

    def test_records_are_immutable(self):
        record = HolidayRecord(date="2024-01-01", name="New Year")
        with pytest.raises(ValidationError):
            record.name = "Changed"


def test_calendar_response_serialises_with_camel_case():
    grid = build_calendar(2024, 2, [HolidayRecord(date="2024-02-14", name="Valentine")], today=date(2024, 2, 1))
    response = CalendarResponse(
        country="US", year=2024, month=2, month_name=grid.month_name,
        holidays=[], calendar=grid.weeks, total_holidays=1,
        week_color_stats=WeekColorStats.from_weeks(grid.weeks),
    )
    data = response.model_dump(mode="json", by_alias=True)

    assert data["monthName"] == "February"
    assert data["totalHolidays"] == 1
    assert data["weekColorStats"] == {"totalWeeks": 5, "defaultWeeks": 4, "lightWeeks": 1, "darkWeeks": 0}
    day = data["calendar"][0]["days"][0]
    assert set(day) == {"date", "day", "isCurrentMonth", "isHoliday", "isToday", "highlight"}
    assert data["calendar"][2]["weekColor"] == "light"
