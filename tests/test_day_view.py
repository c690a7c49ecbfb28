"""Tests for the per-day view helpers."""
import pytest

from family_trip.models.trip import (
    AccommodationEntry,
    ActivityItem,
    DayItem,
    FlightInfo,
    TripRecord,
)
from family_trip.services.day_view import (
    all_date_keys,
    dates_between,
    format_flight_info,
    items_for_day,
    to_date_key,
    to_display_date,
)


class TestDateKeys:

    @pytest.mark.parametrize("value,expected", [
        ("2026-07-09", "07-09"),
        ("07-09", "07-09"),
        ("7/9", "07-09"),
        ("July 9", "07-09"),
        ("july 15, 2026", "07-15"),
        ("", None),
        ("soon", None),
        ("13/40", None),
    ])
    def test_to_date_key(self, value, expected):
        """Test that supported date formats normalize to MM-DD."""
        assert to_date_key(value) == expected

    def test_display_date(self):
        """Test that date keys render as month and day."""
        assert to_display_date("07-15") == "July 15"
        assert to_display_date("garbage") == "garbage"

    def test_dates_between_inclusive(self):
        """Test that the range includes both ends and crosses months."""
        assert dates_between("2026-07-30", "2026-08-02") == [
            "2026-07-30", "2026-07-31", "2026-08-01", "2026-08-02",
        ]

    def test_dates_between_invalid(self):
        """Test that missing or reversed bounds give no dates."""
        assert dates_between("", "2026-08-02") == []
        assert dates_between("2026-08-02", "2026-07-30") == []


class TestFlightSummary:

    def test_full_flight(self):
        """Test that every known part appears in the summary."""
        flight = FlightInfo(
            airline="Delta", flight_number="123",
            departure_airport="JFK", departure_time="10:00 AM",
            arrival_airport="ATH", arrival_time="6:00 AM",
        )
        assert format_flight_info(flight) == "Delta 123 → JFK 10:00 AM → ATH 6:00 AM"

    def test_empty_flight(self):
        """Test that a flight with only a time has no summary."""
        assert format_flight_info(FlightInfo(departure_time="10:00 AM")) == ""


class TestItemsForDay:

    @pytest.fixture
    def record(self):
        return TripRecord(
            flights={"noah-cori": [FlightInfo(
                departure_date="2026-07-09", airline="United", flight_number="88",
                departure_airport="EWR", arrival_airport="ATH", departure_time="6:00 PM",
            )]},
            accommodations={"all": [AccommodationEntry(check_in="07-09", details="Villa Oia ")]},
            activities={"paul-karen": [ActivityItem(activity="Birthday dinner", date="July 9", time="8:00 PM")]},
            day_items={"07-09": [DayItem(family_id="all", activity="Pick up keys", time="3:00 PM")]},
        )

    def test_combines_sources(self, record):
        """Test that manual items, flights, check-ins and activities all show up."""
        items = items_for_day(record, "07-09")
        activities = [item.activity for item in items]

        assert "Pick up keys" in activities
        assert "United 88 EWR → ATH" in activities
        assert "Hotel: Villa Oia" in activities
        assert "Birthday dinner" in activities

    def test_sorted_by_time(self, record):
        """Test that items come back ordered by time."""
        times = [item.time for item in items_for_day(record, "07-09")]
        assert times == sorted(times)

    def test_other_day_empty(self, record):
        """Test that a day with nothing planned is empty."""
        assert items_for_day(record, "07-10") == []

    def test_manual_items_not_mutated(self, record):
        """Test that returned items are copies."""
        manual = next(item for item in items_for_day(record, "07-09") if item.activity == "Pick up keys")
        manual.activity = "changed"
        assert record.day_items["07-09"][0].activity == "Pick up keys"

    def test_all_date_keys(self, record):
        """Test that every date with content is listed once, sorted."""
        record.activities["all"].append(ActivityItem(activity="Boat", date="2026-07-12"))
        assert all_date_keys(record) == ["07-09", "07-12"]
