"""
Day view - What happens on each day of the trip.

Combines the manual day items with entries derived from flights,
accommodation check-ins and activities. Days are keyed "MM-DD".
"""
import re
from datetime import date, timedelta
from typing import Optional

from ..models.families import ALL_FAMILIES_ID
from ..models.trip import DayItem, FlightInfo, TripRecord


MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
MONTH_DAY_RE = re.compile(r"^(\d{1,2})\s*[-/]\s*(\d{1,2})$")


def _month_day(month: int, day: int) -> Optional[str]:
    if 1 <= month <= 12 and 1 <= day <= 31:
        return f"{month:02d}-{day:02d}"
    return None


def to_date_key(value: str) -> Optional[str]:
    """
    Normalize "2026-07-09", "07-09", "7/9" or "July 9" to "07-09".
    Returns None for anything else.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()

    match = ISO_DATE_RE.match(text) or MONTH_DAY_RE.match(text)
    if match:
        month, day = match.groups()[-2:]
        return _month_day(int(month), int(day))

    lower = text.lower()
    for index, name in enumerate(MONTHS, start=1):
        if lower.startswith(name.lower()):
            rest = text[len(name):].replace(",", "").strip()
            digits = re.match(r"\d+", rest)
            if digits:
                return _month_day(index, int(digits.group()))
    return None


def to_display_date(date_key: str) -> str:
    """"07-15" -> "July 15"."""
    try:
        month, day = (int(part) for part in date_key.split("-"))
    except ValueError:
        return date_key
    if not 1 <= month <= 12:
        return date_key
    return f"{MONTHS[month - 1]} {day}"


def dates_between(start: str, end: str) -> list[str]:
    """ISO dates from start to end, inclusive; empty when either is missing or invalid."""
    try:
        first, last = date.fromisoformat(start), date.fromisoformat(end)
    except (TypeError, ValueError):
        return []
    days = (last - first).days
    return [(first + timedelta(days=offset)).isoformat() for offset in range(days + 1)]


def format_flight_info(flight: FlightInfo) -> str:
    """One-line summary, e.g. "Delta 123 → JFK 10:00 AM → ATH 6:00 AM"."""
    if not flight.has_details():
        return ""

    def _place(airport: str, time: str) -> str:
        if airport and time:
            return f"{airport} {time}"
        return airport or time

    parts = [
        " ".join(part for part in (flight.airline, flight.flight_number) if part),
        _place(flight.departure_airport, flight.departure_time),
        _place(flight.arrival_airport, flight.arrival_time),
    ]
    return " → ".join(part for part in parts if part)


def all_date_keys(record: TripRecord) -> list[str]:
    """Every day that has something on it, sorted."""
    keys: set[str] = set()
    for flights in record.flights.values():
        keys.update(filter(None, (to_date_key(f.departure_date) for f in flights)))
    for key in record.day_items:
        keys.add(to_date_key(key) or key)
    for entries in record.accommodations.values():
        keys.update(filter(None, (to_date_key(e.check_in) for e in entries)))
    for activities in record.activities.values():
        keys.update(filter(None, (to_date_key(a.date) for a in activities)))
    return sorted(keys)


def items_for_day(record: TripRecord, date_key: str) -> list[DayItem]:
    """Manual items for the day plus flights, check-ins and activities on it."""
    items = [item.model_copy() for item in record.day_items.get(date_key, [])]
    ids = record.known_family_ids()

    for family_id in ids:
        for flight in record.flights.get(family_id, []):
            if to_date_key(flight.departure_date) != date_key:
                continue
            if not flight.has_details():
                continue
            label = " ".join(part for part in (flight.airline, flight.flight_number) if part) or "Flight"
            route = " → ".join(part for part in (flight.departure_airport, flight.arrival_airport) if part)
            items.append(DayItem(
                family_id=family_id,
                activity=f"{label} {route}" if route else label,
                time=flight.departure_time or "—",
            ))

    for family_id in [ALL_FAMILIES_ID, *ids]:
        for entry in record.accommodations.get(family_id, []):
            if to_date_key(entry.check_in) == date_key and entry.details.strip():
                items.append(DayItem(family_id=family_id, activity=f"Hotel: {entry.details.strip()}"))
        for activity in record.activities.get(family_id, []):
            if activity.activity.strip() and to_date_key(activity.date) == date_key:
                items.append(DayItem(
                    family_id=family_id,
                    activity=activity.activity.strip(),
                    time=activity.time.strip() or "—",
                ))

    items.sort(key=lambda item: item.time or "")
    return items
