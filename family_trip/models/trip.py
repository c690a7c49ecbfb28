"""
Trip data models - The persisted trip aggregate and its entries.

Field names are snake_case in Python and camelCase on the wire
(``tripStartDate``, ``scheduleByDay``...), matching the JSON blob stored
locally and on the trip server.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Callable, NamedTuple, Optional

from .families import Family, family_ids, family_ids_with_all


MAX_FLIGHTS_PER_FAMILY = 5
MAX_ACCOMMODATIONS_PER_FAMILY = 10

DEFAULT_TRIP_START_DATE = "2026-07-09"
DEFAULT_TRIP_END_DATE = "2026-08-08"


class TripModel(BaseModel):
    """Base for trip models: camelCase aliases, snake_case attributes."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FlightInfo(TripModel):
    """One flight leg for a family."""
    departure_date: str = ""
    airline: str = ""
    flight_number: str = ""
    departure_airport: str = Field("", description="3-letter code")
    departure_time: str = Field("", description="HH:MM AM or PM")
    arrival_airport: str = Field("", description="3-letter code")
    arrival_time: str = Field("", description="HH:MM AM or PM")

    def has_details(self) -> bool:
        """True when the carrier, flight number or an airport is known."""
        return bool(self.airline or self.flight_number or self.departure_airport or self.arrival_airport)


class FlightDates(TripModel):
    """Departure/return dates so flights show on the schedule."""
    departure: str = ""
    return_date: str = Field("", alias="return")


class AccommodationEntry(TripModel):
    """One hotel/house stay: check-in date key and free-text details."""
    check_in: str = ""
    details: str = ""


class ActivityItem(TripModel):
    """A dinner, tour or other planned activity."""
    activity: str = ""
    date: str = ""
    time: str = ""
    dress_code: str = ""
    notes: str = ""


class AirportTransfers(TripModel):
    to_airport: str = ""
    from_airport: str = ""


class ScheduleEvent(TripModel):
    day: str = ""
    time: str = ""
    title: str = ""
    note: str = ""


class DaySchedule(TripModel):
    """Structured content for a single day."""
    location: str = ""
    group_events: list[ScheduleEvent] = Field(default_factory=list)
    # Per family: events that family is doing alone
    family_events: dict[str, list[ScheduleEvent]] = Field(default_factory=dict)


class DayItem(TripModel):
    """One line in the running list for a day."""
    family_id: str = ""
    activity: str = ""
    time: str = ""


class ImportedImage(TripModel):
    name: str = "image"
    base64: str = ""


DEFAULT_SCHEDULE: list[ScheduleEvent] = [
    ScheduleEvent(day="Arrival", title="Check-in & welcome", note="Relax, unpack, first dinner together"),
    ScheduleEvent(day="Birthday day", title="Karen's 70th celebration", note="Party dinner & cake"),
    ScheduleEvent(day="Excursion", title="Island / activity day", note="Add your planned trip or boat day"),
    ScheduleEvent(day="Free day", title="Beach & free time", note="Optional group lunch"),
    ScheduleEvent(day="Departure", title="Check-out & goodbyes", note="Safe travels home"),
]


def default_schedule() -> list[ScheduleEvent]:
    return [event.model_copy() for event in DEFAULT_SCHEDULE]


class FamilyKeyed(NamedTuple):
    """How a per-family mapping fills in a family that has no entry yet."""
    default_factory: Callable[[], Any]
    includes_all: bool


FAMILY_KEYED_FIELDS: dict[str, FamilyKeyed] = {
    "flights": FamilyKeyed(lambda: [FlightInfo()], includes_all=False),
    "flight_dates": FamilyKeyed(FlightDates, includes_all=False),
    "accommodations": FamilyKeyed(lambda: [AccommodationEntry()], includes_all=True),
    "activities": FamilyKeyed(list, includes_all=True),
    "transfers": FamilyKeyed(AirportTransfers, includes_all=False),
}

DATE_KEYED_FIELDS = ("schedule_by_day", "day_items")


class TripRecord(TripModel):
    """
    The persisted trip aggregate.

    Every known family always has an entry in each per-family mapping;
    missing ones are backfilled on construction and by ``for_family``.
    """
    families: Optional[list[Family]] = Field(
        None,
        description="Roster override; the configured families are used when unset"
    )
    trip_start_date: str = DEFAULT_TRIP_START_DATE
    trip_end_date: str = DEFAULT_TRIP_END_DATE
    flights: dict[str, list[FlightInfo]] = Field(default_factory=dict)
    flight_dates: dict[str, FlightDates] = Field(default_factory=dict)
    accommodations: dict[str, list[AccommodationEntry]] = Field(default_factory=dict)
    activities: dict[str, list[ActivityItem]] = Field(default_factory=dict)
    transfers: dict[str, AirportTransfers] = Field(default_factory=dict)
    schedule: list[ScheduleEvent] = Field(default_factory=default_schedule)
    schedule_by_day: dict[str, DaySchedule] = Field(
        default_factory=dict,
        description="Date-key -> structured day content"
    )
    day_items: dict[str, list[DayItem]] = Field(
        default_factory=dict,
        description="Date-key -> manual day items"
    )
    getting_around: str = ""
    important_numbers: str = ""
    imported_images: list[ImportedImage] = Field(default_factory=list)

    @field_validator("flights")
    @classmethod
    def cap_flights(cls, v: dict[str, list[FlightInfo]]) -> dict[str, list[FlightInfo]]:
        return {key: entries[:MAX_FLIGHTS_PER_FAMILY] for key, entries in v.items()}

    @field_validator("accommodations")
    @classmethod
    def cap_accommodations(
        cls, v: dict[str, list[AccommodationEntry]]
    ) -> dict[str, list[AccommodationEntry]]:
        return {key: entries[:MAX_ACCOMMODATIONS_PER_FAMILY] for key, entries in v.items()}

    @model_validator(mode="after")
    def backfill_family_keys(self) -> "TripRecord":
        for field_name in FAMILY_KEYED_FIELDS:
            for family_id in self.keys_for(field_name):
                self.for_family(field_name, family_id)
        return self

    def known_family_ids(self) -> list[str]:
        return family_ids(self.families or None)

    def keys_for(self, field_name: str) -> list[str]:
        """Family ids that must always be present in a per-family field."""
        if FAMILY_KEYED_FIELDS[field_name].includes_all:
            return family_ids_with_all(self.families or None)
        return self.known_family_ids()

    def for_family(self, field_name: str, family_id: str) -> Any:
        """Entry for a family in a per-family field, backfilling a default if absent."""
        mapping = getattr(self, field_name)
        if family_id not in mapping:
            mapping[family_id] = FAMILY_KEYED_FIELDS[field_name].default_factory()
        return mapping[family_id]

    def to_json_dict(self) -> dict:
        """Wire representation (camelCase keys)."""
        return self.model_dump(by_alias=True, exclude_none=True)


def field_name_for_key(key: str) -> Optional[str]:
    """Resolve a wire key ('tripStartDate') or attribute name to the attribute name."""
    if key in TripRecord.model_fields:
        return key
    for name, info in TripRecord.model_fields.items():
        if info.alias == key:
            return name
    return None


def default_trip_record(families: Optional[list[Family]] = None) -> TripRecord:
    """A fresh record with defaults for every known family."""
    return TripRecord(families=families)
