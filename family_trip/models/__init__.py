"""Data models for the family trip planner."""
from .families import ALL_FAMILIES_ID, FAMILIES, Family, FamilyMember
from .trip import (
    MAX_ACCOMMODATIONS_PER_FAMILY,
    MAX_FLIGHTS_PER_FAMILY,
    AccommodationEntry,
    ActivityItem,
    AirportTransfers,
    DayItem,
    DaySchedule,
    FlightDates,
    FlightInfo,
    ImportedImage,
    ScheduleEvent,
    TripRecord,
    default_trip_record,
)

__all__ = [
    "ALL_FAMILIES_ID",
    "FAMILIES",
    "Family",
    "FamilyMember",
    "MAX_ACCOMMODATIONS_PER_FAMILY",
    "MAX_FLIGHTS_PER_FAMILY",
    "AccommodationEntry",
    "ActivityItem",
    "AirportTransfers",
    "DayItem",
    "DaySchedule",
    "FlightDates",
    "FlightInfo",
    "ImportedImage",
    "ScheduleEvent",
    "TripRecord",
    "default_trip_record",
]
