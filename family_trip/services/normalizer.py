"""
Trip Record Normalizer.

Coerces loosely-typed or legacy-shaped trip data (old app versions, LLM
output, hand-edited JSON) into the current models. Nothing here raises:
anything unrecognized becomes the empty default.
"""
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel

from ..models.families import Family, FamilyMember
from ..models.trip import (
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
    TripModel,
    field_name_for_key,
)


M = TypeVar("M", bound=TripModel)

# Per-location maps used before accommodations became one list per family,
# in the order their entries are concatenated.
LEGACY_ACCOMMODATION_LOCATIONS = ("accommodationSantorini", "accommodationCrete")
LEGACY_SINGLE_ACCOMMODATION = "accommodation"


def _as_mapping(v: Any) -> Optional[dict]:
    if isinstance(v, BaseModel):
        return v.model_dump(by_alias=True)
    if isinstance(v, dict):
        return v
    return None


def _is_blank(v: Any) -> bool:
    return isinstance(v, str) and not v.strip()


def _copy_strings(v: Any, model_cls: type[M]) -> M:
    """Build ``model_cls`` from the string-valued known fields of ``v``."""
    source = _as_mapping(v)
    if source is None:
        return model_cls()
    values = {}
    for name, info in model_cls.model_fields.items():
        raw = source.get(info.alias or name, source.get(name))
        if isinstance(raw, str):
            values[name] = raw
    return model_cls(**values)


def _list_of(v: Any, convert: Callable[[Any], M], limit: Optional[int] = None) -> list[M]:
    if not isinstance(v, list):
        return []
    items = v if limit is None else v[:limit]
    return [convert(item) for item in items]


def normalize_flight(v: Any) -> FlightInfo:
    """A bare string is the airline (old free-text flights field)."""
    if isinstance(v, str):
        return FlightInfo(airline=v)
    return _copy_strings(v, FlightInfo)


def normalize_flight_list(v: Any) -> Optional[list[FlightInfo]]:
    """
    Flights for one family: a list (capped), or a single legacy value.
    Returns None when there is nothing to import.
    """
    if v is None or _is_blank(v):
        return None
    if isinstance(v, list):
        return _list_of(v, normalize_flight, MAX_FLIGHTS_PER_FAMILY)
    return [normalize_flight(v)]


def normalize_flight_dates(v: Any) -> FlightDates:
    return _copy_strings(v, FlightDates)


def normalize_accommodation_entry(v: Any) -> AccommodationEntry:
    return _copy_strings(v, AccommodationEntry)


def normalize_accommodation_list(v: Any) -> list[AccommodationEntry]:
    return _list_of(v, normalize_accommodation_entry, MAX_ACCOMMODATIONS_PER_FAMILY)


def normalize_activity(v: Any) -> ActivityItem:
    return _copy_strings(v, ActivityItem)


def normalize_transfers(v: Any) -> AirportTransfers:
    return _copy_strings(v, AirportTransfers)


def normalize_schedule_event(v: Any) -> ScheduleEvent:
    return _copy_strings(v, ScheduleEvent)


def normalize_day_item(v: Any) -> DayItem:
    return _copy_strings(v, DayItem)


def normalize_imported_image(v: Any) -> ImportedImage:
    return _copy_strings(v, ImportedImage)


def normalize_day_schedule(v: Any) -> DaySchedule:
    source = _as_mapping(v)
    if source is None:
        return DaySchedule()
    location = source.get("location")
    family_events = _as_mapping(source.get("familyEvents")) or {}
    return DaySchedule(
        location=location if isinstance(location, str) else "",
        group_events=_list_of(source.get("groupEvents"), normalize_schedule_event),
        family_events={
            family_id: _list_of(events, normalize_schedule_event)
            for family_id, events in family_events.items()
            if isinstance(events, list)
        },
    )


def normalize_family(v: Any) -> Optional[Family]:
    """A family needs at least a string id and name."""
    source = _as_mapping(v)
    if source is None:
        return None
    family_id, name = source.get("id"), source.get("name")
    if not isinstance(family_id, str) or not family_id or not isinstance(name, str):
        return None
    members = []
    for member in source.get("members") or []:
        if isinstance(member, dict) and isinstance(member.get("name"), str):
            note = member.get("note")
            members.append(FamilyMember(name=member["name"], note=note if isinstance(note, str) else None))
    return Family(id=family_id, name=name, members=members)


# --- Accommodations: one conversion per historical shape --------------------

class AccommodationShape(str, Enum):
    """Shapes accommodation data has been stored in, newest first."""
    CURRENT = "current"              # accommodations: {id: [{checkIn, details}]}
    BY_LOCATION = "by_location"      # accommodationSantorini/Crete: {id: [entry] | "text"} (+ ...CheckIn)
    SINGLE_STRING = "single_string"  # accommodation: {id: "text"}


def detect_accommodation_shape(raw: dict) -> Optional[AccommodationShape]:
    if isinstance(raw.get("accommodations"), dict):
        return AccommodationShape.CURRENT
    if any(isinstance(raw.get(key), dict) for key in LEGACY_ACCOMMODATION_LOCATIONS):
        return AccommodationShape.BY_LOCATION
    if isinstance(raw.get(LEGACY_SINGLE_ACCOMMODATION), dict):
        return AccommodationShape.SINGLE_STRING
    return None


def _location_entries(v: Any, check_in: Any) -> list[AccommodationEntry]:
    """Entries for one family at one location; strings pair with their check-in map."""
    if isinstance(v, list):
        return [normalize_accommodation_entry(entry) for entry in v]
    if isinstance(v, str):
        if not v.strip():
            return []
        return [AccommodationEntry(
            check_in=check_in if isinstance(check_in, str) else "",
            details=v,
        )]
    if _as_mapping(v) is not None:
        return [normalize_accommodation_entry(v)]
    return []


def _from_current(raw: dict) -> dict[str, list[AccommodationEntry]]:
    return {
        family_id: [normalize_accommodation_entry(entry) for entry in entries]
        for family_id, entries in raw["accommodations"].items()
        if isinstance(entries, list)
    }


def _from_locations(raw: dict) -> dict[str, list[AccommodationEntry]]:
    out: dict[str, list[AccommodationEntry]] = {}
    for location in LEGACY_ACCOMMODATION_LOCATIONS:
        per_family = raw.get(location)
        if not isinstance(per_family, dict):
            continue
        check_ins = raw.get(f"{location}CheckIn")
        check_ins = check_ins if isinstance(check_ins, dict) else {}
        for family_id, value in per_family.items():
            entries = _location_entries(value, check_ins.get(family_id))
            if entries:
                out.setdefault(family_id, []).extend(entries)
    return out


def _from_single_string(raw: dict) -> dict[str, list[AccommodationEntry]]:
    return {
        family_id: [AccommodationEntry(details=details)]
        for family_id, details in raw[LEGACY_SINGLE_ACCOMMODATION].items()
        if isinstance(details, str) and details.strip()
    }


_ACCOMMODATION_CONVERTERS: dict[AccommodationShape, Callable[[dict], dict[str, list[AccommodationEntry]]]] = {
    AccommodationShape.CURRENT: _from_current,
    AccommodationShape.BY_LOCATION: _from_locations,
    AccommodationShape.SINGLE_STRING: _from_single_string,
}


def build_accommodations(
    per_family: dict[str, list[AccommodationEntry]]
) -> dict[str, list[AccommodationEntry]]:
    """Canonical accommodations mapping: lists capped at the per-family maximum."""
    return {
        family_id: entries[:MAX_ACCOMMODATIONS_PER_FAMILY]
        for family_id, entries in per_family.items()
    }


def normalize_accommodations(raw: Any) -> Optional[dict[str, list[AccommodationEntry]]]:
    """
    Accommodations from a raw record in any known shape.
    Returns None when the record carries no accommodation data at all.
    """
    source = _as_mapping(raw)
    if source is None:
        return None
    shape = detect_accommodation_shape(source)
    if shape is None:
        return None
    return build_accommodations(_ACCOMMODATION_CONVERTERS[shape](source))


# --- Whole partial records ---------------------------------------------------

def _per_key(v: Any, convert: Callable[[Any], Any]) -> Optional[dict]:
    """Apply ``convert`` to each value of a mapping, dropping values it rejects."""
    source = _as_mapping(v)
    if source is None:
        return None
    out = {}
    for key, value in source.items():
        converted = convert(value)
        if converted is not None:
            out[key] = converted
    return out


def _list_or_none(convert: Callable[[Any], Any]) -> Callable[[Any], Any]:
    return lambda v: [convert(item) for item in v] if isinstance(v, list) else None


def _mapping_or_none(convert: Callable[[Any], Any]) -> Callable[[Any], Any]:
    return lambda v: convert(v) if _as_mapping(v) is not None else None


_SCALAR_FIELDS = ("trip_start_date", "trip_end_date", "getting_around", "important_numbers")

_PER_KEY_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "flights": normalize_flight_list,
    "flight_dates": _mapping_or_none(normalize_flight_dates),
    "activities": _list_or_none(normalize_activity),
    "transfers": _mapping_or_none(normalize_transfers),
    "schedule_by_day": _mapping_or_none(normalize_day_schedule),
    "day_items": _list_or_none(normalize_day_item),
}


def normalize_partial(raw: Any) -> dict[str, Any]:
    """
    Convert a raw partial trip record (wire keys, any legacy shape) into
    model-typed values keyed by attribute name.

    Only fields present in ``raw`` (and not None) appear in the result, so an
    absent field can be told apart from one that was explicitly cleared.
    """
    source = _as_mapping(raw)
    if not source:
        return {}

    fields: dict[str, Any] = {}
    for key, value in source.items():
        name = field_name_for_key(key)
        if name is not None and value is not None:
            fields[name] = value

    out: dict[str, Any] = {}
    for name in _SCALAR_FIELDS:
        if isinstance(fields.get(name), str):
            out[name] = fields[name]

    for name, convert in _PER_KEY_CONVERTERS.items():
        if name in fields:
            converted = _per_key(fields[name], convert)
            if converted is not None:
                out[name] = converted

    accommodations = normalize_accommodations(source)
    if accommodations is not None:
        out["accommodations"] = accommodations

    if isinstance(fields.get("schedule"), list):
        out["schedule"] = [normalize_schedule_event(event) for event in fields["schedule"]]
    if isinstance(fields.get("families"), list):
        families = [normalize_family(family) for family in fields["families"]]
        out["families"] = [family for family in families if family is not None]
    if isinstance(fields.get("imported_images"), list):
        out["imported_images"] = [normalize_imported_image(image) for image in fields["imported_images"]]

    return out
