"""
Merge Engine - Reconciles a partial trip record into the current one.

Used for import results, single-field edits and remote loads alike.
The current record is never modified; a new record is returned.
"""
from typing import Any

from ..models.trip import TripRecord, field_name_for_key
from .normalizer import normalize_partial


# Replaced whenever present; "" is a real value
SCALAR_FIELDS = ("trip_start_date", "trip_end_date", "getting_around", "important_numbers")

# Replaced key by key; keys missing from the partial keep their current value
PER_KEY_FIELDS = (
    "flights",
    "flight_dates",
    "accommodations",
    "activities",
    "transfers",
    "schedule_by_day",
    "day_items",
)

# An empty incoming list means "no data", not "clear"
NON_EMPTY_LIST_FIELDS = ("schedule", "families")

REPLACE_FIELDS = ("imported_images",)


def merge(current: TripRecord, partial: Any) -> TripRecord:
    """
    Merge ``partial`` (raw wire-shaped dict, any legacy shape) into ``current``.

    Fields absent from ``partial`` (or None) are left untouched. Per-family and
    per-date mappings are replaced per key, not merged list by list.
    """
    updates = normalize_partial(partial)
    data = {
        name: getattr(current, name)
        for name in TripRecord.model_fields
    }

    for name in SCALAR_FIELDS:
        if name in updates:
            data[name] = updates[name]

    for name in PER_KEY_FIELDS:
        if name in updates:
            data[name] = {**data[name], **updates[name]}

    for name in NON_EMPTY_LIST_FIELDS:
        if updates.get(name):
            data[name] = updates[name]

    for name in REPLACE_FIELDS:
        if name in updates:
            data[name] = updates[name]

    # Re-validating copies every container and backfills/caps per-family lists
    return TripRecord.model_validate(TripRecord(**data).model_dump())


def merge_field(current: TripRecord, key: str, value: Any) -> TripRecord:
    """Apply a single-field edit (wire key or attribute name) as a partial."""
    name = field_name_for_key(key)
    if name is None:
        raise KeyError(f"Unknown trip field: {key}")
    alias = TripRecord.model_fields[name].alias or name
    return merge(current, {alias: value})
