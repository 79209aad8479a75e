"""Trip summary derived from the materialized packing list."""

from collections.abc import Sequence

from packing_core.models.packing import PackingListEntry
from packing_core.models.trip import Person, Trip, TripSummary


def summarize_trip(
    trip: Trip,
    entries: Sequence[PackingListEntry],
    people: Sequence[Person],
) -> TripSummary:
    """Count items (by quantity), packed items and active travellers."""
    total_items = sum(entry.quantity for entry in entries)
    packed_items = sum(entry.quantity for entry in entries if entry.is_packed)
    total_people = sum(1 for p in people if not p.is_deleted and p.trip_id == trip.id)

    return TripSummary(
        trip_id=trip.id,
        title=trip.title,
        description=trip.description,
        created_at=trip.created_at,
        updated_at=trip.updated_at,
        total_items=total_items,
        packed_items=packed_items,
        total_people=total_people,
    )
