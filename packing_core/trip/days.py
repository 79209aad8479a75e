"""Derive trip days from the departure/arrival timeline."""

from collections.abc import Sequence
from datetime import date, timedelta

from packing_core.config import Settings, get_settings
from packing_core.models.trip import Day, TripEvent, TripEventType

# Same-date events apply departures before arrivals
_EVENT_ORDER: dict[TripEventType, int] = {
    TripEventType.leave_home: 0,
    TripEventType.leave_destination: 1,
    TripEventType.arrive_destination: 2,
    TripEventType.arrive_home: 3,
}


def enumerate_trip_days(events: Sequence[TripEvent], settings: Settings | None = None) -> list[Day]:
    """Build one Day per calendar date from the first to the last event.

    A day with any event is a travel day (you just left or are arriving).
    Days in between keep the location and travel state the last event left.

    Args:
        events: Trip timeline, in any order
        settings: Location and climate defaults (cached settings if omitted)

    Returns:
        Days in date order, empty when there are no events

    Raises:
        ValueError: the timeline spans more than `max_trip_days`
    """
    if not events:
        return []

    settings = settings or get_settings()
    ordered = sorted(events, key=lambda e: (e.date, _EVENT_ORDER[e.type]))

    start, end = ordered[0].date, ordered[-1].date
    span = (end - start).days + 1
    if span > settings.max_trip_days:
        raise ValueError(f"Trip spans {span} days, more than the maximum of {settings.max_trip_days}")

    by_date: dict[date, list[TripEvent]] = {}
    for event in ordered:
        by_date.setdefault(event.date, []).append(event)

    location = settings.home_location
    traveling = False
    days: list[Day] = []

    for offset in range(span):
        current = start + timedelta(days=offset)
        events_today = by_date.get(current, [])

        for event in events_today:
            if event.type == TripEventType.leave_home:
                location, traveling = settings.home_location, True
            elif event.type == TripEventType.leave_destination:
                location, traveling = settings.travel_location, True
            elif event.type == TripEventType.arrive_destination:
                location, traveling = event.location or "destination", False
            elif event.type == TripEventType.arrive_home:
                location, traveling = settings.home_location, False

        days.append(
            Day(
                date=current,
                location=location,
                expected_climate=settings.climate_by_location.get(location, settings.default_climate),
                travel=bool(events_today) or traveling,
            )
        )

    return days
