"""Time-of-day trip filtering and time display helpers."""

from datetime import datetime
from typing import List, Optional

from .models import Trip

# Slider value meaning "no time filter"
ANY_TIME = -1

# Trips starting or ending within this many minutes of the target are kept
TIME_WINDOW_MINUTES = 60

MINUTES_PER_DAY = 24 * 60


def is_time_filter_active(time_filter: Optional[int]) -> bool:
    """Return True unless time_filter is the any-time sentinel (-1 or None)."""
    return time_filter is not None and time_filter != ANY_TIME


def minutes_since_midnight(value: datetime) -> int:
    """Minute of the day for a timestamp, ignoring date and seconds."""
    return value.hour * 60 + value.minute


def filter_trips_by_time(trips: Optional[List[Trip]], time_filter: Optional[int]) -> List[Trip]:
    """
    Keep trips that start or end within TIME_WINDOW_MINUTES of time_filter.

    Minute-of-day values are compared directly, so the window does not wrap
    around midnight: a target of 00:05 does not match a trip at 23:50.

    Args:
        trips: Trips to filter. Never modified.
        time_filter: Minutes since midnight (0-1439), or ANY_TIME/None.

    Returns:
        ``trips`` itself when no filter is active, otherwise a new list
        holding the matching trips in their original order.
    """
    if not is_time_filter_active(time_filter):
        return trips if trips is not None else []

    kept: List[Trip] = []
    for trip in trips or []:
        started_minutes = minutes_since_midnight(trip.started_at)
        ended_minutes = minutes_since_midnight(trip.ended_at)
        if (
            abs(started_minutes - time_filter) <= TIME_WINDOW_MINUTES
            or abs(ended_minutes - time_filter) <= TIME_WINDOW_MINUTES
        ):
            kept.append(trip)
    return kept


def format_time(minutes: int) -> str:
    """Format minutes since midnight as a short 12-hour time, e.g. "8:10 AM"."""
    minutes = minutes % MINUTES_PER_DAY
    hours, mins = divmod(minutes, 60)
    suffix = "AM" if hours < 12 else "PM"
    hour12 = hours % 12 or 12
    return f"{hour12}:{mins:02d} {suffix}"


def format_datetime_attribute(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:MM"."""
    hours, mins = divmod(minutes % MINUTES_PER_DAY, 60)
    return f"{hours:02d}:{mins:02d}"
