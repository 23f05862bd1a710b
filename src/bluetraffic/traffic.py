"""Per-station arrival and departure aggregation."""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from .models import Station, StationTraffic, Trip

logger = logging.getLogger(__name__)


def count_by_station(trips: Optional[Iterable[Trip]], key: Callable[[Trip], str]) -> Dict[str, int]:
    """
    Count trips per station code.

    Args:
        trips: Trips to count. None is treated as no trips.
        key: Selects the station code from a trip (start or end station).

    Returns:
        Dictionary of {station_code: trip_count}.
    """
    counts: Dict[str, int] = {}
    for trip in trips or []:
        station_id = key(trip)
        counts[station_id] = counts.get(station_id, 0) + 1
    return counts


def compute_station_traffic(
    stations: Optional[List[Station]],
    trips: Optional[List[Trip]],
) -> List[StationTraffic]:
    """
    Compute arrivals, departures and total traffic for every station.

    Every input station yields exactly one record, in input order, even when
    no trip touches it. Trips whose station codes are not in ``stations``
    are counted but never show up in the result.

    Args:
        stations: Stations to report on.
        trips: Trips to count (usually already filtered by time of day).

    Returns:
        List of new StationTraffic records.
    """
    if not stations:
        return []

    departures = count_by_station(trips, lambda trip: trip.start_station_id)
    arrivals = count_by_station(trips, lambda trip: trip.end_station_id)

    result: List[StationTraffic] = []
    for station in stations:
        result.append(
            StationTraffic(
                station=station,
                arrivals=arrivals.get(station.short_name, 0),
                departures=departures.get(station.short_name, 0),
            )
        )

    logger.debug(f"Computed traffic for {len(result)} stations from {sum(departures.values())} trips")
    return result
