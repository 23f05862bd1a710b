"""Main station traffic map class."""

import logging
from typing import List, Optional
from datetime import datetime

from .models import CircleStyle, StationTraffic, TrafficSnapshot
from .data_loader import BlueBikesLoader
from .scales import SqrtScale, departure_bucket, radius_scale_for
from .time_filter import (
    ANY_TIME,
    MINUTES_PER_DAY,
    filter_trips_by_time,
    format_datetime_attribute,
    format_time,
    is_time_filter_active,
)
from .traffic import compute_station_traffic

logger = logging.getLogger(__name__)

ANY_TIME_LABEL = "(any time)"


class StationTrafficMap:
    """
    Computes what the station traffic map should draw for a time of day.

    This class provides methods to:
    - Load stations and trips once per session
    - Recompute station traffic for a time-of-day selection
    - Produce radius and color encodings for each station circle
    """

    def __init__(self, load_data: bool = True):
        """
        Initialize the map.

        Args:
            load_data: If True, download stations and trips on init. Failed
                      downloads are logged and leave empty collections.
        """
        self.loader = BlueBikesLoader()

        if load_data:
            self.loader.load_from_url()

    def load_data_from_files(self, stations_path: str, trips_path: str) -> None:
        """
        Load station and trip data from local files.

        Args:
            stations_path: Path to the station JSON.
            trips_path: Path to the trip CSV.
        """
        self.loader.load_from_files(stations_path, trips_path)

    @staticmethod
    def _validate_time_filter(time_filter: Optional[int]) -> int:
        """Normalize the any-time sentinel and reject out-of-range minutes."""
        if not is_time_filter_active(time_filter):
            return ANY_TIME
        if isinstance(time_filter, bool) or not isinstance(time_filter, int):
            raise ValueError(f"Time filter must be an integer number of minutes, got {time_filter!r}")
        if not 0 <= time_filter < MINUTES_PER_DAY:
            raise ValueError(f"Time filter {time_filter} is outside 0-{MINUTES_PER_DAY - 1} minutes")
        return time_filter

    def compute_traffic(self, time_filter: Optional[int] = ANY_TIME) -> List[StationTraffic]:
        """
        Filter trips by time of day and aggregate them per station.

        Args:
            time_filter: Minutes since midnight, or ANY_TIME/None for all trips.

        Returns:
            One StationTraffic record per loaded station.
        """
        time_filter = self._validate_time_filter(time_filter)
        filtered_trips = filter_trips_by_time(self.loader.trips, time_filter)
        logger.debug(f"Time filter {time_filter}: {len(filtered_trips)} of {len(self.loader.trips)} trips")
        return compute_station_traffic(self.loader.stations, filtered_trips)

    def update(self, time_filter: Optional[int] = ANY_TIME) -> TrafficSnapshot:
        """
        Recompute everything the renderer needs for a time-of-day selection.

        Args:
            time_filter: Minutes since midnight, or ANY_TIME/None for all trips.

        Returns:
            A new TrafficSnapshot; previous snapshots are never modified.
        """
        time_filter = self._validate_time_filter(time_filter)
        traffic = self.compute_traffic(time_filter)
        max_traffic = max((t.total_traffic for t in traffic), default=0)
        radius_scale = radius_scale_for(max_traffic, time_filter)

        return TrafficSnapshot(
            time_filter=time_filter,
            time_label=format_time(time_filter) if is_time_filter_active(time_filter) else ANY_TIME_LABEL,
            time_datetime=format_datetime_attribute(time_filter) if is_time_filter_active(time_filter) else None,
            traffic=traffic,
            circles=[self._circle_style(t, radius_scale) for t in traffic],
            max_traffic=max_traffic,
            radius_range=radius_scale.range,
            computed_at=datetime.now(),
        )

    @staticmethod
    def _circle_style(traffic: StationTraffic, radius_scale: SqrtScale) -> CircleStyle:
        return CircleStyle(
            short_name=traffic.short_name,
            latitude=traffic.latitude,
            longitude=traffic.longitude,
            radius=radius_scale(traffic.total_traffic),
            departure_ratio=departure_bucket(traffic),
            title=(
                f"{traffic.total_traffic} trips "
                f"({traffic.departures} departures, {traffic.arrivals} arrivals)"
            ),
        )

    def get_station_traffic(self, short_name: str, time_filter: Optional[int] = ANY_TIME) -> StationTraffic:
        """
        Get traffic for a single station.

        Args:
            short_name: Station code (e.g., "M32006").
            time_filter: Minutes since midnight, or ANY_TIME/None.

        Returns:
            StationTraffic record.

        Raises:
            ValueError: If the station is not loaded.
        """
        for traffic in self.compute_traffic(time_filter):
            if traffic.short_name == short_name:
                return traffic
        raise ValueError(f"Station {short_name} not found")

    def busiest_stations(self, limit: int = 10, time_filter: Optional[int] = ANY_TIME) -> List[StationTraffic]:
        """Stations with the most traffic, busiest first."""
        traffic = self.compute_traffic(time_filter)
        return sorted(traffic, key=lambda t: t.total_traffic, reverse=True)[:limit]

    def cleanup(self) -> None:
        """Release loaded station and trip data."""
        self.loader.clear()
        logger.info("Cleaned up station map resources")
