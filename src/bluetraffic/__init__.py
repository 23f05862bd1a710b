"""bluetraffic - Bluebikes station traffic by time of day."""

__version__ = "0.1.0"

from .models import Station, Trip, StationTraffic, CircleStyle, TrafficSnapshot
from .station_map import StationTrafficMap
from .data_loader import BlueBikesLoader
from .traffic import compute_station_traffic
from .time_filter import ANY_TIME, filter_trips_by_time

__all__ = [
    "StationTrafficMap",
    "BlueBikesLoader",
    "compute_station_traffic",
    "filter_trips_by_time",
    "ANY_TIME",
    "Station",
    "Trip",
    "StationTraffic",
    "CircleStyle",
    "TrafficSnapshot",
]
