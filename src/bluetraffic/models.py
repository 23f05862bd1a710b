"""Data models for Bluebikes station traffic."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime


@dataclass(frozen=True)
class Station:
    """Represents a bike-share dock location."""
    short_name: str  # Short station code used by trip records (e.g. "M32006")
    latitude: float
    longitude: float
    name: str = ""
    station_id: Optional[str] = None  # Feed-level identifier, not used by trips
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)  # Passthrough feed fields


@dataclass(frozen=True)
class Trip:
    """Represents a single rental from one station to another."""
    start_station_id: str
    end_station_id: str
    started_at: datetime
    ended_at: datetime
    ride_id: Optional[str] = None


@dataclass(frozen=True)
class StationTraffic:
    """Arrival and departure counts for one station, computed per aggregation."""
    station: Station
    arrivals: int
    departures: int
    total_traffic: int = field(init=False)  # Always arrivals + departures

    def __post_init__(self):
        if self.arrivals < 0 or self.departures < 0:
            raise ValueError(
                f"Traffic counts must be non-negative, got {self.arrivals} arrivals "
                f"and {self.departures} departures"
            )
        object.__setattr__(self, "total_traffic", self.arrivals + self.departures)

    @property
    def short_name(self) -> str:
        return self.station.short_name

    @property
    def latitude(self) -> float:
        return self.station.latitude

    @property
    def longitude(self) -> float:
        return self.station.longitude

    @property
    def departure_ratio(self) -> float:
        """Share of traffic that departs; 0.5 for a station with no traffic."""
        if not self.total_traffic:
            return 0.5
        return self.departures / self.total_traffic


@dataclass(frozen=True)
class CircleStyle:
    """Visual encoding of one station for the map renderer."""
    short_name: str
    latitude: float
    longitude: float
    radius: float
    departure_ratio: float  # Bucketed to 0, 0.5 or 1
    title: str  # Tooltip text


@dataclass
class TrafficSnapshot:
    """Complete result of one time-filter selection."""
    time_filter: int  # Minutes since midnight, or -1 for any time
    time_label: str
    time_datetime: Optional[str]  # "HH:MM" for the time element, None for any time
    traffic: List[StationTraffic]
    circles: List[CircleStyle]
    max_traffic: int
    radius_range: tuple  # (min_radius, max_radius) used for this draw
    computed_at: datetime
