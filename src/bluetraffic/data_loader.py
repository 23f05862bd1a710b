"""Bluebikes station and trip data loader."""

import io
import json
import logging
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from .models import Station, Trip

logger = logging.getLogger(__name__)

# Bluebikes station information (GBFS-style JSON) and one month of trips
STATIONS_URL = "https://dsc106.com/labs/lab07/data/bluebikes-stations.json"
TRIPS_URL = "https://dsc106.com/labs/lab07/data/bluebikes-traffic-2024-03.csv"

REQUEST_TIMEOUT = 30  # seconds

TRIP_TIME_COLUMNS = ["started_at", "ended_at"]
TRIP_STATION_COLUMNS = ["start_station_id", "end_station_id"]

# Station keys mapped onto Station fields; everything else goes to Station.extra
_STATION_FIELDS = {"short_name", "lat", "lon", "name", "station_id"}


class BlueBikesLoader:
    """Loads station metadata and trip records for one session."""

    def __init__(self):
        """Initialize the loader with empty collections."""
        self.stations: List[Station] = []
        self.trips: List[Trip] = []

    def load_stations_from_url(self, url: str = STATIONS_URL) -> None:
        """Download station JSON. On failure, log and keep an empty station list."""
        logger.info(f"Downloading station data from {url}")
        try:
            response = requests.get(url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            self.stations = self._parse_stations(response.json())
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error loading station JSON: {e}")
            self.stations = []
            return
        logger.info(f"Loaded {len(self.stations)} stations")

    def load_trips_from_url(self, url: str = TRIPS_URL) -> None:
        """Download the trip CSV. On failure, log and keep an empty trip list."""
        logger.info(f"Downloading trip data from {url}")
        try:
            response = requests.get(url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            self.trips = self._parse_trips(io.StringIO(response.text))
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error(f"Error loading trip CSV: {e}")
            self.trips = []
            return
        logger.info(f"Loaded {len(self.trips)} trips")

    def load_from_url(self) -> None:
        """Download both stations and trips from their default URLs."""
        self.load_stations_from_url()
        self.load_trips_from_url()

    def load_from_files(self, stations_path: str, trips_path: str) -> None:
        """Load station JSON and trip CSV from local files."""
        logger.info("Loading station and trip data from local files")
        with open(stations_path, "r", encoding="utf-8") as f:
            self.stations = self._parse_stations(json.load(f))
        self.trips = self._parse_trips(trips_path)
        logger.info(f"Loaded {len(self.stations)} stations and {len(self.trips)} trips")

    @staticmethod
    def _parse_stations(payload: Any) -> List[Station]:
        """Build Station objects from the ``data.stations`` array of the feed."""
        data = payload.get("data") if isinstance(payload, dict) else None
        entries = data.get("stations") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning("Station feed has no data.stations array")
            return []

        stations: List[Station] = []
        for entry in entries:
            if not isinstance(entry, dict):
                logger.warning(f"Skipping station entry {entry!r}: not an object")
                continue
            short_name = entry.get("short_name")
            try:
                latitude = float(entry["lat"])
                longitude = float(entry["lon"])
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Skipping station {short_name!r}: missing or invalid coordinates")
                continue
            if not short_name:
                logger.warning(f"Skipping station at ({latitude}, {longitude}): no short_name")
                continue

            extra: Dict[str, Any] = {k: v for k, v in entry.items() if k not in _STATION_FIELDS}
            station_id: Optional[str] = entry.get("station_id")
            stations.append(
                Station(
                    short_name=str(short_name),
                    latitude=latitude,
                    longitude=longitude,
                    name=entry.get("name") or "",
                    station_id=str(station_id) if station_id is not None else None,
                    extra=extra,
                )
            )
        return stations

    @staticmethod
    def _parse_trips(source) -> List[Trip]:
        """
        Parse trip rows from a CSV path or buffer.

        Timestamps become datetimes; rows whose timestamps cannot be parsed
        are dropped.
        """
        df = pd.read_csv(source, dtype={column: str for column in TRIP_STATION_COLUMNS + ["ride_id"]})

        missing = [c for c in TRIP_TIME_COLUMNS + TRIP_STATION_COLUMNS if c not in df.columns]
        if missing:
            raise KeyError(f"Trip CSV is missing columns: {', '.join(missing)}")

        for column in TRIP_TIME_COLUMNS:
            df[column] = pd.to_datetime(df[column], format="ISO8601", errors="coerce")
        for column in TRIP_STATION_COLUMNS:
            df[column] = df[column].fillna("")

        invalid = df[TRIP_TIME_COLUMNS].isna().any(axis=1)
        if invalid.any():
            logger.warning(f"Dropping {int(invalid.sum())} trips with unparseable timestamps")
            df = df[~invalid]

        has_ride_id = "ride_id" in df.columns
        trips: List[Trip] = []
        for row in df.itertuples(index=False):
            ride_id = row.ride_id if has_ride_id and isinstance(row.ride_id, str) else None
            trips.append(
                Trip(
                    start_station_id=row.start_station_id,
                    end_station_id=row.end_station_id,
                    started_at=row.started_at.to_pydatetime(),
                    ended_at=row.ended_at.to_pydatetime(),
                    ride_id=ride_id,
                )
            )
        return trips

    def clear(self) -> None:
        """Clear all loaded data to free memory."""
        self.stations = []
        self.trips = []
        logger.info("Cleared station and trip data from memory")
