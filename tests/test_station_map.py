"""Tests for BlueBikesLoader and StationTrafficMap."""

import io
import json
import os
import tempfile
import unittest
from unittest.mock import patch, MagicMock
from datetime import datetime
import sys
from pathlib import Path

import requests

# Add src to path so we can import bluetraffic
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bluetraffic.models import Station, Trip, TrafficSnapshot
from bluetraffic.data_loader import BlueBikesLoader
from bluetraffic.station_map import StationTrafficMap, ANY_TIME_LABEL
from bluetraffic.time_filter import ANY_TIME

STATIONS_JSON = {
    "last_updated": 1710000000,
    "data": {
        "stations": [
            {
                "station_id": "a1",
                "short_name": "A32000",
                "name": "MIT at Mass Ave / Amherst St",
                "lat": 42.3581,
                "lon": -71.0932,
                "capacity": 27,
            },
            {
                "station_id": "b2",
                "short_name": "M32006",
                "name": "Central Square at Mass Ave / Essex St",
                "lat": "42.3652",
                "lon": "-71.1031",
                "capacity": 19,
            },
            {"station_id": "c3", "short_name": "X1", "name": "No coordinates"},
        ]
    },
}

TRIPS_CSV = """ride_id,bike_type,started_at,ended_at,start_station_id,end_station_id,is_member
r1,classic,2024-03-01 08:10:00.123,2024-03-01 08:25:00.456,A32000,M32006,1
r2,electric,2024-03-02 17:40:00,2024-03-02 17:55:00,M32006,A32000,0
r3,classic,2024-03-03 08:30:00,2024-03-03 08:45:00,A32000,Z99999,1
r4,classic,not a date,2024-03-03 08:45:00,A32000,M32006,1
"""


class TestBlueBikesLoader(unittest.TestCase):
    """Test station and trip loading."""

    def test_parse_stations(self):
        """Test station JSON parsing and passthrough fields."""
        stations = BlueBikesLoader._parse_stations(STATIONS_JSON)

        self.assertEqual([s.short_name for s in stations], ["A32000", "M32006"])
        self.assertAlmostEqual(stations[1].latitude, 42.3652, places=4)
        self.assertAlmostEqual(stations[1].longitude, -71.1031, places=4)
        self.assertEqual(stations[0].station_id, "a1")
        self.assertEqual(stations[0].extra, {"capacity": 27})

    def test_parse_stations_missing_data(self):
        """Test payloads without a station array give no stations."""
        self.assertEqual(BlueBikesLoader._parse_stations({}), [])
        self.assertEqual(BlueBikesLoader._parse_stations(None), [])

    def test_parse_trips(self):
        """Test trip CSV parsing drops rows with bad timestamps."""
        trips = BlueBikesLoader._parse_trips(io.StringIO(TRIPS_CSV))

        self.assertEqual([t.ride_id for t in trips], ["r1", "r2", "r3"])
        self.assertEqual(trips[0].start_station_id, "A32000")
        self.assertEqual(trips[0].end_station_id, "M32006")
        self.assertIsInstance(trips[0].started_at, datetime)
        self.assertEqual((trips[0].started_at.hour, trips[0].started_at.minute), (8, 10))

    def test_parse_trips_missing_columns(self):
        with self.assertRaises(KeyError):
            BlueBikesLoader._parse_trips(io.StringIO("ride_id,started_at\nr1,2024-03-01 08:00:00\n"))

    @patch("bluetraffic.data_loader.requests.get")
    def test_load_from_url(self, mock_get):
        """Test downloading stations and trips."""
        stations_response = MagicMock()
        stations_response.json.return_value = STATIONS_JSON
        trips_response = MagicMock()
        trips_response.text = TRIPS_CSV
        mock_get.side_effect = [stations_response, trips_response]

        loader = BlueBikesLoader()
        loader.load_from_url()

        self.assertEqual(len(loader.stations), 2)
        self.assertEqual(len(loader.trips), 3)
        self.assertEqual(mock_get.call_count, 2)

    @patch("bluetraffic.data_loader.requests.get")
    def test_failed_download_leaves_empty_data(self, mock_get):
        """Test network errors are logged and leave empty collections."""
        mock_get.side_effect = requests.ConnectionError("offline")

        loader = BlueBikesLoader()
        with self.assertLogs("bluetraffic.data_loader", level="ERROR"):
            loader.load_from_url()

        self.assertEqual(loader.stations, [])
        self.assertEqual(loader.trips, [])
        self.assertEqual(mock_get.call_count, 2)

    @patch("bluetraffic.data_loader.requests.get")
    def test_bad_json_leaves_empty_stations(self, mock_get):
        response = MagicMock()
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        loader = BlueBikesLoader()
        loader.load_stations_from_url()

        self.assertEqual(loader.stations, [])

    @patch("bluetraffic.data_loader.requests.get")
    def test_wrong_shape_json_leaves_empty_stations(self, mock_get):
        """Test station feeds of the wrong shape are logged instead of raising."""
        for payload in ({"data": {"stations": ["oops"]}}, {"data": ["x"]}, ["x"], {"data": {"stations": "x"}}):
            response = MagicMock()
            response.json.return_value = payload
            mock_get.return_value = response

            loader = BlueBikesLoader()
            with self.assertLogs("bluetraffic.data_loader", level="WARNING"):
                loader.load_stations_from_url()

            self.assertEqual(loader.stations, [])

    def test_parse_stations_skips_non_object_entries(self):
        """Test non-object entries are skipped and valid ones kept."""
        payload = {"data": {"stations": ["oops", 3, STATIONS_JSON["data"]["stations"][0]]}}
        stations = BlueBikesLoader._parse_stations(payload)
        self.assertEqual([s.short_name for s in stations], ["A32000"])

    @patch("bluetraffic.data_loader.requests.get")
    def test_unparseable_trip_csv_leaves_empty_trips(self, mock_get):
        """Test trip CSVs that download but fail to parse are logged and give no trips."""
        for text in ("ride_id,started_at\nr1,2024-03-01 08:00:00\n", ""):
            response = MagicMock()
            response.text = text
            mock_get.return_value = response

            loader = BlueBikesLoader()
            loader.trips = [MagicMock()]
            with self.assertLogs("bluetraffic.data_loader", level="ERROR"):
                loader.load_trips_from_url()

            self.assertEqual(loader.trips, [])

    def test_load_from_files(self):
        """Test loading from local JSON and CSV files."""
        with tempfile.TemporaryDirectory() as tmp:
            stations_path = os.path.join(tmp, "stations.json")
            trips_path = os.path.join(tmp, "trips.csv")
            with open(stations_path, "w", encoding="utf-8") as f:
                json.dump(STATIONS_JSON, f)
            with open(trips_path, "w", encoding="utf-8") as f:
                f.write(TRIPS_CSV)

            loader = BlueBikesLoader()
            loader.load_from_files(stations_path, trips_path)

        self.assertEqual(len(loader.stations), 2)
        self.assertEqual(len(loader.trips), 3)

        loader.clear()
        self.assertEqual(loader.stations, [])
        self.assertEqual(loader.trips, [])


class TestStationTrafficMap(unittest.TestCase):
    """Test the StationTrafficMap class."""

    def setUp(self):
        """Set up test fixtures."""
        self.map = StationTrafficMap(load_data=False)

        self.map.loader.stations = [
            Station(short_name="A", latitude=42.36, longitude=-71.09, name="Station A"),
            Station(short_name="B", latitude=42.35, longitude=-71.06, name="Station B"),
            Station(short_name="C", latitude=42.34, longitude=-71.05, name="Station C"),
        ]
        self.map.loader.trips = [
            Trip("A", "B", datetime(2024, 3, 5, 8, 10), datetime(2024, 3, 5, 8, 25)),
            Trip("A", "C", datetime(2024, 3, 6, 8, 40), datetime(2024, 3, 6, 8, 50)),
            Trip("B", "A", datetime(2024, 3, 6, 18, 0), datetime(2024, 3, 6, 18, 20)),
        ]

    def test_update_any_time(self):
        """Test the unfiltered snapshot covers every trip."""
        snapshot = self.map.update()

        self.assertIsInstance(snapshot, TrafficSnapshot)
        self.assertEqual(snapshot.time_filter, ANY_TIME)
        self.assertEqual(snapshot.time_label, ANY_TIME_LABEL)
        self.assertIsNone(snapshot.time_datetime)
        self.assertEqual(snapshot.max_traffic, 3)
        self.assertEqual(snapshot.radius_range, (0.0, 25.0))
        self.assertEqual([c.short_name for c in snapshot.circles], ["A", "B", "C"])

        circle_a, circle_b = snapshot.circles[0], snapshot.circles[1]
        self.assertAlmostEqual(circle_a.radius, 25.0)
        self.assertEqual(circle_a.title, "3 trips (2 departures, 1 arrivals)")
        self.assertEqual(circle_a.departure_ratio, 1.0)
        self.assertEqual(circle_b.departure_ratio, 0.5)

    def test_update_with_time_filter(self):
        """Test a morning filter drops the evening trip."""
        snapshot = self.map.update(480)

        self.assertEqual(snapshot.time_label, "8:00 AM")
        self.assertEqual(snapshot.time_datetime, "08:00")
        self.assertEqual(snapshot.radius_range, (3.0, 50.0))
        totals = {t.short_name: t.total_traffic for t in snapshot.traffic}
        self.assertEqual(totals, {"A": 2, "B": 1, "C": 1})

        circle_a = snapshot.circles[0]
        self.assertEqual(circle_a.departure_ratio, 1.0)
        self.assertAlmostEqual(circle_a.radius, 50.0)

    def test_update_returns_new_snapshot(self):
        """Test each update produces independent results."""
        first = self.map.update(480)
        second = self.map.update(1080)

        self.assertIsNot(first, second)
        self.assertEqual(first.max_traffic, 2)
        self.assertEqual(second.max_traffic, 1)

    def test_update_without_data(self):
        """Test an empty session gives an empty snapshot instead of failing."""
        empty = StationTrafficMap(load_data=False)
        snapshot = empty.update(480)

        self.assertEqual(snapshot.traffic, [])
        self.assertEqual(snapshot.circles, [])
        self.assertEqual(snapshot.max_traffic, 0)

    def test_invalid_time_filter(self):
        """Test out-of-range time filters are rejected."""
        for value in (1440, -5, 12.5, "480"):
            with self.assertRaises(ValueError):
                self.map.update(value)

    def test_get_station_traffic(self):
        traffic = self.map.get_station_traffic("B", 1080)
        self.assertEqual((traffic.arrivals, traffic.departures), (0, 1))

    def test_get_station_traffic_not_found(self):
        """Test error handling for an unknown station."""
        with self.assertRaises(ValueError):
            self.map.get_station_traffic("NONEXISTENT")

    def test_busiest_stations(self):
        busiest = self.map.busiest_stations(limit=1)
        self.assertEqual([t.short_name for t in busiest], ["A"])

    @patch.object(BlueBikesLoader, "load_from_url")
    def test_init_loads_data(self, mock_load):
        StationTrafficMap(load_data=True)
        mock_load.assert_called_once()


if __name__ == "__main__":
    unittest.main()
