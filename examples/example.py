"""Example usage of StationTrafficMap."""

import logging
import sys
from pathlib import Path

# Add src to path so we can import bluetraffic
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bluetraffic.station_map import StationTrafficMap
from bluetraffic.time_filter import ANY_TIME

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def parse_time(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def print_traffic(station_map: StationTrafficMap, time_filter: int, limit: int = 10):
    """
    Display the busiest stations for a time of day.

    Args:
        station_map: Map with stations and trips loaded.
        time_filter: Minutes since midnight, or ANY_TIME.
        limit: Number of stations to show.
    """
    snapshot = station_map.update(time_filter)

    print(f"\n{'='*70}")
    print(f"Station traffic at {snapshot.time_label}")
    print(f"{'='*70}\n")

    if not snapshot.traffic:
        print("  No station data loaded")
        return

    circles = {c.short_name: c for c in snapshot.circles}
    busiest = sorted(snapshot.traffic, key=lambda t: t.total_traffic, reverse=True)[:limit]
    for traffic in busiest:
        circle = circles[traffic.short_name]
        name = traffic.station.name or traffic.short_name
        print(f"  {name[:40]:40s} r={circle.radius:5.1f}  flow={circle.departure_ratio:.1f}  {circle.title}")

    print(f"\nBusiest station total: {snapshot.max_traffic} trips\n")


def interactive_mode(station_map: StationTrafficMap):
    """
    Run in interactive mode, allowing user to query multiple times of day.
    """
    print("Bluebikes Station Traffic - Interactive Mode")
    print("Enter a time (HH:MM) or 'any' to see the busiest stations")
    print("(Type 'quit' to exit)\n")

    while True:
        try:
            user_input = input("Enter time (or 'quit'): ").strip().lower()

            if user_input in ["quit", "q", "exit"]:
                print("Goodbye!")
                break

            if not user_input:
                continue

            try:
                time_filter = ANY_TIME if user_input == "any" else parse_time(user_input)
                print_traffic(station_map, time_filter)
            except ValueError as e:
                print(f"Invalid time: {e}")

        except KeyboardInterrupt:
            print("\n\nGoodbye!")
            break


if __name__ == "__main__":
    print("Loading station and trip data... (this may take a minute)")
    station_map = StationTrafficMap(load_data=True)

    if len(sys.argv) > 1:
        # Command line mode: pass a time as argument
        arg = sys.argv[1]
        try:
            print_traffic(station_map, ANY_TIME if arg == "any" else parse_time(arg))
        except ValueError as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        interactive_mode(station_map)
