"""Scales that turn station traffic into circle radius and color buckets."""

import math
from bisect import bisect_right
from typing import Optional, Sequence, Tuple

from .models import StationTraffic
from .time_filter import is_time_filter_active

# Radius ranges in pixels
RADIUS_RANGE_ANY_TIME = (0.0, 25.0)
RADIUS_RANGE_FILTERED = (3.0, 50.0)


class SqrtScale:
    """Square-root scale mapping a continuous domain onto a radius range."""

    def __init__(self, domain: Tuple[float, float] = (0.0, 1.0), range_: Tuple[float, float] = (0.0, 1.0)):
        self.domain = domain
        self.range = range_

    def __call__(self, value: float) -> float:
        d0, d1 = (math.sqrt(v) for v in self.domain)
        r0, r1 = self.range
        if d1 == d0:
            return r0
        t = (math.sqrt(value) - d0) / (d1 - d0)
        return r0 + t * (r1 - r0)


class QuantizeScale:
    """
    Maps a continuous domain onto a discrete range using uniform segments.

    With domain (0, 1) and three outputs the thresholds are 1/3 and 2/3.
    Values outside the domain fall into the first or last bucket.
    """

    def __init__(self, domain: Tuple[float, float], range_: Sequence[float]):
        if not range_:
            raise ValueError("QuantizeScale needs at least one output value")
        self.domain = domain
        self.range = tuple(range_)
        x0, x1 = domain
        n = len(self.range) - 1
        self.thresholds = [((i + 1) * x1 - (i - n) * x0) / (n + 1) for i in range(n)]

    def __call__(self, value: float) -> float:
        return self.range[bisect_right(self.thresholds, value)]


STATION_FLOW = QuantizeScale((0.0, 1.0), (0.0, 0.5, 1.0))


def radius_scale_for(max_traffic: int, time_filter: Optional[int]) -> SqrtScale:
    """
    Build the radius scale for one draw.

    Args:
        max_traffic: Largest total traffic in the current result set.
        time_filter: Active time filter; selects the radius range.

    Returns:
        SqrtScale with domain [0, max_traffic] (or [0, 1] when nothing moved).
    """
    range_ = RADIUS_RANGE_FILTERED if is_time_filter_active(time_filter) else RADIUS_RANGE_ANY_TIME
    return SqrtScale(domain=(0.0, float(max_traffic or 1)), range_=range_)


def departure_bucket(traffic: StationTraffic) -> float:
    """Bucketed departure ratio (0, 0.5 or 1) used to color a station."""
    return STATION_FLOW(traffic.departure_ratio)
