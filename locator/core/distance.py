"""Great-circle distance on a spherical Earth."""

import math

from locator.core.models import Coordinate

EARTH_RADIUS_MILES = 3958.8


def distance(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance in statute miles between two valid coordinates."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lon = math.radians(b.lon - a.lon)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    # rounding can push h a hair outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
