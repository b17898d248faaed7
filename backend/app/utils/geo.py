"""Great-circle distance helpers used by the city and salon lookups."""

import math
from typing import Tuple

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.32


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the distance in kilometres between two WGS84 points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(lat: float, lng: float, radius_km: float) -> Tuple[float, float, float, float]:
    """Return ``(min_lat, max_lat, min_lng, max_lng)`` enclosing the radius.

    The box is a cheap SQL prefilter; callers still compute the exact
    distance for ordering and the final cut.
    """
    lat_delta = radius_km / KM_PER_DEGREE_LAT
    cos_lat = math.cos(math.radians(lat))
    if abs(cos_lat) < 1e-6:
        lng_delta = 180.0
    else:
        lng_delta = radius_km / (KM_PER_DEGREE_LAT * abs(cos_lat))
    return lat - lat_delta, lat + lat_delta, lng - lng_delta, lng + lng_delta
