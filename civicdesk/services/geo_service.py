"""Great-circle distance helpers for nearby-report search."""

from __future__ import annotations

import math

from civicdesk.core.report_policies import LAT_MAX, LAT_MIN, LNG_MAX, LNG_MIN

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two lat/lng points in kilometers."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float, float]:
    """Lat/lng box enclosing a circle of ``radius_km``, used to prefilter in SQL.

    Returns (min_lat, max_lat, min_lng, max_lng). Longitude spans the full
    range near the poles or when the box would cross the antimeridian.
    """
    dlat = math.degrees(radius_km / EARTH_RADIUS_KM)
    min_lat = max(LAT_MIN, lat - dlat)
    max_lat = min(LAT_MAX, lat + dlat)
    cos_lat = math.cos(math.radians(lat))
    if cos_lat < 1e-6 or max_lat >= LAT_MAX or min_lat <= LAT_MIN:
        return min_lat, max_lat, LNG_MIN, LNG_MAX
    dlng = math.degrees(radius_km / (EARTH_RADIUS_KM * cos_lat))
    if lng - dlng < LNG_MIN or lng + dlng > LNG_MAX:
        return min_lat, max_lat, LNG_MIN, LNG_MAX
    return min_lat, max_lat, lng - dlng, lng + dlng
