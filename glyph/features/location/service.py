"""
Geospatial helpers shared by every proximity decision.

Pure functions over WGS-84 degrees; Earth is treated as a sphere.
Callers validate coordinates with is_valid_coordinate() first.
"""

from __future__ import annotations

from math import atan2, cos, degrees, radians, sin, sqrt
from typing import Optional

from glyph.core.config import settings

EARTH_RADIUS_M = 6_371_000

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle (haversine) distance between two points in meters."""
    phi1 = radians(lat1)
    phi2 = radians(lat2)
    d_phi = radians(lat2 - lat1)
    d_lambda = radians(lng2 - lng1)

    a = sin(d_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(d_lambda / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_M * c


def bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Initial compass bearing from point 1 to point 2, in [0, 360)."""
    phi1 = radians(lat1)
    phi2 = radians(lat2)
    d_lambda = radians(lng2 - lng1)

    y = sin(d_lambda) * cos(phi2)
    x = cos(phi1) * sin(phi2) - sin(phi1) * cos(phi2) * cos(d_lambda)
    result = (degrees(atan2(y, x)) + 360) % 360
    # -0.0 and float rounding can land exactly on 360
    return 0.0 if result >= 360 else result


def is_within_radius(lat1: float, lng1: float, lat2: float, lng2: float, radius_m: float) -> bool:
    """Inclusive radius check."""
    return distance(lat1, lng1, lat2, lng2) <= radius_m


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_latitude(lat) -> bool:
    return _is_number(lat) and -90 <= lat <= 90


def is_valid_longitude(lng) -> bool:
    return _is_number(lng) and -180 <= lng <= 180


def is_valid_coordinate(lat, lng) -> bool:
    return is_valid_latitude(lat) and is_valid_longitude(lng)


def bearing_to_compass(bearing_deg: float) -> str:
    index = round(bearing_deg / 22.5) % 16
    return COMPASS_POINTS[index]


def format_distance(meters: float) -> str:
    """Human readable distance: 850m, 2.4km, 37km."""
    if meters < 1000:
        return f"{round(meters)}m"
    if meters < 10000:
        return f"{meters / 1000:.1f}km"
    return f"{round(meters / 1000)}km"


def accuracy_description(accuracy_m: float) -> str:
    if accuracy_m <= 5:
        return "Excellent"
    if accuracy_m <= 10:
        return "Good"
    if accuracy_m <= 20:
        return "Fair"
    if accuracy_m <= 50:
        return "Poor"
    return "Very Poor"


def is_accuracy_sufficient(accuracy_m: float, threshold: Optional[float] = None) -> bool:
    limit = settings.MAX_GPS_ACCURACY_M if threshold is None else threshold
    return accuracy_m <= limit
