"""Coordinate validation and great-circle distance between a buyer and a shop."""

import math
from typing import Any, NamedTuple, Optional

EARTH_RADIUS_KM = 6371.0


class InvalidCoordinatesError(ValueError):
    """Raised when a distance is requested for out-of-range or non-numeric coordinates."""


class CoordinateCheck(NamedTuple):
    is_valid: bool
    error: Optional[str] = None


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def validate_coordinates(latitude: Any, longitude: Any) -> CoordinateCheck:
    """Check a latitude/longitude pair without raising.

    Numeric strings are accepted. (0, 0) is rejected as the default reading
    of an unset GPS fix.
    """
    if latitude is None or longitude is None:
        return CoordinateCheck(False, "Coordinates cannot be null")

    lat = _to_float(latitude)
    lon = _to_float(longitude)
    if lat is None or lon is None:
        return CoordinateCheck(False, "Coordinates must be valid numbers")

    if lat < -90 or lat > 90:
        return CoordinateCheck(False, "Latitude must be between -90 and 90")
    if lon < -180 or lon > 180:
        return CoordinateCheck(False, "Longitude must be between -180 and 180")

    if lat == 0 and lon == 0:
        return CoordinateCheck(False, "Coordinates cannot be (0, 0) - likely default/mock coordinates")

    return CoordinateCheck(True, None)


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in km, rounded to 2 decimals.

    Raises InvalidCoordinatesError instead of clamping bad input.
    """
    values = (lat1, lon1, lat2, lon2)
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v) for v in values):
        raise InvalidCoordinatesError("Invalid coordinates: all coordinates must be finite numbers")
    if not (-90 <= lat1 <= 90 and -90 <= lat2 <= 90):
        raise InvalidCoordinatesError("Invalid latitude: must be between -90 and 90")
    if not (-180 <= lon1 <= 180 and -180 <= lon2 <= 180):
        raise InvalidCoordinatesError("Invalid longitude: must be between -180 and 180")

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    # rounding can push `a` past 1 for antipodal points
    distance = 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))
    return round(distance, 2)


def format_distance(distance_km: float) -> str:
    """'850 m' below one kilometre, '3.25 km' otherwise."""
    if distance_km < 1:
        # halves round up
        return f"{int(distance_km * 1000 + 0.5)} m"
    return f"{distance_km:.2f} km"
