"""Coordinate validation and distance helpers."""

import math

from geopy import distance  # pyright: ignore[reportMissingTypeStubs]

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0

# Mean length of one degree of latitude
KM_PER_DEGREE = 111.195


def is_valid_location(latitude: float | None, longitude: float | None) -> bool:
    """Return True if both coordinates are present, finite and in range."""
    if latitude is None or longitude is None:
        return False
    if math.isnan(latitude) or math.isnan(longitude):
        return False
    return (
        MIN_LATITUDE <= latitude <= MAX_LATITUDE
        and MIN_LONGITUDE <= longitude <= MAX_LONGITUDE
    )


def distance_km(
    latitude: float, longitude: float, other_latitude: float, other_longitude: float
) -> float:
    """Great-circle distance between two points in kilometres."""
    return distance.great_circle(
        (latitude, longitude), (other_latitude, other_longitude)
    ).km


def bounding_box(
    latitude: float, longitude: float, radius_km: float
) -> tuple[float, float, float, float]:
    """Return (min_lat, max_lat, min_lon, max_lon) enclosing a circle.

    The box may be larger than the circle; callers filter by exact distance
    afterwards. Near the poles, or when the circle crosses the antimeridian,
    the longitude span covers the full range.
    """
    lat_delta = radius_km / KM_PER_DEGREE
    min_lat = max(MIN_LATITUDE, latitude - lat_delta)
    max_lat = min(MAX_LATITUDE, latitude + lat_delta)

    cos_lat = math.cos(math.radians(max(abs(min_lat), abs(max_lat))))
    if cos_lat <= 1e-9:
        return min_lat, max_lat, MIN_LONGITUDE, MAX_LONGITUDE
    lon_delta = radius_km / (KM_PER_DEGREE * cos_lat)
    min_lon = longitude - lon_delta
    max_lon = longitude + lon_delta
    if min_lon < MIN_LONGITUDE or max_lon > MAX_LONGITUDE:
        return min_lat, max_lat, MIN_LONGITUDE, MAX_LONGITUDE
    return min_lat, max_lat, min_lon, max_lon


def parse_coordinate(value: str | None) -> float | None:
    """Parse a query-string coordinate; None if absent or not a number."""
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        return None
