from __future__ import annotations
from dataclasses import dataclass
from math import asin, atan2, cos, degrees, radians, sin, sqrt

"""
Geospatial helpers.

Spherical-earth primitives used on every sensor update: initial bearing,
haversine distance, a degree-offset bounding box for area queries, and the
geometric horizon for a standing observer. Everything is in decimal degrees
unless a name says otherwise.
"""

EARTH_RADIUS_KM = 6371.0
DEFAULT_OBSERVER_HEIGHT_M = 1.7
SEARCH_RADIUS_M = 5000.0
METERS_PER_DEGREE = 111_320.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    def as_overpass_bbox(self) -> str:
        """Render as Overpass `(south,west,north,east)` filter arguments."""
        return f"{self.south:.6f},{self.west:.6f},{self.north:.6f},{self.east:.6f}"


def normalize_degrees(value: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = value % 360.0
    # A tiny negative input wraps to exactly 360.0 in floating point.
    return 0.0 if wrapped >= 360.0 else wrapped


def bearing_deg(a: GeoPoint, b: GeoPoint) -> float:
    """Initial great-circle bearing from `a` toward `b`, clockwise from north.

    Identical points have no direction; `atan2(0, 0)` is 0 so they report north.
    """
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlon = radians(b.lon - a.lon)

    y = sin(dlon) * cos(lat2)
    x = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)
    return normalize_degrees(degrees(atan2(y, x)))


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in kilometers between two points."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = lat2 - lat1
    dlon = radians(b.lon - a.lon)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair outside [0, 1] for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * asin(sqrt(h))


def bounding_box(center: GeoPoint, radius_m: float = SEARCH_RADIUS_M) -> BoundingBox:
    """Approximate box of `radius_m` around `center`.

    Longitude span grows as 1/cos(lat) and is meaningless near the poles; edges
    are not wrapped across the antimeridian.
    """
    if radius_m <= 0:
        raise ValueError("radius_m must be > 0")
    lat_delta = radius_m / METERS_PER_DEGREE
    lon_delta = radius_m / (METERS_PER_DEGREE * cos(radians(center.lat)))
    return BoundingBox(
        north=min(90.0, center.lat + lat_delta),
        south=max(-90.0, center.lat - lat_delta),
        east=center.lon + lon_delta,
        west=center.lon - lon_delta,
    )


def horizon_distance_km(observer_height_m: float = DEFAULT_OBSERVER_HEIGHT_M) -> float:
    """Distance to the geometric horizon, `sqrt(2 R h)`, ignoring refraction."""
    if observer_height_m < 0:
        raise ValueError("observer_height_m must be >= 0")
    return sqrt(2 * EARTH_RADIUS_KM * (observer_height_m / 1000.0))
