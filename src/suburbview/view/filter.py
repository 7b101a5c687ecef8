"""
Heading-relative view filter.

Given where the observer stands, which way they face, and the current area
batch, produce the areas inside the forward cone, nearest first, each annotated
with how far it sits toward the visible horizon.

This runs on every sensor tick, so it only builds result models for the areas
that survive the cone test.
"""

from __future__ import annotations

import math
from typing import Sequence

from suburbview.core.geo import (
    DEFAULT_OBSERVER_HEIGHT_M,
    GeoPoint,
    bearing_deg,
    haversine_km,
    horizon_distance_km,
)
from suburbview.domain.models import Area, Direction, ObservationSnapshot, RankedArea

FIELD_OF_VIEW_HALF_WIDTH_DEG = 45.0

DIRECTIONS: tuple[Direction, ...] = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def direction_text(bearing: float) -> Direction:
    """Map a bearing to the nearest of 8 compass labels; halfway values round up."""
    index = math.floor(bearing / 45.0 + 0.5) % 8
    return DIRECTIONS[index]


def relative_bearing(bearing: float, heading: float) -> float:
    """Signed angle from `heading` to `bearing`, in (-180, 180]; positive is clockwise."""
    delta = (bearing - heading) % 360.0
    if delta > 180.0:
        delta -= 360.0
    return delta


def in_field_of_view(relative: float) -> bool:
    # Strict: an area exactly on the cone edge is out of view.
    return abs(relative) < FIELD_OF_VIEW_HALF_WIDTH_DEG


def horizon_percent(distance_km: float, horizon_km: float) -> float:
    """Share of the way to the horizon, capped at 100 and rounded to one decimal."""
    if horizon_km <= 0:
        return 100.0 if distance_km > 0 else 0.0
    return round(min(distance_km / horizon_km, 1.0) * 100.0, 1)


def compute_view(
    observer: ObservationSnapshot,
    catalog: Sequence[Area],
    *,
    observer_height_m: float = DEFAULT_OBSERVER_HEIGHT_M,
) -> list[RankedArea]:
    """Return the areas in view, sorted by distance (stable on catalog order).

    Until both position and heading are known there is nothing to show, and the
    result is an empty list.
    """
    if observer.position is None or observer.heading is None:
        return []

    origin = GeoPoint(lat=observer.position.lat, lon=observer.position.lon)
    heading = observer.heading
    horizon_km = horizon_distance_km(observer_height_m)

    measured: list[tuple[float, float, Area]] = []
    for area in catalog:
        target = GeoPoint(lat=area.location.lat, lon=area.location.lon)
        measured.append((haversine_km(origin, target), bearing_deg(origin, target), area))
    measured.sort(key=lambda m: m[0])

    out: list[RankedArea] = []
    for distance, bearing, area in measured:
        relative = relative_bearing(bearing, heading)
        if not in_field_of_view(relative):
            continue
        out.append(
            RankedArea(
                area=area,
                distance_km=distance,
                bearing_deg=bearing,
                horizon_percent=horizon_percent(distance, horizon_km),
                relative_bearing_deg=relative,
                direction=direction_text(bearing),
            )
        )
    return out
