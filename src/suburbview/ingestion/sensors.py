"""
Sensor reading normalization.

Platforms report compass orientation in two flavours: an iOS-style
`webkitCompassHeading` and a W3C `alpha` angle. The controller only ever sees a
plain heading in [0, 360); this module does the translation at the edge.
"""

from __future__ import annotations

from typing import Any

from suburbview.core.geo import normalize_degrees


def normalize_heading(
    *,
    alpha: float | None = None,
    webkit_compass_heading: float | None = None,
) -> float | None:
    """Return the heading in [0, 360), or None when the reading carries none.

    A webkit compass heading is reported inverted and takes precedence over `alpha`.
    """
    if webkit_compass_heading is not None:
        return normalize_degrees(360.0 - float(webkit_compass_heading))
    if alpha is not None:
        return normalize_degrees(float(alpha))
    return None


def heading_from_reading(reading: dict[str, Any]) -> float | None:
    """Pick the heading out of a raw orientation reading dict."""
    if reading.get("heading") is not None:
        return normalize_degrees(float(reading["heading"]))
    return normalize_heading(
        alpha=reading.get("alpha"),
        webkit_compass_heading=reading.get("webkitCompassHeading"),
    )
