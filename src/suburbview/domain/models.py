"""
Domain models (Pydantic).

These types are the contract between the data source, the view filter and the
presentation boundary:
- catalog entities (`Area` at a `Coordinate`)
- the read-only observer snapshot the filter works from (`ObservationSnapshot`)
- the ranked output (`RankedArea`), rebuilt from scratch on every filter pass

All of them are frozen; nothing downstream of the controller mutates state.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Direction = Literal["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


class Coordinate(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class Area(BaseModel):
    """A named place (suburb) with a representative point.

    Names are not unique: two distinct suburbs may share one.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    location: Coordinate

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("area name must be non-empty")
        return name


class ObservationSnapshot(BaseModel):
    """Observer position and heading at one instant; either may still be unknown."""

    model_config = ConfigDict(frozen=True)

    position: Coordinate | None = None
    heading: float | None = Field(default=None, ge=0, lt=360)

    @property
    def is_ready(self) -> bool:
        return self.position is not None and self.heading is not None


class RankedArea(BaseModel):
    """One visible area with its geometry relative to the observer."""

    model_config = ConfigDict(frozen=True)

    area: Area
    distance_km: float = Field(..., ge=0)
    bearing_deg: float = Field(..., ge=0, lt=360)
    horizon_percent: float = Field(..., ge=0, le=100)
    relative_bearing_deg: float = Field(..., ge=-180, le=180)
    direction: Direction
