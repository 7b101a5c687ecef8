"""Typed events consumed by the event loop.

Sensor callbacks and catalog-refresh completions are turned into these and
queued; only the loop's consumer applies them to the controller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from suburbview.controller.update import UpdateController
from suburbview.domain.errors import CatalogRefreshFailed, SensorError
from suburbview.domain.models import Area


@dataclass(frozen=True)
class PositionEvent:
    lat: float
    lon: float

    def apply(self, controller: UpdateController) -> None:
        controller.on_position(self.lat, self.lon)


@dataclass(frozen=True)
class HeadingEvent:
    heading: float

    def apply(self, controller: UpdateController) -> None:
        controller.on_heading(self.heading)


@dataclass(frozen=True)
class HeadingStreamEvent:
    active: bool

    def apply(self, controller: UpdateController) -> None:
        controller.on_heading_stream(self.active)


@dataclass(frozen=True)
class CatalogEvent:
    areas: tuple[Area, ...]

    def apply(self, controller: UpdateController) -> None:
        controller.on_catalog(self.areas)


@dataclass(frozen=True)
class CatalogFailedEvent:
    error: CatalogRefreshFailed

    def apply(self, controller: UpdateController) -> None:
        controller.on_catalog_failed(self.error)


@dataclass(frozen=True)
class SensorErrorEvent:
    error: SensorError

    def apply(self, controller: UpdateController) -> None:
        controller.on_sensor_error(self.error)


Event = Union[
    PositionEvent,
    HeadingEvent,
    HeadingStreamEvent,
    CatalogEvent,
    CatalogFailedEvent,
    SensorErrorEvent,
]
