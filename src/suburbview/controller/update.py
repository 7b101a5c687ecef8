"""
Update controller.

The controller is the single owner of the mutable observer state (position,
heading) and of the area catalog. Every sensor reading goes through it; once
both position and heading are known, each reading re-runs the view filter and
hands the result to the presenter.

Lifecycle:
- AWAITING_POSITION: nothing known about where we are (a heading may be stored)
- AWAITING_HEADING: position known, heading not
- READY: both known; every update emits a fresh view

A position reading also asks for a catalog refresh around the new position. The
request is fire-and-forget: the filter runs right away with the catalog we hold,
and the new batch arrives later through `on_catalog` or `on_catalog_failed`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Protocol

from suburbview.catalog.area_catalog import AreaCatalog
from suburbview.core.geo import (
    DEFAULT_OBSERVER_HEIGHT_M,
    SEARCH_RADIUS_M,
    BoundingBox,
    GeoPoint,
    bounding_box,
    normalize_degrees,
)
from suburbview.domain.errors import CatalogRefreshFailed, SensorError, SensorUnavailable
from suburbview.domain.models import Area, Coordinate, ObservationSnapshot, RankedArea
from suburbview.view.filter import compute_view

logger = logging.getLogger(__name__)

HEADING_SENSOR = "heading"


class Phase(str, Enum):
    AWAITING_POSITION = "awaiting_position"
    AWAITING_HEADING = "awaiting_heading"
    READY = "ready"


class Presenter(Protocol):
    """Where views and user-visible errors go."""

    def show_view(self, results: list[RankedArea], observer: ObservationSnapshot) -> None: ...

    def show_error(self, message: str) -> None: ...


RefreshRequester = Callable[[BoundingBox], None]


@dataclass
class ObservationState:
    position: Coordinate | None = None
    heading: float | None = None

    def snapshot(self) -> ObservationSnapshot:
        return ObservationSnapshot(position=self.position, heading=self.heading)


class UpdateController:
    def __init__(
        self,
        presenter: Presenter,
        *,
        request_refresh: RefreshRequester | None = None,
        catalog: AreaCatalog | None = None,
        search_radius_m: float = SEARCH_RADIUS_M,
        observer_height_m: float = DEFAULT_OBSERVER_HEIGHT_M,
    ):
        self._presenter = presenter
        self._request_refresh = request_refresh
        self._catalog = catalog if catalog is not None else AreaCatalog()
        self._search_radius_m = float(search_radius_m)
        self._observer_height_m = float(observer_height_m)
        self._state = ObservationState()
        self._heading_active = True
        self._reported_unavailable: set[str] = set()

    @property
    def phase(self) -> Phase:
        if self._state.position is None:
            return Phase.AWAITING_POSITION
        if self._state.heading is None:
            return Phase.AWAITING_HEADING
        return Phase.READY

    @property
    def state(self) -> ObservationSnapshot:
        return self._state.snapshot()

    @property
    def catalog(self) -> AreaCatalog:
        return self._catalog

    @property
    def heading_active(self) -> bool:
        return self._heading_active

    def on_position(self, lat: float, lon: float) -> list[RankedArea] | None:
        """Record a position reading, request new areas around it, and re-run the view."""
        self._state.position = Coordinate(lat=lat, lon=lon)
        if self._request_refresh is not None:
            box = bounding_box(GeoPoint(lat=float(lat), lon=float(lon)), self._search_radius_m)
            self._request_refresh(box)
        return self._recompute()

    def on_heading(self, heading: float) -> list[RankedArea] | None:
        if not self._heading_active:
            logger.debug("Ignoring heading reading while the heading stream is inactive")
            return None
        value = float(heading)
        if not math.isfinite(value):
            raise ValueError(f"heading must be a finite number of degrees, got {heading!r}")
        self._state.heading = normalize_degrees(value)
        return self._recompute()

    def on_heading_stream(self, active: bool) -> None:
        """Track whether compass readings are flowing; going inactive forgets the heading."""
        self._heading_active = bool(active)
        if not self._heading_active:
            self._state.heading = None
        logger.info("Heading stream %s", "active" if self._heading_active else "inactive")

    def on_catalog(self, areas: Iterable[Area]) -> list[RankedArea] | None:
        self._catalog.replace(areas)
        return self._recompute()

    def on_catalog_failed(self, error: CatalogRefreshFailed) -> None:
        logger.warning("Catalog refresh failed (%s); keeping %d areas", error, len(self._catalog))
        self._presenter.show_error(error.user_message)

    def on_sensor_error(self, error: SensorError) -> None:
        if isinstance(error, SensorUnavailable):
            if error.sensor in self._reported_unavailable:
                return
            self._reported_unavailable.add(error.sensor)
        if error.sensor == HEADING_SENSOR:
            self.on_heading_stream(False)
        logger.warning("Sensor error (%s): %s", error.sensor, error)
        self._presenter.show_error(error.user_message)

    def _recompute(self) -> list[RankedArea] | None:
        snapshot = self._state.snapshot()
        if not snapshot.is_ready:
            return None
        results = compute_view(snapshot, self._catalog.current(), observer_height_m=self._observer_height_m)
        self._presenter.show_view(results, snapshot)
        return results
