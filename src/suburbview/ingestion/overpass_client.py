"""
Area ingestion client (OpenStreetMap Overpass API).

This module turns a bounding box into a batch of named areas:
- query `way` and `relation` features tagged `place=<place_type>` inside the box
- ask Overpass for `out center tags` so polygon features come with a centroid
- keep the name and a representative coordinate per element

Failures of any kind (transport, HTTP status, JSON, response shape) surface as
`CatalogRefreshFailed`; the controller keeps serving the previous batch.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from suburbview.config.settings import Settings
from suburbview.core.cache import FileCache
from suburbview.core.env import resolve_project_path
from suburbview.core.geo import BoundingBox
from suburbview.core.http import post_text
from suburbview.domain.errors import CatalogRefreshFailed
from suburbview.domain.models import Area, Coordinate

logger = logging.getLogger(__name__)

_CACHE_NAMESPACE = "overpass"


def build_query(bbox: BoundingBox, *, place_type: str = "suburb", timeout_seconds: int = 25) -> str:
    """Render the Overpass QL query for named places inside `bbox`."""
    box = bbox.as_overpass_bbox()
    return (
        f"[out:json][timeout:{int(timeout_seconds)}];\n"
        "(\n"
        f'  way["place"="{place_type}"]({box});\n'
        f'  relation["place"="{place_type}"]({box});\n'
        ");\n"
        "out center tags;\n"
    )


def _element_coordinate(element: dict[str, Any]) -> tuple[Any, Any]:
    center = element.get("center")
    if isinstance(center, dict):
        return center.get("lat"), center.get("lon")
    return element.get("lat"), element.get("lon")


def parse_elements(payload: Any) -> list[Area]:
    """Convert an Overpass JSON response into areas, skipping unusable elements."""
    if not isinstance(payload, dict) or not isinstance(payload.get("elements"), list):
        raise ValueError("Overpass response has no 'elements' list")

    areas: list[Area] = []
    for element in payload["elements"]:
        if not isinstance(element, dict):
            continue
        tags = element.get("tags") or {}
        name = tags.get("name") if isinstance(tags, dict) else None
        lat, lon = _element_coordinate(element)
        if not name or lat is None or lon is None:
            logger.debug("Skipping Overpass element %s/%s without name or position", element.get("type"), element.get("id"))
            continue
        try:
            areas.append(Area(name=str(name), location=Coordinate(lat=float(lat), lon=float(lon))))
        except (TypeError, ValueError, ValidationError):
            logger.debug("Skipping Overpass element %s with invalid coordinates", element.get("id"))
            continue
    return areas


class OverpassClient:
    """Fetches and caches Overpass responses, then parses them into `Area` batches."""

    def __init__(self, settings: Settings, cache: FileCache):
        self._settings = settings
        self._cache = cache

    def _post_query(self, query: str) -> Any:
        overpass = self._settings.ingestion.overpass
        return post_text(
            overpass.base_url,
            body=query,
            headers={"User-Agent": overpass.user_agent},
            timeout_seconds=self._settings.app.http_timeout_seconds,
        )

    def fetch_areas(self, bbox: BoundingBox) -> list[Area]:
        """Return the named areas inside `bbox`.

        Raises:
            CatalogRefreshFailed: On network, HTTP, or response-format errors.
        """
        overpass = self._settings.ingestion.overpass
        query = build_query(
            bbox,
            place_type=overpass.place_type,
            timeout_seconds=overpass.query_timeout_seconds,
        )

        def builder() -> list[dict[str, Any]]:
            logger.info("Querying Overpass for %s areas in %s", overpass.place_type, bbox.as_overpass_bbox())
            areas = parse_elements(self._post_query(query))
            return [a.model_dump(mode="json") for a in areas]

        try:
            cached = self._cache.get_or_set(
                _CACHE_NAMESPACE,
                query,
                builder,
                ttl_seconds=int(overpass.cache_ttl_seconds),
            )
            return [Area.model_validate(item) for item in cached]
        except httpx.HTTPError as exc:
            raise CatalogRefreshFailed(str(exc) or type(exc).__name__, bbox=bbox.as_overpass_bbox(), cause=exc) from exc
        except ValueError as exc:
            raise CatalogRefreshFailed(str(exc), bbox=bbox.as_overpass_bbox(), cause=exc) from exc


def build_overpass_client(settings: Settings) -> OverpassClient:
    """Create a client backed by the configured on-disk response cache."""
    cache = FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )
    return OverpassClient(settings, cache)
