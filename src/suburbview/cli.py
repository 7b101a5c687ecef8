"""
SuburbView CLI entrypoint.

This CLI is intended for local demos and debugging without a device:
- `view`: one position + heading, print what is in view
- `areas`: list the areas the data source returns around a position
- `replay`: push a JSON-lines recording of sensor readings through the event loop
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Iterable, Iterator, TextIO

from pydantic import ValidationError

from suburbview.catalog.loader import load_areas
from suburbview.config.settings import get_settings
from suburbview.controller.events import (
    CatalogEvent,
    Event,
    HeadingEvent,
    HeadingStreamEvent,
    PositionEvent,
    SensorErrorEvent,
)
from suburbview.controller.loop import EventLoop, build_event_loop
from suburbview.controller.update import Presenter, UpdateController
from suburbview.core.geo import SEARCH_RADIUS_M, GeoPoint, bearing_deg, bounding_box, haversine_km
from suburbview.core.logging import configure_logging
from suburbview.domain.errors import CatalogRefreshFailed, SensorPermissionDenied, SensorUnavailable
from suburbview.domain.models import Area, Coordinate
from suburbview.ingestion.overpass_client import build_overpass_client
from suburbview.ingestion.sensors import heading_from_reading
from suburbview.presentation.console import ConsolePresenter, JsonLinesPresenter
from suburbview.view.filter import direction_text

logger = logging.getLogger(__name__)


def _presenter(args: argparse.Namespace) -> Presenter:
    return JsonLinesPresenter() if args.json else ConsolePresenter()


def _fetch_live(lat: float, lon: float, radius_m: float) -> list[Area]:
    client = build_overpass_client(get_settings())
    return client.fetch_areas(bounding_box(GeoPoint(lat=lat, lon=lon), radius_m))


def _invalid_position(lat: float, lon: float) -> str | None:
    """Return a one-line reason when (lat, lon) is not a valid coordinate."""
    try:
        Coordinate(lat=lat, lon=lon)
    except ValidationError as exc:
        err = exc.errors()[0]
        field = ".".join(str(p) for p in err["loc"])
        return f"Invalid position: {field} {err['input']!r}: {err['msg']}"
    return None


def _cmd_view(args: argparse.Namespace) -> int:
    """Handle the `view` subcommand."""
    presenter = _presenter(args)
    invalid = _invalid_position(args.lat, args.lon)
    if invalid is not None:
        presenter.show_error(invalid)
        return 1
    try:
        areas = load_areas(args.catalog) if args.catalog else _fetch_live(args.lat, args.lon, args.radius_m)
    except CatalogRefreshFailed as exc:
        presenter.show_error(exc.user_message)
        return 1

    controller = UpdateController(presenter, search_radius_m=args.radius_m)
    controller.on_catalog(areas)
    controller.on_position(args.lat, args.lon)
    try:
        controller.on_heading(args.heading)
    except ValueError as exc:
        presenter.show_error(f"Invalid heading: {exc}")
        return 1
    return 0


def _cmd_areas(args: argparse.Namespace) -> int:
    invalid = _invalid_position(args.lat, args.lon)
    if invalid is not None:
        print(f"Error: {invalid}", file=sys.stderr)
        return 1
    try:
        areas = _fetch_live(args.lat, args.lon, args.radius_m)
    except CatalogRefreshFailed as exc:
        print(f"Error: {exc.user_message}", file=sys.stderr)
        return 1

    origin = GeoPoint(lat=args.lat, lon=args.lon)
    for area in areas:
        target = GeoPoint(lat=area.location.lat, lon=area.location.lon)
        bearing = bearing_deg(origin, target)
        print(
            f"{area.name}  ({area.location.lat:.4f}, {area.location.lon:.4f})"
            f"  {haversine_km(origin, target):.1f} km {direction_text(bearing)}"
        )
    print(f"{len(areas)} areas")
    return 0


def parse_reading(reading: dict[str, Any]) -> Event | None:
    """Translate one recorded sensor reading into a loop event (None if unrecognised)."""
    if "lat" in reading and ("lon" in reading or "lng" in reading):
        return PositionEvent(lat=float(reading["lat"]), lon=float(reading.get("lon", reading.get("lng"))))
    if "heading_stream" in reading:
        return HeadingStreamEvent(active=bool(reading["heading_stream"]))
    if "sensor_error" in reading:
        sensor = str(reading.get("sensor") or "heading")
        if reading["sensor_error"] == "denied":
            return SensorErrorEvent(SensorPermissionDenied(sensor))
        return SensorErrorEvent(SensorUnavailable(sensor))
    heading = heading_from_reading(reading)
    if heading is not None:
        return HeadingEvent(heading=heading)
    return None


def iter_events(lines: Iterable[str]) -> Iterator[Event]:
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            reading = json.loads(line)
            event = parse_reading(reading) if isinstance(reading, dict) else None
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping line %d: %s", lineno, exc)
            continue
        if event is None:
            logger.warning("Skipping line %d: not a position or heading reading", lineno)
            continue
        yield event


async def replay(loop: EventLoop, events: Iterable[Event], *, catalog: list[Area] | None = None) -> None:
    """Feed `events` through `loop` in order, then wait for outstanding refreshes."""
    runner = asyncio.create_task(loop.run())
    if catalog is not None:
        loop.post(CatalogEvent(tuple(catalog)))
    for event in events:
        loop.post(event)
        await loop.join()
    if loop.refresher is not None:
        await loop.refresher.wait()
        await loop.join()
    loop.stop()
    await runner


def _open_input(path: str) -> TextIO:
    if path == "-":
        return sys.stdin
    return open(path, encoding="utf-8")


def _cmd_replay(args: argparse.Namespace) -> int:
    presenter = _presenter(args)
    catalog = load_areas(args.catalog) if args.catalog else None
    fetch_areas = None if catalog is not None else build_overpass_client(get_settings()).fetch_areas

    stream = _open_input(args.input)
    try:
        events = list(iter_events(stream))
    finally:
        if stream is not sys.stdin:
            stream.close()

    async def _run() -> None:
        loop = build_event_loop(presenter, fetch_areas, search_radius_m=args.radius_m)
        await replay(loop, events, catalog=catalog)

    asyncio.run(_run())
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the SuburbView CLI."""
    parser = argparse.ArgumentParser(prog="suburbview")
    parser.add_argument("--log-level", type=str, default=None, help="Override the configured log level.")
    sub = parser.add_subparsers(dest="command", required=True)

    view = sub.add_parser("view", help="Show the suburbs in view for one position and heading.")
    view.add_argument("--lat", required=True, type=float)
    view.add_argument("--lon", required=True, type=float)
    view.add_argument("--heading", required=True, type=float, help="Degrees clockwise from north.")
    view.add_argument("--catalog", type=str, default=None, help="Offline area catalog (JSON) instead of Overpass.")
    view.add_argument("--radius-m", type=float, default=SEARCH_RADIUS_M)
    view.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    view.set_defaults(func=_cmd_view)

    areas = sub.add_parser("areas", help="List the areas Overpass returns around a position.")
    areas.add_argument("--lat", required=True, type=float)
    areas.add_argument("--lon", required=True, type=float)
    areas.add_argument("--radius-m", type=float, default=SEARCH_RADIUS_M)
    areas.set_defaults(func=_cmd_areas)

    rep = sub.add_parser("replay", help="Replay a JSON-lines recording of sensor readings.")
    rep.add_argument("input", help="Recording file, or '-' for stdin.")
    rep.add_argument("--catalog", type=str, default=None, help="Offline area catalog (JSON) instead of Overpass.")
    rep.add_argument("--radius-m", type=float, default=SEARCH_RADIUS_M)
    rep.add_argument("--json", action="store_true", help="Output one JSON document per view")
    rep.set_defaults(func=_cmd_replay)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m suburbview.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
