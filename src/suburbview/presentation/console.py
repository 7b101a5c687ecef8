"""
Console presenters.

Used by the CLI to print each emitted view, either as readable lines or as one
JSON document per view for piping into other tools. Each view is headed by the
observer position and heading it was computed from.
"""

from __future__ import annotations

import json
import sys
from typing import TextIO

from suburbview.domain.models import ObservationSnapshot, RankedArea


def format_observer(observer: ObservationSnapshot) -> str:
    """Render the observer as `Position: lat, lon  Heading: N°` (4 decimals, whole degrees)."""
    parts = []
    if observer.position is not None:
        parts.append(f"Position: {observer.position.lat:.4f}, {observer.position.lon:.4f}")
    if observer.heading is not None:
        parts.append(f"Heading: {round(observer.heading) % 360}°")
    return "  ".join(parts)


def format_ranked_area(item: RankedArea) -> str:
    """Render one visible area as a compact single line."""
    return (
        f"{item.area.name}  {item.distance_km:.1f} km {item.direction}"
        f"  {item.horizon_percent:.1f}% to horizon"
    )


class ConsolePresenter:
    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stdout

    def show_view(self, results: list[RankedArea], observer: ObservationSnapshot | None = None) -> None:
        if observer is not None:
            print(format_observer(observer), file=self._stream)
        if not results:
            print("(no suburbs in view)", file=self._stream)
        for item in results:
            print(format_ranked_area(item), file=self._stream)
        print("", file=self._stream)

    def show_error(self, message: str) -> None:
        print(f"Error: {message}", file=self._stream)


class JsonLinesPresenter:
    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stdout

    def show_view(self, results: list[RankedArea], observer: ObservationSnapshot | None = None) -> None:
        payload: dict[str, object] = {"results": [r.model_dump(mode="json") for r in results]}
        if observer is not None:
            payload["observer"] = observer.model_dump(mode="json")
        print(json.dumps(payload, ensure_ascii=False), file=self._stream)

    def show_error(self, message: str) -> None:
        print(json.dumps({"error": message}, ensure_ascii=False), file=self._stream)
