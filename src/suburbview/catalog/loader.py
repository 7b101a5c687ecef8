"""
Offline area catalog loader.

For demos and replays without network access, an area batch can be read from a
local JSON file instead of Overpass. Two shapes are accepted:
- a list of `{"name": ..., "location": {"lat": ..., "lon": ...}}` objects
- a list of flat `{"name": ..., "lat": ..., "lon": ...}` objects
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from suburbview.core.env import resolve_project_path
from suburbview.domain.models import Area


_AREAS_ADAPTER = TypeAdapter(list[Area])


def _normalize_entry(entry: Any) -> Any:
    if isinstance(entry, dict) and "location" not in entry and "lat" in entry:
        lon = entry.get("lon", entry.get("lng"))
        return {"name": entry.get("name"), "location": {"lat": entry["lat"], "lon": lon}}
    return entry


def load_areas(path: str | Path) -> list[Area]:
    """Load and validate an area catalog JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"Invalid catalog {resolved}; expected a JSON list of areas.")
    return _AREAS_ADAPTER.validate_python([_normalize_entry(e) for e in payload])
