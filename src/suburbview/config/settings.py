# src/suburbview/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/suburbview/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `SUBURBVIEW_CONFIG_PATH`
- environment variables (e.g., `SUBURBVIEW_LOG_LEVEL`, `SUBURBVIEW_OVERPASS_URL`)

Design rule:
- Deployment knobs (endpoints, timeouts, cache) live in YAML.
- The geometry constants (earth radius, field of view, search radius) do not; they
  are fixed in `suburbview.core.geo` and are not part of these settings.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from suburbview.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `suburbview.config`."""
    text = resources.files("suburbview.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "SuburbView"
    http_timeout_seconds: float = Field(30, gt=0)
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/suburbview"
    default_ttl_seconds: int = Field(600, ge=0)


class OverpassSettings(BaseModel):
    base_url: str = "https://overpass-api.de/api/interpreter"
    place_type: str = "suburb"
    query_timeout_seconds: int = Field(25, gt=0)
    cache_ttl_seconds: int = Field(600, ge=0)
    user_agent: str = "suburbview/0.1.0 (+https://local)"


class IngestionSettings(BaseModel):
    overpass: OverpassSettings = Field(default_factory=OverpassSettings)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: only a small whitelist of variables is honoured.
    """
    load_dotenv_if_present()
    data = dict(data)
    cache_dir = os.getenv("SUBURBVIEW_CACHE_DIR")
    if cache_dir:
        data.setdefault("cache", {})["dir"] = cache_dir

    log_level = os.getenv("SUBURBVIEW_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    overpass_url = os.getenv("SUBURBVIEW_OVERPASS_URL")
    if overpass_url:
        data.setdefault("ingestion", {}).setdefault("overpass", {})["base_url"] = overpass_url

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("SUBURBVIEW_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
