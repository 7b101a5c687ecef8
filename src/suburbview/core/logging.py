"""
Logging configuration.

We use a YAML logging config (`src/suburbview/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `SUBURBVIEW_LOG_LEVEL`).
"""

from __future__ import annotations

import copy
import logging.config

from suburbview.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure the Python logging system from the packaged YAML config.

    `level` wins over the settings value; the CLI passes it for `--verbose`.
    """
    settings = get_settings()
    config = copy.deepcopy(get_logging_config())

    effective = (level or settings.app.log_level).upper()
    config.setdefault("root", {})["level"] = effective
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = effective

    logging.config.dictConfig(config)
