"""
In-memory holder for the most recent area batch.

A refresh replaces the whole batch at once; there is no merging and no identity
between areas of different batches. A failed refresh never reaches this class,
so the previous snapshot simply stays in place.
"""

from __future__ import annotations

import logging
from typing import Iterable

from suburbview.domain.models import Area

logger = logging.getLogger(__name__)


class AreaCatalog:
    def __init__(self, areas: Iterable[Area] = ()):
        self._areas: tuple[Area, ...] = tuple(areas)
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of successful replacements so far."""
        return self._generation

    def replace(self, areas: Iterable[Area]) -> None:
        """Swap in a new batch atomically."""
        batch = tuple(areas)
        self._areas = batch
        self._generation += 1
        logger.debug("Area catalog replaced (generation=%d, areas=%d)", self._generation, len(batch))

    def current(self) -> tuple[Area, ...]:
        return self._areas

    def __len__(self) -> int:
        return len(self._areas)
