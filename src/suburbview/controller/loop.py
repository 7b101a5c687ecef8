"""
Single-threaded event loop around the update controller.

All state changes happen in one asyncio consumer task that drains a queue of
typed events, so the controller and catalog need no locks. The only work that
leaves the loop is the blocking Overpass call, which `CatalogRefresher` runs in
a worker thread; its outcome comes back as an event on the same queue.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Sequence

from suburbview.controller.events import CatalogEvent, CatalogFailedEvent, Event
from suburbview.controller.update import Presenter, UpdateController
from suburbview.core.geo import DEFAULT_OBSERVER_HEIGHT_M, SEARCH_RADIUS_M, BoundingBox
from suburbview.domain.errors import CatalogRefreshFailed
from suburbview.domain.models import Area

logger = logging.getLogger(__name__)

AreaFetcher = Callable[[BoundingBox], Sequence[Area]]


class CatalogRefresher:
    """Runs area fetches off the loop; a newer request supersedes an older one.

    The superseded task is cancelled and its generation is retired, so a slow
    response can never replace a newer catalog.
    """

    def __init__(self, fetch_areas: AreaFetcher, post: Callable[[Event], None]):
        self._fetch_areas = fetch_areas
        self._post = post
        self._task: asyncio.Task[None] | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def request(self, bbox: BoundingBox) -> None:
        """Start a refresh for `bbox`; must be called from inside the running loop."""
        self._generation += 1
        if self.pending:
            assert self._task is not None
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self._refresh(bbox, self._generation))

    async def _refresh(self, bbox: BoundingBox, generation: int) -> None:
        try:
            areas = await asyncio.to_thread(self._fetch_areas, bbox)
        except CatalogRefreshFailed as exc:
            event: Event = CatalogFailedEvent(exc)
        except Exception as exc:
            logger.exception("Unexpected error while fetching areas")
            event = CatalogFailedEvent(
                CatalogRefreshFailed(f"{type(exc).__name__}: {exc}", bbox=bbox.as_overpass_bbox(), cause=exc)
            )
        else:
            event = CatalogEvent(tuple(areas))

        if generation != self._generation:
            logger.debug("Dropping superseded catalog refresh (generation %d)", generation)
            return
        self._post(event)

    async def wait(self) -> None:
        """Wait for the in-flight refresh, if any, to finish."""
        while self._task is not None and not self._task.done():
            task = self._task
            try:
                await task
            except asyncio.CancelledError:
                if task is self._task:
                    raise

    async def aclose(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None


class EventLoop:
    """Queue consumer that applies events to the controller one at a time."""

    def __init__(self, controller: UpdateController | None = None):
        self.controller = controller
        self.refresher: CatalogRefresher | None = None
        self._queue: asyncio.Queue[Event | None] = asyncio.Queue()

    def post(self, event: Event) -> None:
        self._queue.put_nowait(event)

    async def join(self) -> None:
        """Wait until every event posted so far has been handled."""
        await self._queue.join()

    def stop(self) -> None:
        """Ask `run()` to return after the events already queued."""
        self._queue.put_nowait(None)

    async def run(self) -> None:
        if self.controller is None:
            raise RuntimeError("EventLoop has no controller")
        try:
            while True:
                event = await self._queue.get()
                try:
                    if event is None:
                        break
                    event.apply(self.controller)
                except Exception:
                    logger.exception("Error while handling %s", type(event).__name__)
                finally:
                    self._queue.task_done()
        finally:
            if self.refresher is not None:
                await self.refresher.aclose()


def build_event_loop(
    presenter: Presenter,
    fetch_areas: AreaFetcher | None = None,
    *,
    search_radius_m: float = SEARCH_RADIUS_M,
    observer_height_m: float = DEFAULT_OBSERVER_HEIGHT_M,
) -> EventLoop:
    """Wire presenter, controller and (optionally) a live area fetcher into one loop."""
    loop = EventLoop()
    if fetch_areas is not None:
        loop.refresher = CatalogRefresher(fetch_areas, post=loop.post)
    loop.controller = UpdateController(
        presenter,
        request_refresh=loop.refresher.request if loop.refresher is not None else None,
        search_radius_m=search_radius_m,
        observer_height_m=observer_height_m,
    )
    return loop
