"""
Refresh event channel.

Portfolio edits and preference changes are published here and consumed on
the event loop by a worker that hands them to the quote refresher.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Union

from quotewatch.domain.models import Stock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstrumentSetChanged:
    stocks: Tuple[Stock, ...]


@dataclass(frozen=True)
class PeriodChanged:
    minutes: int


RefreshEvent = Union[InstrumentSetChanged, PeriodChanged]
RefreshEventHandler = Callable[[RefreshEvent], Awaitable[None]]


class RefreshEventQueue:
    def __init__(self, maxsize: int = 1000):
        self._queue: asyncio.Queue[RefreshEvent] = asyncio.Queue(maxsize=maxsize)

    async def publish(self, event: RefreshEvent) -> None:
        await self._queue.put(event)

    def publish_nowait(self, event: RefreshEvent) -> None:
        self._queue.put_nowait(event)

    async def get(self) -> RefreshEvent:
        return await self._queue.get()

    def size(self) -> int:
        return self._queue.qsize()

    async def join(self) -> None:
        await self._queue.join()

    def task_done(self) -> None:
        self._queue.task_done()


class RefreshEventWorker:
    """Hands queued events to the refresher, one at a time, on the event loop"""

    def __init__(self, queue: RefreshEventQueue, handler: RefreshEventHandler):
        self._queue = queue
        self._handler = handler
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._run(), name="refresh-events")

    async def stop(self, drain: bool = False) -> None:
        """Stop consuming; with ``drain`` first wait for queued events to be handled"""
        if not self.running:
            return
        if drain:
            await self._queue.join()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            logger.debug("Refresh event worker stopped, %d events left", self._queue.size())

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._handler(event)
            except Exception:
                logger.exception("Refresh event handler failed for %s", type(event).__name__)
            finally:
                self._queue.task_done()
