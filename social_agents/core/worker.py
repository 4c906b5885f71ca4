"""FIFO queue worker woken by new work instead of a polling timer."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

_WAKE = object()


class QueueWorker(Generic[T]):
    """Drain submitted items strictly one at a time, in submission order.

    ``stop()`` lets an in-flight item finish and then exits; items still
    queued stay there and are processed after the next ``start()``.
    """

    def __init__(self, name: str, handler: Callable[[T], Awaitable[Any]]) -> None:
        self.name = name
        self._handler = handler
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._halt = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None
        self._pending = 0
        self.busy = False

    @property
    def running(self) -> bool:
        return self._task is not None

    @property
    def pending(self) -> int:
        return self._pending

    def submit(self, item: T) -> int:
        """Queue an item and return its position in the backlog."""
        self._queue.put_nowait(item)
        self._pending += 1
        return self._pending

    def start(self) -> None:
        if self._task is not None:
            return
        self._halt.clear()
        self._task = asyncio.create_task(self._run(), name=f"worker:{self.name}")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._halt.set()
        self._queue.put_nowait(_WAKE)
        try:
            await self._task
        finally:
            self._task = None

    async def _run(self) -> None:
        while not self._halt.is_set():
            item = await self._queue.get()
            if item is _WAKE:
                continue
            self._pending -= 1
            self.busy = True
            try:
                await self._handler(item)
            except Exception:  # noqa: BLE001
                logger.exception("Worker '%s' failed to process an item", self.name)
            finally:
                self.busy = False
