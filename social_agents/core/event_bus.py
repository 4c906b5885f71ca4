"""Lightweight in-memory bus carrying events emitted by agents."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from .models import AgentEvent

logger = logging.getLogger(__name__)


class EventBus:
    """Fan events out to subscriber mailboxes.

    Publishing never blocks: mailboxes are unbounded queues and events
    published while nobody is subscribed are dropped.
    """

    def __init__(self) -> None:
        self._mailboxes: Dict[str, asyncio.Queue[AgentEvent]] = {}

    def register(self, subscriber_id: str) -> asyncio.Queue[AgentEvent]:
        """Ensure a mailbox exists for the subscriber."""
        return self._mailboxes.setdefault(subscriber_id, asyncio.Queue())

    def unregister(self, subscriber_id: str) -> None:
        """Remove the mailbox to stop further deliveries."""
        self._mailboxes.pop(subscriber_id, None)

    def publish(self, event: AgentEvent) -> int:
        """Deliver to the targeted subscriber, or to everyone but the source.

        A target that is not itself subscribed (an agent, whose inbox is
        fed by the orchestrator) falls back to the broadcast path so the
        relay can forward it.
        """
        if event.target_id and event.target_id in self._mailboxes:
            self._mailboxes[event.target_id].put_nowait(event)
            return 1

        delivered = 0
        for subscriber_id, queue in list(self._mailboxes.items()):
            if subscriber_id == event.source_id:
                continue
            queue.put_nowait(event)
            delivered += 1
        if not delivered:
            logger.debug("Event '%s' from '%s' had no subscribers", event.type, event.source_id)
        return delivered

    @asynccontextmanager
    async def deliver(self, subscriber_id: str) -> AsyncIterator[asyncio.Queue[AgentEvent]]:
        """Context manager yielding the subscriber's mailbox queue."""
        queue = self.register(subscriber_id)
        try:
            yield queue
        finally:
            self.unregister(subscriber_id)
