"""In-process fan-out of committed audit entries to WebSocket subscribers.

Each application id has its own set of subscriber queues. A subscriber that
falls ``queue_size`` messages behind is dropped rather than blocking the
writer; its queue then ends with ``CLOSED`` so the reader knows to reconnect
and reload the history.
"""

import asyncio
import logging
from typing import Any, Dict, Set
from uuid import UUID

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Last item a dropped subscriber receives
CLOSED = None


class AuditBroadcaster:
    """Per-application pub/sub over asyncio queues."""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: Dict[UUID, Set[asyncio.Queue]] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, application_id: UUID) -> asyncio.Queue:
        # Unbounded so the close marker always fits; the backlog limit is
        # enforced in publish()
        queue: asyncio.Queue = asyncio.Queue()
        async with self._lock:
            self._subscribers.setdefault(application_id, set()).add(queue)
        logger.debug("Audit subscriber added for application %s", application_id)
        return queue

    async def unsubscribe(self, application_id: UUID, queue: asyncio.Queue) -> None:
        async with self._lock:
            queues = self._subscribers.get(application_id)
            if queues is None:
                return
            queues.discard(queue)
            if not queues:
                del self._subscribers[application_id]

    def subscriber_count(self, application_id: UUID) -> int:
        return len(self._subscribers.get(application_id, ()))

    async def publish(self, application_id: UUID, message: dict[str, Any]) -> int:
        """Deliver a message to every subscriber of an application.

        Returns the number of subscribers that received it.
        """
        async with self._lock:
            queues = list(self._subscribers.get(application_id, ()))

        if not queues:
            return 0

        failed = []
        delivered = 0
        for queue in queues:
            if queue.qsize() >= self.queue_size:
                logger.warning(
                    "Audit subscriber queue full for application %s, dropping subscriber",
                    application_id,
                )
                failed.append(queue)
                continue
            queue.put_nowait(message)
            delivered += 1

        for queue in failed:
            await self.unsubscribe(application_id, queue)
            queue.put_nowait(CLOSED)

        return delivered


broadcaster = AuditBroadcaster(queue_size=get_settings().realtime_queue_size)
