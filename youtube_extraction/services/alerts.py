"""In-process broadcast of extraction health alerts."""
import asyncio
from typing import List

from ..models.health import HealthAlert
from ..utils.logging import CorrelatedLogger


class AlertChannel:
    """Fan-out of HealthAlert values to subscriber queues.

    Publishing never waits: a subscriber whose queue is full misses the alert.
    """

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: List[asyncio.Queue] = []
        self.logger = CorrelatedLogger(__name__)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def publish(self, alert: HealthAlert) -> int:
        """Deliver to every subscriber; returns how many received it."""
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(alert)
                delivered += 1
            except asyncio.QueueFull:
                self.logger.warning("Alert subscriber queue full, dropping health alert")
        return delivered
