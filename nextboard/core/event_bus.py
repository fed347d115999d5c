"""
Board event bus.

The clock driver publishes one DISPLAY_UPDATED per tick plus change events
(hero switched, flash window opened/closed, data refreshed or not). Sinks
subscribe to the topics they care about and read typed payloads from a
bounded queue; a full queue drops the event so a slow sink never stalls
the clock.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional, Union

from config.logging_config import get_logger
from config.settings import EventType
from nextboard.engine.ranker import DisplayEntry, DisplayState

logger = get_logger(__name__)


@dataclass(frozen=True)
class TopChange:
    """The hero entry switched to another reminder or occurrence."""
    previous: Optional[DisplayEntry]
    current: Optional[DisplayEntry]


@dataclass(frozen=True)
class RefreshResult:
    count: int
    fetched_at: Optional[datetime]


@dataclass(frozen=True)
class RefreshFailure:
    error: str


# DISPLAY_UPDATED carries a DisplayState, FLASH_* the hero DisplayEntry
Payload = Union[DisplayState, DisplayEntry, TopChange, RefreshResult, RefreshFailure]


@dataclass(frozen=True)
class BoardEvent:
    """Event data structure."""
    event_type: EventType
    data: Payload
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class Subscription:
    queue: asyncio.Queue
    topics: Optional[FrozenSet[EventType]] = None  # None = every topic

    def wants(self, event_type: EventType) -> bool:
        return self.topics is None or event_type in self.topics


class EventBus:
    """
    Asynchronous pub/sub for board events.
    Full subscriber queues drop the event instead of blocking the publisher.
    """

    def __init__(self):
        """Initialize the event bus."""
        self.subscriptions: List[Subscription] = []
        self.dropped = 0
        self.lock = asyncio.Lock()
        logger.info("EventBus initialized")

    async def subscribe(self, *event_types: EventType,
                        queue_size: int = 100) -> asyncio.Queue:
        """
        Subscribe to one or more topics.

        Args:
            event_types: Topics to receive (none given = every topic)
            queue_size: Maximum queue size for buffering

        Returns:
            Queue that will receive BoardEvents
        """
        topics = frozenset(event_types) or None
        subscription = Subscription(asyncio.Queue(maxsize=queue_size), topics)

        async with self.lock:
            self.subscriptions.append(subscription)

        names = ", ".join(sorted(t.value for t in topics)) if topics else "ALL"
        logger.debug(f"New subscriber added for {names}")
        return subscription.queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        """
        Remove every subscription feeding the given queue.

        Args:
            queue: Queue returned by subscribe()
        """
        async with self.lock:
            self.subscriptions = [s for s in self.subscriptions if s.queue is not queue]
        logger.debug("Subscriber removed")

    async def publish(self, event_type: EventType, data: Payload) -> int:
        """
        Publish an event to every interested subscriber.

        Args:
            event_type: Topic
            data: Typed payload for the topic

        Returns:
            Number of queues the event was delivered to
        """
        event = BoardEvent(event_type=event_type, data=data)

        async with self.lock:
            targets = [s.queue for s in self.subscriptions if s.wants(event_type)]

        delivered = 0
        for q in targets:
            try:
                q.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                self.dropped += 1
                logger.warning(
                    f"Subscriber queue full for {event_type.value}, "
                    "dropping event (slow subscriber)"
                )
        return delivered

    async def clear_all(self) -> None:
        """Clear all subscribers (for cleanup)."""
        async with self.lock:
            self.subscriptions.clear()
        logger.info("All event bus subscribers cleared")
