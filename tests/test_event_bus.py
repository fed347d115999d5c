"""Tests for nextboard.core.event_bus."""

from __future__ import annotations

from datetime import datetime

from config.settings import EventType
from nextboard.core.event_bus import EventBus, RefreshFailure, RefreshResult, TopChange


class TestEventBus:
    async def test_routes_by_topic_and_to_all(self):
        bus = EventBus()
        top_queue = await bus.subscribe(EventType.TOP_CHANGED)
        all_queue = await bus.subscribe()

        await bus.publish(EventType.TOP_CHANGED, TopChange(None, None))
        await bus.publish(EventType.DATA_REFRESHED, RefreshResult(2, datetime(2024, 1, 2, 9, 0)))

        assert top_queue.qsize() == 1
        assert all_queue.qsize() == 2
        assert (await top_queue.get()).data == TopChange(None, None)

    async def test_several_topics_on_one_queue(self):
        bus = EventBus()
        queue = await bus.subscribe(EventType.DATA_REFRESHED, EventType.REFRESH_FAILED)

        assert await bus.publish(EventType.REFRESH_FAILED, RefreshFailure("down")) == 1
        assert await bus.publish(EventType.TOP_CHANGED, TopChange(None, None)) == 0

        assert queue.qsize() == 1
        assert (await queue.get()).data.error == "down"

    async def test_full_queue_drops_instead_of_blocking(self):
        bus = EventBus()
        queue = await bus.subscribe(EventType.REFRESH_FAILED, queue_size=1)

        await bus.publish(EventType.REFRESH_FAILED, RefreshFailure("first"))
        await bus.publish(EventType.REFRESH_FAILED, RefreshFailure("second"))

        assert queue.qsize() == 1
        assert bus.dropped == 1
        assert (await queue.get()).data.error == "first"

    async def test_unsubscribe(self):
        bus = EventBus()
        queue = await bus.subscribe(EventType.FLASH_STARTED)
        await bus.unsubscribe(queue)

        assert await bus.publish(EventType.FLASH_STARTED, None) == 0
        assert queue.empty()

    async def test_clear_all(self):
        bus = EventBus()
        await bus.subscribe()
        await bus.subscribe(EventType.TOP_CHANGED)
        await bus.clear_all()
        assert bus.subscriptions == []
