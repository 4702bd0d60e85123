"""Unit tests for the MessageHub publish/subscribe channel."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from folio.core.pubsub import EventType, HubEvent, MessageHub


def _event(topic: str = "system_messages", **data) -> HubEvent:
    return HubEvent(type=EventType.CREATED, topic=topic, data=data)


@pytest.fixture
def hub(mock_redis):
    """Hub wired to a mocked Redis client but not started (local delivery)."""
    return MessageHub(redis_factory=AsyncMock(return_value=mock_redis))


@pytest.mark.unit
class TestHubEvent:
    """Tests for HubEvent serialization."""

    def test_json_round_trip(self):
        event = _event(id="m1", subject="Backup done")

        restored = HubEvent.from_json(event.to_json())

        assert restored.type == EventType.CREATED
        assert restored.topic == "system_messages"
        assert restored.data == {"id": "m1", "subject": "Backup done"}
        assert restored.timestamp == event.timestamp


@pytest.mark.unit
class TestLocalDelivery:
    """Tests for subscribe/publish/unsubscribe without Redis."""

    @pytest.mark.asyncio
    async def test_subscriber_receives_published_event(self, hub):
        subscription = await hub.subscribe("system_messages")

        await hub.publish(_event(id="m1"))

        received = await asyncio.wait_for(subscription.get(), timeout=1)
        assert received.data == {"id": "m1"}

    @pytest.mark.asyncio
    async def test_every_subscriber_of_topic_receives_event(self, hub):
        first = await hub.subscribe("system_messages")
        second = await hub.subscribe("system_messages")

        await hub.publish(_event(id="m1"))

        assert first.queue.qsize() == 1
        assert second.queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_other_topics_are_not_delivered(self, hub):
        subscription = await hub.subscribe("other")

        await hub.publish(_event(id="m1"))

        assert subscription.queue.empty()

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_delivery(self, hub):
        subscription = await hub.subscribe("system_messages")
        await subscription.unsubscribe()

        await hub.publish(_event(id="m1"))

        assert subscription.queue.empty()
        assert hub.subscriber_count("system_messages") == 0

    @pytest.mark.asyncio
    async def test_unsubscribe_is_idempotent(self, hub):
        keep = await hub.subscribe("system_messages")
        drop = await hub.subscribe("system_messages")

        await drop.unsubscribe()
        await drop.unsubscribe()

        assert hub.subscriber_count("system_messages") == 1
        await hub.publish(_event(id="m1"))
        assert keep.queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_full_queue_drops_event_without_blocking(self, mock_redis):
        hub = MessageHub(redis_factory=AsyncMock(return_value=mock_redis), max_queue_size=1)
        slow = await hub.subscribe("system_messages")
        fast = await hub.subscribe("system_messages")

        await hub.publish(_event(id="m1"))
        await fast.get()
        await asyncio.wait_for(hub.publish(_event(id="m2")), timeout=1)

        assert slow.queue.qsize() == 1
        assert (await slow.get()).data == {"id": "m1"}
        assert (await fast.get()).data == {"id": "m2"}


@pytest.mark.unit
class TestRedisFanOut:
    """Tests for Redis-backed delivery and its fallbacks."""

    @pytest.mark.asyncio
    async def test_start_falls_back_when_redis_unavailable(self):
        failing = AsyncMock(side_effect=ConnectionError("refused"))
        hub = MessageHub(redis_factory=failing)

        await hub.start()

        assert hub.redis_enabled is False
        await hub.stop()

    @pytest.mark.asyncio
    async def test_publish_goes_through_redis_when_enabled(self, hub, mock_redis):
        hub._redis_enabled = True
        subscription = await hub.subscribe("system_messages")

        await hub.publish(_event(id="m1"))

        mock_redis.publish.assert_awaited_once()
        channel, payload = mock_redis.publish.call_args[0]
        assert channel == "folio:pubsub:system_messages"
        assert HubEvent.from_json(payload).data == {"id": "m1"}
        # Local delivery happens when the listener sees the message
        assert subscription.queue.empty()

    @pytest.mark.asyncio
    async def test_publish_falls_back_to_local_on_redis_error(self, hub, mock_redis):
        hub._redis_enabled = True
        mock_redis.publish.side_effect = ConnectionError("gone")
        subscription = await hub.subscribe("system_messages")

        await hub.publish(_event(id="m1"))

        assert subscription.queue.qsize() == 1
