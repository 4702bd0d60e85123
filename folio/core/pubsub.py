"""
Message Hub with Redis Pub/Sub

An explicit publish/subscribe channel owned by the application (created in the
lifespan and stored on ``app.state``). Local subscribers receive events through
bounded queues; Redis pub/sub fans events out across instances. Falls back to
local-only delivery when Redis is unavailable.
"""

import asyncio
import json
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any
from uuid import uuid4

import redis.asyncio as redis
from fastapi import Depends, Request

from folio.core.cache import get_redis

logger = logging.getLogger(__name__)

SYSTEM_MESSAGES_TOPIC = "system_messages"


class EventType(str, Enum):
    """Hub event types."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    PING = "ping"


@dataclass
class HubEvent:
    """
    Event published on the hub.

    Attributes:
        type: Event type
        topic: Topic the event belongs to
        data: Event payload
        timestamp: When the event was created
    """

    type: EventType
    topic: str
    data: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(
            {
                "type": self.type.value,
                "topic": self.topic,
                "data": self.data,
                "timestamp": self.timestamp.isoformat(),
            },
            default=str,
        )

    @classmethod
    def from_json(cls, json_str: str) -> "HubEvent":
        """Deserialize event from JSON string."""
        data = json.loads(json_str)
        return cls(
            type=EventType(data["type"]),
            topic=data["topic"],
            data=data["data"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class Subscription:
    """
    A live subscription to one topic.

    Events arrive on ``queue``. Call ``unsubscribe()`` when done; calling it
    more than once is harmless.
    """

    topic: str
    queue: asyncio.Queue[HubEvent]
    hub: "MessageHub"
    id: str = field(default_factory=lambda: str(uuid4()))

    async def get(self) -> HubEvent:
        """Wait for the next event."""
        return await self.queue.get()

    async def unsubscribe(self) -> None:
        """Stop receiving events."""
        await self.hub.unsubscribe(self)


class MessageHub:
    """
    Topic-based publish/subscribe hub.

    Supports Redis pub/sub for multi-instance delivery with fallback
    to local-only delivery when Redis is unavailable.
    """

    PUBSUB_CHANNEL_PREFIX = "folio:pubsub:"

    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[redis.Redis]] = get_redis,
        max_queue_size: int = 100,
    ) -> None:
        self._redis_factory = redis_factory
        self._max_queue_size = max_queue_size
        # Map of topic to subscriptions keyed by subscription id
        self._subscribers: dict[str, dict[str, Subscription]] = defaultdict(dict)
        self._pubsub_task: asyncio.Task[None] | None = None
        self._redis_enabled = False
        self._lock = asyncio.Lock()

    @property
    def redis_enabled(self) -> bool:
        """Whether events are currently fanned out through Redis."""
        return self._redis_enabled

    async def start(self) -> None:
        """
        Start the Redis pub/sub listener.

        Falls back to local-only if Redis is unavailable.
        """
        if self._pubsub_task is not None:
            return

        try:
            client = await self._redis_factory()
            result = await client.ping()  # type: ignore[misc]
            if not result:
                raise ConnectionError("Redis ping failed")
            self._redis_enabled = True
            self._pubsub_task = asyncio.create_task(self._listen_pubsub())
            logger.info("Message hub Redis pub/sub started")
        except Exception as e:
            logger.warning(f"Redis pub/sub not available, using local-only mode: {e}")
            self._redis_enabled = False

    async def stop(self) -> None:
        """Stop the Redis pub/sub listener."""
        if self._pubsub_task is not None:
            self._pubsub_task.cancel()
            try:
                await self._pubsub_task
            except asyncio.CancelledError:
                pass
            self._pubsub_task = None
            logger.info("Message hub Redis pub/sub stopped")
        self._redis_enabled = False

    async def _listen_pubsub(self) -> None:
        """Listen for events from Redis pub/sub and deliver locally."""
        try:
            client = await self._redis_factory()
            pubsub = client.pubsub()
            await pubsub.psubscribe(f"{self.PUBSUB_CHANNEL_PREFIX}*")

            async for message in pubsub.listen():
                if message["type"] != "pmessage":
                    continue
                try:
                    data = message["data"]
                    if isinstance(data, bytes):
                        data = data.decode()
                    event = HubEvent.from_json(data)
                    await self._deliver_local(event)
                except Exception as e:
                    logger.error(f"Error processing pub/sub message: {e}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Redis pub/sub listener error: {e}")
            self._redis_enabled = False

    async def subscribe(self, topic: str) -> Subscription:
        """
        Subscribe to a topic.

        Args:
            topic: Topic name

        Returns:
            Subscription receiving every event published on the topic
        """
        subscription = Subscription(
            topic=topic,
            queue=asyncio.Queue(maxsize=self._max_queue_size),
            hub=self,
        )
        async with self._lock:
            self._subscribers[topic][subscription.id] = subscription

        logger.debug(f"Subscription {subscription.id} added to {topic}")
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        """
        Remove a subscription.

        Args:
            subscription: Subscription returned by subscribe()
        """
        async with self._lock:
            topic_subscribers = self._subscribers.get(subscription.topic)
            if not topic_subscribers or subscription.id not in topic_subscribers:
                return

            del topic_subscribers[subscription.id]
            if not topic_subscribers:
                del self._subscribers[subscription.topic]

        logger.debug(f"Subscription {subscription.id} removed from {subscription.topic}")

    async def publish(self, event: HubEvent) -> None:
        """
        Publish an event to every subscriber of its topic.

        If Redis is enabled, publishes to Redis and lets each instance's
        listener deliver locally. Otherwise, delivers locally only.

        Args:
            event: Event to publish
        """
        if self._redis_enabled:
            try:
                client = await self._redis_factory()
                await client.publish(
                    f"{self.PUBSUB_CHANNEL_PREFIX}{event.topic}",
                    event.to_json(),
                )
                return
            except Exception as e:
                logger.warning(f"Redis publish failed, falling back to local: {e}")

        await self._deliver_local(event)

    async def _deliver_local(self, event: HubEvent) -> None:
        """
        Deliver an event to local subscribers only.

        A subscriber whose queue is full misses the event.
        """
        async with self._lock:
            subscriptions = list(self._subscribers.get(event.topic, {}).values())

        for subscription in subscriptions:
            try:
                subscription.queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(
                    f"Dropping {event.type.value} event for slow subscriber {subscription.id}",
                    extra={"topic": event.topic, "subscription_id": subscription.id},
                )

    def subscriber_count(self, topic: str) -> int:
        """Get the number of subscribers for a topic."""
        return len(self._subscribers.get(topic, {}))


def get_message_hub(request: Request) -> MessageHub:
    """FastAPI dependency returning the hub created in the application lifespan."""
    return request.app.state.message_hub


Hub = Annotated[MessageHub, Depends(get_message_hub)]
