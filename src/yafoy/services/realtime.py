"""In-process realtime hub: topic subscriptions with push callbacks."""

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

EventCallback = Callable[[dict[str, Any]], Awaitable[None]]


def room_topic(room_id: Any) -> str:
    return f"room:{room_id}"


def user_topic(user_id: Any) -> str:
    return f"user:{user_id}"


def order_topic(order_id: Any) -> str:
    return f"order:{order_id}"


class Subscription:
    """Handle returned by ``RealtimeHub.subscribe``; call ``unsubscribe`` on teardown."""

    def __init__(self, hub: "RealtimeHub", topic: str, subscription_id: str):
        self.hub = hub
        self.topic = topic
        self.subscription_id = subscription_id

    async def unsubscribe(self) -> None:
        await self.hub.remove(self.topic, self.subscription_id)


class RealtimeHub:
    """Routes published events to the callbacks subscribed to a topic.

    Structure: {topic: {subscription_id: callback}}

    Delivery is in publish order per topic. There is no ordering across
    topics and no de-duplication.
    """

    def __init__(self):
        self.topics: dict[str, dict[str, EventCallback]] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, topic: str, callback: EventCallback) -> Subscription:
        """Register a callback for every event published on ``topic``."""
        subscription_id = uuid.uuid4().hex
        async with self._lock:
            self.topics.setdefault(topic, {})[subscription_id] = callback
            logger.info(
                f"Subscribed: topic={topic}, subscription={subscription_id}, "
                f"subscribers={len(self.topics[topic])}"
            )
        return Subscription(self, topic, subscription_id)

    async def remove(self, topic: str, subscription_id: str) -> None:
        """Drop a subscription. Unknown ids are ignored."""
        async with self._lock:
            subscribers = self.topics.get(topic)
            if subscribers is None:
                return
            if subscribers.pop(subscription_id, None) is not None:
                logger.info(f"Unsubscribed: topic={topic}, subscription={subscription_id}")

            # Clean up empty topics
            if not subscribers:
                del self.topics[topic]

    async def publish(self, topic: str, event: dict[str, Any]) -> int:
        """Deliver an event to all subscribers of a topic concurrently.

        Subscribers whose callback raises are dropped.

        Returns:
            Number of subscribers the event was delivered to
        """
        # Copy to avoid modification during iteration
        subscribers = dict(self.topics.get(topic, {}))
        if not subscribers:
            return 0

        async def deliver(subscription_id: str, callback: EventCallback) -> tuple[str, bool]:
            try:
                await callback(event)
                return (subscription_id, True)
            except Exception as e:
                logger.warning(f"Failed to deliver to {subscription_id} on {topic}: {e}")
                return (subscription_id, False)

        results = await asyncio.gather(
            *[deliver(sid, cb) for sid, cb in subscribers.items()]
        )

        delivered = 0
        for subscription_id, success in results:
            if success:
                delivered += 1
            else:
                await self.remove(topic, subscription_id)

        return delivered

    def get_subscriber_count(self, topic: str) -> int:
        return len(self.topics.get(topic, {}))

    def get_active_topics(self) -> list[str]:
        return list(self.topics.keys())


# Global singleton instance
hub = RealtimeHub()


async def publish_event(topic: str, event: BaseModel) -> int:
    """Serialize a schema event and publish it on the shared hub."""
    return await hub.publish(topic, event.model_dump(mode="json"))
