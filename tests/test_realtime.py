"""Tests for the in-process realtime hub."""

import pytest

from yafoy.services.realtime import RealtimeHub, room_topic, user_topic


class TestRealtimeHub:
    """Test topic subscriptions and delivery."""

    @pytest.mark.asyncio
    async def test_publish_reaches_subscribers_of_topic_only(self):
        hub = RealtimeHub()
        room_events, other_events = [], []

        async def on_room(event):
            room_events.append(event)

        async def on_other(event):
            other_events.append(event)

        await hub.subscribe(room_topic("r1"), on_room)
        await hub.subscribe(room_topic("r2"), on_other)

        delivered = await hub.publish(room_topic("r1"), {"event": "chat_message"})

        assert delivered == 1
        assert room_events == [{"event": "chat_message"}]
        assert other_events == []

    @pytest.mark.asyncio
    async def test_events_delivered_in_publish_order(self):
        hub = RealtimeHub()
        received = []

        async def on_event(event):
            received.append(event["n"])

        await hub.subscribe(user_topic("u1"), on_event)
        for n in range(5):
            await hub.publish(user_topic("u1"), {"n": n})

        assert received == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_delivery(self):
        hub = RealtimeHub()
        received = []

        async def on_event(event):
            received.append(event)

        subscription = await hub.subscribe("room:r1", on_event)
        await subscription.unsubscribe()

        assert await hub.publish("room:r1", {"event": "x"}) == 0
        assert received == []
        assert hub.get_active_topics() == []

    @pytest.mark.asyncio
    async def test_unsubscribe_twice_is_harmless(self):
        hub = RealtimeHub()

        async def on_event(event):
            pass

        subscription = await hub.subscribe("room:r1", on_event)
        await subscription.unsubscribe()
        await subscription.unsubscribe()

        assert hub.get_subscriber_count("room:r1") == 0

    @pytest.mark.asyncio
    async def test_failing_subscriber_dropped(self):
        hub = RealtimeHub()
        received = []

        async def broken(event):
            raise ConnectionError("socket closed")

        async def healthy(event):
            received.append(event)

        await hub.subscribe("user:u1", broken)
        await hub.subscribe("user:u1", healthy)

        delivered = await hub.publish("user:u1", {"event": "notification"})

        assert delivered == 1
        assert received == [{"event": "notification"}]
        assert hub.get_subscriber_count("user:u1") == 1

    @pytest.mark.asyncio
    async def test_publish_without_subscribers(self):
        hub = RealtimeHub()
        assert await hub.publish("order:o1", {"event": "order_status_changed"}) == 0
