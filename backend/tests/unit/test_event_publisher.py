import asyncio
import json
import logging

from broadcaster import Broadcast

from lessonbook.core import broadcast as broadcast_module
from lessonbook.events.booking_events import BookingEventType
from lessonbook.events.publisher import BroadcastEventSink


def test_publish_without_broadcaster_is_dropped(monkeypatch, caplog):
    monkeypatch.setattr(broadcast_module, "_broadcast", None)
    sink = BroadcastEventSink()

    with caplog.at_level(logging.WARNING):
        sink.publish("user:u1", BookingEventType.BOOKING_UPDATED, {"id": "b1"})

    assert "dropping" in caplog.text


def test_publish_with_closed_loop_is_dropped():
    loop = asyncio.new_event_loop()
    loop.close()
    sink = BroadcastEventSink(broadcast=Broadcast("memory://"), loop=loop)

    sink.publish("user:u1", BookingEventType.BOOKING_UPDATED, {"id": "b1"})


def test_publish_delivers_envelope_to_subscribers():
    async def scenario():
        broadcast = Broadcast("memory://")
        await broadcast.connect()
        try:
            sink = BroadcastEventSink(broadcast=broadcast, loop=asyncio.get_running_loop())
            async with broadcast.subscribe(channel="teacher-bookings:t1") as subscriber:
                # Publishing happens from a worker thread in production
                await asyncio.to_thread(
                    sink.publish,
                    "teacher-bookings:t1",
                    BookingEventType.BOOKING_UPDATED,
                    {"id": "b1"},
                )
                event = await asyncio.wait_for(subscriber.get(), timeout=2)
        finally:
            await broadcast.disconnect()
        return json.loads(event.message)

    envelope = asyncio.run(scenario())

    assert envelope["type"] == "booking-updated"
    assert envelope["schema_version"] == 1
    assert envelope["payload"] == {"id": "b1"}
