# backend/lessonbook/events/publisher.py
"""
Event sinks for realtime booking notifications.

Publishing is fire-and-forget: a sink never raises into the caller and
never blocks on delivery. The booking service runs inside a worker thread
(routes use ``asyncio.to_thread``), so ``BroadcastEventSink`` schedules the
async broadcaster publish on the application loop and returns at once.
"""

import asyncio
from concurrent.futures import Future
import json
import logging
from typing import Any, Dict, Optional, Protocol

from broadcaster import Broadcast

from ..core.broadcast import get_broadcast, get_broadcast_loop
from .booking_events import BookingEventType, build_event

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Publish interface the booking service emits to."""

    def publish(
        self, channel: str, event_type: BookingEventType, payload: Dict[str, Any]
    ) -> None:
        ...


class BroadcastEventSink:
    """Publishes booking events through the shared Broadcaster connection."""

    def __init__(
        self,
        broadcast: Optional[Broadcast] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._broadcast = broadcast
        self._loop = loop

    def _resolve(self) -> tuple[Broadcast, asyncio.AbstractEventLoop]:
        broadcast = self._broadcast or get_broadcast()
        loop = self._loop or get_broadcast_loop()
        if loop is None or loop.is_closed():
            raise RuntimeError("No running event loop registered for broadcaster")
        return broadcast, loop

    def publish(
        self, channel: str, event_type: BookingEventType, payload: Dict[str, Any]
    ) -> None:
        try:
            broadcast, loop = self._resolve()
            message = json.dumps(build_event(event_type, payload), default=str)
            future = asyncio.run_coroutine_threadsafe(
                broadcast.publish(channel=channel, message=message), loop
            )
        except RuntimeError as e:
            # Broadcast not initialized
            logger.warning(f"[EVENT-PUBLISH] Broadcast unavailable, dropping {event_type}: {e}")
            return
        except Exception as e:
            logger.error(f"[EVENT-PUBLISH] Failed to schedule {event_type} on {channel}: {e}")
            return

        future.add_done_callback(lambda f: _log_delivery(f, channel, event_type))
        logger.debug(f"[EVENT-PUBLISH] Scheduled {event_type} on {channel}")


def _log_delivery(future: Future, channel: str, event_type: BookingEventType) -> None:
    if future.cancelled():
        logger.warning(f"[EVENT-PUBLISH] Publish of {event_type} to {channel} was cancelled")
        return
    exc = future.exception()
    if exc is not None:
        logger.warning(f"[EVENT-PUBLISH] Failed to publish {event_type} to {channel}: {exc}")
