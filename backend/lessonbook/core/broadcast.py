# backend/lessonbook/core/broadcast.py
"""
Shared broadcast manager for realtime booking notifications.

One Broadcaster instance per worker process. ``memory://`` keeps
everything in-process (development, tests); ``redis://`` fans messages
out across workers.
"""
import asyncio
import logging
from typing import Optional

from broadcaster import Broadcast

from .config import settings

logger = logging.getLogger(__name__)

_broadcast: Optional[Broadcast] = None
_event_loop: Optional[asyncio.AbstractEventLoop] = None


def get_broadcast() -> Broadcast:
    """
    Get the shared broadcast instance.

    Raises:
        RuntimeError: If broadcast is not initialized (call connect_broadcast first)
    """
    if _broadcast is None:
        raise RuntimeError("Broadcast not initialized. Call connect_broadcast() during startup.")
    return _broadcast


def get_broadcast_loop() -> Optional[asyncio.AbstractEventLoop]:
    """Event loop the broadcaster was connected on, used by sync publishers."""
    return _event_loop


def is_broadcast_initialized() -> bool:
    return _broadcast is not None


async def connect_broadcast(url: Optional[str] = None) -> None:
    """
    Connect the shared broadcaster.

    Call during application startup (in lifespan manager).
    """
    global _broadcast, _event_loop

    broadcast_url = url or settings.broadcast_url
    broadcast = Broadcast(broadcast_url)
    await broadcast.connect()
    _broadcast = broadcast
    _event_loop = asyncio.get_running_loop()
    logger.info("[BROADCAST] Connected broadcaster: %s", broadcast_url)


async def disconnect_broadcast() -> None:
    """
    Disconnect the shared broadcaster.

    Call during application shutdown.
    """
    global _broadcast, _event_loop

    if _broadcast is not None:
        await _broadcast.disconnect()
        _broadcast = None
        _event_loop = None
        logger.info("[BROADCAST] Disconnected broadcaster")
