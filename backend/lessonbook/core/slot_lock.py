# backend/lessonbook/core/slot_lock.py
"""
Optional per-slot-key lock around booking approval.

Approval re-checks the slot and then writes in separate statements, so two
teachers' clicks (or two tabs) can interleave. When ``SLOT_LOCK_ENABLED`` is
set, the critical section runs under a Redis ``SET NX EX`` key for the slot.
The lock fails open when Redis is unreachable, which falls back to the
re-check-only behaviour.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
import time
from typing import Iterator, Optional

from redis import Redis

from ..models.booking import SlotKey
from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()


def _namespaced_key(slot: SlotKey) -> str:
    return f"{settings.slot_lock_namespace}:lock:{slot.as_lock_key()}"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
            client.ping()
        except Exception as exc:
            logger.warning("slot_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def acquire_slot_lock(slot: SlotKey, ttl_s: Optional[int] = None) -> bool:
    """Try to take the slot lock; True when acquired or when locking is unavailable."""
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_slot_lock("acquire", "redis_unavailable")
        return True
    try:
        acquired = bool(
            client.set(
                _namespaced_key(slot),
                str(time.time()),
                nx=True,
                ex=ttl_s or settings.slot_lock_ttl_seconds,
            )
        )
    except Exception as exc:
        prometheus_metrics.record_slot_lock("acquire", "error")
        logger.warning(
            "slot_lock_acquire_failed",
            extra={"slot": slot.as_lock_key(), "error": str(exc), "error_type": type(exc).__name__},
        )
        return True
    prometheus_metrics.record_slot_lock("acquire", "success" if acquired else "blocked")
    return acquired


def release_slot_lock(slot: SlotKey) -> None:
    client = _get_sync_redis()
    if client is None:
        return
    try:
        deleted = client.delete(_namespaced_key(slot))
        prometheus_metrics.record_slot_lock("release", "success" if deleted else "not_found")
    except Exception as exc:
        prometheus_metrics.record_slot_lock("release", "error")
        logger.warning(
            "slot_lock_release_failed",
            extra={"slot": slot.as_lock_key(), "error": str(exc), "error_type": type(exc).__name__},
        )


@contextmanager
def slot_lock(slot: SlotKey, ttl_s: Optional[int] = None) -> Iterator[bool]:
    """
    Hold the slot lock for the duration of the block.

    Yields True when the caller may proceed. When locking is disabled the
    block always proceeds and nothing touches Redis.
    """
    if not settings.slot_lock_enabled:
        yield True
        return
    acquired = acquire_slot_lock(slot, ttl_s=ttl_s)
    try:
        yield acquired
    finally:
        if acquired:
            release_slot_lock(slot)
