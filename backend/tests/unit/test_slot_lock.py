from lessonbook.core import slot_lock
from lessonbook.core.config import settings
from lessonbook.models.booking import SlotKey

SLOT = SlotKey("t1", "Monday", "14:00", "15:00")


class FakeRedis:
    def __init__(self, fail: bool = False):
        self.keys = {}
        self.fail = fail

    def set(self, key, value, nx=False, ex=None):
        if self.fail:
            raise ConnectionError("redis down")
        if nx and key in self.keys:
            return None
        self.keys[key] = value
        return True

    def delete(self, key):
        return 1 if self.keys.pop(key, None) is not None else 0


def test_lock_key_includes_whole_slot():
    assert SLOT.as_lock_key() == "slot:t1:Monday:14:00-15:00"


def test_disabled_lock_never_touches_redis(monkeypatch):
    def _boom():
        raise AssertionError("redis should not be used")

    monkeypatch.setattr(settings, "slot_lock_enabled", False)
    monkeypatch.setattr(slot_lock, "_get_sync_redis", _boom)

    with slot_lock.slot_lock(SLOT) as acquired:
        assert acquired is True


def test_second_holder_is_blocked_until_release(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(settings, "slot_lock_enabled", True)
    monkeypatch.setattr(slot_lock, "_get_sync_redis", lambda: fake)

    with slot_lock.slot_lock(SLOT) as first:
        assert first is True
        with slot_lock.slot_lock(SLOT) as second:
            assert second is False
        # The blocked holder must not release the first holder's key
        assert fake.keys

    assert fake.keys == {}


def test_different_slots_do_not_contend(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(settings, "slot_lock_enabled", True)
    monkeypatch.setattr(slot_lock, "_get_sync_redis", lambda: fake)

    with slot_lock.slot_lock(SLOT) as first:
        with slot_lock.slot_lock(SLOT._replace(end_time="15:30")) as second:
            assert first and second


def test_fails_open_without_redis(monkeypatch):
    monkeypatch.setattr(settings, "slot_lock_enabled", True)
    monkeypatch.setattr(slot_lock, "_get_sync_redis", lambda: None)

    assert slot_lock.acquire_slot_lock(SLOT) is True


def test_fails_open_on_redis_error(monkeypatch):
    monkeypatch.setattr(slot_lock, "_get_sync_redis", lambda: FakeRedis(fail=True))

    assert slot_lock.acquire_slot_lock(SLOT) is True
