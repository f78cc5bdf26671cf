"""
Tests for the in-memory session store.
"""
import threading

import pytest

from erp_assistant.intent import FlowState, FlowStatus, Intent
from erp_assistant.memory import InMemorySessionStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def _pending(name="create_customer"):
    return FlowState(FlowStatus.AWAITING_CONFIRMATION, Intent(name, 0.8, {}, "cadastrar cliente"))


@pytest.fixture
def clock():
    return FakeClock()


class TestInMemorySessionStore:
    """Tests for inject/extract/remove."""

    def test_inject_extract_remove(self):
        store = InMemorySessionStore()
        state = _pending()

        store.inject("t1:u1", state)

        assert store.extract("t1:u1") is state
        assert len(store) == 1

        store.remove("t1:u1")

        assert store.extract("t1:u1") is None
        assert len(store) == 0

    def test_inject_replaces(self):
        store = InMemorySessionStore()
        store.inject("t1:u1", _pending("create_customer"))
        store.inject("t1:u1", _pending("delete_customer"))

        assert store.extract("t1:u1").pending_intent.name == "delete_customer"
        assert len(store) == 1

    def test_remove_missing_is_noop(self):
        InMemorySessionStore().remove("nobody")

    def test_inject_none_rejected(self):
        with pytest.raises(ValueError):
            InMemorySessionStore().inject("t1:u1", None)

    def test_invalid_stripes(self):
        with pytest.raises(ValueError):
            InMemorySessionStore(lock_stripes=0)


class TestSessionExpiry:
    """Tests for sliding TTL."""

    def test_expires_after_idle_ttl(self, clock):
        store = InMemorySessionStore(ttl_seconds=60, clock=clock)
        store.inject("t1:u1", _pending())

        clock.advance(60)

        assert store.extract("t1:u1") is None
        assert len(store) == 0

    def test_access_slides_expiry(self, clock):
        store = InMemorySessionStore(ttl_seconds=60, clock=clock)
        store.inject("t1:u1", _pending())

        clock.advance(45)
        assert store.extract("t1:u1") is not None
        clock.advance(45)

        assert store.extract("t1:u1") is not None

    def test_purge_expired(self, clock):
        store = InMemorySessionStore(ttl_seconds=60, clock=clock)
        store.inject("t1:old", _pending())
        clock.advance(30)
        store.inject("t1:new", _pending())
        clock.advance(30)

        assert store.purge_expired() == 1
        assert store.extract("t1:new") is not None

    def test_no_ttl_never_expires(self, clock):
        store = InMemorySessionStore(ttl_seconds=None, clock=clock)
        store.inject("t1:u1", _pending())

        clock.advance(10 ** 9)

        assert store.extract("t1:u1") is not None
        assert store.purge_expired() == 0


class TestSessionLocking:
    """Tests for per-session locks."""

    def test_lock_is_reentrant(self):
        store = InMemorySessionStore()

        with store.session_lock("t1:u1"):
            with store.session_lock("t1:u1"):
                store.inject("t1:u1", _pending())

        assert store.extract("t1:u1") is not None

    def test_lock_serializes_same_session(self):
        store = InMemorySessionStore(lock_stripes=1)
        counter = {"value": 0, "max_inside": 0, "inside": 0}
        guard = threading.Lock()

        def work():
            for _ in range(200):
                with store.session_lock("t1:u1"):
                    with guard:
                        counter["inside"] += 1
                        counter["max_inside"] = max(counter["max_inside"], counter["inside"])
                    counter["value"] += 1
                    with guard:
                        counter["inside"] -= 1

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter["value"] == 1600
        assert counter["max_inside"] == 1


class TestSessionSweep:
    """Tests for expiry sweeps driven by regular traffic."""

    def test_unrelated_traffic_sweeps_expired(self, clock):
        store = InMemorySessionStore(ttl_seconds=60, clock=clock)
        for i in range(5):
            store.inject(f"t1:idle-{i}", _pending())

        clock.advance(120)
        store.extract("t1:someone-else")

        assert len(store) == 0

    def test_sweep_runs_at_most_once_per_ttl(self, clock):
        store = InMemorySessionStore(ttl_seconds=60, clock=clock)
        clock.advance(10)
        store.inject("t1:a", _pending())
        clock.advance(50)
        store.inject("t1:b", _pending())  # sweep due; "t1:a" is still live
        clock.advance(15)

        # "t1:a" has now expired but the next sweep is not due yet
        store.extract("t1:b")
        assert len(store) == 2
        assert store.extract("t1:a") is None
        assert len(store) == 1
