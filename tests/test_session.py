"""
Tests for per-session state storage.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from momo_memory.memory.session import KeyedLock, SessionStore


@dataclass
class Counter:
    value: int = 0


class TestKeyedLock:
    def test_locks_dropped_after_release(self):
        locks = KeyedLock()
        with locks.hold("a"):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        entered = threading.Event()

        def other():
            with locks.hold("b"):
                entered.set()

        with locks.hold("a"):
            thread = threading.Thread(target=other)
            thread.start()
            assert entered.wait(timeout=5)
            thread.join()


class TestSessionStore:
    def test_lazy_creation(self):
        store = SessionStore(Counter)
        assert "s1" not in store

        with store.locked("s1") as state:
            state.value = 1

        assert "s1" in store
        assert store.get("s1").value == 1
        assert len(store) == 1

    def test_locked_without_create(self):
        store = SessionStore(Counter)
        with store.locked("s1", create=False) as state:
            assert state is None
        assert "s1" not in store

    def test_discard(self):
        store = SessionStore(Counter)
        with store.locked("s1"):
            pass
        assert store.discard("s1") is True
        assert store.discard("s1") is False
        assert store.get("s1") is None

    def test_clear(self):
        store = SessionStore(Counter)
        for session_id in ("s1", "s2"):
            with store.locked(session_id):
                pass
        store.clear()
        assert len(store) == 0

    def test_increments_are_serialized(self):
        store = SessionStore(Counter)

        def bump(_):
            with store.locked("s1") as state:
                current = state.value
                threading.Event().wait(0.001)
                state.value = current + 1

        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(bump, range(50)))

        assert store.get("s1").value == 50
