"""
In-memory per-session state.

Session state lives only for the lifetime of the plugin instance. Every
check-then-mutate sequence on a session runs under that session's own lock,
so concurrent handlers for the same session ID are serialized while
different sessions proceed independently.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class KeyedLock:
    """Mutex per key. Locks are created on demand and dropped when no one holds or waits on them."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, List] = {}  # key -> [lock, users]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1

        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class SessionStore(Generic[T]):
    """
    Map of session ID to mutable state, created lazily and removed explicitly.

    Example:
        store = SessionStore(CompactionState)
        with store.locked("s1") as state:
            state.in_progress = True
        store.discard("s1")
    """

    def __init__(self, factory: Callable[[], T]):
        """
        Args:
            factory: Builds the initial state for a session seen for the first time
        """
        self._factory = factory
        self._states: Dict[str, T] = {}
        self._states_lock = threading.Lock()
        self._keys = KeyedLock()

    @contextmanager
    def locked(self, session_id: str, create: bool = True) -> Iterator[Optional[T]]:
        """
        Hold the session's lock and yield its state.

        Args:
            session_id: Session identifier
            create: Create the state if absent; otherwise yield None for unknown sessions
        """
        with self._keys.hold(session_id):
            with self._states_lock:
                state = self._states.get(session_id)
                if state is None and create:
                    state = self._states[session_id] = self._factory()
            yield state

    def get(self, session_id: str) -> Optional[T]:
        with self._states_lock:
            return self._states.get(session_id)

    def discard(self, session_id: str) -> bool:
        """Remove a session's state. Returns True if there was any."""
        with self._keys.hold(session_id):
            with self._states_lock:
                return self._states.pop(session_id, None) is not None

    def clear(self) -> None:
        with self._states_lock:
            self._states.clear()

    def __contains__(self, session_id: object) -> bool:
        with self._states_lock:
            return session_id in self._states

    def __len__(self) -> int:
        with self._states_lock:
            return len(self._states)
