"""
Read-through cache and per-key locks for the MasteryTracker.

TwoLevelCache is keyed user -> (content or path id). Writers invalidate the
affected entries while still holding the lock for the key they wrote.
"""

import threading
from typing import Generic, Hashable, Optional, TypeVar

V = TypeVar("V")


class TwoLevelCache(Generic[V]):
    """Outer key = user id, inner key = content id or path id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, dict[str, V]] = {}

    def get(self, user_id: str, key: str) -> Optional[V]:
        with self._lock:
            return self._entries.get(user_id, {}).get(key)

    def put(self, user_id: str, key: str, value: V) -> None:
        with self._lock:
            self._entries.setdefault(user_id, {})[key] = value

    def invalidate(self, user_id: str, key: str) -> None:
        with self._lock:
            inner = self._entries.get(user_id)
            if inner is not None:
                inner.pop(key, None)
                if not inner:
                    del self._entries[user_id]

    def invalidate_user(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def __contains__(self, item: tuple[str, str]) -> bool:
        user_id, key = item
        with self._lock:
            return key in self._entries.get(user_id, {})


class KeyedLocks:
    """
    One re-entrant lock per key, created on demand.

    Locks are never discarded; the key space is bounded by users x items.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.RLock] = {}

    def for_key(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock
