"""
Record Store

In-memory key-value store with per-entry expiry, plus the keyed lock used to
serialize read-modify-write cycles on a single record.
"""

import copy
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple


class TTLStore:
    """
    Volatile record store with time-to-live expiry.

    Values are deep-copied on the way in and on the way out, so a caller can
    only change a stored record by calling `set()` with the new value. A
    request that fails halfway therefore never leaves a partially mutated
    record behind.

    Expired entries read as absent. `sweep_expired()` reclaims their memory.
    Listeners registered with `add_expiry_listener()` are called with the key
    of every entry dropped for expiry, whether by `get()` or by the sweep.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._expiry_listeners: List[Callable[[str], None]] = []

    def add_expiry_listener(self, listener: Callable[[str], None]) -> None:
        self._expiry_listeners.append(listener)

    def _notify_expired(self, keys: Iterable[str]) -> None:
        # Called outside self._lock
        for key in keys:
            for listener in self._expiry_listeners:
                listener(key)

    def get(self, key: str) -> Optional[Any]:
        """
        Returns a copy of the stored value.

        Args:
            key: Record key

        Returns:
            The value, or None if the key is unknown or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at > self._clock():
                return copy.deepcopy(value)
            del self._entries[key]

        self._notify_expired([key])
        return None

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Stores a copy of `value` that expires `ttl_seconds` from now."""
        snapshot = copy.deepcopy(value)
        with self._lock:
            self._entries[key] = (snapshot, self._clock() + ttl_seconds)

    def sweep_expired(self) -> int:
        """Drops every expired entry. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
            for key in expired:
                del self._entries[key]

        self._notify_expired(expired)
        return len(expired)

    def count(self, prefix: str = "") -> int:
        """Number of live entries whose key starts with `prefix`."""
        now = self._clock()
        with self._lock:
            return sum(
                1 for key, (_, expires_at) in self._entries.items()
                if key.startswith(prefix) and expires_at > now
            )


class KeyedLock:
    """One mutual-exclusion lock per record key, created on demand."""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._lock_for(key):
            yield

    def discard(self, key: str) -> None:
        """Forget the lock for a record that will not be mutated again."""
        with self._guard:
            self._locks.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
