"""In-memory per-key mutex registry."""

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock


class KeyedLock:
    """Hands out one mutex per key so work on the same key is serialized.

    Entries are reference counted and dropped once no caller holds or waits
    on them, so the registry does not grow with the number of keys seen.
    """

    def __init__(self) -> None:
        self._locks: dict[str, Lock] = {}
        self._waiters: dict[str, int] = {}
        self._lock = Lock()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the mutex for ``key`` for the duration of the block."""
        with self._lock:
            key_lock = self._locks.setdefault(key, Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1

        key_lock.acquire()
        try:
            yield
        finally:
            key_lock.release()
            with self._lock:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)

    def reset(self) -> None:
        """Clear all tracked state (useful for testing)."""
        with self._lock:
            self._locks.clear()
            self._waiters.clear()
