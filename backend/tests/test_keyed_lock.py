"""Tests for the per-key mutex registry."""

import threading
import time

from paylinks.core.locks import KeyedLock


class TestKeyedLock:
    def test_entry_dropped_after_release(self, link_locks: KeyedLock) -> None:
        with link_locks.hold("ABC"):
            assert len(link_locks) == 1
        assert len(link_locks) == 0

    def test_released_on_exception(self, link_locks: KeyedLock) -> None:
        try:
            with link_locks.hold("ABC"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert len(link_locks) == 0
        with link_locks.hold("ABC"):
            pass

    def test_same_key_is_serialized(self, link_locks: KeyedLock) -> None:
        active = 0
        max_active = 0
        counter_lock = threading.Lock()

        def worker() -> None:
            nonlocal active, max_active
            with link_locks.hold("SAME"):
                with counter_lock:
                    active += 1
                    max_active = max(max_active, active)
                time.sleep(0.01)
                with counter_lock:
                    active -= 1

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert max_active == 1
        assert len(link_locks) == 0

    def test_different_keys_do_not_block(self, link_locks: KeyedLock) -> None:
        inside = threading.Event()
        done = threading.Event()

        def other() -> None:
            with link_locks.hold("B"):
                inside.set()
            done.set()

        with link_locks.hold("A"):
            t = threading.Thread(target=other)
            t.start()
            assert done.wait(timeout=5)
            assert inside.is_set()
        t.join(timeout=5)

    def test_reset_clears_idle_registry(self, link_locks: KeyedLock) -> None:
        link_locks.reset()
        assert len(link_locks) == 0
        with link_locks.hold("X"):
            assert len(link_locks) == 1
