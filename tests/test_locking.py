"""
Tests for the reader/writer lock.
"""

import threading
import time

import pytest

from adaptive_resonance.utils.locking import ReadWriteLock


class TestReadWriteLock:
    """Tests for ReadWriteLock."""

    def test_readers_share(self):
        lock = ReadWriteLock()
        lock.acquire_read()
        lock.acquire_read()

        assert lock.readers == 2
        assert not lock.writing

        lock.release_read()
        lock.release_read()
        assert lock.readers == 0

    def test_writer_is_exclusive(self):
        lock = ReadWriteLock()
        entered = threading.Event()

        def reader():
            with lock.read_locked():
                entered.set()

        with lock.write_locked():
            assert lock.writing
            thread = threading.Thread(target=reader)
            thread.start()
            assert not entered.wait(0.1)

        thread.join(timeout=5)
        assert entered.is_set()

    def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        events = []

        def writer():
            with lock.write_locked():
                events.append("write")

        with lock.read_locked():
            thread = threading.Thread(target=writer)
            thread.start()
            time.sleep(0.05)
            events.append("read done")

        thread.join(timeout=5)
        assert events == ["read done", "write"]

    def test_unbalanced_release(self):
        lock = ReadWriteLock()
        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()

    def test_lock_released_on_error(self):
        lock = ReadWriteLock()
        with pytest.raises(ValueError):
            with lock.write_locked():
                raise ValueError("boom")

        assert not lock.writing
        with lock.read_locked():
            assert lock.readers == 1
