# toolseeker/rwlock.py
"""Read-write lock for concurrent session registry access."""

import threading
from contextlib import contextmanager
from typing import Iterator


class RWLock:
    """
    Thread read-write lock.

    Multiple readers can hold the lock simultaneously.
    Writers have exclusive access.

    Coordination uses a single threading.Condition:
    - Readers wait while a writer is active
    - Writers wait while readers are active or another writer is active
    - When a writer releases, all waiting readers and writers are notified

    Example usage:
        lock = RWLock()

        with lock.read():
            value = shared.get(key)

        with lock.write():
            shared[key] = value
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        """
        Acquire read lock.

        Blocks while a writer holds the lock.
        """
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """
        Acquire write lock (exclusive).

        Blocks while any readers or another writer holds the lock.
        """
        with self._cond:
            while self._writer or self._readers > 0:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()

    @property
    def readers(self) -> int:
        """Current number of active readers."""
        return self._readers

    @property
    def writing(self) -> bool:
        """Whether a writer currently holds the lock."""
        return self._writer
