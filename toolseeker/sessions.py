"""
Per-session registries for search indexes and conversation state.

A SessionRegistry maps session ids to backend-specific values (a searcher's
session index, an advisor's cached callbacks, ...). Values are created on first
use and torn down explicitly when the conversation ends. evict_stale() is a
safety net for conversations that never reach their end hook.

Entry ids for indexed tools come from one process-wide counter so that ids
stay unique across sessions and backends.
"""

import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from .rwlock import RWLock

logger = logging.getLogger(__name__)

T = TypeVar("T")

_entry_counter = itertools.count()
_entry_counter_lock = threading.Lock()


def next_entry_id() -> int:
    """Return the next process-wide unique entry id."""
    with _entry_counter_lock:
        return next(_entry_counter)


@dataclass
class _Slot(Generic[T]):
    value: T
    created_at: float
    last_accessed: float


class SessionRegistry(Generic[T]):
    """
    Thread-safe session id -> value mapping.

    Lookups take the read lock, so concurrent sessions do not serialize on each
    other. Creation uses double-checked locking under the write lock, so the
    factory runs at most once per session id.

    Args:
        factory: Builds the value for a new session id.
        on_remove: Optional release hook, called outside the lock with the
                   removed session id and value.
        name: Label used in log messages.
    """

    def __init__(
        self,
        factory: Callable[[str], T],
        on_remove: Optional[Callable[[str, T], None]] = None,
        name: str = "session",
    ):
        self._factory = factory
        self._on_remove = on_remove
        self._name = name
        self._slots: Dict[str, _Slot[T]] = {}
        self._lock = RWLock()
        self._last_sweep = 0.0

    def get(self, session_id: str) -> Optional[T]:
        """Return the value for *session_id*, or None if it does not exist."""
        with self._lock.read():
            slot = self._slots.get(session_id)
            if slot is None:
                return None
            slot.last_accessed = time.time()
            return slot.value

    def get_or_create(self, session_id: str) -> T:
        """Return the value for *session_id*, creating it on first use."""
        # Fast path: concurrent readers
        with self._lock.read():
            slot = self._slots.get(session_id)
            if slot is not None:
                slot.last_accessed = time.time()
                return slot.value

        with self._lock.write():
            # Another writer may have created it while we waited
            slot = self._slots.get(session_id)
            if slot is None:
                now = time.time()
                slot = _Slot(value=self._factory(session_id), created_at=now, last_accessed=now)
                self._slots[session_id] = slot
                logger.debug(f"Created {self._name} for session: {session_id}")
            else:
                slot.last_accessed = time.time()
            return slot.value

    def remove(self, session_id: str) -> Optional[T]:
        """
        Remove and release the value for *session_id*.

        Removing an unknown session is a no-op and returns None.
        """
        with self._lock.write():
            slot = self._slots.pop(session_id, None)
        if slot is None:
            return None
        if self._on_remove is not None:
            self._on_remove(session_id, slot.value)
        logger.debug(f"Removed {self._name} for session: {session_id}")
        return slot.value

    def evict_stale(self, ttl_seconds: float, now: Optional[float] = None) -> List[str]:
        """
        Remove sessions idle for longer than *ttl_seconds*.

        Returns the evicted session ids. Release errors are logged, not raised,
        so one broken session cannot stop the sweep.
        """
        now = time.time() if now is None else now

        # Phase 1: collect candidates under the read lock
        with self._lock.read():
            candidates = [
                session_id for session_id, slot in self._slots.items()
                if now - slot.last_accessed > ttl_seconds
            ]

        # Phase 2: re-check each candidate under the write lock
        evicted = []
        for session_id in candidates:
            with self._lock.write():
                slot = self._slots.get(session_id)
                if slot is None or now - slot.last_accessed <= ttl_seconds:
                    continue
                del self._slots[session_id]
            if self._on_remove is not None:
                try:
                    self._on_remove(session_id, slot.value)
                except Exception as e:
                    logger.warning(f"Error releasing {self._name} for {session_id}: {e}")
            evicted.append(session_id)
            logger.info(f"Evicted stale {self._name}: {session_id}")
        return evicted

    def maybe_evict_stale(self, ttl_seconds: float, interval_seconds: float = 60.0) -> List[str]:
        """Run evict_stale() at most once per *interval_seconds*."""
        now = time.time()
        if now - self._last_sweep < interval_seconds:
            return []
        self._last_sweep = now
        return self.evict_stale(ttl_seconds, now=now)

    def clear(self) -> int:
        """Remove and release every session. Returns the number removed."""
        with self._lock.write():
            slots = list(self._slots.items())
            self._slots.clear()
        for session_id, slot in slots:
            if self._on_remove is not None:
                self._on_remove(session_id, slot.value)
        return len(slots)

    def session_ids(self) -> List[str]:
        with self._lock.read():
            return list(self._slots.keys())

    def values(self) -> List[T]:
        with self._lock.read():
            return [slot.value for slot in self._slots.values()]

    def __contains__(self, session_id: object) -> bool:
        with self._lock.read():
            return session_id in self._slots

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._slots)
