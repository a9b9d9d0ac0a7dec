"""
Process-local admission locks, one per retreat.

Admissions for the same retreat run one at a time inside this process; the
`SELECT ... FOR UPDATE` on the retreat row extends that across processes on
PostgreSQL. Locks are created lazily and never evicted (one small object per
retreat ever booked).
"""

import threading
from contextlib import contextmanager
from typing import Iterator

_locks: dict[int, threading.Lock] = {}
_registry_lock = threading.Lock()


def _lock_for(retreat_id: int) -> threading.Lock:
    with _registry_lock:
        lock = _locks.get(retreat_id)
        if lock is None:
            lock = threading.Lock()
            _locks[retreat_id] = lock
        return lock


@contextmanager
def retreat_admission_lock(retreat_id: int) -> Iterator[None]:
    """
    Hold the admission lock for a retreat for the duration of the block.

    Args:
        retreat_id: Retreat whose capacity is being claimed
    """
    lock = _lock_for(retreat_id)
    with lock:
        yield


def get_lock_count() -> int:
    """Number of retreats with an allocated lock."""
    with _registry_lock:
        return len(_locks)
