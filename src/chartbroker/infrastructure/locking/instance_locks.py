"""Re-entrant locks keyed by instance ID."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class InstanceLockRegistry:
    """Serializes verbs on the same instance while leaving other instances concurrent."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}
        self._holders: dict[str, int] = {}

    @contextmanager
    def hold(self, instance_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.get(instance_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[instance_id] = lock
            self._holders[instance_id] = self._holders.get(instance_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._holders[instance_id] -= 1
                if self._holders[instance_id] == 0:
                    del self._holders[instance_id]
                    del self._locks[instance_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
