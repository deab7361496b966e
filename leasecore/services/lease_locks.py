"""Per-lease mutual exclusion for read-modify-write review actions."""
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class LeaseLockRegistry:
    """
    Hands out one lock per lease id.

    Review actions on the same lease are serialized; actions on different
    leases proceed in parallel. A lease's lock is dropped once no caller
    holds or waits on it, so the registry only tracks leases in use.
    """

    def __init__(self):
        # lease_id -> [lock, holders and waiters]
        self._entries: Dict[str, List] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, lease_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(lease_id)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._entries[lease_id] = entry
            entry[1] += 1

        lock: threading.Lock = entry[0]
        try:
            with lock:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[lease_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
