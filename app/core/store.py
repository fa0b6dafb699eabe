"""
Process-local keyed store with per-key locking.

The raw dict is never handed out: callers read with `get` and mutate through
`apply`, which runs a transition function while holding that key's lock.
Different keys never wait on each other. Nothing is persisted across restarts.
"""
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

V = TypeVar("V")
R = TypeVar("R")


class KeyedStore(Generic[V]):
    def __init__(self) -> None:
        self._data: Dict[str, V] = {}
        # key -> [lock, number of callers using it]; dropped when unused and the key is absent
        self._locks: Dict[str, List] = {}
        self._guard = threading.Lock()

    @contextmanager
    def _locked(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._locks.get(key)
            if slot is None:
                slot = self._locks[key] = [threading.Lock(), 0]
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0 and key not in self._data:
                    del self._locks[key]

    def get(self, key: str) -> Optional[V]:
        return self._data.get(key)

    def apply(self, key: str, transition: Callable[[Optional[V]], Tuple[Optional[V], R]]) -> R:
        """
        Atomically replace the value for `key`.
        `transition(current)` returns (new_value, result); new_value None deletes the key.
        Must not do I/O: the key's lock is held while it runs.
        """
        with self._locked(key):
            new_value, result = transition(self._data.get(key))
            if new_value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = new_value
            return result

    def discard_where(self, predicate: Callable[[V], bool]) -> int:
        """Delete every entry matching `predicate`. Returns how many were removed."""
        removed = 0
        for key in list(self._data):
            def _drop(current: Optional[V]) -> Tuple[Optional[V], bool]:
                if current is not None and predicate(current):
                    return None, True
                return current, False

            if self.apply(key, _drop):
                removed += 1
        return removed

    def lock_count(self) -> int:
        return len(self._locks)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data
