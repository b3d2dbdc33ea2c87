"""LRU cache for climate normals keyed by rounded coordinates."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """A thread-safe least-recently-used cache with fixed capacity.

    Concurrent misses on the same key run the factory once; other callers
    wait for that result.
    """

    def __init__(self, capacity: int = 128) -> None:
        """Create an empty cache holding at most `capacity` entries."""
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._items: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.Lock()
        self._inflight: dict[K, threading.Lock] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def _lookup(self, key: K) -> tuple[bool, V | None]:
        # Caller holds self._lock.
        if key in self._items:
            self._items.move_to_end(key)
            return True, self._items[key]
        return False, None

    def get(self, key: K, factory: Callable[[], V]) -> V:
        """Return the cached value for `key`, computing it with `factory` on a miss.

        A failing `factory` stores nothing, so the next call retries.
        """
        with self._lock:
            hit, value = self._lookup(key)
            if hit:
                return value  # type: ignore[return-value]
            key_lock = self._inflight.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                hit, value = self._lookup(key)
                if hit:
                    return value  # type: ignore[return-value]
            try:
                created = factory()
            except BaseException:
                with self._lock:
                    self._inflight.pop(key, None)
                raise

            with self._lock:
                self._items[key] = created
                self._items.move_to_end(key)
                if len(self._items) > self.capacity:
                    self._items.popitem(last=False)
                self._inflight.pop(key, None)
            return created

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._items.clear()
