# src/permfactor/cache.py
from __future__ import annotations

import threading
from collections.abc import Callable

Enumeration = tuple[tuple[int, ...], ...]


class PermutationCache:
    """
    Length -> full permutation enumeration, populated lazily and never evicted.

    One instance is owned by each runtime session (see ``Runtime.cache``);
    tests and embedders may create their own to keep state isolated.

    On a miss the enumeration is computed *outside* the lock and then
    published insert-if-absent, so two threads racing on the same length
    both end up holding the one stored object.
    """

    def __init__(self) -> None:
        self._store: dict[int, Enumeration] = {}
        self._lock = threading.Lock()
        self.misses = 0

    def get(self, length: int, factory: Callable[[int], Enumeration]) -> Enumeration:
        hit = self._store.get(length)
        if hit is not None:
            return hit

        computed = tuple(tuple(p) for p in factory(length))
        with self._lock:
            stored = self._store.setdefault(length, computed)
            if stored is computed:
                self.misses += 1
        return stored

    def peek(self, length: int) -> Enumeration | None:
        return self._store.get(length)

    def lengths(self) -> list[int]:
        return sorted(self._store)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self.misses = 0

    def __contains__(self, length: object) -> bool:
        return length in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"PermutationCache(lengths={self.lengths()})"
