"""
Memory Tier
===========

Bounded, thread-safe LRU map from identifier to a decoded object. Used for
the hot images bucket so repeated views skip both disk and decode.

Usage:
    tier = MemoryTier(capacity=256)
    tier.put(uri, image)
    image = tier.get(uri)   # promotes uri to most recently used
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any, Hashable, Optional

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 256


class MemoryTier:
    """LRU cache with a fixed capacity and a single lock.

    Ordering:
        The OrderedDict is kept oldest-first; a hit or a put moves the key
        to the end, so eviction always pops from the front.

    Locking:
        Every operation holds ``_lock`` only for the dict update itself.
        Objects are stored and returned by reference, so a reader always sees
        a whole object or nothing.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """Initialize the tier.

        Args:
            capacity: Maximum number of entries held (must be positive)
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = int(capacity)
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, identifier: Hashable) -> Optional[Any]:
        """Return the cached object and mark it most recently used."""
        with self._lock:
            try:
                value = self._entries[identifier]
            except KeyError:
                return None
            self._entries.move_to_end(identifier)
            return value

    def put(self, identifier: Hashable, value: Any) -> None:
        """Insert or replace an entry, evicting the LRU entry when full."""
        evicted = None
        with self._lock:
            if identifier in self._entries:
                self._entries.move_to_end(identifier)
            elif len(self._entries) >= self._capacity:
                evicted, _ = self._entries.popitem(last=False)
            self._entries[identifier] = value
        if evicted is not None:
            logger.debug("Memory cache evicted: %s", evicted)

    def clear(self) -> int:
        """Drop every entry. Returns the number removed."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, identifier: Hashable) -> bool:
        # Membership checks do not count as an access
        with self._lock:
            return identifier in self._entries

