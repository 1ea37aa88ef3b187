"""A bounded, timestamped key/value cache with least-recently-used eviction."""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

EvictCallback = Callable[[Hashable, Any], None]


@dataclass
class _Entry:
    value: Any
    stamp: float


class Cache:
    """Holds up to ``capacity - 1`` entries; the oldest is dropped on overflow.

    Looking a key up, or testing for it, refreshes its timestamp and moves it
    to the newest position.  ``on_evict(key, value)`` is called for every
    removed entry whose value is not ``None``.
    """

    def __init__(
        self,
        capacity: int,
        on_evict: Optional[EvictCallback] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self._on_evict = on_evict
        self._clock = clock
        self._entries: OrderedDict[Hashable, _Entry] = OrderedDict()

    def _discard(self, key: Hashable, entry: _Entry) -> None:
        if entry.value is not None and self._on_evict is not None:
            self._on_evict(key, entry.value)

    def _touch(self, key: Hashable) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is not None:
            entry.stamp = self._clock()
            self._entries.move_to_end(key)
        return entry

    def insert(self, key: Hashable, value: Any) -> None:
        """Store *value* under *key*, evicting the oldest entry if full."""
        self._entries[key] = _Entry(value, self._clock())
        self._entries.move_to_end(key)
        if len(self._entries) >= self.capacity and self._entries:
            oldest_key, oldest = self._entries.popitem(last=False)
            self._discard(oldest_key, oldest)

    def lookup(self, key: Hashable) -> Any:
        """Return the value for *key*, or ``None`` if it is absent."""
        entry = self._touch(key)
        return None if entry is None else entry.value

    def contains(self, key: Hashable) -> bool:
        """Tell whether *key* is present, refreshing it if so."""
        return self._touch(key) is not None

    def remove(self, key: Hashable) -> None:
        """Remove *key* if present."""
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._discard(key, entry)

    def clear(self, age: float) -> None:
        """Remove every entry older than *age* seconds."""
        now = self._clock()
        stale = [key for key, entry in self._entries.items() if now - entry.stamp > age]
        for key in stale:
            self._discard(key, self._entries.pop(key))

    def close(self, keep_data: bool = False) -> None:
        """Drop all entries; unless *keep_data*, pass each to the evict callback."""
        entries, self._entries = self._entries, OrderedDict()
        if not keep_data:
            for key, entry in entries.items():
                self._discard(key, entry)

    def __len__(self) -> int:
        return len(self._entries)