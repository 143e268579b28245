"""A thread-safe least-recently-used cache with optional size and age limits."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar, Union

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Expiry = Union[datetime, int, float]


def _now() -> int:
    return int(time.time())


def _to_unix(expires: Expiry) -> int:
    if isinstance(expires, datetime):
        return int(expires.timestamp())
    return int(expires)


class _Entry(Generic[K, V]):
    __slots__ = ("key", "value", "expires")

    def __init__(self, key: K, value: V, expires: int) -> None:
        self.key = key
        self.value = value
        self.expires = expires


class LruCache(Generic[K, V]):
    """Keeps entries in use order, least recent first.

    max_age is in seconds (0 disables expiry), max_size bounds the number of
    entries (0 disables the bound). With stale set, expired entries are still
    returned and never dropped for age. on_evict is called with key and value
    of every entry removed.
    """

    def __init__(
        self,
        max_age: int = 0,
        max_size: int = 0,
        update_age_on_get: bool = False,
        stale: bool = False,
        on_evict: Optional[Callable[[K, V], Any]] = None,
    ) -> None:
        self._max_age = max_age
        self._max_size = max_size
        self._update_age_on_get = update_age_on_get
        self._stale = stale
        self._on_evict = on_evict
        self._lock = threading.Lock()
        self._entries: "OrderedDict[K, _Entry[K, V]]" = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def load(self, key: K) -> tuple[Optional[V], bool]:
        """Return (value, True) for a live entry, else (None, False)."""
        entry = self._get(key)
        if entry is None:
            return None, False
        return entry.value, True

    def load_or_store(self, key: K, constructor: Callable[[], V]) -> tuple[V, bool]:
        """Return (value, True) for a live entry, else store constructor() and return (value, False)."""
        return self._load_or_store(key, self._max_age, self._max_age, constructor)

    def load_or_store_with_age(
        self, key: K, max_age: int, constructor: Callable[[], V]
    ) -> tuple[V, bool]:
        """Like load_or_store, refreshing a found entry's age by max_age (0 means the cache's)."""
        if max_age == 0:
            max_age = self._max_age
        return self._load_or_store(key, max_age, self._max_age, constructor)

    def _load_or_store(
        self, key: K, refresh_age: int, new_age: int, constructor: Callable[[], V]
    ) -> tuple[V, bool]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if self._max_age > 0 and entry.expires <= _now():
                    self._delete_entry(entry)
                else:
                    self._entries.move_to_end(key)
                    if self._max_age > 0 and self._update_age_on_get:
                        entry.expires = _now() + refresh_age
                    return entry.value, True
            value = constructor()
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
                entry.value = value
                entry.expires = _now() + refresh_age
            else:
                self._entries[key] = _Entry(key, value, _now() + new_age)
            self._maybe_delete_oldest()
            return value, False

    def load_with_expire(self, key: K) -> tuple[Optional[V], Optional[datetime], bool]:
        """Return (value, expiry time, True) for a live entry, else (None, None, False)."""
        entry = self._get(key)
        if entry is None:
            return None, None, False
        return entry.value, datetime.fromtimestamp(entry.expires, tz=timezone.utc), True

    def exist(self, key: K) -> bool:
        """Tell whether key is held, without regard to age."""
        with self._lock:
            return key in self._entries

    def store(self, key: K, value: V) -> None:
        """Store value, expiring after max_age when the cache has one."""
        expires = _now() + self._max_age if self._max_age > 0 else 0
        self.store_with_expire(key, value, expires)

    def store_with_expire(self, key: K, value: V, expires: Expiry) -> None:
        """Store value with an explicit expiry, a datetime or Unix seconds."""
        expires_at = _to_unix(expires)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
                entry.value = value
                entry.expires = expires_at
            else:
                self._entries[key] = _Entry(key, value, expires_at)
                if self._max_size > 0 and len(self._entries) > self._max_size:
                    self._delete_entry(next(iter(self._entries.values())))
            self._maybe_delete_oldest()

    def clone_to(self, other: "LruCache[K, V]") -> None:
        """Replace other's entries with this cache's, in the same order."""
        with self._lock, other._lock:
            other._entries = OrderedDict(
                (key, entry) for key, entry in self._entries.items()
            )

    def items(self) -> list[tuple[K, V]]:
        """Every (key, value) pair, least recently used first."""
        with self._lock:
            return [(entry.key, entry.value) for entry in self._entries.values()]

    def delete(self, key: K) -> None:
        """Remove key if present."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._delete_entry(entry)

    def _get(self, key: K) -> Optional[_Entry[K, V]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._stale and self._max_age > 0 and entry.expires <= _now():
                self._delete_entry(entry)
                self._maybe_delete_oldest()
                return None
            self._entries.move_to_end(key)
            if self._max_age > 0 and self._update_age_on_get:
                entry.expires = _now() + self._max_age
            return entry

    def _maybe_delete_oldest(self) -> None:
        if self._stale or self._max_age <= 0:
            return
        now = _now()
        while self._entries:
            oldest = next(iter(self._entries.values()))
            if oldest.expires > now:
                break
            self._delete_entry(oldest)

    def _delete_entry(self, entry: _Entry[K, V]) -> None:
        del self._entries[entry.key]
        if self._on_evict is not None:
            self._on_evict(entry.key, entry.value)