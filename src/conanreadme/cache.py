"""In-process response cache with per-entry expiry.

One ``TtlCache`` is built at startup and handed to every tool handler through
``AppState``. Entries are never returned past their expiry: ``get`` removes a
stale entry the first time it is looked up, and ``sweep`` (run periodically
by the server) removes whatever nobody asked for again.

Misses are a normal result (``None``), not an error, so ``None`` itself cannot
be stored. The only exception the cache raises is ``ValueError`` from ``set``,
for a ``None`` value or a non-positive TTL; an entry without expiry is never
stored.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Any

import structlog

from conanreadme.models.cache import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable

log = structlog.get_logger()


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


def cache_key(operation: str, *parts: object) -> str:
    """Build a ``"<operation>:<part>:<part>..."`` key.

    Parts are joined as given; callers normalize them (lower-cased package
    names, explicit versions) so that equal requests produce equal keys.
    """
    return ":".join([operation, *(str(p) for p in parts)])


class TtlCache:
    """Thread-safe key/value store with a TTL per entry."""

    def __init__(self, clock: Callable[[], float] = _monotonic_ms) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the stored value, or ``None`` when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                log.debug("cache_miss", key=key)
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                log.debug("cache_expired", key=key)
                return None
        log.debug("cache_hit", key=key)
        return entry.value

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_ms`` milliseconds."""
        if value is None:
            raise ValueError("None cannot be cached; get() reports a miss as None")
        if isinstance(ttl_ms, bool) or not isinstance(ttl_ms, int) or ttl_ms <= 0:
            raise ValueError(f"ttl_ms must be a positive integer, got {ttl_ms!r}")
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                created_at=now,
                expires_at=now + ttl_ms,
            )

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            log.info("cache_sweep_complete", removed=len(expired), remaining=len(self))
        return len(expired)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def __len__(self) -> int:
        # Counts entries still held, including expired ones not yet swept.
        return len(self._entries)
