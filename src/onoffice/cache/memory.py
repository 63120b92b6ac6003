"""In-memory response cache with time-based expiration.

Entries live in a plain ``dict`` owned by the cache instance and are
never persisted. Expiry is lazy: :meth:`MemoryCache.get` evicts an entry
it finds too old, and :meth:`MemoryCache.cleanup` performs an eager sweep
for callers that want periodic maintenance.

An entry created at ``t`` is served while ``now - t <= expiration_seconds``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from onoffice.cache.base import CacheBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the time it was written."""

    value: str
    created_at: float


class MemoryCache(CacheBackend):
    """Dict-backed :class:`~onoffice.cache.base.CacheBackend`.

    Args:
        expiration_seconds: How long an entry stays valid. ``0`` keeps an
            entry only for the instant it was written.
        clock: Callable returning the current time in seconds. Defaults
            to :func:`time.time`; tests pass a fake clock.

    Example::

        cache = MemoryCache(expiration_seconds=60)
        await cache.set(key, '{"status": {"code": 200}}')
        hit = await cache.get(key)
    """

    def __init__(
        self,
        expiration_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if expiration_seconds < 0:
            raise ValueError("expiration_seconds must be >= 0")
        self._expiration = expiration_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def expiration_seconds(self) -> int:
        return self._expiration

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            logger.debug("Evicted expired cache entry %s", key[:12])
            return None
        return entry.value

    async def set(self, key: str, value: str) -> None:
        self._entries[key] = CacheEntry(value=value, created_at=self._clock())

    async def cleanup(self) -> None:
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Cache cleanup removed %d expired entries", len(expired))

    async def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return the entry count and expiration setting."""
        return {
            "size": len(self._entries),
            "expiration_seconds": self._expiration,
        }

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self._expiration
