"""Abstract interface for response cache backends.

This module defines the contract the dispatcher relies on:

- :func:`make_cache_key` -- turns an :class:`~onoffice.models.ActionRequest`
  into a stable string key.
- :class:`CacheBackend` -- the abstract base class every backend must
  extend (lookup, write, sweep, clear).

To plug in another store (Redis, memcached, ...), subclass
:class:`CacheBackend` and pass an instance to
:class:`~onoffice.client.sdk.OnOfficeClient`. The methods are coroutines
so that network-backed stores do not block the event loop.

See Also:
    :class:`onoffice.cache.memory.MemoryCache` for the reference backend.
"""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from typing import Optional

from onoffice.models import ActionRequest


def make_cache_key(request: ActionRequest) -> str:
    """Generate a cache key from the full request shape.

    The identifying fields are serialised as JSON with sorted keys, so two
    requests whose parameter mappings differ only in insertion order share
    a key. The result is the SHA-256 hex digest of that text.
    """
    raw = json.dumps(
        request.cache_fields(),
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class CacheBackend(ABC):
    """Abstract base class for response caches.

    Values are the serialised (JSON text) API payloads. A backend decides
    on its own how long an entry stays valid; :meth:`get` must never
    return an expired entry.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the cached value for *key*, or ``None`` on a miss or expiry."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any existing entry."""
        ...

    @abstractmethod
    async def cleanup(self) -> None:
        """Remove every expired entry."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""
        ...
