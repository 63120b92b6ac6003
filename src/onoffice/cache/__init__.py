"""Response caching for the onOffice SDK.

This package provides the :class:`CacheBackend` interface, the
:class:`MemoryCache` reference implementation, and :func:`make_cache_key`,
which normalises a request into a stable key.

The cache is consumed by :class:`~onoffice.client.dispatcher.Dispatcher`
and is switched on by the ``cache`` section of
:class:`~onoffice.models.ClientConfig`. Only payloads that passed both the
HTTP and the payload-level status checks are ever written.
"""

from onoffice.cache.base import CacheBackend, make_cache_key
from onoffice.cache.memory import CacheEntry, MemoryCache

__all__ = ["CacheBackend", "CacheEntry", "MemoryCache", "make_cache_key"]
