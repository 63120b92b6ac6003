"""High-level async client for the onOffice API.

:class:`OnOfficeClient` owns the HTTP connection pool and the response
cache, and wires together the :class:`~onoffice.client.dispatcher.Dispatcher`,
the :class:`~onoffice.client.queue.RequestQueue` and the pagination helper
behind one object with resource-specific convenience methods.

Example::

    from onoffice import ClientConfig, OnOfficeClient

    config = ClientConfig(token="...", secret="...")
    async with OnOfficeClient(config) as client:
        page = await client.read_estates({"data": ["Id", "kaufpreis"], "listlimit": 10})
        everything = await client.get_all_estates({"data": ["Id"]})
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from onoffice.cache.base import CacheBackend
from onoffice.cache.memory import MemoryCache
from onoffice.client.dispatcher import Dispatcher
from onoffice.client.pagination import DEFAULT_PAGE_SIZE, fetch_all
from onoffice.client.queue import RequestQueue
from onoffice.exceptions import OnOfficeError
from onoffice.models import (
    ActionId,
    ActionRequest,
    ClientConfig,
    Credentials,
    Relationship,
    RelationshipQuery,
    ResourceType,
)

logger = logging.getLogger(__name__)


class OnOfficeClient:
    """Asynchronous onOffice API client.

    Must be used as an async context manager so the underlying
    :class:`httpx.AsyncClient` is opened and closed properly.

    Args:
        config: Credentials, endpoint, cache and request settings.
        cache: Backend used when ``config.cache.enabled`` is true.
            Defaults to a :class:`~onoffice.cache.memory.MemoryCache`
            with ``config.cache.expiration_seconds``. Ignored when caching
            is disabled.
        transport: Optional httpx transport, e.g.
            :class:`httpx.MockTransport` in tests.
    """

    def __init__(
        self,
        config: ClientConfig,
        cache: Optional[CacheBackend] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._cache: Optional[CacheBackend] = None
        if config.cache.enabled:
            self._cache = cache if cache is not None else MemoryCache(config.cache.expiration_seconds)
        self._credentials = config.credentials
        self._http: Optional[httpx.AsyncClient] = None
        self._dispatcher: Optional[Dispatcher] = None
        self._queue: Optional[RequestQueue] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> OnOfficeClient:
        request = self._config.request
        self._http = httpx.AsyncClient(
            timeout=request.timeout,
            verify=request.verify_ssl,
            transport=self._transport,
        )
        self._dispatcher = Dispatcher(self._config, self._http, cache=self._cache)
        self._dispatcher.credentials = self._credentials
        # Pending calls and stored outcomes survive re-entry.
        if self._queue is None:
            self._queue = RequestQueue(self._dispatcher)
        else:
            self._queue.dispatcher = self._dispatcher
        logger.debug(
            "Client ready for %s (cache %s)",
            self._config.endpoint_url,
            "on" if self._cache is not None else "off",
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        self._dispatcher = None
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def cache(self) -> Optional[CacheBackend]:
        return self._cache

    @property
    def dispatcher(self) -> Dispatcher:
        if self._dispatcher is None:
            raise OnOfficeError("Client not open -- use it as an async context manager")
        return self._dispatcher

    @property
    def request_queue(self) -> RequestQueue:
        if self._dispatcher is None or self._queue is None:
            raise OnOfficeError("Client not open -- use it as an async context manager")
        return self._queue

    # ------------------------------------------------------------------ #
    # Credentials and cache
    # ------------------------------------------------------------------ #

    def set_credentials(self, token: str, secret: str) -> None:
        """Sign all subsequent calls with a new token / secret pair."""
        self._credentials = Credentials(token=token, secret=secret)
        if self._dispatcher is not None:
            self._dispatcher.credentials = self._credentials

    async def clear_cache(self) -> None:
        """Drop every cached response. A no-op when caching is disabled."""
        if self._cache is not None:
            await self._cache.clear()

    async def cleanup_cache(self) -> None:
        """Evict expired cached responses. A no-op when caching is disabled."""
        if self._cache is not None:
            await self._cache.cleanup()

    # ------------------------------------------------------------------ #
    # Generic calls
    # ------------------------------------------------------------------ #

    async def call(
        self,
        action_id: ActionId | str,
        resource_type: ResourceType | str,
        parameters: Optional[Mapping[str, Any]] = None,
        resource_id: str = "",
        identifier: str = "",
    ) -> dict[str, Any]:
        """Perform one action immediately and return the decoded payload.

        Raises:
            AuthError, TransportError, ResponseError: Propagated unchanged
                from the dispatcher.
        """
        request = ActionRequest.build(
            action_id,
            resource_type,
            {} if parameters is None else parameters,
            resource_id=resource_id,
            identifier=identifier,
        )
        return await self.dispatcher.dispatch(request)

    def queue(
        self,
        action_id: ActionId | str,
        resource_type: ResourceType | str,
        parameters: Optional[Mapping[str, Any]],
        resource_id: str = "",
        identifier: str = "",
    ) -> int:
        """Defer an action until :meth:`flush`; return its handle."""
        return self.request_queue.enqueue(
            action_id, resource_type, parameters, resource_id=resource_id, identifier=identifier
        )

    async def flush(self, credentials: Optional[Credentials] = None) -> None:
        """Send every queued action concurrently.

        When *credentials* are given they replace the client's credentials
        for the flush and for every later call.
        """
        queue = self.request_queue
        try:
            await queue.flush(credentials)
        finally:
            # The dispatcher holds whatever credentials the queue applied.
            self._credentials = queue.dispatcher.credentials

    def get_result(self, handle: int) -> Optional[dict[str, Any]]:
        """Return the payload of a flushed call, re-raising its error if it failed.

        Outcomes stay readable after the client is closed.
        """
        if self._queue is None:
            return None
        return self._queue.get_result(handle)

    async def fetch_all(
        self,
        resource_type: ResourceType | str,
        parameters: Optional[Mapping[str, Any]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[Any]:
        """Read every record of *resource_type* matching *parameters*."""
        request = ActionRequest.build(
            ActionId.READ, resource_type, {} if parameters is None else parameters
        )
        return await fetch_all(self.dispatcher, request, page_size=page_size)

    # ------------------------------------------------------------------ #
    # Estates
    # ------------------------------------------------------------------ #

    async def read_estates(self, parameters: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        return await self.call(ActionId.READ, ResourceType.ESTATE, parameters)

    async def create_estate(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        return await self.call(ActionId.CREATE, ResourceType.ESTATE, parameters)

    async def modify_estate(self, estate_id: str, parameters: Mapping[str, Any]) -> dict[str, Any]:
        return await self.call(
            ActionId.MODIFY, ResourceType.ESTATE, parameters, resource_id=str(estate_id)
        )

    async def get_all_estates(
        self,
        parameters: Optional[Mapping[str, Any]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[Any]:
        """Read every estate matching *parameters*, paging through the result set.

        Raises:
            FetchAllError: If any page fails; no partial list is returned.
        """
        return await self.fetch_all(ResourceType.ESTATE, parameters, page_size=page_size)

    # ------------------------------------------------------------------ #
    # Addresses
    # ------------------------------------------------------------------ #

    async def read_addresses(self, parameters: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        return await self.call(ActionId.READ, ResourceType.ADDRESS, parameters)

    async def create_address(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        return await self.call(ActionId.CREATE, ResourceType.ADDRESS, parameters)

    async def modify_address(self, address_id: str, parameters: Mapping[str, Any]) -> dict[str, Any]:
        return await self.call(
            ActionId.MODIFY, ResourceType.ADDRESS, parameters, resource_id=str(address_id)
        )

    async def get_all_addresses(
        self,
        parameters: Optional[Mapping[str, Any]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[Any]:
        return await self.fetch_all(ResourceType.ADDRESS, parameters, page_size=page_size)

    # ------------------------------------------------------------------ #
    # Search criteria
    # ------------------------------------------------------------------ #

    async def read_search_criteria(
        self, parameters: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        return await self.call(ActionId.READ, ResourceType.SEARCHCRITERIA, parameters)

    async def create_search_criteria(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        return await self.call(ActionId.CREATE, ResourceType.SEARCHCRITERIA, parameters)

    async def modify_search_criteria(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        return await self.call(ActionId.MODIFY, ResourceType.SEARCHCRITERIA, parameters)

    # ------------------------------------------------------------------ #
    # Relationships
    # ------------------------------------------------------------------ #

    async def get_relationships(self, query: RelationshipQuery) -> dict[str, Any]:
        """Look up the ids related to the given parents or children."""
        return await self.call(
            ActionId.GET, ResourceType.IDS_FROM_RELATION, query.to_parameters()
        )

    async def create_relationship(self, relationship: Relationship) -> dict[str, Any]:
        return await self.call(ActionId.CREATE, ResourceType.RELATION, relationship.to_parameters())

    async def delete_relationship(self, relationship: Relationship) -> dict[str, Any]:
        return await self.call(ActionId.DELETE, ResourceType.RELATION, relationship.to_parameters())
