"""Request pipeline for the onOffice SDK.

Provides the layers that turn an :class:`~onoffice.models.ActionRequest`
into a decoded API payload:

Classes:
    :class:`Dispatcher` -- signs, caches, sends and classifies one action.
    :class:`RequestQueue` -- defers actions under handles and flushes them
    concurrently with isolated outcomes.
    :class:`OnOfficeClient` -- async context manager tying it all together
    with resource-specific convenience methods.

Functions:
    :func:`fetch_all` -- drives the dispatcher page by page until a full
    record set is collected.

Example::

    from onoffice.client import OnOfficeClient

    async with OnOfficeClient(config) as client:
        handle = client.queue(ActionId.READ, ResourceType.ESTATE, {"data": ["Id"]})
        await client.flush()
        payload = client.get_result(handle)
"""

from onoffice.client.dispatcher import Dispatcher
from onoffice.client.pagination import fetch_all
from onoffice.client.queue import CallOutcome, RequestQueue
from onoffice.client.sdk import OnOfficeClient

__all__ = ["CallOutcome", "Dispatcher", "OnOfficeClient", "RequestQueue", "fetch_all"]
