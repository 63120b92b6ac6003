"""onoffice -- async Python client for the onOffice real-estate API.

The package signs every action with the account's token and secret
(HMAC-SHA256, ``hmac_version`` 2), sends it over HTTP with :mod:`httpx`,
and can cache successful responses in memory. On top of the generic call
dispatcher it offers a deferred request queue, bulk pagination and
relationship helpers.

Typical usage::

    from onoffice import ClientConfig, OnOfficeClient

    async with OnOfficeClient(ClientConfig(token=TOKEN, secret=SECRET)) as client:
        estates = await client.get_all_estates({"data": ["Id", "objekttitel"]})

Modules:
    models: Pydantic models for configuration, requests and relations.
    signer: HMAC computation for request authentication.
    cache: Cache interface and the in-memory backend.
    client: Dispatcher, request queue, pagination and the client facade.
    config: Config file, environment and credential-source resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer command line entry point.
"""

from onoffice.client import OnOfficeClient
from onoffice.exceptions import (
    AuthError,
    ConfigError,
    FetchAllError,
    InvalidRequestError,
    OnOfficeError,
    ResponseError,
    TransportError,
)
from onoffice.models import (
    ActionId,
    CacheConfig,
    ClientConfig,
    Credentials,
    RelationType,
    Relationship,
    RelationshipQuery,
    RequestConfig,
    ResourceType,
)

__version__ = "0.3.0"

__all__ = [
    "ActionId",
    "AuthError",
    "CacheConfig",
    "ClientConfig",
    "ConfigError",
    "Credentials",
    "FetchAllError",
    "InvalidRequestError",
    "OnOfficeClient",
    "OnOfficeError",
    "RelationType",
    "Relationship",
    "RelationshipQuery",
    "RequestConfig",
    "ResourceType",
    "ResponseError",
    "TransportError",
]
