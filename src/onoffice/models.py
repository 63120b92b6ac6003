"""Canonical Pydantic models shared across the onOffice SDK.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Configuration models** -- loaded from the config file and environment:
    :class:`CacheConfig`, :class:`RequestConfig`, :class:`ClientConfig`,
    and :class:`Credentials`.

**Request models** -- what the dispatcher signs and sends:
    :class:`ActionId`, :class:`ResourceType`, :class:`ActionRequest`, and
    :class:`SignedEnvelope`.

**Relationship models** -- typed parameters for the relation helpers:
    :class:`RelationType`, :class:`RelationshipQuery`, and
    :class:`Relationship`.

Entity payloads (estates, addresses, ...) are deliberately untyped: the
SDK passes ``parameters`` through as plain mappings and returns the
decoded JSON as ``dict``.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from onoffice.exceptions import InvalidRequestError

API_BASE_URL = "https://api.onoffice.de/api/"
HMAC_VERSION = "2"


# --- Enumerations ---


class ActionId(str, enum.Enum):
    """Action URNs understood by the onOffice API."""

    READ = "urn:onoffice-de-ns:smart:2.5:smartml:action:read"
    CREATE = "urn:onoffice-de-ns:smart:2.5:smartml:action:create"
    MODIFY = "urn:onoffice-de-ns:smart:2.5:smartml:action:modify"
    GET = "urn:onoffice-de-ns:smart:2.5:smartml:action:get"
    DO = "urn:onoffice-de-ns:smart:2.5:smartml:action:do"
    DELETE = "urn:onoffice-de-ns:smart:2.5:smartml:action:delete"


class ResourceType(str, enum.Enum):
    """Entity categories an action can target."""

    ADDRESS = "address"
    ESTATE = "estate"
    SEARCHCRITERIA = "searchcriteria"
    RELATION = "relation"
    IDS_FROM_RELATION = "idsfromrelation"


class RelationType(str, enum.Enum):
    """Relationship URNs between estates, addresses and complexes."""

    BUYER = "urn:onoffice-de-ns:smart:2.5:relationTypes:estate:address:buyer"
    TENANT = "urn:onoffice-de-ns:smart:2.5:relationTypes:estate:address:renter"
    OWNER = "urn:onoffice-de-ns:smart:2.5:relationTypes:estate:address:owner"
    CONTACT_BROKER = "urn:onoffice-de-ns:smart:2.5:relationTypes:estate:address:contactPerson"
    CONTACT_PERSON = "urn:onoffice-de-ns:smart:2.5:relationTypes:estate:address:contactPersonAll"
    COMPLEX_ESTATE_UNITS = "urn:onoffice-de-ns:smart:2.5:relationTypes:complex:estate:units"


def plain_value(value: Any) -> Any:
    """Unwrap enum members to their raw value."""
    if isinstance(value, enum.Enum):
        return value.value
    return value


# --- Configuration ---


class CacheConfig(BaseModel):
    """Response cache settings embedded in :class:`ClientConfig`."""

    enabled: bool = Field(default=False, description="Enable response caching")
    expiration_seconds: int = Field(
        default=300, ge=0, description="Seconds a cached response stays valid"
    )


class RequestConfig(BaseModel):
    """HTTP settings applied to every API call."""

    timeout: float = Field(default=30, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class Credentials(BaseModel):
    """API token and shared secret used to sign requests."""

    model_config = ConfigDict(frozen=True)

    token: str
    secret: str = Field(repr=False)


class ClientConfig(BaseModel):
    """Everything :class:`~onoffice.client.sdk.OnOfficeClient` needs to talk to the API.

    When ``api_url`` is omitted the endpoint is derived from
    ``api_version``, e.g. ``https://api.onoffice.de/api/stable/api.php``.

    Example::

        ClientConfig(
            token="a1b2...",
            secret="s3cr3t",
            api_version="latest",
            cache=CacheConfig(enabled=True, expiration_seconds=60),
        )
    """

    token: str
    secret: str = Field(repr=False)
    api_version: Literal["stable", "latest"] = "stable"
    api_url: Optional[str] = Field(
        default=None, description="Override the endpoint derived from api_version"
    )
    cache: CacheConfig = Field(default_factory=CacheConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)

    @property
    def endpoint_url(self) -> str:
        """The URL every request is POSTed to."""
        return self.api_url or f"{API_BASE_URL}{self.api_version}/api.php"

    @property
    def credentials(self) -> Credentials:
        return Credentials(token=self.token, secret=self.secret)


# --- Requests ---


class ActionRequest(BaseModel):
    """One remote operation, before signing.

    Instances are frozen. Use :meth:`build` rather than the constructor
    when the inputs come from callers: it reports missing parameters as
    :class:`~onoffice.exceptions.InvalidRequestError`.
    """

    model_config = ConfigDict(frozen=True)

    action_id: str
    resource_type: str
    resource_id: str = ""
    identifier: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("action_id", "resource_type", "resource_id", "identifier", mode="before")
    @classmethod
    def _unwrap_enum(cls, value: Any) -> Any:
        return plain_value(value)

    @classmethod
    def build(
        cls,
        action_id: ActionId | str,
        resource_type: ResourceType | str,
        parameters: Optional[Mapping[str, Any]],
        resource_id: Optional[str] = "",
        identifier: Optional[str] = "",
    ) -> ActionRequest:
        """Validate caller input and construct a request.

        ``None`` ids are sent as empty strings.

        Raises:
            InvalidRequestError: If the action id or resource type is
                empty, or ``parameters`` is ``None`` or not a mapping.
        """
        if not plain_value(action_id):
            raise InvalidRequestError("No action id specified")
        if not plain_value(resource_type):
            raise InvalidRequestError("No resource type specified")
        if parameters is None:
            raise InvalidRequestError("No action parameters specified")
        if not isinstance(parameters, Mapping):
            raise InvalidRequestError(
                f"Action parameters must be a mapping, got {type(parameters).__name__}"
            )
        return cls(
            action_id=action_id,
            resource_type=resource_type,
            resource_id="" if resource_id is None else str(plain_value(resource_id)),
            identifier="" if identifier is None else identifier,
            parameters=dict(parameters),
        )

    def with_parameters(self, **updates: Any) -> ActionRequest:
        """Return a copy whose parameters are updated with *updates*."""
        return self.model_copy(update={"parameters": {**self.parameters, **updates}})

    def cache_fields(self) -> dict[str, Any]:
        """The identifying fields used to address the response cache."""
        return {
            "actionid": self.action_id,
            "resourcetype": self.resource_type,
            "resourceid": self.resource_id,
            "identifier": self.identifier,
            "parameters": self.parameters,
        }


class SignedEnvelope(BaseModel):
    """An :class:`ActionRequest` plus the timestamp and HMAC it was signed with."""

    model_config = ConfigDict(frozen=True)

    request: ActionRequest
    timestamp: int
    hmac: str
    hmac_version: str = HMAC_VERSION

    def to_wire(self) -> dict[str, Any]:
        """Render the action object of the JSON request body."""
        return {
            "actionid": self.request.action_id,
            "resourceid": self.request.resource_id,
            "identifier": self.request.identifier,
            "resourcetype": self.request.resource_type,
            "timestamp": self.timestamp,
            "hmac": self.hmac,
            "hmac_version": self.hmac_version,
            "parameters": self.request.parameters,
        }


# --- Relationships ---


class RelationshipQuery(BaseModel):
    """Parameters for looking up related record ids.

    At least one of ``parentids`` / ``childids`` should be given; the API
    returns the ids on the other side of the relation.

    Field names are the ones the ``idsfromrelation`` resource accepts; the
    older ``parentmodule`` / ``childmodule`` / ``relationtypes`` spelling
    is not sent.
    """

    relationtype: RelationType
    parentids: Optional[list[str]] = None
    childids: Optional[list[str]] = None

    def to_parameters(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class Relationship(BaseModel):
    """A single relation between a parent and a child record.

    Sent as ``parentid`` / ``childid`` / ``relationinfo`` to the
    ``relation`` resource, not as ``parentmodule`` / ``childmodule`` /
    ``relationdata``.
    """

    relationtype: RelationType
    parentid: str
    childid: str
    relationinfo: Optional[dict[str, Any]] = Field(
        default=None, description="Optional extra data stored on the relation"
    )

    def to_parameters(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
