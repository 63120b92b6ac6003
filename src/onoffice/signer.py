"""HMAC request signing (``hmac_version`` 2).

The API authenticates every action by recomputing an HMAC-SHA256 over a
fixed-order message built from the action's timestamp, the API token,
the resource type and the action id, keyed with the shared secret. The
base64 form of that digest travels in the action's ``hmac`` field.

Because the server recomputes the code, :func:`sign` must be
deterministic and the ``timestamp`` passed here must be the exact value
written to the wire.
"""

from __future__ import annotations

import base64
import hashlib
import hmac

from onoffice.exceptions import AuthError
from onoffice.models import ActionId, ResourceType, plain_value


def build_message(
    action_id: ActionId | str,
    resource_type: ResourceType | str,
    timestamp: int,
    token: str,
) -> str:
    """Return the string the HMAC is computed over."""
    return (
        f"timestamp{timestamp}"
        f"token{token}"
        f"resourcetype{plain_value(resource_type)}"
        f"actionid{plain_value(action_id)}"
    )


def sign(
    action_id: ActionId | str,
    resource_type: ResourceType | str,
    timestamp: int,
    token: str,
    secret: str,
) -> str:
    """Compute the base64-encoded HMAC-SHA256 for one action.

    Args:
        action_id: Action URN (e.g. :attr:`ActionId.READ`).
        resource_type: Target resource (e.g. ``"estate"``).
        timestamp: Unix timestamp in seconds, as sent on the wire.
        token: The API token.
        secret: The shared secret used as HMAC key.

    Returns:
        The digest as a base64 ASCII string.

    Raises:
        AuthError: If *secret* is empty or the HMAC primitive is unavailable.
    """
    if not secret:
        raise AuthError("Cannot sign request: API secret is empty")

    message = build_message(action_id, resource_type, timestamp, token)
    try:
        digest = hmac.new(
            secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
        ).digest()
    except ValueError as exc:
        raise AuthError(f"HMAC-SHA256 is unavailable: {exc}") from exc
    return base64.b64encode(digest).decode("ascii")
