"""Exception hierarchy for the onOffice SDK.

All exceptions inherit from :class:`OnOfficeError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`onoffice.exit_codes`. Library callers catch the specific subclass
they care about; the CLI entry point in :func:`onoffice.app.main` catches
``OnOfficeError`` and exits with the matching code.

Subclass hierarchy::

    OnOfficeError            (exit 1)
    +-- InvalidRequestError  (exit 2)
    +-- AuthError            (exit 3)
    +-- ResponseError        (exit 5)
    +-- TransportError       (exit 6)
    +-- FetchAllError        (exit 1)
    +-- ConfigError          (exit 1)
"""

from __future__ import annotations

from typing import Any, Optional

from onoffice.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_REQUEST,
    EXIT_RESPONSE_ERROR,
    EXIT_TRANSPORT_ERROR,
)


class OnOfficeError(Exception):
    """Base exception for all SDK errors.

    Also raised directly as the catch-all for failures that fit no
    narrower category (e.g. an undecodable response body).

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidRequestError(OnOfficeError):
    """Raised when an action is built without parameters or with an empty action/resource."""

    exit_code = EXIT_INVALID_REQUEST


class AuthError(OnOfficeError):
    """Raised when the request HMAC cannot be computed."""

    exit_code = EXIT_AUTH_FAILURE


class TransportError(OnOfficeError):
    """Raised when the HTTP exchange itself fails.

    Covers non-2xx responses as well as network-level failures (DNS,
    refused connection, timeout). For the latter ``status_code`` is ``0``.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code, or ``0`` when no response arrived.
        url: The endpoint that was being called.
    """

    exit_code = EXIT_TRANSPORT_ERROR

    def __init__(self, message: str, status_code: int = 0, url: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ResponseError(OnOfficeError):
    """Raised when the API answers 2xx but the payload reports a failure.

    The full decoded payload is kept on :attr:`response` so callers can
    inspect ``status.message`` or per-action error codes.
    """

    exit_code = EXIT_RESPONSE_ERROR

    def __init__(self, message: str, response: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.response = response


class FetchAllError(OnOfficeError):
    """Raised when paginated fetching aborts because one page failed."""


class ConfigError(OnOfficeError):
    """Raised for configuration problems (missing credentials, invalid JSON, bad sources)."""
