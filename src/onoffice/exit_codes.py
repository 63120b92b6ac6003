"""Numeric process exit codes used by the ``onoffice`` command line.

Each constant maps to an error category and is referenced by the
corresponding :class:`~onoffice.exceptions.OnOfficeError` subclass, so
shell scripts can tell a rejected signature from a network outage
without parsing stderr.

Example::

    $ onoffice read estate --field Id
    $ echo $?
    6   # EXIT_TRANSPORT_ERROR -- the API endpoint could not be reached
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_REQUEST = 2
"""The call was made with missing or invalid parameters."""

EXIT_AUTH_FAILURE = 3
"""The request could not be signed (empty secret, unavailable HMAC)."""

EXIT_RESPONSE_ERROR = 5
"""The API answered with HTTP 2xx but reported a failure in the payload."""

EXIT_TRANSPORT_ERROR = 6
"""The HTTP exchange failed (non-2xx status, timeout, connection refused)."""
