"""Signed request dispatch with optional response caching.

:class:`Dispatcher` is the single path every API call takes, whether it
comes from a convenience method, the request queue or the pagination
helper. For each :class:`~onoffice.models.ActionRequest` it:

1. stamps the current Unix time and computes the HMAC
   (:func:`onoffice.signer.sign`);
2. consults the cache, when one is configured, and returns a hit without
   touching the network;
3. POSTs the signed action as a one-element batch;
4. classifies the outcome (HTTP failure, payload failure, success);
5. writes the payload to the cache, only after a full success.

There is no retry: a miss costs exactly one HTTP request.

See Also:
    :class:`~onoffice.client.sdk.OnOfficeClient`, which owns the
    :class:`httpx.AsyncClient` and the cache a dispatcher works with.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Optional, Sequence

import httpx

from onoffice.cache.base import CacheBackend, make_cache_key
from onoffice.exceptions import OnOfficeError, ResponseError, TransportError
from onoffice.models import ActionRequest, ClientConfig, Credentials, SignedEnvelope
from onoffice.signer import sign

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "Accept-Encoding": "gzip, deflate",
}


class Dispatcher:
    """Signs, sends and classifies single API actions.

    Args:
        config: Endpoint, credentials and request settings.
        http_client: An open :class:`httpx.AsyncClient`. The dispatcher
            never closes it.
        cache: Backend to consult and fill. ``None`` disables caching
            entirely (no lookup, no write).
        clock: Callable returning the current Unix time in seconds.

    Example::

        async with httpx.AsyncClient() as http:
            dispatcher = Dispatcher(config, http)
            payload = await dispatcher.dispatch(
                ActionRequest.build(ActionId.READ, ResourceType.ESTATE, {"data": ["Id"]})
            )
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.AsyncClient,
        cache: Optional[CacheBackend] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._credentials = config.credentials
        self._http = http_client
        self._cache = cache
        self._clock = clock

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @credentials.setter
    def credentials(self, credentials: Credentials) -> None:
        self._credentials = credentials

    @property
    def cache(self) -> Optional[CacheBackend]:
        return self._cache

    @property
    def url(self) -> str:
        return self._config.endpoint_url

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def sign(self, request: ActionRequest, timestamp: int) -> SignedEnvelope:
        """Wrap *request* in an envelope signed for *timestamp*.

        Raises:
            AuthError: If the configured secret cannot be used as HMAC key.
        """
        code = sign(
            request.action_id,
            request.resource_type,
            timestamp,
            self._credentials.token,
            self._credentials.secret,
        )
        return SignedEnvelope(request=request, timestamp=timestamp, hmac=code)

    async def dispatch(self, request: ActionRequest) -> dict[str, Any]:
        """Execute one action and return the decoded response payload.

        Args:
            request: The action to perform.

        Returns:
            The decoded JSON body, e.g.
            ``{"status": {...}, "response": {"results": [...]}}``.

        Raises:
            AuthError: If signing fails.
            TransportError: On a non-2xx status or a network failure.
            ResponseError: If the payload reports a failure.
            OnOfficeError: If the body is not a JSON object.
        """
        # 1. Timestamp + HMAC
        envelope = self.sign(request, int(self._clock()))

        # 2. Cache lookup
        key: Optional[str] = None
        if self._cache is not None:
            key = make_cache_key(request)
            cached = await self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit: %s %s", request.resource_type, key[:12])
                return json.loads(cached)
            logger.debug("Cache miss: %s %s", request.resource_type, key[:12])

        # 3. Network call
        payload = await self.send([envelope])

        # 4. Payload-level classification
        self._check_payload(payload)

        # 5. Cache write (full success only)
        if self._cache is not None and key is not None:
            await self._cache.set(key, json.dumps(payload))
            logger.debug("Cached response: %s %s", request.resource_type, key[:12])
        return payload

    async def send(self, envelopes: Sequence[SignedEnvelope]) -> dict[str, Any]:
        """POST *envelopes* as one batch and return the decoded body.

        Only HTTP-level failures are raised here; payload status codes
        are left to the caller.
        """
        url = self.url
        body = {
            "token": self._credentials.token,
            "request": {"actions": [envelope.to_wire() for envelope in envelopes]},
        }
        logger.debug(
            "POST %s (%s)", url, ", ".join(e.request.resource_type for e in envelopes)
        )

        try:
            response = await self._http.post(url, json=body, headers=REQUEST_HEADERS)
        except httpx.TransportError as exc:
            raise TransportError(
                f"Request to {url} failed: {exc}", status_code=0, url=url
            ) from exc

        if not response.is_success:
            raise TransportError(
                self._describe_http_error(response), status_code=response.status_code, url=url
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise OnOfficeError(f"Response from {url} is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise OnOfficeError(
                f"Response from {url} is not a JSON object (got {type(payload).__name__})"
            )
        return payload

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _describe_http_error(response: httpx.Response) -> str:
        """Build an error message, including ``status.message`` when the body has one."""
        prefix = f"HTTP {response.status_code}"
        try:
            detail = response.json()
        except ValueError:
            text = response.text[:200] if response.text else ""
            return f"{prefix}: {text}" if text else prefix

        msg = ""
        if isinstance(detail, dict):
            status = detail.get("status")
            if isinstance(status, dict):
                msg = str(status.get("message") or "")
        return f"{prefix}: {msg}" if msg else prefix

    @staticmethod
    def _check_payload(payload: dict[str, Any]) -> None:
        """Raise :class:`ResponseError` unless the payload reports success."""
        status = payload.get("status")
        if not isinstance(status, dict):
            raise ResponseError("Response payload has no status block", payload)

        code = _as_int(status.get("code"))
        if code is None or not 200 <= code < 300:
            message = status.get("message") or "unknown error"
            raise ResponseError(f"API returned status {status.get('code')}: {message}", payload)

        response = payload.get("response")
        results = response.get("results") if isinstance(response, dict) else None
        for result in results or []:
            action_status = result.get("status") if isinstance(result, dict) else None
            if not isinstance(action_status, dict):
                continue
            errorcode = _as_int(action_status.get("errorcode")) or 0
            if errorcode:
                message = action_status.get("message") or "action failed"
                raise ResponseError(f"Action failed with error {errorcode}: {message}", payload)


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
