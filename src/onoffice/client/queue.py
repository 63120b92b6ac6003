"""Deferred calls: queue now, send together, collect by handle.

:class:`RequestQueue` collects actions under integer handles and runs them
all concurrently on :meth:`RequestQueue.flush`. Each call settles into its
own :class:`CallOutcome`; a failing call never aborts or hides the others.
The caller later asks for a specific handle with
:meth:`RequestQueue.get_result`, which either returns the payload or
re-raises the error stored for that call.

Handles come from a per-queue counter and are never reused, so outcomes
from earlier flushes stay retrievable.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from onoffice.client.dispatcher import Dispatcher
from onoffice.exceptions import OnOfficeError
from onoffice.models import ActionId, ActionRequest, Credentials, ResourceType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallOutcome:
    """The settled result of one queued call: a payload or an error."""

    response: Optional[dict[str, Any]] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> dict[str, Any]:
        """Return the payload, or raise the stored error."""
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


class RequestQueue:
    """Accumulates actions and dispatches them as one concurrent batch.

    Args:
        dispatcher: The dispatcher every queued call is sent through.

    Example::

        queue = RequestQueue(dispatcher)
        estates = queue.enqueue(ActionId.READ, ResourceType.ESTATE, {"data": ["Id"]})
        contacts = queue.enqueue(ActionId.READ, ResourceType.ADDRESS, {"data": ["Name"]})
        await queue.flush()
        queue.get_result(estates)
    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher
        self._counter = itertools.count(1)
        self._pending: dict[int, ActionRequest] = {}
        self._outcomes: dict[int, CallOutcome] = {}
        self._flushing = False

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @dispatcher.setter
    def dispatcher(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def pending(self) -> int:
        """Number of calls waiting for the next flush."""
        return len(self._pending)

    def enqueue(
        self,
        action_id: ActionId | str,
        resource_type: ResourceType | str,
        parameters: Optional[Mapping[str, Any]],
        resource_id: str = "",
        identifier: str = "",
    ) -> int:
        """Queue an action and return its handle.

        Raises:
            InvalidRequestError: If ``parameters`` is missing or the action
                id / resource type is empty. Nothing is queued in that case.
        """
        request = ActionRequest.build(
            action_id, resource_type, parameters, resource_id=resource_id, identifier=identifier
        )
        handle = next(self._counter)
        self._pending[handle] = request
        return handle

    async def flush(self, credentials: Optional[Credentials] = None) -> None:
        """Dispatch every pending call concurrently and record each outcome.

        Args:
            credentials: If given, replaces the dispatcher's credentials
                before anything is sent, so every queued call is signed
                with them.

        Raises:
            OnOfficeError: If another flush of this queue is still running.
        """
        if self._flushing:
            raise OnOfficeError("A flush is already in progress on this queue")
        if credentials is not None:
            self._dispatcher.credentials = credentials

        batch = dict(self._pending)
        if not batch:
            return

        self._flushing = True
        try:
            results = await asyncio.gather(
                *(self._dispatcher.dispatch(request) for request in batch.values()),
                return_exceptions=True,
            )
        finally:
            self._flushing = False

        failed = 0
        for handle, result in zip(batch, results):
            if isinstance(result, BaseException):
                self._outcomes[handle] = CallOutcome(error=result)
                failed += 1
            else:
                self._outcomes[handle] = CallOutcome(response=result)
            del self._pending[handle]
        logger.debug("Flushed %d queued calls (%d failed)", len(batch), failed)

    def get_outcome(self, handle: int) -> Optional[CallOutcome]:
        """Return the raw :class:`CallOutcome` for *handle*, if it has settled."""
        return self._outcomes.get(handle)

    def get_result(self, handle: int) -> Optional[dict[str, Any]]:
        """Return the payload stored for *handle*.

        Returns:
            The decoded payload, or ``None`` if the handle is unknown or
            has not been flushed yet.

        Raises:
            Exception: The error the call failed with, re-raised as is.
        """
        outcome = self._outcomes.get(handle)
        if outcome is None:
            return None
        return outcome.unwrap()
