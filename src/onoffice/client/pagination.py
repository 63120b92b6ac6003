"""Collect a complete record set across ``listoffset`` / ``listlimit`` pages.

The API caps how many records a single read returns. :func:`fetch_all`
keeps requesting pages until it has seen as many records as the API
reports in ``cntabsolute``, or until a page comes back short. Failures are
all-or-nothing: if any page fails, the records gathered so far are
dropped and :class:`~onoffice.exceptions.FetchAllError` is raised.
"""

from __future__ import annotations

import logging
from typing import Any

from onoffice.client.dispatcher import Dispatcher
from onoffice.exceptions import FetchAllError, InvalidRequestError
from onoffice.models import ActionRequest

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500


def first_result(payload: dict[str, Any]) -> dict[str, Any]:
    """Return ``response.results[0]`` of a payload, or an empty dict."""
    response = payload.get("response")
    results = response.get("results") if isinstance(response, dict) else None
    if results and isinstance(results[0], dict):
        return results[0]
    return {}


def extract_records(payload: dict[str, Any]) -> list[Any]:
    """Return the records of the first result as a list.

    The API sometimes keys records by id; in that case the values are
    returned in order.
    """
    data = first_result(payload).get("data")
    records = data.get("records") if isinstance(data, dict) else None
    if records is None:
        return []
    if isinstance(records, dict):
        return list(records.values())
    return list(records)


def extract_total(payload: dict[str, Any]) -> int | None:
    """Return ``cntabsolute`` from the first result's metadata, if present."""
    result = first_result(payload)
    for holder in (result, result.get("data")):
        if not isinstance(holder, dict):
            continue
        meta = holder.get("meta")
        if isinstance(meta, dict) and meta.get("cntabsolute") is not None:
            try:
                return int(meta["cntabsolute"])
            except (TypeError, ValueError):
                return None
    return None


async def fetch_all(
    dispatcher: Dispatcher,
    request: ActionRequest,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[Any]:
    """Read every record matching *request*, one page at a time.

    Each page is *request* with ``listoffset`` and ``listlimit`` set. The
    loop stops once the number of records fetched reaches the reported
    total, or as soon as a page holds fewer than *page_size* records.

    Args:
        dispatcher: Dispatcher used for every page request.
        request: The read action; its own ``listoffset``/``listlimit``
            are overridden.
        page_size: Records requested per page.

    Returns:
        All records, in the order the pages returned them.

    Raises:
        InvalidRequestError: If *page_size* is smaller than 1.
        FetchAllError: If any page request fails.
    """
    if page_size < 1:
        raise InvalidRequestError(f"page_size must be at least 1, got {page_size}")

    records: list[Any] = []
    fetched = 0
    available = 1

    while fetched < available:
        page_request = request.with_parameters(listoffset=fetched, listlimit=page_size)
        try:
            payload = await dispatcher.dispatch(page_request)
        except Exception as exc:
            raise FetchAllError(
                f"Fetching {request.resource_type} records failed at offset {fetched}: {exc}"
            ) from exc

        page = extract_records(payload)
        records.extend(page)
        fetched += len(page)
        total = extract_total(payload)
        # Without a reported total, keep going until a short page.
        available = total if total is not None else fetched + 1
        logger.debug(
            "Fetched %d/%d %s records", fetched, available, request.resource_type
        )

        if len(page) < page_size:
            break

    return records
