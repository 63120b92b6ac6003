"""Record commands -- read one page or every record of a resource.

Provides the top-level ``onoffice read`` and ``onoffice fetch-all``
commands. Both take the resource to read (estate, address or
searchcriteria), the fields to return and an optional JSON filter, and
print the records as a table, plain text or JSON depending on the active
output mode.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

import typer

from onoffice.client.pagination import DEFAULT_PAGE_SIZE, extract_records, extract_total
from onoffice.commands.runtime import parse_filter, parse_sort, run_with_client
from onoffice.models import ActionId
from onoffice.output import get_output, info, success, warning


class ReadableResource(str, enum.Enum):
    """Resources the record commands can read."""

    estate = "estate"
    address = "address"
    searchcriteria = "searchcriteria"


def _read_parameters(
    fields: Optional[list[str]],
    filter_json: Optional[str],
    sort: Optional[list[str]],
) -> dict[str, Any]:
    parameters: dict[str, Any] = {}
    if fields:
        parameters["data"] = list(fields)
    filters = parse_filter(filter_json)
    if filters:
        parameters["filter"] = filters
    sortby = parse_sort(sort)
    if sortby:
        parameters["sortby"] = sortby
    return parameters


def read_command(
    ctx: typer.Context,
    resource: ReadableResource = typer.Argument(help="Resource to read."),
    field: Optional[list[str]] = typer.Option(
        None, "--field", "-f", help="Field to return (repeatable)."
    ),
    limit: int = typer.Option(20, "--limit", "-l", min=1, help="Records per page."),
    offset: int = typer.Option(0, "--offset", min=0, help="Records to skip."),
    filter_json: Optional[str] = typer.Option(
        None, "--filter", help="Filter as JSON, e.g. '{\"status\": [{\"op\": \"=\", \"val\": 1}]}'."
    ),
    sort: Optional[list[str]] = typer.Option(
        None, "--sort", help="Sort order FIELD[:ASC|DESC] (repeatable)."
    ),
) -> None:
    """Read one page of records.

    Example::

        onoffice read estate -f Id -f kaufpreis --limit 10 --sort kaufpreis:ASC
    """
    parameters = _read_parameters(field, filter_json, sort)
    parameters["listlimit"] = limit
    parameters["listoffset"] = offset

    payload = run_with_client(
        ctx, lambda client: client.call(ActionId.READ, resource.value, parameters)
    )

    records = extract_records(payload)
    total = extract_total(payload)
    get_output().print_records(records, fields=field, title=resource.value)
    if total is not None:
        if offset >= total > 0:
            warning(f"Offset {offset} is past the last record ({total} total)")
        info(f"{len(records)} of {total} {resource.value} records (offset {offset})")


def fetch_all_command(
    ctx: typer.Context,
    resource: ReadableResource = typer.Argument(help="Resource to read."),
    field: Optional[list[str]] = typer.Option(
        None, "--field", "-f", help="Field to return (repeatable)."
    ),
    filter_json: Optional[str] = typer.Option(None, "--filter", help="Filter as JSON."),
    sort: Optional[list[str]] = typer.Option(
        None, "--sort", help="Sort order FIELD[:ASC|DESC] (repeatable)."
    ),
    page_size: int = typer.Option(
        DEFAULT_PAGE_SIZE, "--page-size", min=1, help="Records requested per page."
    ),
) -> None:
    """Read every matching record, paging through the whole result set.

    Combine with the root ``--output FILE`` option to save the records
    as JSON.

    Example::

        onoffice --output estates.json fetch-all estate -f Id -f objekttitel
    """
    parameters = _read_parameters(field, filter_json, sort)

    records = run_with_client(
        ctx,
        lambda client: client.fetch_all(resource.value, parameters, page_size=page_size),
    )

    get_output().print_records(records, fields=field, title=resource.value)
    success(f"Retrieved {len(records)} {resource.value} records")
