"""Glue between Typer commands and the async client.

Every data command resolves a :class:`~onoffice.models.ClientConfig` from
the root options stored in ``ctx.obj``, opens an
:class:`~onoffice.client.sdk.OnOfficeClient`, runs one coroutine on a
fresh event loop, and turns SDK errors into a clean exit with the error's
``exit_code``.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from onoffice.client.sdk import OnOfficeClient
from onoffice.config import resolve_config
from onoffice.exceptions import OnOfficeError
from onoffice.models import ClientConfig, RelationType
from onoffice.output import error

T = TypeVar("T")


def client_config(ctx: typer.Context) -> ClientConfig:
    """Resolve the client config from the root callback's options."""
    obj = ctx.obj or {}
    return resolve_config(
        api_version=obj.get("api_version"),
        cache_enabled=obj.get("cache"),
        config_path=obj.get("config_path"),
    )


def run_with_client(
    ctx: typer.Context,
    action: Callable[[OnOfficeClient], Awaitable[T]],
) -> T:
    """Run *action* against a freshly opened client.

    Raises:
        typer.Exit: With the error's ``exit_code`` on any
            :class:`~onoffice.exceptions.OnOfficeError`.
    """
    obj = ctx.obj or {}

    async def _main() -> T:
        config = client_config(ctx)
        async with OnOfficeClient(config, transport=obj.get("transport")) as client:
            return await action(client)

    try:
        return asyncio.run(_main())
    except OnOfficeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


# --- Option parsing ---


def parse_filter(text: Optional[str]) -> Optional[dict[str, Any]]:
    """Parse a ``--filter`` JSON object, e.g. ``'{"status": [{"op": "=", "val": 1}]}'``."""
    if text is None:
        return None
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"--filter is not valid JSON: {exc}") from None
    if not isinstance(value, dict):
        raise typer.BadParameter("--filter must be a JSON object")
    return value


def parse_sort(items: Optional[list[str]]) -> Optional[dict[str, str]]:
    """Turn ``["kaufpreis:ASC", "ort"]`` into ``{"kaufpreis": "ASC", "ort": "ASC"}``."""
    if not items:
        return None
    sortby: dict[str, str] = {}
    for item in items:
        field, _, direction = item.partition(":")
        direction = (direction or "ASC").upper()
        if not field or direction not in ("ASC", "DESC"):
            raise typer.BadParameter(f"Invalid --sort value '{item}'. Use FIELD[:ASC|DESC]")
        sortby[field] = direction
    return sortby


def parse_relation_type(name: str) -> RelationType:
    """Map ``owner`` / ``contact-broker`` / a full URN to :class:`RelationType`."""
    try:
        return RelationType(name)
    except ValueError:
        pass
    key = name.strip().upper().replace("-", "_")
    try:
        return RelationType[key]
    except KeyError:
        choices = ", ".join(m.name.lower().replace("_", "-") for m in RelationType)
        raise typer.BadParameter(f"Unknown relation type '{name}'. Choose from: {choices}") from None
