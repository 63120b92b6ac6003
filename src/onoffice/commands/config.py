"""Config commands -- view and modify the client configuration file.

Provides the ``onoffice config`` sub-command group. Settings live in a
JSON file (see :func:`~onoffice.config.default_config_path`) shaped like
:class:`~onoffice.models.ClientConfig`; environment variables still take
precedence over anything written here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from onoffice.output import error, get_output, info, success


config_app = typer.Typer(no_args_is_help=True)

_SECRET_MASK = "********"


def _config_path(ctx: typer.Context) -> Optional[Path]:
    return (ctx.obj or {}).get("config_path")


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the stored configuration with the secret masked.

    Example::

        onoffice config show
        onoffice --json config show
    """
    from onoffice.config import default_config_path, load_config_file
    from onoffice.exceptions import ConfigError

    path = _config_path(ctx)
    try:
        data = load_config_file(path)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    if data.get("secret"):
        data["secret"] = _SECRET_MASK
    info(f"Config file: {path or default_config_path()}")
    get_output().print_payload(data)


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    key: str = typer.Argument(help="Config key (dot notation, e.g., 'cache.enabled')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to the type
    of the field's default (bool, int or str) and the result is validated
    before it is saved.

    Raises:
        typer.Exit: With code 2 if the key is unknown, the value cannot be
            coerced, or validation fails.

    Example::

        onoffice config set token env:ONOFFICE_TOKEN
        onoffice config set cache.enabled true
        onoffice config set cache.expiration_seconds 600
    """
    from pydantic import ValidationError

    from onoffice.config import load_config_file, save_config_file
    from onoffice.exceptions import ConfigError
    from onoffice.models import ClientConfig

    path = _config_path(ctx)
    try:
        # An explicit --config file is created on first write.
        stored = load_config_file(path) if path is None or Path(path).is_file() else {}
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    # Defaults tell us which keys exist and what type they hold.
    template = ClientConfig.model_construct(token="", secret="").model_dump(mode="json")

    keys = key.split(".")
    target = template
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    coerced: Any
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, (int, float)):
        try:
            coerced = float(value) if "." in value else int(value)
        except ValueError:
            error(f"Expected a number for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    else:
        coerced = value

    node = stored
    for k in keys[:-1]:
        node = node.setdefault(k, {})
    node[final_key] = coerced

    # Token and secret may be unset while the file is built up key by key.
    candidate = {"token": "-", "secret": "-", **stored}
    try:
        ClientConfig.model_validate(candidate)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    written = save_config_file(stored, path)
    shown = _SECRET_MASK if final_key == "secret" else coerced
    success(f"Set {key} = {shown} in {written}")
