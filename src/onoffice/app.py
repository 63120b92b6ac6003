"""Typer application and CLI entry point for onoffice.

This module wires together the top-level Typer application and registers
the built-in commands (``read``, ``fetch-all``, ``relations``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. SDK errors that escape a command end the process with
the error's ``exit_code``; Ctrl-C exits with 130.

See Also:
    :mod:`onoffice.config`: Config file and environment resolution.
    :mod:`onoffice.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler

from onoffice import __version__
from onoffice.commands.config import config_app
from onoffice.commands.records import fetch_all_command, read_command
from onoffice.commands.relations import relations_app
from onoffice.exceptions import OnOfficeError
from onoffice.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="onoffice",
    help="Query and update an onOffice enterprise account from the shell.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("read")(read_command)
app.command("fetch-all")(fetch_all_command)
app.add_typer(relations_app, name="relations", help="Record relations.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"onoffice {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Route the ``onoffice`` loggers to stderr through Rich."""
    from onoffice.output import get_output

    logger = logging.getLogger("onoffice")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=get_output().stderr_console,
        show_time=False,
        show_path=verbose,
        markup=False,
    )
    logger.addHandler(handler)
    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.ERROR)
    else:
        logger.setLevel(logging.WARNING)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write records to this file as JSON."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file to use instead of the default."
    ),
    cache: Optional[bool] = typer.Option(
        None, "--cache/--no-cache", help="Enable or disable the response cache."
    ),
    api_version: Optional[str] = typer.Option(
        None, "--api-version", help="API version: 'stable' or 'latest'."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~onoffice.output.OutputManager` and the
    log handler from CLI flags, and stores the options that affect client
    configuration in ``ctx.obj`` for
    :func:`~onoffice.commands.runtime.client_config`.
    """
    from onoffice.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            output_file=output_file,
        )
    )
    _configure_logging(verbose, quiet)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["cache"] = cache
    ctx.obj["api_version"] = api_version


def main() -> None:
    """CLI entry point invoked by the ``onoffice`` console script.

    Unhandled :class:`~onoffice.exceptions.OnOfficeError` instances cause
    a clean exit with the error's ``exit_code``; any other exception
    exits with :data:`~onoffice.exit_codes.EXIT_GENERIC_FAILURE`.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from onoffice.output import error

        if isinstance(exc, OnOfficeError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
