"""Output formatting for the ``onoffice`` command line.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- records and payloads only, so output can be piped.
* **stderr** -- status lines, warnings, errors and log records.
* **TTY detection** -- Rich tables when stdout is an interactive
  terminal, plain tab-separated text when piped.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb`` and
  ``--no-color``.

:class:`OutputManager` holds the format preferences and both consoles. It
is created once in :func:`~onoffice.app.main_callback` and installed with
:func:`set_output`; commands use the module-level helpers (:func:`info`,
:func:`error`, ...) so they never pass the manager around.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Supported output formats. ``AUTO`` picks ``RICH`` on a colour TTY, else ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def flatten_record(record: Any) -> dict[str, Any]:
    """Return the field mapping of an API record.

    Read results come as ``{"id": ..., "type": ..., "elements": {...}}``;
    the ``elements`` mapping is what users think of as the record.
    """
    if isinstance(record, dict):
        elements = record.get("elements")
        if isinstance(elements, dict):
            return elements
        return record
    return {"value": record}


class OutputManager:
    """Routes command output to stdout/stderr in the chosen format.

    Args:
        format: Desired output format. ``AUTO`` resolves on TTY detection.
        no_color: Disable colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        output_file: Write data to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._output_file = output_file

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def stderr_console(self) -> Console:
        """The diagnostics console, shared with the CLI's log handler."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_payload(self, data: Any) -> None:
        """Output a decoded API payload (or any JSON-able value)."""
        if self._output_file:
            self._write_to_file(data)
            return

        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(text)

    def print_records(
        self,
        records: list[Any],
        fields: Optional[list[str]] = None,
        title: Optional[str] = None,
    ) -> None:
        """Output API records as a table (Rich/plain) or a JSON array.

        Args:
            records: Raw records as returned by the API.
            fields: Columns to show. Defaults to the union of all field
                names in order of first appearance.
            title: Optional table title (Rich mode only).
        """
        rows = [flatten_record(r) for r in records]
        if self._output_file or self._format == OutputFormat.JSON:
            self.print_payload(rows)
            return

        if not fields:
            fields = []
            for row in rows:
                fields.extend(k for k in row if k not in fields)

        if self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(fields))
            for row in rows:
                self.print_data("\t".join(_cell(row.get(f)) for f in fields))
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for f in fields:
            table.add_column(f)
        for row in rows:
            table.add_row(*(_cell(row.get(f)) for f in fields))
        self._stdout.print(table)

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Informational message. Suppressed by ``--quiet``."""
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(message)

    def success(self, message: str) -> None:
        """Green success message. Suppressed by ``--quiet``."""
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Yellow warning. Not suppressed by ``--quiet``."""
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Bold red error. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _write_to_file(self, data: Any) -> None:
        assert self._output_file is not None
        content = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        with open(self._output_file, "w", encoding="utf-8") as f:
            f.write(content + "\n")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager`."""
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global :class:`OutputManager` (used between tests)."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
