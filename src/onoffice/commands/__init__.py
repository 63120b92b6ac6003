"""Built-in CLI sub-commands for onoffice.

This package groups the Typer modules that form the CLI's command tree:

* :mod:`~onoffice.commands.records` -- ``read`` and ``fetch-all`` for
  estates, addresses and search criteria.
* :mod:`~onoffice.commands.relations` -- look up and create relations.
* :mod:`~onoffice.commands.config` -- view and modify the config file.
* :mod:`~onoffice.commands.runtime` -- shared helpers that open a client
  and run one coroutine per command.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands export a plain callback registered on the root app.
"""
