"""Built-in CLI sub-commands for seaman.

This package groups all Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~seaman.commands.lifecycle` -- ``init``, ``start``, ``stop``,
  ``rebuild`` and ``destroy``, each announced to plugins through
  ``before:``/``after:`` lifecycle events.
* :mod:`~seaman.commands.plugin` -- list, inspect and scaffold plugins.
* :mod:`~seaman.commands.service` -- list the services plugins provide.
* :mod:`~seaman.commands.db` -- dump, restore and open a shell on
  database services.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``plugin`` and ``db``) or plain callback
functions registered directly on the root app (for single commands like
``start``). Shared access to the invocation context lives in
:mod:`~seaman.commands.context`.
"""
