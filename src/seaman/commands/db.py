"""Database commands -- dump, restore and shell.

Provides the ``seaman db`` sub-command group. Each command builds the
database service's command from its
:class:`~seaman.plugins.services.DatabaseOperations` and runs it inside the
service container with ``docker compose exec``.

Usage::

    seaman db dump postgresql > backup.sql
    seaman db restore postgresql backup.sql
    seaman db shell postgresql
"""

from __future__ import annotations

from pathlib import Path

import typer

from seaman.commands.context import get_project_root, get_service_registry, is_dry_run
from seaman.compose import ComposeRunner
from seaman.exceptions import InvalidUsageError, NotFoundError
from seaman.services import DatabaseService

db_app = typer.Typer(no_args_is_help=True)


def _database_service(ctx: typer.Context, name: str) -> DatabaseService:
    """Return the database service *name*.

    Raises:
        NotFoundError: If no service with that name exists.
        InvalidUsageError: If the service does not support database commands.
    """
    service = get_service_registry(ctx).get(name)
    if not isinstance(service, DatabaseService):
        raise InvalidUsageError(f"Service '{name}' is not a database service")
    return service


def _exit_on_failure(code: int) -> None:
    if code != 0:
        raise typer.Exit(code=code)


@db_app.command("dump")
def db_dump(
    ctx: typer.Context,
    service: str = typer.Argument(help="Database service name."),
) -> None:
    """Write a dump of the database to stdout."""
    db = _database_service(ctx, service)
    compose = ComposeRunner(get_project_root(ctx), dry_run=is_dry_run(ctx))
    _exit_on_failure(compose.exec(service, db.dump_command(db.default_config())))


@db_app.command("restore")
def db_restore(
    ctx: typer.Context,
    service: str = typer.Argument(help="Database service name."),
    file: Path = typer.Argument(help="Dump file to restore."),
) -> None:
    """Restore the database from a dump file."""
    db = _database_service(ctx, service)
    if not file.is_file():
        raise NotFoundError(f"Dump file not found: {file}")

    compose = ComposeRunner(get_project_root(ctx), dry_run=is_dry_run(ctx))
    with file.open("rb") as dump:
        _exit_on_failure(
            compose.exec(service, db.restore_command(db.default_config()), stdin=dump)
        )


@db_app.command("shell")
def db_shell(
    ctx: typer.Context,
    service: str = typer.Argument(help="Database service name."),
) -> None:
    """Open an interactive database shell."""
    db = _database_service(ctx, service)
    compose = ComposeRunner(get_project_root(ctx), dry_run=is_dry_run(ctx))
    _exit_on_failure(
        compose.exec(service, db.shell_command(db.default_config()), interactive=True)
    )
