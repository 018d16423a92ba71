"""Environment commands -- init, start, stop, rebuild and destroy.

Every command is bracketed by a pair of lifecycle events. ``before:<x>``
is dispatched first; the ``after:<x>`` event is dispatched only when the
underlying operation succeeded. A failing ``docker compose`` run ends the
command with compose's own exit status, and a failing plugin handler ends
it with a :class:`~seaman.exceptions.LifecycleError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import typer

from seaman.commands.context import get_project_root, get_registry, is_dry_run, is_forced
from seaman.compose import ComposeRunner
from seaman.exceptions import LifecycleError
from seaman.exit_codes import EXIT_INVALID_USAGE
from seaman.output import error, info, success, suggest
from seaman.plugins.capabilities import extract_schema
from seaman.plugins.lifecycle import LifecycleDispatcher, LifecycleEvent, LifecycleEventData


def _dispatch(
    dispatcher: LifecycleDispatcher,
    event: LifecycleEvent,
    project_root: Path,
    service: Optional[str] = None,
) -> None:
    data = LifecycleEventData(event=event.value, project_root=project_root, service=service)
    try:
        dispatcher.dispatch(event, data)
    except Exception as exc:
        raise LifecycleError(event.value, exc) from exc


def _run_with_events(
    ctx: typer.Context,
    action: str,
    operation: Callable[[ComposeRunner], int],
    service: Optional[str] = None,
) -> None:
    project_root = get_project_root(ctx)
    dispatcher = LifecycleDispatcher(get_registry(ctx))

    _dispatch(dispatcher, LifecycleEvent(f"before:{action}"), project_root, service)

    code = operation(ComposeRunner(project_root, dry_run=is_dry_run(ctx)))
    if code != 0:
        error(f"docker compose exited with status {code}")
        raise typer.Exit(code=code)

    _dispatch(dispatcher, LifecycleEvent(f"after:{action}"), project_root, service)


def init_command(ctx: typer.Context) -> None:
    """Initialise seaman in the project.

    Writes ``.seaman/seaman.yaml`` seeded with the validated configuration
    of every configurable plugin. Refuses to overwrite an existing file
    unless ``--force`` is active.

    Example::

        seaman init
        seaman --project-root ~/src/shop init
    """
    from seaman.config import load_project_config, project_config_path, save_project_config

    project_root = get_project_root(ctx)
    config_path = project_config_path(project_root)
    if config_path.exists() and not is_forced(ctx):
        error(f"Project already initialised: {config_path}")
        suggest("Re-initialise: seaman --force init")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    registry = get_registry(ctx)
    dispatcher = LifecycleDispatcher(registry)
    _dispatch(dispatcher, LifecycleEvent.BEFORE_INIT, project_root)

    config = load_project_config(project_root)
    for loaded in registry:
        if extract_schema(loaded.instance) is not None:
            config.plugins[loaded.name] = loaded.config.all()

    if is_dry_run(ctx):
        info(f"[dry-run] Would write {config_path}")
        return

    save_project_config(project_root, config)
    success(f"Initialised seaman in {project_root}")

    _dispatch(dispatcher, LifecycleEvent.AFTER_INIT, project_root)
    suggest("Start the environment: seaman start")


def start_command(
    ctx: typer.Context,
    service: Optional[str] = typer.Argument(None, help="Start only this service."),
) -> None:
    """Start the environment, or a single service.

    Example::

        seaman start
        seaman start postgresql
    """
    _run_with_events(ctx, "start", lambda compose: compose.up(service), service)
    success(f"Started {service or 'environment'}.")


def stop_command(
    ctx: typer.Context,
    service: Optional[str] = typer.Argument(None, help="Stop only this service."),
) -> None:
    """Stop the environment, or a single service."""
    _run_with_events(ctx, "stop", lambda compose: compose.stop(service), service)
    success(f"Stopped {service or 'environment'}.")


def rebuild_command(ctx: typer.Context) -> None:
    """Rebuild images and recreate every container."""
    _run_with_events(ctx, "rebuild", lambda compose: compose.rebuild())
    success("Environment rebuilt.")


def destroy_command(ctx: typer.Context) -> None:
    """Remove containers, networks and volumes.

    Asks for confirmation unless ``--force`` is active.

    Raises:
        typer.Exit: If the user declines confirmation.
    """
    if not is_forced(ctx):
        confirmed = typer.confirm("Destroy all containers and volumes?")
        if not confirmed:
            info("Aborted.")
            raise typer.Exit()

    _run_with_events(ctx, "destroy", lambda compose: compose.down())
    success("Environment destroyed.")
