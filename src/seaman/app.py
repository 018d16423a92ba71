"""Typer application factory and CLI entry point for seaman.

This module wires together the top-level Typer application, registers built-in
sub-commands (``init``, ``start``, ``stop``, ``rebuild``, ``destroy``,
``plugin``, ``service``, ``db``), and mounts the commands contributed by
plugins at startup.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, registers commands, loads
plugin commands, and finally invokes the Typer app. Unhandled exceptions are
written to a crash log under the data directory.

See Also:
    :mod:`seaman.config`: Project root resolution and ``seaman.yaml``.
    :mod:`seaman.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional, Sequence

import typer

from seaman import __version__
from seaman.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="seaman",
    help="Manage a container-based local development environment.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"seaman {__version__}")
        raise typer.Exit()


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
    project_root: Optional[str] = typer.Option(
        None,
        "--project-root",
        "-C",
        help="Project directory (default: $SEAMAN_PROJECT_ROOT or cwd).",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Preview without executing."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations and overwrite files."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~seaman.output.OutputManager` and the
    ``seaman`` logger from CLI flags, and stores shared options
    (``project_root``, ``dry_run``, ``force``) in the Typer context so that
    sub-commands can read them via ``ctx.obj``.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        project_root: Project directory override (highest precedence).
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output and logging.
        dry_run: Print ``docker compose`` commands instead of running them.
        force: Skip interactive confirmations.
    """
    from seaman.config import resolve_project_root
    from seaman.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet)
    set_output(output)
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["project_root"] = resolve_project_root(project_root)
    ctx.obj["dry_run"] = dry_run
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from seaman.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def _project_root_from_argv(argv: Sequence[str]) -> Optional[str]:
    """Find the ``--project-root``/``-C`` value before Typer parses arguments.

    Plugin commands must be mounted before the app runs, which is before
    :func:`main_callback` has seen the options.
    """
    for index, arg in enumerate(argv):
        if arg in ("--project-root", "-C") and index + 1 < len(argv):
            return argv[index + 1]
        if arg.startswith("--project-root="):
            return arg.split("=", 1)[1]
    return None


def register_plugin_commands(target: typer.Typer, argv: Sequence[str]) -> list[str]:
    """Mount the Typer sub-applications contributed by plugins on *target*.

    Failures are logged and ignored so that built-in commands always remain
    available; the same failure resurfaces with a proper error message
    when a built-in command loads the registry.

    Returns:
        The names of the mounted command groups.
    """
    from seaman.config import resolve_project_root
    from seaman.plugins.capabilities import extract_commands
    from seaman.plugins.registry import load_registry

    mounted: list[str] = []
    try:
        registry = load_registry(resolve_project_root(_project_root_from_argv(argv)))
    except Exception as exc:
        logger.debug("Plugin commands unavailable: %s", exc)
        return mounted

    for loaded in registry:
        for command_app in extract_commands(loaded.instance):
            name = command_app.info.name
            if not isinstance(name, str) or not name:
                logger.warning("Plugin '%s' contributed a command without a name", loaded.name)
                continue
            target.add_typer(command_app, name=name)
            mounted.append(name)
    return mounted


def register_builtin_commands(target: typer.Typer) -> None:
    """Register seaman's own commands on *target*."""
    from seaman.commands.db import db_app
    from seaman.commands.lifecycle import (
        destroy_command,
        init_command,
        rebuild_command,
        start_command,
        stop_command,
    )
    from seaman.commands.plugin import plugin_app
    from seaman.commands.service import service_app

    target.command("init")(init_command)
    target.command("start")(start_command)
    target.command("stop")(stop_command)
    target.command("rebuild")(rebuild_command)
    target.command("destroy")(destroy_command)
    target.add_typer(plugin_app, name="plugin", help="Inspect and scaffold plugins.")
    target.add_typer(service_app, name="service", help="Available services.")
    target.add_typer(db_app, name="db", help="Database dump, restore and shell.")


def main() -> None:
    """CLI entry point invoked by the ``seaman`` console script.

    Performs the following sequence:

    1. Install signal handlers for clean Ctrl-C behaviour.
    2. Register built-in sub-commands.
    3. Mount commands contributed by plugins.
    4. Invoke the Typer application.

    Unhandled :class:`~seaman.exceptions.SeamanError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        register_builtin_commands(app)
        register_plugin_commands(app, sys.argv[1:])

        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from seaman.exceptions import SeamanError
        from seaman.output import error

        if isinstance(exc, SeamanError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
