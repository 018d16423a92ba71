"""Shared test fixtures for seaman.

Provides reusable fixtures for isolated project directories, plugin
fixture files, output state management, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Callable

import pytest

from seaman.output import OutputFormat, OutputManager, reset_output, set_output
from seaman.plugins.registry import reset_registry


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_registry_between_tests() -> None:
    """Drop registries cached by ``load_registry`` so every test discovers afresh."""
    yield
    reset_registry()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Remove the handler installed by ``configure_logging`` during CLI tests."""
    yield
    logger = logging.getLogger("seaman")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Project fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty project directory isolated from the real user environment.

    Points XDG_DATA_HOME into tmp_path, clears SEAMAN_PROJECT_ROOT and
    changes the working directory to the project.

    Returns:
        The project root.
    """
    root = tmp_path / "project"
    root.mkdir()
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("SEAMAN_PROJECT_ROOT", raising=False)
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def write_plugin() -> Callable[[Path, str], Path]:
    """Return a helper writing dedented plugin source to a file.

    Usage::

        path = write_plugin(plugins_dir / "cache_plugin.py", '''
            class CachePlugin(Plugin): ...
        ''')
    """

    def _write(path: Path, source: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Set up a quiet output manager for tests that don't care about output.

    Installs a PLAIN-format, quiet OutputManager as the global output
    and resets it after the test completes.
    """
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Set up JSON output for tests that check JSON-formatted output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def seaman_app():
    """A fresh seaman application with the built-in commands registered.

    Built per test so that commands mounted by one test never leak into
    another through the module-level ``seaman.app.app``.
    """
    import typer

    from seaman.app import main_callback, register_builtin_commands

    cli = typer.Typer(no_args_is_help=True)
    cli.callback()(main_callback)
    register_builtin_commands(cli)
    return cli


@pytest.fixture
def compose_run():
    """Patch ``subprocess.run`` as used by the compose runner.

    Returns the mock; every call succeeds with exit status 0 unless the
    test changes ``compose_run.return_value.returncode``.
    """
    from unittest.mock import MagicMock, patch

    with patch("seaman.compose.subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0)
        yield mock_run
