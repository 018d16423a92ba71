"""Project configuration, directory layout, and atomic writes.

This module handles all persistent state seaman reads or writes:

* **Project root** -- :func:`resolve_project_root` applies the precedence
  chain ``--project-root`` flag > ``SEAMAN_PROJECT_ROOT`` > current directory.
* **Project layout** -- every project keeps its seaman files under
  ``<project>/.seaman/``: the configuration file ``seaman.yaml`` and the
  project-local plugins directory ``plugins/``.
* **Project config** -- :func:`load_project_config` and
  :func:`save_project_config` convert between ``seaman.yaml`` and
  :class:`~seaman.models.ProjectConfig`.
* **Data directory** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.seaman/`` elsewhere; used for crash logs.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from seaman.exceptions import ConfigError
from seaman.models import ProjectConfig

_APP_NAME = "seaman"
_PROJECT_DIRNAME = ".seaman"
_PROJECT_CONFIG_FILENAME = "seaman.yaml"
_LOCAL_PLUGINS_DIRNAME = "plugins"

PROJECT_ROOT_ENV = "SEAMAN_PROJECT_ROOT"
"""Environment variable overriding the current directory as project root."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/seaman/`` (default ``~/.local/share/seaman/``).
    On macOS/Windows: ``~/.seaman/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project layout ---


def resolve_project_root(cli_root: Optional[str] = None) -> Path:
    """Resolve the project root directory.

    Precedence (high to low):
        1. ``cli_root`` (the ``--project-root`` flag)
        2. ``SEAMAN_PROJECT_ROOT`` environment variable
        3. The current working directory

    Returns:
        The absolute project root. The directory is not required to exist.
    """
    if cli_root:
        return Path(cli_root).expanduser().resolve()
    env_root = os.environ.get(PROJECT_ROOT_ENV)
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path.cwd().resolve()


def get_project_dir(project_root: Path) -> Path:
    """Return ``<project>/.seaman`` (not created)."""
    return project_root / _PROJECT_DIRNAME


def get_local_plugins_dir(project_root: Path) -> Path:
    """Return the project-local plugins directory ``<project>/.seaman/plugins``."""
    return get_project_dir(project_root) / _LOCAL_PLUGINS_DIRNAME


def project_config_path(project_root: Path) -> Path:
    """Return the path of the project configuration file."""
    return get_project_dir(project_root) / _PROJECT_CONFIG_FILENAME


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Project config ---


def parse_plugin_config(data: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Extract the per-plugin settings from raw project configuration data.

    Entries whose key is not a string or whose value is not a mapping are
    silently dropped; a ``plugins`` value that is not a mapping yields an
    empty result.

    Args:
        data: The parsed top-level YAML document.

    Returns:
        A dict mapping plugin name to its raw settings.
    """
    return ProjectConfig.model_validate({"plugins": data.get("plugins")}).plugins


def load_project_config(project_root: Path) -> ProjectConfig:
    """Load ``<project>/.seaman/seaman.yaml``.

    Returns:
        The deserialised :class:`~seaman.models.ProjectConfig`. If the file
        does not exist, or is empty, a default instance is returned.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or its
            top level is not a mapping.
    """
    path = project_config_path(project_root)
    if not path.is_file():
        return ProjectConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc

    if data is None:
        return ProjectConfig()
    if not isinstance(data, dict):
        raise ConfigError(
            f"Invalid project config at {path}: top level must be a mapping"
        )
    try:
        return ProjectConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc


def save_project_config(project_root: Path, config: ProjectConfig) -> Path:
    """Persist the project configuration atomically as YAML.

    Args:
        project_root: The project whose ``.seaman/seaman.yaml`` is written.
        config: The configuration to save.

    Returns:
        The path of the written file.
    """
    path = project_config_path(project_root)
    data = config.model_dump(mode="json")
    atomic_write(path, yaml.safe_dump(data, sort_keys=False, default_flow_style=False))
    return path
