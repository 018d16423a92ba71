"""Plugin source loaders.

Three loaders each turn one source of plugins into a list of plugin
instances:

* :class:`BundledPluginLoader` -- plugins shipped inside seaman under
  ``seaman/bundled/<dir>/*_plugin.py``.
* :class:`LocalPluginLoader` -- any ``*.py`` file below
  ``<project>/.seaman/plugins/``.
* :class:`PackagePluginLoader` -- installed distributions declaring an
  entry point in the ``seaman.plugins`` group::

      [project.entry-points."seaman.plugins"]
      acme-cache = "acme_cache.plugin:CachePlugin"

Loading a candidate is best effort. A file that fails to import, a class
without a descriptor, an abstract class, or code that raises or calls
``sys.exit()`` while importing or constructing is skipped and logged at
debug level. One broken candidate never prevents the others from loading.
"""

from __future__ import annotations

import hashlib
import importlib.metadata
import importlib.util
import inspect
import logging
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable, Optional

from seaman.plugins.base import Plugin, PluginSource, is_plugin_class

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "seaman.plugins"
"""The entry-point group name used for package plugin discovery."""

BUNDLED_FILE_PATTERN = "*_plugin.py"
"""Filename pattern of bundled plugin implementation files."""

BUNDLED_PLUGINS_DIR = Path(__file__).resolve().parent.parent / "bundled"
"""Directory holding the plugins shipped with seaman."""


# ------------------------------------------------------------------
# Shared extraction
# ------------------------------------------------------------------


def module_name_for(path: Path, source: PluginSource) -> str:
    """Synthesize a unique, importable module name for a plugin file."""
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:10]
    stem = re.sub(r"\W", "_", path.stem)
    return f"seaman_{source.value}_plugins.{stem}_{digest}"


def load_module_from_file(path: Path, module_name: str) -> ModuleType:
    """Import the Python file at *path* as module *module_name*.

    The module is registered in :data:`sys.modules` before execution so
    that dataclasses and pickling inside the plugin work; it is removed
    again if execution raises.

    Raises:
        ImportError: If no import spec can be built for *path*.
        Exception: Whatever the module raises while executing.
    """
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load module from {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def plugins_in_module(module: ModuleType) -> list[type[Plugin]]:
    """Return the plugin classes defined (not merely imported) in *module*."""
    return [
        obj
        for obj in vars(module).values()
        if is_plugin_class(obj) and obj.__module__ == module.__name__
    ]


def instantiate_plugin(candidate: Any, origin: str) -> Optional[Plugin]:
    """Instantiate *candidate* if it is a concrete, declared plugin class.

    Args:
        candidate: The object to check, normally a class.
        origin: Identifier used in log messages (file path or entry point).

    Returns:
        The plugin instance, or ``None`` if *candidate* is not a usable
        plugin.
    """
    if not is_plugin_class(candidate):
        logger.debug("Skipping %s: not a plugin class with a descriptor", origin)
        return None
    if inspect.isabstract(candidate):
        logger.debug("Skipping %s: %s is abstract", origin, candidate.__name__)
        return None
    try:
        return candidate()
    except (Exception, SystemExit) as exc:
        logger.debug("Skipping %s: constructor raised %s", origin, exc)
        return None


def _load_files(paths: Iterable[Path], source: PluginSource) -> list[Plugin]:
    plugins: list[Plugin] = []
    for path in paths:
        try:
            module = load_module_from_file(path, module_name_for(path, source))
        except (Exception, SystemExit) as exc:
            logger.debug("Skipping %s: failed to import: %s", path, exc)
            continue
        for cls in plugins_in_module(module):
            plugin = instantiate_plugin(cls, f"{path}:{cls.__name__}")
            if plugin is not None:
                logger.debug("Found %s plugin '%s' in %s", source.value, plugin.name, path)
                plugins.append(plugin)
    return plugins


# ------------------------------------------------------------------
# Loaders
# ------------------------------------------------------------------


class BundledPluginLoader:
    """Loads the plugins shipped with seaman.

    Each subdirectory of *plugins_dir* holds one plugin; only files
    matching :data:`BUNDLED_FILE_PATTERN` are imported.
    """

    source = PluginSource.BUNDLED

    def __init__(self, plugins_dir: Path = BUNDLED_PLUGINS_DIR) -> None:
        self.plugins_dir = plugins_dir

    def load(self) -> list[Plugin]:
        if not self.plugins_dir.is_dir():
            return []
        paths: list[Path] = []
        for subdir in sorted(p for p in self.plugins_dir.iterdir() if p.is_dir()):
            paths.extend(sorted(subdir.glob(BUNDLED_FILE_PATTERN)))
        return _load_files(paths, self.source)


class LocalPluginLoader:
    """Loads project-local plugins from every ``*.py`` file below *plugins_dir*."""

    source = PluginSource.LOCAL

    def __init__(self, plugins_dir: Path) -> None:
        self.plugins_dir = plugins_dir

    def load(self) -> list[Plugin]:
        if not self.plugins_dir.is_dir():
            return []
        paths = sorted(p for p in self.plugins_dir.rglob("*.py") if p.is_file())
        return _load_files(paths, self.source)


class PackagePluginLoader:
    """Loads plugins registered by installed distributions as entry points.

    The entry point's value names the plugin class (``module:Class``); no
    filesystem scanning is involved.
    """

    source = PluginSource.PACKAGE

    def __init__(self, group: str = ENTRY_POINT_GROUP) -> None:
        self.group = group

    def _entry_points(self) -> Iterable[Any]:
        return importlib.metadata.entry_points(group=self.group)

    def load(self) -> list[Plugin]:
        plugins: list[Plugin] = []
        for ep in self._entry_points():
            origin = f"entry point '{ep.name}'"
            try:
                candidate = ep.load()
            except (Exception, SystemExit) as exc:
                logger.debug("Skipping %s: failed to load: %s", origin, exc)
                continue
            plugin = instantiate_plugin(candidate, origin)
            if plugin is not None:
                logger.debug("Found package plugin '%s' via %s", plugin.name, origin)
                plugins.append(plugin)
        return plugins
