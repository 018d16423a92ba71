"""Plugin registry -- configuration, registration and lookup.

:class:`PluginRegistry` is the single place downstream consumers (CLI
command registration, the lifecycle dispatcher, the service registry and
the template resolver) obtain plugins from. Registration validates each
plugin's settings against its schema, calls
:meth:`~seaman.plugins.base.Plugin.on_init`, and stores the result as a
:class:`LoadedPlugin` keyed by plugin name.

Names are unique: registering a second plugin under an existing name
replaces the earlier entry. :meth:`PluginRegistry.discover` relies on this
so that package plugins override bundled ones and project-local plugins
override both.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

from seaman.config import get_local_plugins_dir, load_project_config
from seaman.exceptions import ConfigValidationError, PluginNotFoundError
from seaman.plugins.base import Plugin, PluginSource
from seaman.plugins.capabilities import extract_schema
from seaman.plugins.loaders import (
    BUNDLED_PLUGINS_DIR,
    ENTRY_POINT_GROUP,
    BundledPluginLoader,
    LocalPluginLoader,
    PackagePluginLoader,
)
from seaman.plugins.schema import PluginConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedPlugin:
    """A registered plugin together with its validated configuration."""

    instance: Plugin
    config: PluginConfig
    source: PluginSource

    @property
    def name(self) -> str:
        return self.instance.name


class PluginRegistry:
    """Holds every plugin known to the current process.

    Example:
        Typical usage::

            registry = PluginRegistry.discover(project_root, {"seaman/redis": {"port": 6380}})
            redis = registry.get("seaman/redis")
            print(redis.config.get("port"))
    """

    def __init__(self) -> None:
        self._plugins: dict[str, LoadedPlugin] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        plugin: Plugin,
        raw_config: Optional[Mapping[str, Any]] = None,
        source: PluginSource = PluginSource.LOCAL,
    ) -> LoadedPlugin:
        """Validate *raw_config*, initialise *plugin* and store it.

        Plugins without a configuration schema receive *raw_config*
        unchanged.

        Args:
            plugin: The plugin instance.
            raw_config: The plugin's settings from ``seaman.yaml``.
            source: Where the plugin was discovered.

        Returns:
            The stored :class:`LoadedPlugin`.

        Raises:
            ConfigValidationError: If the settings violate the plugin's
                schema. The message names the plugin.
        """
        raw = dict(raw_config or {})
        schema = extract_schema(plugin)
        if schema is not None:
            try:
                values = schema.validate(raw)
            except ConfigValidationError as exc:
                raise exc.for_plugin(plugin.name) from exc
        else:
            values = raw

        loaded = LoadedPlugin(instance=plugin, config=PluginConfig(values), source=source)
        plugin.on_init(loaded.config)
        if plugin.name in self._plugins:
            logger.debug("Replacing plugin '%s' with %s plugin", plugin.name, source.value)
        self._plugins[plugin.name] = loaded
        logger.info("Registered %s plugin '%s' v%s", source.value, plugin.name, plugin.version)
        return loaded

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def get(self, name: str) -> LoadedPlugin:
        """Return the plugin registered as *name*.

        Raises:
            PluginNotFoundError: If no such plugin is registered.
        """
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginNotFoundError(name) from None

    def has(self, name: str) -> bool:
        return name in self._plugins

    def all(self) -> dict[str, LoadedPlugin]:
        """Return all plugins keyed by name, in registration order."""
        return dict(self._plugins)

    def list_plugins(self) -> list[dict[str, str]]:
        """List registered plugins with their metadata.

        Returns:
            A list of dicts with ``"name"``, ``"version"``, ``"source"`` and
            ``"description"`` keys.
        """
        return [
            {
                "name": loaded.name,
                "version": loaded.instance.version,
                "source": loaded.source.value,
                "description": loaded.instance.description,
            }
            for loaded in self._plugins.values()
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[LoadedPlugin]:
        return iter(list(self._plugins.values()))

    def __len__(self) -> int:
        return len(self._plugins)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    @classmethod
    def discover(
        cls,
        project_root: Path,
        plugin_config: Optional[Mapping[str, Mapping[str, Any]]] = None,
        bundled_dir: Path = BUNDLED_PLUGINS_DIR,
        local_dir: Optional[Path] = None,
        entry_point_group: str = ENTRY_POINT_GROUP,
    ) -> PluginRegistry:
        """Build a registry from every plugin source.

        Sources are registered bundled first, then package, then
        project-local, so that a later source replaces a same-named plugin
        from an earlier one.

        Args:
            project_root: The project whose local plugins are loaded.
            plugin_config: Plugin name to raw settings mapping.
            bundled_dir: Root of the bundled plugins.
            local_dir: Project-local plugins directory. Defaults to
                ``<project_root>/.seaman/plugins``.
            entry_point_group: Entry-point group for package plugins.

        Raises:
            ConfigValidationError: If any plugin's settings are invalid.
        """
        settings = plugin_config or {}
        if local_dir is None:
            local_dir = get_local_plugins_dir(project_root)

        registry = cls()
        loaders = (
            BundledPluginLoader(bundled_dir),
            PackagePluginLoader(entry_point_group),
            LocalPluginLoader(local_dir),
        )
        for loader in loaders:
            for plugin in loader.load():
                registry.register(plugin, settings.get(plugin.name), loader.source)
        return registry


# ------------------------------------------------------------------
# Per-process registry
# ------------------------------------------------------------------

_registries: dict[Path, PluginRegistry] = {}


def load_registry(project_root: Path) -> PluginRegistry:
    """Return the registry for *project_root*, discovering it on first use.

    Plugin settings are read from the project's ``seaman.yaml``.

    Raises:
        ConfigError: If ``seaman.yaml`` cannot be parsed.
        ConfigValidationError: If a plugin's settings are invalid.
    """
    key = project_root.resolve()
    if key not in _registries:
        config = load_project_config(key)
        _registries[key] = PluginRegistry.discover(key, config.plugins)
    return _registries[key]


def reset_registry() -> None:
    """Forget every cached registry.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    _registries.clear()
