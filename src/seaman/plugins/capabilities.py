"""Optional plugin capabilities.

Each capability is an independent abstract base class with a single
method. A plugin opts in by inheriting the capability alongside
:class:`~seaman.plugins.base.Plugin`::

    class CachePlugin(Plugin, Configurable, ServiceProvider):
        descriptor = PluginDescriptor(name="acme/cache")

        def config_schema(self):
            return ConfigSchema().integer("port", default=6379)

        def services(self):
            return [ServiceDefinition(name="cache", template=...)]

The ``extract_*`` helpers return a plugin's contributions, or an empty
result when the plugin lacks the capability, so callers never need to
type-check plugins themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

import typer

from seaman.plugins.schema import ConfigSchema

if TYPE_CHECKING:
    from seaman.plugins.base import Plugin
    from seaman.plugins.lifecycle import LifecycleHandler
    from seaman.plugins.services import ServiceDefinition
    from seaman.plugins.templates import TemplateOverride


class Configurable(ABC):
    """Plugin whose settings are validated against a schema."""

    @abstractmethod
    def config_schema(self) -> ConfigSchema:
        """Return the schema for this plugin's ``seaman.yaml`` settings."""


class ServiceProvider(ABC):
    """Plugin that contributes container services."""

    @abstractmethod
    def services(self) -> list[ServiceDefinition]:
        ...


class CommandProvider(ABC):
    """Plugin that contributes CLI commands.

    Each returned :class:`typer.Typer` must have its ``name`` set; it is
    mounted on the root application under that name.
    """

    @abstractmethod
    def commands(self) -> list[typer.Typer]:
        ...


class LifecycleSubscriber(ABC):
    """Plugin that reacts to lifecycle events (``before:start`` etc.)."""

    @abstractmethod
    def lifecycle_handlers(self) -> list[LifecycleHandler]:
        ...


class TemplateProvider(ABC):
    """Plugin that overrides templates of other services."""

    @abstractmethod
    def template_overrides(self) -> list[TemplateOverride]:
        ...


# ------------------------------------------------------------------
# Extraction helpers
# ------------------------------------------------------------------


def extract_schema(plugin: Plugin) -> Optional[ConfigSchema]:
    if isinstance(plugin, Configurable):
        return plugin.config_schema()
    return None


def extract_services(plugin: Plugin) -> list[ServiceDefinition]:
    if isinstance(plugin, ServiceProvider):
        return list(plugin.services())
    return []


def extract_commands(plugin: Plugin) -> list[typer.Typer]:
    if isinstance(plugin, CommandProvider):
        return list(plugin.commands())
    return []


def extract_lifecycle_handlers(plugin: Plugin) -> list[LifecycleHandler]:
    if isinstance(plugin, LifecycleSubscriber):
        return list(plugin.lifecycle_handlers())
    return []


def extract_template_overrides(plugin: Plugin) -> list[TemplateOverride]:
    if isinstance(plugin, TemplateProvider):
        return list(plugin.template_overrides())
    return []
