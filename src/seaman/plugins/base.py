"""Abstract base class and descriptor for seaman plugins.

Every plugin subclasses :class:`Plugin` and declares a class-level
:class:`PluginDescriptor`. The descriptor is the marker the loaders look
for: a class without its own ``descriptor`` is never treated as a plugin,
even if it subclasses :class:`Plugin`.

Beyond the descriptor, a plugin advertises what it contributes by also
inheriting one or more capability base classes from
:mod:`seaman.plugins.capabilities` (configuration schema, services,
commands, lifecycle handlers, template overrides).

Example:
    Minimal plugin implementation::

        class HelloPlugin(Plugin):
            descriptor = PluginDescriptor(
                name="acme/hello",
                version="1.0.0",
                description="Says hello",
            )

            def on_init(self, config):
                self.greeting = config.get("greeting") or "hello"
"""

from __future__ import annotations

import enum
from abc import ABC
from dataclasses import dataclass
from typing import ClassVar

from seaman.plugins.schema import PluginConfig


class PluginSource(str, enum.Enum):
    """Where a plugin was discovered."""

    BUNDLED = "bundled"
    LOCAL = "local"
    PACKAGE = "package"


@dataclass(frozen=True)
class PluginDescriptor:
    """Identity and metadata of a plugin.

    Attributes:
        name: Unique plugin name, conventionally ``vendor/name``.
        version: Plugin version string.
        description: One-line description shown by ``seaman plugin list``.
        requires: Dependency constraints. Informational only; they are not
            resolved or enforced.
    """

    name: str
    version: str = "1.0.0"
    description: str = ""
    requires: tuple[str, ...] = ()


class Plugin(ABC):
    """Base class for all seaman plugins.

    The plugin lifecycle is:

    1. Instantiation -- a loader calls the no-argument constructor.
    2. :meth:`on_init` -- called once by the
       :class:`~seaman.plugins.registry.PluginRegistry` with the validated
       configuration.
    3. Capability methods -- queried by the registry's consumers
       (dispatcher, service registry, template resolver, CLI).
    """

    descriptor: ClassVar[PluginDescriptor]

    @property
    def name(self) -> str:
        """Return the unique plugin name from the descriptor."""
        return self.descriptor.name

    @property
    def version(self) -> str:
        return self.descriptor.version

    @property
    def description(self) -> str:
        return self.descriptor.description

    def on_init(self, config: PluginConfig) -> None:
        """Called once when the plugin is registered.

        Override this to keep settings needed later by services, commands
        or lifecycle handlers.

        Args:
            config: The validated plugin configuration. For plugins without
                a schema this holds the raw settings from ``seaman.yaml``.
        """


def is_plugin_class(obj: object) -> bool:
    """Return True if *obj* is a :class:`Plugin` subclass declaring its own descriptor."""
    return (
        isinstance(obj, type)
        and issubclass(obj, Plugin)
        and obj is not Plugin
        and isinstance(obj.__dict__.get("descriptor"), PluginDescriptor)
    )
