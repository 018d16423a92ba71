"""Plugin system for seaman.

Plugins are discovered from three sources (bundled with seaman,
project-local files under ``.seaman/plugins/``, and installed packages
registered in the ``seaman.plugins`` entry-point group), configured from
``seaman.yaml`` and held in a :class:`PluginRegistry`.
"""

from seaman.plugins.base import Plugin, PluginDescriptor, PluginSource
from seaman.plugins.capabilities import (
    CommandProvider,
    Configurable,
    LifecycleSubscriber,
    ServiceProvider,
    TemplateProvider,
)
from seaman.plugins.lifecycle import (
    LifecycleDispatcher,
    LifecycleEvent,
    LifecycleEventData,
    LifecycleHandler,
)
from seaman.plugins.registry import LoadedPlugin, PluginRegistry, load_registry
from seaman.plugins.schema import ConfigSchema, PluginConfig
from seaman.plugins.services import (
    CommandTemplate,
    DatabaseOperations,
    ServiceDefinition,
)
from seaman.plugins.templates import TemplateOverride, TemplateResolver

__all__ = [
    "CommandProvider",
    "CommandTemplate",
    "ConfigSchema",
    "Configurable",
    "DatabaseOperations",
    "LifecycleDispatcher",
    "LifecycleEvent",
    "LifecycleEventData",
    "LifecycleHandler",
    "LifecycleSubscriber",
    "LoadedPlugin",
    "Plugin",
    "PluginConfig",
    "PluginDescriptor",
    "PluginRegistry",
    "PluginSource",
    "ServiceDefinition",
    "ServiceProvider",
    "TemplateOverride",
    "TemplateProvider",
    "TemplateResolver",
    "load_registry",
]
