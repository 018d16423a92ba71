"""Core service abstraction and the service registry.

A :class:`Service` describes one kind of container (a cache, a database,
a mail catcher) independently of any particular project: its defaults,
ports, health check and environment. :class:`DatabaseService` adds the
commands used by ``seaman db``.

Services come from plugins: :meth:`ServiceRegistry.register_plugin_services`
wraps each plugin-declared
:class:`~seaman.plugins.services.ServiceDefinition` in an adapter and
registers it here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from seaman.exceptions import NotFoundError
from seaman.models import HealthCheck, ServiceCategory, ServiceConfig

if TYPE_CHECKING:
    from seaman.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)


class Service(ABC):
    """A kind of container service seaman can provision."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Service type name, also used as the compose service name."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    @abstractmethod
    def icon(self) -> str:
        ...

    @property
    @abstractmethod
    def category(self) -> ServiceCategory:
        ...

    @property
    @abstractmethod
    def dependencies(self) -> list[str]:
        """Names of services that must run alongside this one."""

    @abstractmethod
    def default_config(self) -> ServiceConfig:
        ...

    @abstractmethod
    def generate_compose_config(self, config: ServiceConfig) -> dict[str, Any]:
        """Return the compose fragment (or a template reference) for *config*."""

    @abstractmethod
    def required_ports(self) -> list[int]:
        """Host ports the service publishes by default."""

    @abstractmethod
    def internal_ports(self) -> list[int]:
        """Container-side ports the service listens on."""

    @abstractmethod
    def health_check(self) -> Optional[HealthCheck]:
        ...

    @abstractmethod
    def env_variables(self, config: ServiceConfig) -> dict[str, str]:
        """Environment exported to the application container."""

    @abstractmethod
    def inspect_info(self, config: ServiceConfig) -> str:
        """Short summary shown when inspecting a running service."""


class DatabaseService(Service):
    """A service that supports dump, restore and interactive shell commands.

    Each method returns the argv run inside the service container.
    """

    @abstractmethod
    def dump_command(self, config: ServiceConfig) -> list[str]:
        ...

    @abstractmethod
    def restore_command(self, config: ServiceConfig) -> list[str]:
        ...

    @abstractmethod
    def shell_command(self, config: ServiceConfig) -> list[str]:
        ...


class ServiceRegistry:
    """Name-keyed collection of available services."""

    def __init__(self) -> None:
        self._services: dict[str, Service] = {}

    def register(self, service: Service) -> None:
        """Register *service*, replacing any service with the same name."""
        self._services[service.name] = service

    def register_plugin_services(self, plugins: PluginRegistry) -> int:
        """Adapt and register every service declared by *plugins*.

        Returns:
            The number of services registered.
        """
        from seaman.plugins.capabilities import extract_services
        from seaman.plugins.services import adapt_service

        count = 0
        for loaded in plugins:
            for definition in extract_services(loaded.instance):
                self.register(adapt_service(definition))
                logger.debug("Registered service '%s' from plugin '%s'", definition.name, loaded.name)
                count += 1
        return count

    def get(self, name: str) -> Service:
        """Return the service called *name*.

        Raises:
            NotFoundError: If no such service is registered.
        """
        try:
            return self._services[name]
        except KeyError:
            raise NotFoundError(f"Service '{name}' not found") from None

    def has(self, name: str) -> bool:
        return name in self._services

    def all(self) -> dict[str, Service]:
        return dict(self._services)

    def database_services(self) -> dict[str, DatabaseService]:
        """Return only the services implementing :class:`DatabaseService`."""
        return {
            name: service
            for name, service in self._services.items()
            if isinstance(service, DatabaseService)
        }
