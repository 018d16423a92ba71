"""Plugin-declared services and the adapters that expose them to seaman.

A :class:`~seaman.plugins.capabilities.ServiceProvider` plugin returns
:class:`ServiceDefinition` values. :func:`adapt_service` wraps each one in
a :class:`PluginServiceAdapter`, or a :class:`PluginDatabaseServiceAdapter`
when it declares :class:`DatabaseOperations`, so that plugin services
satisfy the same :class:`~seaman.services.Service` contract as any other.

Database commands are :class:`CommandTemplate` values: pure functions of the
service configuration returning an argv list::

    DatabaseOperations(
        dump=lambda config: ["pg_dump", "-U", config.environment_variables["POSTGRES_USER"]],
        restore=lambda config: ["psql", "-U", "postgres"],
        shell=lambda config: ["psql", "-U", "postgres"],
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Union

from seaman.models import HealthCheck, ServiceCategory, ServiceConfig
from seaman.plugins.schema import ConfigSchema
from seaman.services import DatabaseService, Service


@dataclass(frozen=True)
class CommandTemplate:
    """Builds the argv of a command from a service configuration."""

    build: Callable[[ServiceConfig], list[str]]

    def __call__(self, config: ServiceConfig) -> list[str]:
        return list(self.build(config))


CommandLike = Union[CommandTemplate, Callable[[ServiceConfig], list[str]]]


def _as_template(command: CommandLike) -> CommandTemplate:
    if isinstance(command, CommandTemplate):
        return command
    return CommandTemplate(command)


@dataclass(frozen=True)
class DatabaseOperations:
    """Dump, restore and shell commands of a database service.

    Plain callables are wrapped in :class:`CommandTemplate`.
    """

    dump: CommandTemplate
    restore: CommandTemplate
    shell: CommandTemplate

    def __post_init__(self) -> None:
        for name in ("dump", "restore", "shell"):
            object.__setattr__(self, name, _as_template(getattr(self, name)))


@dataclass(frozen=True)
class ServiceDefinition:
    """A service contributed by a plugin.

    Attributes:
        name: Service type name; also the compose service name.
        template: Path of the compose template for this service.
        default_config: Defaults, notably ``version`` and ``environment``.
        display_name: Human-readable name; derived from *name* when empty.
        ports: Host ports; the first is the primary port.
        internal_ports: Container-side ports.
        dependencies: Names of services this one needs.
        database_operations: Present for database services only.
        config_schema: Optional per-service settings schema.
    """

    name: str
    template: Path
    default_config: dict[str, Any] = field(default_factory=dict)
    display_name: Optional[str] = None
    description: str = ""
    icon: str = "📦"
    category: ServiceCategory = ServiceCategory.MISC
    ports: list[int] = field(default_factory=list)
    internal_ports: list[int] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    health_check: Optional[HealthCheck] = None
    database_operations: Optional[DatabaseOperations] = None
    config_schema: Optional[ConfigSchema] = None


def titleize(name: str) -> str:
    """Turn ``"my-service"`` into ``"My Service"``."""
    return " ".join(word[:1].upper() + word[1:] for word in name.replace("-", " ").split(" "))


def _env_name(name: str) -> str:
    return name.upper().replace("-", "_")


def _env_value(value: Any) -> str:
    # Compose YAML spells booleans in lower case.
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


class PluginServiceAdapter(Service):
    """Exposes a :class:`ServiceDefinition` as a :class:`~seaman.services.Service`."""

    def __init__(self, definition: ServiceDefinition) -> None:
        self.definition = definition

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def display_name(self) -> str:
        return self.definition.display_name or titleize(self.definition.name)

    @property
    def description(self) -> str:
        return self.definition.description

    @property
    def icon(self) -> str:
        return self.definition.icon

    @property
    def category(self) -> ServiceCategory:
        return self.definition.category

    @property
    def dependencies(self) -> list[str]:
        return list(self.definition.dependencies)

    def default_config(self) -> ServiceConfig:
        defaults = self.definition.default_config
        ports = self.definition.ports
        return ServiceConfig(
            name=self.definition.name,
            enabled=True,
            type=self.definition.name,
            version=str(defaults.get("version", "latest")),
            port=ports[0] if ports else 0,
            additional_ports=list(ports[1:]),
            environment_variables={
                str(key): _env_value(value)
                for key, value in (defaults.get("environment") or {}).items()
            },
        )

    def generate_compose_config(self, config: ServiceConfig) -> dict[str, Any]:
        # Rendering is done by the compose builder from the template.
        return {"__template_path": str(self.definition.template)}

    def required_ports(self) -> list[int]:
        return list(self.definition.ports)

    def internal_ports(self) -> list[int]:
        return list(self.definition.internal_ports)

    def health_check(self) -> Optional[HealthCheck]:
        return self.definition.health_check

    def env_variables(self, config: ServiceConfig) -> dict[str, str]:
        env = dict(config.environment_variables)
        env[f"{_env_name(self.name)}_PORT"] = str(config.port)
        return env

    def inspect_info(self, config: ServiceConfig) -> str:
        return f"v{config.version}"


class PluginDatabaseServiceAdapter(PluginServiceAdapter, DatabaseService):
    """Adapter for definitions that declare :class:`DatabaseOperations`.

    Raises:
        ValueError: If the definition has no database operations.
    """

    def __init__(self, definition: ServiceDefinition) -> None:
        if definition.database_operations is None:
            raise ValueError(
                f"Service '{definition.name}' does not declare database operations"
            )
        super().__init__(definition)
        self.operations: DatabaseOperations = definition.database_operations

    def env_variables(self, config: ServiceConfig) -> dict[str, str]:
        env = super().env_variables(config)
        env["DB_PORT"] = str(config.port)
        return env

    def dump_command(self, config: ServiceConfig) -> list[str]:
        return self.operations.dump(config)

    def restore_command(self, config: ServiceConfig) -> list[str]:
        return self.operations.restore(config)

    def shell_command(self, config: ServiceConfig) -> list[str]:
        return self.operations.shell(config)


def adapt_service(definition: ServiceDefinition) -> PluginServiceAdapter:
    """Wrap *definition* in the adapter matching its capabilities."""
    if definition.database_operations is not None:
        return PluginDatabaseServiceAdapter(definition)
    return PluginServiceAdapter(definition)
