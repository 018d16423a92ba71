"""Redis cache service."""

from __future__ import annotations

from pathlib import Path

from seaman.models import HealthCheck, ServiceCategory
from seaman.plugins import (
    ConfigSchema,
    Configurable,
    Plugin,
    PluginConfig,
    PluginDescriptor,
    ServiceDefinition,
    ServiceProvider,
)

TEMPLATES_DIR = Path(__file__).parent / "templates"


class RedisPlugin(Plugin, Configurable, ServiceProvider):
    descriptor = PluginDescriptor(
        name="seaman/redis",
        version="1.0.0",
        description="Redis cache service for Seaman",
    )

    def __init__(self) -> None:
        self._schema = (
            ConfigSchema()
            .string("version", default="7-alpine")
            .integer("port", default=6379, min=1, max=65535)
        )
        self.config = PluginConfig(self._schema.validate({}))

    def config_schema(self) -> ConfigSchema:
        return self._schema

    def on_init(self, config: PluginConfig) -> None:
        self.config = config

    def services(self) -> list[ServiceDefinition]:
        return [
            ServiceDefinition(
                name="redis",
                template=TEMPLATES_DIR / "redis.yaml.j2",
                display_name="Redis",
                description="In-memory data store for caching and sessions",
                icon="🧵",
                category=ServiceCategory.CACHE,
                ports=[self.config["port"]],
                internal_ports=[6379],
                default_config={
                    "version": self.config["version"],
                    "port": self.config["port"],
                },
                health_check=HealthCheck(test=["CMD", "redis-cli", "ping"]),
            )
        ]
