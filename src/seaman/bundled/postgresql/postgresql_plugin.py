"""PostgreSQL database service with dump, restore and shell support."""

from __future__ import annotations

from pathlib import Path

from seaman.models import HealthCheck, ServiceCategory, ServiceConfig
from seaman.plugins import (
    ConfigSchema,
    Configurable,
    DatabaseOperations,
    Plugin,
    PluginConfig,
    PluginDescriptor,
    ServiceDefinition,
    ServiceProvider,
)

TEMPLATES_DIR = Path(__file__).parent / "templates"

SUPPORTED_VERSIONS = ["13", "14", "15", "16", "17", "latest"]


def _client_args(config: ServiceConfig) -> list[str]:
    env = config.environment_variables
    return ["-U", env.get("POSTGRES_USER", "postgres"), env.get("POSTGRES_DB", "postgres")]


def dump_command(config: ServiceConfig) -> list[str]:
    return ["pg_dump", *_client_args(config)]


def psql_command(config: ServiceConfig) -> list[str]:
    return ["psql", *_client_args(config)]


class PostgresqlPlugin(Plugin, Configurable, ServiceProvider):
    descriptor = PluginDescriptor(
        name="seaman/postgresql",
        version="1.0.0",
        description="PostgreSQL database service for Seaman",
    )

    def __init__(self) -> None:
        self._schema = (
            ConfigSchema()
            .string(
                "version",
                default="16",
                enum=SUPPORTED_VERSIONS,
                label="PostgreSQL version",
                description="PostgreSQL version to use",
            )
            .integer(
                "port",
                default=5432,
                min=1,
                max=65535,
                label="Port",
                description="Port number for PostgreSQL",
            )
            .string(
                "database",
                default="seaman",
                label="Database name",
                description="Name of the database to create",
            )
            .string(
                "user",
                default="seaman",
                label="Database user",
                description="Username for database access",
            )
            .string(
                "password",
                default="seaman",
                secret=True,
                label="Database password",
                description="Password for database user",
            )
        )
        self.config = PluginConfig(self._schema.validate({}))

    def config_schema(self) -> ConfigSchema:
        return self._schema

    def on_init(self, config: PluginConfig) -> None:
        self.config = config

    def services(self) -> list[ServiceDefinition]:
        return [
            ServiceDefinition(
                name="postgresql",
                template=TEMPLATES_DIR / "postgresql.yaml.j2",
                display_name="PostgreSQL",
                description="Advanced open-source relational database",
                icon="🐘",
                category=ServiceCategory.DATABASE,
                ports=[self.config["port"]],
                internal_ports=[5432],
                default_config={
                    "version": self.config["version"],
                    "port": self.config["port"],
                    "environment": {
                        "POSTGRES_DB": self.config["database"],
                        "POSTGRES_USER": self.config["user"],
                        "POSTGRES_PASSWORD": self.config["password"],
                    },
                },
                health_check=HealthCheck(test=["CMD-SHELL", "pg_isready -U $POSTGRES_USER"]),
                database_operations=DatabaseOperations(
                    dump=dump_command,
                    restore=psql_command,
                    shell=psql_command,
                ),
                config_schema=self._schema,
            )
        ]
