"""Example project-local plugin providing a ClickHouse analytics database.

Copy this directory to ``<project>/.seaman/plugins/`` to enable it. It
exercises every plugin capability:

* a configuration schema (``seaman.yaml`` -> ``plugins: {example/clickhouse: ...}``),
* an analytics database service (no dump or restore: seaman db reports it
  as not a database service),
* a ``seaman clickhouse query`` command,
* lifecycle handlers around ``start``,
* an override of the bundled Redis compose template.
"""

from __future__ import annotations

from pathlib import Path

import typer

from seaman.compose import ComposeRunner
from seaman.models import HealthCheck, ServiceCategory, ServiceConfig
from seaman.output import info
from seaman.plugins import (
    CommandProvider,
    ConfigSchema,
    Configurable,
    LifecycleEvent,
    LifecycleEventData,
    LifecycleHandler,
    LifecycleSubscriber,
    Plugin,
    PluginConfig,
    PluginDescriptor,
    ServiceDefinition,
    ServiceProvider,
    TemplateOverride,
    TemplateProvider,
)
from seaman.plugins.services import PluginServiceAdapter

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _client(config: ServiceConfig) -> list[str]:
    env = config.environment_variables
    return [
        "clickhouse-client",
        "--user",
        env.get("CLICKHOUSE_USER", "default"),
        "--password",
        env.get("CLICKHOUSE_PASSWORD", ""),
        "--database",
        env.get("CLICKHOUSE_DB", "default"),
    ]


class ClickHousePlugin(
    Plugin,
    Configurable,
    ServiceProvider,
    CommandProvider,
    LifecycleSubscriber,
    TemplateProvider,
):
    descriptor = PluginDescriptor(
        name="example/clickhouse",
        version="0.1.0",
        description="ClickHouse analytics database",
        requires=("seaman>=0.4",),
    )

    def __init__(self) -> None:
        self._schema = (
            ConfigSchema()
            .string("version", default="24.8", enum=["23.8", "24.3", "24.8", "latest"])
            .integer("http_port", default=8123, min=1, max=65535, label="HTTP port")
            .integer("native_port", default=9000, min=1, max=65535)
            .string("database", default="analytics")
            .string("user", default="seaman")
            .string("password", default="seaman", secret=True)
            .boolean("low_memory_redis", default=False,
                     description="Use the memory-capped Redis template")
        )
        self.config = PluginConfig(self._schema.validate({}))

    def config_schema(self) -> ConfigSchema:
        return self._schema

    def on_init(self, config: PluginConfig) -> None:
        self.config = config

    def services(self) -> list[ServiceDefinition]:
        return [
            ServiceDefinition(
                name="clickhouse",
                template=TEMPLATES_DIR / "clickhouse.yaml.j2",
                display_name="ClickHouse",
                description="Column-oriented analytics database",
                icon="📊",
                category=ServiceCategory.DATABASE,
                ports=[self.config["http_port"], self.config["native_port"]],
                internal_ports=[8123, 9000],
                default_config={
                    "version": self.config["version"],
                    "environment": {
                        "CLICKHOUSE_DB": self.config["database"],
                        "CLICKHOUSE_USER": self.config["user"],
                        "CLICKHOUSE_PASSWORD": self.config["password"],
                    },
                },
                health_check=HealthCheck(
                    test=["CMD", "wget", "--spider", "-q", "http://localhost:8123/ping"]
                ),
            )
        ]

    def commands(self) -> list[typer.Typer]:
        clickhouse_app = typer.Typer(name="clickhouse", help="ClickHouse utilities.")

        @clickhouse_app.command("query")
        def query(
            ctx: typer.Context,
            sql: str = typer.Argument(help="SQL statement to run."),
        ) -> None:
            """Run a SQL statement with clickhouse-client."""
            obj = ctx.obj or {}
            compose = ComposeRunner(obj.get("project_root", Path.cwd()), obj.get("dry_run", False))
            service = PluginServiceAdapter(self.services()[0])
            config = service.default_config()
            code = compose.exec(service.name, [*_client(config), "--query", sql])
            if code != 0:
                raise typer.Exit(code=code)

        return [clickhouse_app]

    def lifecycle_handlers(self) -> list[LifecycleHandler]:
        return [
            LifecycleHandler(LifecycleEvent.BEFORE_START, self.announce, priority=10),
            LifecycleHandler(LifecycleEvent.AFTER_START, self.print_endpoints),
        ]

    def announce(self, data: LifecycleEventData) -> None:
        if data.service in (None, "clickhouse"):
            info(f"Starting ClickHouse {self.config['version']}")

    def print_endpoints(self, data: LifecycleEventData) -> None:
        if data.service in (None, "clickhouse"):
            info(f"ClickHouse HTTP: http://localhost:{self.config['http_port']}")

    def template_overrides(self) -> list[TemplateOverride]:
        if not self.config.get("low_memory_redis"):
            return []
        return [TemplateOverride("redis.yaml.j2", TEMPLATES_DIR / "redis.yaml.j2")]
