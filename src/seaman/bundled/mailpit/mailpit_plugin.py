"""Mailpit mail catcher.

The SMTP port is the service's primary port; the web UI port is published
as an additional port.
"""

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


class MailpitPlugin(Plugin, Configurable, ServiceProvider):
    descriptor = PluginDescriptor(
        name="seaman/mailpit",
        version="1.0.0",
        description="Mailpit email testing service for Seaman",
    )

    def __init__(self) -> None:
        self._schema = (
            ConfigSchema()
            .string("version", default="latest")
            .integer("smtp_port", default=1025, min=1, max=65535, label="SMTP port")
            .integer("ui_port", default=8025, min=1, max=65535, label="Web UI port")
        )
        self.config = PluginConfig(self._schema.validate({}))

    def config_schema(self) -> ConfigSchema:
        return self._schema

    def on_init(self, config: PluginConfig) -> None:
        self.config = config

    def services(self) -> list[ServiceDefinition]:
        return [
            ServiceDefinition(
                name="mailpit",
                template=TEMPLATES_DIR / "mailpit.yaml.j2",
                display_name="Mailpit",
                description="Email testing tool with web UI",
                icon="📧",
                category=ServiceCategory.EMAIL,
                ports=[self.config["smtp_port"], self.config["ui_port"]],
                internal_ports=[1025, 8025],
                default_config={
                    "version": self.config["version"],
                    "smtp_port": self.config["smtp_port"],
                    "ui_port": self.config["ui_port"],
                },
                health_check=HealthCheck(
                    test=["CMD", "wget", "--spider", "-q", "http://localhost:8025/livez"]
                ),
            )
        ]
