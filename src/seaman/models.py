"""Canonical Pydantic models shared across seaman modules.

The models fall into two groups:

**Service models** -- value objects describing a running container service:
    :class:`ServiceCategory`, :class:`HealthCheck`, and :class:`ServiceConfig`.
    They are frozen so that plugin-supplied command templates can treat them
    as plain inputs.

**Configuration models** -- deserialised from ``.seaman/seaman.yaml``:
    :class:`ProjectConfig`. Only the ``plugins`` section is interpreted here;
    every other top-level key is preserved in ``model_extra`` for the
    subsystems that own it.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Service models ---


class ServiceCategory(str, enum.Enum):
    """Coarse grouping used when listing services."""

    DATABASE = "database"
    CACHE = "cache"
    QUEUE = "queue"
    SEARCH = "search"
    STORAGE = "storage"
    EMAIL = "email"
    UTILITY = "utility"
    MISC = "misc"


class HealthCheck(BaseModel):
    """Container health check, rendered into the compose ``healthcheck`` key.

    Example::

        HealthCheck(test=["CMD", "redis-cli", "ping"], interval="10s",
                    timeout="5s", retries=5)
    """

    model_config = ConfigDict(frozen=True)

    test: list[str]
    interval: str = "10s"
    timeout: str = "5s"
    retries: int = 5


class ServiceConfig(BaseModel):
    """Effective configuration of a single service in a project.

    ``port`` is the primary host port; ``additional_ports`` holds every
    other host port the service publishes.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    enabled: bool = True
    type: str
    version: str = "latest"
    port: int = 0
    additional_ports: list[int] = Field(default_factory=list)
    environment_variables: dict[str, str] = Field(default_factory=dict)

    def all_ports(self) -> list[int]:
        """Return the primary port followed by the additional ports."""
        return [self.port, *self.additional_ports]


# --- Configuration models ---


class ProjectConfig(BaseModel):
    """Project configuration persisted at ``<project>/.seaman/seaman.yaml``.

    Loaded and saved by :func:`~seaman.config.load_project_config` and
    :func:`~seaman.config.save_project_config`. The ``plugins`` mapping goes
    from plugin name to that plugin's raw settings; it is validated later,
    per plugin, against the plugin's own schema.

    Malformed ``plugins`` entries are dropped instead of rejected: keys that
    are not strings and values that are not mappings are ignored.
    """

    model_config = ConfigDict(extra="allow")

    plugins: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("plugins", mode="before")
    @classmethod
    def _normalize_plugins(cls, value: Any) -> dict[str, dict[str, Any]]:
        if not isinstance(value, dict):
            return {}
        return {
            key: dict(settings)
            for key, settings in value.items()
            if isinstance(key, str) and isinstance(settings, dict)
        }

    def plugin_settings(self, name: str) -> dict[str, Any]:
        """Return the raw settings declared for plugin *name* (empty if none)."""
        return dict(self.plugins.get(name, {}))
