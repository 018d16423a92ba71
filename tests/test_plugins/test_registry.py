"""Tests for PluginRegistry registration, lookup and discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from seaman.config import project_config_path
from seaman.exceptions import ConfigValidationError, PluginNotFoundError
from seaman.plugins.base import Plugin, PluginDescriptor, PluginSource
from seaman.plugins.capabilities import Configurable
from seaman.plugins.registry import LoadedPlugin, PluginRegistry, load_registry, reset_registry
from seaman.plugins.schema import ConfigSchema, PluginConfig


# ---------------------------------------------------------------------------
# Test helpers -- concrete Plugin subclasses
# ---------------------------------------------------------------------------


class PlainPlugin(Plugin):
    descriptor = PluginDescriptor(name="acme/plain", version="1.2.3", description="No schema")

    def __init__(self) -> None:
        self.received: PluginConfig | None = None

    def on_init(self, config: PluginConfig) -> None:
        self.received = config


class PortPlugin(Plugin, Configurable):
    descriptor = PluginDescriptor(name="acme/port")

    def __init__(self) -> None:
        self.received: PluginConfig | None = None

    def config_schema(self) -> ConfigSchema:
        return ConfigSchema().integer("port", default=9000, min=1, max=65535)

    def on_init(self, config: PluginConfig) -> None:
        self.received = config


class OtherPortPlugin(PortPlugin):
    descriptor = PluginDescriptor(name="acme/port", version="2.0.0")


LOCAL_PLUGIN = '''
    from seaman.plugins import Plugin, PluginDescriptor


    class {cls}(Plugin):
        descriptor = PluginDescriptor(name="{name}", version="{version}")
'''


def _no_entry_points(group: str) -> list[Any]:
    return []


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegister:
    def test_plugin_without_schema_receives_raw_config(self) -> None:
        registry = PluginRegistry()
        plugin = PlainPlugin()
        loaded = registry.register(plugin, {"anything": 1}, PluginSource.BUNDLED)

        assert isinstance(loaded, LoadedPlugin)
        assert loaded.instance is plugin
        assert loaded.source is PluginSource.BUNDLED
        assert loaded.config.all() == {"anything": 1}
        assert plugin.received is loaded.config

    def test_configurable_plugin_gets_validated_config(self) -> None:
        registry = PluginRegistry()
        loaded = registry.register(PortPlugin(), {})
        assert loaded.config.all() == {"port": 9000}

        loaded = registry.register(PortPlugin(), {"port": 9999})
        assert loaded.config.get("port") == 9999

    def test_invalid_config_names_plugin_and_field(self) -> None:
        registry = PluginRegistry()
        with pytest.raises(ConfigValidationError) as exc_info:
            registry.register(PortPlugin(), {"port": 70000})

        error = exc_info.value
        assert error.field == "port"
        assert error.plugin == "acme/port"
        assert "acme/port" in str(error)
        assert "must be at most 65535" in str(error)
        assert not registry.has("acme/port")

    def test_unknown_field_aborts_registration(self) -> None:
        registry = PluginRegistry()
        with pytest.raises(ConfigValidationError, match="Unknown configuration field: 'colour'"):
            registry.register(PortPlugin(), {"colour": "red"})
        assert len(registry) == 0

    def test_on_init_not_called_when_validation_fails(self) -> None:
        plugin = PortPlugin()
        with pytest.raises(ConfigValidationError):
            PluginRegistry().register(plugin, {"port": "x"})
        assert plugin.received is None

    def test_replacement_keeps_single_entry(self) -> None:
        registry = PluginRegistry()
        registry.register(PortPlugin(), {"port": 1})
        second = registry.register(OtherPortPlugin(), {"port": 2})

        assert len(registry) == 1
        assert registry.get("acme/port") is second
        assert registry.get("acme/port").instance.version == "2.0.0"


# ---------------------------------------------------------------------------
# Querying
# ---------------------------------------------------------------------------


class TestQuerying:
    def test_get_unknown_raises(self) -> None:
        with pytest.raises(PluginNotFoundError, match="Plugin 'acme/missing' not found"):
            PluginRegistry().get("acme/missing")

    def test_has_and_contains(self) -> None:
        registry = PluginRegistry()
        registry.register(PlainPlugin())
        assert registry.has("acme/plain")
        assert "acme/plain" in registry
        assert not registry.has("acme/port")

    def test_all_preserves_registration_order(self) -> None:
        registry = PluginRegistry()
        registry.register(PortPlugin())
        registry.register(PlainPlugin())
        assert list(registry.all()) == ["acme/port", "acme/plain"]
        assert [loaded.name for loaded in registry] == ["acme/port", "acme/plain"]

    def test_all_returns_copy(self) -> None:
        registry = PluginRegistry()
        registry.register(PlainPlugin())
        registry.all().clear()
        assert len(registry) == 1

    def test_list_plugins(self) -> None:
        registry = PluginRegistry()
        registry.register(PlainPlugin(), source=PluginSource.PACKAGE)
        assert registry.list_plugins() == [
            {
                "name": "acme/plain",
                "version": "1.2.3",
                "source": "package",
                "description": "No schema",
            }
        ]


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestDiscover:
    def test_all_sources_are_uniform(self, tmp_path: Path, write_plugin) -> None:
        bundled = tmp_path / "bundled"
        local = tmp_path / "local"
        write_plugin(bundled / "cache" / "cache_plugin.py", LOCAL_PLUGIN.format(cls="CachePlugin", name="acme/cache", version="1.0.0"))
        write_plugin(local / "audit.py", LOCAL_PLUGIN.format(cls="AuditPlugin", name="acme/audit", version="1.0.0"))

        class EP:
            name = "port"

            def load(self) -> type:
                return PortPlugin

        with patch("seaman.plugins.loaders.importlib.metadata.entry_points", return_value=[EP()]):
            registry = PluginRegistry.discover(
                tmp_path, {"acme/port": {"port": 1234}}, bundled_dir=bundled, local_dir=local
            )

        assert list(registry.all()) == ["acme/cache", "acme/port", "acme/audit"]
        assert registry.get("acme/cache").source is PluginSource.BUNDLED
        assert registry.get("acme/port").source is PluginSource.PACKAGE
        assert registry.get("acme/port").config.get("port") == 1234
        assert registry.get("acme/audit").source is PluginSource.LOCAL

    def test_local_overrides_bundled(self, tmp_path: Path, write_plugin) -> None:
        bundled = tmp_path / "bundled"
        local = tmp_path / "local"
        write_plugin(bundled / "cache" / "cache_plugin.py", LOCAL_PLUGIN.format(cls="CachePlugin", name="acme/cache", version="1.0.0"))
        write_plugin(local / "cache.py", LOCAL_PLUGIN.format(cls="CachePlugin", name="acme/cache", version="9.9.9"))

        with patch("seaman.plugins.loaders.importlib.metadata.entry_points", side_effect=_no_entry_points):
            registry = PluginRegistry.discover(tmp_path, bundled_dir=bundled, local_dir=local)

        assert len(registry) == 1
        loaded = registry.get("acme/cache")
        assert loaded.source is PluginSource.LOCAL
        assert loaded.instance.version == "9.9.9"

    def test_default_local_dir_is_inside_project(self, tmp_path: Path, write_plugin) -> None:
        write_plugin(
            tmp_path / ".seaman" / "plugins" / "mine.py",
            LOCAL_PLUGIN.format(cls="MinePlugin", name="local/mine", version="0.1.0"),
        )
        with patch("seaman.plugins.loaders.importlib.metadata.entry_points", side_effect=_no_entry_points):
            registry = PluginRegistry.discover(tmp_path, bundled_dir=tmp_path / "none")
        assert registry.has("local/mine")


class TestLoadRegistry:
    def test_reads_settings_from_project_config(self, project: Path) -> None:
        path = project_config_path(project)
        path.parent.mkdir(parents=True)
        path.write_text("plugins:\n  seaman/redis:\n    port: 6380\n")

        with patch("seaman.plugins.loaders.importlib.metadata.entry_points", side_effect=_no_entry_points):
            registry = load_registry(project)

        assert registry.get("seaman/redis").config.get("port") == 6380
        assert registry.get("seaman/postgresql").config.get("port") == 5432

    def test_registry_is_cached_per_project(self, project: Path) -> None:
        with patch("seaman.plugins.loaders.importlib.metadata.entry_points", side_effect=_no_entry_points):
            first = load_registry(project)
            assert load_registry(project) is first
            reset_registry()
            assert load_registry(project) is not first

    def test_invalid_settings_raise(self, project: Path) -> None:
        path = project_config_path(project)
        path.parent.mkdir(parents=True)
        path.write_text("plugins:\n  seaman/redis:\n    port: 0\n")

        with patch("seaman.plugins.loaders.importlib.metadata.entry_points", side_effect=_no_entry_points):
            with pytest.raises(ConfigValidationError, match="seaman/redis"):
                load_registry(project)
