"""Tests for ``seaman plugin list``, ``info``, ``create`` and ``export``."""

from __future__ import annotations

import json
from pathlib import Path

from seaman.exceptions import ConfigValidationError, NotFoundError, PluginNotFoundError
from seaman.exit_codes import EXIT_INVALID_USAGE


def _write_config(project: Path, text: str) -> None:
    path = project / ".seaman" / "seaman.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


class TestPluginList:
    def test_lists_bundled_plugins(self, cli_runner, seaman_app, project: Path) -> None:
        result = cli_runner.invoke(seaman_app, ["--json", "plugin", "list"])
        assert result.exit_code == 0, result.output
        records = json.loads(result.stdout)
        assert [r["Name"] for r in records] == ["seaman/mailpit", "seaman/postgresql", "seaman/redis"]
        assert {r["Source"] for r in records} == {"bundled"}

    def test_includes_local_plugins(self, cli_runner, seaman_app, project: Path, write_plugin) -> None:
        write_plugin(project / ".seaman" / "plugins" / "audit.py", """
            from seaman.plugins import Plugin, PluginDescriptor

            class AuditPlugin(Plugin):
                descriptor = PluginDescriptor(name="local/audit", version="0.2.0", description="Audit log")
        """)
        result = cli_runner.invoke(seaman_app, ["--plain", "plugin", "list"])
        assert result.exit_code == 0, result.output
        assert "local/audit\t0.2.0\tlocal\tAudit log" in result.stdout.splitlines()

    def test_local_plugin_overrides_bundled(self, cli_runner, seaman_app, project: Path, write_plugin) -> None:
        write_plugin(project / ".seaman" / "plugins" / "redis.py", """
            from seaman.plugins import Plugin, PluginDescriptor

            class MyRedis(Plugin):
                descriptor = PluginDescriptor(name="seaman/redis", version="9.0.0")
        """)
        result = cli_runner.invoke(seaman_app, ["--json", "plugin", "list"])
        records = {r["Name"]: r for r in json.loads(result.stdout)}
        assert records["seaman/redis"]["Version"] == "9.0.0"
        assert records["seaman/redis"]["Source"] == "local"
        assert len(records) == 3

    def test_project_root_option(self, cli_runner, seaman_app, tmp_path: Path, write_plugin, project: Path) -> None:
        other = tmp_path / "other"
        write_plugin(other / ".seaman" / "plugins" / "x.py", """
            from seaman.plugins import Plugin, PluginDescriptor

            class XPlugin(Plugin):
                descriptor = PluginDescriptor(name="local/x")
        """)
        result = cli_runner.invoke(seaman_app, ["--json", "--project-root", str(other), "plugin", "list"])
        assert "local/x" in [r["Name"] for r in json.loads(result.stdout)]

    def test_invalid_settings_fail(self, cli_runner, seaman_app, project: Path) -> None:
        _write_config(project, "plugins:\n  seaman/postgresql:\n    port: 99999\n")
        result = cli_runner.invoke(seaman_app, ["plugin", "list"])
        assert isinstance(result.exception, ConfigValidationError)
        assert "seaman/postgresql" in str(result.exception)


class TestPluginInfo:
    def test_shows_descriptor_and_masks_secrets(self, cli_runner, seaman_app, project: Path) -> None:
        _write_config(project, "plugins:\n  seaman/postgresql:\n    password: hunter2\n")
        result = cli_runner.invoke(seaman_app, ["--json", "plugin", "info", "seaman/postgresql"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["name"] == "seaman/postgresql"
        assert data["source"] == "bundled"
        assert data["services"] == ["postgresql"]
        assert data["config"]["password"] == "********"
        assert data["config"]["user"] == "seaman"
        assert "hunter2" not in result.output

    def test_lists_contributions(self, cli_runner, seaman_app, project: Path, write_plugin) -> None:
        write_plugin(project / ".seaman" / "plugins" / "full.py", """
            from pathlib import Path

            import typer

            from seaman.plugins import (
                CommandProvider,
                LifecycleHandler,
                LifecycleSubscriber,
                Plugin,
                PluginDescriptor,
                TemplateOverride,
                TemplateProvider,
            )


            class FullPlugin(Plugin, CommandProvider, LifecycleSubscriber, TemplateProvider):
                descriptor = PluginDescriptor(name="local/full", requires=("seaman>=0.4",))

                def commands(self):
                    return [typer.Typer(name="full")]

                def lifecycle_handlers(self):
                    return [LifecycleHandler("after:start", lambda data: None, priority=3)]

                def template_overrides(self):
                    return [TemplateOverride("redis.yaml.j2", Path("/override/redis.yaml.j2"))]
        """)
        result = cli_runner.invoke(seaman_app, ["--json", "plugin", "info", "local/full"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["requires"] == ["seaman>=0.4"]
        assert data["commands"] == ["full"]
        assert data["lifecycle"] == [{"event": "after:start", "priority": 3}]
        assert data["template_overrides"] == {"redis.yaml.j2": "/override/redis.yaml.j2"}

    def test_unknown_plugin(self, cli_runner, seaman_app, project: Path) -> None:
        result = cli_runner.invoke(seaman_app, ["plugin", "info", "acme/missing"])
        assert isinstance(result.exception, PluginNotFoundError)


class TestPluginCreate:
    def test_scaffolds_loadable_plugin(self, cli_runner, seaman_app, project: Path) -> None:
        result = cli_runner.invoke(seaman_app, ["plugin", "create", "audit-log"])
        assert result.exit_code == 0, result.output

        plugin_file = project / ".seaman" / "plugins" / "audit_log" / "audit_log_plugin.py"
        assert plugin_file.is_file()
        source = plugin_file.read_text()
        assert 'name="local/audit-log"' in source
        assert "class AuditLogPlugin(" in source

        result = cli_runner.invoke(seaman_app, ["--json", "plugin", "info", "local/audit-log"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["source"] == "local"
        assert data["config"] == {"enabled": True}
        assert data["lifecycle"] == [{"event": "after:start", "priority": 0}]

    def test_refuses_to_overwrite(self, cli_runner, seaman_app, project: Path) -> None:
        cli_runner.invoke(seaman_app, ["plugin", "create", "audit"])
        plugin_file = project / ".seaman" / "plugins" / "audit" / "audit_plugin.py"
        plugin_file.write_text("# edited\n")

        result = cli_runner.invoke(seaman_app, ["plugin", "create", "audit"])
        assert result.exit_code == EXIT_INVALID_USAGE
        assert "already exists" in result.output
        assert plugin_file.read_text() == "# edited\n"

    def test_force_overwrites(self, cli_runner, seaman_app, project: Path) -> None:
        cli_runner.invoke(seaman_app, ["plugin", "create", "audit"])
        plugin_file = project / ".seaman" / "plugins" / "audit" / "audit_plugin.py"
        plugin_file.write_text("# edited\n")

        result = cli_runner.invoke(seaman_app, ["--force", "plugin", "create", "audit"])
        assert result.exit_code == 0, result.output
        assert "AuditPlugin" in plugin_file.read_text()

    def test_invalid_name(self, cli_runner, seaman_app, project: Path) -> None:
        result = cli_runner.invoke(seaman_app, ["plugin", "create", "1bad name"])
        assert result.exit_code == EXIT_INVALID_USAGE
        assert not (project / ".seaman").exists()

    def test_dry_run_writes_nothing(self, cli_runner, seaman_app, project: Path) -> None:
        result = cli_runner.invoke(seaman_app, ["--dry-run", "plugin", "create", "audit"])
        assert result.exit_code == 0, result.output
        assert "[dry-run]" in result.output
        assert not (project / ".seaman").exists()


class TestPluginExport:
    def test_exports_created_plugin(self, cli_runner, seaman_app, project: Path) -> None:
        cli_runner.invoke(seaman_app, ["plugin", "create", "audit-log"])

        result = cli_runner.invoke(seaman_app, ["plugin", "export", "audit-log", "--vendor", "acme"])
        assert result.exit_code == 0, result.output
        output = project / "exports" / "audit-log"
        assert (output / "src" / "acme_audit_log" / "audit_log_plugin.py").is_file()
        pyproject = (output / "pyproject.toml").read_text()
        assert '"local-audit-log" = "acme_audit_log.audit_log_plugin:AuditLogPlugin"' in pyproject

    def test_explicit_output_directory(self, cli_runner, seaman_app, project: Path, tmp_path: Path) -> None:
        cli_runner.invoke(seaman_app, ["plugin", "create", "audit"])
        output = tmp_path / "dist" / "audit"

        result = cli_runner.invoke(seaman_app, ["plugin", "export", "audit", str(output)])
        assert result.exit_code == 0, result.output
        assert 'name = "your-vendor-audit"' in (output / "pyproject.toml").read_text()

    def test_unknown_plugin(self, cli_runner, seaman_app, project: Path) -> None:
        result = cli_runner.invoke(seaman_app, ["plugin", "export", "audit"])
        assert isinstance(result.exception, NotFoundError)

    def test_refuses_non_empty_output(self, cli_runner, seaman_app, project: Path) -> None:
        cli_runner.invoke(seaman_app, ["plugin", "create", "audit"])
        output = project / "exports" / "audit"
        output.mkdir(parents=True)
        (output / "README.md").write_text("keep\n")

        result = cli_runner.invoke(seaman_app, ["plugin", "export", "audit"])
        assert result.exit_code == EXIT_INVALID_USAGE
        assert not (output / "pyproject.toml").exists()

        result = cli_runner.invoke(seaman_app, ["--force", "plugin", "export", "audit"])
        assert result.exit_code == 0, result.output
        assert (output / "pyproject.toml").is_file()

    def test_dry_run_writes_nothing(self, cli_runner, seaman_app, project: Path) -> None:
        cli_runner.invoke(seaman_app, ["plugin", "create", "audit"])
        result = cli_runner.invoke(seaman_app, ["--dry-run", "plugin", "export", "audit"])
        assert result.exit_code == 0, result.output
        assert "[dry-run]" in result.output
        assert not (project / "exports").exists()
