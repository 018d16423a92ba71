"""Plugin commands -- list, inspect and scaffold plugins.

Provides the ``seaman plugin`` sub-command group:

* ``list`` -- every discovered plugin with its version and source.
* ``info NAME`` -- a plugin's descriptor, validated configuration (secret
  values masked) and everything it contributes.
* ``create NAME`` -- writes a project-local plugin skeleton to
  ``.seaman/plugins/<name>/<name>_plugin.py``.
* ``export NAME [OUTPUT]`` -- packages a project-local plugin as an
  installable distribution with a ``seaman.plugins`` entry point.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from seaman.commands.context import get_project_root, get_registry, is_dry_run, is_forced
from seaman.exceptions import NotFoundError
from seaman.exit_codes import EXIT_INVALID_USAGE
from seaman.output import error, format_response, info, print_table, success, suggest
from seaman.plugins.capabilities import (
    extract_commands,
    extract_lifecycle_handlers,
    extract_schema,
    extract_services,
    extract_template_overrides,
)
from seaman.plugins.registry import LoadedPlugin

plugin_app = typer.Typer(no_args_is_help=True)

SECRET_MASK = "********"


def _mask_config(loaded: LoadedPlugin) -> dict[str, Any]:
    values = loaded.config.all()
    schema = extract_schema(loaded.instance)
    if schema is not None:
        for name in schema.secret_fields():
            if values.get(name) is not None:
                values[name] = SECRET_MASK
    return values


@plugin_app.command("list")
def plugin_list(ctx: typer.Context) -> None:
    """List discovered plugins.

    Example::

        seaman plugin list
        seaman plugin list --json
    """
    plugins = get_registry(ctx).list_plugins()
    if not plugins:
        info("No plugins found.")
        suggest("Scaffold one: seaman plugin create my-plugin")
        return
    rows = [[p["name"], p["version"], p["source"], p["description"]] for p in plugins]
    print_table(["Name", "Version", "Source", "Description"], rows, title="Plugins")


@plugin_app.command("info")
def plugin_info(
    ctx: typer.Context,
    name: str = typer.Argument(help="Plugin name, e.g. 'seaman/redis'."),
) -> None:
    """Show a plugin's metadata, configuration and contributions.

    Args:
        name: The registered plugin name.

    Raises:
        PluginNotFoundError: If no plugin with that name was discovered.

    Example::

        seaman plugin info seaman/postgresql
    """
    loaded = get_registry(ctx).get(name)
    plugin = loaded.instance
    format_response(
        {
            "name": plugin.name,
            "version": plugin.version,
            "description": plugin.description,
            "source": loaded.source.value,
            "requires": list(plugin.descriptor.requires),
            "config": _mask_config(loaded),
            "services": [definition.name for definition in extract_services(plugin)],
            "commands": [command.info.name for command in extract_commands(plugin)],
            "lifecycle": [
                {"event": handler.event, "priority": handler.priority}
                for handler in extract_lifecycle_handlers(plugin)
            ],
            "template_overrides": {
                override.original_template: str(override.override_path)
                for override in extract_template_overrides(plugin)
            },
        }
    )


@plugin_app.command("create")
def plugin_create(
    ctx: typer.Context,
    name: str = typer.Argument(help="Plugin name (letters, digits, '-' and '_')."),
) -> None:
    """Scaffold a project-local plugin.

    Refuses to overwrite an existing plugin file unless ``--force`` is
    active.

    Example::

        seaman plugin create audit-log
        seaman --force plugin create audit-log
    """
    from seaman.config import atomic_write, get_local_plugins_dir
    from seaman.scaffold import PluginScaffold, render_plugin

    try:
        scaffold = PluginScaffold.from_name(name)
    except ValueError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    plugin_file = get_local_plugins_dir(get_project_root(ctx)) / scaffold.relative_path()
    if plugin_file.exists() and not is_forced(ctx):
        error(f"Plugin file already exists: {plugin_file}")
        suggest(f"Overwrite it: seaman --force plugin create {name}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    source = render_plugin(scaffold)
    if is_dry_run(ctx):
        info(f"[dry-run] Would write {plugin_file}")
        return

    atomic_write(plugin_file, source)
    success(f'Plugin "{scaffold.plugin_name}" created at {plugin_file}')
    suggest(f"Inspect it: seaman plugin info {scaffold.plugin_name}")


@plugin_app.command("export")
def plugin_export(
    ctx: typer.Context,
    name: str = typer.Argument(help="Name the plugin was created with, e.g. 'audit-log'."),
    output: Optional[Path] = typer.Argument(
        None, help="Output directory [default: ./exports/<name>]."
    ),
    vendor: str = typer.Option("your-vendor", "--vendor", help="Vendor prefix of the package name."),
) -> None:
    """Export a project-local plugin as an installable package.

    Copies ``.seaman/plugins/<name>/`` into ``src/<vendor>_<name>/`` of the
    output directory and writes a ``pyproject.toml`` registering the plugin
    in the ``seaman.plugins`` entry-point group.

    Raises:
        NotFoundError: If the local plugin directory does not exist.
        PluginError: If it declares no plugin class.

    Example::

        seaman plugin export audit-log --vendor acme
        seaman plugin export audit-log ../acme-audit-log --vendor acme
    """
    from seaman.config import get_local_plugins_dir
    from seaman.scaffold import PluginExport, export_plugin

    try:
        export = PluginExport.from_name(name, vendor)
    except ValueError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    plugin_dir = get_local_plugins_dir(get_project_root(ctx)) / export.scaffold.module_name
    if not plugin_dir.is_dir():
        raise NotFoundError(f"Local plugin not found: {plugin_dir}")

    output_dir = output if output is not None else Path.cwd() / "exports" / export.scaffold.name
    if output_dir.exists() and any(output_dir.iterdir()) and not is_forced(ctx):
        error(f"Output directory is not empty: {output_dir}")
        suggest(f"Overwrite it: seaman --force plugin export {name}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    if is_dry_run(ctx):
        info(f"[dry-run] Would export {plugin_dir} to {output_dir}")
        return

    written = export_plugin(plugin_dir, output_dir, export)
    success(f"Plugin exported to {output_dir} ({len(written)} files)")
    suggest(f"Install it: pip install {output_dir}")
