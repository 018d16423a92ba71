"""Render source files for project-local plugins.

``seaman plugin create`` writes a plugin skeleton and ``seaman plugin
export`` turns a local plugin into an installable package, both produced
from the Jinja2 templates in ``seaman/templates/``. Rendering is separated
from the commands so the generated text can be inspected without touching
the filesystem.
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from seaman.exceptions import PluginError
from seaman.plugins.base import Plugin

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``seaman/templates/``)."""

PLUGIN_NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")


@dataclass(frozen=True)
class PluginScaffold:
    """Names derived from the NAME argument of ``seaman plugin create``.

    Attributes:
        name: The name as given, e.g. ``"audit-log"``.
        module_name: Directory and file stem, e.g. ``"audit_log"``.
        title: Human-readable title, e.g. ``"Audit Log"``.
        class_name: Plugin class name, e.g. ``"AuditLogPlugin"``.
        plugin_name: Registered plugin name, e.g. ``"local/audit-log"``.
    """

    name: str
    module_name: str
    title: str
    class_name: str
    plugin_name: str

    @classmethod
    def from_name(cls, name: str) -> PluginScaffold:
        """Derive every scaffold name from *name*.

        Raises:
            ValueError: If *name* does not start with a letter or contains
                characters other than letters, digits, ``-`` and ``_``.
        """
        if not PLUGIN_NAME_PATTERN.fullmatch(name):
            raise ValueError(f"Invalid plugin name: {name!r}")
        title = name.replace("-", " ").replace("_", " ").title()
        return cls(
            name=name,
            module_name=name.replace("-", "_").lower(),
            title=title,
            class_name=title.replace(" ", "") + "Plugin",
            plugin_name=f"local/{name}",
        )

    def relative_path(self) -> Path:
        """Return the plugin file path relative to the local plugins directory."""
        return Path(self.module_name) / f"{self.module_name}_plugin.py"


def _create_jinja_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("py.j2", "toml.j2")),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_plugin(scaffold: PluginScaffold) -> str:
    """Return the Python source of a plugin skeleton for *scaffold*."""
    template = _create_jinja_env().get_template("plugin.py.j2")
    return template.render(
        title=scaffold.title,
        class_name=scaffold.class_name,
        plugin_name=scaffold.plugin_name,
    )


# ------------------------------------------------------------------
# Export
# ------------------------------------------------------------------


@dataclass(frozen=True)
class ExportedEntryPoint:
    """One ``seaman.plugins`` entry point of an exported package."""

    name: str
    value: str


@dataclass(frozen=True)
class PluginExport:
    """Names of the distributable package built from a local plugin.

    Attributes:
        scaffold: Names of the local plugin being exported.
        vendor: Normalised vendor prefix, e.g. ``"acme"``.
        distribution: Distribution name, e.g. ``"acme-audit-log"``.
        package: Import package name, e.g. ``"acme_audit_log"``.
    """

    scaffold: PluginScaffold
    vendor: str
    distribution: str
    package: str

    @classmethod
    def from_name(cls, name: str, vendor: str) -> PluginExport:
        """Derive the package names for plugin *name* published by *vendor*.

        Raises:
            ValueError: If *name* or *vendor* is not a valid name.
        """
        scaffold = PluginScaffold.from_name(name)
        normalized = re.sub(r"[^a-z0-9]+", "-", vendor.lower()).strip("-")
        if not normalized or not normalized[0].isalpha():
            raise ValueError(f"Invalid vendor name: {vendor!r}")
        return cls(
            scaffold=scaffold,
            vendor=normalized,
            distribution=f"{normalized}-{scaffold.name.lower().replace('_', '-')}",
            package=f"{normalized.replace('-', '_')}_{scaffold.module_name}",
        )


def _module_path(relative: Path) -> str:
    parts = [*relative.parent.parts, relative.stem]
    if not all(part.isidentifier() for part in parts):
        raise PluginError(f"Cannot export {relative}: not an importable module name")
    return ".".join(parts)


def _find_entry_points(plugin_dir: Path, package: str) -> list[tuple[Plugin, ExportedEntryPoint]]:
    from seaman.plugins.loaders import LocalPluginLoader

    found: list[tuple[Plugin, ExportedEntryPoint]] = []
    for plugin in LocalPluginLoader(plugin_dir).load():
        cls = type(plugin)
        relative = Path(inspect.getfile(cls)).resolve().relative_to(plugin_dir.resolve())
        value = f"{package}.{_module_path(relative)}:{cls.__name__}"
        found.append((plugin, ExportedEntryPoint(name=plugin.name.replace("/", "-"), value=value)))
    return found


def _package_files(plugin_dir: Path) -> list[Path]:
    return sorted(
        path.relative_to(plugin_dir)
        for path in plugin_dir.rglob("*")
        if path.is_file() and "__pycache__" not in path.parts
    )


def render_pyproject(export: PluginExport, plugin: Plugin, entry_points: list[ExportedEntryPoint]) -> str:
    """Return the ``pyproject.toml`` of the package exported for *plugin*."""
    from seaman import __version__

    template = _create_jinja_env().get_template("pyproject.toml.j2")
    return template.render(
        distribution=export.distribution,
        version=plugin.version,
        description=plugin.description or f"{export.scaffold.title} plugin for seaman",
        seaman_version=__version__,
        entry_points=entry_points,
        package=export.package,
    )


def export_plugin(plugin_dir: Path, output_dir: str | Path, export: PluginExport) -> list[Path]:
    """Turn the local plugin in *plugin_dir* into an installable package.

    Creates the following inside *output_dir*:

    * ``pyproject.toml`` -- declares every plugin class found in
      *plugin_dir* as a ``seaman.plugins`` entry point.
    * ``src/<package>/`` -- a copy of *plugin_dir*, templates included,
      with an ``__init__.py`` in each directory holding Python modules.

    Args:
        plugin_dir: Directory of the plugin below ``.seaman/plugins/``.
        output_dir: Directory the package is written to. Created
            (including parents) if it does not exist.
        export: Names of the package to produce.

    Returns:
        The written files, relative to *output_dir*.

    Raises:
        PluginError: If *plugin_dir* declares no plugin class or holds a
            module whose path is not importable.
    """
    found = _find_entry_points(plugin_dir, export.package)
    if not found:
        raise PluginError(f"No plugin class with a descriptor found in {plugin_dir}")

    output_path = Path(output_dir)
    package_root = Path("src") / export.package
    files: dict[Path, bytes] = {}
    for relative in _package_files(plugin_dir):
        files[package_root / relative] = (plugin_dir / relative).read_bytes()
        if relative.suffix == ".py":
            for parent in (relative.parent, *relative.parent.parents):
                files.setdefault(package_root / parent / "__init__.py", b"")
    files.setdefault(package_root / "__init__.py", b"")
    pyproject = render_pyproject(export, found[0][0], [entry_point for _, entry_point in found])
    files[Path("pyproject.toml")] = pyproject.encode("utf-8")

    for relative, content in files.items():
        target = output_path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    return sorted(files)
