"""Helpers reading the shared options stored in ``ctx.obj`` by the root callback."""

from __future__ import annotations

from pathlib import Path

import typer

from seaman.config import resolve_project_root
from seaman.plugins.registry import PluginRegistry, load_registry
from seaman.services import ServiceRegistry


def get_project_root(ctx: typer.Context) -> Path:
    """Return the project root chosen by ``--project-root``, the environment or cwd."""
    root = ctx.obj.get("project_root") if ctx.obj else None
    if root is None:
        return resolve_project_root()
    return Path(root)


def is_dry_run(ctx: typer.Context) -> bool:
    return bool(ctx.obj.get("dry_run", False)) if ctx.obj else False


def is_forced(ctx: typer.Context) -> bool:
    return bool(ctx.obj.get("force", False)) if ctx.obj else False


def get_registry(ctx: typer.Context) -> PluginRegistry:
    return load_registry(get_project_root(ctx))


def get_service_registry(ctx: typer.Context) -> ServiceRegistry:
    """Build a service registry holding every plugin-provided service."""
    services = ServiceRegistry()
    services.register_plugin_services(get_registry(ctx))
    return services
