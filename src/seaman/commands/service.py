"""Service commands -- list the services contributed by plugins."""

from __future__ import annotations

import typer

from seaman.commands.context import get_service_registry
from seaman.output import info, print_table
from seaman.services import DatabaseService

service_app = typer.Typer(no_args_is_help=True)


@service_app.command("list")
def service_list(ctx: typer.Context) -> None:
    """List available services.

    Example::

        seaman service list
        seaman service list --plain | cut -f1
    """
    services = get_service_registry(ctx).all()
    if not services:
        info("No services available.")
        return

    rows = []
    for name, service in services.items():
        ports = ", ".join(str(port) for port in service.required_ports())
        rows.append(
            [
                name,
                service.display_name,
                service.category.value,
                ports or "-",
                "yes" if isinstance(service, DatabaseService) else "no",
            ]
        )
    print_table(["Name", "Display Name", "Category", "Ports", "Database"], rows, title="Services")
