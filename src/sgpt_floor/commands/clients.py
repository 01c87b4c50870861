"""Client management commands."""

import click

from ..models.client import Client
from .base import async_command, echo_info, echo_success, ensure_initialized, format_table, get_store


@click.group()
def clients():
    """Manage training clients."""
    pass


@clients.command("add")
@click.argument("name")
@click.option("--injury", "injuries", multiple=True, help="Injury note (repeatable)")
@click.pass_context
@async_command
async def add_client(ctx: click.Context, name: str, injuries: tuple[str, ...]):
    """Add a client."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    client_id = await store.clients.create(Client(name=name, injury_notes=list(injuries)))
    echo_success(f"Client {name} added (ID {client_id})")


@clients.command("list")
@click.pass_context
@async_command
async def list_clients(ctx: click.Context):
    """List all clients."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    all_clients = await store.clients.list_all()
    if not all_clients:
        echo_info("No clients yet. Add one with 'sgpt-floor clients add NAME'.")
        return

    rows = [
        [str(c.id), c.name, ", ".join(c.injury_notes) or "-"]
        for c in all_clients
    ]
    click.echo(format_table(["ID", "Name", "Injury notes"], rows))
