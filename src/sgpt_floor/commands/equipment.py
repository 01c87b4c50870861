"""Equipment commands."""

import click

from ..errors import FloorError
from ..models.equipment import EquipmentItem
from .base import (
    async_command,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    fail,
    format_table,
    get_engine,
    get_store,
)


@click.group()
def equipment():
    """Manage facility equipment and inspect occupancy.

    Quantities are fixed while a session runs; the engine only reads them.
    """
    pass


@equipment.command("list")
@click.pass_context
@async_command
async def list_equipment(ctx: click.Context):
    """List facility equipment."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    items = await store.equipment.list_all()
    if not items:
        echo_info("No equipment configured. Run 'sgpt-floor init' to load the standard floor.")
        return

    click.echo(format_table(["Equipment", "Quantity"], [[i.name, str(i.quantity)] for i in items]))


@equipment.command("set")
@click.argument("name")
@click.argument("quantity", type=click.IntRange(min=0))
@click.pass_context
@async_command
async def set_equipment(ctx: click.Context, name: str, quantity: int):
    """Add an equipment item or change its quantity."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    await store.equipment.upsert(EquipmentItem(name=name, quantity=quantity))
    echo_success(f"{name}: {quantity}")


@equipment.command("board")
@click.argument("session_id", type=int)
@click.pass_context
@async_command
async def board(ctx: click.Context, session_id: int):
    """Show equipment occupancy for a session."""
    ensure_initialized(ctx)

    engine = get_engine(ctx)
    try:
        usage = await engine.equipment_board(session_id)
    except FloorError as e:
        fail(ctx, e)
        return

    rows = [
        [
            u.name,
            str(u.total),
            str(u.in_use),
            str(u.available),
            click.style("free", fg="green") if u.is_available else click.style("full", fg="red"),
        ]
        for u in usage
    ]
    click.echo(format_table(["Equipment", "Total", "In use", "Available", ""], rows))


@equipment.command("check")
@click.argument("session_id", type=int)
@click.argument("names", nargs=-1, required=True)
@click.pass_context
@async_command
async def check(ctx: click.Context, session_id: int, names: tuple[str, ...]):
    """Check whether equipment NAMES are free in a session."""
    ensure_initialized(ctx)

    engine = get_engine(ctx)
    try:
        availability = await engine.check_availability(session_id, list(names))
    except FloorError as e:
        fail(ctx, e)
        return

    if availability.available:
        echo_success("Available: " + ", ".join(names))
    else:
        echo_warning("Occupied: " + ", ".join(availability.conflicts))


@equipment.command("alternative")
@click.argument("session_id", type=int)
@click.argument("exercise_name")
@click.pass_context
@async_command
async def alternative(ctx: click.Context, session_id: int, exercise_name: str):
    """Preview the substitute that would replace EXERCISE_NAME right now."""
    ensure_initialized(ctx)

    engine = get_engine(ctx)
    exercise = await engine.store.exercises.get_by_name(exercise_name)
    if exercise is None:
        echo_warning(f"Exercise '{exercise_name}' is not in the library.")
        ctx.exit(1)

    try:
        found = await engine.find_alternative(exercise.id, session_id)
    except FloorError as e:
        fail(ctx, e)
        return

    if found is None:
        echo_warning(f"No available alternative for {exercise.name}.")
    else:
        equipment_text = ", ".join(found.required_equipment) or "bodyweight"
        echo_success(f"{exercise.name} -> {found.name} ({equipment_text})")
