"""Program management commands."""

from pathlib import Path

import click

from ..data.catalog_loader import load_program_file
from ..errors import FloorError
from .base import (
    async_command,
    echo_info,
    echo_success,
    ensure_initialized,
    fail,
    format_table,
    get_store,
)


@click.group()
def programs():
    """Manage client programs.

    Programs are authored elsewhere and loaded from JSON files; exercises
    are referenced by library name.
    """
    pass


@programs.command("add")
@click.argument("client_id", type=int)
@click.argument("program_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
@async_command
async def add_program(ctx: click.Context, client_id: int, program_file: Path):
    """Assign a program from PROGRAM_FILE to a client."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    try:
        program = await load_program_file(store, program_file, client_id)
    except FloorError as e:
        fail(ctx, e)
        return

    program_id = await store.programs.create(program)
    echo_success(
        f"Program '{program.name}' ({len(program)} exercises) assigned to client "
        f"{client_id} (ID {program_id})"
    )


@programs.command("list")
@click.pass_context
@async_command
async def list_programs(ctx: click.Context):
    """List all programs."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    all_programs = await store.programs.list_all()
    if not all_programs:
        echo_info("No programs yet.")
        return

    rows = [
        [str(p.id), p.name, str(p.client_id), str(len(p))]
        for p in all_programs
    ]
    click.echo(format_table(["ID", "Name", "Client", "Exercises"], rows))


@programs.command("show")
@click.argument("program_id", type=int)
@click.pass_context
@async_command
async def show_program(ctx: click.Context, program_id: int):
    """Show a program's exercises."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    program = await store.programs.get(program_id)
    if program is None:
        echo_info(f"Program {program_id} not found.")
        ctx.exit(1)

    click.echo(click.style(program.name, bold=True))
    rows = []
    for i, entry in enumerate(program.entries, start=1):
        exercise = await store.exercises.get(entry.exercise_id)
        rows.append([
            str(i),
            exercise.name if exercise else f"#{entry.exercise_id} (missing)",
            str(entry.sets),
            str(entry.reps),
            f"{entry.rest_seconds}s",
        ])
    click.echo(format_table(["#", "Exercise", "Sets", "Reps", "Rest"], rows))
