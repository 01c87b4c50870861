"""Initialize project command."""

from pathlib import Path

import click

from ..data.catalog_loader import import_catalog
from ..db import Store, init_db, seed_facility
from .base import async_command, echo_info, echo_success, get_settings


@click.command()
@click.option(
    "--catalog",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON catalog of equipment and exercises (defaults to the standard floor)",
)
@click.pass_context
@async_command
async def init(ctx: click.Context, catalog: Path | None):
    """Initialize the sgpt-floor database.

    Creates the data directory and SQLite schema, then loads the facility
    equipment and exercise library.
    """
    settings = get_settings(ctx)
    db_path = settings.db_path

    echo_info(f"Initializing sgpt-floor in {settings.data_dir}")

    await init_db(db_path)
    echo_success("Database initialized")

    if catalog:
        equipment_count, exercise_count = await import_catalog(Store(db_path), catalog)
        echo_success(
            f"Catalog loaded ({equipment_count} equipment items, "
            f"{exercise_count} exercises from {catalog.name})"
        )
    else:
        equipment_count, exercise_count = await seed_facility(db_path)
        echo_success(
            f"Standard floor loaded ({equipment_count} equipment items, "
            f"{exercise_count} exercises)"
        )

    click.echo()
    click.echo("sgpt-floor is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Add clients and their programs:")
    click.echo('     sgpt-floor clients add "Alex"')
    click.echo("     sgpt-floor programs add 1 program.json")
    click.echo()
    click.echo("  2. Start a session:")
    click.echo("     sgpt-floor session start")
