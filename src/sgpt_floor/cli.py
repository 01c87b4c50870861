"""CLI entry point for sgpt-floor."""

import logging

import click

from .commands import alerts, clients, decisions, equipment, init, programs, serve, session
from .config import Settings


@click.group()
@click.version_option(version="0.1.0", prog_name="sgpt-floor")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override SGPT_LOG_LEVEL",
)
@click.pass_context
def main(ctx: click.Context, log_level: str | None):
    """sgpt-floor: small-group training session coordinator.

    Sequences up to six clients through their programs on a shared floor,
    substituting exercises when equipment is taken and logging every
    automatic decision for the coach.

    Example usage:

        # Initialize the project with the standard floor
        sgpt-floor init

        # Add a client and their program
        sgpt-floor clients add "Alex"
        sgpt-floor programs add 1 alex.json

        # Run a session
        sgpt-floor session start 1
        sgpt-floor session checkin 1
        sgpt-floor session advance 1
        sgpt-floor alerts list --action-only
    """
    settings = Settings.from_env()
    if log_level:
        settings.log_level = log_level.upper()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = settings


# Register commands
main.add_command(init)
main.add_command(clients)
main.add_command(programs)
main.add_command(equipment)
main.add_command(session)
main.add_command(decisions)
main.add_command(alerts)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
