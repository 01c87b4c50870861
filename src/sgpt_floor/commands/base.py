"""Shared CLI utilities."""

import asyncio
from functools import wraps

import click

from ..config import Settings
from ..db.store import Store
from ..engine import FloorEngine, Outcome
from ..errors import FloorError, InvalidStateError, NotFoundError


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def get_settings(ctx: click.Context) -> Settings:
    """Get settings stored on the root context by the CLI group."""
    root = ctx.find_root()
    if isinstance(root.obj, Settings):
        return root.obj
    return Settings.from_env()


def get_store(ctx: click.Context) -> Store:
    """Get a store bound to the configured database."""
    return Store(get_settings(ctx).db_path)


def get_engine(ctx: click.Context) -> FloorEngine:
    """Build an engine for the configured database."""
    settings = get_settings(ctx)
    return FloorEngine(Store(settings.db_path), settings)


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    db_path = get_settings(ctx).db_path
    if not db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'sgpt-floor init' first."
        )
        ctx.exit(1)


def fail(ctx: click.Context, error: Exception) -> None:
    """Report an engine error and exit non-zero."""
    if isinstance(error, NotFoundError):
        message = str(error)
        echo_error(message[:1].upper() + message[1:] + ".")
    elif isinstance(error, InvalidStateError):
        echo_error(f"Invalid state: {error}")
    elif isinstance(error, (FloorError, ValueError)):
        echo_error(str(error))
    else:
        raise error
    ctx.exit(1)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def echo_outcome(outcome: Outcome) -> None:
    """Print a transition outcome the way a client would read it."""
    kind = outcome.kind
    if kind == "set_advanced":
        echo_success(
            f"Set complete. Rest for {outcome.rest_seconds} seconds. "
            f"Next: set {outcome.next_set} of {outcome.total_sets}"
        )
    elif kind == "exercise_advanced":
        echo_success(
            f"Next exercise: {outcome.exercise.name} "
            f"({outcome.sets} sets x {outcome.reps} reps)"
        )
    elif kind == "substituted":
        echo_warning(
            f"Equipment conflict: {outcome.from_exercise.name} is not available "
            f"({outcome.reason})."
        )
        echo_success(
            f"Switching to {outcome.to_exercise.name} "
            f"({outcome.sets} sets x {outcome.reps} reps). Coach has been notified."
        )
    elif kind == "waiting":
        echo_warning(
            f"{outcome.exercise.name} cannot start. Equipment in use: "
            f"{', '.join(outcome.conflicts)}. No alternatives available; "
            "wait for coach instruction."
        )
    else:
        echo_success("Workout complete! Great work today!")

    for warning in outcome.warnings:
        echo_warning(warning)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    # Calculate column widths
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = []

    header_line = ""
    for i, h in enumerate(headers):
        header_line += h.ljust(widths[i] + padding)
    lines.append(header_line)

    sep_line = ""
    for w in widths:
        sep_line += "-" * w + " " * padding
    lines.append(sep_line)

    for row in rows:
        row_line = ""
        for i, cell in enumerate(row):
            row_line += str(cell).ljust(widths[i] + padding)
        lines.append(row_line)

    return "\n".join(lines)
