"""Live session commands."""

import click
import questionary
from questionary import Style

from ..errors import FloorError
from ..models.session import SessionStatus
from ..services import SessionService
from .base import (
    async_command,
    echo_info,
    echo_outcome,
    echo_success,
    echo_warning,
    ensure_initialized,
    fail,
    format_table,
    get_engine,
    get_settings,
    get_store,
)

custom_style = Style(
    [
        ("qmark", "fg:#673ab7 bold"),
        ("question", "bold"),
        ("answer", "fg:#f44336 bold"),
        ("pointer", "fg:#673ab7 bold"),
        ("highlighted", "fg:#673ab7 bold"),
        ("selected", "fg:#cc5454"),
        ("instruction", ""),
    ]
)


@click.group()
def session():
    """Run a small-group training session."""
    pass


async def _pick_clients(ctx: click.Context, max_clients: int) -> list[int]:
    store = get_store(ctx)
    clients = await store.clients.list_all()
    if not clients:
        echo_info("No clients yet. Add one with 'sgpt-floor clients add NAME'.")
        return []

    selected = await questionary.checkbox(
        f"Who is training today? (up to {max_clients})",
        choices=[questionary.Choice(f"{c.name} (#{c.id})", c.id) for c in clients],
        validate=lambda picked: (
            True if 0 < len(picked) <= max_clients else f"Pick between 1 and {max_clients} clients"
        ),
        style=custom_style,
    ).ask_async()
    return selected or []


@session.command("start")
@click.argument("client_ids", nargs=-1, type=int)
@click.option("--coach", default="Coach", help="Coach running the session")
@click.option("--duration", default=60, type=click.IntRange(min=1), help="Session length in minutes")
@click.pass_context
@async_command
async def start(ctx: click.Context, client_ids: tuple[int, ...], coach: str, duration: int):
    """Start a session for CLIENT_IDS.

    Without arguments, pick clients interactively. Each client runs the most
    recent program assigned to them.

    Examples:

        sgpt-floor session start 1 2 3 --coach Sam
    """
    ensure_initialized(ctx)
    settings = get_settings(ctx)

    ids = list(client_ids) or await _pick_clients(ctx, settings.max_clients)
    if not ids:
        echo_warning("No clients selected.")
        return

    service = SessionService(get_store(ctx), max_clients=settings.max_clients)
    try:
        new_session, states = await service.start_session(ids, coach, duration)
    except (FloorError, ValueError) as e:
        fail(ctx, e)
        return

    echo_success(f"Session {new_session.id} started with {len(states)} clients")
    click.echo()
    click.echo("Check clients in with:")
    for state in states:
        click.echo(f"  sgpt-floor session checkin {state.id}   # client {state.client_id}")


@session.command("status")
@click.argument("session_id", type=int)
@click.pass_context
@async_command
async def status(ctx: click.Context, session_id: int):
    """Show every client's position in a session."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    try:
        current = await store.sessions.get(session_id)
        rows = await SessionService(store).board(session_id)
    except FloorError as e:
        fail(ctx, e)
        return

    click.echo()
    click.echo(
        click.style(f"Session {session_id}", bold=True)
        + f" - {current.coach_name}, {current.duration_minutes} min, "
        + current.get_status_display()
    )
    click.echo()

    table = [
        [
            str(row.state_id),
            row.client_name,
            row.status.value,
            row.exercise_name or "-",
            f"{row.current_set}/{row.total_sets}" if row.total_sets else "-",
            f"{row.exercise_position}/{row.program_length}",
            f"{row.rest_remaining_seconds}s" if row.rest_remaining_seconds else "-",
            str(row.last_rpe) if row.last_rpe is not None else "-",
            ", ".join(row.equipment_in_use) or "-",
        ]
        for row in rows
    ]
    click.echo(
        format_table(
            ["State", "Client", "Status", "Exercise", "Set", "Exercise #", "Rest", "RPE", "Equipment"],
            table,
        )
    )


@session.command("checkin")
@click.argument("state_id", type=int)
@click.pass_context
@async_command
async def checkin(ctx: click.Context, state_id: int):
    """Put a ready or waiting client onto their exercise."""
    ensure_initialized(ctx)

    engine = get_engine(ctx)
    try:
        outcome = await engine.start(state_id)
    except FloorError as e:
        fail(ctx, e)
        return

    echo_outcome(outcome)


@session.command("advance")
@click.argument("state_id", type=int)
@click.pass_context
@async_command
async def advance(ctx: click.Context, state_id: int):
    """Mark the current set completed for a client.

    A waiting client is retried against the equipment they were blocked on.
    """
    ensure_initialized(ctx)

    engine = get_engine(ctx)
    try:
        outcome = await engine.advance(state_id)
    except FloorError as e:
        fail(ctx, e)
        return

    echo_outcome(outcome)


@session.command("rpe")
@click.argument("state_id", type=int)
@click.argument("rpe", type=int)
@click.pass_context
@async_command
async def rpe(ctx: click.Context, state_id: int, rpe: int):
    """Report a client's rate of perceived exertion (0-10)."""
    ensure_initialized(ctx)

    engine = get_engine(ctx)
    try:
        result = await engine.submit_exertion(state_id, rpe)
    except (FloorError, ValueError) as e:
        fail(ctx, e)
        return

    if result.extension_seconds:
        echo_success(
            f"Rest extended by {result.extension_seconds}s "
            f"(now {result.new_rest_seconds}s)"
        )
    else:
        echo_success(f"RPE {rpe} recorded. Rest stays at {result.new_rest_seconds}s")
    if result.alert_raised:
        echo_warning("Coach alerted about high exertion.")
    for warning in result.warnings:
        echo_warning(warning)


@session.command("pain")
@click.argument("state_id", type=int)
@click.argument("description")
@click.pass_context
@async_command
async def pain(ctx: click.Context, state_id: int, description: str):
    """Escalate a client's pain report to the coach."""
    ensure_initialized(ctx)

    service = SessionService(get_store(ctx))
    try:
        warnings = await service.report_pain(state_id, description)
    except (FloorError, ValueError) as e:
        fail(ctx, e)
        return

    echo_warning("Pain reported. Coach must assess before the client continues.")
    for warning in warnings:
        echo_warning(warning)


@session.command("end")
@click.argument("session_id", type=int)
@click.pass_context
@async_command
async def end(ctx: click.Context, session_id: int):
    """End a session. Further set events for it are rejected."""
    ensure_initialized(ctx)

    service = SessionService(get_store(ctx))
    try:
        ended = await service.end_session(session_id)
    except FloorError as e:
        fail(ctx, e)
        return

    echo_success(f"Session {ended.id} {ended.get_status_display().lower()}")


@session.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include completed sessions")
@click.pass_context
@async_command
async def list_sessions(ctx: click.Context, show_all: bool):
    """List sessions."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    sessions = await store.sessions.list_by_status(SessionStatus.ACTIVE)
    if show_all:
        sessions += await store.sessions.list_by_status(SessionStatus.COMPLETED)

    if not sessions:
        echo_info("No sessions found.")
        return

    rows = [
        [
            str(s.id),
            s.started_at.strftime("%Y-%m-%d %H:%M"),
            s.coach_name,
            f"{s.duration_minutes} min",
            s.get_status_display(),
        ]
        for s in sorted(sessions, key=lambda s: s.id)
    ]
    click.echo(format_table(["ID", "Started", "Coach", "Length", "Status"], rows))
