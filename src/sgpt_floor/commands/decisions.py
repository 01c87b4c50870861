"""Decision log and alert commands."""

import click

from ..errors import FloorError
from ..services import NarrationService, describe_equipment
from .base import (
    async_command,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    fail,
    format_table,
    get_engine,
    get_settings,
    get_store,
)


def _truncate(text: str, width: int = 60) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


@click.group()
def decisions():
    """Review the decision log."""
    pass


@decisions.command("list")
@click.option("--session", "session_id", type=int, help="Only decisions for this session")
@click.option("--limit", "-n", default=20, type=click.IntRange(min=1), help="Number of entries")
@click.pass_context
@async_command
async def list_decisions(ctx: click.Context, session_id: int | None, limit: int):
    """List recent decisions, newest first."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    records = await store.decisions.list_recent(limit=limit, session_id=session_id)
    if not records:
        echo_info("No decisions recorded yet.")
        return

    rows = []
    for record in records:
        if record.requires_approval and not record.approved:
            approval = click.style("pending", fg="yellow")
        else:
            approval = "auto"
        rows.append(
            [
                str(record.id),
                record.created_at.strftime("%H:%M:%S") if record.created_at else "",
                record.trigger_type.value,
                _truncate(record.decision),
                approval,
            ]
        )

    click.echo(format_table(["ID", "Time", "Trigger", "Decision", "Approval"], rows))


@decisions.command("narrate")
@click.argument("scenario")
@click.option("--session", "session_id", type=int, help="Session the scenario happened in")
@click.option("--client", "client_id", type=int, help="Client involved")
@click.option("--time-remaining", type=int, help="Minutes left in the session")
@click.pass_context
@async_command
async def narrate(
    ctx: click.Context,
    scenario: str,
    session_id: int | None,
    client_id: int | None,
    time_remaining: int | None,
):
    """Ask for coaching guidance on a free-text SCENARIO.

    Requires OPENAI_API_KEY. The answer is recorded in the decision log.

    Examples:

        sgpt-floor decisions narrate "Client says knee feels weird on lunges" --session 1 --client 2
    """
    ensure_initialized(ctx)
    settings = get_settings(ctx)
    engine = get_engine(ctx)

    client_name = None
    if client_id is not None:
        client = await engine.store.clients.get(client_id)
        client_name = client.name if client else None

    try:
        equipment_status = None
        if session_id is not None:
            equipment_status = describe_equipment(await engine.equipment_board(session_id))

        service = NarrationService(
            engine.audit,
            api_key=settings.openai_api_key,
            model=settings.narration_model,
        )
        click.echo(click.style("Asking for guidance...", dim=True))
        text, warnings = await service.narrate(
            scenario,
            client_name=client_name,
            equipment_status=equipment_status,
            time_remaining=time_remaining,
            session_id=session_id,
            client_id=client_id,
        )
    except (FloorError, ValueError) as e:
        fail(ctx, e)
        return

    click.echo()
    click.echo(text)
    click.echo()
    echo_success("Recorded in the decision log")
    for warning in warnings:
        echo_warning(warning)


@click.group()
def alerts():
    """Review operator alerts."""
    pass


@alerts.command("list")
@click.option("--session", "session_id", type=int, help="Only alerts for this session")
@click.option("--action-only", is_flag=True, help="Only alerts that need coach action")
@click.option("--limit", "-n", default=20, type=click.IntRange(min=1), help="Number of entries")
@click.pass_context
@async_command
async def list_alerts(
    ctx: click.Context, session_id: int | None, action_only: bool, limit: int
):
    """List recent alerts, newest first."""
    ensure_initialized(ctx)

    store = get_store(ctx)
    items = await store.alerts.list_recent(
        limit=limit,
        session_id=session_id,
        requires_action=True if action_only else None,
    )
    if not items:
        echo_info("No alerts.")
        return

    rows = [
        [
            str(alert.id),
            alert.created_at.strftime("%H:%M:%S") if alert.created_at else "",
            alert.alert_type.value,
            click.style("ACTION", fg="red") if alert.requires_action else "",
            _truncate(alert.message),
        ]
        for alert in items
    ]
    click.echo(format_table(["ID", "Time", "Type", "", "Message"], rows))
