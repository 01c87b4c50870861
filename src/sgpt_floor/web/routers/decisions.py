"""Decision log and alert routes."""

from fastapi import APIRouter, Form, Query, Request

from ...engine import FloorEngine
from ...services import NarrationService, describe_equipment

router = APIRouter(prefix="/decisions", tags=["decisions"])
alerts_router = APIRouter(prefix="/alerts", tags=["alerts"])


def get_engine(request: Request) -> FloorEngine:
    """Get the shared engine from app state."""
    return request.app.state.engine


def get_narrator(request: Request) -> NarrationService:
    """Narration service; tests can install their own on app state."""
    narrator = getattr(request.app.state, "narrator", None)
    if narrator is None:
        settings = request.app.state.settings
        narrator = NarrationService(
            get_engine(request).audit,
            api_key=settings.openai_api_key,
            model=settings.narration_model,
        )
        request.app.state.narrator = narrator
    return narrator


@router.get("")
async def list_decisions(
    request: Request,
    session_id: int | None = None,
    limit: int = Query(20, ge=1, le=200),
):
    """Recent decisions, newest first."""
    records = await get_engine(request).store.decisions.list_recent(
        limit=limit, session_id=session_id
    )
    return {"decisions": [r.to_dict() for r in records]}


@router.post("/narrate")
async def narrate(
    request: Request,
    scenario: str = Form(...),
    session_id: int | None = Form(None),
    client_id: int | None = Form(None),
    time_remaining: int | None = Form(None),
):
    """Ask the language model for coaching guidance and log it."""
    engine = get_engine(request)

    client_name = None
    if client_id is not None:
        client = await engine.store.clients.get(client_id)
        client_name = client.name if client else None

    equipment_status = None
    if session_id is not None:
        equipment_status = describe_equipment(await engine.equipment_board(session_id))

    text, warnings = await get_narrator(request).narrate(
        scenario,
        client_name=client_name,
        equipment_status=equipment_status,
        time_remaining=time_remaining,
        session_id=session_id,
        client_id=client_id,
    )
    return {"decision": text, "warnings": warnings}


@alerts_router.get("")
async def list_alerts(
    request: Request,
    session_id: int | None = None,
    requires_action: bool | None = None,
    limit: int = Query(20, ge=1, le=200),
):
    """Recent alerts, newest first."""
    alerts = await get_engine(request).store.alerts.list_recent(
        limit=limit, session_id=session_id, requires_action=requires_action
    )
    return {"alerts": [a.to_dict() for a in alerts]}
