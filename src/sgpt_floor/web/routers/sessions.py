"""Session routes: setup, live transitions and the client board."""

from fastapi import APIRouter, Form, Request

from ...engine import FloorEngine
from ...errors import NotFoundError
from ...models.session import SessionStatus
from ...services import SessionService

router = APIRouter(prefix="/sessions", tags=["sessions"])


def get_engine(request: Request) -> FloorEngine:
    """Get the shared engine from app state."""
    return request.app.state.engine


def get_service(request: Request) -> SessionService:
    """Session service bound to the shared engine's store, audit trail and locks."""
    engine = get_engine(request)
    return SessionService(
        engine.store,
        engine.audit,
        max_clients=request.app.state.settings.max_clients,
        locks=engine.locks,
    )


@router.get("")
async def list_sessions(request: Request, status: SessionStatus = SessionStatus.ACTIVE):
    """List sessions by status."""
    sessions = await get_engine(request).store.sessions.list_by_status(status)
    return {"sessions": [{"id": s.id, **s.to_dict()} for s in sessions]}


@router.post("", status_code=201)
async def start_session(
    request: Request,
    client_ids: list[int] = Form(...),
    coach_name: str = Form("Coach"),
    duration_minutes: int = Form(60),
):
    """Start a session for up to six clients."""
    session, states = await get_service(request).start_session(
        client_ids, coach_name, duration_minutes
    )
    return {
        "session": {"id": session.id, **session.to_dict()},
        "states": [{"id": s.id, **s.to_dict()} for s in states],
    }


@router.get("/{session_id}")
async def get_session(request: Request, session_id: int):
    """Session details with one board row per client."""
    engine = get_engine(request)
    session = await engine.store.sessions.get(session_id)
    if session is None:
        raise NotFoundError("session", session_id)

    rows = await get_service(request).board(session_id)
    return {
        "session": {"id": session.id, **session.to_dict()},
        "clients": [row.to_dict() for row in rows],
    }


@router.post("/{session_id}/end")
async def end_session(request: Request, session_id: int):
    """End a session."""
    session = await get_service(request).end_session(session_id)
    return {"status": session.status.value, "session_id": session.id}


@router.post("/states/{state_id}/checkin")
async def checkin(request: Request, state_id: int):
    """Put a ready or waiting client onto their exercise."""
    outcome = await get_engine(request).start(state_id)
    return outcome.to_dict()


@router.post("/states/{state_id}/advance")
async def advance(request: Request, state_id: int):
    """Mark the current set completed."""
    outcome = await get_engine(request).advance(state_id)
    return outcome.to_dict()


@router.post("/states/{state_id}/rpe")
async def submit_rpe(request: Request, state_id: int, rpe: int = Form(...)):
    """Report exertion and extend rest."""
    result = await get_engine(request).submit_exertion(state_id, rpe)
    return result.to_dict()


@router.post("/states/{state_id}/pain")
async def report_pain(request: Request, state_id: int, description: str = Form(...)):
    """Escalate a pain report to the coach."""
    warnings = await get_service(request).report_pain(state_id, description)
    return {"status": "escalated", "warnings": warnings}
