"""Equipment routes: catalog, occupancy board and substitution preview."""

from fastapi import APIRouter, Form, Request

from ...engine import FloorEngine
from ...errors import NotFoundError

router = APIRouter(prefix="/equipment", tags=["equipment"])


def get_engine(request: Request) -> FloorEngine:
    """Get the shared engine from app state."""
    return request.app.state.engine


@router.get("")
async def catalog(request: Request):
    """Facility equipment with quantities."""
    items = await get_engine(request).store.equipment.list_all()
    return {"equipment": [item.to_dict() for item in items]}


@router.get("/sessions/{session_id}")
async def board(request: Request, session_id: int):
    """Occupancy of every item within a session."""
    usage = await get_engine(request).equipment_board(session_id)
    return {"session_id": session_id, "equipment": [u.to_dict() for u in usage]}


@router.post("/sessions/{session_id}/check")
async def check(request: Request, session_id: int, names: list[str] = Form(...)):
    """Check whether the named equipment is free."""
    availability = await get_engine(request).check_availability(session_id, names)
    return availability.to_dict()


@router.get("/sessions/{session_id}/alternatives/{exercise_id}")
async def alternative(request: Request, session_id: int, exercise_id: int):
    """Preview the substitute that would replace an exercise right now."""
    engine = get_engine(request)
    exercise = await engine.store.exercises.get(exercise_id)
    if exercise is None:
        raise NotFoundError("exercise", exercise_id)

    found = await engine.find_alternative(exercise_id, session_id)
    return {
        "exercise": exercise.name,
        "alternative": {"id": found.id, **found.to_dict()} if found else None,
    }
