"""FastAPI application for the sgpt-floor API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import Settings
from ..db.engine import init_db
from ..db.store import Store
from ..engine import FloorEngine
from ..errors import (
    InvalidStateError,
    NarrationUnavailableError,
    NotFoundError,
)
from .routers import decisions, equipment, sessions

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler - runs on startup and shutdown."""
        # Startup: make sure the schema exists
        await init_db(settings.db_path)
        logger.info("Serving database %s", settings.db_path)
        yield

    app = FastAPI(
        title="sgpt-floor",
        description="Small-group training session coordinator",
        version="0.1.0",
        lifespan=lifespan,
    )

    # One engine per app so every request shares the per-session locks
    store = Store(settings.db_path)
    app.state.settings = settings
    app.state.store = store
    app.state.engine = FloorEngine(store, settings)

    app.include_router(sessions.router)
    app.include_router(equipment.router)
    app.include_router(decisions.router)
    app.include_router(decisions.alerts_router)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(InvalidStateError)
    async def invalid_state(request: Request, exc: InvalidStateError):
        return JSONResponse(status_code=409, content={"error": str(exc)})

    @app.exception_handler(ValueError)
    async def bad_request(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(NarrationUnavailableError)
    async def narration_unavailable(request: Request, exc: NarrationUnavailableError):
        return JSONResponse(status_code=503, content={"error": str(exc)})

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": "0.1.0"}

    return app
