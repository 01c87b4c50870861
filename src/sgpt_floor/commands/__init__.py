"""CLI commands for sgpt-floor."""

from .clients import clients
from .decisions import alerts, decisions
from .equipment import equipment
from .init import init
from .programs import programs
from .serve import serve
from .session import session

__all__ = [
    "alerts",
    "clients",
    "decisions",
    "equipment",
    "init",
    "programs",
    "serve",
    "session",
]
