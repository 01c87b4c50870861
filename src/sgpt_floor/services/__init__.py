"""Services built around the session engine."""

from .narration import NarrationService, describe_equipment
from .sessions import ClientBoardRow, SessionService

__all__ = ["ClientBoardRow", "NarrationService", "SessionService", "describe_equipment"]
