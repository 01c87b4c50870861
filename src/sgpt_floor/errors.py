"""Error taxonomy shared by the engine, services and outer surfaces."""


class FloorError(Exception):
    """Base class for sgpt-floor errors."""


class NotFoundError(FloorError):
    """A referenced record does not exist. No state was mutated."""

    def __init__(self, kind: str, key: object):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key} not found")


class InvalidStateError(FloorError):
    """Stored state is outside its allowed bounds (data corruption)."""


class MalformedRecordError(FloorError, ValueError):
    """A stored row could not be converted into its typed record."""


class SessionFullError(FloorError, ValueError):
    """A session was requested with more clients than allowed."""


class NarrationUnavailableError(FloorError):
    """The external decision narration service cannot be reached."""


class AuditWriteFailure(FloorError):
    """A decision record or alert could not be written.

    Never raised past a committed transition; carried on the outcome as a
    warning instead.
    """
