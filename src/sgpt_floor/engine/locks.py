"""Per-session mutual exclusion."""

import asyncio


class SessionLocks:
    """Hands out one asyncio lock per session.

    The lock orders transitions for a session within one process. Writers in
    other processes are ordered by the database transaction in
    ``SessionStateRepository.claim``.
    """

    def __init__(self):
        self._locks: dict[int, asyncio.Lock] = {}

    def for_session(self, session_id: int) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def discard(self, session_id: int) -> None:
        """Forget an ended session's lock."""
        self._locks.pop(session_id, None)
