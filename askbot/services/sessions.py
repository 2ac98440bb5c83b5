"""In-memory registry of open rock/paper/scissors challenges."""
from __future__ import annotations

import logging

from askbot.models.duel import DuelSession


log = logging.getLogger(__name__)


class SessionError(Exception):
    pass


class DuplicateSession(SessionError):
    """A challenge with this id is already open."""


class UnknownSession(SessionError):
    """No open challenge with this id (already resolved, retried, or forged)."""


class SessionRegistry:
    """Keyed store of open duels, scoped to the process lifetime.

    Entries are single use: ``consume`` reads and removes in one step so a
    duplicated select event cannot resolve the same duel twice. Abandoned
    challenges are never reaped.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, DuelSession] = {}

    def create(self, session_id: str, challenger_id: str, choice: str) -> DuelSession:
        if session_id in self._sessions:
            raise DuplicateSession(session_id)
        session = DuelSession(session_id=session_id, challenger_id=challenger_id, choice=choice)
        self._sessions[session_id] = session
        log.debug("Duel session %s opened by %s", session_id, challenger_id)
        return session

    def consume(self, session_id: str) -> DuelSession:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise UnknownSession(session_id)
        log.debug("Duel session %s consumed", session_id)
        return session

    def contains(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
