"""Session lifecycle - create, load, renew and expire login sessions"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import logging

from arena.core.exceptions import UnAuthorizedError, UnresolvedError
from arena.services.session_store import SessionRecord, SessionStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionInfo:
    session_id: str
    expiry: datetime


class SessionLifecycle:
    """
    State transitions over stored sessions.

    Live --renew--> Live, Live --expire--> Dead. Dead is terminal.
    """

    def __init__(
        self,
        store: SessionStore,
        refresh_ttl: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._refresh_ttl = refresh_ttl
        self._clock = clock

    def _checked(self, record: Optional[SessionRecord]) -> SessionInfo:
        if record is None:
            raise UnresolvedError("session")
        # The store only returns live rows; a flagged row here means it was expired underneath us
        if record.expired:
            raise UnAuthorizedError("user")
        return SessionInfo(session_id=record.id, expiry=record.expires_on)

    def create(self, user_id: int) -> SessionInfo:
        """
        Create new session

        Args:
            user_id: Session owner

        Returns:
            SessionInfo: new session id and its expiry

        Raises:
            UnresolvedError: The store did not insert anything
        """
        record = self._store.create(user_id, self._clock() + self._refresh_ttl)
        if record is None:
            raise UnresolvedError("session created")

        logger.info("Session created user_id=%s session_id=%s", user_id, record.id)
        return SessionInfo(session_id=record.id, expiry=record.expires_on)

    def load(self, user_id: int, session_id: str) -> SessionInfo:
        """
        Load a live session

        Raises:
            UnresolvedError: No live session matches
            UnAuthorizedError: Session is flagged expired
        """
        return self._checked(self._store.load(user_id, session_id))

    def renew(self, user_id: int, session_id: str) -> SessionInfo:
        """Push the expiry of a live session to now + refresh TTL"""
        return self._checked(
            self._store.renew(user_id, session_id, self._clock() + self._refresh_ttl)
        )

    def expire(self, user_id: int, session_id: str) -> bool:
        """
        Expire a session

        Raises:
            UnresolvedError: No session left to expire (already expired or unknown)
        """
        record = self._store.expire(user_id, session_id)
        if record is None:
            raise UnresolvedError("session")

        logger.info("Session expired user_id=%s session_id=%s", user_id, session_id)
        return True
