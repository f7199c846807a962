"""Session persistence collaborator used by the session lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from arena.models.session import UserSession


def _aware_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionRecord:
    id: str
    user_id: int
    expires_on: datetime
    expired: bool

    @classmethod
    def from_row(cls, row: UserSession) -> "SessionRecord":
        return cls(
            id=row.id,
            user_id=row.user_id,
            expires_on=_aware_utc(row.expires_on),
            expired=bool(row.expired),
        )


class SessionStore(Protocol):
    """Create/load/renew/expire session records keyed by (user_id, session_id).

    ``load`` and ``renew`` only match live sessions; ``expire`` matches any
    session not yet flagged expired. A ``None`` result means nothing matched.
    """

    def create(self, user_id: int, expires_on: datetime) -> Optional[SessionRecord]:
        ...

    def load(self, user_id: int, session_id: str) -> Optional[SessionRecord]:
        ...

    def renew(self, user_id: int, session_id: str, expires_on: datetime) -> Optional[SessionRecord]:
        ...

    def expire(self, user_id: int, session_id: str) -> Optional[SessionRecord]:
        ...


class SqlSessionStore:
    """SessionStore backed by the ``sessions`` table.

    Every call runs in its own short transaction. Mutations are single
    conditional UPDATE statements so two concurrent callers cannot both
    transition the same live session.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def _live(self, user_id: int, session_id: str, now: datetime):
        return (
            UserSession.id == session_id,
            UserSession.user_id == user_id,
            UserSession.expired == False,  # noqa: E712
            UserSession.expires_on > now,
        )

    def _fetch(self, db: Session, user_id: int, session_id: str) -> Optional[SessionRecord]:
        row = db.execute(
            select(UserSession).where(
                UserSession.id == session_id, UserSession.user_id == user_id
            )
        ).scalar_one_or_none()
        return SessionRecord.from_row(row) if row is not None else None

    def create(self, user_id: int, expires_on: datetime) -> Optional[SessionRecord]:
        with self._session_factory() as db:
            row = UserSession(user_id=user_id, expires_on=expires_on, expired=False)
            db.add(row)
            db.commit()
            db.refresh(row)
            if row.id is None:
                return None
            return SessionRecord.from_row(row)

    def load(self, user_id: int, session_id: str) -> Optional[SessionRecord]:
        with self._session_factory() as db:
            row = db.execute(
                select(UserSession).where(*self._live(user_id, session_id, self._clock()))
            ).scalar_one_or_none()
            return SessionRecord.from_row(row) if row is not None else None

    def renew(self, user_id: int, session_id: str, expires_on: datetime) -> Optional[SessionRecord]:
        with self._session_factory() as db:
            result = db.execute(
                update(UserSession)
                .where(*self._live(user_id, session_id, self._clock()))
                .values(expires_on=expires_on, updated_on=self._clock())
                .execution_options(synchronize_session=False)
            )
            db.commit()
            if result.rowcount == 0:
                return None
            return self._fetch(db, user_id, session_id)

    def expire(self, user_id: int, session_id: str) -> Optional[SessionRecord]:
        with self._session_factory() as db:
            result = db.execute(
                update(UserSession)
                .where(
                    UserSession.id == session_id,
                    UserSession.user_id == user_id,
                    UserSession.expired == False,  # noqa: E712
                )
                .values(expired=True, updated_on=self._clock())
                .execution_options(synchronize_session=False)
            )
            db.commit()
            if result.rowcount == 0:
                return None
            return self._fetch(db, user_id, session_id)
