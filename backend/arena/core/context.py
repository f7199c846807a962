"""Per-request values threaded through the auth pipeline"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class RequestCredentials:
    """Raw credentials pulled from the request envelope"""
    access_token: str
    csrf_token: str
    refresh_token: str


@dataclass(frozen=True)
class SessionContext:
    """Verified identity and session for the duration of one request"""
    user_id: Optional[int] = None
    session_id: Optional[str] = None
    expiry: Optional[datetime] = None

    def merge(self, session_id: str, expiry: datetime) -> "SessionContext":
        """Return a copy carrying the store's view of the session, keeping user_id"""
        return replace(self, session_id=session_id, expiry=expiry)

    def snapshot(self) -> dict:
        return {
            "user_id": self.user_id,
            "session_id": self.session_id,
            "expiry": self.expiry.isoformat() if self.expiry else None,
        }
