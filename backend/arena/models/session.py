"""Login session model"""

import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from arena.core.database import Base


def _new_session_id() -> str:
    return uuid.uuid4().hex


class UserSession(Base):
    """One authenticated login instance. ``expired`` only ever moves from False to True."""

    __tablename__ = "sessions"

    id = Column(String(32), primary_key=True, default=_new_session_id)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_on = Column(DateTime(timezone=True), nullable=False)
    expired = Column(Boolean, default=False, nullable=False)
    created_on = Column(DateTime(timezone=True), server_default=func.now())
    updated_on = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index('idx_sessions_user_expired', 'user_id', 'expired'),
    )

    def __repr__(self):
        return f"<UserSession(id='{self.id}', user_id={self.user_id}, expired={self.expired})>"
