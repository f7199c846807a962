"""Per-user game settings and stats"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from arena.core.database import Base

DEFAULT_GAME_TIME = 60


class GameSettings(Base):
    """Game settings owned by a single user"""

    __tablename__ = "game_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    player_name = Column(String(100), nullable=False)
    wins = Column(Integer, default=0, nullable=False)
    losses = Column(Integer, default=0, nullable=False)
    games_played = Column(Integer, default=0, nullable=False)
    game_time = Column(Integer, default=DEFAULT_GAME_TIME, nullable=False)
    created_on = Column(DateTime(timezone=True), server_default=func.now())
    updated_on = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="game_settings")

    __table_args__ = (
        CheckConstraint('game_time >= 5', name='chk_game_time'),
        CheckConstraint('wins >= 0 AND losses >= 0 AND games_played >= 0', name='chk_counters'),
    )

    def __repr__(self):
        return f"<GameSettings(user_id={self.user_id}, games_played={self.games_played})>"

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "userId": self.user_id,
            "playerName": self.player_name,
            "wins": self.wins,
            "losses": self.losses,
            "gamesPlayed": self.games_played,
            "gameTime": self.game_time,
        }
