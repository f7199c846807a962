"""Database models"""

from arena.models.user import User
from arena.models.session import UserSession
from arena.models.game_settings import GameSettings

__all__ = ["User", "UserSession", "GameSettings"]
