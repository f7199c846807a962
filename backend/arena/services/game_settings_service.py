"""Game settings service - per-user settings and win/loss counters"""

from sqlalchemy.orm import Session
from arena.models.game_settings import GameSettings
from arena.models.user import User
from arena.schemas.game_settings import GameSettingsUpdate
from arena.core.exceptions import BadRequestError, NotFoundError
import logging

logger = logging.getLogger(__name__)
GAME_LOGGER_NAME = "arena.game"


def game_log(user_id: int, games_played: int) -> logging.Logger:
    """Transcript logger for one game, named `arena.game.<user_id>_<games_played>`"""
    return logging.getLogger(f"{GAME_LOGGER_NAME}.{user_id}_{games_played}")


class GameSettingsService:
    """Service for game settings"""

    @staticmethod
    def create_settings(db: Session, user_id: int, player_name: str) -> GameSettings:
        """Create default settings for a new user (flushed, not committed)"""
        settings = GameSettings(user_id=user_id, player_name=player_name)
        db.add(settings)
        db.flush()
        return settings

    @staticmethod
    def get_settings(db: Session, user_id: int) -> dict:
        """Get a user's game settings"""
        settings = db.query(GameSettings).filter(GameSettings.user_id == user_id).first()
        if settings is None:
            raise NotFoundError("user")
        return settings.to_dict()

    @staticmethod
    def update_settings(db: Session, user_id: int, changes: GameSettingsUpdate) -> dict:
        """
        Update a user's game settings

        ``won``/``lost`` record the outcome of the last game: each bumps
        ``games_played`` once plus the matching counter.

        Args:
            db: Database session
            user_id: User ID
            changes: Requested changes

        Returns:
            Updated settings
        """
        settings = db.query(GameSettings).filter(GameSettings.user_id == user_id).first()
        if settings is None:
            raise NotFoundError("user")

        has_update = False

        if changes.player_name is not None:
            settings.player_name = changes.player_name
            has_update = True

        if changes.game_time is not None:
            settings.game_time = changes.game_time
            has_update = True

        if changes.won or changes.lost:
            settings.games_played += 1
            if changes.won:
                settings.wins += 1
            if changes.lost:
                settings.losses += 1
            has_update = True

        if changes.avatar is not None:
            user = db.query(User).filter(User.id == user_id).first()
            if user is None:
                raise NotFoundError("user")
            user.avatar = changes.avatar.value
            has_update = True

        if not has_update:
            logger.error("Game settings update without changes", extra={"user_id": user_id})
            raise BadRequestError("no update provided")

        db.commit()
        db.refresh(settings)

        game_log(user_id, settings.games_played).info(changes.commentary or " ")

        return settings.to_dict()


game_settings_service = GameSettingsService()
