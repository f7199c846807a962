"""Game settings routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from arena.api.deps import verify_session
from arena.core.context import SessionContext
from arena.core.database import get_db
from arena.schemas.game_settings import GameSettingsUpdate
from arena.schemas.response import APIResponse, ErrorResponse, ok
from arena.services.game_settings_service import game_settings_service

router = APIRouter(responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}})


@router.get("/game-settings", response_model=APIResponse)
def get_game_settings(
    context: SessionContext = Depends(verify_session),
    db: Session = Depends(get_db),
):
    """Get current user's game settings"""
    settings = game_settings_service.get_settings(db, context.user_id)
    return ok(settings=settings)


@router.put("/update-game-settings", response_model=APIResponse)
def update_game_settings(
    changes: GameSettingsUpdate,
    context: SessionContext = Depends(verify_session),
    db: Session = Depends(get_db),
):
    """
    Update current user's game settings

    Args:
        changes: Player name, game time, last game outcome, commentary or avatar
        context: Verified session
        db: Database session
    """
    settings = game_settings_service.update_settings(db, context.user_id, changes)
    return ok(settings=settings)
