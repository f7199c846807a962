"""User routes"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from arena.api.deps import verify_session
from arena.core.context import SessionContext
from arena.core.database import get_db
from arena.schemas.response import APIResponse, ErrorResponse, ok
from arena.schemas.user import SignupRequest, UpdateUserRequest
from arena.services.game_settings_service import game_settings_service
from arena.services.user_service import user_service

router = APIRouter(responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}})


@router.post("/signup", response_model=APIResponse, status_code=status.HTTP_200_OK)
def signup(
    user_data: SignupRequest,
    db: Session = Depends(get_db),
):
    """
    Create a user together with default game settings

    Args:
        user_data: Name, email, password and avatar
        db: Database session
    """
    try:
        user = user_service.create_user(db, user_data)
        game_settings_service.create_settings(db, user.id, user_data.name)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return ok()


@router.get("/user", response_model=APIResponse)
def get_user(
    context: SessionContext = Depends(verify_session),
    db: Session = Depends(get_db),
):
    """
    Get current user profile

    Args:
        context: Verified session
        db: Database session
    """
    user = user_service.get_user(db, context.user_id)
    return ok(user=user.model_dump())


@router.put("/update-user", response_model=APIResponse)
def update_user(
    changes: UpdateUserRequest,
    context: SessionContext = Depends(verify_session),
    db: Session = Depends(get_db),
):
    """
    Update current user's name and/or email

    Args:
        changes: Fields to update
        context: Verified session
        db: Database session
    """
    user = user_service.update_user(db, context.user_id, changes)
    return ok(user=user.model_dump())
