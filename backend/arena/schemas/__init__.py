"""Pydantic schemas for API validation"""

from arena.schemas.user import (
    Avatar,
    SignupRequest,
    LoginRequest,
    UpdateUserRequest,
    UserProfile,
    SessionPayload,
)
from arena.schemas.game_settings import GameSettingsUpdate
from arena.schemas.response import APIResponse, ErrorResponse

__all__ = [
    "Avatar", "SignupRequest", "LoginRequest", "UpdateUserRequest", "UserProfile", "SessionPayload",
    "GameSettingsUpdate",
    "APIResponse", "ErrorResponse",
]
