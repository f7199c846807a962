"""Authentication routes"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from arena.api.deps import (
    get_session_lifecycle,
    get_settings,
    get_token_codec,
    resolve_logout_context,
    verify_refresh_binding,
)
from arena.api.issuance import clear_auth_cookies, expire_session, generate_session, generate_tokens
from arena.config import Settings
from arena.core.context import SessionContext
from arena.core.database import get_db
from arena.core.exceptions import AppError
from arena.core.responses import error_response
from arena.core.tokens import TokenCodec
from arena.schemas.response import APIResponse, ErrorResponse, ok
from arena.schemas.user import LoginRequest, SessionPayload
from arena.services.session_service import SessionLifecycle
from arena.services.user_service import user_service

router = APIRouter(responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}})


@router.post("/login", response_model=APIResponse, status_code=status.HTTP_200_OK)
def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    codec: TokenCodec = Depends(get_token_codec),
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
):
    """
    Login endpoint - verify credentials, start a session and set auth cookies

    Args:
        credentials: Email and password

    Returns:
        Session expiry with the user's name and avatar
    """
    user = user_service.verify_credentials(db, credentials.email, credentials.password)

    context = generate_session(lifecycle, user.id)
    access = generate_tokens(codec, settings, context, response)

    return ok(session=SessionPayload(expiry=access.expiry, name=user.name, avatar=user.avatar).model_dump())


@router.get("/refresh", response_model=APIResponse)
def refresh(
    response: Response,
    context: SessionContext = Depends(verify_refresh_binding),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    codec: TokenCodec = Depends(get_token_codec),
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
):
    """
    Rotate the current session and issue fresh tokens

    Args:
        context: Verified session whose refresh token matched the access token

    Returns:
        New session expiry with the user's name and avatar
    """
    user = user_service.get_user(db, context.user_id)

    rotated = generate_session(lifecycle, context.user_id, previous=context)
    access = generate_tokens(codec, settings, rotated, response)

    return ok(session=SessionPayload(expiry=access.expiry, name=user.name, avatar=user.avatar).model_dump())


@router.post("/logout", response_model=APIResponse)
def logout(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    codec: TokenCodec = Depends(get_token_codec),
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
):
    """
    Logout endpoint - clear auth cookies and expire the session

    Cookies are cleared whatever happens: an expired access token falls back
    to the refresh token to find the session, and any failure still answers
    with the cookie deletions attached.
    """
    try:
        context = resolve_logout_context(request, settings, codec)
        expire_session(lifecycle, settings, context, response)
    except AppError as exc:
        failed = error_response(exc)
        clear_auth_cookies(failed, settings)
        return failed

    return ok()
