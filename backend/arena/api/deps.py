"""API dependencies - token and session verification pipeline

Protected routes depend on ``verify_session``, which pulls in, in order:

    extract_credentials -> verify_tokens -> verify_session

Each stage either raises (short-circuiting the request) or returns a new
immutable value for the next one.
"""

from typing import Optional

from fastapi import Depends, Request
import logging

from arena.config import Settings
from arena.core.context import RequestCredentials, SessionContext
from arena.core.exceptions import (
    ForbiddenError,
    InvalidTokenError,
    TokenExpiredError,
    UnAuthorizedError,
    UnresolvedError,
)
from arena.core.security import unsign_cookie
from arena.core.tokens import TokenCodec
from arena.services.session_service import SessionLifecycle

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "auth-token"
CSRF_TOKEN_COOKIE = "xsrf-token"
REFRESH_TOKEN_COOKIE = "refreshToken"
CSRF_TOKEN_HEADER = "X-XSRF-Token"

BEARER_PREFIX = "Bearer "


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_session_lifecycle(request: Request) -> SessionLifecycle:
    return request.app.state.session_lifecycle


def _strip_bearer(value: str) -> str:
    value = value.strip()
    if value.startswith(BEARER_PREFIX):
        value = value[len(BEARER_PREFIX):]
    return value.strip()


def _read_access_token(request: Request) -> str:
    raw_token = request.headers.get("Authorization") or request.cookies.get(ACCESS_TOKEN_COOKIE)
    return _strip_bearer(raw_token) if raw_token else ""


def _read_csrf_token(request: Request) -> str:
    return request.cookies.get(CSRF_TOKEN_COOKIE) or request.headers.get(CSRF_TOKEN_HEADER) or ""


def _read_refresh_token(request: Request, settings: Settings) -> Optional[str]:
    """Refresh token from its signed cookie, None if missing or tampered with"""
    return unsign_cookie(request.cookies.get(REFRESH_TOKEN_COOKIE), settings.COOKIE_SECRET)


def extract_credentials(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> RequestCredentials:
    """
    Read access, CSRF and refresh tokens from the request

    Raises:
        UnAuthorizedError: Access token missing, refresh cookie missing or tampered with
        ForbiddenError: CSRF token missing
    """
    path = request.url.path

    access_token = _read_access_token(request)
    if not access_token:
        logger.error("Access token missing", extra={"path": path})
        raise UnAuthorizedError("access token")

    csrf_token = _read_csrf_token(request)
    if not csrf_token:
        logger.error("CSRF token missing", extra={"path": path})
        raise ForbiddenError("csrf token")

    refresh_token = _read_refresh_token(request, settings)
    if not refresh_token:
        logger.error("Refresh token cookie missing or badly signed", extra={"path": path})
        raise UnAuthorizedError("refresh token")

    return RequestCredentials(
        access_token=access_token,
        csrf_token=csrf_token,
        refresh_token=refresh_token,
    )


def verify_tokens(
    request: Request,
    credentials: RequestCredentials = Depends(extract_credentials),
    codec: TokenCodec = Depends(get_token_codec),
) -> SessionContext:
    """
    Verify the access token against its CSRF companion

    Returns:
        SessionContext: identity taken from the verified claims
    """
    log_extra = {"path": request.url.path, "method": request.method}
    try:
        claims = codec.verify_access_token(credentials.access_token, credentials.csrf_token)
    except TokenExpiredError as exc:
        logger.error(f"Access token expired: {exc}", extra=log_extra)
        raise UnAuthorizedError("access token expired")
    except InvalidTokenError as exc:
        logger.error(f"Access token rejected: {exc}", extra=log_extra)
        raise UnAuthorizedError("access token")

    return SessionContext(user_id=claims.user_id, session_id=claims.session_id)


def verify_session(
    context: SessionContext = Depends(verify_tokens),
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> SessionContext:
    """
    Check the session named by the access token is still live

    The stored session is the authority: a token whose signature and expiry
    check out is still rejected once its session has been expired.
    """
    try:
        session = lifecycle.load(context.user_id, context.session_id)
    except (UnresolvedError, UnAuthorizedError) as exc:
        logger.error(
            f"Session rejected: {exc.message}",
            extra={"session": context.snapshot()},
        )
        raise UnAuthorizedError("session")

    return context.merge(session_id=session.session_id, expiry=session.expiry)


def verify_refresh_binding(
    context: SessionContext = Depends(verify_session),
    credentials: RequestCredentials = Depends(extract_credentials),
    codec: TokenCodec = Depends(get_token_codec),
) -> SessionContext:
    """
    Refresh-route only: the refresh token must be valid and name the same
    user and session as the access token.
    """
    try:
        claims = codec.verify_refresh_token(credentials.refresh_token)
    except InvalidTokenError:
        logger.error("Refresh token rejected", extra={"session": context.snapshot()})
        raise UnAuthorizedError("refresh token")

    if claims.user_id != context.user_id or claims.session_id != context.session_id:
        logger.error(
            "Refresh token does not match access token",
            extra={"session": context.snapshot()},
        )
        raise UnAuthorizedError("refresh token")

    return context


def resolve_logout_context(request: Request, settings: Settings, codec: TokenCodec) -> SessionContext:
    """
    Identify the session a logout should end

    Logout is not gated on a live access token. A valid access/CSRF pair names
    the session; otherwise the signed refresh token does, so a client whose
    access token has expired can still end its session.

    Raises:
        UnAuthorizedError: Neither token identifies a session
    """
    path = request.url.path

    access_token = _read_access_token(request)
    csrf_token = _read_csrf_token(request)
    if access_token and csrf_token:
        try:
            claims = codec.verify_access_token(access_token, csrf_token)
            return SessionContext(user_id=claims.user_id, session_id=claims.session_id)
        except InvalidTokenError as exc:
            logger.warning(f"Logout with unusable access token: {exc}", extra={"path": path})

    refresh_token = _read_refresh_token(request, settings)
    if not refresh_token:
        logger.error("Logout without a usable token", extra={"path": path})
        raise UnAuthorizedError("refresh token")

    try:
        claims = codec.verify_refresh_token(refresh_token)
    except InvalidTokenError as exc:
        logger.error(f"Logout refresh token rejected: {exc}", extra={"path": path})
        raise UnAuthorizedError("refresh token")

    return SessionContext(user_id=claims.user_id, session_id=claims.session_id)
