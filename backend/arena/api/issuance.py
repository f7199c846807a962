"""Session rotation, token issuance and logout

Run after a successful login or refresh:

    generate_session -> generate_tokens

``expire_session`` is the logout counterpart.
"""

from typing import Optional
import logging

from fastapi import Response

from arena.api.deps import ACCESS_TOKEN_COOKIE, CSRF_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from arena.config import Settings
from arena.core.context import SessionContext
from arena.core.exceptions import AppError, UnAuthorizedError
from arena.core.security import sign_cookie
from arena.core.tokens import AccessToken, TokenCodec
from arena.services.session_service import SessionLifecycle

logger = logging.getLogger(__name__)


def set_auth_cookies(
    response: Response,
    settings: Settings,
    access: AccessToken,
    refresh_token: str,
) -> None:
    """Refresh token goes out signed and HTTP-only; CSRF and access tokens stay script-readable"""
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        sign_cookie(refresh_token, settings.COOKIE_SECRET),
        max_age=settings.get_refresh_token_ttl_seconds(),
        path=settings.COOKIE_PATH,
        domain=settings.COOKIE_DOMAIN,
        secure=settings.COOKIE_SECURE,
        httponly=True,
        samesite=settings.COOKIE_SAMESITE,
    )
    for name, value in ((CSRF_TOKEN_COOKIE, access.csrf_token), (ACCESS_TOKEN_COOKIE, access.token)):
        response.set_cookie(
            name,
            value,
            path=settings.COOKIE_PATH,
            domain=settings.COOKIE_DOMAIN,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
        )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        REFRESH_TOKEN_COOKIE,
        path=settings.COOKIE_PATH,
        domain=settings.COOKIE_DOMAIN,
        secure=settings.COOKIE_SECURE,
        httponly=True,
        samesite=settings.COOKIE_SAMESITE,
    )
    for name in (CSRF_TOKEN_COOKIE, ACCESS_TOKEN_COOKIE):
        response.delete_cookie(
            name,
            path=settings.COOKIE_PATH,
            domain=settings.COOKIE_DOMAIN,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
        )


def generate_session(
    lifecycle: SessionLifecycle,
    user_id: Optional[int],
    previous: Optional[SessionContext] = None,
) -> SessionContext:
    """
    Start a session for ``user_id``, rotating out ``previous`` if given

    The previous session is expired before the new one is created. If that
    fails no new session is created and the error propagates.

    Raises:
        UnAuthorizedError: No user id established
        UnresolvedError: Expiring the previous session or creating the new one failed
    """
    if not user_id:
        logger.error("generate_session called without a user")
        raise UnAuthorizedError("access")

    if previous is not None and previous.session_id is not None:
        try:
            lifecycle.expire(user_id, previous.session_id)
        except AppError as exc:
            logger.error(
                f"Session rotation aborted: {exc.message}",
                extra={"session": previous.snapshot()},
            )
            raise

    try:
        session = lifecycle.create(user_id)
    except AppError as exc:
        logger.error(f"Session creation failed: {exc.message}", extra={"user_id": user_id})
        raise

    return SessionContext(user_id=user_id, session_id=session.session_id, expiry=session.expiry)


def generate_tokens(
    codec: TokenCodec,
    settings: Settings,
    context: SessionContext,
    response: Response,
) -> AccessToken:
    """
    Mint access/CSRF/refresh tokens for ``context`` and set them as cookies

    Raises:
        UnAuthorizedError: Context lacks a user id or session id
    """
    if not context.user_id or not context.session_id:
        logger.error("generate_tokens called without a session", extra={"session": context.snapshot()})
        raise UnAuthorizedError("access")

    access = codec.issue_access_token(context.user_id, context.session_id)
    refresh_token = codec.issue_refresh_token(context.user_id, context.session_id)

    set_auth_cookies(response, settings, access, refresh_token)
    return access


def expire_session(
    lifecycle: SessionLifecycle,
    settings: Settings,
    context: SessionContext,
    response: Response,
) -> None:
    """
    Logout: clear the auth cookies, then expire the stored session

    Cookies are cleared on ``response`` before the store is touched. A failed
    expiry is logged and re-raised; it is not retried.
    """
    clear_auth_cookies(response, settings)

    try:
        lifecycle.expire(context.user_id, context.session_id)
    except AppError as exc:
        logger.error(
            f"Session expiry failed: {exc.message}",
            extra={"session": context.snapshot()},
        )
        raise
