"""JWT issuance and verification for access and refresh tokens.

Access tokens are signed with ``secret + csrf_token`` where the CSRF token is
generated fresh for every issuance. Holding the access token alone is not
enough to use it: the matching CSRF value, delivered in a separate
script-readable cookie, has to accompany it. Refresh tokens are signed with
the server secret alone and travel in a server-signed cookie.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Tuple

from jose import ExpiredSignatureError, JWTError, jwt

from arena.core.exceptions import TokenExpiredError, TokenInvalidError
from arena.core.security import generate_csrf_token


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AccessToken:
    token: str
    csrf_token: str
    expiry: int  # epoch milliseconds


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    session_id: str
    iat: int
    exp: int


class TokenCodec:
    """Sign and verify access/refresh tokens. Holds no per-request state."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=1),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock

    def _sign(
        self, user_id: int, session_id: str, key: str, ttl: timedelta, typ: str
    ) -> Tuple[str, datetime]:
        issued_at = self._clock()
        expires_at = issued_at + ttl
        claims = {
            "userId": user_id,
            "sessionId": session_id,
            "typ": typ,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims, key, algorithm=self._algorithm), expires_at

    def _verify(self, token: str, key: str, typ: str) -> TokenClaims:
        try:
            payload: Dict[str, Any] = jwt.decode(token, key, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired") from exc
        except JWTError as exc:
            raise TokenInvalidError("Invalid token") from exc

        if payload.get("typ") != typ:
            raise TokenInvalidError(f"Token type is not {typ}")

        user_id = payload.get("userId")
        session_id = payload.get("sessionId")
        if user_id is None or not session_id:
            raise TokenInvalidError("Invalid token payload")

        return TokenClaims(
            user_id=user_id,
            session_id=str(session_id),
            iat=int(payload.get("iat", 0)),
            exp=int(payload["exp"]),
        )

    def issue_access_token(self, user_id: int, session_id: str) -> AccessToken:
        """
        Issue an access token bound to a fresh CSRF token

        Args:
            user_id: Owner of the session
            session_id: Session the token belongs to

        Returns:
            AccessToken: token, its CSRF companion and expiry in epoch ms
        """
        csrf_token = generate_csrf_token()
        token, expires_at = self._sign(
            user_id, session_id, self._secret + csrf_token, self.access_ttl, "access"
        )
        return AccessToken(
            token=token,
            csrf_token=csrf_token,
            expiry=int(expires_at.timestamp() * 1000),
        )

    def issue_refresh_token(self, user_id: int, session_id: str) -> str:
        token, _ = self._sign(user_id, session_id, self._secret, self.refresh_ttl, "refresh")
        return token

    def verify_access_token(self, token: str, csrf_token: str) -> TokenClaims:
        """
        Verify an access token against its CSRF companion

        Raises:
            TokenExpiredError: Signature matches but the token expired
            TokenInvalidError: Malformed token or wrong key (including a wrong CSRF token)
        """
        return self._verify(token, self._secret + (csrf_token or ""), "access")

    def verify_refresh_token(self, token: str) -> TokenClaims:
        return self._verify(token, self._secret, "refresh")
