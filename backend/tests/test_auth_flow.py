from datetime import datetime, timedelta, timezone
import logging

from sqlalchemy import select

from arena.api.deps import ACCESS_TOKEN_COOKIE, CSRF_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from arena.api.v1 import users as user_routes
from arena.config import settings
from arena.core.database import SessionLocal
from arena.core.tokens import TokenCodec
from arena.models.session import UserSession
from arena.models.user import User
from arena.services.session_store import SessionRecord, SqlSessionStore

from conftest import login, signup

AUTH_COOKIES = (ACCESS_TOKEN_COOKIE, CSRF_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE)

# Domain the cookie jar files host-only cookies from "testserver" under
COOKIE_JAR_DOMAIN = "testserver.local"


def _auth_cookies(client):
    return {name: client.cookies.get(name) for name in AUTH_COOKIES}


def _use_cookies(client, cookies):
    client.cookies.clear()
    for name, value in cookies.items():
        if value is not None:
            client.cookies.set(name, value, domain=COOKIE_JAR_DOMAIN)


def _sessions(email="player@example.com"):
    with SessionLocal() as db:
        user = db.execute(select(User).where(User.email == email)).scalar_one()
        return db.execute(
            select(UserSession).where(UserSession.user_id == user.id).order_by(UserSession.created_on)
        ).scalars().all()


def test_login_starts_session_and_sets_cookies(client):
    signup(client)
    before = datetime.now(timezone.utc)

    response = login(client)

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["ok"] is True
    session = body["data"]["session"]
    assert session["name"] == "Player One"
    assert session["avatar"] == "ninja"
    expected_ms = (before + timedelta(hours=settings.AUTH_TOKEN_EXPIRE_HOURS)).timestamp() * 1000
    assert abs(session["expiry"] - expected_ms) < 5000

    assert all(client.cookies.get(name) for name in AUTH_COOKIES)
    assert client.cookies.get(REFRESH_TOKEN_COOKIE).startswith("s:")

    rows = _sessions()
    assert len(rows) == 1
    assert rows[0].expired is False
    expires_on = rows[0].expires_on.replace(tzinfo=timezone.utc)
    expected = before + timedelta(seconds=settings.get_refresh_token_ttl_seconds())
    assert abs(expires_on - expected) < timedelta(seconds=5)


def test_login_wrong_password(client):
    signup(client)
    response = login(client, password="not-the-password")
    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized: password"
    assert client.cookies.get(ACCESS_TOKEN_COOKIE) is None


def test_login_unknown_email(client):
    response = login(client, email="ghost@example.com")
    assert response.status_code == 400
    assert response.json()["message"] == "Bad request: email"


def test_protected_route_with_live_session(logged_in):
    response = logged_in.get("/v1/user")
    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "player@example.com"


def _expire_access_token(client):
    """Swap in an access token (and its CSRF token) issued past its lifetime"""
    cookies = _auth_cookies(client)
    row = _sessions()[0]

    past = datetime.now(timezone.utc) - timedelta(hours=settings.AUTH_TOKEN_EXPIRE_HOURS + 1)
    stale = TokenCodec(settings.SECRET_KEY, clock=lambda: past).issue_access_token(row.user_id, row.id)
    cookies[ACCESS_TOKEN_COOKIE] = stale.token
    cookies[CSRF_TOKEN_COOKIE] = stale.csrf_token
    _use_cookies(client, cookies)


def _cleared_cookies(response):
    return {
        header.split("=", 1)[0]
        for header in response.headers.get_list("set-cookie")
        if "Max-Age=0" in header
    }


def test_expired_access_token_never_reaches_handler(logged_in, monkeypatch, caplog):
    _expire_access_token(logged_in)

    calls = []
    monkeypatch.setattr(user_routes.user_service, "get_user", lambda *args: calls.append(args))

    with caplog.at_level(logging.ERROR, logger="arena.api.deps"):
        response = logged_in.get("/v1/user")

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized: access token expired"
    assert calls == []
    rejected = [record for record in caplog.records if record.name == "arena.api.deps"]
    assert rejected and rejected[-1].path == "/v1/user"


def test_missing_csrf_token_is_forbidden(logged_in):
    cookies = _auth_cookies(logged_in)
    cookies[CSRF_TOKEN_COOKIE] = None
    _use_cookies(logged_in, cookies)

    response = logged_in.get("/v1/user")

    assert response.status_code == 403
    assert response.json()["message"] == "Forbidden: csrf token"


def test_wrong_csrf_token_is_unauthorized(logged_in):
    cookies = _auth_cookies(logged_in)
    cookies[CSRF_TOKEN_COOKIE] = "x" * 24
    _use_cookies(logged_in, cookies)

    response = logged_in.get("/v1/user")

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized: access token"


def test_missing_access_token_is_unauthorized(client):
    response = client.get("/v1/user")
    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized: access token"


def test_header_credentials_are_accepted(logged_in):
    cookies = _auth_cookies(logged_in)
    _use_cookies(logged_in, {REFRESH_TOKEN_COOKIE: cookies[REFRESH_TOKEN_COOKIE]})

    response = logged_in.get(
        "/v1/user",
        headers={
            "Authorization": f"Bearer {cookies[ACCESS_TOKEN_COOKIE]}",
            "X-XSRF-Token": cookies[CSRF_TOKEN_COOKIE],
        },
    )

    assert response.status_code == 200


def test_tampered_refresh_cookie_is_unauthorized(logged_in):
    cookies = _auth_cookies(logged_in)
    cookies[REFRESH_TOKEN_COOKIE] = cookies[REFRESH_TOKEN_COOKIE][:-2] + "zz"
    _use_cookies(logged_in, cookies)

    response = logged_in.get("/v1/user")

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized: refresh token"


def test_refresh_rotates_session(logged_in):
    old_cookies = _auth_cookies(logged_in)
    old_session_id = _sessions()[0].id

    response = logged_in.get("/v1/refresh")

    assert response.status_code == 200
    assert response.json()["data"]["session"]["name"] == "Player One"

    rows = {row.id: row for row in _sessions()}
    assert len(rows) == 2
    assert rows[old_session_id].expired is True
    new_rows = [row for row in rows.values() if row.id != old_session_id]
    assert new_rows[0].expired is False

    new_cookies = _auth_cookies(logged_in)
    assert new_cookies[ACCESS_TOKEN_COOKIE] != old_cookies[ACCESS_TOKEN_COOKIE]
    assert new_cookies[CSRF_TOKEN_COOKIE] != old_cookies[CSRF_TOKEN_COOKIE]
    assert logged_in.get("/v1/user").status_code == 200

    # The rotated-out tokens no longer pass the session check
    _use_cookies(logged_in, old_cookies)
    stale = logged_in.get("/v1/user")
    assert stale.status_code == 401
    assert stale.json()["message"] == "Unauthorized: session"


def test_refresh_requires_matching_refresh_token(client):
    signup(client)
    login(client)
    first = _auth_cookies(client)
    login(client)
    second = _auth_cookies(client)

    mixed = dict(second)
    mixed[REFRESH_TOKEN_COOKIE] = first[REFRESH_TOKEN_COOKIE]
    _use_cookies(client, mixed)

    # Ordinary routes only check the refresh cookie's signature
    assert client.get("/v1/user").status_code == 200

    response = client.get("/v1/refresh")
    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized: refresh token"
    assert all(not row.expired for row in _sessions())


def test_logout_expires_session_and_clears_cookies(logged_in):
    saved = _auth_cookies(logged_in)

    response = logged_in.post("/v1/logout")

    assert response.status_code == 200
    assert response.json()["data"]["ok"] is True
    assert all(logged_in.cookies.get(name) is None for name in AUTH_COOKIES)
    assert _sessions()[0].expired is True

    _use_cookies(logged_in, saved)
    replay = logged_in.get("/v1/user")
    assert replay.status_code == 401
    assert replay.json()["message"] == "Unauthorized: session"


def test_logout_twice_still_clears_cookies(logged_in):
    saved = _auth_cookies(logged_in)
    assert logged_in.post("/v1/logout").status_code == 200

    _use_cookies(logged_in, saved)
    response = logged_in.post("/v1/logout")

    assert response.status_code == 500
    assert response.json()["message"] == "Internal server error: session"
    assert all(logged_in.cookies.get(name) is None for name in AUTH_COOKIES)


def test_session_of_other_login_survives_logout(client):
    signup(client)
    login(client)
    first = _auth_cookies(client)
    login(client)

    assert client.post("/v1/logout").status_code == 200

    _use_cookies(client, first)
    assert client.get("/v1/user").status_code == 200


def test_logout_with_expired_access_token(logged_in):
    _expire_access_token(logged_in)

    response = logged_in.post("/v1/logout")

    assert response.status_code == 200
    assert _cleared_cookies(response) == set(AUTH_COOKIES)
    assert all(logged_in.cookies.get(name) is None for name in AUTH_COOKIES)
    # The signed refresh token still names the session, so it is ended too
    assert _sessions()[0].expired is True


def test_logout_without_tokens_still_clears_cookies(logged_in):
    _use_cookies(logged_in, {CSRF_TOKEN_COOKIE: "x" * 24})

    response = logged_in.post("/v1/logout")

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized: refresh token"
    assert _cleared_cookies(response) == set(AUTH_COOKIES)
    assert _sessions()[0].expired is False


def test_flagged_session_record_is_unauthorized(logged_in, monkeypatch):
    def load_flagged(self, user_id, session_id):
        return SessionRecord(
            id=session_id,
            user_id=user_id,
            expires_on=datetime.now(timezone.utc) + timedelta(hours=1),
            expired=True,
        )

    monkeypatch.setattr(SqlSessionStore, "load", load_flagged)

    response = logged_in.get("/v1/user")

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized: session"


def test_refresh_aborts_when_old_session_cannot_be_expired(logged_in, monkeypatch):
    old_cookies = _auth_cookies(logged_in)
    monkeypatch.setattr(SqlSessionStore, "expire", lambda self, user_id, session_id: None)

    response = logged_in.get("/v1/refresh")

    assert response.status_code == 500
    assert response.json()["message"] == "Internal server error: session"
    rows = _sessions()
    assert len(rows) == 1
    assert rows[0].expired is False
    assert _auth_cookies(logged_in) == old_cookies
