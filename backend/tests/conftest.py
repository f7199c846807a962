import os
import tempfile

# Settings are read at import time; point them at an in-memory database first
_test_tmp_dir = tempfile.mkdtemp(prefix="arena_test_")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_INIT_MODE", "create_all")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("COOKIE_SAMESITE", "lax")
os.environ.setdefault("LOG_FILE", os.path.join(_test_tmp_dir, "app.log"))
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-do-not-use")
os.environ.setdefault("COOKIE_SECRET", "test-cookie-secret-for-testing-only")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from arena.core.database import Base, SessionLocal, engine  # noqa: E402
from arena.main import app  # noqa: E402

PASSWORD = "hunter22"


@pytest.fixture(autouse=True)
def clean_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def signup(client, email="player@example.com", name="Player One", avatar="ninja"):
    response = client.post(
        "/v1/signup",
        json={"name": name, "email": email, "password": PASSWORD, "avatar": avatar},
    )
    assert response.status_code == 200, response.text
    return response


def login(client, email="player@example.com", password=PASSWORD):
    return client.post("/v1/login", json={"email": email, "password": password})


@pytest.fixture
def logged_in(client):
    signup(client)
    response = login(client)
    assert response.status_code == 200, response.text
    return client
