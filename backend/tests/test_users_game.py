import logging

from conftest import signup


def test_signup_creates_user_and_default_settings(client):
    signup(client)

    login = client.post("/v1/login", json={"email": "player@example.com", "password": "hunter22"})
    assert login.status_code == 200

    settings = client.get("/v1/game-settings").json()["data"]["settings"]
    assert settings["playerName"] == "Player One"
    assert settings["gameTime"] == 60
    assert (settings["wins"], settings["losses"], settings["gamesPlayed"]) == (0, 0, 0)


def test_signup_duplicate_email_conflicts(client):
    signup(client)
    response = client.post(
        "/v1/signup",
        json={"name": "Someone Else", "email": "player@example.com", "password": "hunter22", "avatar": "witch"},
    )
    assert response.status_code == 409
    assert response.json()["message"] == "Conflict: email"


def test_signup_validation_errors_are_bad_requests(client):
    short_name = client.post(
        "/v1/signup",
        json={"name": "Bo", "email": "bo@example.com", "password": "hunter22", "avatar": "witch"},
    )
    assert short_name.status_code == 400
    assert short_name.json()["message"] == "Bad request: name"

    unknown_field = client.post(
        "/v1/signup",
        json={
            "name": "Bobby Tables",
            "email": "bo@example.com",
            "password": "hunter22",
            "avatar": "witch",
            "role": "admin",
        },
    )
    assert unknown_field.status_code == 400

    bad_avatar = client.post(
        "/v1/signup",
        json={"name": "Bobby Tables", "email": "bo@example.com", "password": "hunter22", "avatar": "wizard"},
    )
    assert bad_avatar.status_code == 400
    assert bad_avatar.json()["data"]["field"] == "avatar"


def test_signup_trims_name(client):
    signup(client, name="   Player Two   ")
    client.post("/v1/login", json={"email": "player@example.com", "password": "hunter22"})
    assert client.get("/v1/user").json()["data"]["user"]["name"] == "Player Two"


def test_update_user(logged_in):
    response = logged_in.put("/v1/update-user", json={"name": "Renamed Player"})
    assert response.status_code == 200
    assert response.json()["data"]["user"]["name"] == "Renamed Player"

    response = logged_in.put("/v1/update-user", json={"email": "renamed@example.com"})
    assert response.json()["data"]["user"]["email"] == "renamed@example.com"


def test_update_user_requires_a_field(logged_in):
    response = logged_in.put("/v1/update-user", json={})
    assert response.status_code == 400


def test_update_user_email_taken(logged_in):
    logged_in.post(
        "/v1/signup",
        json={"name": "Other Player", "email": "other@example.com", "password": "hunter22", "avatar": "boxer"},
    )
    response = logged_in.put("/v1/update-user", json={"email": "other@example.com"})
    assert response.status_code == 409


def test_update_game_settings(logged_in):
    response = logged_in.put(
        "/v1/update-game-settings",
        json={"playerName": "Shadow", "gameTime": 90},
    )
    assert response.status_code == 200
    settings = response.json()["data"]["settings"]
    assert settings["playerName"] == "Shadow"
    assert settings["gameTime"] == 90


def test_game_outcomes_update_counters(logged_in):
    logged_in.put("/v1/update-game-settings", json={"won": True})
    logged_in.put("/v1/update-game-settings", json={"lost": True})
    response = logged_in.put("/v1/update-game-settings", json={"won": True})

    settings = response.json()["data"]["settings"]
    assert settings["wins"] == 2
    assert settings["losses"] == 1
    assert settings["gamesPlayed"] == 3


def test_avatar_change_updates_profile(logged_in):
    response = logged_in.put("/v1/update-game-settings", json={"avatar": "archer"})
    assert response.status_code == 200
    assert logged_in.get("/v1/user").json()["data"]["user"]["avatar"] == "archer"


def test_commentary_goes_to_per_game_log(logged_in, caplog):
    user_id = logged_in.get("/v1/user").json()["data"]["user"]["id"]

    with caplog.at_level(logging.INFO, logger="arena.game"):
        response = logged_in.put(
            "/v1/update-game-settings",
            json={"won": True, "commentary": "Flawless victory"},
        )
        logged_in.put("/v1/update-game-settings", json={"lost": True})
    assert response.status_code == 200

    transcript = [
        (record.name, record.getMessage())
        for record in caplog.records
        if record.name.startswith("arena.game.")
    ]
    assert (f"arena.game.{user_id}_1", "Flawless victory") in transcript
    assert (f"arena.game.{user_id}_2", " ") in transcript


def test_game_settings_reject_bad_input(logged_in):
    assert logged_in.put("/v1/update-game-settings", json={}).status_code == 400
    assert logged_in.put("/v1/update-game-settings", json={"gameTime": 2}).status_code == 400
    assert logged_in.put("/v1/update-game-settings", json={"commentary": "just talk"}).status_code == 400


def test_game_settings_require_session(client):
    assert client.get("/v1/game-settings").status_code == 401
    assert client.put("/v1/update-game-settings", json={"won": True}).status_code == 401


def test_health_and_root(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["readiness"]["database"]["ok"] is True

    root = client.get("/")
    assert root.json()["status"] == "running"
    assert root.headers["X-Content-Type-Options"] == "nosniff"
