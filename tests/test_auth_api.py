def test_login_returns_safe_projection(client, login):
    response = login("root", "root-password")

    assert response.status_code == 200
    assert response.json() == {"user": {"id": 1, "username": "root", "role": "super_admin"}}
    assert "catalog_session" in response.cookies


def test_bad_credentials_are_generic(client, login):
    unknown = login("nobody", "root-password")
    wrong = login("root", "nope")

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"message": "Invalid username or password"}


def test_login_requires_both_fields(client):
    response = client.post("/api/login", json={"username": "root"})
    assert response.status_code == 400
    assert response.json()["message"].startswith("Validation error")


def test_lockout_returns_429_with_remaining_minutes(client, login):
    for _ in range(5):
        assert login("editor", "wrong").status_code == 401

    response = login("editor", "editor-password")
    assert response.status_code == 429
    assert response.json() == {"message": "Account is locked. Try again in 15 minutes."}
    assert int(response.headers["Retry-After"]) > 14 * 60


def test_current_user_requires_session(client):
    response = client.get("/api/current-user")
    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}


def test_current_user_never_exposes_password(client, login):
    for username, password in (("root", "root-password"), ("editor", "editor-password")):
        login(username, password)
        response = client.get("/api/current-user")

        assert response.status_code == 200
        body = response.json()
        assert set(body["user"]) == {"id", "username", "role"}
        assert "password" not in response.text
        assert body["user"]["username"] == username


def test_auth_aliases(client):
    response = client.post("/api/auth/login", json={"username": "root", "password": "root-password"})
    assert response.status_code == 200
    assert client.get("/api/auth/user").json()["user"]["username"] == "root"


def test_logout_invalidates_session_and_is_idempotent(client, login):
    login("root", "root-password")
    stolen_cookie = client.cookies.get("catalog_session")

    first = client.post("/api/logout")
    second = client.post("/api/logout")
    assert first.status_code == second.status_code == 200
    assert first.json() == {"message": "Logged out successfully"}
    assert client.get("/api/current-user").status_code == 401

    # the old signed cookie no longer resolves to a server-side session
    replay = client.get("/api/current-user", headers={"Cookie": f"catalog_session={stolen_cookie}"})
    assert replay.status_code == 401
