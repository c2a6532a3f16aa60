from convote.services.settings import set_non_admin_login_enabled


def test_login_returns_token_usable_as_bearer(client, voter):
    response = client.post(
        "/auth/login", json={"username": "voter1", "password": "voter-password"}
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["ok"] is True
    assert body["data"]["user"]["username"] == "voter1"

    token = body["data"]["token"]
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.get_json()["data"]["id"] == voter.id


def test_login_rejection_carries_error_code(client, voter):
    response = client.post("/auth/login", json={"username": "voter1", "password": "nope"})

    assert response.status_code == 401
    body = response.get_json()
    assert body == {
        "ok": False,
        "error": "Invalid username or password.",
        "code": "INVALID_CREDENTIALS",
    }


def test_login_disabled_for_non_admins(client, db_session, voter, admin_user):
    set_non_admin_login_enabled(False)

    response = client.post(
        "/auth/login", json={"username": "voter1", "password": "voter-password"}
    )
    assert response.status_code == 401
    assert response.get_json()["code"] == "LOGIN_DISABLED"

    response = client.post(
        "/auth/login", json={"username": "admin1", "password": "admin-password"}
    )
    assert response.status_code == 200


def test_protected_endpoints_require_token(client):
    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.get_json()["ok"] is False


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"
    assert "timestamp" in response.get_json()


def test_login_rejects_non_string_credentials(client, voter):
    response = client.post("/auth/login", json={"username": ["voter1"], "password": "voter-password"})

    assert response.status_code == 400
    assert response.get_json()["code"] == "ValidationError"
