from types import SimpleNamespace

from calendar_api.app.core import security

from .conftest import API, DEFAULT_PASSWORD, auth


def test_register_returns_token_pair(client):
    resp = client.post(
        f"{API}/auth/register",
        json={"email": "jane@example.com", "password": DEFAULT_PASSWORD, "name": "Jane"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Registration successful"
    claims = security.decode_access_token(body["accessToken"])
    assert claims["email"] == "jane@example.com"
    assert claims["name"] == "Jane"
    assert claims["role"] == "user"
    assert security.decode_refresh_token(body["refreshToken"])["id"] == claims["id"]


def test_register_existing_email_regardless_of_password(client, register):
    register("jane@example.com")
    for password in (DEFAULT_PASSWORD, "weak", ""):
        resp = client.post(f"{API}/auth/register", json={"email": "jane@example.com", "password": password})
        assert resp.status_code == 400
        assert resp.json()["message"] == "User already registered"


def test_register_reports_first_failing_rule(client):
    resp = client.post(f"{API}/auth/register", json={"email": "jane@example.com", "password": "lowercase"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Password must contain at least one uppercase letter"

    resp = client.post(f"{API}/auth/register", json={"email": "jane", "password": DEFAULT_PASSWORD})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid email format"


def test_register_missing_fields(client):
    resp = client.post(f"{API}/auth/register", json={"password": DEFAULT_PASSWORD})
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation error"
    assert "email" in body["error"]


def test_login_success(client, register):
    register("jane@example.com")
    resp = client.post(f"{API}/auth/login", json={"email": "jane@example.com", "password": DEFAULT_PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert security.decode_access_token(body["accessToken"])["email"] == "jane@example.com"


def test_login_distinguishes_unknown_user_and_wrong_password(client, register):
    register("jane@example.com")
    unknown = client.post(f"{API}/auth/login", json={"email": "nobody@example.com", "password": DEFAULT_PASSWORD})
    wrong = client.post(f"{API}/auth/login", json={"email": "jane@example.com", "password": "Wr0ng!Pass"})
    assert unknown.status_code == 400
    assert wrong.status_code == 400
    assert unknown.json()["message"] == "Invalid credentials, user not found"
    assert wrong.json()["message"] == "Invalid credentials, incorrect password"


def test_login_does_not_trim_password(client, register):
    register("jane@example.com")
    resp = client.post(f"{API}/auth/login", json={"email": "jane@example.com", "password": DEFAULT_PASSWORD + "   "})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid credentials, incorrect password"


def test_password_whitespace_counts_toward_length(client, register):
    password = "  Ab1!xyz"
    register("jane@example.com", password=password)
    resp = client.post(f"{API}/auth/login", json={"email": "jane@example.com", "password": password})
    assert resp.status_code == 200
    resp = client.post(f"{API}/auth/login", json={"email": "jane@example.com", "password": password.strip()})
    assert resp.status_code == 400


def test_refresh_token_issues_new_access_token(client, alice):
    resp = client.post(f"{API}/auth/refresh-token", json={"refreshToken": alice["refreshToken"]})
    assert resp.status_code == 200
    access = resp.json()["accessToken"]
    assert security.decode_access_token(access)["email"] == "alice@example.com"
    assert client.get(f"{API}/calendar", headers=auth(access)).status_code == 200


def test_refresh_token_required(client):
    for kwargs in ({"json": {}}, {}):
        resp = client.post(f"{API}/auth/refresh-token", **kwargs)
        assert resp.status_code == 401
        assert resp.json()["message"] == "Refresh token required"


def test_unknown_refresh_token_rejected(client, alice):
    # Correctly signed but never stored for any session.
    claims = security.decode_access_token(alice["accessToken"])
    identity = SimpleNamespace(**{key: claims[key] for key in ("id", "email", "name", "role")})
    forged = security.issue_refresh_token(identity, session_id=claims["sid"])
    resp = client.post(f"{API}/auth/refresh-token", json={"refreshToken": forged})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Invalid refresh token"


def test_access_token_is_not_a_refresh_token(client, alice):
    resp = client.post(f"{API}/auth/refresh-token", json={"refreshToken": alice["accessToken"]})
    assert resp.status_code == 403


def test_logout_revokes_refresh_token_and_session(client, alice):
    resp = client.post(f"{API}/auth/logout", json={"refreshToken": alice["refreshToken"]})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Logout successful"

    resp = client.post(f"{API}/auth/refresh-token", json={"refreshToken": alice["refreshToken"]})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Invalid refresh token"

    resp = client.get(f"{API}/calendar", headers=auth(alice["accessToken"]))
    assert resp.status_code == 403
    assert resp.json()["message"] == "Token has been revoked"


def test_logout_is_idempotent(client, alice):
    for _ in range(2):
        resp = client.post(f"{API}/auth/logout", json={"refreshToken": alice["refreshToken"]})
        assert resp.status_code == 200


def test_logout_requires_refresh_token(client):
    for kwargs in ({"json": {}}, {}):
        resp = client.post(f"{API}/auth/logout", **kwargs)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Refresh token required"


def test_sessions_are_independent(client, register):
    first = register("jane@example.com")
    second = client.post(
        f"{API}/auth/login", json={"email": "jane@example.com", "password": DEFAULT_PASSWORD}
    ).json()

    client.post(f"{API}/auth/logout", json={"refreshToken": first["refreshToken"]})

    assert client.get(f"{API}/calendar", headers=auth(first["accessToken"])).status_code == 403
    assert client.get(f"{API}/calendar", headers=auth(second["accessToken"])).status_code == 200
    resp = client.post(f"{API}/auth/refresh-token", json={"refreshToken": second["refreshToken"]})
    assert resp.status_code == 200


def test_gate_rejects_missing_token(client):
    resp = client.get(f"{API}/calendar")
    assert resp.status_code == 403
    assert resp.json()["message"] == "No token provided"


def test_gate_rejects_invalid_token(client, alice):
    resp = client.get(f"{API}/calendar", headers=auth("garbage"))
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid token"


def test_gate_rejects_revoked_token_in_log(client, alice):
    client.post(f"{API}/auth/logout", json={"refreshToken": alice["accessToken"]})
    resp = client.get(f"{API}/calendar", headers=auth(alice["accessToken"]))
    assert resp.status_code == 403
    assert resp.json()["message"] == "Token has been revoked"


def test_gate_accepts_bearer_prefix(client, alice):
    resp = client.get(f"{API}/calendar", headers={"Authorization": f"Bearer {alice['accessToken']}"})
    assert resp.status_code == 200


def test_list_users_paginates_without_passwords(client, register):
    tokens = register("user0@example.com")
    for i in range(1, 5):
        register(f"user{i}@example.com")

    resp = client.get(f"{API}/auth/users", params={"page": 2, "limit": 2}, headers=auth(tokens["accessToken"]))
    assert resp.status_code == 200
    body = resp.json()
    assert body["page"] == 2
    assert body["limit"] == 2
    assert body["total"] == 5
    assert [u["email"] for u in body["users"]] == ["user2@example.com", "user3@example.com"]
    assert all("password" not in u for u in body["users"])


def test_list_users_rejects_bad_paging(client, alice):
    resp = client.get(f"{API}/auth/users", params={"page": 0}, headers=auth(alice["accessToken"]))
    assert resp.status_code == 400


def test_list_users_requires_token(client):
    assert client.get(f"{API}/auth/users").status_code == 403


def test_search_user_by_email(client, alice, bob):
    resp = client.get(
        f"{API}/auth/users/search", params={"email": "bob@example.com"}, headers=auth(alice["accessToken"])
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["email"] == "bob@example.com"
    assert body["name"] == "Bob"
    assert "password" not in body

    resp = client.get(
        f"{API}/auth/users/search", params={"email": "nobody@example.com"}, headers=auth(alice["accessToken"])
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


def test_search_user_requires_email(client, alice):
    resp = client.get(f"{API}/auth/users/search", headers=auth(alice["accessToken"]))
    assert resp.status_code == 400
