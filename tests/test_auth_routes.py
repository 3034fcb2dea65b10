"""
tests/test_auth_routes.py -- Integration tests for /api/v1/auth/*.

These tests exercise the full stack: FastAPI routing -> SessionManager ->
UserStore -> response serialization and cookie handling.

The refresh cookie is Secure, so the TestClient cookie jar never sends it
back over http://testserver. Tests read it from Set-Cookie and pass it in an
explicit Cookie header instead.

Fixtures used (from conftest.py):
  - api_client: (client, token, uid) -- TestClient with a registered user's access token
"""

from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient

import api.routes.v1.auth as auth_routes
from api.limiter import limiter
from core.config import get_settings


def refresh_cookie_value(resp) -> str:
    """Pull the refresh_token value out of a response's Set-Cookie header."""
    first = resp.headers["set-cookie"].split(";", 1)[0]
    name, _, value = first.partition("=")
    assert name == "refresh_token"
    return value


def cookie_header(value: str) -> dict[str, str]:
    return {"Cookie": f"refresh_token={value}"}


def _new_account(client: TestClient, password: str = "pw1") -> str:
    """Register a fresh user through the API and return its email."""
    email = f"user-{uuid.uuid4().hex[:8]}@example.com"
    resp = client.post("/api/v1/auth/register", json={"email": email, "password": password, "name": "New User"})
    assert resp.status_code == 201, resp.text
    return email


def _login(client: TestClient, email: str, password: str = "pw1"):
    resp = client.post("/api/v1/auth/login", json={"username": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp


class TestLogin:
    def test_login_returns_access_token_and_user(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        data = _login(client, email).json()
        assert data["access_token"]
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 300
        assert data["user"]["email"] == email
        assert set(data["user"]) == {"id", "email", "name", "role"}
        assert "refresh_token" not in data

    def test_login_sets_refresh_cookie(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        resp = _login(client, email)
        cookie = resp.headers["set-cookie"]
        assert cookie.startswith("refresh_token=")
        assert "HttpOnly" in cookie
        assert "Secure" in cookie
        assert "Path=/" in cookie
        assert "Max-Age=86400" in cookie
        assert resp.headers["cache-control"] == "no-store"

    def test_bad_password_and_unknown_email_look_the_same(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        wrong_pw = client.post("/api/v1/auth/login", json={"username": email, "password": "nope"})
        no_user = client.post("/api/v1/auth/login", json={"username": "ghost@example.com", "password": "pw1"})
        assert wrong_pw.status_code == 401
        assert no_user.status_code == 401
        assert wrong_pw.json() == no_user.json()
        assert wrong_pw.json()["error"]["code"] == "bad_credentials"

    def test_login_missing_fields_is_422(self, api_client) -> None:
        client, _token, _uid = api_client
        resp = client.post("/api/v1/auth/login", json={"username": "a@x.com"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"


class TestRefresh:
    def test_missing_cookie_is_400(self, api_client) -> None:
        client, _token, _uid = api_client
        resp = client.get("/api/v1/auth/refresh")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "missing_token"

    def test_rotation_and_replay(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        refresh1 = refresh_cookie_value(_login(client, email))

        rotated = client.get("/api/v1/auth/refresh", headers=cookie_header(refresh1))
        assert rotated.status_code == 200, rotated.text
        assert rotated.json()["user"]["email"] == email
        assert rotated.headers["cache-control"] == "no-store"
        refresh2 = refresh_cookie_value(rotated)
        assert refresh2 != refresh1

        replay = client.get("/api/v1/auth/refresh", headers=cookie_header(refresh1))
        assert replay.status_code == 401
        assert replay.json()["error"]["code"] == "revoked_token"

        again = client.get("/api/v1/auth/refresh", headers=cookie_header(refresh2))
        assert again.status_code == 200

    def test_access_token_in_refresh_cookie_is_invalid(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        access = _login(client, email).json()["access_token"]
        resp = client.get("/api/v1/auth/refresh", headers=cookie_header(access))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_token"

    def test_garbage_cookie_is_invalid(self, api_client) -> None:
        client, _token, _uid = api_client
        resp = client.get("/api/v1/auth/refresh", headers=cookie_header("garbage"))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_token"
        assert resp.headers["www-authenticate"] == "Bearer"


class TestLogout:
    def test_logout_requires_access_token(self, api_client) -> None:
        client, _token, _uid = api_client
        resp = client.post("/api/v1/auth/logout")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    def test_logout_expires_cookie_and_revokes_refresh(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        login = _login(client, email)
        access = login.json()["access_token"]
        refresh = refresh_cookie_value(login)

        resp = client.post("/api/v1/auth/logout", headers={"Authorization": f"Bearer {access}"})
        assert resp.status_code == 200
        cookie = resp.headers["set-cookie"]
        assert cookie.startswith("refresh_token=")
        assert "Max-Age=0" in cookie

        after = client.get("/api/v1/auth/refresh", headers=cookie_header(refresh))
        assert after.status_code == 401
        assert after.json()["error"]["code"] == "revoked_token"

    def test_access_token_outlives_logout(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        access = _login(client, email).json()["access_token"]
        headers = {"Authorization": f"Bearer {access}"}
        client.post("/api/v1/auth/logout", headers=headers)
        assert client.get("/api/v1/auth/account", headers=headers).status_code == 200

    def test_profile_edit_after_logout_does_not_revive_refresh(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        login = _login(client, email)
        headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
        refresh = refresh_cookie_value(login)

        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200
        edit = client.put(f"/api/v1/users/{login.json()['user']['id']}", json={"name": "Renamed"}, headers=headers)
        assert edit.status_code == 200, edit.text

        after = client.get("/api/v1/auth/refresh", headers=cookie_header(refresh))
        assert after.status_code == 401
        assert after.json()["error"]["code"] == "revoked_token"

    def test_logout_twice_is_fine(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        headers = {"Authorization": f"Bearer {_login(client, email).json()['access_token']}"}
        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200
        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200


class TestRegister:
    def test_register_returns_201_without_secrets(self, api_client) -> None:
        client, _token, _uid = api_client
        resp = client.post(
            "/api/v1/auth/register",
            json={"email": "fresh@example.com", "password": "pw1", "name": "Fresh", "age": 28, "gender": "OTHER"},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["email"] == "fresh@example.com"
        assert data["gender"] == "OTHER"
        assert data["role"] == "user"
        assert "hashed_password" not in data
        assert "password" not in data
        assert "refresh_token" not in data

    def test_duplicate_email_is_409(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        resp = client.post("/api/v1/auth/register", json={"email": email, "password": "x", "name": "Dup"})
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "duplicate_email"
        # The original password still works.
        _login(client, email)

    def test_password_whitespace_is_preserved(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client, password="  secret  ")
        _login(client, email, password="  secret  ")
        resp = client.post("/api/v1/auth/login", json={"username": email, "password": "secret"})
        assert resp.status_code == 401

    def test_email_whitespace_is_trimmed(self, api_client) -> None:
        client, _token, _uid = api_client
        resp = client.post(
            "/api/v1/auth/register",
            json={"email": "  padded@example.com ", "password": "pw1", "name": " Padded "},
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["email"] == "padded@example.com"
        assert resp.json()["name"] == "Padded"
        _login(client, " padded@example.com")

    def test_malformed_email_is_422(self, api_client) -> None:
        client, _token, _uid = api_client
        resp = client.post("/api/v1/auth/register", json={"email": "not-an-email", "password": "x", "name": "N"})
        assert resp.status_code == 422


class TestAccount:
    def test_account_returns_caller(self, api_client) -> None:
        client, token, uid = api_client
        resp = client.get("/api/v1/auth/account", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json() == {"user": {"id": uid, "email": "testuser@example.com", "name": "Test User"}}

    def test_account_rejects_refresh_token_as_bearer(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        refresh = refresh_cookie_value(_login(client, email))
        resp = client.get("/api/v1/auth/account", headers={"Authorization": f"Bearer {refresh}"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_token"

    def test_account_of_deleted_user_is_404(self, api_client) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        data = _login(client, email).json()
        headers = {"Authorization": f"Bearer {data['access_token']}"}
        assert client.delete(f"/api/v1/users/{data['user']['id']}", headers=headers).status_code == 204
        resp = client.get("/api/v1/auth/account", headers=headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"


class TestLoginRateLimit:
    @pytest.fixture
    def two_per_hour(self, monkeypatch):
        patched = get_settings().model_copy(update={"login_rate_limit": "2/hour"})
        monkeypatch.setattr(auth_routes, "get_settings", lambda: patched)
        limiter.reset()
        yield
        limiter.reset()

    def test_third_login_is_429_with_envelope(self, api_client, two_per_hour) -> None:
        client, _token, _uid = api_client
        email = _new_account(client)
        _login(client, email)
        _login(client, email)

        resp = client.post("/api/v1/auth/login", json={"username": email, "password": "pw1"})
        assert resp.status_code == 429
        assert resp.json()["error"]["code"] == "rate_limited"
        assert resp.headers["retry-after"] == "3600"
