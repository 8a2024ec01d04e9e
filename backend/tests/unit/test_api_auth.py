"""Tests for the authentication endpoints and session resolution.

Sessions are cookie-borne tokens whose subject names a workspace; a
token is only honored while that workspace still holds it and its
ten-day expiry has not passed.
"""

import pytest

from smartapply.core.config import settings
from tests.conftest import attach_session, sign_in

_COOKIE = settings.auth_cookie_name


# =============================================================================
# POST /auth/login
# =============================================================================


class TestLogin:
    @pytest.mark.asyncio
    async def test_success_sets_cookie_and_returns_user(self, client):
        response = await client.post(
            "/api/v1/auth/login", json={"username": "demo", "password": "Demo123"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["success"] is True
        assert data["user"] == {"id": "demo-user", "username": "demo", "access_level": "User"}
        assert data["redirect_path"] == "/dashboard"

        set_cookie = response.headers["set-cookie"].lower()
        assert _COOKIE in response.cookies
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie

    @pytest.mark.asyncio
    async def test_returns_to_bounced_page(self, client):
        data = await sign_in(client, redirect_to="/learning-resources")

        assert data["redirect_path"] == "/learning-resources"

    @pytest.mark.parametrize("target", ["/profile", "/"])
    @pytest.mark.asyncio
    async def test_accepts_local_redirect(self, client, target):
        data = await sign_in(client, redirect_to=target)

        assert data["redirect_path"] == target

    @pytest.mark.parametrize(
        "target",
        ["//evil.example.com", "/\\evil.example.com", "https://evil.example.com", "dashboard"],
    )
    @pytest.mark.asyncio
    async def test_rejects_non_local_redirect(self, client, target):
        response = await client.post(
            "/api/v1/auth/login",
            json={"username": "demo", "password": "Demo123", "redirect_to": target},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_wrong_password_is_401(self, client):
        response = await client.post(
            "/api/v1/auth/login", json={"username": "demo", "password": "nope-nope"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid username or password"
        assert _COOKIE not in response.cookies

    @pytest.mark.asyncio
    async def test_unknown_user_gets_same_error_and_no_workspace(self, test_app, client):
        response = await client.post(
            "/api/v1/auth/login", json={"username": "ghost", "password": "Whatever1"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid username or password"
        assert len(test_app.state.workspaces) == 0

    @pytest.mark.asyncio
    async def test_rule_violations_are_400_with_messages(self, client):
        response = await client.post("/api/v1/auth/login", json={"username": "a", "password": "x"})

        assert response.status_code == 400
        messages = [d["message"] for d in response.json()["error"]["details"]]
        assert "Username must be at least 2 characters" in messages
        assert "Password must be at least 3 characters" in messages

    @pytest.mark.asyncio
    async def test_unknown_fields_rejected(self, client):
        response = await client.post(
            "/api/v1/auth/login",
            json={"username": "demo", "password": "Demo123", "role": "admin"},
        )

        assert response.status_code == 400


# =============================================================================
# POST /auth/signup
# =============================================================================


class TestSignup:
    @pytest.mark.asyncio
    async def test_creates_account_and_session(self, client):
        response = await client.post(
            "/api/v1/auth/signup",
            json={"username": "new_user", "password": "Secret1", "confirm_password": "Secret1"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["username"] == "new_user"
        assert data["redirect_path"] == "/assessment"

        attach_session(client, response)
        session = (await client.get("/api/v1/auth/session")).json()["data"]
        assert session["authenticated"] is True

    @pytest.mark.asyncio
    async def test_new_account_can_log_in(self, client):
        await client.post("/api/v1/auth/signup", json={"username": "new_user", "password": "Secret1"})

        data = await sign_in(client, "new_user", "Secret1")

        assert data["user"]["username"] == "new_user"

    @pytest.mark.asyncio
    async def test_taken_username_is_409(self, client):
        response = await client.post(
            "/api/v1/auth/signup", json={"username": "demo", "password": "Secret1"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "USERNAME_TAKEN"

    @pytest.mark.asyncio
    async def test_password_mismatch_is_400(self, client):
        response = await client.post(
            "/api/v1/auth/signup",
            json={"username": "new_user", "password": "Secret1", "confirm_password": "Secret2"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"] == [{"message": "Passwords do not match"}]


# =============================================================================
# Session resolution
# =============================================================================


class TestSession:
    @pytest.mark.asyncio
    async def test_anonymous(self, client):
        response = await client.get("/api/v1/auth/session")

        assert response.status_code == 200
        assert response.json()["data"]["authenticated"] is False

    @pytest.mark.asyncio
    async def test_signed_in(self, demo_client):
        data = (await demo_client.get("/api/v1/auth/session")).json()["data"]

        assert data["authenticated"] is True
        assert data["user"]["username"] == "demo"
        assert data["is_admin"] is False
        assert data["expires_at"] is not None

    @pytest.mark.asyncio
    async def test_admin_flag(self, admin_client):
        data = (await admin_client.get("/api/v1/auth/session")).json()["data"]

        assert data["is_admin"] is True

    @pytest.mark.asyncio
    async def test_tampered_cookie_gets_generic_401(self, client):
        client.cookies.set(_COOKIE, "not-a-jwt")

        response = await client.get("/api/v1/profile")

        assert response.status_code == 401
        assert response.json()["detail"] == {
            "code": "UNAUTHORIZED",
            "message": "Authentication required",
        }

    @pytest.mark.asyncio
    async def test_superseded_token_is_rejected(self, client, scheduler):
        # Tokens carry second-resolution timestamps; separate the two logins
        scheduler.advance(seconds=-5)
        await sign_in(client)
        old_token = client.cookies[_COOKIE]
        scheduler.advance(seconds=5)
        await sign_in(client)

        client.cookies.set(_COOKIE, old_token)

        assert (await client.get("/api/v1/profile")).status_code == 401

    @pytest.mark.asyncio
    async def test_session_expires_after_ten_days(self, demo_client, scheduler):
        scheduler.advance(days=10, seconds=1)

        assert (await demo_client.get("/api/v1/profile")).status_code == 401
        data = (await demo_client.get("/api/v1/auth/session")).json()["data"]
        assert data["authenticated"] is False


# =============================================================================
# POST /auth/logout
# =============================================================================


class TestLogout:
    @pytest.mark.asyncio
    async def test_declined_keeps_session(self, demo_client):
        response = await demo_client.post("/api/v1/auth/logout", json={"confirm": False})

        assert response.json()["data"] == {"logged_out": False}
        assert (await demo_client.get("/api/v1/profile")).status_code == 200

    @pytest.mark.asyncio
    async def test_confirmed_ends_session_and_forgets_profile(self, test_app, client):
        await sign_in(client)
        await client.put("/api/v1/profile", json={"careerInterest": "Nurse"})
        token = client.cookies[_COOKIE]

        response = await client.post("/api/v1/auth/logout", json={"confirm": True})

        assert response.json()["data"] == {"logged_out": True}
        assert "demo-user" not in test_app.state.workspaces
        client.cookies.set(_COOKIE, token)
        assert (await client.get("/api/v1/profile")).status_code == 401

        await sign_in(client)
        profile = (await client.get("/api/v1/profile")).json()["data"]
        assert profile["isComplete"] is False

    @pytest.mark.asyncio
    async def test_without_session(self, client):
        response = await client.post("/api/v1/auth/logout", json={"confirm": True})

        assert response.status_code == 200
        assert response.json()["data"] == {"logged_out": True}
