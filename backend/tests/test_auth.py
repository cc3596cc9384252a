"""
Authentication endpoint tests.

Tests for:
- Registration and login
- Current user / profile update
- Password change and reset
"""

import logging
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from studyhub.config import get_settings
from studyhub.db.models import User, utcnow
from studyhub.db.storage import storage


@pytest.mark.asyncio
class TestRegister:
    async def test_register_returns_token_and_sets_cookie(self, client: AsyncClient):
        response = await client.post(
            "/api/register",
            json={"email": "New.Student@example.com", "password": "long-enough", "first_name": "New"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert "access_token" in response.cookies

        me = await client.get("/api/user", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.json()["email"] == "new.student@example.com"
        assert "hashed_password" not in me.json()

    async def test_register_duplicate_email_conflicts(self, client: AsyncClient, user: User):
        response = await client.post("/api/register", json={"email": "ADA@example.com", "password": "long-enough"})

        assert response.status_code == 409

    async def test_register_short_password_is_invalid_data(self, client: AsyncClient):
        response = await client.post("/api/register", json={"email": "x@example.com", "password": "short"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid data"
        assert response.json()["errors"]


@pytest.mark.asyncio
class TestLogin:
    async def test_login_success(self, client: AsyncClient, user: User, password: str):
        response = await client.post("/api/login", json={"email": user.email, "password": password})

        assert response.status_code == 200
        assert response.json()["access_token"]

    async def test_login_wrong_password(self, client: AsyncClient, user: User):
        response = await client.post("/api/login", json={"email": user.email, "password": "wrong-password"})

        assert response.status_code == 401

    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post("/api/login", json={"email": "nobody@example.com", "password": "whatever1"})

        assert response.status_code == 401

    async def test_login_stamps_last_login(
        self, client: AsyncClient, user: User, password: str, auth_headers: dict
    ):
        await client.post("/api/login", json={"email": user.email, "password": password})
        client.cookies.clear()

        response = await client.get("/api/user", headers=auth_headers)

        assert response.json()["last_login_at"] is not None


async def test_unauthenticated_requests_are_rejected(client: AsyncClient):
    assert (await client.get("/api/user")).status_code == 401
    assert (await client.get("/api/workspaces")).status_code == 401
    assert (await client.get("/api/user", headers={"Authorization": "Bearer not-a-jwt"})).status_code == 401


async def test_update_profile_is_partial(client: AsyncClient, auth_headers: dict):
    response = await client.patch("/api/profile", json={"bio": "Physics major"}, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["bio"] == "Physics major"
    assert data["first_name"] == "Ada"


@pytest.mark.asyncio
class TestProfileNulls:
    async def test_null_timezone_is_invalid_data(self, client: AsyncClient, auth_headers: dict):
        response = await client.patch("/api/profile", json={"timezone": None}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid data"

        me = await client.get("/api/user", headers=auth_headers)
        assert me.json()["timezone"] == "UTC"

    async def test_null_clears_nullable_field(self, client: AsyncClient, auth_headers: dict):
        await client.patch("/api/profile", json={"bio": "Physics major"}, headers=auth_headers)

        response = await client.patch("/api/profile", json={"bio": None}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["bio"] is None


@pytest.mark.asyncio
class TestPasswords:
    async def test_change_password_requires_current(
        self, client: AsyncClient, user: User, password: str, auth_headers: dict
    ):
        response = await client.post(
            "/api/change-password",
            json={"current_password": "not-it", "new_password": "brand-new-pass"},
            headers=auth_headers,
        )
        assert response.status_code == 400

        response = await client.post(
            "/api/change-password",
            json={"current_password": password, "new_password": "brand-new-pass"},
            headers=auth_headers,
        )
        assert response.status_code == 200

        login = await client.post("/api/login", json={"email": user.email, "password": "brand-new-pass"})
        assert login.status_code == 200

    async def test_forgot_password_response_is_neutral(self, client: AsyncClient, user: User):
        known = await client.post("/api/forgot-password", json={"email": user.email})
        unknown = await client.post("/api/forgot-password", json={"email": "nobody@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()

    async def test_reset_token_is_single_use(
        self, client: AsyncClient, db_session: AsyncSession, user: User
    ):
        await client.post("/api/forgot-password", json={"email": user.email})
        stored = await storage.get_user_by_email(db_session, user.email)
        await db_session.refresh(stored)
        token = stored.reset_token
        assert token

        first = await client.post("/api/reset-password", json={"token": token, "password": "reset-pass-1"})
        second = await client.post("/api/reset-password", json={"token": token, "password": "reset-pass-2"})

        assert first.status_code == 200
        assert second.status_code == 400
        login = await client.post("/api/login", json={"email": user.email, "password": "reset-pass-1"})
        assert login.status_code == 200

    async def test_expired_reset_token_is_rejected(self, client: AsyncClient, db_session: AsyncSession, user: User):
        await storage.update_user_reset_token(db_session, user, "stale-token", utcnow() - timedelta(minutes=1))

        response = await client.post("/api/reset-password", json={"token": "stale-token", "password": "reset-pass-1"})

        assert response.status_code == 400


@pytest.mark.asyncio
class TestResetTokenLogging:
    async def test_token_logged_in_development(
        self, client: AsyncClient, db_session: AsyncSession, user: User, caplog: pytest.LogCaptureFixture
    ):
        caplog.set_level(logging.INFO, logger="studyhub.api.routes.auth")

        await client.post("/api/forgot-password", json={"email": user.email})

        stored = await storage.get_user_by_email(db_session, user.email)
        await db_session.refresh(stored)
        assert stored.reset_token in caplog.text

    @pytest.mark.parametrize("environment", ["staging", "production"])
    async def test_token_not_logged_outside_development(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        user: User,
        caplog: pytest.LogCaptureFixture,
        monkeypatch: pytest.MonkeyPatch,
        environment: str,
    ):
        monkeypatch.setattr(get_settings(), "environment", environment)
        caplog.set_level(logging.INFO, logger="studyhub.api.routes.auth")

        await client.post("/api/forgot-password", json={"email": user.email})

        stored = await storage.get_user_by_email(db_session, user.email)
        await db_session.refresh(stored)
        assert stored.reset_token
        assert stored.reset_token not in caplog.text
        assert f"Password reset token issued for user {user.id}" in caplog.text
