"""Login, logout and profile endpoints with Redis mocked."""

import json
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from carwash.auth.passwords import hash_password
from carwash.models.user import ROLE_ORG_ADMIN, User


@pytest_asyncio.fixture
async def org_admin(session_factory, catalog) -> User:
    async with session_factory() as session:
        user = User(
            org_id=catalog.org_id,
            name="Dana Admin",
            email="dana@shine.example",
            password_hash=hash_password("correct-horse", iterations=1000),
            role=ROLE_ORG_ADMIN,
        )
        session.add(user)
        await session.commit()
        return user


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_issues_bearer_token(self, client, org_admin, mock_redis):
        resp = await client.post(
            "/api/v1/login", json={"email": "dana@shine.example", "password": "correct-horse"}
        )

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["token_type"] == "Bearer"
        assert data["user"]["id"] == org_admin.id
        mock_redis.setex.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, org_admin, mock_redis):
        resp = await client.post(
            "/api/v1/login", json={"email": "dana@shine.example", "password": "nope"}
        )

        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid credentials or account is inactive"
        mock_redis.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_inactive_user(self, client, session_factory, org_admin):
        async with session_factory() as session:
            user = await session.get(User, org_admin.id)
            user.is_active = False
            await session.commit()

        resp = await client.post(
            "/api/v1/login", json={"email": "dana@shine.example", "password": "correct-horse"}
        )
        assert resp.status_code == 401


class TestSessionEndpoints:
    @pytest.mark.asyncio
    async def test_me_requires_token(self, client):
        resp = await client.get("/api/v1/me")
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Unauthenticated"}

    @pytest.mark.asyncio
    async def test_me_returns_profile(self, client, org_admin, mock_redis):
        mock_redis.get = AsyncMock(return_value=json.dumps({"user_id": org_admin.id}))

        resp = await client.get("/api/v1/me", headers={"Authorization": "Bearer abc"})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["email"] == "dana@shine.example"
        assert data["organization"]["name"] == "Shine Car Wash"
        assert data["branch"] is None

    @pytest.mark.asyncio
    async def test_logout_drops_session(self, client, org_admin, mock_redis):
        mock_redis.get = AsyncMock(return_value=json.dumps({"user_id": org_admin.id}))

        resp = await client.post("/api/v1/logout", headers={"Authorization": "Bearer abc"})

        assert resp.status_code == 200
        mock_redis.delete.assert_awaited_once()
