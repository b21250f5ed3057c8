"""Tests for the shared session-store connection."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from carwash import redis_client


@pytest.fixture
def fresh_store(monkeypatch):
    """Start each test without a cached client."""
    monkeypatch.setattr(redis_client, "_session_store", None)
    from_url = MagicMock(return_value=AsyncMock())
    monkeypatch.setattr(redis_client.Redis, "from_url", from_url)
    return from_url


class TestSessionStore:
    def test_client_is_created_once(self, fresh_store):
        first = redis_client.session_store()
        second = redis_client.session_store()

        assert first is second
        fresh_store.assert_called_once_with(
            redis_client.settings.redis_url, decode_responses=True
        )

    @pytest.mark.asyncio
    async def test_dependency_returns_shared_client(self, fresh_store):
        assert await redis_client.get_redis() is redis_client.session_store()

    @pytest.mark.asyncio
    async def test_close_releases_client(self, fresh_store):
        client = redis_client.session_store()

        await redis_client.close_redis()

        client.aclose.assert_awaited_once()
        assert redis_client._session_store is None

    @pytest.mark.asyncio
    async def test_close_without_client_is_noop(self, fresh_store):
        await redis_client.close_redis()

        fresh_store.assert_not_called()
