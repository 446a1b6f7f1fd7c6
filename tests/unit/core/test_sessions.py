"""Tests for the Redis-backed session store."""

import json
from unittest.mock import AsyncMock

import pytest

from core.sessions import KEY_PREFIX, SessionData, SessionStore


@pytest.fixture
def redis():
    return AsyncMock()


@pytest.fixture
def store(redis):
    return SessionStore(redis=redis, ttl=60)


class TestSessionStore:
    """Test session create / get / delete."""

    @pytest.mark.asyncio
    async def test_create_stores_json_with_ttl(self, store, redis, session_data):
        session_id = await store.create(session_data)

        redis.set.assert_awaited_once()
        key, value = redis.set.await_args.args
        assert key == f"{KEY_PREFIX}{session_id}"
        assert json.loads(value) == {
            "user_id": session_data.user_id,
            "tenant_id": session_data.tenant_id,
            "email": session_data.email,
        }
        assert redis.set.await_args.kwargs == {"ex": 60}

    @pytest.mark.asyncio
    async def test_session_ids_are_unique(self, store, session_data):
        assert await store.create(session_data) != await store.create(session_data)

    @pytest.mark.asyncio
    async def test_get(self, store, redis, session_data):
        redis.get.return_value = json.dumps(
            {"user_id": session_data.user_id, "tenant_id": session_data.tenant_id, "email": session_data.email}
        )

        assert await store.get("abc") == session_data
        redis.get.assert_awaited_once_with(f"{KEY_PREFIX}abc")

    @pytest.mark.asyncio
    async def test_get_missing(self, store, redis):
        redis.get.return_value = None
        assert await store.get("abc") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("deleted,expected", [(1, True), (0, False)])
    async def test_delete(self, store, redis, deleted, expected):
        redis.delete.return_value = deleted
        assert await store.delete("abc") is expected

    def test_uninitialized_store_raises(self):
        with pytest.raises(RuntimeError):
            SessionStore().redis

    @pytest.mark.asyncio
    async def test_close(self, store, redis):
        await store.close()

        redis.aclose.assert_awaited_once()
        with pytest.raises(RuntimeError):
            store.redis
