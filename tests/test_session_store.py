"""Tests for the Redis-backed SessionStore."""

from unittest.mock import AsyncMock

import redis.exceptions

from tasktrack.auth.schemas import Session
from tasktrack.auth.session_store import SessionStore


def _session() -> Session:
    return Session(id="1", name="Ann", email="ann@example.com")


async def test_save_then_load(session_store):
    await session_store.save(_session())

    assert await session_store.load() == _session()


async def test_stored_format_uses_wire_alias(session_store, redis):
    await session_store.save(_session())

    raw = await redis.get("auth:session:test-slot")
    assert '"isAuthenticated":true' in raw
    assert "is_authenticated" not in raw


async def test_save_none_clears_slot(session_store, redis):
    await session_store.save(_session())
    await session_store.save(None)

    assert await redis.exists(session_store.key) == 0
    assert await session_store.load() is None


async def test_slots_are_isolated(redis):
    a = SessionStore(redis, slot="a")
    b = SessionStore(redis, slot="b")

    await a.save(_session())

    assert await b.load() is None


async def test_corrupt_value_loads_as_absent(session_store, redis):
    await redis.set(session_store.key, "{not json")

    assert await session_store.load() is None


async def test_redis_outage_degrades():
    broken = AsyncMock()
    broken.get.side_effect = redis.exceptions.ConnectionError("down")
    broken.set.side_effect = redis.exceptions.ConnectionError("down")
    store = SessionStore(broken)

    assert await store.load() is None
    await store.save(_session())

    broken.set.assert_awaited_once()
