"""Tests for AppContext wiring."""

from tasktrack.auth.schemas import Session
from tasktrack.auth.session_store import SessionStore
from tasktrack.config import Settings
from tasktrack.context import AppContext

from .conftest import BASE_URL


def _settings() -> Settings:
    return Settings(_env_file=None, STORE_BASE_URL=BASE_URL, SESSION_SLOT="ctx-slot")


async def test_create_restores_persisted_session(client, redis):
    await SessionStore(redis, slot="ctx-slot").save(Session(id="5", name="Eve", email="eve@example.com"))

    ctx = await AppContext.create(_settings(), redis=redis, client=client)

    assert ctx.sessions.is_authenticated
    assert ctx.sessions.current.name == "Eve"
    assert len(ctx.tasks) == 0


async def test_components_share_one_client(client, redis, server):
    server.seed_tasks({"id": 1, "title": "A", "description": "", "status": "pending"})
    server.users.append({"id": "1", "name": "Ann", "email": "a@b.com", "password": "pw"})

    ctx = await AppContext.create(_settings(), redis=redis, client=client)

    assert not ctx.sessions.is_authenticated
    assert await ctx.sessions.login("a@b.com", "pw")
    await ctx.tasks.refresh()
    assert [t.title for t in ctx.tasks.view()] == ["A"]
    assert ctx.client is client
