"""Shared fixtures: an in-memory REST store behind httpx.MockTransport and a fake Redis."""

import json

import fakeredis
import httpx
import pytest
import pytest_asyncio

from tasktrack.auth.session_store import SessionStore
from tasktrack.remote.client import RemoteStoreClient

BASE_URL = "http://store.test"


class FakeStoreServer:
    """Behaves like a json-server instance exposing /tasks and /users."""

    def __init__(self):
        self.tasks: list[dict] = []
        self.users: list[dict] = []
        self.calls: list[tuple[str, str, dict | None]] = []
        # (method, path) -> status code, or "transport" to simulate a dead socket
        self.failures: dict[tuple[str, str], int | str] = {}
        # extra fields the server adds to every task it writes
        self.derived: dict = {}
        self._next_id = 1

    def seed_tasks(self, *tasks: dict) -> None:
        for task in tasks:
            self.tasks.append(dict(task))
            if isinstance(task["id"], int):
                self._next_id = max(self._next_id, task["id"] + 1)

    def calls_to(self, method: str, path: str | None = None) -> list:
        return [c for c in self.calls if c[0] == method and (path is None or c[1] == path)]

    def _find(self, collection: list[dict], raw_id: str) -> dict | None:
        return next((r for r in collection if str(r["id"]) == raw_id), None)

    def handle(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        body = json.loads(request.content) if request.content else None
        self.calls.append((method, path, body))

        failure = self.failures.get((method, path))
        if failure == "transport":
            raise httpx.ConnectError("connection refused", request=request)
        if failure is not None:
            return httpx.Response(failure, json={"error": "rejected"})

        parts = [p for p in path.split("/") if p]
        if parts[0] == "users":
            return self._handle_users(method, body)
        if parts[0] != "tasks":
            return httpx.Response(404, json={})

        if len(parts) == 1:
            if method == "GET":
                return httpx.Response(200, json=self.tasks)
            if method == "POST":
                record = {"id": self._next_id, **body, **self.derived}
                self._next_id += 1
                self.tasks.append(record)
                return httpx.Response(201, json=record)
            return httpx.Response(405)

        record = self._find(self.tasks, parts[1])
        if record is None:
            return httpx.Response(404, json={})
        if method == "GET":
            return httpx.Response(200, json=record)
        if method == "PUT":
            record_id = record["id"]
            record.clear()
            record.update({"id": record_id, **body, **self.derived})
            return httpx.Response(200, json=record)
        if method == "PATCH":
            record.update({**body, **self.derived})
            return httpx.Response(200, json=record)
        if method == "DELETE":
            self.tasks.remove(record)
            return httpx.Response(200, json={})
        return httpx.Response(405)

    def _handle_users(self, method: str, body: dict | None) -> httpx.Response:
        if method == "GET":
            return httpx.Response(200, json=self.users)
        if method == "POST":
            self.users.append(dict(body))
            return httpx.Response(201, json=body)
        return httpx.Response(405)


@pytest.fixture
def server() -> FakeStoreServer:
    return FakeStoreServer()


@pytest_asyncio.fixture
async def client(server):
    http = httpx.AsyncClient(transport=httpx.MockTransport(server.handle), base_url=BASE_URL)
    async with RemoteStoreClient(BASE_URL, http=http) as remote:
        yield remote
    await http.aclose()


@pytest_asyncio.fixture
async def redis():
    fake = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield fake
    await fake.aclose()


@pytest.fixture
def session_store(redis) -> SessionStore:
    return SessionStore(redis, slot="test-slot")
