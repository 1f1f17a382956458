"""
远端存储客户端：/tasks 与 /users 两个资源集合的类型化封装

每个方法恰好一次 HTTP 往返，不缓存、不重试：
- 连接 / DNS / 读写失败 → TransportError
- 非 2xx 响应或响应体不符合记录结构 → RemoteError(status, body)
重试策略（如有）属于调用方，不在本层处理。
"""

import time
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from tasktrack.auth.schemas import UserRecord
from tasktrack.observability.context import get_trace_id
from tasktrack.remote.errors import RemoteError, TransportError
from tasktrack.tasks.schemas import Task, TaskFields, TaskId, TaskPatch

log = structlog.get_logger()

TASKS_PATH = "/tasks"
USERS_PATH = "/users"

_task_list = TypeAdapter(list[Task])
_user_list = TypeAdapter(list[UserRecord])


class RemoteStoreClient:
    """远端资源集合的请求/响应映射"""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        # 注入的 AsyncClient 由调用方负责关闭
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "RemoteStoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ── 基础请求 ──

    async def _request(
        self, method: str, path: str, body: dict | None = None
    ) -> tuple[int, Any]:
        """发送一次请求，返回 (状态码, 解析后的 JSON)；空响应体为 None"""
        headers = {}
        trace_id = get_trace_id()
        if trace_id:
            headers["X-Trace-ID"] = trace_id

        start = time.monotonic()
        try:
            resp = await self._http.request(method, path, json=body, headers=headers)
        except httpx.TransportError as e:
            log.warning("远端存储不可达", method=method, path=path, error=str(e))
            raise TransportError(f"无法连接远端存储: {method} {path}: {e}", cause=e) from e

        duration_ms = int((time.monotonic() - start) * 1000)
        log.debug(
            "远端请求完成",
            method=method,
            path=path,
            status_code=resp.status_code,
            duration_ms=duration_ms,
        )

        if not resp.is_success:
            log.warning("远端返回错误", method=method, path=path, status_code=resp.status_code)
            raise RemoteError(resp.status_code, resp.text)

        if not resp.content:
            return resp.status_code, None
        try:
            return resp.status_code, resp.json()
        except ValueError as e:
            raise RemoteError(resp.status_code, resp.text, f"远端响应不是合法 JSON: {e}") from e

    @staticmethod
    def _parse(adapter_or_model: Any, status: int, data: Any) -> Any:
        """把响应体校验为记录结构，结构不符视为远端错误"""
        try:
            if isinstance(adapter_or_model, TypeAdapter):
                return adapter_or_model.validate_python(data)
            return adapter_or_model.model_validate(data)
        except ValidationError as e:
            raise RemoteError(status, repr(data), f"远端记录结构不符: {e.error_count()} 处错误") from e

    @staticmethod
    def _body(fields: BaseModel | dict) -> dict:
        if isinstance(fields, TaskPatch):
            return fields.to_body()
        if isinstance(fields, BaseModel):
            return fields.model_dump(mode="json")
        return dict(fields)

    # ── 任务资源 ──

    async def list_tasks(self) -> list[Task]:
        status, data = await self._request("GET", TASKS_PATH)
        return self._parse(_task_list, status, data)

    async def get_task(self, task_id: TaskId) -> Task:
        status, data = await self._request("GET", f"{TASKS_PATH}/{task_id}")
        return self._parse(Task, status, data)

    async def create_task(self, fields: TaskFields | dict) -> Task:
        """创建任务，id 由远端分配"""
        status, data = await self._request("POST", TASKS_PATH, self._body(fields))
        return self._parse(Task, status, data)

    async def replace_task(self, task_id: TaskId, fields: TaskFields | dict) -> Task:
        status, data = await self._request("PUT", f"{TASKS_PATH}/{task_id}", self._body(fields))
        return self._parse(Task, status, data)

    async def patch_task(self, task_id: TaskId, partial: TaskPatch | dict) -> Task:
        status, data = await self._request("PATCH", f"{TASKS_PATH}/{task_id}", self._body(partial))
        return self._parse(Task, status, data)

    async def delete_task(self, task_id: TaskId) -> None:
        await self._request("DELETE", f"{TASKS_PATH}/{task_id}")

    # ── 用户资源 ──

    async def list_users(self) -> list[UserRecord]:
        status, data = await self._request("GET", USERS_PATH)
        return self._parse(_user_list, status, data)

    async def create_user(self, user: UserRecord | dict) -> UserRecord:
        status, data = await self._request("POST", USERS_PATH, self._body(user))
        return self._parse(UserRecord, status, data)
