"""
任务本地镜像（TaskCache）

职责：
- 持有远端 /tasks 集合的有序本地副本（镜像），保持服务端返回的顺序
- 变更操作先等远端确认，成功后才更新镜像；失败时镜像保持原样并向上抛出异常
- 提供按状态过滤 + 文本搜索的派生视图，每次 view() 现算，不修改镜像

并发说明：
- 同一任务 id 上的变更通过按 id 的 asyncio.Lock 串行执行
  最后一个使用者退出后锁条目即被移除
- refresh() 不加锁，多个 refresh 并发时以最后完成的响应为准；
  比变更更晚完成的 refresh 可能用旧数据覆盖变更结果
"""

import asyncio
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager

import structlog

from tasktrack.remote.client import RemoteStoreClient
from tasktrack.tasks.schemas import (
    StatusFilter,
    Task,
    TaskFields,
    TaskId,
    TaskPatch,
    TaskStatus,
    id_key,
)

log = structlog.get_logger()


class NotFoundLocally(KeyError):
    """目标任务不在本地镜像中（非致命）"""

    def __init__(self, task_id: TaskId):
        super().__init__(task_id)
        self.task_id = task_id


class TaskView:
    """
    过滤后的只读投影：惰性、有限、可重复迭代。

    构造时冻结镜像快照与过滤条件，之后镜像的变化不影响本视图。
    """

    def __init__(self, tasks: tuple[Task, ...], status: StatusFilter, search: str):
        self._tasks = tasks
        self._status = status
        self._needle = search.lower()

    def __iter__(self) -> Iterator[Task]:
        # 先按状态过滤，再做标题/描述的大小写不敏感子串匹配
        for task in self._tasks:
            if self._status != "all" and task.status != self._status:
                continue
            if self._needle and not task.matches(self._needle):
                continue
            yield task

    def count(self) -> int:
        return sum(1 for _ in self)

    def to_list(self) -> list[Task]:
        return list(self)


class TaskCache:
    """远端任务集合的本地镜像"""

    def __init__(self, client: RemoteStoreClient):
        self._client = client
        self._tasks: list[Task] = []
        self._status: StatusFilter = "all"
        self._search = ""
        # 只保留正在使用的锁：key -> (锁, 持有或等待的协程数)
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    # ── 读取 ──

    @property
    def tasks(self) -> tuple[Task, ...]:
        """当前镜像快照"""
        return tuple(self._tasks)

    @property
    def status_filter(self) -> StatusFilter:
        return self._status

    @property
    def search(self) -> str:
        return self._search

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: TaskId) -> Task:
        """本地查找，不发请求；不存在时抛 NotFoundLocally"""
        idx = self._index_of(task_id)
        if idx is None:
            raise NotFoundLocally(task_id)
        return self._tasks[idx]

    def view(self) -> TaskView:
        """按当前过滤条件生成视图"""
        return TaskView(self.tasks, self._status, self._search)

    # ── 过滤条件（纯状态，不发请求） ──

    def set_filter(self, status: StatusFilter) -> None:
        self._status = status

    def set_search(self, text: str) -> None:
        self._search = text

    # ── 内部工具 ──

    def _index_of(self, task_id: TaskId) -> int | None:
        key = id_key(task_id)
        for i, task in enumerate(self._tasks):
            if id_key(task.id) == key:
                return i
        return None

    @asynccontextmanager
    async def _locked(self, task_id: TaskId) -> AsyncIterator[None]:
        """按 id 串行执行变更；最后一个使用者退出时释放锁条目"""
        key = id_key(task_id)
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[key]
            if users == 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    def _replace_local(self, task_id: TaskId, task: Task) -> bool:
        """用服务端记录替换本地条目，条目不存在时返回 False"""
        idx = self._index_of(task_id)
        if idx is None:
            return False
        self._tasks[idx] = task
        return True

    # ── 同步 ──

    async def refresh(self) -> list[Task]:
        """拉取全部任务，整体替换镜像（保持服务端顺序）"""
        tasks = await self._client.list_tasks()
        self._tasks = list(tasks)
        log.info("任务镜像已刷新", count=len(self._tasks))
        return list(self._tasks)

    async def fetch(self, task_id: TaskId) -> Task:
        """拉取单个任务并写回镜像：已存在则原位替换，否则追加"""
        task = await self._client.get_task(task_id)
        if not self._replace_local(task_id, task):
            self._tasks.append(task)
        return task

    # ── 变更 ──

    async def create(self, fields: TaskFields) -> Task:
        """创建任务，远端确认后追加到镜像末尾"""
        task = await self._client.create_task(fields)
        self._tasks.append(task)
        log.info("任务已创建", task_id=task.id)
        return task

    async def replace(self, task_id: TaskId, fields: TaskFields) -> Task:
        """整体替换任务（PUT），以服务端返回值更新镜像"""
        async with self._locked(task_id):
            task = await self._client.replace_task(task_id, fields)
            if not self._replace_local(task_id, task):
                log.warning("替换的任务不在本地镜像中", task_id=task_id)
        return task

    async def remove(self, task_id: TaskId) -> bool:
        """
        删除任务。

        只有远端删除成功后才移除本地条目；远端失败时镜像不变、异常上抛。
        本地没有该条目时视为空操作，返回 False。
        """
        async with self._locked(task_id):
            await self._client.delete_task(task_id)
            idx = self._index_of(task_id)
            if idx is None:
                log.info("删除的任务不在本地镜像中，跳过", task_id=task_id)
                return False
            del self._tasks[idx]
        log.info("任务已删除", task_id=task_id)
        return True

    async def set_status(self, task_id: TaskId, status: TaskStatus) -> Task:
        """
        修改任务状态（PATCH）。

        以服务端返回的完整记录替换本地条目，而不是只改 status，
        保证服务端派生字段同步正确。
        """
        async with self._locked(task_id):
            task = await self._client.patch_task(task_id, TaskPatch(status=status))
            if not self._replace_local(task_id, task):
                log.warning("状态变更的任务不在本地镜像中", task_id=task_id)
        log.info("任务状态已更新", task_id=task_id, status=task.status)
        return task
