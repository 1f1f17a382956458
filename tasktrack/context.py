"""
应用上下文：显式构造、按引用传递的组件容器

依赖顺序：RemoteStoreClient ← TaskCache；RemoteStoreClient ← SessionManager ← SessionStore。
不使用模块级全局单例，测试可直接注入替身组件。

使用方式：
    async with await AppContext.create(get_settings()) as ctx:
        await ctx.sessions.login(email, password)
        await ctx.tasks.refresh()
"""

from dataclasses import dataclass

import redis.asyncio as aioredis
import structlog

from tasktrack.auth.session_manager import SessionManager
from tasktrack.auth.session_store import SessionStore
from tasktrack.cache.redis_client import create_redis
from tasktrack.config import Settings
from tasktrack.remote.client import RemoteStoreClient
from tasktrack.tasks.cache import TaskCache

log = structlog.get_logger()


@dataclass
class AppContext:
    """一次进程运行所需的全部状态"""

    client: RemoteStoreClient
    redis: aioredis.Redis
    tasks: TaskCache
    sessions: SessionManager

    @classmethod
    async def create(
        cls,
        settings: Settings,
        redis: aioredis.Redis | None = None,
        client: RemoteStoreClient | None = None,
    ) -> "AppContext":
        """组装组件，并在开始服务前恢复已持久化的会话"""
        client = client or RemoteStoreClient(settings.STORE_BASE_URL, timeout=settings.STORE_TIMEOUT)
        redis = redis or create_redis(settings)
        store = SessionStore(redis, slot=settings.SESSION_SLOT)
        sessions = SessionManager(client, store, hash_passwords=settings.HASH_PASSWORDS)
        await sessions.load()

        log.info(
            "应用上下文就绪",
            store=settings.STORE_BASE_URL,
            authenticated=sessions.is_authenticated,
        )
        return cls(client=client, redis=redis, tasks=TaskCache(client), sessions=sessions)

    async def aclose(self) -> None:
        """释放 HTTP 与 Redis 连接"""
        await self.client.aclose()
        await self.redis.aclose()

    async def __aenter__(self) -> "AppContext":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
