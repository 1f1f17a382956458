"""
登录会话 Redis 存储层

固定命名槽位，Key = auth:session:{slot}，不设 TTL（跨进程重启保留）。
值为 Session.to_json()：{id, name, email, isAuthenticated}；无会话时删除 Key。

容错策略：
- load() 失败时：记录错误日志并返回 None（以未登录状态启动）
- save() 失败时：记录错误日志并静默忽略（进程内会话仍以内存为准）
"""

import redis.asyncio as aioredis
import structlog
from pydantic import ValidationError

from tasktrack.auth.schemas import Session
from tasktrack.cache.redis_client import RedisKeys

log = structlog.get_logger()


class SessionStore:
    """单槽位会话持久化"""

    def __init__(self, redis: aioredis.Redis, slot: str = "auth-storage"):
        self.redis = redis
        self.slot = slot

    @property
    def key(self) -> str:
        return RedisKeys.auth_session(self.slot)

    async def load(self) -> Session | None:
        """读取已持久化的会话，不存在、损坏或 Redis 不可用时返回 None"""
        try:
            raw = await self.redis.get(self.key)
        except Exception as e:
            log.error("SessionStore.load 失败，按未登录处理", slot=self.slot, error=str(e))
            return None
        if not raw:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError as e:
            log.error("持久化会话无法解析，已忽略", slot=self.slot, error=str(e))
            return None

    async def save(self, session: Session | None) -> None:
        """覆盖写入会话；传 None 表示清除"""
        try:
            if session is None:
                await self.redis.delete(self.key)
            else:
                await self.redis.set(self.key, session.to_json())
        except Exception as e:
            log.error("SessionStore.save 失败，会话未持久化", slot=self.slot, error=str(e))
