"""
Redis 客户端：连接池工厂 + Key 统一管理

不在 import 时创建全局连接池，由 AppContext 显式构造并注入到 SessionStore。
"""

import redis.asyncio as aioredis

from tasktrack.config import Settings


class RedisKeys:
    """
    Redis Key 统一管理，避免散弹式硬编码
    命名规范：{业务域}:{资源类型}:{标识}
    """

    # ── 登录会话 ──
    @staticmethod
    def auth_session(slot: str) -> str:
        """持久化登录会话（无 TTL，跨进程重启保留）"""
        return f"auth:session:{slot}"


def create_redis(settings: Settings) -> aioredis.Redis:
    """按配置创建带连接池的 Redis 客户端"""
    pool = aioredis.ConnectionPool.from_url(
        settings.REDIS_URL,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        decode_responses=True,
        socket_timeout=5,
        socket_connect_timeout=5,
        retry_on_timeout=True,
    )
    return aioredis.Redis(connection_pool=pool)
