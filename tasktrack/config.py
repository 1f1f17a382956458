"""
全局配置模块：通过 pydantic-settings 读取 .env 环境变量
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """客户端全局配置，从 .env 文件加载"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── 远端存储 ──
    STORE_BASE_URL: str
    STORE_TIMEOUT: float | None = None  # 不设超时：远端挂起时调用方一直等待

    # ── Redis（会话持久化） ──
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10
    SESSION_SLOT: str = "auth-storage"

    # ── 认证 ──
    HASH_PASSWORDS: bool = True  # 注册时以 bcrypt 哈希写入密码

    # ── 应用 ──
    ENV: str = "development"  # development | production
    LOG_LEVEL: str = "INFO"
    APP_NAME: str = "tasktrack"

    @field_validator("STORE_BASE_URL")
    @classmethod
    def _check_base_url(cls, v: str) -> str:
        """远端地址必须是 http(s)，去掉末尾斜杠便于拼接路径"""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("STORE_BASE_URL 必须以 http:// 或 https:// 开头")
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """单例获取配置（带缓存）"""
    return Settings()
