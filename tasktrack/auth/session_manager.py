"""
会话管理：登录 / 注册 / 注销

远端存储只是通用资源集合，没有认证接口，因此凭据校验在客户端完成：
拉取完整用户列表后本地比对。进程内同一时刻至多一个会话，
每次变化都写入 SessionStore，启动时调用 load() 恢复。

凭据错误、邮箱重复是预期结果，返回 False 而不抛异常；
远端 / 网络异常原样上抛，会话保持调用前的状态。
"""

import asyncio
import time

import structlog

from tasktrack.auth.passwords import hash_password, password_matches
from tasktrack.auth.schemas import Session, UserRecord
from tasktrack.auth.session_store import SessionStore
from tasktrack.remote.client import RemoteStoreClient

log = structlog.get_logger()


class NotAuthenticatedError(Exception):
    """当前没有已登录的会话"""


class SessionManager:
    """持有进程内唯一的登录会话"""

    def __init__(
        self,
        client: RemoteStoreClient,
        store: SessionStore,
        hash_passwords: bool = True,
    ):
        self._client = client
        self._store = store
        self._hash_passwords = hash_passwords
        self._session: Session | None = None
        self._lock = asyncio.Lock()
        self._last_user_id = 0

    # ── 状态 ──

    @property
    def current(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None and self._session.is_authenticated

    def require_session(self) -> Session:
        """返回当前会话，未登录时抛 NotAuthenticatedError"""
        if not self.is_authenticated:
            raise NotAuthenticatedError("请先登录")
        return self._session

    async def load(self) -> Session | None:
        """启动时从 SessionStore 恢复会话"""
        async with self._lock:
            self._session = await self._store.load()
        if self._session:
            log.info("已恢复登录会话", user_id=self._session.id)
        return self._session

    async def _establish(self, user: UserRecord) -> Session:
        session = Session.from_user(user)
        self._session = session
        await self._store.save(session)
        return session

    def _new_user_id(self) -> str:
        """毫秒时间戳 id，同一进程内严格递增"""
        candidate = time.time_ns() // 1_000_000
        if candidate <= self._last_user_id:
            candidate = self._last_user_id + 1
        self._last_user_id = candidate
        return str(candidate)

    # ── 操作 ──

    async def login(self, email: str, password: str) -> bool:
        """邮箱与密码都精确匹配（大小写敏感）时建立会话"""
        async with self._lock:
            users = await self._client.list_users()
            user = next(
                (u for u in users if u.email == email and password_matches(u.password, password)),
                None,
            )
            if user is None:
                log.info("登录失败：邮箱或密码错误", email=email)
                return False
            await self._establish(user)
        log.info("用户登录成功", user_id=str(user.id))
        return True

    async def register(self, name: str, email: str, password: str) -> bool:
        """邮箱未被占用时创建用户并直接登录；邮箱重复返回 False，不创建任何记录"""
        async with self._lock:
            users = await self._client.list_users()
            if any(u.email == email for u in users):
                log.info("注册失败：邮箱已存在", email=email)
                return False

            stored_password = hash_password(password) if self._hash_passwords else password
            new_user = UserRecord(
                id=self._new_user_id(),
                name=name,
                email=email,
                password=stored_password,
            )
            await self._client.create_user(new_user)
            # 以本地生成的记录建立会话，与远端返回值是否回显 id 无关
            await self._establish(new_user)
        log.info("用户注册成功", user_id=new_user.id)
        return True

    async def logout(self) -> None:
        """清除会话并持久化，无远端副作用"""
        async with self._lock:
            previous = self._session
            self._session = None
            await self._store.save(None)
        if previous:
            log.info("用户注销", user_id=previous.id)
