"""
用户与会话数据模型

UserRecord 对应远端 /users 资源（含密码字段），
Session 是持久化到 SessionStore 的登录态（不含密码）。
"""

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """远端用户记录"""

    model_config = ConfigDict(extra="allow")

    id: int | str
    name: str = ""
    email: str
    # 远端记录可能缺少 password 字段，此时任何密码都不匹配
    password: str | None = None


class Session(BaseModel):
    """当前登录用户（password 已剥离）"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    is_authenticated: bool = Field(default=True, alias="isAuthenticated")

    @classmethod
    def from_user(cls, user: UserRecord) -> "Session":
        """由远端用户记录构造会话，只取 id / name / email"""
        return cls(id=str(user.id), name=user.name, email=user.email, is_authenticated=True)

    def to_json(self) -> str:
        """序列化为持久化格式：{id, name, email, isAuthenticated}"""
        return self.model_dump_json(by_alias=True)
