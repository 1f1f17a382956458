"""
任务数据模型

Task 与远端 /tasks 资源的记录结构一一对应，
status 枚举与远端约定保持一致：pending / on_progress / completed。
"""

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, field_validator

TaskStatus = Literal["pending", "on_progress", "completed"]
StatusFilter = Literal["all", "pending", "on_progress", "completed"]

TASK_STATUSES: tuple[str, ...] = get_args(TaskStatus)

# 远端分配的 id：json-server 等实现可能返回整数或字符串
TaskId = int | str


def id_key(task_id: TaskId) -> str:
    """统一比较用的 id 形式（1 与 "1" 视为同一任务）"""
    return str(task_id)


def _require_title(v: str) -> str:
    # 只校验非空白，原样保留调用方给出的标题
    if not v.strip():
        raise ValueError("title 不能为空")
    return v


class Task(BaseModel):
    """单个任务（远端返回的完整记录）"""

    # 保留服务端附加的派生字段，状态变更后随服务端返回值一起更新
    model_config = ConfigDict(extra="allow")

    id: TaskId
    title: str
    description: str = ""
    status: TaskStatus = "pending"

    def matches(self, needle: str) -> bool:
        """标题或描述包含 needle（needle 需已转小写）"""
        return needle in self.title.lower() or needle in self.description.lower()


class TaskFields(BaseModel):
    """创建 / 整体替换时提交的字段（不含 id，由远端分配）"""

    title: str
    description: str = ""
    status: TaskStatus = "pending"

    @field_validator("title")
    @classmethod
    def _check_title(cls, v: str) -> str:
        return _require_title(v)


class TaskPatch(BaseModel):
    """部分更新：只提交显式设置过的字段"""

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None

    @field_validator("title")
    @classmethod
    def _check_title(cls, v: str | None) -> str | None:
        return None if v is None else _require_title(v)

    def to_body(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)
