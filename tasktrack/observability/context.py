"""
链路追踪上下文：通过 contextvars 在协程间自动传播 trace_id

控制台每条命令生成一个 trace_id，RemoteStoreClient 读取后写入 X-Trace-ID 请求头，
远端日志与本地日志可按同一 trace_id 关联。
"""

import contextvars
import uuid

import structlog

# ── 全局上下文变量 ──
trace_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("trace_id", default="")


def new_trace_id() -> str:
    """生成新的 trace_id"""
    return str(uuid.uuid4())


def get_trace_id() -> str:
    return trace_id_var.get()


def bind_trace_id(trace_id: str | None = None) -> str:
    """设置当前上下文的 trace_id，并绑定到 structlog，后续日志自动携带"""
    trace_id = trace_id or new_trace_id()
    trace_id_var.set(trace_id)
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(trace_id=trace_id)
    return trace_id
