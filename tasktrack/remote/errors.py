"""
远端存储调用的应用级异常

- TransportError：无法连上远端（网络 / DNS / 连接失败）
- RemoteError：远端可达，但返回非 2xx 或无法解析的响应
"""


class StoreError(Exception):
    """远端存储调用失败的基类"""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class TransportError(StoreError):
    """网络层失败：请求没有拿到任何响应"""


class RemoteError(StoreError):
    """远端拒绝或处理失败，保留状态码与原始响应体"""

    def __init__(self, status: int, body: str, message: str | None = None):
        super().__init__(message or f"远端返回错误 HTTP {status}")
        self.status = status
        self.body = body

    @property
    def is_not_found(self) -> bool:
        return self.status == 404
