"""远端存储访问：RemoteStoreClient + 异常分类"""

from tasktrack.remote.client import RemoteStoreClient
from tasktrack.remote.errors import RemoteError, StoreError, TransportError

__all__ = ["RemoteError", "RemoteStoreClient", "StoreError", "TransportError"]
