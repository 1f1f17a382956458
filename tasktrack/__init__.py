"""tasktrack：个人任务追踪客户端的状态同步层"""

__version__ = "0.1.0"
