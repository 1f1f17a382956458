"""
认证模块：SessionManager（登录 / 注册 / 注销）+ Redis 持久化的 SessionStore

schemas 被 remote.client 引用，本包不做聚合导出。
"""
