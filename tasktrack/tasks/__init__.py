"""
Task 模块：远端任务集合的本地镜像

- schemas：Task / TaskFields / TaskPatch 与状态枚举
- cache：TaskCache（镜像 + 变更 + 过滤视图）
"""
