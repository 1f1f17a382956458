"""
控制台交互脚本：在终端里登录并管理远端任务

运行方式：
    STORE_BASE_URL=http://localhost:3000 python scripts/task_console.py

支持命令：
    /login <email> <password>            — 登录
    /register <name> <email> <password>  — 注册并登录
    /logout                              — 注销
    /whoami                              — 当前用户
    /refresh                             — 从远端重新拉取任务
    /list                                — 按当前过滤条件列出任务
    /filter <all|pending|on_progress|completed>
    /search [text]                       — 设置搜索词（留空清除）
    /add <title> [description]           — 新建任务
    /show <id>                           — 从远端读取单个任务
    /edit <id> <title> [description] [status]
    /status <id> <pending|on_progress|completed>
    /delete <id>
    /quit                                — 退出

参数含空格时用引号包起来，例如：/add "买牛奶" "下班路上"
"""

import asyncio
import shlex
import sys
from pathlib import Path

from prompt_toolkit import PromptSession

# 确保项目根目录在 sys.path 中
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from tasktrack.auth.session_manager import NotAuthenticatedError
from tasktrack.config import get_settings
from tasktrack.context import AppContext
from tasktrack.observability.context import bind_trace_id
from tasktrack.observability.logging_config import setup_logging
from tasktrack.remote.errors import RemoteError, TransportError
from tasktrack.tasks.schemas import TASK_STATUSES, Task, TaskFields

_STATUS_LABELS = {
    "pending": "\033[33mpending\033[0m",
    "on_progress": "\033[34mon_progress\033[0m",
    "completed": "\033[32mcompleted\033[0m",
}

_AUTH_COMMANDS = {"/login", "/register", "/logout", "/whoami", "/quit", "/help"}


def _print_task(task: Task) -> None:
    label = _STATUS_LABELS.get(task.status, task.status)
    print(f"  [{task.id}] {task.title}  ({label})")
    if task.description:
        print(f"\033[90m      {task.description}\033[0m")


def _check_status(raw: str) -> str:
    if raw not in TASK_STATUSES:
        raise ValueError(f"未知状态: {raw}，可选 {', '.join(TASK_STATUSES)}")
    return raw


async def handle(ctx: AppContext, argv: list[str]) -> bool:
    """执行一条命令，返回 False 表示退出"""
    cmd, args = argv[0], argv[1:]
    sessions, tasks = ctx.sessions, ctx.tasks

    # 受保护命令：未登录时拒绝
    if cmd not in _AUTH_COMMANDS:
        sessions.require_session()

    if cmd == "/quit":
        return False

    if cmd == "/help":
        print(__doc__)
    elif cmd == "/login":
        ok = await sessions.login(args[0], args[1])
        print("登录成功" if ok else "邮箱或密码错误")
        if ok:
            await tasks.refresh()
    elif cmd == "/register":
        ok = await sessions.register(args[0], args[1], args[2])
        print("注册成功，已登录" if ok else "该邮箱已注册")
        if ok:
            await tasks.refresh()
    elif cmd == "/logout":
        await sessions.logout()
        print("已注销")
    elif cmd == "/whoami":
        s = sessions.current
        print(f"  {s.name} <{s.email}> (id={s.id})" if s else "  未登录")
    elif cmd == "/refresh":
        await tasks.refresh()
        print(f"  共 {len(tasks)} 个任务")
    elif cmd == "/list":
        view = tasks.view()
        for task in view:
            _print_task(task)
        count = view.count()
        print(f"\033[90m  {count} task{'s' if count != 1 else ''} "
              f"(filter={tasks.status_filter}, search={tasks.search!r})\033[0m")
    elif cmd == "/filter":
        value = args[0] if args else "all"
        tasks.set_filter("all" if value == "all" else _check_status(value))
    elif cmd == "/search":
        tasks.set_search(" ".join(args))
    elif cmd == "/add":
        task = await tasks.create(TaskFields(title=args[0], description=args[1] if len(args) > 1 else ""))
        _print_task(task)
    elif cmd == "/show":
        _print_task(await tasks.fetch(args[0]))
    elif cmd == "/edit":
        current = tasks.get(args[0])
        fields = TaskFields(
            title=args[1],
            description=args[2] if len(args) > 2 else current.description,
            status=_check_status(args[3]) if len(args) > 3 else current.status,
        )
        _print_task(await tasks.replace(args[0], fields))
    elif cmd == "/status":
        _print_task(await tasks.set_status(args[0], _check_status(args[1])))
    elif cmd == "/delete":
        removed = await tasks.remove(args[0])
        print("已删除" if removed else "远端已删除（本地无此任务）")
    else:
        print(f"未知命令: {cmd}，输入 /help 查看帮助")
    return True


async def main():
    """交互式主循环"""
    settings = get_settings()
    setup_logging(env=settings.ENV, level=settings.LOG_LEVEL)

    print("=" * 60)
    print("  tasktrack 控制台")
    print(f"  远端存储: {settings.STORE_BASE_URL}")
    print("  输入 /help 查看命令，/quit 退出")
    print("=" * 60)

    pt_session = PromptSession()
    async with await AppContext.create(settings) as ctx:
        if ctx.sessions.is_authenticated:
            print(f"\033[90m  欢迎回来，{ctx.sessions.current.name}\033[0m")
            await ctx.tasks.refresh()

        while True:
            try:
                line = (await pt_session.prompt_async("tasks> ")).strip()
            except (EOFError, KeyboardInterrupt):
                print("\n再见！")
                break

            if not line:
                continue

            bind_trace_id()
            try:
                argv = shlex.split(line)
                if not await handle(ctx, argv):
                    print("再见！")
                    break
            except NotAuthenticatedError:
                print("\033[93m  请先 /login 或 /register\033[0m")
            except IndexError:
                print("\033[93m  参数不足，输入 /help 查看用法\033[0m")
            except TransportError as e:
                print(f"\033[31m  无法连接远端存储，操作未生效: {e}\033[0m")
            except RemoteError as e:
                print(f"\033[31m  远端拒绝请求 HTTP {e.status}，操作未生效: {e.body[:200]}\033[0m")
            except (ValueError, KeyError) as e:
                print(f"\033[93m  {e}\033[0m")


if __name__ == "__main__":
    asyncio.run(main())
