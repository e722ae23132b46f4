"""CLI 入口模块 -- python -m canteiro.core <command>

支持的命令：
  seed                     写入演示任务（已有数据时不覆盖）
  stats                    输出进度分析汇总
  history <task_id>        输出任务审计日志
  summary <task_id> [--save]  输出任务摘要文本，--save 时写入当前目录
"""

import asyncio
import sys
from pathlib import Path

from .config import get_db_path, load_engine_config
from .logging_config import setup_logging

_USAGE = """用法: python -m canteiro.core <command>
命令:
  seed                     写入演示任务（已有数据时不覆盖）
  stats                    输出进度分析汇总
  history <task_id>        输出任务审计日志
  summary <task_id> [--save]  输出任务摘要文本，--save 时写入当前目录"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]
    setup_logging(command=command, db_path=get_db_path())

    if command == "seed":
        asyncio.run(seed())
    elif command == "stats":
        asyncio.run(stats())
    elif command in ("history", "summary"):
        if len(sys.argv) < 3:
            print(f"缺少参数: {command} <task_id>")
            sys.exit(1)
        task_id = sys.argv[2]
        if command == "history":
            found = asyncio.run(history(task_id))
        else:
            found = asyncio.run(summary(task_id, save="--save" in sys.argv[3:]))
        if not found:
            print(f"任务不存在: {task_id}")
            sys.exit(1)
    else:
        print(f"未知命令: {command}")
        print("可用命令: seed, stats, history, summary")
        sys.exit(1)


async def seed() -> None:
    """写入演示任务"""
    from .seed import demo_tasks
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path, default=demo_tasks())
    try:
        if await store_group.task_store.save():
            print(f"写入完成，共 {len(store_group.task_store)} 个任务")
        else:
            print("写入失败，详见日志")
    finally:
        await store_group.close()


async def stats() -> None:
    """输出进度分析汇总"""
    from .service import TaskService
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        service = TaskService(store_group, load_engine_config())
        report = await service.compute_analytics()
        if report is None:
            print("暂无任务数据")
            return
        s = report.summary
        print(f"报告窗口: {report.window_start} ~ {report.window_end}")
        print(f"总任务数: {s.total}")
        print(f"已执行: {s.executed} ({s.progress_pct:.0f}%)")
        print(f"待闸门: {s.pending_gates}")
        print(f"停工: {s.blocked}")
        print(f"逾期: {s.overdue}")
        for system, count in s.by_system.items():
            print(f"  {system}: {count}")
    finally:
        await store_group.close()


async def history(task_id: str) -> bool:
    """输出任务审计日志，最新在前"""
    from .service import TaskService
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        service = TaskService(store_group, load_engine_config())
        if await service.get_task(task_id) is None:
            return False
        entries = await service.get_history(task_id)
        if not entries:
            print("暂无状态变更记录")
        for entry in entries:
            print(
                f"{entry.timestamp.isoformat()}  {entry.previous_status} -> "
                f"{entry.new_status}  {entry.user_name} ({entry.user_role})"
            )
        return True
    finally:
        await store_group.close()


async def summary(task_id: str, save: bool = False) -> bool:
    """输出任务摘要文本，save 时写入 tarefa-<slug>.txt"""
    from .service import TaskService
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        service = TaskService(store_group, load_engine_config())
        exported = await service.export_summary(task_id)
        if exported is None:
            return False
        filename, text = exported
        if save:
            Path(filename).write_text(text, encoding="utf-8")
            print(f"摘要已写入: {filename}")
        else:
            print(text, end="")
        return True
    finally:
        await store_group.close()


if __name__ == "__main__":
    main()
