"""Canteiro Core Store -- 内存 Store + 键值持久化端口

提供工厂函数创建共享同一持久化后端的 Store 实例组。
"""

import asyncio
from pathlib import Path

import aiosqlite

from ..exceptions import PersistenceWarning
from ..models.task import Task
from .history_store import HistoryStore
from .kv_store import InMemoryKeyValueStore, SqliteKeyValueStore
from .protocols import KeyValueStore
from .sqlite_init import init_db
from .task_store import TaskStore


class StoreGroup:
    """Store 实例组 -- 共享同一个键值后端、写锁与 warning 列表"""

    def __init__(
        self,
        kv: KeyValueStore,
        conn: aiosqlite.Connection | None = None,
    ) -> None:
        self.kv = kv
        self.conn = conn
        self.warnings: list[PersistenceWarning] = []
        write_lock = asyncio.Lock()
        self.task_store = TaskStore(kv, self.warnings, write_lock)
        self.history_store = HistoryStore(kv, self.warnings, write_lock)

    async def load(self, default: list[Task] | None = None) -> None:
        """启动时加载任务快照及其审计日志"""
        tasks = await self.task_store.load(default)
        await self.history_store.load(task.id for task in tasks)

    async def close(self) -> None:
        if self.conn is not None:
            await self.conn.close()


async def create_store_group(
    db_path: str,
    default: list[Task] | None = None,
) -> StoreGroup:
    """创建 SQLite 持久化的 Store 实例组并加载数据

    Args:
        db_path: SQLite 数据库文件路径
        default: 无持久化数据时的初始任务

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    await init_db(conn)

    group = StoreGroup(SqliteKeyValueStore(conn), conn=conn)
    await group.load(default)
    return group


async def create_memory_store_group(
    default: list[Task] | None = None,
    kv: KeyValueStore | None = None,
) -> StoreGroup:
    """创建内存 Store 实例组（测试 / 临时会话）"""
    group = StoreGroup(kv or InMemoryKeyValueStore())
    await group.load(default)
    return group


__all__ = [
    "StoreGroup",
    "create_store_group",
    "create_memory_store_group",
    "KeyValueStore",
    "SqliteKeyValueStore",
    "InMemoryKeyValueStore",
    "TaskStore",
    "HistoryStore",
    "init_db",
]
