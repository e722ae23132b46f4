"""HistoryStore -- 按任务分键的审计日志持久化

键 `history_<taskId>` 保存该任务全部记录（最新在前），每次追加后整体覆盖。
"""

import asyncio
from collections.abc import Iterable

import structlog

from ..config import history_key
from ..exceptions import PersistenceWarning
from ..history import HistoryLog
from ..models.history import TaskHistoryLog
from .protocols import KeyValueStore

log = structlog.get_logger()


class HistoryStore:
    """审计日志存储"""

    def __init__(
        self,
        kv: KeyValueStore,
        warnings: list[PersistenceWarning] | None = None,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        self._kv = kv
        self._logs: dict[str, HistoryLog] = {}
        self._write_lock = write_lock or asyncio.Lock()
        self.warnings: list[PersistenceWarning] = warnings if warnings is not None else []

    async def load(self, task_ids: Iterable[str]) -> None:
        """加载指定任务的审计日志，损坏的日志回退为空"""
        self._logs = {}
        for task_id in task_ids:
            key = history_key(task_id)
            history = HistoryLog(task_id)
            try:
                raw = await self._kv.get(key)
                if raw is not None:
                    history = HistoryLog.from_json(task_id, raw)
            except Exception as e:
                self.warnings.append(PersistenceWarning(key, e))
                log.warning(
                    "persistence_read_failed",
                    key=key,
                    error_type=type(e).__name__,
                )
            self._logs[task_id] = history

    def get(self, task_id: str) -> list[TaskHistoryLog]:
        """返回任务全部审计记录，最新在前"""
        history = self._logs.get(task_id)
        return history.entries() if history is not None else []

    def append(self, entry: TaskHistoryLog) -> None:
        """追加到内存日志"""
        history = self._logs.setdefault(entry.task_id, HistoryLog(entry.task_id))
        history.append(entry)

    async def save(self, task_id: str) -> bool:
        """将任务审计日志整体写入持久化层"""
        history = self._logs.get(task_id)
        if history is None:
            return True
        key = history_key(task_id)
        payload = history.to_json()
        async with self._write_lock:
            try:
                await self._kv.set(key, payload)
            except Exception as e:
                self.warnings.append(PersistenceWarning(key, e))
                log.warning(
                    "persistence_write_failed",
                    key=key,
                    error_type=type(e).__name__,
                )
                return False
        return True
