"""TaskStore -- 内存任务集合 + write-through 持久化

内存中的 tasks 是唯一事实来源；每次变更后整体快照写入 `app_tasks` 键。
持久化是 best-effort：写失败只记录 PersistenceWarning，不回滚内存状态；
读失败回退为默认数据集。
"""

import asyncio

import structlog
from pydantic import TypeAdapter

from ..config import TASKS_KEY
from ..exceptions import PersistenceWarning
from ..models.task import Task, TaskFilter, check_invariants, normalize_task
from .protocols import KeyValueStore

log = structlog.get_logger()

_TASKS_ADAPTER = TypeAdapter(list[Task])


class TaskStore:
    """Task 存储"""

    def __init__(
        self,
        kv: KeyValueStore,
        warnings: list[PersistenceWarning] | None = None,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        self._kv = kv
        self._tasks: dict[str, Task] = {}
        self._write_lock = write_lock or asyncio.Lock()
        self.warnings: list[PersistenceWarning] = warnings if warnings is not None else []

    async def load(self, default: list[Task] | None = None) -> list[Task]:
        """从持久化层加载任务快照

        键不存在或数据损坏时使用 default（默认为空列表）。
        违反不变量的记录会被修复并记录 warning。
        """
        tasks = list(default or [])
        try:
            raw = await self._kv.get(TASKS_KEY)
            if raw is not None:
                tasks = _TASKS_ADAPTER.validate_json(raw)
        except Exception as e:
            warning = PersistenceWarning(TASKS_KEY, e)
            self.warnings.append(warning)
            log.warning(
                "persistence_read_failed",
                key=TASKS_KEY,
                error_type=type(e).__name__,
                fallback_count=len(tasks),
            )

        self._tasks = {}
        for task in tasks:
            violations = check_invariants(task)
            if violations:
                log.warning(
                    "task_invariant_repaired",
                    task_id=task.id,
                    violations=violations,
                )
                task = normalize_task(task)
            self._tasks[task.id] = task

        log.info("task_store_loaded", task_count=len(self._tasks))
        return self.snapshot()

    def get(self, task_id: str) -> Task | None:
        """根据 id 查询任务（返回副本，外部修改不影响 store）"""
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task is not None else None

    def list_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        """按插入顺序返回任务副本，支持筛选"""
        return [
            task.model_copy(deep=True)
            for task in self._tasks.values()
            if task_filter is None or task_filter.matches(task)
        ]

    def snapshot(self) -> list[Task]:
        return self.list_tasks()

    def put(self, task: Task) -> None:
        """写入内存（新增或替换）"""
        self._tasks[task.id] = task.model_copy(deep=True)

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    async def save(self) -> bool:
        """整体快照写入持久化层

        Returns:
            True 如果写入成功
        """
        payload = _TASKS_ADAPTER.dump_json(list(self._tasks.values())).decode("utf-8")
        async with self._write_lock:
            try:
                await self._kv.set(TASKS_KEY, payload)
            except Exception as e:
                self.warnings.append(PersistenceWarning(TASKS_KEY, e))
                log.warning(
                    "persistence_write_failed",
                    key=TASKS_KEY,
                    error_type=type(e).__name__,
                )
                return False
        return True
