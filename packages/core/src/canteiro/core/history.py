"""History Audit Log

每个任务一条 append-only 序列，最新记录在前。
只有 apply_status 成功提交时才会写入，记录本身不可变。
"""

from collections.abc import Iterable

from pydantic import TypeAdapter

from .models.history import TaskHistoryLog

_ENTRIES_ADAPTER = TypeAdapter(list[TaskHistoryLog])


class HistoryLog:
    """单个任务的审计日志"""

    def __init__(self, task_id: str, entries: Iterable[TaskHistoryLog] = ()) -> None:
        self.task_id = task_id
        self._entries: list[TaskHistoryLog] = []
        # 输入按最新在前排列，逆序 append 以保持顺序
        for entry in reversed(list(entries)):
            self.append(entry)

    def append(self, entry: TaskHistoryLog) -> None:
        """追加记录（插入到最前）

        Raises:
            ValueError: 记录属于其他任务
        """
        if entry.task_id != self.task_id:
            raise ValueError(
                f"History entry for task {entry.task_id} cannot be appended to {self.task_id}"
            )
        self._entries.insert(0, entry)

    def entries(self) -> list[TaskHistoryLog]:
        """返回全部记录的副本，最新在前"""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def to_json(self) -> str:
        return _ENTRIES_ADAPTER.dump_json(self._entries).decode("utf-8")

    @classmethod
    def from_json(cls, task_id: str, raw: str) -> "HistoryLog":
        """从持久化 JSON 重建

        Raises:
            pydantic.ValidationError: 数据损坏
        """
        return cls(task_id, _ENTRIES_ADAPTER.validate_json(raw))
