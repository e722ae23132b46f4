"""TaskService -- 面向 UI 协作方的任务操作

每个变更操作的流程：
1. 从 Store 取出任务副本（不存在时返回 None）
2. 校验角色与业务规则（失败时抛出异常，Store 不变）
3. 同步写入内存 Store（校验与写入之间没有 await）
4. write-through 持久化（失败只记录 warning）
"""

from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any

import structlog
from pydantic import ValidationError
from ulid import ULID

from . import analytics, gate, transitions
from .config import EngineConfig
from .exceptions import TaskPermissionError, TaskValidationError
from .models import (
    EDITABLE_FIELDS,
    AnalyticsReport,
    ExecutionStatus,
    GateCheck,
    GateStatus,
    Subtask,
    Task,
    TaskDraft,
    TaskFilter,
    TaskHistoryLog,
    TaskPhoto,
    User,
    can_edit,
)
from .store import StoreGroup
from .summary import render_task_summary, summary_filename
from .transitions import BoardColumn, TransitionContext, TransitionResult

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(
        self,
        store_group: StoreGroup,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Args:
            store_group: 共享持久化后端的 Store 实例组
            config: 引擎配置，默认使用内置默认值
            clock: 当前 UTC 时间来源，用于审计记录、闸门日期和照片时间
        """
        self._stores = store_group
        self._config = config or EngineConfig()
        self._clock = clock or (lambda: datetime.now(UTC))

    # ---- 查询 ----

    async def list_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        """查询任务列表，筛选条件之间为 AND"""
        return self._stores.task_store.list_tasks(task_filter)

    async def get_task(self, task_id: str) -> Task | None:
        """查询任务详情"""
        return self._stores.task_store.get(task_id)

    async def get_history(self, task_id: str) -> list[TaskHistoryLog]:
        """查询任务审计日志，最新在前"""
        return self._stores.history_store.get(task_id)

    async def compute_analytics(
        self,
        task_filter: TaskFilter | None = None,
        today: date | None = None,
    ) -> AnalyticsReport | None:
        """对筛选后的任务快照计算进度分析"""
        tasks = self._stores.task_store.list_tasks(task_filter)
        return analytics.compute_analytics(
            tasks, today=today, pad_days=self._config.analytics_pad_days
        )

    async def render_summary(self, task_id: str) -> str | None:
        """导出任务纯文本摘要"""
        task = self._stores.task_store.get(task_id)
        if task is None:
            return None
        return render_task_summary(task)

    async def export_summary(self, task_id: str) -> tuple[str, str] | None:
        """导出任务摘要：(下载文件名, 文本)"""
        task = self._get_or_log(task_id, "export_summary")
        if task is None:
            return None
        return summary_filename(task), render_task_summary(task)

    # ---- 创建 ----

    async def create_task(self, draft: TaskDraft, task_id: str | None = None) -> Task:
        """创建任务，初始状态 awaiting-start，闸门 pending

        Raises:
            TaskValidationError: 指定的 task_id 已存在
        """
        if task_id is not None and task_id in self._stores.task_store:
            log.info("task_create_rejected", task_id=task_id, rule="duplicate_task_id")
            raise TaskValidationError(
                f"任务 ID 已存在: {task_id}",
                task_id=task_id,
                rule="duplicate_task_id",
            )
        task = Task(
            id=task_id or str(ULID()),
            status=ExecutionStatus.AWAITING_START,
            gate=GateCheck(),
            **draft.model_dump(),
        )
        self._stores.task_store.put(task)
        log.info(
            "task_created",
            task_id=task.id,
            system=task.system.value,
            stage=task.stage.value,
        )
        await self._stores.task_store.save()
        return task

    # ---- 状态流转 ----

    async def apply_status(
        self,
        task_id: str,
        new_status: ExecutionStatus,
        context: TransitionContext,
    ) -> TransitionResult | None:
        """应用执行状态变更

        Returns:
            TransitionResult；任务不存在时返回 None

        Raises:
            TaskPermissionError: 角色不可编辑
            TaskValidationError: 停工原因为空 / 缺少照片
        """
        task = self._get_or_log(task_id, "apply_status")
        if task is None:
            return None

        try:
            result = transitions.apply_status(
                task,
                new_status,
                context,
                photo_required_systems=self._config.photo_required_systems,
                now=self._clock(),
            )
        except TaskValidationError as e:
            log.info(
                "task_transition_rejected",
                task_id=task_id,
                rule=e.rule,
                from_status=task.status.value,
                to_status=new_status.value,
            )
            raise

        if result.history_entry is None:
            return result

        self._stores.task_store.put(result.task)
        self._stores.history_store.append(result.history_entry)
        log.info(
            "task_status_applied",
            task_id=task_id,
            from_status=task.status.value,
            to_status=new_status.value,
            actor_id=context.actor.id,
        )
        if result.manager_notified:
            log.warning(
                "manager_notified_task_blocked",
                task_id=task_id,
                reason=result.task.blocked_reason,
            )

        await self._stores.task_store.save()
        await self._stores.history_store.save(task_id)
        return result

    async def move_to_column(
        self,
        task_id: str,
        column: BoardColumn,
        context: TransitionContext,
    ) -> TransitionResult | None:
        """看板拖放：查表得到目标状态后委托 apply_status"""
        task = self._get_or_log(task_id, "move_to_column")
        if task is None:
            return None
        target = transitions.resolve_board_target(task.status, column)
        if target is None:
            return TransitionResult(task=task)
        return await self.apply_status(task_id, target, context)

    async def swipe(
        self,
        task_id: str,
        offset: float,
        context: TransitionContext,
    ) -> TransitionResult | None:
        """滑动手势：右滑停工，左滑完成，未超过阈值不提交"""
        task = self._get_or_log(task_id, "swipe")
        if task is None:
            return None
        target = transitions.resolve_swipe(task.status, offset, self._config.swipe_threshold)
        if target is None:
            return TransitionResult(task=task)
        return await self.apply_status(task_id, target, context)

    async def update_block_reason(self, task_id: str, reason: str, actor: User) -> Task | None:
        """修改停工原因（不写审计日志）"""
        task = self._get_or_log(task_id, "update_block_reason")
        if task is None:
            return None
        self._ensure_can_edit(actor, "update_block_reason")
        return await self._commit(transitions.update_block_reason(task, reason))

    # ---- 质量闸门 ----

    async def decide_gate(
        self,
        task_id: str,
        decision: GateStatus,
        approver: User,
    ) -> Task | None:
        """闸门决策（仅项目经理，latest wins）"""
        task = self._get_or_log(task_id, "decide_gate")
        if task is None:
            return None
        updated = gate.decide_gate(task, decision, approver, now=self._clock())
        log.info(
            "gate_decided",
            task_id=task_id,
            decision=decision.value,
            approver=approver.name,
        )
        return await self._commit(updated)

    async def update_gate_notes(self, task_id: str, notes: str, actor: User) -> Task | None:
        """修改闸门备注"""
        task = self._get_or_log(task_id, "update_gate_notes")
        if task is None:
            return None
        return await self._commit(gate.update_gate_notes(task, notes, actor))

    # ---- 字段编辑 ----

    async def update_field(
        self,
        task_id: str,
        field: str,
        value: Any,
        actor: User | None = None,
    ) -> Task | None:
        """修改单个字段（无跨字段校验，值由 pydantic 转换）

        Raises:
            TaskValidationError: 字段不可编辑或值类型不合法
        """
        task = self._get_or_log(task_id, "update_field")
        if task is None:
            return None
        self._ensure_can_edit(actor, "update_field")
        if field not in EDITABLE_FIELDS:
            raise TaskValidationError(
                f"字段不可编辑: {field}",
                task_id=task_id,
                rule="field_not_editable",
            )
        try:
            updated = Task.model_validate({**task.model_dump(), field: value})
        except ValidationError as e:
            raise TaskValidationError(
                f"字段值不合法: {field}",
                task_id=task_id,
                rule="invalid_field_value",
            ) from e
        return await self._commit(updated)

    async def add_photo(
        self,
        task_id: str,
        url: str,
        description: str | None = None,
        actor: User | None = None,
        timestamp: datetime | None = None,
    ) -> Task | None:
        """添加照片（插入到最前）"""
        task = self._get_or_log(task_id, "add_photo")
        if task is None:
            return None
        self._ensure_can_edit(actor, "add_photo")
        photo = TaskPhoto(
            id=str(ULID()),
            url=url,
            timestamp=timestamp or self._clock(),
            description=description,
        )
        return await self._commit(
            task.model_copy(update={"photos": [photo, *task.photos]})
        )

    async def remove_photo(
        self,
        task_id: str,
        photo_id: str,
        confirmed: bool,
        actor: User | None = None,
    ) -> Task | None:
        """删除照片，未确认时为 no-op"""
        task = self._get_or_log(task_id, "remove_photo")
        if task is None:
            return None
        self._ensure_can_edit(actor, "remove_photo")
        if not confirmed:
            return task
        photos = [p for p in task.photos if p.id != photo_id]
        return await self._commit(task.model_copy(update={"photos": photos}))

    async def add_subtask(
        self,
        task_id: str,
        title: str,
        actor: User | None = None,
    ) -> Task | None:
        """追加检查清单子任务"""
        task = self._get_or_log(task_id, "add_subtask")
        if task is None:
            return None
        self._ensure_can_edit(actor, "add_subtask")
        if not title.strip():
            raise TaskValidationError(
                "子任务标题不能为空",
                task_id=task_id,
                rule="subtask_title_required",
            )
        subtask = Subtask(id=str(ULID()), title=title, completed=False)
        return await self._commit(
            task.model_copy(update={"subtasks": [*task.subtasks, subtask]})
        )

    async def toggle_subtask(
        self,
        task_id: str,
        subtask_id: str,
        actor: User | None = None,
    ) -> Task | None:
        """切换子任务完成状态"""
        task = self._get_or_log(task_id, "toggle_subtask")
        if task is None:
            return None
        self._ensure_can_edit(actor, "toggle_subtask")
        subtasks = [
            st.model_copy(update={"completed": not st.completed}) if st.id == subtask_id else st
            for st in task.subtasks
        ]
        return await self._commit(task.model_copy(update={"subtasks": subtasks}))

    async def remove_subtask(
        self,
        task_id: str,
        subtask_id: str,
        confirmed: bool,
        actor: User | None = None,
    ) -> Task | None:
        """删除子任务，未确认时为 no-op"""
        task = self._get_or_log(task_id, "remove_subtask")
        if task is None:
            return None
        self._ensure_can_edit(actor, "remove_subtask")
        if not confirmed:
            return task
        subtasks = [st for st in task.subtasks if st.id != subtask_id]
        return await self._commit(task.model_copy(update={"subtasks": subtasks}))

    # ---- 内部 ----

    def _get_or_log(self, task_id: str, operation: str) -> Task | None:
        task = self._stores.task_store.get(task_id)
        if task is None:
            log.info("task_not_found", task_id=task_id, operation=operation)
        return task

    @staticmethod
    def _ensure_can_edit(actor: User | None, operation: str) -> None:
        """actor 为 None 表示调用方已自行完成权限判断"""
        if actor is not None and not can_edit(actor.role):
            raise TaskPermissionError(actor.role, operation)

    async def _commit(self, task: Task) -> Task:
        self._stores.task_store.put(task)
        await self._stores.task_store.save()
        return task
