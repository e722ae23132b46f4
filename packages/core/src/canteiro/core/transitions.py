"""Status Transition Engine

所有执行状态变更的唯一入口。引擎本身是纯函数：
输入当前 Task，输出新的 Task 副本 + 审计记录，由 TaskService 负责提交到 Store。

看板拖放与滑动手势只是查表得到目标状态，再统一委托 apply_status。
"""

from collections.abc import Collection
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field
from ulid import ULID

from .exceptions import TaskPermissionError, TaskValidationError
from .models.enums import (
    ACTIVE_STATES,
    PHOTO_REQUIRED_SYSTEMS,
    ConstructionSystem,
    ExecutionStatus,
    can_edit,
    validate_transition,
)
from .models.history import TaskHistoryLog
from .models.task import GateCheck, Task
from .models.user import User


class BoardColumn(StrEnum):
    """看板列"""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class SwipeDirection(StrEnum):
    """滑动方向"""

    RIGHT = "right"
    LEFT = "left"


class TransitionContext(BaseModel):
    """状态流转上下文"""

    actor: User = Field(description="操作者")
    reason: str | None = Field(default=None, description="停工原因（仅 blocked 需要）")


class TransitionResult(BaseModel):
    """apply_status 的输出

    history_entry 为 None 表示 no-op（目标状态与当前状态相同）。
    manager_notified 仅在进入 blocked 时为 True，供调用方做本地提示。
    """

    task: Task
    history_entry: TaskHistoryLog | None = None
    manager_notified: bool = False

    @property
    def changed(self) -> bool:
        return self.history_entry is not None


# 看板列 -> 目标状态；None 表示 no-op
BOARD_TRANSITIONS: dict[tuple[ExecutionStatus, BoardColumn], ExecutionStatus | None] = {}
for _status in ExecutionStatus:
    BOARD_TRANSITIONS[(_status, BoardColumn.TODO)] = ExecutionStatus.AWAITING_START
    BOARD_TRANSITIONS[(_status, BoardColumn.IN_PROGRESS)] = (
        None
        if _status in ACTIVE_STATES or _status == ExecutionStatus.BLOCKED
        else ExecutionStatus.IN_PROGRESS
    )
    BOARD_TRANSITIONS[(_status, BoardColumn.DONE)] = ExecutionStatus.EXECUTED

# 滑动方向 -> 目标状态
SWIPE_TRANSITIONS: dict[tuple[ExecutionStatus, SwipeDirection], ExecutionStatus | None] = {}
for _status in ExecutionStatus:
    SWIPE_TRANSITIONS[(_status, SwipeDirection.RIGHT)] = ExecutionStatus.BLOCKED
    SWIPE_TRANSITIONS[(_status, SwipeDirection.LEFT)] = ExecutionStatus.EXECUTED
del _status


def _no_op(target: ExecutionStatus | None, current: ExecutionStatus) -> ExecutionStatus | None:
    if target is None or target == current:
        return None
    return target


def resolve_board_target(
    current: ExecutionStatus, column: BoardColumn
) -> ExecutionStatus | None:
    """看板放置查表，返回 None 表示不需要变更"""
    return _no_op(BOARD_TRANSITIONS[(current, column)], current)


def resolve_swipe(
    current: ExecutionStatus, offset: float, threshold: float
) -> ExecutionStatus | None:
    """滑动手势查表

    Args:
        current: 当前状态
        offset: 带符号的滑动距离，正值向右
        threshold: 触发阈值，|offset| 不超过阈值时不提交

    Returns:
        目标状态，None 表示不需要变更
    """
    if offset > threshold:
        direction = SwipeDirection.RIGHT
    elif offset < -threshold:
        direction = SwipeDirection.LEFT
    else:
        return None
    return _no_op(SWIPE_TRANSITIONS[(current, direction)], current)


def requires_photos(
    system: ConstructionSystem,
    photo_required_systems: Collection[ConstructionSystem] = PHOTO_REQUIRED_SYSTEMS,
) -> bool:
    return system in photo_required_systems


def apply_status(
    task: Task,
    new_status: ExecutionStatus,
    context: TransitionContext,
    *,
    photo_required_systems: Collection[ConstructionSystem] = PHOTO_REQUIRED_SYSTEMS,
    now: datetime | None = None,
) -> TransitionResult:
    """校验并应用执行状态变更

    Args:
        task: 当前 Task（不会被修改）
        new_status: 目标状态
        context: 操作者与停工原因
        photo_required_systems: 需要照片才能完成的建造体系
        now: 流转时间，默认当前 UTC 时间

    Returns:
        TransitionResult，包含新 Task 副本与审计记录

    Raises:
        TaskPermissionError: 操作者角色不可编辑
        TaskValidationError: 停工原因为空，或缺少必需照片
    """
    actor = context.actor
    if not can_edit(actor.role):
        raise TaskPermissionError(actor.role, "apply_status")

    if not validate_transition(task.status, new_status):
        # 唯一的非法边是自环：视为 no-op
        return TransitionResult(task=task)

    reason = (context.reason or "").strip()
    if new_status == ExecutionStatus.BLOCKED and not reason:
        raise TaskValidationError(
            "停工必须填写原因",
            task_id=task.id,
            rule="blocked_reason_required",
            attempted_status=new_status,
        )

    if (
        new_status == ExecutionStatus.EXECUTED
        and requires_photos(task.system, photo_required_systems)
        and not task.photos
    ):
        raise TaskValidationError(
            f"{task.system} 体系任务标记完成前必须上传照片",
            task_id=task.id,
            rule="photos_required",
            attempted_status=new_status,
        )

    ts = now or datetime.now(UTC)
    update: dict = {
        "status": new_status,
        "blocked_reason": reason if new_status == ExecutionStatus.BLOCKED else None,
    }
    was_executed = task.status == ExecutionStatus.EXECUTED
    if was_executed != (new_status == ExecutionStatus.EXECUTED):
        update["gate"] = GateCheck()

    entry = TaskHistoryLog(
        id=str(ULID()),
        task_id=task.id,
        previous_status=task.status,
        new_status=new_status,
        timestamp=ts,
        user_id=actor.id,
        user_name=actor.name,
        user_role=actor.role,
    )
    return TransitionResult(
        task=task.model_copy(update=update, deep=True),
        history_entry=entry,
        manager_notified=new_status == ExecutionStatus.BLOCKED,
    )


def update_block_reason(task: Task, reason: str) -> Task:
    """修改停工原因（仅 blocked 状态，不写审计日志）

    Raises:
        TaskValidationError: 任务不在 blocked 状态，或原因为空
    """
    if task.status != ExecutionStatus.BLOCKED:
        raise TaskValidationError(
            "只有停工状态的任务可以修改停工原因",
            task_id=task.id,
            rule="requires_blocked",
        )
    text = reason.strip()
    if not text:
        raise TaskValidationError(
            "停工必须填写原因",
            task_id=task.id,
            rule="blocked_reason_required",
            attempted_status=ExecutionStatus.BLOCKED,
        )
    return task.model_copy(update={"blocked_reason": text})
