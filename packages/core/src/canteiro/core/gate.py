"""Quality Gate Workflow

只有 executed 状态的任务可以进入闸门。决策可重复覆盖（latest wins），
闸门不保留历史，也不写审计日志。
"""

from datetime import UTC, datetime

from .exceptions import TaskPermissionError, TaskValidationError
from .models.enums import ExecutionStatus, GateStatus, can_decide_gate
from .models.task import Task
from .models.user import User


def _ensure_gate_open(task: Task, user: User, operation: str) -> None:
    if not can_decide_gate(user.role):
        raise TaskPermissionError(user.role, operation)
    if task.status != ExecutionStatus.EXECUTED:
        raise TaskValidationError(
            "只有已执行的任务可以进行闸门操作",
            task_id=task.id,
            rule="gate_requires_executed",
        )


def decide_gate(
    task: Task,
    decision: GateStatus,
    approver: User,
    *,
    now: datetime | None = None,
) -> Task:
    """记录闸门决策

    Args:
        task: 当前 Task（不会被修改）
        decision: 决策结果
        approver: 决策人，必须为项目经理
        now: 决策时间，默认当前 UTC 时间

    Returns:
        更新闸门后的 Task 副本

    Raises:
        TaskPermissionError: 非项目经理
        TaskValidationError: 任务不在 executed 状态
    """
    _ensure_gate_open(task, approver, "decide_gate")
    gate = task.gate.model_copy(
        update={
            "status": decision,
            "approver": approver.name,
            "date": now or datetime.now(UTC),
        }
    )
    return task.model_copy(update={"gate": gate})


def update_gate_notes(task: Task, notes: str, user: User) -> Task:
    """修改闸门备注，与决策相互独立"""
    _ensure_gate_open(task, user, "update_gate_notes")
    gate = task.gate.model_copy(update={"notes": notes})
    return task.model_copy(update={"gate": gate})
