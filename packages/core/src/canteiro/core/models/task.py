"""Task Domain Model

Task 是内存 Task Store 的唯一事实来源，
执行状态的修改只能经过 Status Transition Engine。
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from .enums import (
    ConstructionSystem,
    ExecutionStatus,
    GateStatus,
    ProjectStage,
)


class GateCheck(BaseModel):
    """质量闸门记录（嵌入 Task）"""

    status: GateStatus = Field(default=GateStatus.PENDING, description="闸门状态")
    date: datetime | None = Field(default=None, description="决策时间")
    approver: str | None = Field(default=None, description="决策人")
    notes: str = Field(default="", description="闸门备注")


class TaskPhoto(BaseModel):
    """现场照片附件"""

    id: str = Field(description="照片 ID")
    url: str = Field(description="图片内容引用（URL 或 data URI）")
    timestamp: datetime = Field(description="拍摄时间")
    description: str | None = Field(default=None, description="说明")


class Subtask(BaseModel):
    """检查清单子任务"""

    id: str = Field(description="子任务 ID")
    title: str = Field(description="标题")
    completed: bool = Field(default=False, description="是否完成")


class Task(BaseModel):
    """Task 数据模型

    不变量：
    - status == blocked 时 blocked_reason 非空，否则为 None
    - status != executed 时 gate 为 pending 且 notes 为空
    """

    id: str = Field(description="唯一标识，生命周期内稳定")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    stage: ProjectStage = Field(description="项目阶段")
    system: ConstructionSystem = Field(description="建造体系")
    specialist: str = Field(default="", description="规划人")
    executor: str = Field(description="执行班组")
    date_start_expected: date = Field(description="计划开始日期")
    date_end_expected: date = Field(description="计划结束日期")
    status: ExecutionStatus = Field(
        default=ExecutionStatus.AWAITING_START, description="执行状态"
    )
    blocked_reason: str | None = Field(default=None, description="停工原因")
    gate: GateCheck = Field(default_factory=GateCheck, description="质量闸门")
    is_transition_point: bool = Field(default=False, description="是否体系交接点")
    transition_tag: str | None = Field(default=None, description="交接点标签")
    photos: list[TaskPhoto] = Field(default_factory=list, description="照片，最新在前")
    subtasks: list[Subtask] = Field(default_factory=list, description="检查清单")


class TaskDraft(BaseModel):
    """创建 Task 的输入"""

    title: str = Field(min_length=1)
    description: str = ""
    stage: ProjectStage
    system: ConstructionSystem
    specialist: str = ""
    executor: str
    date_start_expected: date
    date_end_expected: date
    is_transition_point: bool = False
    transition_tag: str | None = None


class TaskFilter(BaseModel):
    """列表筛选条件，所有字段可选，条件之间为 AND"""

    system: ConstructionSystem | None = None
    stage: ProjectStage | None = None
    executor: str | None = None
    status: ExecutionStatus | None = None

    def matches(self, task: Task) -> bool:
        if self.system is not None and task.system != self.system:
            return False
        if self.stage is not None and task.stage != self.stage:
            return False
        if self.executor is not None and task.executor != self.executor:
            return False
        if self.status is not None and task.status != self.status:
            return False
        return True


# update_field 允许修改的字段
EDITABLE_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "stage",
        "system",
        "specialist",
        "executor",
        "date_start_expected",
        "date_end_expected",
        "is_transition_point",
        "transition_tag",
    }
)


def check_invariants(task: Task) -> list[str]:
    """检查 Task 不变量，返回被违反的规则名列表（空列表表示一致）"""
    violations: list[str] = []
    if task.status == ExecutionStatus.BLOCKED:
        if not (task.blocked_reason or "").strip():
            violations.append("blocked_reason_required")
    elif task.blocked_reason is not None:
        violations.append("blocked_reason_must_be_absent")

    if task.status != ExecutionStatus.EXECUTED:
        if task.gate.status != GateStatus.PENDING or task.gate.notes != "":
            violations.append("gate_must_be_pending")
    return violations


def normalize_task(task: Task) -> Task:
    """修复违反不变量的 Task（用于加载持久化快照）

    blocked 但缺少原因的任务退回 in-progress；非 executed 的任务重置闸门。
    """
    status = task.status
    reason = task.blocked_reason
    if status == ExecutionStatus.BLOCKED and not (reason or "").strip():
        status = ExecutionStatus.IN_PROGRESS
    if status != ExecutionStatus.BLOCKED:
        reason = None

    gate = task.gate
    if status != ExecutionStatus.EXECUTED:
        gate = GateCheck()

    return task.model_copy(
        update={"status": status, "blocked_reason": reason, "gate": gate}
    )
