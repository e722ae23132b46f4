"""Canteiro Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .analytics import (
    AnalyticsReport,
    AnalyticsSummary,
    ProgressPoint,
    StatusBreakdown,
)
from .enums import (
    ACTIVE_STATES,
    PHOTO_REQUIRED_SYSTEMS,
    VALID_TRANSITIONS,
    ConstructionSystem,
    ExecutionStatus,
    GateStatus,
    ProjectStage,
    UserRole,
    can_decide_gate,
    can_edit,
    validate_transition,
)
from .history import TaskHistoryLog
from .task import (
    EDITABLE_FIELDS,
    GateCheck,
    Subtask,
    Task,
    TaskDraft,
    TaskFilter,
    TaskPhoto,
    check_invariants,
    normalize_task,
)
from .user import User

__all__ = [
    # 枚举
    "ExecutionStatus",
    "GateStatus",
    "ConstructionSystem",
    "ProjectStage",
    "UserRole",
    # 状态机
    "VALID_TRANSITIONS",
    "ACTIVE_STATES",
    "PHOTO_REQUIRED_SYSTEMS",
    "validate_transition",
    # 权限
    "can_edit",
    "can_decide_gate",
    # Task
    "Task",
    "TaskDraft",
    "TaskFilter",
    "GateCheck",
    "TaskPhoto",
    "Subtask",
    "EDITABLE_FIELDS",
    "check_invariants",
    "normalize_task",
    # History
    "TaskHistoryLog",
    # User
    "User",
    # Analytics
    "ProgressPoint",
    "StatusBreakdown",
    "AnalyticsSummary",
    "AnalyticsReport",
]
