"""枚举定义

包含 ExecutionStatus 执行状态机、GateStatus 质量闸门状态、ConstructionSystem、
ProjectStage、UserRole，以及 VALID_TRANSITIONS 合法流转映射和角色权限判断。
"""

from enum import StrEnum


class ExecutionStatus(StrEnum):
    """Task 执行状态机

    没有终态：executed 可回退到任意前序状态（例如闸门驳回后返工）。
    """

    AWAITING_START = "awaiting-start"
    STARTED = "started"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    # 可进入质量闸门
    EXECUTED = "executed"


class GateStatus(StrEnum):
    """质量闸门状态"""

    PENDING = "pending"
    APPROVED = "approved"
    APPROVED_WITH_RESERVATIONS = "approved-with-reservations"
    REJECTED = "rejected"


class ConstructionSystem(StrEnum):
    """建造体系"""

    MASONRY = "Alvenaria"
    LSF = "LSF"
    HYBRID = "Híbrido"
    INSTALLATION = "Instalação"


class ProjectStage(StrEnum):
    """项目阶段（有序，定义顺序即阶段顺序）"""

    PRELIMINARY = "1. Preliminar"
    STRUCTURAL = "2. Estrutural"
    ENCLOSURE_INFRA = "3. Vedação/Infra"
    ROOFING_FINISHING = "4. Cobertura/Acabamento"

    @property
    def order(self) -> int:
        """阶段序号，从 1 开始"""
        return list(ProjectStage).index(self) + 1


class UserRole(StrEnum):
    """用户角色"""

    PROJECT_MANAGER = "project-manager"
    FIELD_EXECUTOR = "field-executor"
    CLIENT = "client"


# 活跃执行状态（已开工但未完成）
ACTIVE_STATES: frozenset[ExecutionStatus] = frozenset(
    {ExecutionStatus.STARTED, ExecutionStatus.IN_PROGRESS}
)

# 需要照片才能标记 executed 的建造体系
PHOTO_REQUIRED_SYSTEMS: frozenset[ConstructionSystem] = frozenset(
    {ConstructionSystem.LSF, ConstructionSystem.INSTALLATION}
)

# 合法状态流转：任意两个不同状态之间都可流转，业务约束由 guard 判断
VALID_TRANSITIONS: dict[ExecutionStatus, set[ExecutionStatus]] = {
    source: {target for target in ExecutionStatus if target != source}
    for source in ExecutionStatus
}


def validate_transition(from_status: ExecutionStatus, to_status: ExecutionStatus) -> bool:
    """验证状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_status, set())
    return to_status in allowed


def can_edit(role: UserRole) -> bool:
    """是否可修改执行状态、字段、照片和子任务"""
    return role in (UserRole.PROJECT_MANAGER, UserRole.FIELD_EXECUTOR)


def can_decide_gate(role: UserRole) -> bool:
    """是否可做闸门决策（仅项目经理）"""
    return role == UserRole.PROJECT_MANAGER
