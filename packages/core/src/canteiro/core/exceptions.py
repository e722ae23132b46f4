"""Canteiro Core 异常体系

核心层内没有致命错误：
- TaskValidationError / TaskPermissionError 抛回调用方，store 不变
- PersistenceWarning 仅记录日志，内存状态继续生效
- 任务不存在时操作返回 None
"""

from .models.enums import ExecutionStatus, UserRole


class CanteiroError(Exception):
    """Core 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 调用方能否通过重新提示用户恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class TaskValidationError(CanteiroError):
    """状态流转或编辑被业务规则拒绝（停工原因为空、缺少照片等）

    attempted_status 用于 UI 在本地反映用户尝试的状态。
    """

    def __init__(
        self,
        message: str,
        *,
        task_id: str,
        rule: str,
        attempted_status: ExecutionStatus | None = None,
    ) -> None:
        super().__init__(message, recoverable=True)
        self.task_id = task_id
        self.rule = rule
        self.attempted_status = attempted_status


class TaskPermissionError(CanteiroError):
    """当前角色无权执行该操作"""

    def __init__(self, role: UserRole, operation: str) -> None:
        super().__init__(
            f"角色 {role} 无权执行操作: {operation}",
            recoverable=True,
        )
        self.role = role
        self.operation = operation


class PersistenceWarning(CanteiroError):
    """持久化读写失败

    读失败时 store 回退为空数据集，写失败时继续在内存中运行。
    """

    def __init__(self, key: str, original_error: Exception) -> None:
        super().__init__(
            f"持久化失败: {key} -- {original_error}",
            recoverable=True,
        )
        self.key = key
        self.original_error = original_error
