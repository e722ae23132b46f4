"""TaskHistoryLog Domain Model

审计日志 append-only，不允许更新或删除。
每条记录对应一次成功的执行状态流转。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import ExecutionStatus, UserRole


class TaskHistoryLog(BaseModel):
    """状态流转审计记录（不可变）"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="唯一标识，ULID 格式，时间有序")
    task_id: str = Field(description="关联的 Task ID")
    previous_status: ExecutionStatus = Field(description="流转前状态")
    new_status: ExecutionStatus = Field(description="流转后状态")
    timestamp: datetime = Field(description="流转时间")
    user_id: str = Field(description="操作者 ID")
    user_name: str = Field(description="操作者名称")
    user_role: UserRole = Field(description="操作者角色")
