"""User Domain Model"""

from pydantic import BaseModel, Field

from .enums import UserRole


class User(BaseModel):
    """操作用户，角色决定可执行的操作"""

    id: str = Field(description="用户 ID")
    name: str = Field(description="显示名称")
    role: UserRole = Field(description="角色")
