"""
用户相关数据模型
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .base import BaseEntity, TimestampMixin


class UserRole(str, Enum):
    """用户角色（封闭集合）"""
    CUSTOMER = "customer"
    RESTAURANT = "restaurant"
    DRIVER = "driver"


class Actor(BaseModel):
    """当前操作者：认证服务给出的用户ID与角色"""

    model_config = {"frozen": True}

    user_id: int = Field(..., description="用户ID")
    role: UserRole = Field(..., description="角色")

    @property
    def is_customer(self) -> bool:
        return self.role is UserRole.CUSTOMER

    @property
    def is_restaurant(self) -> bool:
        return self.role is UserRole.RESTAURANT

    @property
    def is_driver(self) -> bool:
        return self.role is UserRole.DRIVER


class User(BaseEntity, TimestampMixin):
    """用户完整模型"""
    user_id: int = Field(..., description="用户ID")
    role: UserRole = Field(..., description="角色")
    name: Optional[str] = Field(None, max_length=100, description="姓名")
    phone: Optional[str] = Field(None, max_length=50, description="电话")
    loyalty_points: int = Field(0, description="积分冗余计数（以积分流水为准）")
