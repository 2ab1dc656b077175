"""
积分相关数据模型
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import BaseEntity


class TransactionType(str, Enum):
    """积分流水类型"""
    EARNED = "earned"       # 获得
    REDEEMED = "redeemed"   # 使用


class LoyaltyTransaction(BaseEntity):
    """积分流水（只追加，不修改）"""
    transaction_id: Optional[int] = Field(None, description="流水ID")
    user_id: int = Field(..., description="用户ID")
    type: TransactionType = Field(..., description="类型")
    points: int = Field(..., ge=0, description="积分数")
    description: str = Field("", description="说明")
    order_id: Optional[int] = Field(None, description="关联订单ID")
    created_at: Optional[datetime] = Field(None, description="创建时间")

    @property
    def signed_points(self) -> int:
        """对余额的影响：获得为正，使用为负"""
        if self.type is TransactionType.EARNED:
            return self.points
        return -self.points
