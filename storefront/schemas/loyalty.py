"""
积分相关的请求/响应模式
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class RedeemRequest(BaseModel):
    """积分使用请求"""
    points: int = Field(..., description="使用积分数")
    description: str = Field("积分兑换", max_length=200, description="说明")
    order_id: Optional[int] = Field(None, description="关联订单ID")


class LoyaltySummary(BaseModel):
    """积分概况"""
    user_id: int = Field(..., description="用户ID")
    points: int = Field(..., description="积分余额")
    points_value: Decimal = Field(..., description="可抵扣金额")
