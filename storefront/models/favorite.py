"""
收藏与评价数据模型
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from .base import BaseEntity


class Favorite(BaseEntity):
    """收藏：餐厅或菜品二选一"""
    favorite_id: Optional[int] = Field(None, description="收藏ID")
    user_id: int = Field(..., description="用户ID")
    restaurant_id: Optional[int] = Field(None, description="餐厅ID")
    menu_item_id: Optional[int] = Field(None, description="菜品ID")
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_single_target(self):
        if (self.restaurant_id is None) == (self.menu_item_id is None):
            raise ValueError("收藏目标必须是餐厅或菜品之一")
        return self


class Review(BaseEntity):
    """订单评价"""
    review_id: Optional[int] = Field(None, description="评价ID")
    order_id: int = Field(..., description="订单ID")
    customer_id: int = Field(..., description="用户ID")
    restaurant_id: int = Field(..., description="餐厅ID")
    rating: int = Field(..., ge=1, le=5, description="评分")
    comment: str = Field("", description="评价内容")
    created_at: Optional[datetime] = None
