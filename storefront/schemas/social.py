"""
收藏与评价相关的请求/响应模式
"""

from typing import Optional

from pydantic import BaseModel, Field


class FavoriteToggleRequest(BaseModel):
    """收藏切换请求：餐厅与菜品二选一"""
    restaurant_id: Optional[int] = Field(None, description="餐厅ID")
    menu_item_id: Optional[int] = Field(None, description="菜品ID")


class ReviewCreateRequest(BaseModel):
    """评价请求"""
    order_id: int = Field(..., description="订单ID")
    rating: int = Field(..., ge=1, le=5, description="评分")
    comment: str = Field("", max_length=1000, description="评价内容")
