"""
餐厅与菜品相关数据模型
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .base import BaseEntity, TimestampMixin


class Addon(BaseModel):
    """菜品加料（按值复制到购物车/订单行）"""
    id: str = Field(..., description="加料唯一标识")
    name: str = Field(..., max_length=100, description="加料名称")
    price: Decimal = Field(Decimal("0"), ge=0, description="加价")


def _unique_addon_ids(addons: List[Addon]) -> List[Addon]:
    ids = [a.id for a in addons]
    if len(ids) != len(set(ids)):
        raise ValueError("加料ID必须唯一")
    return addons


class MenuItemBase(BaseModel):
    """菜品基础字段"""
    name: str = Field(..., min_length=1, max_length=200, description="菜品名称")
    description: Optional[str] = Field(None, max_length=1000, description="菜品描述")
    category: Optional[str] = Field(None, max_length=100, description="分类")
    price: Decimal = Field(..., ge=0, description="单价")
    is_available: bool = Field(True, description="是否可售")
    is_popular: bool = Field(False, description="是否热门")
    preparation_time: int = Field(0, ge=0, description="制作时长（分钟）")
    addons: List[Addon] = Field(default_factory=list, description="可选加料")

    @field_validator("addons")
    @classmethod
    def validate_addons(cls, v):
        return _unique_addon_ids(v)


class MenuItemCreate(MenuItemBase):
    """菜品创建模型"""
    pass


class MenuItemUpdate(BaseModel):
    """菜品更新模型（仅更新提供的字段）"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    is_available: Optional[bool] = None
    is_popular: Optional[bool] = None
    preparation_time: Optional[int] = Field(None, ge=0)
    addons: Optional[List[Addon]] = None

    @field_validator("name", "price", "is_available", "is_popular", "preparation_time", "addons")
    @classmethod
    def reject_null(cls, v, info):
        # 这些列不允许为空：可以不传，但不能显式传null
        if v is None:
            raise ValueError(f"{info.field_name}不能为空")
        return v

    @field_validator("addons")
    @classmethod
    def validate_addons(cls, v):
        return _unique_addon_ids(v)


class MenuItem(MenuItemBase, BaseEntity, TimestampMixin):
    """菜品完整模型"""
    menu_item_id: int = Field(..., description="菜品ID")
    restaurant_id: int = Field(..., description="所属餐厅ID")

    def find_addon(self, addon_id: str) -> Optional[Addon]:
        for addon in self.addons:
            if addon.id == addon_id:
                return addon
        return None


class RestaurantBase(BaseModel):
    """餐厅基础字段"""
    name: str = Field(..., min_length=1, max_length=200, description="餐厅名称")
    description: Optional[str] = Field(None, max_length=1000, description="餐厅描述")
    cuisine: List[str] = Field(default_factory=list, description="菜系")
    delivery_time: Optional[str] = Field(None, max_length=50, description="预计送达时间")
    is_open: bool = Field(True, description="是否营业")


class RestaurantCreate(RestaurantBase):
    """餐厅创建模型"""
    pass


class Restaurant(RestaurantBase, BaseEntity, TimestampMixin):
    """餐厅完整模型"""
    restaurant_id: int = Field(..., description="餐厅ID")
    owner_id: int = Field(..., description="店主用户ID")
    rating: float = Field(0, description="平均评分")
    review_count: int = Field(0, description="评价数")
