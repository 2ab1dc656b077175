"""
订单相关数据模型
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import BaseEntity, TimestampMixin
from .menu import Addon


class OrderStatus(str, Enum):
    """订单状态枚举"""
    PENDING = "pending"                      # 待确认
    CONFIRMED = "confirmed"                  # 已确认
    PREPARING = "preparing"                  # 制作中
    READY = "ready"                          # 待取餐
    OUT_FOR_DELIVERY = "out_for_delivery"    # 配送中
    DELIVERED = "delivered"                  # 已送达
    CANCELLED = "cancelled"                  # 已取消


class Coordinates(BaseModel):
    """经纬度"""
    lat: float = Field(..., ge=-90, le=90, description="纬度")
    lng: float = Field(..., ge=-180, le=180, description="经度")


class Address(BaseModel):
    """配送地址"""
    street: str = Field(..., min_length=1, description="街道")
    city: str = Field(..., min_length=1, description="城市")
    state: str = Field("", description="州/省")
    zip_code: str = Field("", description="邮编")
    coordinates: Optional[Coordinates] = Field(None, description="坐标")


class OrderItem(BaseModel):
    """订单行（下单时复制菜品名称和价格）"""
    menu_item_id: int = Field(..., description="菜品ID")
    name: str = Field(..., description="菜品名称快照")
    price: Decimal = Field(..., ge=0, description="单价快照")
    quantity: int = Field(..., ge=1, description="数量")
    special_instructions: str = Field("", description="备注")
    addons: List[Addon] = Field(default_factory=list, description="加料快照")


class Order(BaseEntity, TimestampMixin):
    """订单完整模型（不可变快照，状态变更生成新实例）"""

    model_config = {"from_attributes": True, "frozen": True}

    order_id: int = Field(..., description="订单ID")
    customer_id: int = Field(..., description="下单用户ID")
    restaurant_id: int = Field(..., description="餐厅ID")
    restaurant_name: Optional[str] = Field(None, description="餐厅名称快照")
    delivery_address: Optional[Address] = Field(None, description="配送地址")
    items: List[OrderItem] = Field(..., description="订单行")
    subtotal: Decimal = Field(..., description="小计")
    delivery_fee: Decimal = Field(..., description="配送费")
    tax: Decimal = Field(..., description="税费")
    points_redeemed: int = Field(0, description="使用积分")
    points_discount: Decimal = Field(Decimal("0"), description="积分抵扣金额")
    total: Decimal = Field(..., description="应付总额")
    status: OrderStatus = Field(..., description="订单状态")
    payment_method: Optional[str] = Field(None, description="支付方式")
    special_instructions: str = Field("", description="订单备注")
    driver_id: Optional[int] = Field(None, description="配送员ID")
    driver_location: Optional[Coordinates] = Field(None, description="配送员实时位置")

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)
