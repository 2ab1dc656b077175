"""
订单与购物车相关的请求/响应模式
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, Field

from ..models.order import Address, OrderStatus

if TYPE_CHECKING:
    from ..services.pricing import PriceQuote


class CheckoutItem(BaseModel):
    """结算行：按菜品ID和加料ID提交，价格以服务端菜单为准"""
    menu_item_id: int = Field(..., description="菜品ID")
    quantity: int = Field(1, ge=1, le=99, description="数量")
    special_instructions: str = Field("", max_length=500, description="备注")
    addon_ids: List[str] = Field(default_factory=list, description="已选加料ID")


class CartQuoteRequest(BaseModel):
    """购物车报价请求"""
    items: List[CheckoutItem] = Field(..., min_length=1, description="购物车行")
    points_to_redeem: int = Field(0, ge=0, description="使用积分")


class CheckoutRequest(CartQuoteRequest):
    """下单请求"""
    delivery_address: Address = Field(..., description="配送地址")
    payment_method: str = Field("card", max_length=50, description="支付方式")
    special_instructions: str = Field("", max_length=500, description="订单备注")


class QuoteResponse(BaseModel):
    """报价响应（两位小数）"""
    restaurant_id: int = Field(..., description="餐厅ID")
    item_count: int = Field(..., description="菜品总数")
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    grand_total_before_discount: Decimal
    points_redeemed: int
    points_discount: Decimal
    total: Decimal
    points_to_earn: int = Field(..., description="本单可获得积分")
    max_redeemable_points: Optional[int] = Field(None, description="本单最多可用积分")

    @classmethod
    def from_quote(cls, restaurant_id: int, item_count: int, quote: "PriceQuote",
                   points_to_earn: int, max_redeemable_points: Optional[int] = None):
        rounded = quote.rounded()
        return cls(
            restaurant_id=restaurant_id,
            item_count=item_count,
            subtotal=rounded.subtotal,
            delivery_fee=rounded.delivery_fee,
            tax=rounded.tax,
            grand_total_before_discount=rounded.grand_total_before_discount,
            points_redeemed=rounded.points_redeemed,
            points_discount=rounded.points_discount,
            total=rounded.total,
            points_to_earn=points_to_earn,
            max_redeemable_points=max_redeemable_points,
        )


class StatusChangeRequest(BaseModel):
    """订单状态变更请求"""
    status: OrderStatus = Field(..., description="目标状态")
    driver_id: Optional[int] = Field(None, description="配送员ID（餐厅交付配送时必填）")


class LocationUpdateRequest(BaseModel):
    """配送员位置上报"""
    lat: float = Field(..., ge=-90, le=90, description="纬度")
    lng: float = Field(..., ge=-180, le=180, description="经度")
