"""
购物车路由模块
购物车本身保存在客户端，这里只负责按服务端菜单计价
"""

from typing import Optional

from fastapi import APIRouter, Depends

from ..deps import get_order_service
from ...core.error_handler import create_success_response
from ...core.security import get_optional_actor
from ...models.user import Actor
from ...schemas.order import CartQuoteRequest
from ...services.order_service import OrderService

router = APIRouter()


@router.post("/quote")
def quote_cart(
    req: CartQuoteRequest,
    actor: Optional[Actor] = Depends(get_optional_actor),
    service: OrderService = Depends(get_order_service),
):
    """购物车报价：小计、税费、配送费、积分抵扣和应付总额"""
    quote = service.quote(req.items, req.points_to_redeem, actor)
    return create_success_response(quote, "报价成功")
