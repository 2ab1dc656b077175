"""
积分路由模块
"""

from fastapi import APIRouter, Depends

from ..deps import get_loyalty_service
from ...core.error_handler import create_success_response
from ...core.security import get_current_actor
from ...models.user import Actor
from ...schemas.loyalty import RedeemRequest
from ...services.loyalty_service import LoyaltyService

router = APIRouter()


@router.get("")
def get_loyalty_summary(
    actor: Actor = Depends(get_current_actor),
    service: LoyaltyService = Depends(get_loyalty_service),
):
    """积分余额及可抵扣金额"""
    return create_success_response(service.get_summary(actor.user_id), "查询成功")


@router.get("/transactions")
def get_transactions(
    actor: Actor = Depends(get_current_actor),
    service: LoyaltyService = Depends(get_loyalty_service),
):
    """积分流水，最新的在前"""
    return create_success_response(service.get_history(actor.user_id), "查询成功")


@router.post("/redeem")
def redeem_points(
    req: RedeemRequest,
    actor: Actor = Depends(get_current_actor),
    service: LoyaltyService = Depends(get_loyalty_service),
):
    """使用积分"""
    transaction = service.redeem(actor.user_id, req.points, req.description, req.order_id)
    return create_success_response(transaction, "积分使用成功")
