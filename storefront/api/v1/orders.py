"""
订单路由模块
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_order_service
from ...core.error_handler import create_success_response
from ...core.exceptions import NotFoundError, PermissionDeniedError
from ...core.security import get_current_actor
from ...models.order import OrderStatus
from ...models.user import Actor
from ...schemas.order import CheckoutRequest, LocationUpdateRequest, StatusChangeRequest
from ...services.order_service import OrderService

router = APIRouter()


@router.post("")
def place_order(
    req: CheckoutRequest,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service),
):
    """下单"""
    order = service.place_order(actor, req)
    return create_success_response(order, "下单成功")


@router.get("")
def list_orders(
    status: Optional[List[OrderStatus]] = Query(None),
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service),
):
    """当前用户可见的订单，最新的在前"""
    return create_success_response(service.list_orders(actor, status), "查询成功")


@router.get("/available")
def list_available_orders(
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service),
):
    """待接单的订单（配送员）"""
    if not actor.is_driver:
        raise PermissionDeniedError("只有配送员可以查看待接订单")
    return create_success_response(service.list_available_for_drivers(actor), "查询成功")


@router.get("/{order_id}")
def get_order(
    order_id: int,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service),
):
    """订单详情（含配送员实时位置）"""
    order = service.get_order(order_id)
    if order is None:
        raise NotFoundError("订单不存在")
    if not service.can_view(actor, order):
        raise PermissionDeniedError("无权查看该订单")
    return create_success_response(order, "查询成功")


@router.post("/{order_id}/status")
def change_order_status(
    order_id: int,
    req: StatusChangeRequest,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service),
):
    """订单状态流转"""
    order = service.change_status(actor, order_id, req.status, req.driver_id)
    if order is None:
        raise NotFoundError("订单不存在")
    return create_success_response(order, "订单状态已更新")


@router.post("/{order_id}/accept")
def accept_order(
    order_id: int,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service),
):
    """配送员接单"""
    order = service.accept_delivery(actor, order_id)
    if order is None:
        raise NotFoundError("订单不存在")
    return create_success_response(order, "接单成功")


@router.put("/{order_id}/location")
def update_location(
    order_id: int,
    req: LocationUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service),
):
    """配送员上报位置"""
    order = service.update_driver_location(actor, order_id, req.lat, req.lng)
    if order is None:
        raise NotFoundError("订单不存在")
    return create_success_response(order, "位置已更新")
