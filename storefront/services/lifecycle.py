"""
订单状态机
定义合法的状态转换及允许触发该转换的角色

    pending -> confirmed            餐厅
    pending -> cancelled            餐厅
    confirmed -> preparing          餐厅
    preparing -> ready              餐厅
    ready -> out_for_delivery       餐厅（交给指定配送员）或配送员（自行接单）
    out_for_delivery -> delivered   配送员

delivered 和 cancelled 为终态。进入 out_for_delivery 时状态与配送员ID
必须同时设置。所有函数均为纯函数，不修改传入的订单。
"""

from datetime import datetime
from typing import Dict, FrozenSet, Optional, Tuple

from ..core.exceptions import InvalidOrderStateError, InvalidTransitionError, ValidationError
from ..models.order import Coordinates, Order, OrderStatus
from ..models.user import UserRole

INITIAL_STATUS = OrderStatus.PENDING
TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

ALLOWED_TRANSITIONS: Dict[Tuple[OrderStatus, OrderStatus], FrozenSet[UserRole]] = {
    (OrderStatus.PENDING, OrderStatus.CONFIRMED): frozenset({UserRole.RESTAURANT}),
    (OrderStatus.PENDING, OrderStatus.CANCELLED): frozenset({UserRole.RESTAURANT}),
    (OrderStatus.CONFIRMED, OrderStatus.PREPARING): frozenset({UserRole.RESTAURANT}),
    (OrderStatus.PREPARING, OrderStatus.READY): frozenset({UserRole.RESTAURANT}),
    (OrderStatus.READY, OrderStatus.OUT_FOR_DELIVERY): frozenset({UserRole.RESTAURANT, UserRole.DRIVER}),
    (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED): frozenset({UserRole.DRIVER}),
}


def is_terminal(status: OrderStatus) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def can_transition(current: OrderStatus, target: OrderStatus, role: UserRole) -> bool:
    roles = ALLOWED_TRANSITIONS.get((OrderStatus(current), OrderStatus(target)))
    return roles is not None and UserRole(role) in roles


def transition(current: OrderStatus, target: OrderStatus, role: UserRole) -> OrderStatus:
    """
    校验状态转换

    Returns:
        OrderStatus: 转换后的状态

    Raises:
        InvalidTransitionError: 转换不在状态表中或角色无权触发
    """
    current, target, role = OrderStatus(current), OrderStatus(target), UserRole(role)
    if not can_transition(current, target, role):
        raise InvalidTransitionError(
            f"订单状态不能由{current.value}变更为{target.value}",
            details={"from": current.value, "to": target.value, "role": role.value},
        )
    return target


def assign_driver(order: Order, driver_id: int, now: Optional[datetime] = None) -> Order:
    """指派配送员：仅 ready 状态可用，同时把状态置为 out_for_delivery"""
    if order.status is not OrderStatus.READY:
        raise InvalidTransitionError(
            "只有待取餐的订单可以指派配送员",
            details={"from": order.status.value, "to": OrderStatus.OUT_FOR_DELIVERY.value},
        )
    return order.model_copy(update={
        "status": OrderStatus.OUT_FOR_DELIVERY,
        "driver_id": driver_id,
        "updated_at": now or datetime.now(),
    })


def apply_transition(order: Order, target: OrderStatus, role: UserRole,
                     driver_id: Optional[int] = None,
                     now: Optional[datetime] = None) -> Order:
    """对订单应用状态转换，返回新的订单实例"""
    new_status = transition(order.status, target, role)
    if new_status is OrderStatus.OUT_FOR_DELIVERY:
        if driver_id is None:
            raise ValidationError("开始配送时必须指定配送员", "DRIVER_REQUIRED")
        return assign_driver(order, driver_id, now)
    return order.model_copy(update={
        "status": new_status,
        "updated_at": now or datetime.now(),
    })


def update_driver_location(order: Order, location: Coordinates,
                           now: Optional[datetime] = None) -> Order:
    """更新配送员位置：仅配送中可用，不改变状态"""
    if order.status is not OrderStatus.OUT_FOR_DELIVERY:
        raise InvalidOrderStateError(
            "订单不在配送中，无法更新位置",
            details={"status": order.status.value},
        )
    return order.model_copy(update={
        "driver_location": location,
        "updated_at": now or datetime.now(),
    })
