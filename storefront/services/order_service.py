"""
订单服务模块
提供下单、查询、状态流转和配送位置更新

主要功能：
- 按服务端菜单重建购物车并计价
- 下单时在同一事务内写入订单、积分获得流水和积分使用流水
- 按角色查询订单
- 通过状态机和条件更新完成状态流转

业务规则：
- 只有顾客可以下单，购物车只能包含同一家餐厅的菜品
- 每笔订单都会追加一条获得积分流水（积分为小计向下取整，0积分同样记录）
- 状态变更只有在读取时的状态仍然有效时才会写入
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..config.settings import settings
from ..core.database import DatabaseManager, db_manager
from ..core.exceptions import (
    ConcurrencyError,
    InsufficientPointsError,
    PermissionDeniedError,
    ValidationError,
)
from ..core.log import get_logger
from ..models.loyalty import TransactionType
from ..models.order import Coordinates, Order, OrderItem, OrderStatus
from ..models.user import Actor, UserRole
from ..repositories import (
    LogRepository,
    MenuItemRepository,
    OrderRepository,
    RestaurantRepository,
    UserRepository,
)
from ..schemas.order import CheckoutItem, CheckoutRequest, QuoteResponse
from . import lifecycle, loyalty, pricing
from .cart import Cart
from .loyalty_service import LoyaltyService

logger = get_logger(__name__)


class OrderService:
    """订单服务类，封装所有订单相关的业务逻辑"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.db = db or db_manager
        self.orders = OrderRepository(self.db)
        self.menu_items = MenuItemRepository(self.db)
        self.restaurants = RestaurantRepository(self.db)
        self.users = UserRepository(self.db)
        self.logs = LogRepository(self.db)
        self.loyalty = LoyaltyService(self.db)

        # 按角色决定订单查询范围
        self._order_scopes: Dict[UserRole, Callable[[Actor], Tuple[str, List[int]]]] = {
            UserRole.CUSTOMER: lambda actor: ("customer_id", [actor.user_id]),
            UserRole.RESTAURANT: lambda actor: ("restaurant_id", self._owned_restaurant_ids(actor)),
            UserRole.DRIVER: lambda actor: ("driver_id", [actor.user_id]),
        }
        # 按角色决定能否操作某个订单
        self._handlers: Dict[UserRole, Callable[[Actor, Order], bool]] = {
            UserRole.CUSTOMER: lambda actor, order: False,
            UserRole.RESTAURANT: lambda actor, order: order.restaurant_id in self._owned_restaurant_ids(actor),
            UserRole.DRIVER: lambda actor, order: order.driver_id in (None, actor.user_id),
        }

    def build_cart(self, items: Iterable[CheckoutItem]) -> Cart:
        """
        按服务端菜单重建购物车

        Raises:
            ValidationError: 菜品不存在、已下架或加料不属于该菜品
            CartRestaurantMismatchError: 菜品来自不同餐厅
        """
        cart = Cart()
        for line in items:
            menu_item = self.menu_items.get(line.menu_item_id)
            if menu_item is None:
                raise ValidationError("菜品不存在", "MENU_ITEM_NOT_FOUND",
                                      {"menu_item_id": line.menu_item_id})
            if not menu_item.is_available:
                raise ValidationError(f"{menu_item.name}已售罄", "MENU_ITEM_UNAVAILABLE",
                                      {"menu_item_id": line.menu_item_id})

            addons = []
            for addon_id in line.addon_ids:
                addon = menu_item.find_addon(addon_id)
                if addon is None:
                    raise ValidationError("加料不存在", "ADDON_NOT_FOUND",
                                          {"menu_item_id": line.menu_item_id, "addon_id": addon_id})
                addons.append(addon)

            cart.add(menu_item, line.quantity, line.special_instructions, addons)
        return cart

    def _price(self, cart: Cart, points_to_redeem: int) -> pricing.PriceQuote:
        """计价；使用积分按总额可抵扣的上限截断，多出的积分不会被扣除"""
        base = pricing.quote(cart.items, settings.delivery_fee, settings.tax_rate,
                             0, settings.points_per_unit)
        points = pricing.max_redeemable_points(base.grand_total_before_discount, points_to_redeem,
                                               settings.points_per_unit)
        return pricing.quote(cart.items, settings.delivery_fee, settings.tax_rate,
                             points, settings.points_per_unit)

    def quote(self, items: Iterable[CheckoutItem], points_to_redeem: int = 0,
              actor: Optional[Actor] = None) -> QuoteResponse:
        """购物车报价（不落库）"""
        cart = self.build_cart(items)
        quote = self._price(cart, points_to_redeem)
        max_points = None
        if actor is not None:
            max_points = pricing.max_redeemable_points(
                quote.grand_total_before_discount,
                self.loyalty.get_balance(actor.user_id),
                settings.points_per_unit,
            )
        return QuoteResponse.from_quote(
            cart.restaurant_id, cart.item_count(), quote,
            loyalty.earn_from_order(quote.subtotal), max_points,
        )

    def place_order(self, actor: Actor, req: CheckoutRequest) -> Order:
        """
        下单

        Args:
            actor: 下单顾客
            req: 结算请求

        Returns:
            Order: 新创建的订单（pending）

        Raises:
            PermissionDeniedError: 非顾客下单
            ValidationError: 购物车或餐厅校验失败
            InsufficientPointsError: 使用积分超过余额
        """
        if not actor.is_customer:
            raise PermissionDeniedError("只有顾客可以下单")

        cart = self.build_cart(req.items)
        restaurant = self.restaurants.get(cart.restaurant_id)
        if restaurant is None or not restaurant.is_open:
            raise ValidationError("餐厅暂未营业", "RESTAURANT_CLOSED",
                                  {"restaurant_id": cart.restaurant_id})

        quote = self._price(cart, req.points_to_redeem)
        points_to_redeem = quote.points_redeemed
        display = quote.rounded()
        earned = loyalty.earn_from_order(quote.subtotal)
        order_items = [
            OrderItem(
                menu_item_id=item.menu_item.menu_item_id,
                name=item.menu_item.name,
                price=item.menu_item.price,
                quantity=item.quantity,
                special_instructions=item.special_instructions,
                addons=item.selected_addons,
            )
            for item in cart.items
        ]

        with self.db.transaction():
            self.users.ensure(actor)

            balance_before = None
            if points_to_redeem:
                balance_before = self.loyalty.get_balance(actor.user_id)
                if not loyalty.can_redeem(balance_before, points_to_redeem):
                    raise InsufficientPointsError(balance_before, points_to_redeem)

            order_id = self.orders.create(
                customer_id=actor.user_id,
                restaurant_id=restaurant.restaurant_id,
                restaurant_name=restaurant.name,
                delivery_address=req.delivery_address,
                items=order_items,
                subtotal=display.subtotal,
                delivery_fee=display.delivery_fee,
                tax=display.tax,
                points_redeemed=points_to_redeem,
                points_discount=display.points_discount,
                total=display.total,
                payment_method=req.payment_method,
                special_instructions=req.special_instructions,
                status=lifecycle.INITIAL_STATUS,
            )

            self.loyalty.record(actor.user_id, TransactionType.EARNED, earned,
                                f"订单 #{order_id} 获得积分", order_id)
            if points_to_redeem:
                self.loyalty.record(actor.user_id, TransactionType.REDEEMED, points_to_redeem,
                                    f"订单 #{order_id} 使用积分", order_id)

            self.logs.append(
                "order_create",
                {
                    "order_id": order_id,
                    "restaurant_id": restaurant.restaurant_id,
                    "items": [i.model_dump(mode="json") for i in order_items],
                    "subtotal": display.subtotal,
                    "total": display.total,
                    "points_earned": earned,
                    "points_redeemed": points_to_redeem,
                    "points_balance_before": balance_before,
                },
                user_id=actor.user_id,
                actor_id=actor.user_id,
            )

        order = self.orders.get(order_id)
        logger.info("order %s placed by customer %s at restaurant %s: %s items, total %s",
                    order_id, actor.user_id, restaurant.restaurant_id, order.item_count, display.total)
        return order

    def get_order(self, order_id: int) -> Optional[Order]:
        """订单不存在时返回None"""
        return self.orders.get(order_id)

    def can_view(self, actor: Actor, order: Order) -> bool:
        if actor.is_customer:
            return order.customer_id == actor.user_id
        if actor.is_restaurant:
            return order.restaurant_id in self._owned_restaurant_ids(actor)
        return order.driver_id == actor.user_id or (
            order.driver_id is None and order.status is OrderStatus.READY)

    def list_orders(self, actor: Actor,
                    statuses: Optional[Iterable[OrderStatus]] = None) -> List[Order]:
        """按角色查询订单：顾客看自己的，餐厅看自家餐厅的，配送员看指派给自己的"""
        column, values = self._order_scopes[actor.role](actor)
        return self.orders.list_by(column, values, statuses)

    def list_available_for_drivers(self, actor: Optional[Actor] = None) -> List[Order]:
        """
        待取餐且尚未指派配送员的订单

        配送员查看时同时登记到用户表，之后餐厅才能把订单交给他配送。
        """
        if actor is not None and actor.is_driver:
            self.users.ensure(actor)
        return self.orders.list_ready_unassigned()

    def change_status(self, actor: Actor, order_id: int, target: OrderStatus,
                      driver_id: Optional[int] = None) -> Optional[Order]:
        """
        订单状态流转

        Returns:
            Optional[Order]: 更新后的订单，订单不存在时为None

        Raises:
            InvalidTransitionError: 状态表中没有该转换
            PermissionDeniedError: 不是该订单的餐厅或配送员
            ValidationError: 开始配送时没有配送员，或指定的配送员不存在
            ConcurrencyError: 订单状态已被其他操作修改
        """
        order = self.orders.get(order_id)
        if order is None:
            return None

        target = OrderStatus(target)
        if actor.is_driver:
            driver_id = actor.user_id
        updated = lifecycle.apply_transition(order, target, actor.role, driver_id)
        self._authorize(actor, order)
        if actor.is_driver:
            self.users.ensure(actor)
        elif updated.driver_id != order.driver_id:
            self._check_driver(updated.driver_id)

        with self.db.transaction():
            changed = self.orders.update_status(
                order.order_id, order.status, updated.status,
                updated.driver_id if updated.driver_id != order.driver_id else None,
            )
            if not changed:
                raise ConcurrencyError("订单状态已变更，请刷新后重试", "ORDER_STATUS_CHANGED",
                                       {"order_id": order_id, "expected": order.status.value})
            self.logs.append(
                "order_status_change",
                {"order_id": order_id, "from": order.status.value, "to": updated.status.value,
                 "driver_id": updated.driver_id, "role": actor.role.value},
                user_id=order.customer_id,
                actor_id=actor.user_id,
            )

        logger.info("order %s: %s -> %s by %s %s", order_id, order.status.value,
                    updated.status.value, actor.role.value, actor.user_id)
        return self.orders.get(order_id)

    def accept_delivery(self, actor: Actor, order_id: int) -> Optional[Order]:
        """配送员接单：ready -> out_for_delivery，同时写入配送员ID"""
        if not actor.is_driver:
            raise PermissionDeniedError("只有配送员可以接单")
        return self.change_status(actor, order_id, OrderStatus.OUT_FOR_DELIVERY)

    def update_driver_location(self, actor: Actor, order_id: int,
                               lat: float, lng: float) -> Optional[Order]:
        """配送员上报位置，仅限配送中且指派给自己的订单"""
        order = self.orders.get(order_id)
        if order is None:
            return None
        if not actor.is_driver or order.driver_id != actor.user_id:
            raise PermissionDeniedError("只有该订单的配送员可以更新位置")

        lifecycle.update_driver_location(order, Coordinates(lat=lat, lng=lng))
        if not self.orders.update_driver_location(order_id, actor.user_id, lat, lng):
            raise ConcurrencyError("订单状态已变更，请刷新后重试", "ORDER_STATUS_CHANGED",
                                   {"order_id": order_id})
        return self.orders.get(order_id)

    def _authorize(self, actor: Actor, order: Order):
        if not self._handlers[actor.role](actor, order):
            raise PermissionDeniedError("无权操作该订单", details={"order_id": order.order_id})

    def _check_driver(self, driver_id: int):
        user = self.users.get(driver_id)
        if user is None or user.role is not UserRole.DRIVER:
            raise ValidationError("配送员不存在", "DRIVER_NOT_FOUND", {"driver_id": driver_id})

    def _owned_restaurant_ids(self, actor: Actor) -> List[int]:
        return [r.restaurant_id for r in self.restaurants.list_by_owner(actor.user_id)]

