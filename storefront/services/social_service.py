"""
收藏与评价服务
"""

from typing import Any, Dict, List, Optional, Tuple

from ..core.database import DatabaseManager, db_manager
from ..core.exceptions import InvalidOrderStateError, PermissionDeniedError, ValidationError
from ..core.log import get_logger
from ..models.favorite import Favorite, Review
from ..models.order import OrderStatus
from ..models.user import Actor
from ..repositories import (
    FavoriteRepository,
    MenuItemRepository,
    OrderRepository,
    RestaurantRepository,
    ReviewRepository,
)

logger = get_logger(__name__)


def _check_single_target(restaurant_id: Optional[int], menu_item_id: Optional[int]):
    if (restaurant_id is None) == (menu_item_id is None):
        raise ValidationError("收藏目标必须是餐厅或菜品之一", "INVALID_FAVORITE_TARGET")


class FavoriteService:
    """收藏服务"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.db = db or db_manager
        self.favorites = FavoriteRepository(self.db)
        self.restaurants = RestaurantRepository(self.db)
        self.menu_items = MenuItemRepository(self.db)

    def is_favorite(self, user_id: int, restaurant_id: Optional[int] = None,
                    menu_item_id: Optional[int] = None) -> bool:
        _check_single_target(restaurant_id, menu_item_id)
        return self.favorites.find(user_id, restaurant_id, menu_item_id) is not None

    def toggle(self, user_id: int, restaurant_id: Optional[int] = None,
               menu_item_id: Optional[int] = None) -> bool:
        """
        切换收藏状态

        Returns:
            bool: 切换后是否处于收藏状态
        """
        _check_single_target(restaurant_id, menu_item_id)
        with self.db.transaction():
            existing = self.favorites.find(user_id, restaurant_id, menu_item_id)
            if existing:
                self.favorites.delete(existing.favorite_id)
                return False
            self.favorites.add(user_id, restaurant_id, menu_item_id)
            return True

    def list_favorites(self, user_id: int) -> Dict[str, Any]:
        """收藏列表及对应的餐厅/菜品详情，已不存在的目标会被跳过"""
        favorites: List[Favorite] = self.favorites.list_by_user(user_id)
        restaurants = [self.restaurants.get(f.restaurant_id) for f in favorites if f.restaurant_id]
        items = [self.menu_items.get(f.menu_item_id) for f in favorites if f.menu_item_id]
        return {
            "favorites": favorites,
            "restaurants": [r for r in restaurants if r is not None],
            "menu_items": [i for i in items if i is not None],
        }


class ReviewService:
    """评价服务"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.db = db or db_manager
        self.reviews = ReviewRepository(self.db)
        self.orders = OrderRepository(self.db)
        self.restaurants = RestaurantRepository(self.db)

    def can_review(self, actor: Actor, order_id: int) -> bool:
        order = self.orders.get(order_id)
        return (
            order is not None
            and actor.is_customer
            and order.customer_id == actor.user_id
            and order.status is OrderStatus.DELIVERED
            and self.reviews.get_by_order(order_id) is None
        )

    def add_review(self, actor: Actor, order_id: int, rating: int,
                   comment: str = "") -> Optional[Review]:
        """
        评价已送达的订单，每单只能评价一次，同时刷新餐厅评分

        Returns:
            Optional[Review]: 新评价，订单不存在时为None
        """
        order = self.orders.get(order_id)
        if order is None:
            return None
        if not actor.is_customer or order.customer_id != actor.user_id:
            raise PermissionDeniedError("只能评价自己的订单")
        if order.status is not OrderStatus.DELIVERED:
            raise InvalidOrderStateError("只能评价已送达的订单", details={"status": order.status.value})

        review = Review(order_id=order_id, customer_id=actor.user_id,
                        restaurant_id=order.restaurant_id, rating=rating, comment=comment)
        with self.db.transaction():
            if self.reviews.get_by_order(order_id) is not None:
                raise ValidationError("该订单已评价", "DUPLICATE_REVIEW", {"order_id": order_id})
            self.reviews.add(review)
            average, count = self.reviews.rating_summary(order.restaurant_id)
            self.restaurants.update_rating(order.restaurant_id, round(average, 2), count)

        logger.info("order %s reviewed by %s with rating %s", order_id, actor.user_id, rating)
        return self.reviews.get_by_order(order_id)

    def list_user_reviews(self, customer_id: int) -> List[Review]:
        """用户自己的评价，最新的在前"""
        return self.reviews.list_by_customer(customer_id)

    def list_reviews(self, restaurant_id: int) -> Tuple[List[Review], float]:
        """返回(评价列表, 平均分)"""
        reviews = self.reviews.list_by_restaurant(restaurant_id)
        if not reviews:
            return reviews, 0.0
        return reviews, sum(r.rating for r in reviews) / len(reviews)
