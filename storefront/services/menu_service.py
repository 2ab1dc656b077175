"""
餐厅与菜单服务
处理餐厅浏览、搜索以及店主的菜单维护
"""

from typing import List, Optional

from ..core.database import DatabaseManager, db_manager
from ..core.exceptions import PermissionDeniedError
from ..core.log import get_logger
from ..models.menu import MenuItem, MenuItemCreate, MenuItemUpdate, Restaurant, RestaurantCreate
from ..models.user import Actor
from ..repositories import LogRepository, MenuItemRepository, RestaurantRepository, UserRepository

logger = get_logger(__name__)


class MenuService:
    """餐厅与菜单服务"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.db = db or db_manager
        self.restaurants = RestaurantRepository(self.db)
        self.menu_items = MenuItemRepository(self.db)
        self.users = UserRepository(self.db)
        self.logs = LogRepository(self.db)

    def list_restaurants(self, search: Optional[str] = None,
                         cuisine: Optional[str] = None) -> List[Restaurant]:
        """营业中的餐厅，按评分从高到低；可按名称/菜系关键字和菜系过滤"""
        if not search and not cuisine:
            return self.restaurants.list_open()

        results = []
        term = (search or "").lower()
        for restaurant in self.restaurants.list_open(limit=1000):
            if cuisine and cuisine not in restaurant.cuisine:
                continue
            if term and term not in restaurant.name.lower() and not any(
                    term in c.lower() for c in restaurant.cuisine):
                continue
            results.append(restaurant)
        return results

    def get_restaurant(self, restaurant_id: int) -> Optional[Restaurant]:
        return self.restaurants.get(restaurant_id)

    def create_restaurant(self, actor: Actor, data: RestaurantCreate) -> Restaurant:
        if not actor.is_restaurant:
            raise PermissionDeniedError("需要餐厅账号")
        with self.db.transaction():
            self.users.ensure(actor)
            restaurant_id = self.restaurants.create(actor.user_id, data)
            self.logs.append("restaurant_create", {"restaurant_id": restaurant_id, "name": data.name},
                             actor_id=actor.user_id)
        logger.info("restaurant %s created by owner %s", restaurant_id, actor.user_id)
        return self.restaurants.get(restaurant_id)

    def get_menu(self, restaurant_id: int, actor: Optional[Actor] = None) -> Optional[List[MenuItem]]:
        """
        获取菜单，热门菜品在前

        顾客只能看到可售菜品，店主可以看到全部。餐厅不存在时返回None。
        """
        restaurant = self.restaurants.get(restaurant_id)
        if restaurant is None:
            return None
        is_owner = actor is not None and actor.user_id == restaurant.owner_id and actor.is_restaurant
        return self.menu_items.list_by_restaurant(restaurant_id, available_only=not is_owner)

    def get_popular_items(self, limit: int = 10) -> List[MenuItem]:
        return self.menu_items.list_popular(limit)

    def add_menu_item(self, actor: Actor, restaurant_id: int,
                      data: MenuItemCreate) -> Optional[MenuItem]:
        restaurant = self.restaurants.get(restaurant_id)
        if restaurant is None:
            return None
        self._check_owner(actor, restaurant)

        menu_item_id = self.menu_items.create(restaurant_id, data)
        self.logs.append("menu_item_create", {"menu_item_id": menu_item_id, "name": data.name,
                                              "price": data.price}, actor_id=actor.user_id)
        return self.menu_items.get(menu_item_id)

    def update_menu_item(self, actor: Actor, menu_item_id: int,
                         data: MenuItemUpdate) -> Optional[MenuItem]:
        """更新菜品；已下单的订单保存的是下单时的快照，不受影响"""
        menu_item = self.menu_items.get(menu_item_id)
        if menu_item is None:
            return None
        self._check_owner(actor, self.restaurants.get(menu_item.restaurant_id))

        self.menu_items.update(menu_item_id, data)
        self.logs.append("menu_item_update",
                         {"menu_item_id": menu_item_id, **data.model_dump(mode="json", exclude_unset=True)},
                         actor_id=actor.user_id)
        return self.menu_items.get(menu_item_id)

    def _check_owner(self, actor: Actor, restaurant: Optional[Restaurant]):
        if not actor.is_restaurant or restaurant is None or restaurant.owner_id != actor.user_id:
            raise PermissionDeniedError("只有店主可以维护菜单")
