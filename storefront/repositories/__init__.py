"""
数据访问层
每类实体一个仓储，业务服务只通过这些窄接口访问存储
"""

from .favorites import FavoriteRepository
from .logs import LogRepository
from .loyalty import LoyaltyRepository
from .menu import MenuItemRepository, RestaurantRepository
from .orders import OrderRepository
from .reviews import ReviewRepository
from .users import UserRepository

__all__ = [
    "FavoriteRepository",
    "LogRepository",
    "LoyaltyRepository",
    "MenuItemRepository",
    "OrderRepository",
    "RestaurantRepository",
    "ReviewRepository",
    "UserRepository",
]
