"""
路由依赖：按请求构造服务，数据库由 get_db 提供（测试中可覆盖）
"""

from fastapi import Depends

from ..core.database import DatabaseManager, get_db
from ..services.loyalty_service import LoyaltyService
from ..services.menu_service import MenuService
from ..services.order_service import OrderService
from ..services.social_service import FavoriteService, ReviewService


def get_order_service(db: DatabaseManager = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_menu_service(db: DatabaseManager = Depends(get_db)) -> MenuService:
    return MenuService(db)


def get_loyalty_service(db: DatabaseManager = Depends(get_db)) -> LoyaltyService:
    return LoyaltyService(db)


def get_favorite_service(db: DatabaseManager = Depends(get_db)) -> FavoriteService:
    return FavoriteService(db)


def get_review_service(db: DatabaseManager = Depends(get_db)) -> ReviewService:
    return ReviewService(db)
