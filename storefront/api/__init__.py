"""
API routes and endpoints.
"""

from fastapi import APIRouter
from .v1 import cart, loyalty, menu, orders, restaurants, social

api_router = APIRouter()

# 包含所有v1路由
api_router.include_router(restaurants.router, prefix="/restaurants", tags=["餐厅"])
api_router.include_router(menu.router, prefix="/menu-items", tags=["菜品"])
api_router.include_router(cart.router, prefix="/cart", tags=["购物车"])
api_router.include_router(orders.router, prefix="/orders", tags=["订单"])
api_router.include_router(loyalty.router, prefix="/loyalty", tags=["积分"])
api_router.include_router(social.router, prefix="", tags=["收藏与评价"])
