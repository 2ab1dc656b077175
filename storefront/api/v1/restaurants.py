"""
餐厅路由模块
"""

from typing import Optional

from fastapi import APIRouter, Depends

from ..deps import get_menu_service
from ...core.error_handler import create_success_response
from ...core.exceptions import NotFoundError
from ...core.security import get_current_actor, get_optional_actor
from ...models.menu import MenuItemCreate, RestaurantCreate
from ...models.user import Actor
from ...services.menu_service import MenuService

router = APIRouter()


@router.get("")
def list_restaurants(
    q: Optional[str] = None,
    cuisine: Optional[str] = None,
    service: MenuService = Depends(get_menu_service),
):
    """营业中的餐厅列表，支持关键字和菜系筛选"""
    return create_success_response(service.list_restaurants(q, cuisine), "查询成功")


@router.post("")
def create_restaurant(
    req: RestaurantCreate,
    actor: Actor = Depends(get_current_actor),
    service: MenuService = Depends(get_menu_service),
):
    """创建餐厅（餐厅账号）"""
    return create_success_response(service.create_restaurant(actor, req), "餐厅创建成功")


@router.get("/{restaurant_id}")
def get_restaurant(restaurant_id: int, service: MenuService = Depends(get_menu_service)):
    restaurant = service.get_restaurant(restaurant_id)
    if restaurant is None:
        raise NotFoundError("餐厅不存在")
    return create_success_response(restaurant, "查询成功")


@router.get("/{restaurant_id}/menu")
def get_menu(
    restaurant_id: int,
    actor: Optional[Actor] = Depends(get_optional_actor),
    service: MenuService = Depends(get_menu_service),
):
    """餐厅菜单，热门在前；店主可看到已下架菜品"""
    items = service.get_menu(restaurant_id, actor)
    if items is None:
        raise NotFoundError("餐厅不存在")
    return create_success_response(items, "查询成功")


@router.post("/{restaurant_id}/menu")
def add_menu_item(
    restaurant_id: int,
    req: MenuItemCreate,
    actor: Actor = Depends(get_current_actor),
    service: MenuService = Depends(get_menu_service),
):
    """新增菜品（店主）"""
    item = service.add_menu_item(actor, restaurant_id, req)
    if item is None:
        raise NotFoundError("餐厅不存在")
    return create_success_response(item, "菜品创建成功")
