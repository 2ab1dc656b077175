"""
菜品路由模块
"""

from fastapi import APIRouter, Depends, Query

from ..deps import get_menu_service
from ...core.error_handler import create_success_response
from ...core.exceptions import NotFoundError
from ...core.security import get_current_actor
from ...models.menu import MenuItemUpdate
from ...models.user import Actor
from ...services.menu_service import MenuService

router = APIRouter()


@router.get("/popular")
def get_popular_items(
    limit: int = Query(10, ge=1, le=50),
    service: MenuService = Depends(get_menu_service),
):
    return create_success_response(service.get_popular_items(limit), "查询成功")


@router.patch("/{menu_item_id}")
def update_menu_item(
    menu_item_id: int,
    req: MenuItemUpdate,
    actor: Actor = Depends(get_current_actor),
    service: MenuService = Depends(get_menu_service),
):
    """更新菜品（店主）；已下单订单不受影响"""
    item = service.update_menu_item(actor, menu_item_id, req)
    if item is None:
        raise NotFoundError("菜品不存在")
    return create_success_response(item, "菜品更新成功")
