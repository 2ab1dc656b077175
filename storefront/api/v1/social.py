"""
收藏与评价路由模块
"""

from typing import Optional

from fastapi import APIRouter, Depends

from ..deps import get_favorite_service, get_review_service
from ...core.error_handler import create_success_response
from ...core.exceptions import NotFoundError
from ...core.security import get_current_actor
from ...models.user import Actor
from ...schemas.social import FavoriteToggleRequest, ReviewCreateRequest
from ...services.social_service import FavoriteService, ReviewService

router = APIRouter()


@router.get("/favorites")
def list_favorites(
    actor: Actor = Depends(get_current_actor),
    service: FavoriteService = Depends(get_favorite_service),
):
    return create_success_response(service.list_favorites(actor.user_id), "查询成功")


@router.get("/favorites/check")
def check_favorite(
    restaurant_id: Optional[int] = None,
    menu_item_id: Optional[int] = None,
    actor: Actor = Depends(get_current_actor),
    service: FavoriteService = Depends(get_favorite_service),
):
    """是否已收藏某个餐厅或菜品"""
    is_favorite = service.is_favorite(actor.user_id, restaurant_id, menu_item_id)
    return create_success_response({"is_favorite": is_favorite}, "查询成功")


@router.post("/favorites/toggle")
def toggle_favorite(
    req: FavoriteToggleRequest,
    actor: Actor = Depends(get_current_actor),
    service: FavoriteService = Depends(get_favorite_service),
):
    """收藏/取消收藏餐厅或菜品"""
    is_favorite = service.toggle(actor.user_id, req.restaurant_id, req.menu_item_id)
    return create_success_response({"is_favorite": is_favorite},
                                   "已收藏" if is_favorite else "已取消收藏")


@router.get("/restaurants/{restaurant_id}/reviews")
def list_reviews(restaurant_id: int, service: ReviewService = Depends(get_review_service)):
    reviews, average = service.list_reviews(restaurant_id)
    return create_success_response(
        {"reviews": reviews, "average_rating": round(average, 2), "review_count": len(reviews)},
        "查询成功",
    )


@router.get("/reviews")
def list_my_reviews(
    actor: Actor = Depends(get_current_actor),
    service: ReviewService = Depends(get_review_service),
):
    """当前用户的评价，最新的在前"""
    return create_success_response(service.list_user_reviews(actor.user_id), "查询成功")


@router.get("/reviews/eligibility/{order_id}")
def review_eligibility(
    order_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ReviewService = Depends(get_review_service),
):
    """订单是否可以评价：自己的、已送达且尚未评价"""
    return create_success_response({"can_review": service.can_review(actor, order_id)}, "查询成功")


@router.post("/reviews")
def add_review(
    req: ReviewCreateRequest,
    actor: Actor = Depends(get_current_actor),
    service: ReviewService = Depends(get_review_service),
):
    review = service.add_review(actor, req.order_id, req.rating, req.comment)
    if review is None:
        raise NotFoundError("订单不存在")
    return create_success_response(review, "评价成功")
