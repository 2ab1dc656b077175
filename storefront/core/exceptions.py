"""
自定义异常类
提供更精确的错误处理和异常信息

分类：
- ValidationError: 输入或业务校验失败，同步拒绝，不修改任何状态
- InvalidTransitionError: 订单状态机拒绝的状态变更
- PermissionDeniedError: 角色或归属不符
- ConcurrencyError: 条件更新失败（状态已被其他操作修改）
"""

from typing import Any, Dict, Optional


class BaseApplicationError(Exception):
    """应用基础异常类"""

    default_code = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


class DatabaseError(BaseApplicationError):
    """数据库相关异常"""
    default_code = "DATABASE_ERROR"


class AuthenticationError(BaseApplicationError):
    """认证相关异常"""
    default_code = "AUTHENTICATION_REQUIRED"


class PermissionDeniedError(BaseApplicationError):
    """权限拒绝错误"""
    default_code = "PERMISSION_DENIED"


class ValidationError(BaseApplicationError):
    """数据验证异常"""
    default_code = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """资源不存在（仅用于HTTP层，核心逻辑以None表示不存在）"""
    default_code = "RESOURCE_NOT_FOUND"


class ConcurrencyError(BaseApplicationError):
    """并发控制错误"""
    default_code = "CONCURRENT_MODIFICATION"


class CartRestaurantMismatchError(ValidationError):
    """购物车只能包含同一家餐厅的菜品"""

    def __init__(self, cart_restaurant_id: int, item_restaurant_id: int):
        super().__init__(
            "购物车中已有其他餐厅的菜品，请先清空购物车",
            "CART_RESTAURANT_MISMATCH",
            {
                "cart_restaurant_id": cart_restaurant_id,
                "item_restaurant_id": item_restaurant_id,
            },
        )


class InsufficientPointsError(ValidationError):
    """积分不足"""

    def __init__(self, balance: int, requested: int):
        super().__init__(
            f"积分不足：当前{balance}，需要{requested}",
            "INSUFFICIENT_POINTS",
            {"balance": balance, "requested": requested},
        )


class InvalidTransitionError(BaseApplicationError):
    """订单状态转换不合法"""
    default_code = "INVALID_TRANSITION"


class InvalidOrderStateError(InvalidTransitionError):
    """订单当前状态不允许该操作"""
    default_code = "INVALID_ORDER_STATE"
