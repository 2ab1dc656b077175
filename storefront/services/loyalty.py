"""
积分账本
余额始终由积分流水折叠得出，不依赖用户表上的冗余计数
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List

from ..models.loyalty import LoyaltyTransaction
from .pricing import DEFAULT_POINTS_PER_UNIT


def balance(transactions: Iterable[LoyaltyTransaction]) -> int:
    """积分余额：获得为正、使用为负，与顺序无关"""
    return sum(t.signed_points for t in transactions)


def sort_history(transactions: Iterable[LoyaltyTransaction]) -> List[LoyaltyTransaction]:
    """按创建时间倒序排列，时间相同时按流水ID倒序"""
    return sorted(
        transactions,
        key=lambda t: (t.created_at or datetime.min, t.transaction_id or 0),
        reverse=True,
    )


def earn_from_order(subtotal: Decimal) -> int:
    """每消费1元（小计，不含配送费和税）获得1积分"""
    return math.floor(Decimal(subtotal))


def can_redeem(current_balance: int, requested_points: int) -> bool:
    return 0 < requested_points <= current_balance


def points_value(points: int, points_per_unit: int = DEFAULT_POINTS_PER_UNIT) -> Decimal:
    """积分折算金额"""
    return Decimal(points) / points_per_unit
