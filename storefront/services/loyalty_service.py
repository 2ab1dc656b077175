"""
积分服务
在积分账本纯函数之上提供查询和使用积分的操作

业务规则：
- 余额只由积分流水计算
- 使用积分前校验余额，失败时不写任何流水
- 用户表上的冗余计数与流水在同一事务中更新
"""

from typing import List, Optional

from ..config.settings import settings
from ..core.database import DatabaseManager, db_manager
from ..core.exceptions import InsufficientPointsError, ValidationError
from ..core.log import get_logger
from ..models.loyalty import LoyaltyTransaction, TransactionType
from ..repositories import LogRepository, LoyaltyRepository, UserRepository
from ..schemas.loyalty import LoyaltySummary
from . import loyalty

logger = get_logger(__name__)


class LoyaltyService:
    """积分服务类"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.db = db or db_manager
        self.transactions = LoyaltyRepository(self.db)
        self.users = UserRepository(self.db)
        self.logs = LogRepository(self.db)

    def get_history(self, user_id: int) -> List[LoyaltyTransaction]:
        """积分流水，最新的在前"""
        return loyalty.sort_history(self.transactions.list_by_user(user_id))

    def get_balance(self, user_id: int) -> int:
        return loyalty.balance(self.transactions.list_by_user(user_id))

    def get_summary(self, user_id: int) -> LoyaltySummary:
        points = self.get_balance(user_id)
        return LoyaltySummary(
            user_id=user_id,
            points=points,
            points_value=loyalty.points_value(points, settings.points_per_unit),
        )

    def redeem(self, user_id: int, points: int, description: str,
               order_id: Optional[int] = None) -> LoyaltyTransaction:
        """
        使用积分

        Raises:
            ValidationError: 积分数量不大于0
            InsufficientPointsError: 余额不足
        """
        if points <= 0:
            raise ValidationError("使用积分数量必须大于0", details={"points": points})

        with self.db.transaction():
            current = self.get_balance(user_id)
            if not loyalty.can_redeem(current, points):
                raise InsufficientPointsError(current, points)
            transaction_id = self.record(user_id, TransactionType.REDEEMED, points, description, order_id)
            self.logs.append(
                "loyalty_redeem",
                {"points": points, "balance_before": current, "balance_after": current - points,
                 "order_id": order_id},
                user_id=user_id,
                actor_id=user_id,
            )

        logger.info("user %s redeemed %s points (balance %s -> %s)",
                    user_id, points, current, current - points)
        return next(t for t in self.transactions.list_by_user(user_id)
                    if t.transaction_id == transaction_id)

    def record(self, user_id: int, type: TransactionType, points: int,
               description: str, order_id: Optional[int] = None) -> int:
        """追加一条流水并同步冗余计数，调用方负责事务"""
        transaction_id = self.transactions.append(user_id, type, points, description, order_id)
        delta = points if type is TransactionType.EARNED else -points
        self.users.add_loyalty_points(user_id, delta)
        return transaction_id

