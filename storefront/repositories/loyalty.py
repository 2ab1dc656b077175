"""
积分流水仓储（只追加）
"""

from typing import List, Optional

from ..core.database import DatabaseManager
from ..models.loyalty import LoyaltyTransaction, TransactionType


class LoyaltyRepository:
    """积分流水表访问"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def append(self, user_id: int, type: TransactionType, points: int,
               description: str, order_id: Optional[int] = None) -> int:
        row = self.db.execute_one(
            "INSERT INTO loyalty_transactions(user_id, type, points, description, order_id) "
            "VALUES (?,?,?,?,?) RETURNING transaction_id",
            [user_id, TransactionType(type).value, points, description, order_id],
        )
        return row[0]

    def list_by_user(self, user_id: int) -> List[LoyaltyTransaction]:
        rows = self.db.fetch_dicts(
            "SELECT * FROM loyalty_transactions WHERE user_id=? "
            "ORDER BY created_at DESC, transaction_id DESC",
            [user_id],
        )
        return [LoyaltyTransaction(**r) for r in rows]
