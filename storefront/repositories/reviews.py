"""
评价仓储
"""

from typing import List, Optional, Tuple

from ..core.database import DatabaseManager
from ..models.favorite import Review


class ReviewRepository:
    """评价表访问"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def add(self, review: Review) -> int:
        row = self.db.execute_one(
            "INSERT INTO reviews(order_id, customer_id, restaurant_id, rating, comment) "
            "VALUES (?,?,?,?,?) RETURNING review_id",
            [review.order_id, review.customer_id, review.restaurant_id, review.rating, review.comment],
        )
        return row[0]

    def get_by_order(self, order_id: int) -> Optional[Review]:
        row = self.db.fetch_dict("SELECT * FROM reviews WHERE order_id=?", [order_id])
        return Review(**row) if row else None

    def list_by_restaurant(self, restaurant_id: int) -> List[Review]:
        rows = self.db.fetch_dicts(
            "SELECT * FROM reviews WHERE restaurant_id=? ORDER BY created_at DESC, review_id DESC",
            [restaurant_id],
        )
        return [Review(**r) for r in rows]

    def list_by_customer(self, customer_id: int) -> List[Review]:
        rows = self.db.fetch_dicts(
            "SELECT * FROM reviews WHERE customer_id=? ORDER BY created_at DESC, review_id DESC",
            [customer_id],
        )
        return [Review(**r) for r in rows]

    def rating_summary(self, restaurant_id: int) -> Tuple[float, int]:
        """返回(平均分, 评价数)"""
        row = self.db.execute_one(
            "SELECT COALESCE(AVG(rating), 0), COUNT(*) FROM reviews WHERE restaurant_id=?",
            [restaurant_id],
        )
        return float(row[0]), int(row[1])
