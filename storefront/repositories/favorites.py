"""
收藏仓储
"""

from typing import List, Optional

from ..core.database import DatabaseManager
from ..models.favorite import Favorite


class FavoriteRepository:
    """收藏表访问"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def find(self, user_id: int, restaurant_id: Optional[int] = None,
             menu_item_id: Optional[int] = None) -> Optional[Favorite]:
        if restaurant_id is not None:
            row = self.db.fetch_dict(
                "SELECT * FROM favorites WHERE user_id=? AND restaurant_id=?",
                [user_id, restaurant_id],
            )
        else:
            row = self.db.fetch_dict(
                "SELECT * FROM favorites WHERE user_id=? AND menu_item_id=?",
                [user_id, menu_item_id],
            )
        return Favorite(**row) if row else None

    def add(self, user_id: int, restaurant_id: Optional[int] = None,
            menu_item_id: Optional[int] = None) -> int:
        row = self.db.execute_one(
            "INSERT INTO favorites(user_id, restaurant_id, menu_item_id) VALUES (?,?,?) RETURNING favorite_id",
            [user_id, restaurant_id, menu_item_id],
        )
        return row[0]

    def delete(self, favorite_id: int):
        self.db.execute_query("DELETE FROM favorites WHERE favorite_id=?", [favorite_id])

    def list_by_user(self, user_id: int) -> List[Favorite]:
        rows = self.db.fetch_dicts(
            "SELECT * FROM favorites WHERE user_id=? ORDER BY created_at DESC, favorite_id DESC",
            [user_id],
        )
        return [Favorite(**r) for r in rows]
