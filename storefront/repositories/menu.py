"""
餐厅与菜品仓储
"""

import json
from typing import Any, Dict, List, Optional

from ..core.database import DatabaseManager
from ..models.menu import MenuItem, MenuItemCreate, MenuItemUpdate, Restaurant, RestaurantCreate


def _loads(value, default):
    if value is None:
        return default
    if isinstance(value, str):
        return json.loads(value)
    return value


def _row_to_restaurant(row: Dict[str, Any]) -> Restaurant:
    row = dict(row)
    row["cuisine"] = _loads(row.pop("cuisine_json", None), [])
    return Restaurant(**row)


def _row_to_menu_item(row: Dict[str, Any]) -> MenuItem:
    row = dict(row)
    row["addons"] = _loads(row.pop("addons_json", None), [])
    return MenuItem(**row)


class RestaurantRepository:
    """餐厅表访问"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def create(self, owner_id: int, data: RestaurantCreate) -> int:
        row = self.db.execute_one(
            "INSERT INTO restaurants(owner_id, name, description, cuisine_json, delivery_time, is_open) "
            "VALUES (?,?,?,?,?,?) RETURNING restaurant_id",
            [owner_id, data.name, data.description, json.dumps(data.cuisine, ensure_ascii=False),
             data.delivery_time, data.is_open],
        )
        return row[0]

    def get(self, restaurant_id: int) -> Optional[Restaurant]:
        row = self.db.fetch_dict("SELECT * FROM restaurants WHERE restaurant_id=?", [restaurant_id])
        return _row_to_restaurant(row) if row else None

    def list_open(self, limit: int = 50) -> List[Restaurant]:
        rows = self.db.fetch_dicts(
            "SELECT * FROM restaurants WHERE is_open ORDER BY rating DESC, restaurant_id LIMIT ?",
            [limit],
        )
        return [_row_to_restaurant(r) for r in rows]

    def list_by_owner(self, owner_id: int) -> List[Restaurant]:
        rows = self.db.fetch_dicts(
            "SELECT * FROM restaurants WHERE owner_id=? ORDER BY restaurant_id", [owner_id]
        )
        return [_row_to_restaurant(r) for r in rows]

    def update_rating(self, restaurant_id: int, rating: float, review_count: int):
        self.db.execute_query(
            "UPDATE restaurants SET rating=?, review_count=?, updated_at=now() WHERE restaurant_id=?",
            [rating, review_count, restaurant_id],
        )


class MenuItemRepository:
    """菜品表访问"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def create(self, restaurant_id: int, data: MenuItemCreate) -> int:
        row = self.db.execute_one(
            "INSERT INTO menu_items(restaurant_id, name, description, category, price, is_available, "
            "is_popular, preparation_time, addons_json) VALUES (?,?,?,?,?,?,?,?,?) RETURNING menu_item_id",
            [restaurant_id, data.name, data.description, data.category, data.price,
             data.is_available, data.is_popular, data.preparation_time,
             json.dumps([a.model_dump(mode="json") for a in data.addons], ensure_ascii=False)],
        )
        return row[0]

    def get(self, menu_item_id: int) -> Optional[MenuItem]:
        row = self.db.fetch_dict("SELECT * FROM menu_items WHERE menu_item_id=?", [menu_item_id])
        return _row_to_menu_item(row) if row else None

    def list_by_restaurant(self, restaurant_id: int, available_only: bool = True) -> List[MenuItem]:
        query = "SELECT * FROM menu_items WHERE restaurant_id=?"
        if available_only:
            query += " AND is_available"
        query += " ORDER BY is_popular DESC, menu_item_id"
        return [_row_to_menu_item(r) for r in self.db.fetch_dicts(query, [restaurant_id])]

    def list_popular(self, limit: int = 10) -> List[MenuItem]:
        rows = self.db.fetch_dicts(
            "SELECT * FROM menu_items WHERE is_popular AND is_available ORDER BY menu_item_id LIMIT ?",
            [limit],
        )
        return [_row_to_menu_item(r) for r in rows]

    def update(self, menu_item_id: int, data: MenuItemUpdate):
        """只更新提供的字段"""
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return

        update_fields = []
        params = []
        for field, value in changes.items():
            if field == "addons":
                update_fields.append("addons_json = ?")
                params.append(json.dumps(
                    [a.model_dump(mode="json") for a in data.addons or []], ensure_ascii=False))
            else:
                update_fields.append(f"{field} = ?")
                params.append(value)
        update_fields.append("updated_at = now()")
        params.append(menu_item_id)

        self.db.execute_query(
            f"UPDATE menu_items SET {', '.join(update_fields)} WHERE menu_item_id = ?", params
        )
