"""
订单仓储
状态变更采用条件更新：只有当前状态与读取时一致才会写入
"""

import json
from typing import Any, Dict, Iterable, List, Optional

from ..core.database import DatabaseManager
from ..models.order import Address, Order, OrderItem, OrderStatus

# 按角色查询订单时允许的过滤列
SCOPE_COLUMNS = {"customer_id", "restaurant_id", "driver_id"}


def _row_to_order(row: Dict[str, Any]) -> Order:
    row = dict(row)
    address = row.pop("delivery_address_json", None)
    items = row.pop("items_json", None)
    lat, lng = row.pop("driver_lat", None), row.pop("driver_lng", None)
    row["delivery_address"] = json.loads(address) if isinstance(address, str) else address
    row["items"] = json.loads(items) if isinstance(items, str) else (items or [])
    row["driver_location"] = {"lat": lat, "lng": lng} if lat is not None and lng is not None else None
    row["special_instructions"] = row.get("special_instructions") or ""
    return Order(**row)


class OrderRepository:
    """订单表访问"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def create(self, customer_id: int, restaurant_id: int, restaurant_name: Optional[str],
               delivery_address: Optional[Address], items: List[OrderItem],
               subtotal, delivery_fee, tax, points_redeemed: int, points_discount, total,
               payment_method: Optional[str], special_instructions: str,
               status: OrderStatus) -> int:
        row = self.db.execute_one(
            "INSERT INTO orders(customer_id, restaurant_id, restaurant_name, delivery_address_json, "
            "items_json, subtotal, delivery_fee, tax, points_redeemed, points_discount, total, status, "
            "payment_method, special_instructions) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?) RETURNING order_id",
            [
                customer_id,
                restaurant_id,
                restaurant_name,
                json.dumps(delivery_address.model_dump(mode="json")) if delivery_address else None,
                json.dumps([i.model_dump(mode="json") for i in items], ensure_ascii=False),
                subtotal,
                delivery_fee,
                tax,
                points_redeemed,
                points_discount,
                total,
                OrderStatus(status).value,
                payment_method,
                special_instructions,
            ],
        )
        return row[0]

    def get(self, order_id: int) -> Optional[Order]:
        row = self.db.fetch_dict("SELECT * FROM orders WHERE order_id=?", [order_id])
        return _row_to_order(row) if row else None

    def list_by(self, column: str, values: Iterable[int],
                statuses: Optional[Iterable[OrderStatus]] = None) -> List[Order]:
        """按指定列（customer_id/restaurant_id/driver_id）查询，最新的在前"""
        if column not in SCOPE_COLUMNS:
            raise ValueError(f"unsupported order scope column: {column}")
        values = list(values)
        if not values:
            return []

        where_conditions = [f"{column} IN ({', '.join('?' for _ in values)})"]
        params: List[Any] = list(values)
        if statuses:
            statuses = [OrderStatus(s).value for s in statuses]
            where_conditions.append(f"status IN ({', '.join('?' for _ in statuses)})")
            params.extend(statuses)

        rows = self.db.fetch_dicts(
            f"SELECT * FROM orders WHERE {' AND '.join(where_conditions)} "
            "ORDER BY created_at DESC, order_id DESC",
            params,
        )
        return [_row_to_order(r) for r in rows]

    def list_ready_unassigned(self) -> List[Order]:
        rows = self.db.fetch_dicts(
            "SELECT * FROM orders WHERE status='ready' AND driver_id IS NULL ORDER BY created_at, order_id"
        )
        return [_row_to_order(r) for r in rows]

    def update_status(self, order_id: int, expected: OrderStatus, new_status: OrderStatus,
                      driver_id: Optional[int] = None) -> bool:
        """
        条件更新订单状态

        Returns:
            bool: 当前状态与expected一致并写入成功时为True
        """
        rows = self.db.execute_query(
            "UPDATE orders SET status=?, driver_id=COALESCE(?, driver_id), updated_at=now() "
            "WHERE order_id=? AND status=? RETURNING order_id",
            [OrderStatus(new_status).value, driver_id, order_id, OrderStatus(expected).value],
        )
        return len(rows) == 1

    def update_driver_location(self, order_id: int, driver_id: int, lat: float, lng: float) -> bool:
        rows = self.db.execute_query(
            "UPDATE orders SET driver_lat=?, driver_lng=?, updated_at=now() "
            "WHERE order_id=? AND driver_id=? AND status='out_for_delivery' RETURNING order_id",
            [lat, lng, order_id, driver_id],
        )
        return len(rows) == 1
