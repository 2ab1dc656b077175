"""
购物车
本地持有的待下单菜品集合，所有行必须属于同一家餐厅
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from ..core.exceptions import CartRestaurantMismatchError, ValidationError
from ..models.cart import CartItem
from ..models.menu import Addon, MenuItem
from .pricing import ZERO, line_total


class Cart:
    """购物车聚合"""

    def __init__(self):
        self._items: List[CartItem] = []
        self._restaurant_id: Optional[int] = None

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    @property
    def restaurant_id(self) -> Optional[int]:
        return self._restaurant_id

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def add(self, menu_item: MenuItem, quantity: int = 1, special_instructions: str = "",
            addons: Sequence[Addon] = ()) -> CartItem:
        """
        加入购物车

        与已有行菜品、备注、加料集合都相同时合并数量，否则追加新行。

        Raises:
            ValidationError: 数量小于1
            CartRestaurantMismatchError: 购物车已绑定其他餐厅
        """
        if quantity < 1:
            raise ValidationError("数量必须大于0", details={"quantity": quantity})
        if self._items and self._restaurant_id != menu_item.restaurant_id:
            raise CartRestaurantMismatchError(self._restaurant_id, menu_item.restaurant_id)

        candidate = CartItem(
            menu_item=menu_item,
            quantity=quantity,
            special_instructions=special_instructions,
            selected_addons=[a.model_copy() for a in addons],
        )
        for existing in self._items:
            if existing.merge_key == candidate.merge_key:
                existing.quantity += quantity
                return existing

        self._items.append(candidate)
        self._restaurant_id = menu_item.restaurant_id
        return candidate

    def remove(self, index: int) -> CartItem:
        self._check_index(index)
        removed = self._items.pop(index)
        if not self._items:
            self._restaurant_id = None
        return removed

    def update_quantity(self, index: int, quantity: int) -> Optional[CartItem]:
        """数量小于等于0时等同于删除该行"""
        if quantity <= 0:
            self.remove(index)
            return None
        self._check_index(index)
        self._items[index].quantity = quantity
        return self._items[index]

    def clear(self):
        self._items = []
        self._restaurant_id = None

    def total(self) -> Decimal:
        return sum((line_total(item) for item in self._items), ZERO)

    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def _check_index(self, index: int):
        if not 0 <= index < len(self._items):
            raise ValidationError("购物车行不存在", details={"index": index})

    def to_snapshot(self) -> Dict[str, Any]:
        """序列化为可本地保存的结构"""
        return {
            "restaurant_id": self._restaurant_id,
            "items": [item.model_dump(mode="json") for item in self._items],
        }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "Cart":
        cart = cls()
        for raw in data.get("items") or []:
            item = CartItem.model_validate(raw)
            cart.add(item.menu_item, item.quantity, item.special_instructions, item.selected_addons)
        return cart
