"""
购物车行模型
"""

from decimal import Decimal
from typing import FrozenSet, List, Tuple

from pydantic import BaseModel, Field

from .menu import Addon, MenuItem


class CartItem(BaseModel):
    """购物车行"""
    menu_item: MenuItem
    quantity: int = Field(1, ge=1, description="数量")
    special_instructions: str = Field("", description="备注")
    selected_addons: List[Addon] = Field(default_factory=list, description="已选加料")

    @property
    def merge_key(self) -> Tuple[int, str, FrozenSet[Tuple[str, Decimal]]]:
        """相同菜品、相同备注、相同加料集合（与顺序无关）的行可合并"""
        return (
            self.menu_item.menu_item_id,
            self.special_instructions,
            frozenset((a.id, a.price) for a in self.selected_addons),
        )
