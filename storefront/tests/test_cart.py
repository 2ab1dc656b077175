"""
购物车测试
"""

from decimal import Decimal

import pytest

from ..core.exceptions import CartRestaurantMismatchError, ValidationError
from ..models.menu import Addon
from ..services.cart import Cart
from .conftest import make_menu_item

EGG = Addon(id="egg", name="加蛋", price=Decimal("1.50"))
BEEF = Addon(id="beef", name="加牛肉", price=Decimal("4.00"))


@pytest.fixture
def noodles():
    return make_menu_item(1, restaurant_id=1, price="10.00", addons=[EGG, BEEF], name="担担面")


@pytest.fixture
def rice():
    return make_menu_item(2, restaurant_id=1, price="1.25", name="米饭")


@pytest.fixture
def other_restaurant_item():
    return make_menu_item(3, restaurant_id=2, price="8.00", name="汉堡")


class TestCartAdd:

    def test_first_add_binds_restaurant(self, noodles):
        """测试首次加入菜品绑定餐厅"""
        cart = Cart()
        cart.add(noodles, 2)

        assert cart.restaurant_id == 1
        assert len(cart) == 1
        assert cart.item_count() == 2

    def test_same_line_merges(self, noodles):
        """测试相同菜品、备注、加料合并数量"""
        cart = Cart()
        cart.add(noodles, 1, "少辣", [EGG])
        cart.add(noodles, 2, "少辣", [EGG])

        assert len(cart) == 1
        assert cart.items[0].quantity == 3

    def test_addon_order_does_not_matter(self, noodles):
        """测试加料顺序不影响合并"""
        cart = Cart()
        cart.add(noodles, 1, addons=[EGG, BEEF])
        cart.add(noodles, 1, addons=[BEEF, EGG])

        assert len(cart) == 1
        assert cart.items[0].quantity == 2

    def test_different_instructions_or_addons_are_separate(self, noodles):
        """测试备注或加料不同时分行"""
        cart = Cart()
        cart.add(noodles, 1, "少辣")
        cart.add(noodles, 1, "多辣")
        cart.add(noodles, 1, "少辣", [EGG])

        assert len(cart) == 3

    def test_other_restaurant_rejected(self, noodles, other_restaurant_item):
        """测试加入其他餐厅菜品被拒绝且购物车不变"""
        cart = Cart()
        cart.add(noodles)

        with pytest.raises(CartRestaurantMismatchError) as exc_info:
            cart.add(other_restaurant_item)

        assert exc_info.value.details == {"cart_restaurant_id": 1, "item_restaurant_id": 2}
        assert len(cart) == 1
        assert cart.restaurant_id == 1

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_invalid_quantity_rejected(self, noodles, quantity):
        """测试数量小于1被拒绝"""
        cart = Cart()
        with pytest.raises(ValidationError):
            cart.add(noodles, quantity)
        assert cart.is_empty

    def test_addons_copied_by_value(self, noodles):
        """测试加料按值复制"""
        cart = Cart()
        addon = Addon(id="egg", name="加蛋", price=Decimal("1.50"))
        cart.add(noodles, 1, addons=[addon])
        addon.price = Decimal("99")

        assert cart.items[0].selected_addons[0].price == Decimal("1.50")


class TestCartUpdate:

    def test_remove_last_line_unbinds_restaurant(self, noodles, other_restaurant_item):
        """测试删除最后一行后解除餐厅绑定"""
        cart = Cart()
        cart.add(noodles)
        cart.remove(0)

        assert cart.is_empty
        assert cart.restaurant_id is None
        cart.add(other_restaurant_item)
        assert cart.restaurant_id == 2

    def test_update_quantity(self, noodles):
        """测试修改数量"""
        cart = Cart()
        cart.add(noodles)
        cart.update_quantity(0, 5)
        assert cart.item_count() == 5

    def test_update_quantity_to_zero_removes(self, noodles, rice):
        """测试数量改为0等同删除"""
        cart = Cart()
        cart.add(noodles)
        cart.add(rice)

        assert cart.update_quantity(0, 0) is None
        assert len(cart) == 1
        assert cart.items[0].menu_item.menu_item_id == 2

    def test_bad_index(self, noodles):
        """测试删除不存在的行"""
        cart = Cart()
        cart.add(noodles)
        with pytest.raises(ValidationError):
            cart.remove(3)

    def test_clear(self, noodles):
        """测试清空购物车"""
        cart = Cart()
        cart.add(noodles, 3)
        cart.clear()
        assert cart.is_empty
        assert cart.restaurant_id is None


class TestCartTotals:

    def test_total_includes_addons(self, noodles, rice):
        """测试总额包含加料"""
        cart = Cart()
        cart.add(noodles, 2, addons=[EGG])
        cart.add(rice, 2)

        assert cart.total() == Decimal("25.50")
        assert cart.item_count() == 4

    def test_snapshot_restores_cart(self, noodles, rice):
        """测试快照恢复购物车"""
        cart = Cart()
        cart.add(noodles, 2, "少辣", [EGG])
        cart.add(rice, 1)

        restored = Cart.from_snapshot(cart.to_snapshot())

        assert restored.restaurant_id == 1
        assert restored.total() == cart.total()
        assert [i.merge_key for i in restored.items] == [i.merge_key for i in cart.items]


class TestCartAddRemove:

    def test_add_then_remove_restores_total(self, noodles, rice):
        """加入一行再按下标删除，总额和数量与之前完全一致"""
        cart = Cart()
        cart.add(noodles, 2, "少辣", [EGG])
        cart.add(rice, 3)
        total_before, count_before = cart.total(), cart.item_count()

        line = cart.add(noodles, 1, "不要香菜", [BEEF])
        assert cart.total() != total_before
        cart.remove(cart.items.index(line))

        assert cart.total() == total_before
        assert cart.item_count() == count_before
        assert len(cart) == 2
