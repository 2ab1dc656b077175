"""
计价模块
根据购物车行、配送费和税率计算小计、税费、积分抵扣和应付总额

计算规则：
- 行金额 = (单价 + 加料加价之和) * 数量
- 小计 = 行金额之和
- 税费 = 小计 * 税率
- 折前总额 = 小计 + 配送费 + 税费
- 积分抵扣 = min(积分 / 100, 折前总额)
- 应付总额 = 折前总额 - 积分抵扣，最低为0

内部全程保留完整精度，仅在展示时四舍五入到两位小数。
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Iterable

from ..core.exceptions import ValidationError
from ..models.cart import CartItem

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")
DEFAULT_POINTS_PER_UNIT = 100


def round_money(value: Decimal) -> Decimal:
    """展示用金额：两位小数，四舍五入"""
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _non_negative(name: str, value: Decimal) -> Decimal:
    value = Decimal(value)
    if value < 0:
        raise ValidationError(f"{name}不能为负数", details={name: str(value)})
    return value


def line_total(item: CartItem) -> Decimal:
    if item.quantity < 1:
        raise ValidationError("数量必须大于0", details={"quantity": item.quantity})
    unit = _non_negative("price", item.menu_item.price)
    for addon in item.selected_addons:
        unit += _non_negative("addon_price", addon.price)
    return unit * item.quantity


def subtotal(items: Iterable[CartItem]) -> Decimal:
    return sum((line_total(item) for item in items), ZERO)


def tax(amount: Decimal, tax_rate: Decimal) -> Decimal:
    return _non_negative("subtotal", amount) * _non_negative("tax_rate", tax_rate)


def grand_total_before_discount(amount: Decimal, delivery_fee: Decimal, tax_amount: Decimal) -> Decimal:
    return amount + _non_negative("delivery_fee", delivery_fee) + tax_amount


def points_discount(points: int, grand_total: Decimal,
                    points_per_unit: int = DEFAULT_POINTS_PER_UNIT) -> Decimal:
    """积分抵扣金额，不超过订单总额"""
    if points < 0:
        raise ValidationError("积分不能为负数", details={"points": points})
    return min(Decimal(points) / points_per_unit, grand_total)


def max_redeemable_points(grand_total: Decimal, balance: int,
                          points_per_unit: int = DEFAULT_POINTS_PER_UNIT) -> int:
    """本单最多可用积分：不超过余额，也不超过总额可抵扣的积分数"""
    cap = int((grand_total * points_per_unit).to_integral_value(rounding=ROUND_FLOOR))
    return max(0, min(balance, cap))


@dataclass(frozen=True)
class PriceQuote:
    """报价结果（完整精度）"""
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    grand_total_before_discount: Decimal
    points_redeemed: int
    points_discount: Decimal
    total: Decimal

    def rounded(self) -> "PriceQuote":
        """展示用两位小数版本"""
        return PriceQuote(
            subtotal=round_money(self.subtotal),
            delivery_fee=round_money(self.delivery_fee),
            tax=round_money(self.tax),
            grand_total_before_discount=round_money(self.grand_total_before_discount),
            points_redeemed=self.points_redeemed,
            points_discount=round_money(self.points_discount),
            total=round_money(self.total),
        )


def quote(items: Iterable[CartItem], delivery_fee: Decimal, tax_rate: Decimal,
          points_to_redeem: int = 0,
          points_per_unit: int = DEFAULT_POINTS_PER_UNIT) -> PriceQuote:
    """计算整单报价"""
    sub = subtotal(items)
    tax_amount = tax(sub, tax_rate)
    grand = grand_total_before_discount(sub, delivery_fee, tax_amount)
    discount = points_discount(points_to_redeem, grand, points_per_unit)
    return PriceQuote(
        subtotal=sub,
        delivery_fee=Decimal(delivery_fee),
        tax=tax_amount,
        grand_total_before_discount=grand,
        points_redeemed=points_to_redeem,
        points_discount=discount,
        total=max(grand - discount, ZERO),
    )
