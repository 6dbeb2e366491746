"""Discount amount calculation for a validated promo code."""

from decimal import Decimal
from typing import Any

from orderpricing.core.money import ZERO, quantize_money, to_decimal
from orderpricing.models.promo_code import DiscountType

HUNDRED = Decimal("100")


def calculate_discount(promo: Any, order_subtotal: Decimal) -> Decimal:
    """Compute the discount ``promo`` grants on ``order_subtotal``.

    Percentage codes take ``discount_value`` percent of the subtotal; fixed
    codes take ``discount_value`` as is. ``max_discount_amount`` caps either
    kind, and the result never exceeds the subtotal. Rounded to cents last.
    """
    subtotal = to_decimal(order_subtotal)
    if subtotal <= 0:
        return quantize_money(ZERO)

    value = to_decimal(promo.discount_value)
    if promo.discount_type == DiscountType.PERCENTAGE.value:
        raw = subtotal * value / HUNDRED
    elif promo.discount_type == DiscountType.FIXED_AMOUNT.value:
        raw = value
    else:
        raise ValueError(f"Unsupported discount type: {promo.discount_type}")

    discount = max(raw, ZERO)
    if promo.max_discount_amount is not None:
        discount = min(discount, to_decimal(promo.max_discount_amount))
    discount = min(discount, subtotal)
    return quantize_money(discount)
