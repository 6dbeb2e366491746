"""Decimal helpers shared by the pricing services."""

import decimal
from decimal import Decimal
from typing import Any

from orderpricing.core.config import settings

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Convert a DB or request value to Decimal without going through float."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents using the configured rounding mode."""
    rounding = getattr(decimal, settings.MONEY_ROUNDING, decimal.ROUND_HALF_UP)
    return value.quantize(CENT, rounding=rounding)
