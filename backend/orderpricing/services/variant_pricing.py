"""Variant price resolution for a single line item."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from orderpricing.core.money import ZERO, quantize_money, to_decimal
from orderpricing.models.product import PriceBehavior
from orderpricing.services.pricing_errors import InvalidLineItem


@dataclass(frozen=True)
class VariantPricing:
    """The pricing-relevant slice of a product variant."""

    id: str
    price_modifier: Decimal
    price_behavior: PriceBehavior
    override_priority: int | None = None

    @classmethod
    def from_model(cls, variant: Any) -> "VariantPricing":
        """Build from a ``ProductVariant`` row (or anything shaped like one)."""
        behavior = variant.price_behavior or PriceBehavior.ADD.value
        return cls(
            id=str(variant.id),
            price_modifier=to_decimal(variant.price_modifier),
            price_behavior=PriceBehavior(behavior),
            override_priority=variant.override_priority,
        )


def _override_rank(variant: VariantPricing) -> tuple[int, int, str]:
    # Explicit priorities sort before null ones; equal keys fall back to id.
    if variant.override_priority is None:
        return (1, 0, variant.id)
    return (0, variant.override_priority, variant.id)


def select_winning_override(overrides: Iterable[VariantPricing]) -> VariantPricing | None:
    """Pick the override that replaces the base price.

    Lowest ``override_priority`` wins. A null priority loses to every explicit
    one. Ties, including several null priorities, go to the lowest variant id
    so the result never depends on selection order.
    """
    return min(overrides, key=_override_rank, default=None)


def resolve_unit_price(base_price: Decimal, variants: Sequence[VariantPricing]) -> Decimal:
    """Resolve the unit price for a product given its selected variants.

    The winning override replaces ``base_price``; every additive variant is
    summed on top. Intermediate arithmetic is exact ``Decimal``; the result is
    rounded to cents only once, at the end.

    Raises:
        InvalidLineItem: If the resolved price is negative.
    """
    base = to_decimal(base_price)
    overrides = [v for v in variants if v.price_behavior == PriceBehavior.OVERRIDE]
    adds = [v for v in variants if v.price_behavior == PriceBehavior.ADD]

    winner = select_winning_override(overrides)
    starting_price = winner.price_modifier if winner is not None else base
    additive_total = sum((v.price_modifier for v in adds), start=ZERO)

    unit_price = starting_price + additive_total
    if unit_price < 0:
        raise InvalidLineItem(f"Resolved unit price {unit_price} is negative")
    return quantize_money(unit_price)
