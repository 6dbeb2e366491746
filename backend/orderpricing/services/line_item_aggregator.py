"""Line item pricing and order subtotal aggregation."""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from orderpricing.core.money import ZERO, quantize_money
from orderpricing.repositories.product_repository import (
    ProductRepository,
    ProductVariantRepository,
)
from orderpricing.schemas.order import LineItemSelection
from orderpricing.services.pricing_errors import InvalidLineItem
from orderpricing.services.variant_pricing import VariantPricing, resolve_unit_price


@dataclass(frozen=True)
class ResolvedLineItem:
    """Frozen price snapshot for one cart line."""

    product_id: UUID
    variant_ids: tuple[UUID, ...]
    quantity: int
    unit_price: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class AggregatedCart:
    items: tuple[ResolvedLineItem, ...]
    subtotal: Decimal


def validate_quantity(quantity: object) -> int:
    # bool is an int subclass but never a valid quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidLineItem(f"Quantity must be a positive integer, got {quantity!r}")
    return quantity


def price_line_item(
    product_id: UUID,
    base_price: Decimal,
    variants: Sequence[VariantPricing],
    quantity: int,
    variant_ids: Sequence[UUID] = (),
) -> ResolvedLineItem:
    quantity = validate_quantity(quantity)
    unit_price = resolve_unit_price(base_price, variants)
    return ResolvedLineItem(
        product_id=product_id,
        variant_ids=tuple(variant_ids),
        quantity=quantity,
        unit_price=unit_price,
        total_price=quantize_money(unit_price * quantity),
    )


def aggregate(items: Sequence[ResolvedLineItem]) -> AggregatedCart:
    """Sum line totals into an order subtotal.

    Line totals are already cent-exact, so the Decimal sum carries no
    rounding error at all.
    """
    if not items:
        raise InvalidLineItem("Order must contain at least one item")
    subtotal = sum((item.total_price for item in items), start=ZERO)
    return AggregatedCart(items=tuple(items), subtotal=quantize_money(subtotal))


class LineItemAggregator:
    """Prices a cart against the live catalog.

    Reads only; the returned snapshot is what gets persisted on the order.
    """

    def __init__(self, db: Session):
        self.db = db
        self.product_repo = ProductRepository(db)
        self.variant_repo = ProductVariantRepository(db)

    def price_cart(self, selections: Sequence[LineItemSelection]) -> AggregatedCart:
        """Resolve every selection and aggregate the subtotal.

        Raises:
            InvalidLineItem: On an empty cart, unknown or inactive product or
                variant, a variant of another product, or a bad quantity.
        """
        if not selections:
            raise InvalidLineItem("Order must contain at least one item")
        return aggregate([self._price_selection(selection) for selection in selections])

    def _price_selection(self, selection: LineItemSelection) -> ResolvedLineItem:
        validate_quantity(selection.quantity)

        product = self.product_repo.get_by_id(selection.product_id)
        if not product or not product.is_active:
            raise InvalidLineItem(f"Product {selection.product_id} not found or inactive")

        requested_ids = list(dict.fromkeys(selection.variant_ids))
        found = {v.id: v for v in self.variant_repo.get_by_ids(requested_ids)}
        variants = []
        for variant_id in requested_ids:
            variant = found.get(variant_id)
            if (
                variant is None
                or variant.product_id != product.id
                or not variant.is_active
            ):
                raise InvalidLineItem(
                    f"Variant {variant_id} not found or inactive for product {product.id}"
                )
            variants.append(VariantPricing.from_model(variant))

        return price_line_item(
            product_id=product.id,  # type: ignore[arg-type]
            base_price=product.base_price,  # type: ignore[arg-type]
            variants=variants,
            quantity=selection.quantity,
            variant_ids=requested_ids,
        )
