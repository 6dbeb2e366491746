"""Tests for line item pricing and cart aggregation."""

from decimal import Decimal
from uuid import uuid4

import pytest

from orderpricing.models.product import PriceBehavior
from orderpricing.repositories.product_repository import ProductRepository
from orderpricing.schemas.order import LineItemSelection
from orderpricing.schemas.product import ProductUpdate
from orderpricing.services.line_item_aggregator import (
    LineItemAggregator,
    aggregate,
    price_line_item,
    validate_quantity,
)
from orderpricing.services.pricing_errors import InvalidLineItem
from orderpricing.services.variant_pricing import VariantPricing


class TestValidateQuantity:
    """Tests for validate_quantity()."""

    @pytest.mark.parametrize("quantity", [1, 2, 1000])
    def test_positive_integers_accepted(self, quantity):
        assert validate_quantity(quantity) == quantity

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", None, True])
    def test_invalid_quantities_rejected(self, quantity):
        with pytest.raises(InvalidLineItem, match="Quantity"):
            validate_quantity(quantity)


class TestPriceLineItem:
    """Tests for price_line_item() and aggregate()."""

    def test_line_total_is_unit_price_times_quantity(self):
        """Base 10.00, +2.00 and +1.50, quantity 3: unit 13.50, total 40.50."""
        variants = [
            VariantPricing("a", Decimal("2.00"), PriceBehavior.ADD),
            VariantPricing("b", Decimal("1.50"), PriceBehavior.ADD),
        ]
        product_id = uuid4()
        item = price_line_item(product_id, Decimal("10.00"), variants, 3)
        assert item.product_id == product_id
        assert item.unit_price == Decimal("13.50")
        assert item.total_price == Decimal("40.50")

    def test_override_line_total(self):
        """Override 16.00 wins over 18.00, quantity 2: total 32.00."""
        variants = [
            VariantPricing("a", Decimal("18.00"), PriceBehavior.OVERRIDE, 2),
            VariantPricing("b", Decimal("16.00"), PriceBehavior.OVERRIDE, 1),
        ]
        item = price_line_item(uuid4(), Decimal("10.00"), variants, 2)
        assert item.unit_price == Decimal("16.00")
        assert item.total_price == Decimal("32.00")

    def test_invalid_quantity(self):
        with pytest.raises(InvalidLineItem):
            price_line_item(uuid4(), Decimal("10.00"), [], 0)

    def test_aggregate_sums_line_totals(self):
        items = [
            price_line_item(uuid4(), Decimal("10.00"), [], 3),
            price_line_item(uuid4(), Decimal("0.10"), [], 3),
        ]
        cart = aggregate(items)
        assert cart.subtotal == Decimal("30.30")
        assert len(cart.items) == 2

    def test_aggregate_empty_cart(self):
        with pytest.raises(InvalidLineItem, match="at least one item"):
            aggregate([])


class TestLineItemAggregator:
    """Tests for LineItemAggregator.price_cart() against the catalog."""

    def test_price_cart(self, db_session, make_product):
        shirt, (large, print_) = make_product(
            "10.00", [("override", "15.00", 1), ("add", "2.00")], name="Shirt"
        )
        mug, _ = make_product("4.25", name="Mug")

        cart = LineItemAggregator(db_session).price_cart(
            [
                LineItemSelection(
                    product_id=shirt.id, quantity=2, variant_ids=[large.id, print_.id]
                ),
                LineItemSelection(product_id=mug.id, quantity=4),
            ]
        )
        assert cart.items[0].unit_price == Decimal("17.00")
        assert cart.items[0].total_price == Decimal("34.00")
        assert cart.items[0].variant_ids == (large.id, print_.id)
        assert cart.items[1].total_price == Decimal("17.00")
        assert cart.subtotal == Decimal("51.00")

    def test_duplicate_variant_ids_counted_once(self, db_session, make_product):
        product, (extra,) = make_product("10.00", [("add", "2.00")])
        cart = LineItemAggregator(db_session).price_cart(
            [LineItemSelection(product_id=product.id, quantity=1, variant_ids=[extra.id, extra.id])]
        )
        assert cart.subtotal == Decimal("12.00")
        assert cart.items[0].variant_ids == (extra.id,)

    def test_empty_cart(self, db_session):
        with pytest.raises(InvalidLineItem, match="at least one item"):
            LineItemAggregator(db_session).price_cart([])

    def test_zero_quantity(self, db_session, make_product):
        product, _ = make_product("10.00")
        with pytest.raises(InvalidLineItem, match="Quantity"):
            LineItemAggregator(db_session).price_cart(
                [LineItemSelection(product_id=product.id, quantity=0)]
            )

    def test_unknown_product(self, db_session):
        with pytest.raises(InvalidLineItem, match="not found"):
            LineItemAggregator(db_session).price_cart(
                [LineItemSelection(product_id=uuid4(), quantity=1)]
            )

    def test_inactive_product(self, db_session, make_product):
        product, _ = make_product("10.00")
        ProductRepository(db_session).update(product.id, ProductUpdate(is_active=False))
        with pytest.raises(InvalidLineItem, match="inactive"):
            LineItemAggregator(db_session).price_cart(
                [LineItemSelection(product_id=product.id, quantity=1)]
            )

    def test_unknown_variant(self, db_session, make_product):
        product, _ = make_product("10.00")
        with pytest.raises(InvalidLineItem, match="Variant"):
            LineItemAggregator(db_session).price_cart(
                [LineItemSelection(product_id=product.id, quantity=1, variant_ids=[uuid4()])]
            )

    def test_variant_of_another_product(self, db_session, make_product):
        product, _ = make_product("10.00", name="First")
        _, (foreign,) = make_product("20.00", [("add", "1.00")], name="Second")
        with pytest.raises(InvalidLineItem, match="Variant"):
            LineItemAggregator(db_session).price_cart(
                [LineItemSelection(product_id=product.id, quantity=1, variant_ids=[foreign.id])]
            )

    def test_inactive_variant(self, db_session, make_product):
        product, (variant,) = make_product("10.00", [("add", "1.00")])
        variant.is_active = False
        db_session.commit()
        with pytest.raises(InvalidLineItem, match="Variant"):
            LineItemAggregator(db_session).price_cart(
                [LineItemSelection(product_id=product.id, quantity=1, variant_ids=[variant.id])]
            )

    def test_negative_unit_price(self, db_session, make_product):
        product, (discount,) = make_product("5.00", [("add", "-6.00")])
        with pytest.raises(InvalidLineItem, match="negative"):
            LineItemAggregator(db_session).price_cart(
                [LineItemSelection(product_id=product.id, quantity=1, variant_ids=[discount.id])]
            )
