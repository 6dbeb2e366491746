"""Tests for OrderPricingService quote, commit, and cancel."""

import re
from decimal import Decimal
from uuid import uuid4

import pytest

from orderpricing.models.order import Order, OrderLineItem, OrderStatus
from orderpricing.models.promo_code import DiscountType
from orderpricing.models.promo_usage import PromoUsageRecord
from orderpricing.repositories.order_repository import OrderRepository
from orderpricing.repositories.product_repository import ProductRepository
from orderpricing.schemas.order import LineItemSelection
from orderpricing.schemas.product import ProductUpdate
from orderpricing.services import order_pricing_service
from orderpricing.services.order_pricing_service import (
    OrderPricingService,
    PricingStage,
    compute_total,
    generate_order_number,
)
from orderpricing.services.pricing_errors import (
    InvalidLineItem,
    NegativeTotalGuardTriggered,
    PricingError,
    PromoInvalidCode,
    PromoMinOrderNotMet,
    PromoUsageExhausted,
)


@pytest.fixture
def service(db_session):
    return OrderPricingService(db_session)


@pytest.fixture
def cart(make_product):
    """A 100.00 cart: two shirts at 17.00 (override 15.00 + 2.00) and a 66.00 jacket."""
    shirt, (large, print_) = make_product(
        "10.00", [("override", "15.00", 1), ("add", "2.00")], name="Shirt"
    )
    jacket, _ = make_product("66.00", name="Jacket")
    return [
        LineItemSelection(product_id=shirt.id, quantity=2, variant_ids=[large.id, print_.id]),
        LineItemSelection(product_id=jacket.id, quantity=1),
    ]


class TestComputeTotal:
    """Tests for compute_total()."""

    def test_total(self):
        total = compute_total(Decimal("100.00"), Decimal("4.99"), Decimal("15.00"))
        assert total == Decimal("89.99")

    def test_zero_total_allowed(self):
        assert compute_total(Decimal("30.00"), Decimal("0"), Decimal("30.00")) == Decimal("0.00")

    def test_negative_total_raises(self):
        with pytest.raises(NegativeTotalGuardTriggered):
            compute_total(Decimal("10.00"), Decimal("0"), Decimal("10.01"))


class TestGenerateOrderNumber:
    def test_format_and_uniqueness(self):
        numbers = {generate_order_number() for _ in range(50)}
        assert len(numbers) == 50
        assert all(re.fullmatch(r"ORD-\d{8}-[0-9A-F]{10}", n) for n in numbers)


class TestQuote:
    """Tests for OrderPricingService.quote()."""

    def test_quote_without_promo(self, service, cart):
        quote = service.quote(cart, delivery_fee=Decimal("5.00"))
        assert quote.subtotal == Decimal("100.00")
        assert quote.discount_amount == Decimal("0.00")
        assert quote.delivery_fee == Decimal("5.00")
        assert quote.total_amount == Decimal("105.00")
        assert quote.promo_code is None
        assert [item.total_price for item in quote.items] == [Decimal("34.00"), Decimal("66.00")]

    def test_quote_with_capped_percentage(self, service, cart, make_promo):
        """20% of 100.00 capped at 15.00."""
        make_promo(
            code="TWENTY",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=20,
            max_discount_amount=Decimal("15.00"),
        )
        quote = service.quote(cart, promo_code="twenty")
        assert quote.discount_amount == Decimal("15.00")
        assert quote.total_amount == Decimal("85.00")
        assert quote.promo_code == "TWENTY"

    def test_quote_writes_nothing(self, service, cart, make_promo, db_session):
        promo = make_promo(code="SAVE", usage_limit=1)
        service.quote(cart, promo_code="SAVE", user_id=uuid4())
        service.quote(cart, promo_code="SAVE", user_id=uuid4())
        db_session.refresh(promo)
        assert promo.usage_count == 0
        assert db_session.query(Order).count() == 0

    def test_blank_promo_code_is_ignored(self, service, cart):
        assert service.quote(cart, promo_code="   ").discount_amount == Decimal("0.00")

    def test_quote_unknown_promo(self, service, cart):
        with pytest.raises(PromoInvalidCode):
            service.quote(cart, promo_code="MISSING")

    def test_negative_delivery_fee(self, service, cart):
        with pytest.raises(PricingError, match="Delivery fee"):
            service.quote(cart, delivery_fee=Decimal("-1.00"))


class TestCommit:
    """Tests for OrderPricingService.commit()."""

    def test_commit_without_promo(self, service, cart, db_session):
        user_id = uuid4()
        order = service.commit(cart, None, user_id, delivery_fee=Decimal("4.99"))

        assert service.stage == PricingStage.COMMITTED
        assert order.user_id == user_id
        assert order.status == OrderStatus.PLACED.value
        assert order.promo_code_id is None
        assert order.subtotal == Decimal("100.00")
        assert order.discount_amount == Decimal("0.00")
        assert order.total_amount == Decimal("104.99")

        items = OrderRepository(db_session).get_items(order.id)
        assert [item.position for item in items] == [0, 1]
        assert items[0].unit_price == Decimal("17.00")
        assert items[0].quantity == 2
        assert len(items[0].variant_ids) == 2
        assert items[1].total_price == Decimal("66.00")

    def test_commit_with_promo_reserves_usage(self, service, cart, make_promo, db_session):
        promo = make_promo(code="FIVE", usage_limit=10)
        user_id = uuid4()
        order = service.commit(cart, "FIVE", user_id)

        assert order.promo_code_id == promo.id
        assert order.discount_amount == Decimal("5.00")
        assert order.total_amount == Decimal("95.00")

        db_session.refresh(promo)
        assert promo.usage_count == 1
        record = db_session.query(PromoUsageRecord).one()
        assert record.order_id == order.id
        assert record.user_id == user_id
        assert record.discount_applied == Decimal("5.00")

    def test_fixed_discount_capped_at_subtotal(self, service, make_product, make_promo):
        product, _ = make_product("30.00")
        make_promo(code="FIFTY", discount_value=50)
        order = service.commit(
            [LineItemSelection(product_id=product.id, quantity=1)],
            "FIFTY",
            uuid4(),
            delivery_fee=Decimal("3.00"),
        )
        assert order.discount_amount == Decimal("30.00")
        assert order.total_amount == Decimal("3.00")

    def test_snapshot_survives_catalog_change(self, service, cart, db_session):
        order = service.commit(cart, None, uuid4())

        jacket_id = cart[1].product_id
        ProductRepository(db_session).update(jacket_id, ProductUpdate(base_price=Decimal("99.00")))

        reloaded = OrderRepository(db_session).get_by_id(order.id)
        items = OrderRepository(db_session).get_items(order.id)
        assert reloaded.subtotal == Decimal("100.00")
        assert items[1].unit_price == Decimal("66.00")

    def test_failed_validation_persists_nothing(self, service, cart, make_promo, db_session):
        make_promo(code="BIG", min_order_amount=Decimal("500.00"))
        with pytest.raises(PromoMinOrderNotMet):
            service.commit(cart, "BIG", uuid4())
        assert service.stage == PricingStage.FAILED
        assert db_session.query(Order).count() == 0

    def test_invalid_line_item_persists_nothing(self, service, db_session):
        with pytest.raises(InvalidLineItem):
            service.commit([], None, uuid4())
        assert service.stage == PricingStage.FAILED
        assert db_session.query(Order).count() == 0

    def test_stale_validation_loses_to_reservation(
        self, service, cart, make_promo, db_session, monkeypatch
    ):
        """A code exhausted after validation fails at reservation and rolls back."""
        promo = make_promo(code="LAST", usage_limit=1)
        service.commit(cart, "LAST", uuid4())

        # Validation observed the code before the other order took the last usage.
        monkeypatch.setattr(service.validator, "validate", lambda *args, **kwargs: promo)
        with pytest.raises(PromoUsageExhausted):
            service.commit(cart, "LAST", uuid4())

        assert service.stage == PricingStage.FAILED
        db_session.refresh(promo)
        assert promo.usage_count == 1
        assert db_session.query(Order).count() == 1
        assert db_session.query(OrderLineItem).count() == 2
        assert db_session.query(PromoUsageRecord).count() == 1

    def test_negative_total_guard_rolls_back(
        self, service, cart, make_promo, db_session, monkeypatch
    ):
        make_promo(code="BROKEN")
        monkeypatch.setattr(
            order_pricing_service, "calculate_discount", lambda promo, subtotal: Decimal("101.00")
        )
        with pytest.raises(NegativeTotalGuardTriggered):
            service.commit(cart, "BROKEN", uuid4())
        assert db_session.query(Order).count() == 0


class TestCancel:
    """Tests for OrderPricingService.cancel()."""

    def test_cancel_releases_usage(self, service, cart, make_promo, db_session):
        promo = make_promo(code="ONCE", usage_limit=1)
        user_id = uuid4()
        order = service.commit(cart, "ONCE", user_id)

        cancelled = service.cancel(order.id)
        assert cancelled.status == OrderStatus.CANCELLED.value
        assert cancelled.cancelled_at is not None

        db_session.refresh(promo)
        assert promo.usage_count == 0
        assert db_session.query(PromoUsageRecord).count() == 0

        # The freed usage can be redeemed again.
        assert service.commit(cart, "ONCE", user_id).promo_code_id == promo.id

    def test_cancel_without_promo(self, service, cart):
        order = service.commit(cart, None, uuid4())
        assert service.cancel(order.id).status == OrderStatus.CANCELLED.value

    def test_cancel_twice(self, service, cart):
        order = service.commit(cart, None, uuid4())
        service.cancel(order.id)
        with pytest.raises(ValueError, match="already cancelled"):
            service.cancel(order.id)

    def test_cancel_unknown_order(self, service):
        assert service.cancel(uuid4()) is None
