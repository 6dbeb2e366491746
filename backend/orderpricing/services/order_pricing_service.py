"""Order pricing coordinator: quote and commit orders with optional promo codes."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from orderpricing.core.config import settings
from orderpricing.core.money import ZERO, quantize_money, to_decimal
from orderpricing.models.order import Order, OrderLineItem, OrderStatus
from orderpricing.models.promo_code import PromoCode
from orderpricing.models.shared import utc_now
from orderpricing.repositories.order_repository import OrderRepository
from orderpricing.schemas.order import LineItemSelection
from orderpricing.services.discount_calculator import calculate_discount
from orderpricing.services.line_item_aggregator import LineItemAggregator, ResolvedLineItem
from orderpricing.services.pricing_errors import NegativeTotalGuardTriggered, PricingError
from orderpricing.services.promo_usage_ledger import PromoUsageLedger
from orderpricing.services.promo_validator import PromoCodeValidator

logger = logging.getLogger(__name__)


class PricingStage(str, Enum):
    PRICING = "pricing"
    PROMO_VALIDATING = "promo_validating"
    RESERVING = "reserving"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass(frozen=True)
class PriceQuote:
    """Result of a dry-run pricing pass."""

    items: tuple[ResolvedLineItem, ...]
    subtotal: Decimal
    discount_amount: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    promo_code: str | None = None


def compute_total(subtotal: Decimal, delivery_fee: Decimal, discount_amount: Decimal) -> Decimal:
    """``subtotal + delivery_fee - discount_amount``, refusing to go negative.

    The discount calculator already caps discounts at the subtotal, so a
    negative total means that cap was bypassed. That is reported loudly and
    never clamped.
    """
    total = subtotal + delivery_fee - discount_amount
    if total < 0:
        logger.critical(
            "Negative order total: subtotal=%s delivery_fee=%s discount=%s",
            subtotal,
            delivery_fee,
            discount_amount,
        )
        raise NegativeTotalGuardTriggered(f"Order total {total} would be negative")
    return quantize_money(total)


def generate_order_number() -> str:
    return f"{settings.ORDER_NUMBER_PREFIX}-{utc_now():%Y%m%d}-{uuid4().hex[:10].upper()}"


class OrderPricingService:
    """Turns a cart into a priced order.

    ``commit`` walks PRICING -> PROMO_VALIDATING -> RESERVING -> COMMITTED in
    one database transaction; any failure rolls the whole transaction back,
    including a promo reservation, and leaves ``stage`` at FAILED. ``quote``
    runs the first two stages only and writes nothing.
    """

    def __init__(self, db: Session):
        self.db = db
        self.aggregator = LineItemAggregator(db)
        self.validator = PromoCodeValidator(db)
        self.ledger = PromoUsageLedger(db)
        self.order_repo = OrderRepository(db)
        self.stage = PricingStage.PRICING

    def quote(
        self,
        line_items: Sequence[LineItemSelection],
        promo_code: str | None = None,
        user_id: UUID | None = None,
        delivery_fee: Decimal = ZERO,
        now: datetime | None = None,
    ) -> PriceQuote:
        """Price a cart without reserving or persisting anything.

        Raises:
            PricingError: Any line item or promo failure ``commit`` would hit
                before reservation.
        """
        fee = self._check_delivery_fee(delivery_fee)
        cart = self.aggregator.price_cart(line_items)
        promo, discount = self._apply_promo(promo_code, cart.subtotal, user_id, now)
        return PriceQuote(
            items=cart.items,
            subtotal=cart.subtotal,
            discount_amount=discount,
            delivery_fee=fee,
            total_amount=compute_total(cart.subtotal, fee, discount),
            promo_code=promo.code if promo is not None else None,  # type: ignore[arg-type]
        )

    def commit(
        self,
        line_items: Sequence[LineItemSelection],
        promo_code: str | None,
        user_id: UUID,
        delivery_fee: Decimal = ZERO,
        now: datetime | None = None,
    ) -> Order:
        """Price, discount, reserve and persist an order atomically.

        Returns:
            The committed Order.

        Raises:
            PricingError: The typed failure of whichever stage failed. Nothing
                is persisted in that case.
        """
        self.stage = PricingStage.PRICING
        try:
            fee = self._check_delivery_fee(delivery_fee)
            cart = self.aggregator.price_cart(line_items)

            self.stage = PricingStage.PROMO_VALIDATING
            promo, discount = self._apply_promo(promo_code, cart.subtotal, user_id, now)
            total = compute_total(cart.subtotal, fee, discount)

            self.stage = PricingStage.RESERVING
            order = Order(
                order_number=generate_order_number(),
                user_id=user_id,
                promo_code_id=promo.id if promo is not None else None,
                status=OrderStatus.PLACED.value,
                subtotal=cart.subtotal,
                discount_amount=discount,
                delivery_fee=fee,
                total_amount=total,
            )
            self.order_repo.add(order, [self._snapshot(item) for item in cart.items])
            if promo is not None:
                self.ledger.reserve(promo.id, user_id, order.id, discount)  # type: ignore[arg-type]

            self.db.commit()
        except Exception as exc:
            failed_stage = self.stage
            self.stage = PricingStage.FAILED
            self.db.rollback()
            if isinstance(exc, PricingError):
                logger.info("Order for user %s failed at %s: %s", user_id, failed_stage.value, exc)
            else:
                logger.exception("Order for user %s crashed at %s", user_id, failed_stage.value)
            raise

        self.stage = PricingStage.COMMITTED
        self.db.refresh(order)
        logger.info(
            "Committed order %s for user %s: subtotal=%s discount=%s total=%s",
            order.order_number,
            user_id,
            order.subtotal,
            order.discount_amount,
            order.total_amount,
        )
        return order

    def cancel(self, order_id: UUID) -> Order | None:
        """Cancel a placed order and give its promo usage back.

        Returns:
            The cancelled Order, or None if it does not exist.

        Raises:
            ValueError: If the order is already cancelled.
        """
        order = self.order_repo.get_by_id(order_id)
        if order is None:
            return None
        if order.status == OrderStatus.CANCELLED.value:
            raise ValueError("Order is already cancelled")

        try:
            order.status = OrderStatus.CANCELLED.value  # type: ignore[assignment]
            order.cancelled_at = utc_now()  # type: ignore[assignment]
            self.ledger.release(order_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(order)
        logger.info("Cancelled order %s", order.order_number)
        return order

    def _apply_promo(
        self,
        promo_code: str | None,
        subtotal: Decimal,
        user_id: UUID | None,
        now: datetime | None,
    ) -> tuple[PromoCode | None, Decimal]:
        if not promo_code or not promo_code.strip():
            return None, quantize_money(ZERO)
        promo = self.validator.validate(promo_code, subtotal, user_id=user_id, now=now)
        return promo, calculate_discount(promo, subtotal)

    @staticmethod
    def _check_delivery_fee(delivery_fee: Decimal) -> Decimal:
        fee = to_decimal(delivery_fee)
        if fee < 0:
            raise PricingError("Delivery fee must not be negative")
        return quantize_money(fee)

    @staticmethod
    def _snapshot(item: ResolvedLineItem) -> OrderLineItem:
        return OrderLineItem(
            product_id=item.product_id,
            variant_ids=[str(variant_id) for variant_id in item.variant_ids],
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
        )
