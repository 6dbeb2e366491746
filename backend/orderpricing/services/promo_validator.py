"""Read-only promo code validation."""

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from orderpricing.core.money import to_decimal
from orderpricing.models.promo_code import PromoCode
from orderpricing.models.shared import as_utc, utc_now
from orderpricing.repositories.promo_code_repository import PromoCodeRepository
from orderpricing.repositories.promo_usage_repository import PromoUsageRepository
from orderpricing.services.pricing_errors import (
    PromoExpired,
    PromoInactive,
    PromoInvalidCode,
    PromoMinOrderNotMet,
    PromoNotYetValid,
    PromoUsageExhausted,
    PromoUserLimitExceeded,
)

logger = logging.getLogger(__name__)


class PromoCodeValidator:
    """Checks a promo code against an order without reserving anything.

    Passing validation is not a guarantee: a concurrent order can still take
    the last usage before this one reserves it. ``PromoUsageLedger.reserve``
    re-checks the quota atomically.
    """

    def __init__(self, db: Session):
        self.db = db
        self.promo_repo = PromoCodeRepository(db)
        self.usage_repo = PromoUsageRepository(db)

    def validate(
        self,
        code: str,
        order_subtotal: Decimal,
        user_id: UUID | None = None,
        now: datetime | None = None,
    ) -> PromoCode:
        """Validate ``code`` for an order, returning the promo on success.

        Checks run in a fixed order and stop at the first failure: existence,
        activity, validity window, global quota, per-user quota (only when a
        user is known), minimum order amount.

        Raises:
            PromoInvalidCode, PromoInactive, PromoNotYetValid, PromoExpired,
            PromoUsageExhausted, PromoUserLimitExceeded, PromoMinOrderNotMet
        """
        now = now or utc_now()

        promo = self.promo_repo.get_by_code(code)
        if promo is None:
            raise PromoInvalidCode(f"Promo code '{code}' not found")
        if not promo.is_active:
            raise PromoInactive(f"Promo code '{promo.code}' is not active")

        if now < as_utc(promo.valid_from):  # type: ignore[arg-type]
            raise PromoNotYetValid(f"Promo code '{promo.code}' is not valid yet")
        if now > as_utc(promo.valid_until):  # type: ignore[arg-type]
            raise PromoExpired(f"Promo code '{promo.code}' has expired")

        if promo.usage_limit is not None and promo.usage_count >= promo.usage_limit:
            raise PromoUsageExhausted(f"Promo code '{promo.code}' usage limit exceeded")

        if user_id is not None:
            used = self.usage_repo.count_for_user(promo.id, user_id)  # type: ignore[arg-type]
            if used >= promo.user_usage_limit:
                raise PromoUserLimitExceeded(
                    f"Promo code '{promo.code}' already used the maximum number of times"
                )

        min_order_amount = to_decimal(promo.min_order_amount)
        if to_decimal(order_subtotal) < min_order_amount:
            raise PromoMinOrderNotMet(
                f"Minimum order amount of {min_order_amount} required for promo code "
                f"'{promo.code}'"
            )

        logger.debug("Promo code %s valid for subtotal %s", promo.code, order_subtotal)
        return promo
