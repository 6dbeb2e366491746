"""Atomic promo code usage bookkeeping.

``PromoCode.usage_count`` and the ``promo_code_usages`` table are only
written here. Both methods run inside the caller's transaction and never
commit; a rollback by the caller undoes everything they did.
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from orderpricing.models.promo_code import PromoCode
from orderpricing.models.promo_usage import PromoUsageRecord
from orderpricing.services.pricing_errors import (
    PromoInvalidCode,
    PromoUsageExhausted,
    PromoUserLimitExceeded,
)

logger = logging.getLogger(__name__)


class PromoUsageLedger:
    """Reserves and releases promo code usages.

    The global quota is enforced by a single conditional UPDATE whose
    affected-row count decides the outcome, so concurrent reservations
    against the same code cannot both take the last slot. The per-user quota
    is enforced by numbering each user's redemptions and relying on the
    unique ``(promo_code_id, user_id, usage_slot)`` constraint.
    """

    def __init__(self, db: Session):
        self.db = db

    def reserve(
        self,
        promo_code_id: UUID,
        user_id: UUID,
        order_id: UUID,
        discount_applied: Decimal,
    ) -> PromoUsageRecord:
        """Take one usage of the code for ``user_id`` on ``order_id``.

        On failure the session may be unusable until the caller rolls back.

        Raises:
            PromoInvalidCode: If the promo code row no longer exists.
            PromoUsageExhausted: If the global ``usage_limit`` is reached.
            PromoUserLimitExceeded: If the user has no free usage slot left.
                Also raised when a concurrent order by the same user took the
                slot computed here; the user may still have quota, and
                resubmitting the order picks the next free slot.
        """
        result = self.db.execute(
            update(PromoCode)
            .where(
                PromoCode.id == promo_code_id,
                or_(
                    PromoCode.usage_limit.is_(None),
                    PromoCode.usage_count < PromoCode.usage_limit,
                ),
            )
            .values(usage_count=PromoCode.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            exists = self.db.query(PromoCode.id).filter(PromoCode.id == promo_code_id).first()
            if exists is None:
                raise PromoInvalidCode(f"Promo code {promo_code_id} not found")
            logger.info(
                "Promo code %s exhausted, reservation for order %s refused",
                promo_code_id,
                order_id,
            )
            raise PromoUsageExhausted("Promo code usage limit exceeded")

        slot = self._next_free_slot(promo_code_id, user_id)
        if slot is None:
            raise PromoUserLimitExceeded(
                "You have already used this promo code the maximum number of times"
            )

        record = PromoUsageRecord(
            promo_code_id=promo_code_id,
            user_id=user_id,
            order_id=order_id,
            usage_slot=slot,
            discount_applied=discount_applied,
        )
        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError:
            logger.info(
                "Lost usage slot %s race on promo %s for user %s",
                slot,
                promo_code_id,
                user_id,
            )
            raise PromoUserLimitExceeded(
                "Another order is redeeming this promo code for you right now; "
                "retry once it completes"
            ) from None

        # The bulk UPDATE bypassed the identity map.
        promo = self.db.get(PromoCode, promo_code_id)
        if promo is not None:
            self.db.expire(promo, ["usage_count"])

        logger.info(
            "Reserved promo %s slot %s for user %s order %s",
            promo_code_id,
            slot,
            user_id,
            order_id,
        )
        return record

    def release(self, order_id: UUID) -> PromoUsageRecord | None:
        """Give back the usage held by ``order_id``, if any.

        Deletes the usage row and decrements ``usage_count``, never below 0.
        """
        record = (
            self.db.query(PromoUsageRecord).filter(PromoUsageRecord.order_id == order_id).first()
        )
        if record is None:
            return None

        promo_code_id = record.promo_code_id
        self.db.execute(
            update(PromoCode)
            .where(PromoCode.id == promo_code_id, PromoCode.usage_count > 0)
            .values(usage_count=PromoCode.usage_count - 1)
            .execution_options(synchronize_session=False)
        )
        self.db.delete(record)
        self.db.flush()

        promo = self.db.get(PromoCode, promo_code_id)
        if promo is not None:
            self.db.expire(promo, ["usage_count"])

        logger.info("Released promo %s usage held by order %s", promo_code_id, order_id)
        return record

    def _next_free_slot(self, promo_code_id: UUID, user_id: UUID) -> int | None:
        limit = (
            self.db.query(PromoCode.user_usage_limit)
            .filter(PromoCode.id == promo_code_id)
            .scalar()
        )
        taken = {
            slot
            for (slot,) in self.db.query(PromoUsageRecord.usage_slot).filter(
                PromoUsageRecord.promo_code_id == promo_code_id,
                PromoUsageRecord.user_id == user_id,
            )
        }
        if len(taken) >= (limit or 0):
            return None
        return next(slot for slot in range(1, limit + 1) if slot not in taken)
