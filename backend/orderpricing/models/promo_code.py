"""PromoCode model for order-level promotional discounts."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text, func

from orderpricing.core.database import Base
from orderpricing.models.shared import UUIDType, as_utc, generate_uuid, utc_now


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class PromoCodeStatus(str, Enum):
    """Derived display status, never stored."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    UPCOMING = "upcoming"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


class PromoCode(Base):
    """Promo code redeemable against an order subtotal."""

    __tablename__ = "promo_codes"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    code = Column(String(64), unique=True, index=True, nullable=False)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Numeric(12, 2), nullable=False)
    min_order_amount = Column(Numeric(12, 2), nullable=False, default=0)
    max_discount_amount = Column(Numeric(12, 2), nullable=True)

    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    user_usage_limit = Column(Integer, nullable=False, default=1)

    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def status_at(self, now: datetime) -> PromoCodeStatus:
        """Derive the display status at ``now``.

        Precedence: inactive, upcoming, expired, exhausted, active.
        """
        if not self.is_active:
            return PromoCodeStatus.INACTIVE
        if now < as_utc(self.valid_from):  # type: ignore[arg-type]
            return PromoCodeStatus.UPCOMING
        if now > as_utc(self.valid_until):  # type: ignore[arg-type]
            return PromoCodeStatus.EXPIRED
        if self.usage_limit is not None and self.usage_count >= self.usage_limit:
            return PromoCodeStatus.EXHAUSTED
        return PromoCodeStatus.ACTIVE

    @property
    def status(self) -> PromoCodeStatus:
        return self.status_at(utc_now())
