"""PromoUsageRecord model: one row per successful promo redemption."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint, func

from orderpricing.core.database import Base
from orderpricing.models.shared import UUIDType, generate_uuid


class PromoUsageRecord(Base):
    """Ledger row tying a promo redemption to a user and an order.

    ``usage_slot`` numbers a user's redemptions of one code from 1 to
    ``user_usage_limit``; the unique constraint makes two concurrent
    redemptions of the same slot impossible.
    """

    __tablename__ = "promo_code_usages"
    __table_args__ = (
        UniqueConstraint(
            "promo_code_id", "user_id", "usage_slot", name="uq_promo_code_usages_user_slot"
        ),
        UniqueConstraint("order_id", name="uq_promo_code_usages_order"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    promo_code_id = Column(
        UUIDType, ForeignKey("promo_codes.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    user_id = Column(UUIDType, nullable=False, index=True)
    order_id = Column(
        UUIDType, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    usage_slot = Column(Integer, nullable=False)
    discount_applied = Column(Numeric(12, 2), nullable=False)
    used_at = Column(DateTime(timezone=True), server_default=func.now())
