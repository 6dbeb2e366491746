"""Order and OrderLineItem models holding frozen pricing snapshots."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String, func

from orderpricing.core.database import Base
from orderpricing.models.shared import UUIDType, generate_uuid


class OrderStatus(str, Enum):
    PLACED = "placed"
    CANCELLED = "cancelled"


class Order(Base):
    """A placed order.

    All money columns are copies taken at creation time; nothing here is
    recomputed from the live catalog.
    """

    __tablename__ = "orders"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    order_number = Column(String(64), unique=True, index=True, nullable=False)
    user_id = Column(UUIDType, nullable=False, index=True)
    promo_code_id = Column(
        UUIDType, ForeignKey("promo_codes.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    status = Column(String(20), nullable=False, default=OrderStatus.PLACED.value)

    subtotal = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    delivery_fee = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)

    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class OrderLineItem(Base):
    """Priced line of an order.

    ``product_id`` and ``variant_ids`` are kept for display only.
    """

    __tablename__ = "order_line_items"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    order_id = Column(
        UUIDType, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(
        UUIDType, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    variant_ids = Column(JSON, nullable=False, default=list)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
