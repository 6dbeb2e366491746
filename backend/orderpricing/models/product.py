"""Product and ProductVariant models for the bakery catalog."""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func

from orderpricing.core.database import Base
from orderpricing.models.shared import UUIDType, generate_uuid


class PriceBehavior(str, Enum):
    OVERRIDE = "override"
    ADD = "add"


class Product(Base):
    """A sellable catalog product."""

    __tablename__ = "products"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(12, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ProductVariant(Base):
    """A selectable option of a product that adjusts or replaces its price."""

    __tablename__ = "product_variants"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    product_id = Column(
        UUIDType, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    price_modifier = Column(Numeric(12, 2), nullable=False, default=0)
    price_behavior = Column(String(20), nullable=False, default=PriceBehavior.ADD.value)
    override_priority = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
