"""Product and ProductVariant schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from orderpricing.models.product import PriceBehavior


class ProductCreate(BaseModel):
    name: str = Field(max_length=255)
    description: str | None = None
    base_price: Decimal = Field(ge=0, decimal_places=2)
    is_active: bool = True


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    base_price: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    is_active: bool | None = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    base_price: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductVariantCreate(BaseModel):
    name: str = Field(max_length=255)
    price_modifier: Decimal = Field(default=Decimal("0"), decimal_places=2)
    price_behavior: PriceBehavior = PriceBehavior.ADD
    override_priority: int | None = None
    is_active: bool = True


class ProductVariantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    name: str
    price_modifier: Decimal
    price_behavior: str
    override_priority: int | None = None
    is_active: bool
    created_at: datetime
