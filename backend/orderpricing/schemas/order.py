"""Order pricing request and response schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LineItemSelection(BaseModel):
    """A cart line as submitted by the client.

    ``quantity`` is range-checked by the aggregator rather than here so that
    service callers get the same ``InvalidLineItem`` error as API callers.
    """

    product_id: UUID
    quantity: int
    variant_ids: list[UUID] = Field(default_factory=list)


class QuoteRequest(BaseModel):
    items: list[LineItemSelection]
    promo_code: str | None = None
    delivery_fee: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)


class OrderCreate(BaseModel):
    items: list[LineItemSelection]
    promo_code: str | None = None
    delivery_fee: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)


class LineItemBreakdown(BaseModel):
    product_id: UUID
    variant_ids: list[UUID]
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class QuoteResponse(BaseModel):
    subtotal: Decimal
    discount_amount: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    promo_code: str | None = None
    items: list[LineItemBreakdown]


class OrderLineItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    variant_ids: list[UUID]
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_number: str
    user_id: UUID
    promo_code_id: UUID | None = None
    status: str
    subtotal: Decimal
    discount_amount: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    cancelled_at: datetime | None = None
    created_at: datetime
    items: list[OrderLineItemResponse] = Field(default_factory=list)
