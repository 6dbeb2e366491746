"""PromoCode schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from orderpricing.models.promo_code import DiscountType, PromoCodeStatus


def _check_discount_value(discount_type: DiscountType, value: Decimal) -> None:
    if discount_type == DiscountType.PERCENTAGE and not (0 < value <= 100):
        raise ValueError("Percentage discount must be between 0 and 100")
    if discount_type == DiscountType.FIXED_AMOUNT and value <= 0:
        raise ValueError("Fixed amount discount must be greater than 0")


def _normalize_code(value: str) -> str:
    code = value.strip().upper()
    if not code:
        raise ValueError("Promo code must not be blank")
    return code


class PromoCodeCreate(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    discount_type: DiscountType
    discount_value: Decimal = Field(decimal_places=2)
    min_order_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    max_discount_amount: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    usage_limit: int | None = Field(default=None, ge=1)
    user_usage_limit: int = Field(default=1, ge=1)
    valid_from: datetime
    valid_until: datetime
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return _normalize_code(v)

    @model_validator(mode="after")
    def check_consistency(self) -> Self:
        _check_discount_value(self.discount_type, self.discount_value)
        if self.valid_from >= self.valid_until:
            raise ValueError("valid_until must be after valid_from")
        return self


_NULLABLE_UPDATE_FIELDS = {"title", "description", "max_discount_amount", "usage_limit"}


class PromoCodeUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=64)
    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = Field(default=None, decimal_places=2)
    min_order_amount: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    max_discount_amount: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    usage_limit: int | None = Field(default=None, ge=1)
    user_usage_limit: int | None = Field(default=None, ge=1)
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    is_active: bool | None = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _normalize_code(v)

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> Self:
        """Omitting a field keeps it; only nullable columns may be set to null."""
        for name in self.model_fields_set - _NULLABLE_UPDATE_FIELDS:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class PromoCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    title: str | None = None
    description: str | None = None
    discount_type: str
    discount_value: Decimal
    min_order_amount: Decimal
    max_discount_amount: Decimal | None = None
    usage_limit: int | None = None
    usage_count: int
    user_usage_limit: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool
    status: PromoCodeStatus
    created_at: datetime
    updated_at: datetime


class PromoValidateRequest(BaseModel):
    code: str
    order_total: Decimal = Field(ge=0, decimal_places=2)


class PromoValidateResponse(BaseModel):
    """Preview of a promo applied to a subtotal; nothing is reserved."""

    code: str
    discount_amount: Decimal
    final_total: Decimal


class PromoStatsResponse(BaseModel):
    total_codes: int
    active_codes: int
    inactive_codes: int
    upcoming_codes: int
    expired_codes: int
    exhausted_codes: int
    total_usages: int
    total_discount_given: Decimal


class PromoUsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    promo_code_id: UUID
    user_id: UUID
    order_id: UUID
    usage_slot: int
    discount_applied: Decimal
    used_at: datetime


class PromoUsageReportResponse(BaseModel):
    total_usages: int
    unique_codes_used: int
    unique_users: int
    total_discount_given: Decimal
    avg_discount_amount: Decimal
    usages: list[PromoUsageResponse]
