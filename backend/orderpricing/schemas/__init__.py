from orderpricing.schemas.order import (
    LineItemBreakdown,
    LineItemSelection,
    OrderCreate,
    OrderLineItemResponse,
    OrderResponse,
    QuoteRequest,
    QuoteResponse,
)
from orderpricing.schemas.product import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ProductVariantCreate,
    ProductVariantResponse,
)
from orderpricing.schemas.promo_code import (
    PromoCodeCreate,
    PromoCodeResponse,
    PromoCodeUpdate,
    PromoStatsResponse,
    PromoUsageReportResponse,
    PromoUsageResponse,
    PromoValidateRequest,
    PromoValidateResponse,
)

__all__ = [
    "LineItemBreakdown",
    "LineItemSelection",
    "OrderCreate",
    "OrderLineItemResponse",
    "OrderResponse",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
    "ProductVariantCreate",
    "ProductVariantResponse",
    "PromoCodeCreate",
    "PromoCodeResponse",
    "PromoCodeUpdate",
    "PromoStatsResponse",
    "PromoUsageReportResponse",
    "PromoUsageResponse",
    "PromoValidateRequest",
    "PromoValidateResponse",
    "QuoteRequest",
    "QuoteResponse",
]
