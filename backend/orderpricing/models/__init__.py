from orderpricing.models.order import Order, OrderLineItem, OrderStatus
from orderpricing.models.product import PriceBehavior, Product, ProductVariant
from orderpricing.models.promo_code import DiscountType, PromoCode, PromoCodeStatus
from orderpricing.models.promo_usage import PromoUsageRecord

__all__ = [
    "DiscountType",
    "Order",
    "OrderLineItem",
    "OrderStatus",
    "PriceBehavior",
    "Product",
    "ProductVariant",
    "PromoCode",
    "PromoCodeStatus",
    "PromoUsageRecord",
]
