from orderpricing.repositories.order_repository import OrderRepository
from orderpricing.repositories.product_repository import (
    ProductRepository,
    ProductVariantRepository,
)
from orderpricing.repositories.promo_code_repository import PromoCodeRepository
from orderpricing.repositories.promo_usage_repository import PromoUsageRepository

__all__ = [
    "OrderRepository",
    "ProductRepository",
    "ProductVariantRepository",
    "PromoCodeRepository",
    "PromoUsageRepository",
]
