"""Typed failures raised by the order pricing services.

Every error subclasses ``ValueError`` so callers that only care about
"the request was rejected" can keep catching that. Routers translate them to
HTTP through the handler registered in ``main.py`` using ``status_code`` and
the stable machine-readable ``code``.
"""


class PricingError(ValueError):
    code = "pricing_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidLineItem(PricingError):
    code = "invalid_line_item"
    status_code = 422


class PromoInvalidCode(PricingError):
    code = "promo_invalid_code"
    status_code = 404


class PromoInactive(PricingError):
    code = "promo_inactive"


class PromoExpired(PricingError):
    code = "promo_expired"


class PromoNotYetValid(PricingError):
    code = "promo_not_yet_valid"


class PromoMinOrderNotMet(PricingError):
    code = "promo_min_order_not_met"


class PromoUsageExhausted(PricingError):
    code = "promo_usage_exhausted"
    status_code = 409


class PromoUserLimitExceeded(PricingError):
    code = "promo_user_limit_exceeded"
    status_code = 409


class NegativeTotalGuardTriggered(PricingError):
    """Internal invariant violation: a discount pushed an order total below zero."""

    code = "negative_total_guard_triggered"
    status_code = 500
