import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orderpricing.core.config import settings
from orderpricing.routers import orders, products, promo_codes
from orderpricing.services.pricing_errors import PricingError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

OPENAPI_TAGS = [
    {"name": "Products", "description": "Manage catalog products and their price variants."},
    {"name": "Promo Codes", "description": "Create, validate, and report on promo codes."},
    {"name": "Orders", "description": "Quote carts and place priced orders."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Order pricing API. Resolves variant prices, aggregates order subtotals, "
        "applies promo codes, and enforces promo usage limits."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.exception_handler(PricingError)
async def pricing_error_handler(request: Request, exc: PricingError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


app.include_router(products.router, prefix="/v1/products", tags=["Products"])
app.include_router(promo_codes.router, prefix="/v1/promo_codes", tags=["Promo Codes"])
app.include_router(orders.router, prefix="/v1/orders", tags=["Orders"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
