"""Product catalog API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from orderpricing.core.database import get_db
from orderpricing.models.product import Product, ProductVariant
from orderpricing.repositories.product_repository import (
    ProductRepository,
    ProductVariantRepository,
)
from orderpricing.schemas.product import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ProductVariantCreate,
    ProductVariantResponse,
)

router = APIRouter()


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=201,
    summary="Create product",
    responses={422: {"description": "Validation error"}},
)
async def create_product(
    data: ProductCreate,
    db: Session = Depends(get_db),
) -> Product:
    """Create a new product."""
    return ProductRepository(db).create(data)


@router.get("/", response_model=list[ProductResponse], summary="List products")
async def list_products(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    active_only: bool = False,
    db: Session = Depends(get_db),
) -> list[Product]:
    repo = ProductRepository(db)
    response.headers["X-Total-Count"] = str(repo.count())
    return repo.get_all(skip=skip, limit=limit, order_by=order_by, active_only=active_only)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product",
    responses={404: {"description": "Product not found"}},
)
async def get_product(product_id: UUID, db: Session = Depends(get_db)) -> Product:
    product = ProductRepository(db).get_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update product",
    responses={
        404: {"description": "Product not found"},
        422: {"description": "Validation error"},
    },
)
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    db: Session = Depends(get_db),
) -> Product:
    """Update a product. Existing orders keep the prices they were placed at."""
    product = ProductRepository(db).update(product_id, data)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post(
    "/{product_id}/variants",
    response_model=ProductVariantResponse,
    status_code=201,
    summary="Add product variant",
    responses={404: {"description": "Product not found"}},
)
async def create_variant(
    product_id: UUID,
    data: ProductVariantCreate,
    db: Session = Depends(get_db),
) -> ProductVariant:
    if not ProductRepository(db).get_by_id(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductVariantRepository(db).create(product_id, data)


@router.get(
    "/{product_id}/variants",
    response_model=list[ProductVariantResponse],
    summary="List product variants",
    responses={404: {"description": "Product not found"}},
)
async def list_variants(product_id: UUID, db: Session = Depends(get_db)) -> list[ProductVariant]:
    if not ProductRepository(db).get_by_id(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductVariantRepository(db).get_by_product_id(product_id)
