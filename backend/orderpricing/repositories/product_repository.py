"""Product and ProductVariant repositories for catalog data access."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from orderpricing.core.sorting import apply_order_by
from orderpricing.models.product import Product, ProductVariant
from orderpricing.schemas.product import ProductCreate, ProductUpdate, ProductVariantCreate


class ProductRepository:
    """Repository for Product model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
        active_only: bool = False,
    ) -> list[Product]:
        query = self.db.query(Product)
        if active_only:
            query = query.filter(Product.is_active.is_(True))
        query = apply_order_by(query, Product, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self) -> int:
        return self.db.query(Product).count()

    def get_by_id(self, product_id: UUID) -> Product | None:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def create(self, data: ProductCreate) -> Product:
        product = Product(**data.model_dump())
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update(self, product_id: UUID, data: ProductUpdate) -> Product | None:
        product = self.get_by_id(product_id)
        if not product:
            return None
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(product, key, value)
        self.db.commit()
        self.db.refresh(product)
        return product


class ProductVariantRepository:
    """Repository for ProductVariant model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_product_id(self, product_id: UUID) -> list[ProductVariant]:
        return (
            self.db.query(ProductVariant)
            .filter(ProductVariant.product_id == product_id)
            .order_by(ProductVariant.created_at.asc())
            .all()
        )

    def get_by_ids(self, variant_ids: Iterable[UUID]) -> list[ProductVariant]:
        """Fetch variants by id; missing ids are simply absent from the result."""
        ids = list(variant_ids)
        if not ids:
            return []
        return self.db.query(ProductVariant).filter(ProductVariant.id.in_(ids)).all()

    def create(self, product_id: UUID, data: ProductVariantCreate) -> ProductVariant:
        variant = ProductVariant(
            product_id=product_id,
            name=data.name,
            price_modifier=data.price_modifier,
            price_behavior=data.price_behavior.value,
            override_priority=data.override_priority,
            is_active=data.is_active,
        )
        self.db.add(variant)
        self.db.commit()
        self.db.refresh(variant)
        return variant
