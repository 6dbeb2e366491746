"""Shared test fixtures for all test modules."""

import contextlib
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import orderpricing.models  # noqa: F401
from orderpricing.core import database as db_module
from orderpricing.core.database import Base, get_db
from orderpricing.models.product import PriceBehavior
from orderpricing.models.promo_code import DiscountType
from orderpricing.models.shared import utc_now
from orderpricing.repositories.product_repository import (
    ProductRepository,
    ProductVariantRepository,
)
from orderpricing.repositories.promo_code_repository import PromoCodeRepository
from orderpricing.schemas.product import ProductCreate, ProductVariantCreate
from orderpricing.schemas.promo_code import PromoCodeCreate

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository and service testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def make_product(db_session):
    """Factory creating a product with optional variants.

    Each variant is ``(behavior, modifier)`` or ``(behavior, modifier, priority)``.
    Returns ``(product, [variants])``.
    """

    def _make(base_price, variants=(), name="Test Product"):
        product = ProductRepository(db_session).create(
            ProductCreate(name=name, base_price=Decimal(str(base_price)))
        )
        variant_repo = ProductVariantRepository(db_session)
        created = []
        for index, definition in enumerate(variants):
            behavior, modifier, *rest = definition
            created.append(
                variant_repo.create(
                    product.id,
                    ProductVariantCreate(
                        name=f"{name} variant {index}",
                        price_modifier=Decimal(str(modifier)),
                        price_behavior=PriceBehavior(behavior),
                        override_priority=rest[0] if rest else None,
                    ),
                )
            )
        return product, created

    return _make


@pytest.fixture
def make_promo(db_session):
    """Factory creating a promo code valid from yesterday for thirty days."""

    def _make(code="SAVE", discount_type=DiscountType.FIXED_AMOUNT, discount_value=5, **kwargs):
        now = utc_now()
        data = {
            "code": code,
            "discount_type": discount_type,
            "discount_value": Decimal(str(discount_value)),
            "valid_from": now - timedelta(days=1),
            "valid_until": now + timedelta(days=30),
        }
        data.update(kwargs)
        return PromoCodeRepository(db_session).create(PromoCodeCreate(**data))

    return _make
