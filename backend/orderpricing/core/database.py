from collections.abc import Generator
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from orderpricing.core.config import settings


def create_db_engine(dsn: str) -> Engine:
    """Create an engine for ``dsn``.

    SQLite connections may be shared across threads and wait up to
    ``SQLITE_BUSY_TIMEOUT`` seconds for a competing writer instead of failing
    with "database is locked".
    """
    if dsn.startswith("sqlite"):
        return create_engine(
            dsn,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.SQLITE_BUSY_TIMEOUT,
            },
        )
    return create_engine(dsn, pool_pre_ping=True)


engine = create_db_engine(settings.APP_DATABASE_DSN)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables on the configured engine. Migrations are preferred outside tests."""
    Base.metadata.create_all(bind=engine)
