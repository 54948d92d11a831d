from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import create_engine, Column, DateTime, Boolean, Uuid
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool
from app.core.config import settings

DATABASE_URL = settings.DATABASE_URL


def _engine_options(url: str) -> dict:
    """Pool options per backend. SQLite (tests, local runs) has no server pool."""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_pre_ping": True,   # Test connections before using
        "pool_size": 10,         # Base connection pool size
        "max_overflow": 20,      # Max connections beyond pool_size
        "pool_timeout": 30,      # Timeout for getting connection (seconds)
        "pool_recycle": 3600,    # Recycle connections after 1 hour
    }


engine = create_engine(
    DATABASE_URL,
    echo=False,              # Set to True for debugging SQL logs
    future=True,
    **_engine_options(DATABASE_URL),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)

from app.core.logging_config import logger
logger.info("Database engine configured")


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a stored timestamp to aware UTC (SQLite returns naive values)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class AuditMixin:
    """
    Identifier, audit and soft-delete columns shared by every entity.

    The values are stamped by the before_flush listener in app.core.audit,
    never by callers.
    """
    id = Column(Uuid, primary_key=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(Uuid, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    updated_by = Column(Uuid, nullable=True)

    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(Uuid, nullable=True)

    # Columns that may be set on insert but never changed afterwards
    __immutable_fields__ = ("created_at", "created_by")


class TenantScopedMixin:
    """Marks models whose reads are restricted to the caller's tenant."""
    __tenant_scoped__ = True


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
