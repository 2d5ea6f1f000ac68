"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- A deliberately small connection pool (serverless friendly)
- SQLite support for tests and local development
- Table definitions for usage tracking and stored reports
"""
import logging
import os
import threading
from typing import Generator, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    text,
)
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.sql import func

from complipilot.core.config import settings

logger = logging.getLogger("complipilot")

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 1
MAX_OVERFLOW = 2
POOL_TIMEOUT = 10
POOL_RECYCLE = 300

# Global engine and session factory
_engine = None
_SessionLocal = None
_engine_lock = threading.Lock()


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings or environment.

    For testing, use TEST_DATABASE_URL if available.
    """
    test_url = os.getenv("TEST_DATABASE_URL") or settings.TEST_DATABASE_URL
    if test_url:
        return test_url

    return settings.DATABASE_URL


def _resolve_url(database_url: Optional[str] = None) -> str:
    url = database_url or get_database_url()
    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )
    return url


def _create_engine_unlocked(url: str):
    """Build the engine and session factory. Caller must hold _engine_lock."""
    global _engine, _SessionLocal

    if url.startswith("sqlite"):
        # One shared connection so in-memory databases survive across sessions
        _engine = create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    else:
        _engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            pool_pre_ping=True,
            echo=False,
        )

    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine
    )
    logger.info("db.engine_created", extra={"event_type": "db", "dialect": _engine.dialect.name})
    return _engine


def init_engine(database_url: Optional[str] = None):
    """
    (Re)initialize the SQLAlchemy engine, disposing any existing one.

    Args:
        database_url: Optional override for DATABASE_URL
    """
    url = _resolve_url(database_url)
    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
        return _create_engine_unlocked(url)


def _ensure_engine() -> None:
    if _engine is not None:
        return
    with _engine_lock:
        # Checked again under the lock so concurrent first callers build one pool
        if _engine is None:
            _create_engine_unlocked(_resolve_url())


def get_engine():
    """Get the current SQLAlchemy engine."""
    _ensure_engine()
    return _engine


def get_session_factory():
    """Get the session factory."""
    _ensure_engine()
    return _SessionLocal


def close_engine() -> None:
    """Dispose the pooled engine (called on application shutdown)."""
    global _engine, _SessionLocal
    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _SessionLocal = None


def get_db() -> Generator[Session, None, None]:
    """FastAPI-friendly DB dependency that yields a Session and closes it.

    Use this with `Depends(get_db)` in route functions. Services commit
    their own writes.
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_all_tables():
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    engine = get_engine()
    metadata.create_all(bind=engine)


def drop_all_tables():
    """
    Drop all tables defined in metadata.

    WARNING: This is destructive! Only use in tests or development.
    """
    engine = get_engine()
    metadata.drop_all(bind=engine)


def reset_database():
    """
    Reset the database by dropping and recreating all tables.

    WARNING: This is destructive! Only use in tests.
    """
    drop_all_tables()
    create_all_tables()


def ping() -> str:
    """Run ``SELECT 1`` and return the dialect name. Raises on failure."""
    engine = get_engine()
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return engine.dialect.name


# Per-IP, per-tool report counter
usage_tracking = Table(
    'usage_tracking',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('ip_address', String(64), nullable=False),
    Column('tool', String(100), nullable=False),
    Column('report_count', Integer, nullable=False, server_default='0'),
    Column('last_updated', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    UniqueConstraint('ip_address', 'tool', name='uq_usage_tracking_ip_tool'),
    Index('idx_usage_tracking_ip', 'ip_address'),
)

# Saved reports, owned by the authenticated creator
compliance_reports = Table(
    'compliance_reports',
    metadata,
    Column('id', String(36), primary_key=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('toolkit_code', String(50), nullable=False, server_default='complipilot'),
    Column('name', Text, nullable=False),
    Column('entity_name', Text, nullable=True),
    Column('entity_type', String(100), nullable=True),
    Column('jurisdiction', String(100), nullable=True),
    Column('filing_type', String(200), nullable=True),
    Column('deadline', String(50), nullable=True),
    Column('html_content', Text, nullable=False),
    Column('checksum', String(32), nullable=True),
    Column('metadata', JSON, nullable=True),
    Column('created_at', DateTime(timezone=True), nullable=False),
    # list_reports pattern: (user_id, toolkit_code) newest first
    Index('idx_compliance_reports_user_toolkit_created', 'user_id', 'toolkit_code', 'created_at'),
)
