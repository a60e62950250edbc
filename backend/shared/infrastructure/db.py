"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns with a synchronous Session.

The engine is built on first use so that importing this module never opens
connections or loads a database driver.
"""

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from shared.config.settings import settings

import os


def _calculate_pool_size() -> int:
    """
    Calculate pool size based on CPU cores.
    Formula: (2 * CPU cores) + 1, capped at 20 for reasonable limits.
    """
    cores = os.cpu_count() or 4
    return min(cores * 2 + 1, 20)


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool and timeout options for the given database URL."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": _calculate_pool_size(),
        "max_overflow": 15,
        "pool_timeout": 30,  # Wait max 30s for connection from pool
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
        "connect_args": {"connect_timeout": 10},
    }


@lru_cache
def get_engine() -> Engine:
    """Create (once) the application engine from settings."""
    return create_engine(
        settings.database_url,
        echo=settings.database_echo,
        **_engine_options(settings.database_url),
    )


# Session factory, bound per call in get_db() / get_db_context()
SessionLocal = sessionmaker(
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @app.get("/sources")
        def list_sources(db: Session = Depends(get_db)):
            return TransactionSourceService(db).find_all()

    The session is automatically closed after the request completes.
    """
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            TransactionCategoryService(db).find_all_active()
    """
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """
    Safe commit with automatic rollback on failure.

    Raises the original exception after rolling back.
    """
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
