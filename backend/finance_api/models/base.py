"""
Base class and TimestampMixin for all SQLAlchemy ORM models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# BIGINT on PostgreSQL, INTEGER on SQLite (only INTEGER PRIMARY KEY autoincrements there)
IdType = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    """
    Mixin providing audit timestamps.

    Fields added:
    - created_at: set by the database on insert
    - updated_at: set on every ORM update
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        id_val = getattr(self, "id", None)
        return f"<{class_name}(id={id_val})>"
