"""
User model: the owner (tenant) of every user-scoped record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdType, TimestampMixin

if TYPE_CHECKING:
    from .goal import FinancialGoal
    from .source import TransactionSource
    from .transaction import Transaction


class User(TimestampMixin, Base):
    """
    Application user.
    Tenant-scoped records point at a user through their user_id column.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    transaction_sources: Mapped[list["TransactionSource"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    financial_goals: Mapped[list["FinancialGoal"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
