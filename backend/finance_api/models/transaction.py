"""
Transaction model: one income or expense of a user.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import Limits, SourceType, TransactionSubtype, TransactionType

from .base import Base, IdType, TimestampMixin

if TYPE_CHECKING:
    from .category import TransactionCategory
    from .source import TransactionSource
    from .subcategory import TransactionSubcategory
    from .user import User


class Transaction(TimestampMixin, Base):
    """
    User-owned transaction.

    `source_type` says how the money moved (cash, card...); `source_entity`
    optionally points at the user's concrete account or card. The
    reconciliation fields record the match against a bank statement.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="transaction_type", native_enum=False), nullable=False
    )
    subtype: Mapped[TransactionSubtype] = mapped_column(
        Enum(TransactionSubtype, name="transaction_subtype", native_enum=False), nullable=False
    )
    source_type: Mapped[SourceType] = mapped_column(
        Enum(SourceType, name="source_type", native_enum=False), nullable=False
    )
    description: Mapped[str] = mapped_column(String(Limits.MAX_DESCRIPTION_LENGTH), nullable=False)
    amount: Mapped[Decimal] = mapped_column(
        Numeric(Limits.MONEY_PRECISION, Limits.MONEY_SCALE), nullable=False
    )
    installments: Mapped[Optional[int]] = mapped_column(Integer)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    category_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("transaction_categories.id"), nullable=False
    )
    subcategory_id: Mapped[Optional[int]] = mapped_column(
        IdType, ForeignKey("transaction_subcategories.id"), nullable=True
    )
    source_entity_id: Mapped[Optional[int]] = mapped_column(
        IdType, ForeignKey("transaction_sources.id"), nullable=True
    )
    user_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("users.id"), nullable=False, index=True
    )

    # Reconciliation
    reconciled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reconciled_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(Limits.MONEY_PRECISION, Limits.MONEY_SCALE)
    )
    reconciliation_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    reconciliation_notes: Mapped[Optional[str]] = mapped_column(String(Limits.MAX_NOTES_LENGTH))
    bank_reference: Mapped[Optional[str]] = mapped_column(String(Limits.MAX_REFERENCE_LENGTH))
    external_reference: Mapped[Optional[str]] = mapped_column(String(Limits.MAX_REFERENCE_LENGTH))

    # Relationships
    category: Mapped["TransactionCategory"] = relationship()
    subcategory: Mapped[Optional["TransactionSubcategory"]] = relationship(
        back_populates="transactions"
    )
    source_entity: Mapped[Optional["TransactionSource"]] = relationship()
    user: Mapped["User"] = relationship(back_populates="transactions")

    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
    )
