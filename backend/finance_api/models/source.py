"""
TransactionSource model: an account, card or wallet money moves through.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import Limits, SourceType

from .base import Base, IdType, TimestampMixin

if TYPE_CHECKING:
    from .user import User


class TransactionSource(TimestampMixin, Base):
    """
    User-owned transaction source.
    Names are unique per user, case-insensitively (enforced by the service).
    """

    __tablename__ = "transaction_sources"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(String(Limits.MAX_NAME_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(Limits.MAX_DESCRIPTION_LENGTH))
    source_type: Mapped[SourceType] = mapped_column(
        Enum(SourceType, name="source_type", native_enum=False), nullable=False
    )
    bank_name: Mapped[Optional[str]] = mapped_column(String(Limits.MAX_NAME_LENGTH))
    account_number: Mapped[Optional[str]] = mapped_column(String(50))
    card_type: Mapped[Optional[str]] = mapped_column(String(50))
    card_last_four: Mapped[Optional[str]] = mapped_column(String(Limits.CARD_LAST_FOUR_LENGTH))
    account_balance: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(Limits.MONEY_PRECISION, Limits.MONEY_SCALE)
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    user_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("users.id"), nullable=False, index=True
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="transaction_sources")

    __table_args__ = (
        Index("ix_transaction_sources_user_active", "user_id", "is_active"),
    )
