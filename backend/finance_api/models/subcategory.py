"""
TransactionSubcategory model: global lookup data nested under a category.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import Limits

from .base import Base, IdType, TimestampMixin

if TYPE_CHECKING:
    from .category import TransactionCategory
    from .transaction import Transaction


class TransactionSubcategory(TimestampMixin, Base):
    """
    Subcategory of a TransactionCategory.
    Not owned by any user; names are unique within their category,
    case-insensitively (enforced by the service).
    """

    __tablename__ = "transaction_subcategories"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(String(Limits.MAX_NAME_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(Limits.MAX_DESCRIPTION_LENGTH))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    category_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("transaction_categories.id"), nullable=False, index=True
    )

    # Relationships
    category: Mapped["TransactionCategory"] = relationship()
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="subcategory")
