"""
TransactionCategory model: global lookup data shared by all users.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import Limits

from .base import Base, IdType, TimestampMixin


class TransactionCategory(TimestampMixin, Base):
    """
    Category a transaction can be filed under.
    Not owned by any user; names are unique case-insensitively (enforced by the service).
    """

    __tablename__ = "transaction_categories"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(String(Limits.MAX_NAME_LENGTH), nullable=False, index=True)
