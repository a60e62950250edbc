"""
FinancialGoal model: a savings/investment/debt target tracked by a user.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Date, Enum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import GoalType, Limits

from .base import Base, IdType, TimestampMixin

if TYPE_CHECKING:
    from .source import TransactionSource
    from .user import User


class FinancialGoal(TimestampMixin, Base):
    """
    User-owned financial goal.
    An active goal is in progress; a completed goal is deactivated.
    """

    __tablename__ = "financial_goals"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(String(Limits.MAX_NAME_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(Limits.MAX_DESCRIPTION_LENGTH))
    goal_type: Mapped[GoalType] = mapped_column(
        Enum(GoalType, name="goal_type", native_enum=False), nullable=False
    )
    target_amount: Mapped[Decimal] = mapped_column(
        Numeric(Limits.MONEY_PRECISION, Limits.MONEY_SCALE), nullable=False
    )
    current_amount: Mapped[Decimal] = mapped_column(
        Numeric(Limits.MONEY_PRECISION, Limits.MONEY_SCALE), default=Decimal("0"), nullable=False
    )
    deadline: Mapped[Optional[date]] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    auto_calculate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    account_id: Mapped[Optional[int]] = mapped_column(
        IdType, ForeignKey("transaction_sources.id"), nullable=True
    )
    user_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("users.id"), nullable=False, index=True
    )

    # Relationships
    account: Mapped[Optional["TransactionSource"]] = relationship()
    user: Mapped["User"] = relationship(back_populates="financial_goals")

    __table_args__ = (
        Index("ix_financial_goals_user_active", "user_id", "is_active"),
    )

    @property
    def progress_percentage(self) -> Decimal:
        """Current amount as a percentage of the target (0 when there is no target)."""
        if not self.target_amount:
            return Decimal("0")
        current = self.current_amount or Decimal("0")
        ratio = (current / self.target_amount).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
        return ratio * 100

    @property
    def remaining_amount(self) -> Decimal:
        return self.target_amount - (self.current_amount or Decimal("0"))

    @property
    def is_completed(self) -> bool:
        return self.current_amount is not None and self.current_amount >= self.target_amount
