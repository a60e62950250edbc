"""
Pydantic DTOs for the finance API.

One DTO per entity kind serves as create payload, update payload and
response. Server-assigned fields (id, user_id, timestamps, computed amounts)
are ignored on input and filled in on output.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from shared.config.constants import (
    GoalType,
    Limits,
    SourceType,
    TransactionSubtype,
    TransactionType,
)


# =============================================================================
# Transaction Category
# =============================================================================


class TransactionCategoryDTO(BaseModel):
    id: int | None = None
    name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# =============================================================================
# Transaction Source
# =============================================================================


class TransactionSourceDTO(BaseModel):
    id: int | None = None
    name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    source_type: SourceType | None = None
    bank_name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    account_number: str | None = Field(default=None, max_length=50)
    card_type: str | None = Field(default=None, max_length=50)
    card_last_four: str | None = Field(
        default=None,
        min_length=Limits.CARD_LAST_FOUR_LENGTH,
        max_length=Limits.CARD_LAST_FOUR_LENGTH,
        pattern=r"^\d+$",
    )
    account_balance: Decimal | None = None
    is_active: bool | None = None
    user_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# =============================================================================
# Financial Goal
# =============================================================================


class FinancialGoalDTO(BaseModel):
    """
    Financial goal payload/response.

    On update every field left as None keeps its current value.
    """

    id: int | None = None
    name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    goal_type: GoalType | None = None
    target_amount: Decimal | None = Field(default=None, gt=0)
    current_amount: Decimal | None = Field(default=None, ge=0)
    deadline: date | None = None
    is_active: bool | None = None
    auto_calculate: bool | None = None
    account_id: int | None = None
    user_id: int | None = None

    # Computed on output
    progress_percentage: Optional[Decimal] = None
    remaining_amount: Optional[Decimal] = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# =============================================================================
# Transaction Subcategory
# =============================================================================


class TransactionSubcategoryDTO(BaseModel):
    id: int | None = None
    name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    category_id: int | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# =============================================================================
# Transaction
# =============================================================================


class TransactionDTO(BaseModel):
    """
    Transaction payload/response.

    On update every field left as None keeps its current value. The
    reconciliation fields are only written through reconcile().
    """

    id: int | None = None
    type: TransactionType | None = None
    subtype: TransactionSubtype | None = None
    source_type: SourceType | None = None
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    amount: Decimal | None = Field(default=None, gt=0)
    installments: int | None = Field(default=None, ge=1)
    date: datetime | None = None
    category_id: int | None = None
    subcategory_id: int | None = None
    source_entity_id: int | None = None
    user_id: int | None = None

    reconciled: bool | None = None
    reconciled_amount: Decimal | None = None
    reconciliation_date: datetime | None = None
    reconciliation_notes: str | None = None
    bank_reference: str | None = None
    external_reference: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class TransactionReconciliationDTO(BaseModel):
    """Match of a transaction against a bank statement line."""

    reconciled_amount: Decimal | None = None
    reconciliation_date: datetime | None = None
    reconciled: bool = True
    reconciliation_notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    bank_reference: str | None = Field(default=None, max_length=Limits.MAX_REFERENCE_LENGTH)
    external_reference: str | None = Field(default=None, max_length=Limits.MAX_REFERENCE_LENGTH)
