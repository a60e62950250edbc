"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import FilterKeys, Limits, SourceType

    if key == FilterKeys.USER_ID:
        ...
"""

from enum import Enum
from typing import Final


# =============================================================================
# Filter Keys
# =============================================================================


class FilterKeys:
    """
    Filter map keys with built-in handling in the specification builder.

    USER_ID is reserved: on tenant-scoped services it is injected with the
    current tenant id unless the caller already supplied a value.
    """

    USER_ID: Final[str] = "user_id"
    NAME: Final[str] = "name"
    IS_ACTIVE: Final[str] = "is_active"

    BUILT_IN: Final[frozenset[str]] = frozenset({USER_ID, NAME, IS_ACTIVE})


# =============================================================================
# Sorting
# =============================================================================


class SortDirection:
    """Sort direction literals accepted from callers."""

    ASC: Final[str] = "asc"
    DESC: Final[str] = "desc"


# =============================================================================
# Domain Enums
# =============================================================================


class SourceType(str, Enum):
    """Kind of account a transaction source represents."""

    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_TRANSACTION = "BANK_TRANSACTION"
    PIX = "PIX"
    CASH = "CASH"
    OTHER = "OTHER"


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionSubtype(str, Enum):
    """Whether a transaction recurs with a fixed amount."""

    FIXED = "FIXED"
    VARIABLE = "VARIABLE"


class GoalType(str, Enum):
    """Kind of financial goal."""

    SAVINGS = "SAVINGS"
    INVESTMENT = "INVESTMENT"
    DEBT_PAYMENT = "DEBT_PAYMENT"
    EMERGENCY_FUND = "EMERGENCY_FUND"
    RETIREMENT = "RETIREMENT"
    OTHER = "OTHER"


# =============================================================================
# Limits
# =============================================================================


class Limits:
    """Validation limits."""

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 100
    MAX_DESCRIPTION_LENGTH: Final[int] = 500
    MAX_NOTES_LENGTH: Final[int] = 1000
    MAX_REFERENCE_LENGTH: Final[int] = 100
    CARD_LAST_FOUR_LENGTH: Final[int] = 4

    # Pagination
    # Largest page size a page request can carry. Used to express
    # "everything, sorted" without an unbounded query.
    UNPAGED_PAGE_SIZE: Final[int] = 2**31 - 1

    # Money
    MONEY_PRECISION: Final[int] = 19
    MONEY_SCALE: Final[int] = 2
