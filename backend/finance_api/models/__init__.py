"""
SQLAlchemy ORM Models Package.

- base: Base class, TimestampMixin, IdType
- user: User
- category: TransactionCategory
- source: TransactionSource
- goal: FinancialGoal
- subcategory: TransactionSubcategory
- transaction: Transaction
"""

# Base classes
from .base import Base, IdType, TimestampMixin

# Owner
from .user import User

# Lookup data
from .category import TransactionCategory
from .subcategory import TransactionSubcategory

# User-scoped records
from .source import TransactionSource
from .goal import FinancialGoal
from .transaction import Transaction

__all__ = [
    "Base",
    "IdType",
    "TimestampMixin",
    "User",
    "TransactionCategory",
    "TransactionSubcategory",
    "TransactionSource",
    "FinancialGoal",
    "Transaction",
]
