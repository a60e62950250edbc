"""
Domain Services - concrete entity services built on EntityService.

Structure:
    Caller (router, job, test)
        ↓
    Domain service (entity-specific queries and commands)  ← YOU ARE HERE
        ↓
    EntityService (generic CRUD, ownership, names)
        ↓
    EntityRepository (data access)
        ↓
    Model (entity)

Usage:
    from finance_api.services.domain import TransactionSourceService

    with tenant_scope(user_id):
        sources = TransactionSourceService(db).find_all(search="bank")
"""

from .category_service import TransactionCategoryModule, TransactionCategoryService
from .goal_service import FinancialGoalModule, FinancialGoalService
from .source_service import TransactionSourceModule, TransactionSourceService
from .subcategory_service import TransactionSubcategoryModule, TransactionSubcategoryService
from .transaction_service import TransactionModule, TransactionService
from .user_owned import UserOwnedModule

__all__ = [
    "FinancialGoalModule",
    "FinancialGoalService",
    "TransactionCategoryModule",
    "TransactionCategoryService",
    "TransactionSourceModule",
    "TransactionSourceService",
    "TransactionSubcategoryModule",
    "TransactionSubcategoryService",
    "TransactionModule",
    "TransactionService",
    "UserOwnedModule",
]
