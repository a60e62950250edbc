"""
Services module for business logic.

- base_service: EntityService, the generic CRUD orchestrator
- crud/: Repository, specifications, ownership guard, name operations, pagination
- domain/: Concrete entity services - USE THESE

Usage:
    from finance_api.services.domain import TransactionCategoryService
    service = TransactionCategoryService(db)
    categories = service.find_all_active()
"""

from .base_service import EntityService

__all__ = ["EntityService"]
