"""
Transaction Category Service.

Categories are global lookup data: not owned by any user, unique by name
(ignoring case).

Usage:
    from finance_api.services.domain import TransactionCategoryService

    service = TransactionCategoryService(db)
    categories = service.find_all_active()
    food = service.find_by_name("food")
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from finance_api.models import TransactionCategory
from finance_api.schemas import TransactionCategoryDTO
from finance_api.services.base_service import EntityService
from finance_api.services.crud.contracts import EntityModule


class TransactionCategoryModule(EntityModule[TransactionCategory, TransactionCategoryDTO]):
    display_name = "TransactionCategory"
    model = TransactionCategory
    dto_schema = TransactionCategoryDTO

    name_based = True
    search_fields = ("name",)

    def to_entity(self, dto: TransactionCategoryDTO) -> TransactionCategory:
        return TransactionCategory(name=dto.name)

    def apply_dto(self, entity: TransactionCategory, dto: TransactionCategoryDTO) -> None:
        entity.name = dto.name


class TransactionCategoryService(
    EntityService[TransactionCategory, int, TransactionCategoryDTO]
):
    """
    Service for transaction categories.

    Business rules:
    - Names are required and unique ignoring case
    - Categories are visible to every user
    """

    def __init__(self, db: Session, **kwargs):
        super().__init__(db, TransactionCategoryModule(db), **kwargs)

    def find_all_active(self) -> list[TransactionCategoryDTO]:
        """Every category, name ascending."""
        return self.list_all(sort_by="name", sort_direction="asc")
