"""
Transaction Subcategory Service.

Subcategories are global lookup data nested under a category. A name is
unique within its category (ignoring case); the same name may appear under
different categories.

Usage:
    from finance_api.services.domain import TransactionSubcategoryService

    service = TransactionSubcategoryService(db)
    subcategories = service.find_by_category_id_order_by_usage(food.id)
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from finance_api.models import Transaction, TransactionCategory, TransactionSubcategory
from finance_api.schemas import TransactionSubcategoryDTO
from finance_api.services.base_service import EntityService
from finance_api.services.crud.contracts import EntityModule
from finance_api.services.crud.specification import (
    EqualsIgnoreCase,
    FieldEquals,
    FlagIs,
    Specification,
    all_of,
)
from shared.config.constants import FilterKeys
from shared.utils.exceptions import DuplicateNameError, NotFoundError, ValidationError
from shared.utils.validators import validate_id, validate_required_string

CATEGORY_ID_FILTER = "category_id"


class TransactionSubcategoryModule(
    EntityModule[TransactionSubcategory, TransactionSubcategoryDTO]
):
    display_name = "TransactionSubcategory"
    model = TransactionSubcategory
    dto_schema = TransactionSubcategoryDTO

    def validate_create(self, dto: TransactionSubcategoryDTO) -> None:
        validate_required_string(dto.name, "Name")
        if dto.category_id is None:
            raise ValidationError("Category is required", field=CATEGORY_ID_FILTER)

    def validate_update(self, dto: TransactionSubcategoryDTO) -> None:
        validate_required_string(dto.name, "Name")

    def _find_category(self, category_id: int) -> TransactionCategory:
        validate_id(category_id, "Category ID")
        category = self.session.get(TransactionCategory, category_id)
        if category is None:
            raise NotFoundError("TransactionCategory", category_id)
        return category

    def to_entity(self, dto: TransactionSubcategoryDTO) -> TransactionSubcategory:
        return TransactionSubcategory(
            name=dto.name,
            description=dto.description,
            category=self._find_category(dto.category_id),
            is_active=True,
        )

    def apply_dto(self, entity: TransactionSubcategory, dto: TransactionSubcategoryDTO) -> None:
        # The owning category never changes
        entity.name = dto.name
        entity.description = dto.description
        if dto.is_active is not None:
            entity.is_active = dto.is_active

    def validate_entity(self, entity: TransactionSubcategory) -> None:
        category_id = entity.category.id if entity.category is not None else entity.category_id
        query = select(TransactionSubcategory.id).where(
            TransactionSubcategory.category_id == category_id,
            func.lower(TransactionSubcategory.name) == entity.name.strip().lower(),
        )
        if entity.id is not None:
            query = query.where(TransactionSubcategory.id != entity.id)
        with self.session.no_autoflush:
            taken = self.session.scalars(query.limit(1)).first() is not None
        if taken:
            raise DuplicateNameError(self.display_name, entity.name)

    def filter_specification(self, key: str, value: Any) -> Optional[Specification]:
        if key == CATEGORY_ID_FILTER:
            return FieldEquals(TransactionSubcategory.category_id, value)
        return None


class TransactionSubcategoryService(
    EntityService[TransactionSubcategory, int, TransactionSubcategoryDTO]
):
    """
    Service for transaction subcategories.

    Business rules:
    - Name and an existing category are required on create
    - Names are unique within a category, ignoring case
    - Subcategories are visible to every user
    """

    def __init__(self, db: Session, **kwargs):
        super().__init__(db, TransactionSubcategoryModule(db), **kwargs)

    def _active_in_category(self, category_id: int) -> Specification:
        return all_of([
            FieldEquals(TransactionSubcategory.category_id, category_id),
            FlagIs(TransactionSubcategory.is_active, True),
        ])

    def find_by_category_id(self, category_id: int) -> list[TransactionSubcategoryDTO]:
        """Active subcategories of a category, name ascending."""
        validate_id(category_id, "Category ID")
        query = (
            select(TransactionSubcategory)
            .where(self._active_in_category(category_id).to_expression())
            .order_by(TransactionSubcategory.name.asc())
        )
        return [self.to_dto(s) for s in self._db.scalars(query)]

    def find_all_active(self) -> list[TransactionSubcategoryDTO]:
        """Every active subcategory, name ascending."""
        return self.list_all(filters={FilterKeys.IS_ACTIVE: True}, sort_by="name", sort_direction="asc")

    def find_by_category_id_order_by_usage(self, category_id: int) -> list[TransactionSubcategoryDTO]:
        """
        Active subcategories of a category, most used first.

        Usage is the number of transactions filed under the subcategory;
        ties are broken by name.
        """
        validate_id(category_id, "Category ID")
        usage = func.count(Transaction.id)
        query = (
            select(TransactionSubcategory)
            .outerjoin(Transaction, Transaction.subcategory_id == TransactionSubcategory.id)
            .where(self._active_in_category(category_id).to_expression())
            .group_by(TransactionSubcategory.id)
            .order_by(usage.desc(), TransactionSubcategory.name.asc())
        )
        return [self.to_dto(s) for s in self._db.scalars(query)]

    def count_by_category_id(self, category_id: int) -> int:
        """Number of active subcategories in a category."""
        validate_id(category_id, "Category ID")
        return self._repo.count(self._active_in_category(category_id))

    def find_by_category_id_and_name(
        self, category_id: int, name: str
    ) -> Optional[TransactionSubcategoryDTO]:
        """Subcategory with this name (ignoring case) in the category, if any."""
        entity = self._db.scalars(
            select(TransactionSubcategory)
            .where(self._name_in_category(category_id, name).to_expression())
            .limit(1)
        ).first()
        return self.to_dto(entity) if entity is not None else None

    def exists_by_category_id_and_name(self, category_id: int, name: str) -> bool:
        return self._repo.count(self._name_in_category(category_id, name)) > 0

    def _name_in_category(self, category_id: int, name: str) -> Specification:
        validate_id(category_id, "Category ID")
        name = validate_required_string(name, "Name")
        return FieldEquals(TransactionSubcategory.category_id, category_id) & EqualsIgnoreCase(
            TransactionSubcategory.name, name
        )
