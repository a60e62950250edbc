"""
Entity module contract.

An EntityModule is the capability object a concrete entity kind hands to
the generic EntityService: which model and DTO it uses, whether it is
tenant-scoped and/or name-based, how DTOs map to entities and back, and
how entity-specific filters translate into specifications.

Usage:
    class TransactionCategoryModule(EntityModule[TransactionCategory, TransactionCategoryDTO]):
        display_name = "TransactionCategory"
        model = TransactionCategory
        dto_schema = TransactionCategoryDTO
        name_based = True

        def to_entity(self, dto):
            return TransactionCategory(name=dto.name)

        def apply_dto(self, entity, dto):
            entity.name = dto.name
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Optional, Protocol, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import InstrumentedAttribute, Session

from finance_api.models import Base
from shared.config.constants import FilterKeys

if TYPE_CHECKING:
    from finance_api.services.crud.specification import Specification

ModelT = TypeVar("ModelT", bound=Base)
DtoT = TypeVar("DtoT", bound=BaseModel)


# =============================================================================
# Accessor protocols
# =============================================================================


class HasId(Protocol):
    id: Any


class HasName(Protocol):
    name: Optional[str]


class HasOwner(Protocol):
    user_id: Optional[int]


# =============================================================================
# Entity module
# =============================================================================


class EntityModule(ABC, Generic[ModelT, DtoT]):
    """
    Per-entity capabilities consumed by the generic CRUD core.

    Class attributes:
        display_name: Entity name used in messages and logs.
        model: SQLAlchemy model class.
        dto_schema: Pydantic DTO class (input and output).
        tenant_scoped: Records belong to a user; every operation is
            restricted to the current tenant.
        name_based: Records carry a name unique per tenant (or globally
            when not tenant-scoped), compared case-insensitively.
        search_fields: Text columns matched by the free-text search term.
    """

    display_name: ClassVar[str]
    model: ClassVar[type[Base]]
    dto_schema: ClassVar[type[BaseModel]]

    tenant_scoped: ClassVar[bool] = False
    name_based: ClassVar[bool] = False

    search_fields: ClassVar[tuple[str, ...]] = ("name", "description")
    owner_field: ClassVar[str] = FilterKeys.USER_ID
    name_field: ClassVar[str] = "name"
    active_field: ClassVar[str] = "is_active"

    def __init__(self, session: Session):
        self.session = session

    # =========================================================================
    # Columns
    # =========================================================================

    def _column(self, field_name: str) -> InstrumentedAttribute | None:
        return getattr(self.model, field_name, None)

    @property
    def search_columns(self) -> list[InstrumentedAttribute]:
        """Searchable columns the model actually has."""
        columns = (self._column(f) for f in self.search_fields)
        return [c for c in columns if c is not None]

    @property
    def owner_column(self) -> InstrumentedAttribute | None:
        return self._column(self.owner_field)

    @property
    def name_column(self) -> InstrumentedAttribute | None:
        return self._column(self.name_field)

    @property
    def active_column(self) -> InstrumentedAttribute | None:
        return self._column(self.active_field)

    # =========================================================================
    # Mapping hooks
    # =========================================================================

    @abstractmethod
    def to_entity(self, dto: DtoT) -> ModelT:
        """Build a new, unsaved entity from a create payload."""

    @abstractmethod
    def apply_dto(self, entity: ModelT, dto: DtoT) -> None:
        """Copy update payload fields onto a loaded entity."""

    def to_dto(self, entity: ModelT) -> DtoT:
        """
        Convert entity to output DTO.

        Override this method for custom transformation logic.
        """
        return self.dto_schema.model_validate(entity)

    # =========================================================================
    # Validation hooks (override in subclasses)
    # =========================================================================

    def validate_create(self, dto: DtoT) -> None:
        """
        Validate a create payload.

        Raises:
            ValidationError: If validation fails.
        """
        pass

    def validate_update(self, dto: DtoT) -> None:
        """
        Validate an update payload before the entity is loaded.

        Raises:
            ValidationError: If validation fails.
        """
        pass

    def validate_entity(self, entity: ModelT) -> None:
        """Validate the entity right before it is persisted."""
        pass

    # =========================================================================
    # Filters
    # =========================================================================

    def filter_specification(self, key: str, value: Any) -> Optional["Specification"]:
        """
        Translate an entity-specific filter entry into a specification.

        Return None for keys this entity does not understand; they are
        ignored.
        """
        return None

    # =========================================================================
    # Ownership
    # =========================================================================

    def belongs_to_tenant(self, entity: ModelT, tenant_id: int) -> bool:
        return getattr(entity, self.owner_field) == tenant_id

    def assign_owner(self, entity: ModelT, tenant_id: int) -> None:
        setattr(entity, self.owner_field, tenant_id)

    # =========================================================================
    # Names
    # =========================================================================

    def dto_name(self, dto: DtoT) -> Optional[str]:
        return getattr(dto, self.name_field, None)

    def entity_name_of(self, entity: ModelT) -> Optional[str]:
        return getattr(entity, self.name_field, None)
