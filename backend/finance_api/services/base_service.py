"""
Generic entity service.

EntityService implements find/create/update/delete/count (plus the name
operations) once, for every entity kind. What differs per entity lives in
an EntityModule: model, DTO, mapping and validation hooks, the tenant_scoped
and name_based capabilities.

Architecture:
    Caller → EntityService → (OwnershipGuard, SpecificationBuilder,
    NameBasedOperations) → EntityRepository → Model

The service keeps no per-call state. The current tenant is read through
`tenant_provider` on every call.

Usage:
    from finance_api.services.base_service import EntityService

    class TransactionCategoryService(EntityService[TransactionCategory, int, TransactionCategoryDTO]):
        def __init__(self, db: Session, **kwargs):
            super().__init__(db, TransactionCategoryModule(db), **kwargs)

    service = TransactionCategoryService(db)
    page = service.find_all(search="food", sort_by="name", page_request=PageRequest.of(0, 20))
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_api.models import Base
from finance_api.services.crud.contracts import EntityModule
from finance_api.services.crud.name_based import NameBasedOperations
from finance_api.services.crud.ownership import OwnershipGuard, TenantProvider
from finance_api.services.crud.pagination import Page, PageRequest, normalize_page_request
from finance_api.services.crud.repository import EntityRepository
from finance_api.services.crud.specification import SpecificationBuilder
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.security.tenant_context import get_current_tenant_id
from shared.utils.exceptions import DatabaseError, NotFoundError
from shared.utils.validators import validate_id, validate_required_string

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
IdT = TypeVar("IdT")
DtoT = TypeVar("DtoT", bound=BaseModel)


class EntityService(Generic[ModelT, IdT, DtoT]):
    """
    CRUD orchestration for one entity kind.

    Tenant-scoped modules:
    - every operation requires a current tenant (fail-closed)
    - listings and counts are filtered by owner
    - loaded entities are ownership-checked before mapping or mutation
    - new entities are assigned to the current tenant

    Name-based modules:
    - create requires a non-blank, unique name
    - update re-checks uniqueness unless the name is unchanged (ignoring case)
    """

    def __init__(
        self,
        db: Session,
        module: EntityModule[ModelT, DtoT],
        *,
        repository: EntityRepository[ModelT] | None = None,
        tenant_provider: TenantProvider = get_current_tenant_id,
    ):
        self._db = db
        self._module = module
        self._repo = repository or EntityRepository(
            module.model,
            db,
            search_columns=module.search_columns,
            owner_column=module.owner_column,
            name_column=module.name_column,
        )
        self._guard = OwnershipGuard(module, tenant_provider)
        self._specs = SpecificationBuilder(module, self._guard)
        self._names = NameBasedOperations(module, self._repo, self._guard)

    @property
    def db(self) -> Session:
        """Database session."""
        return self._db

    @property
    def repo(self) -> EntityRepository[ModelT]:
        """Repository for data access."""
        return self._repo

    @property
    def module(self) -> EntityModule[ModelT, DtoT]:
        return self._module

    @property
    def names(self) -> NameBasedOperations[ModelT]:
        return self._names

    @property
    def entity_name(self) -> str:
        """Human-readable entity name for messages."""
        return self._module.display_name

    # =========================================================================
    # Read Operations
    # =========================================================================

    def find_all(
        self,
        search: Optional[str] = None,
        filters: Optional[dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_direction: Optional[str] = None,
        page_request: Optional[PageRequest] = None,
    ) -> Page[DtoT]:
        """
        Search, filter, sort and page entities.

        Args:
            search: Free-text term matched against the searchable columns.
            filters: Field → value map. For tenant-scoped entities the
                current tenant is added under "user_id" IN PLACE unless the
                key already holds a value.
            sort_by: Column name; replaces any sort in page_request.
            sort_direction: "desc" (any case) for descending, else ascending.
            page_request: Page to return; None means every row.

        Returns:
            Page of DTOs.

        Raises:
            TenantContextUnavailableError: Tenant-scoped and no current tenant.
            ValidationError: Unknown sort field.
        """
        page_request = normalize_page_request(
            page_request or PageRequest.unpaged(), sort_by, sort_direction
        )

        if self._module.tenant_scoped:
            filters = self._guard.inject_owner_filter(filters)

        if filters:
            spec = self._specs.build(search, filters)
            page = self._repo.find_all_by_specification(spec, page_request)
        else:
            page = self._repo.find_all_by_search(search, page_request)

        logger.debug(
            "Listed entities",
            entity=self.entity_name,
            returned=len(page.items),
            total=page.total,
        )
        return page.map(self.to_dto)

    def list_all(
        self,
        search: Optional[str] = None,
        filters: Optional[dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_direction: Optional[str] = None,
    ) -> list[DtoT]:
        """Unpaged find_all: every matching entity as a list."""
        return self.find_all(search, filters, sort_by, sort_direction).items

    def find_by_id(self, entity_id: IdT) -> Optional[DtoT]:
        """
        Get entity by ID.

        Returns:
            Output DTO, or None if no entity has this id.

        Raises:
            ValidationError: If the id is missing or not positive.
            TenantContextUnavailableError: Tenant-scoped and no current tenant.
            OwnershipDeniedError: The entity belongs to another tenant.
        """
        validate_id(entity_id)
        tenant_id = self._guard.current_tenant_if_enabled()

        entity = self._repo.find_by_id(entity_id)
        if entity is None:
            return None

        self._guard.assert_ownership(entity, tenant_id)
        return self.to_dto(entity)

    def get_by_id(self, entity_id: IdT) -> DtoT:
        """
        Like find_by_id, but a missing entity is an error.

        Raises:
            NotFoundError: If entity not found.
        """
        dto = self.find_by_id(entity_id)
        if dto is None:
            raise NotFoundError(self.entity_name, entity_id)
        return dto

    def get_entity_by_id(self, entity_id: IdT) -> ModelT:
        """
        Load an entity the current tenant may modify (for internal use).

        Raises:
            ValidationError, TenantContextUnavailableError, NotFoundError,
            OwnershipDeniedError
        """
        validate_id(entity_id)
        tenant_id = self._guard.current_tenant_if_enabled()

        entity = self._repo.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)

        self._guard.assert_ownership(entity, tenant_id)
        return entity

    def exists_by_id(self, entity_id: IdT) -> bool:
        """
        Check if any entity has this id.

        Tenant-scoped services still require a current tenant, but the check
        itself is not restricted to the tenant's records.
        """
        validate_id(entity_id)
        self._guard.current_tenant_if_enabled()
        return self._repo.exists_by_id(entity_id)

    def count(
        self,
        search: Optional[str] = None,
        filters: Optional[dict[str, Any]] = None,
    ) -> int:
        """Count entities matching the search term and filters (tenant-restricted when scoped)."""
        spec = self._specs.build(search, filters)
        return self._repo.count(spec)

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, dto: DtoT) -> DtoT:
        """
        Create new entity.

        Returns:
            Output DTO for created entity.

        Raises:
            ValidationError: If data is invalid.
            DuplicateNameError: Name-based and the name is taken.
            TenantContextUnavailableError: Tenant-scoped and no current tenant.
            DatabaseError: If creation fails.
        """
        self._validate_create(dto)

        entity = self._module.to_entity(dto)

        if self._module.tenant_scoped:
            self._guard.assign_owner(entity, self._guard.require_current_tenant())

        self._module.validate_entity(entity)
        self._persist(entity, "create")

        logger.info("Entity created", entity=self.entity_name, entity_id=entity.id)
        return self.to_dto(entity)

    def update(self, entity_id: IdT, dto: DtoT) -> DtoT:
        """
        Update existing entity.

        A mapping or validation failure rolls the session back, so no part
        of the rejected payload can be committed later.

        Returns:
            Output DTO for updated entity.

        Raises:
            ValidationError: If id or data is invalid.
            NotFoundError: If entity not found.
            OwnershipDeniedError: The entity belongs to another tenant.
            DuplicateNameError: Name-based and the new name is taken.
            DatabaseError: If update fails.
        """
        validate_id(entity_id)
        self._validate_update(dto)

        entity = self.get_entity_by_id(entity_id)

        if self._module.name_based:
            self._names.validate_name_unique_for_update(
                self._module.dto_name(dto), self._module.entity_name_of(entity)
            )

        try:
            self._module.apply_dto(entity, dto)
            self._module.validate_entity(entity)
        except Exception:
            # The entity may already carry part of the payload
            self._db.rollback()
            raise
        self._persist(entity, "update")

        logger.info("Entity updated", entity=self.entity_name, entity_id=entity_id)
        return self.to_dto(entity)

    def delete(self, entity_id: IdT) -> None:
        """
        Delete entity.

        Raises:
            ValidationError: If the id is invalid.
            NotFoundError: If entity not found.
            OwnershipDeniedError: The entity belongs to another tenant.
            DatabaseError: If deletion fails.
        """
        self.get_entity_by_id(entity_id)

        try:
            self._repo.delete_by_id(entity_id)
            safe_commit(self._db)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(
                f"Failed to delete {self.entity_name}",
                error=str(e),
                entity_id=entity_id,
            )
            raise DatabaseError(f"delete {self.entity_name}") from e

        logger.info("Entity deleted", entity=self.entity_name, entity_id=entity_id)

    # =========================================================================
    # Name-based Operations
    # =========================================================================

    def find_by_name(self, name: str) -> Optional[DtoT]:
        entity = self._names.find_by_name(name)
        return self.to_dto(entity) if entity is not None else None

    def exists_by_name(self, name: str) -> bool:
        return self._names.exists_by_name(name)

    def find_all_ordered_by_name(self) -> list[DtoT]:
        return [self.to_dto(e) for e in self._names.find_all_ordered_by_name()]

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_dto(self, entity: ModelT) -> DtoT:
        return self._module.to_dto(entity)

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_create(self, dto: DtoT) -> None:
        if self._module.name_based:
            name = validate_required_string(self._module.dto_name(dto), "Name")
            self._names.validate_name_unique(name)
        self._module.validate_create(dto)

    def _validate_update(self, dto: DtoT) -> None:
        if self._module.name_based:
            validate_required_string(self._module.dto_name(dto), "Name")
        self._module.validate_update(dto)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _persist(self, entity: ModelT, operation: str) -> None:
        """Flush, commit and refresh; database failures become DatabaseError."""
        entity_id = getattr(entity, "id", None)
        try:
            self._repo.save(entity)
            safe_commit(self._db)
            self._db.refresh(entity)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(
                f"Failed to {operation} {self.entity_name}",
                error=str(e),
                entity_id=entity_id,
            )
            raise DatabaseError(f"{operation} {self.entity_name}") from e
