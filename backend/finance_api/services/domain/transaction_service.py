"""
Transaction Service.

Transactions are owned by one user. Each one is filed under a global
category (and optionally one of its subcategories) and may point at one of
the owner's transaction sources.

Filter keys beyond the built-in ones:
    type, subtype, source_type    enum value (or its string form)
    category_id, subcategory_id, source_entity_id
    description                   contains, ignoring case
    reconciled                    bool or "true"/"false"
    start_date, end_date          inclusive bounds on `date`
    min_amount, max_amount        inclusive bounds on `amount`

Usage:
    from finance_api.services.domain import TransactionService

    with tenant_scope(user_id):
        service = TransactionService(db)
        page = service.find_all(
            filters={"type": "INCOME", "start_date": "2024-01-01T00:00:00"},
            page_request=PageRequest.of(0, 20),
        )
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from sqlalchemy.orm import Session

from finance_api.models import (
    Transaction,
    TransactionCategory,
    TransactionSource,
    TransactionSubcategory,
)
from finance_api.schemas import TransactionDTO, TransactionReconciliationDTO
from finance_api.services.base_service import EntityService
from finance_api.services.crud.pagination import Page, PageRequest
from finance_api.services.crud.specification import (
    AtLeast,
    AtMost,
    ContainsIgnoreCase,
    FieldEquals,
    FlagIs,
    Specification,
    is_true_value,
)
from finance_api.services.domain.user_owned import UserOwnedModule
from shared.config.constants import SourceType, TransactionSubtype, TransactionType
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, OwnershipDeniedError, ValidationError
from shared.utils.validators import validate_id, validate_required_string

logger = get_logger(__name__)


# =============================================================================
# Filter parsing
# =============================================================================


def _parse_enum(enum_type: type[Enum], key: str, value: Any) -> Enum:
    try:
        return enum_type(value)
    except ValueError:
        raise ValidationError(f"Invalid {key}: {value}", field=key, value=value) from None


def _parse_datetime(key: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Invalid date: {value}", field=key, value=value) from None


def _parse_amount(key: str, value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {value}", field=key, value=value) from None


_ENUM_FILTERS = {
    "type": (Transaction.type, TransactionType),
    "subtype": (Transaction.subtype, TransactionSubtype),
    "source_type": (Transaction.source_type, SourceType),
}

_ID_FILTERS = {
    "category_id": Transaction.category_id,
    "subcategory_id": Transaction.subcategory_id,
    "source_entity_id": Transaction.source_entity_id,
}


# =============================================================================
# Module
# =============================================================================


class TransactionModule(UserOwnedModule[Transaction, TransactionDTO]):
    display_name = "Transaction"
    model = Transaction
    dto_schema = TransactionDTO

    search_fields = ("description",)

    def validate_create(self, dto: TransactionDTO) -> None:
        validate_required_string(dto.description, "Description")
        for field in ("type", "subtype", "source_type", "amount", "category_id"):
            if getattr(dto, field) is None:
                raise ValidationError(f"{field} is required", field=field)

    def validate_update(self, dto: TransactionDTO) -> None:
        if dto.description is not None:
            validate_required_string(dto.description, "Description")

    # -------------------------------------------------------------------------
    # Reference lookups
    # -------------------------------------------------------------------------

    def _find(self, model: type, entity: str, entity_id: int) -> Any:
        validate_id(entity_id, f"{entity} ID")
        found = self.session.get(model, entity_id)
        if found is None:
            raise NotFoundError(entity, entity_id)
        return found

    def _check_subcategory(
        self, subcategory: Optional[TransactionSubcategory], category: TransactionCategory
    ) -> None:
        if subcategory is not None and subcategory.category_id != category.id:
            raise ValidationError(
                "Subcategory does not belong to the category",
                field="subcategory_id",
                value=subcategory.id,
            )

    def _check_source_owner(self, source: Optional[TransactionSource], owner_id: Optional[int]) -> None:
        if source is not None and source.user_id != owner_id:
            raise OwnershipDeniedError("TransactionSource", entity_id=source.id)

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------

    def to_entity(self, dto: TransactionDTO) -> Transaction:
        category = self._find(TransactionCategory, "TransactionCategory", dto.category_id)
        subcategory = None
        if dto.subcategory_id is not None:
            subcategory = self._find(TransactionSubcategory, "TransactionSubcategory", dto.subcategory_id)
            self._check_subcategory(subcategory, category)

        transaction = Transaction(
            type=dto.type,
            subtype=dto.subtype,
            source_type=dto.source_type,
            description=dto.description,
            amount=dto.amount,
            installments=dto.installments,
            date=dto.date or datetime.now(timezone.utc),
            category=category,
            subcategory=subcategory,
            reconciled=False,
        )
        if dto.source_entity_id is not None:
            transaction.source_entity = self._find(
                TransactionSource, "TransactionSource", dto.source_entity_id
            )
        return transaction

    def apply_dto(self, entity: Transaction, dto: TransactionDTO) -> None:
        """Partial update: None fields keep their current value."""
        # Resolve references before touching the entity
        category = entity.category
        if dto.category_id is not None:
            category = self._find(TransactionCategory, "TransactionCategory", dto.category_id)

        subcategory = entity.subcategory
        if dto.subcategory_id is not None:
            subcategory = self._find(TransactionSubcategory, "TransactionSubcategory", dto.subcategory_id)
        elif dto.category_id is not None and subcategory is not None and subcategory.category_id != category.id:
            # Moving to another category drops a subcategory that no longer fits
            subcategory = None
        self._check_subcategory(subcategory, category)

        source = None
        if dto.source_entity_id is not None:
            source = self._find(TransactionSource, "TransactionSource", dto.source_entity_id)
            self._check_source_owner(source, entity.user_id)

        if dto.type is not None:
            entity.type = dto.type
        if dto.subtype is not None:
            entity.subtype = dto.subtype
        if dto.source_type is not None:
            entity.source_type = dto.source_type
        if dto.description is not None:
            entity.description = dto.description
        if dto.amount is not None:
            entity.amount = dto.amount
        if dto.installments is not None:
            entity.installments = dto.installments
        if dto.date is not None:
            entity.date = dto.date
        entity.category = category
        entity.subcategory = subcategory
        if source is not None:
            entity.source_entity = source

    def validate_entity(self, entity: Transaction) -> None:
        self._check_source_owner(entity.source_entity, entity.user_id)
        self._check_subcategory(entity.subcategory, entity.category)

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def filter_specification(self, key: str, value: Any) -> Optional[Specification]:
        if key in _ENUM_FILTERS:
            column, enum_type = _ENUM_FILTERS[key]
            return FieldEquals(column, _parse_enum(enum_type, key, value))
        if key in _ID_FILTERS:
            return FieldEquals(_ID_FILTERS[key], value)
        if key == "description":
            if not str(value).strip():
                return None
            return ContainsIgnoreCase(Transaction.description, str(value))
        if key == "reconciled":
            return FlagIs(Transaction.reconciled, is_true_value(value))
        if key == "start_date":
            return AtLeast(Transaction.date, _parse_datetime(key, value))
        if key == "end_date":
            return AtMost(Transaction.date, _parse_datetime(key, value))
        if key == "min_amount":
            return AtLeast(Transaction.amount, _parse_amount(key, value))
        if key == "max_amount":
            return AtMost(Transaction.amount, _parse_amount(key, value))
        return None


# =============================================================================
# Service
# =============================================================================


class TransactionService(EntityService[Transaction, int, TransactionDTO]):
    """
    Service for transactions.

    Business rules:
    - Transactions belong to the current user
    - Type, subtype, source type, description, a positive amount and an
      existing category are required on create; the date defaults to now
    - A subcategory must belong to the transaction's category
    - A source entity must belong to the transaction's owner
    - Listings default to newest first
    """

    def __init__(self, db: Session, **kwargs):
        super().__init__(db, TransactionModule(db), **kwargs)

    def find_all(
        self,
        search: Optional[str] = None,
        filters: Optional[dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_direction: Optional[str] = None,
        page_request: Optional[PageRequest] = None,
    ) -> Page[TransactionDTO]:
        """Like EntityService.find_all, but an explicit sort field defaults to descending."""
        if sort_by and not sort_direction:
            sort_direction = "desc"
        return super().find_all(search, filters, sort_by, sort_direction, page_request)

    # =========================================================================
    # Query Methods
    # =========================================================================

    def find_by_type(self, transaction_type: TransactionType | str) -> list[TransactionDTO]:
        """Transactions of one type, newest first."""
        return self.list_all(filters={"type": transaction_type}, sort_by="date")

    def find_by_date_range(self, start: datetime, end: datetime) -> list[TransactionDTO]:
        """Transactions dated within [start, end], newest first."""
        if start is None or end is None:
            raise ValidationError("Start and end dates are required", field="date")
        if start > end:
            raise ValidationError("Start date must not be after end date", field="start_date")
        return self.list_all(filters={"start_date": start, "end_date": end}, sort_by="date")

    def find_unreconciled(self) -> list[TransactionDTO]:
        """Transactions not yet matched against a statement, oldest first."""
        return self.list_all(filters={"reconciled": False}, sort_by="date", sort_direction="asc")

    # =========================================================================
    # Command Methods
    # =========================================================================

    def reconcile(self, transaction_id: int, request: TransactionReconciliationDTO) -> TransactionDTO:
        """Record the statement match of a transaction."""
        transaction = self.get_entity_by_id(transaction_id)

        transaction.reconciled = request.reconciled
        transaction.reconciled_amount = request.reconciled_amount
        transaction.reconciliation_date = request.reconciliation_date or datetime.now(timezone.utc)
        transaction.reconciliation_notes = request.reconciliation_notes
        transaction.bank_reference = request.bank_reference
        transaction.external_reference = request.external_reference

        self._persist(transaction, "update")
        logger.info(
            "Transaction reconciled",
            transaction_id=transaction_id,
            reconciled=request.reconciled,
        )
        return self.to_dto(transaction)
