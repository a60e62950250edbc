"""
Transaction Source Service.

A transaction source is an account, card or wallet owned by one user.
Names are unique per user (ignoring case).

Usage:
    from finance_api.services.domain import TransactionSourceService

    with tenant_scope(user_id):
        service = TransactionSourceService(db)
        cards = service.find_by_source_type(SourceType.CREDIT_CARD)
        page = service.find_all(filters={"is_active": True}, sort_by="name", page_request=PageRequest.of(0, 10))
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.orm import Session

from finance_api.models import TransactionSource
from finance_api.schemas import TransactionSourceDTO
from finance_api.services.base_service import EntityService
from finance_api.services.crud.specification import FieldEquals, Specification
from finance_api.services.domain.user_owned import UserOwnedModule
from shared.config.constants import SourceType
from shared.utils.exceptions import ValidationError

SOURCE_TYPE_FILTER = "source_type"


def _parse_source_type(value: Any) -> SourceType:
    try:
        return SourceType(value)
    except ValueError:
        raise ValidationError(
            f"Invalid source type: {value}", field=SOURCE_TYPE_FILTER, value=value
        ) from None


class TransactionSourceModule(UserOwnedModule[TransactionSource, TransactionSourceDTO]):
    display_name = "TransactionSource"
    model = TransactionSource
    dto_schema = TransactionSourceDTO

    name_based = True

    def _require_source_type(self, dto: TransactionSourceDTO) -> None:
        if dto.source_type is None:
            raise ValidationError("Source type is required", field=SOURCE_TYPE_FILTER)

    def validate_create(self, dto: TransactionSourceDTO) -> None:
        self._require_source_type(dto)

    def validate_update(self, dto: TransactionSourceDTO) -> None:
        self._require_source_type(dto)

    def _copy_fields(self, entity: TransactionSource, dto: TransactionSourceDTO) -> None:
        entity.name = dto.name
        entity.description = dto.description
        entity.source_type = dto.source_type
        entity.bank_name = dto.bank_name
        entity.account_number = dto.account_number
        entity.card_type = dto.card_type
        entity.card_last_four = dto.card_last_four
        entity.account_balance = dto.account_balance

    def to_entity(self, dto: TransactionSourceDTO) -> TransactionSource:
        entity = TransactionSource(is_active=True)
        self._copy_fields(entity, dto)
        return entity

    def apply_dto(self, entity: TransactionSource, dto: TransactionSourceDTO) -> None:
        # Full replacement, except is_active which only changes when given
        self._copy_fields(entity, dto)
        if dto.is_active is not None:
            entity.is_active = dto.is_active

    def filter_specification(self, key: str, value: Any) -> Optional[Specification]:
        if key == SOURCE_TYPE_FILTER:
            return FieldEquals(TransactionSource.source_type, _parse_source_type(value))
        return None


class TransactionSourceService(
    EntityService[TransactionSource, int, TransactionSourceDTO]
):
    """
    Service for transaction sources.

    Business rules:
    - Sources belong to the current user
    - Name and source type are required; names are unique per user
    - New sources start active
    """

    def __init__(self, db: Session, **kwargs):
        super().__init__(db, TransactionSourceModule(db), **kwargs)

    def find_by_source_type(self, source_type: SourceType | str) -> list[TransactionSourceDTO]:
        """Current user's sources of one type, name ascending."""
        return self.list_all(
            filters={SOURCE_TYPE_FILTER: _parse_source_type(source_type)},
            sort_by="name",
        )
