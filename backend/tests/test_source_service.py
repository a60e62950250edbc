"""
Tests for TransactionSourceService.
"""

from decimal import Decimal

import pytest

from finance_api.models import TransactionSource
from finance_api.schemas import TransactionSourceDTO
from finance_api.services.domain import TransactionSourceService
from shared.config.constants import SourceType
from shared.security.tenant_context import tenant_scope
from shared.utils.exceptions import NotFoundError, ValidationError


class TestCreate:

    def test_create_copies_fields(self, db_session, as_user_one):
        created = TransactionSourceService(db_session).create(TransactionSourceDTO(
            name="Visa",
            description="Travel card",
            source_type=SourceType.CREDIT_CARD,
            bank_name="Bank One",
            card_type="VISA",
            card_last_four="1234",
            account_balance=Decimal("150.25"),
        ))

        stored = db_session.get(TransactionSource, created.id)
        assert stored.user_id == as_user_one.id
        assert stored.source_type is SourceType.CREDIT_CARD
        assert stored.card_last_four == "1234"
        assert stored.account_balance == Decimal("150.25")
        assert stored.is_active is True

    def test_source_type_required(self, db_session, as_user_one):
        with pytest.raises(ValidationError):
            TransactionSourceService(db_session).create(TransactionSourceDTO(name="Wallet"))

    def test_unknown_user_rejected(self, db_session):
        with tenant_scope(999):
            with pytest.raises(NotFoundError) as exc_info:
                TransactionSourceService(db_session).create(
                    TransactionSourceDTO(name="Wallet", source_type=SourceType.CASH)
                )

        assert "User" in exc_info.value.detail
        assert db_session.query(TransactionSource).count() == 0


class TestUpdate:

    def test_update_replaces_fields_and_keeps_active_flag(self, db_session, as_user_one, make_source):
        source = make_source(as_user_one, "Wallet", description="old")
        service = TransactionSourceService(db_session)

        updated = service.update(
            source.id,
            TransactionSourceDTO(name="Wallet", source_type=SourceType.PIX),
        )

        assert updated.source_type is SourceType.PIX
        assert updated.description is None
        assert updated.is_active is True

    def test_update_can_deactivate(self, db_session, as_user_one, make_source):
        source = make_source(as_user_one, "Wallet")

        updated = TransactionSourceService(db_session).update(
            source.id,
            TransactionSourceDTO(name="Wallet", source_type=SourceType.CASH, is_active=False),
        )

        assert updated.is_active is False


class TestQueries:

    def test_find_by_source_type(self, db_session, as_user_one, user_two, make_source):
        make_source(as_user_one, "Visa", source_type=SourceType.CREDIT_CARD)
        make_source(as_user_one, "Amex", source_type=SourceType.CREDIT_CARD)
        make_source(as_user_one, "Wallet", source_type=SourceType.CASH)
        make_source(user_two, "Master", source_type=SourceType.CREDIT_CARD)

        cards = TransactionSourceService(db_session).find_by_source_type("CREDIT_CARD")

        assert [c.name for c in cards] == ["Amex", "Visa"]

    def test_find_by_invalid_source_type(self, db_session, as_user_one):
        with pytest.raises(ValidationError):
            TransactionSourceService(db_session).find_by_source_type("BARTER")
