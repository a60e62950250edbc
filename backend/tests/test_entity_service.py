"""
Tests for the generic EntityService.

Exercised through TransactionSourceService (tenant-scoped, name-based) and
TransactionCategoryService (global, name-based).
"""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from finance_api.models import TransactionCategory, TransactionSource
from finance_api.schemas import TransactionCategoryDTO, TransactionSourceDTO
from finance_api.services.crud.pagination import PageRequest
from finance_api.services.crud.repository import EntityRepository
from finance_api.services.domain import TransactionCategoryService, TransactionSourceService
from shared.config.constants import SourceType
from shared.security.tenant_context import tenant_scope
from shared.utils.exceptions import (
    DatabaseError,
    DuplicateNameError,
    NotFoundError,
    OwnershipDeniedError,
    TenantContextUnavailableError,
    ValidationError,
)


def _source_dto(name="Wallet", **kwargs):
    kwargs.setdefault("source_type", SourceType.CASH)
    return TransactionSourceDTO(name=name, **kwargs)


def _spy_repository(db_session, module):
    repo = EntityRepository(
        module.model,
        db_session,
        search_columns=module.search_columns,
        owner_column=module.owner_column,
        name_column=module.name_column,
    )
    return MagicMock(wraps=repo)


class TestFindAll:
    """Tests for find_all()."""

    def test_active_sources_of_current_tenant_sorted_by_name(
        self, db_session, user_one, user_two, make_source
    ):
        make_source(user_one, "Wallet")
        make_source(user_one, "Bank")
        make_source(user_one, "Closed", is_active=False)
        make_source(user_two, "Alpha")
        make_source(user_two, "Zeta", is_active=False)

        with tenant_scope(user_one.id):
            page = TransactionSourceService(db_session).find_all(
                search=None,
                filters={"is_active": True},
                sort_by="name",
                sort_direction="asc",
                page_request=PageRequest.of(0, 10),
            )

        assert [s.name for s in page.items] == ["Bank", "Wallet"]
        assert page.total == 2
        assert all(s.user_id == user_one.id for s in page.items)

    def test_paging(self, db_session, as_user_one, make_source):
        for name in ["A", "B", "C", "D", "E"]:
            make_source(as_user_one, name)
        service = TransactionSourceService(db_session)

        page = service.find_all(sort_by="name", sort_direction="desc", page_request=PageRequest.of(1, 2))

        assert [s.name for s in page.items] == ["C", "B"]
        assert page.total == 5
        assert page.total_pages == 3

    def test_default_is_unpaged_by_id(self, db_session, make_category):
        for name in ["Rent", "Food", "Travel"]:
            make_category(name)

        page = TransactionCategoryService(db_session).find_all()

        assert [c.name for c in page.items] == ["Rent", "Food", "Travel"]
        assert page.total_pages == 1

    def test_unknown_sort_field_rejected(self, db_session, make_category):
        make_category("Food")

        with pytest.raises(ValidationError):
            TransactionCategoryService(db_session).find_all(sort_by="color")

    def test_caller_filters_are_mutated_in_place(self, db_session, as_user_one):
        filters = {}

        TransactionSourceService(db_session).find_all(filters=filters)

        assert filters == {"user_id": as_user_one.id}

    def test_list_all(self, db_session, as_user_one, make_source):
        make_source(as_user_one, "Wallet")

        result = TransactionSourceService(db_session).list_all(search="wall")

        assert [s.name for s in result] == ["Wallet"]


class TestPathSelection:
    """Search-only vs specification path."""

    def test_global_entity_without_filters_uses_search_path(self, db_session, make_category):
        make_category("Fixed costs")
        make_category("Food")
        service = TransactionCategoryService(db_session)
        spy = _spy_repository(db_session, service.module)
        service = TransactionCategoryService(db_session, repository=spy)

        page = service.find_all(search="x", filters={})

        spy.find_all_by_search.assert_called_once()
        spy.find_all_by_specification.assert_not_called()
        assert [c.name for c in page.items] == ["Fixed costs"]

    def test_global_entity_with_filters_uses_specification_path(self, db_session, make_category):
        make_category("Food")
        service = TransactionCategoryService(db_session)
        spy = _spy_repository(db_session, service.module)
        service = TransactionCategoryService(db_session, repository=spy)

        service.find_all(filters={"name": "foo"})

        spy.find_all_by_specification.assert_called_once()
        spy.find_all_by_search.assert_not_called()

    def test_tenant_entity_with_empty_filters_uses_specification_path(
        self, db_session, as_user_one, make_source
    ):
        make_source(as_user_one, "Box")
        make_source(as_user_one, "Wallet")
        service = TransactionSourceService(db_session)
        spy = _spy_repository(db_session, service.module)
        service = TransactionSourceService(db_session, repository=spy)

        page = service.find_all(search="x", filters={})

        spy.find_all_by_specification.assert_called_once()
        spy.find_all_by_search.assert_not_called()

        # Same rows as the plain search when only this tenant has data
        plain = EntityRepository(
            TransactionSource, db_session, search_columns=service.module.search_columns
        ).find_all_by_search("x", PageRequest.unpaged())
        assert [s.name for s in page.items] == [s.name for s in plain.items] == ["Box"]


class TestFindById:

    def test_idempotent_reads(self, db_session, as_user_one, make_source):
        source = make_source(as_user_one, "Wallet")
        service = TransactionSourceService(db_session)

        assert service.find_by_id(source.id) == service.find_by_id(source.id)

    def test_missing_returns_none(self, db_session, as_user_one):
        assert TransactionSourceService(db_session).find_by_id(999) is None

    def test_get_by_id_missing_raises(self, db_session, as_user_one):
        with pytest.raises(NotFoundError) as exc_info:
            TransactionSourceService(db_session).get_by_id(999)
        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("entity_id", [None, 0, -3])
    def test_invalid_id_rejected(self, db_session, as_user_one, entity_id):
        with pytest.raises(ValidationError):
            TransactionSourceService(db_session).find_by_id(entity_id)


class TestOwnershipIsolation:
    """Another tenant can neither read nor change a record."""

    @pytest.fixture
    def foreign_source(self, user_one, user_two, make_source):
        return make_source(user_two, "Their Wallet")

    def test_find_by_id_denied(self, db_session, as_user_one, foreign_source):
        with pytest.raises(OwnershipDeniedError):
            TransactionSourceService(db_session).find_by_id(foreign_source.id)

    def test_update_denied_and_record_unchanged(self, db_session, as_user_one, foreign_source):
        with pytest.raises(OwnershipDeniedError):
            TransactionSourceService(db_session).update(foreign_source.id, _source_dto("Mine now"))

        db_session.refresh(foreign_source)
        assert foreign_source.name == "Their Wallet"

    def test_delete_denied_and_record_kept(self, db_session, as_user_one, foreign_source):
        service = TransactionSourceService(db_session)

        with pytest.raises(OwnershipDeniedError):
            service.delete(foreign_source.id)

        assert service.exists_by_id(foreign_source.id)

    def test_listing_excludes_foreign_records(self, db_session, as_user_one, foreign_source):
        assert TransactionSourceService(db_session).find_all().items == []
        assert TransactionSourceService(db_session).count() == 0


class TestFailClosed:
    """Tenant-scoped operations without a current tenant."""

    @pytest.mark.parametrize("call", [
        lambda s: s.find_all(),
        lambda s: s.find_all(filters={"user_id": 1}),
        lambda s: s.list_all(search="wallet"),
        lambda s: s.find_by_id(1),
        lambda s: s.get_by_id(1),
        lambda s: s.create(_source_dto()),
        lambda s: s.update(1, _source_dto()),
        lambda s: s.delete(1),
        lambda s: s.exists_by_id(1),
        lambda s: s.count(),
        lambda s: s.count(filters={"user_id": 1}),
        lambda s: s.find_by_name("Wallet"),
        lambda s: s.exists_by_name("Wallet"),
        lambda s: s.find_all_ordered_by_name(),
    ])
    def test_raises_without_tenant(self, db_session, user_one, make_source, call):
        make_source(user_one, "Wallet")

        with pytest.raises(TenantContextUnavailableError):
            call(TransactionSourceService(db_session))

    def test_explicit_provider_overrides_context(self, db_session, user_one, make_source):
        make_source(user_one, "Wallet")

        service = TransactionSourceService(db_session, tenant_provider=lambda: user_one.id)

        assert [s.name for s in service.find_all().items] == ["Wallet"]


class TestCreate:

    def test_assigns_current_tenant(self, db_session, as_user_one):
        created = TransactionSourceService(db_session).create(_source_dto("Wallet", user_id=999))

        assert created.id is not None
        assert created.user_id == as_user_one.id
        assert created.is_active is True

    def test_duplicate_name_any_case(self, db_session, as_user_one):
        service = TransactionSourceService(db_session)
        service.create(_source_dto("Alpha"))

        with pytest.raises(DuplicateNameError) as exc_info:
            service.create(_source_dto("alpha"))
        assert exc_info.value.status_code == 409

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_blank_name_rejected(self, db_session, as_user_one, name):
        with pytest.raises(ValidationError):
            TransactionSourceService(db_session).create(_source_dto(name))

    def test_global_entity_needs_no_tenant(self, db_session):
        created = TransactionCategoryService(db_session).create(TransactionCategoryDTO(name="Food"))

        assert created.id is not None
        assert db_session.get(TransactionCategory, created.id).name == "Food"

    def test_database_failure_wrapped(self, db_session, as_user_one):
        service = TransactionSourceService(db_session)

        with patch(
            "finance_api.services.base_service.safe_commit",
            side_effect=SQLAlchemyError("connection lost"),
        ):
            with pytest.raises(DatabaseError) as exc_info:
                service.create(_source_dto("Wallet"))

        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)


class TestUpdate:

    def test_keeping_own_name_is_allowed(self, db_session, as_user_one):
        service = TransactionSourceService(db_session)
        created = service.create(_source_dto("Alpha"))

        updated = service.update(created.id, _source_dto("Alpha", description="same name"))

        assert updated.name == "Alpha"
        assert updated.description == "same name"

    def test_case_change_of_own_name_is_allowed(self, db_session, as_user_one):
        service = TransactionSourceService(db_session)
        created = service.create(_source_dto("Alpha"))

        assert service.update(created.id, _source_dto("ALPHA")).name == "ALPHA"

    def test_taking_another_name_rejected(self, db_session, as_user_one):
        service = TransactionSourceService(db_session)
        service.create(_source_dto("Alpha"))
        beta = service.create(_source_dto("Beta"))

        with pytest.raises(DuplicateNameError):
            service.update(beta.id, _source_dto("alpha"))

    def test_missing_entity(self, db_session, as_user_one):
        with pytest.raises(NotFoundError):
            TransactionSourceService(db_session).update(404, _source_dto())

    def test_invalid_id(self, db_session, as_user_one):
        with pytest.raises(ValidationError):
            TransactionSourceService(db_session).update(0, _source_dto())

    def test_rejected_entity_is_rolled_back(self, db_session, as_user_one, make_source):
        source = make_source(as_user_one, "Wallet")
        service = TransactionSourceService(db_session)

        with patch.object(
            service.module, "validate_entity", side_effect=ValidationError("rejected")
        ):
            with pytest.raises(ValidationError):
                service.update(source.id, _source_dto("Renamed"))

        service.create(_source_dto("Bank"))
        db_session.expire_all()

        assert db_session.get(TransactionSource, source.id).name == "Wallet"


class TestDeleteExistsCount:

    def test_delete(self, db_session, as_user_one, make_source):
        source = make_source(as_user_one, "Wallet")
        service = TransactionSourceService(db_session)

        service.delete(source.id)

        assert service.find_by_id(source.id) is None
        assert not service.exists_by_id(source.id)

    def test_delete_missing(self, db_session, as_user_one):
        with pytest.raises(NotFoundError):
            TransactionSourceService(db_session).delete(12345)

    def test_exists_by_id_rejects_invalid_id(self, db_session):
        with pytest.raises(ValidationError):
            TransactionCategoryService(db_session).exists_by_id(None)

    def test_count_with_search_and_filters(self, db_session, as_user_one, user_two, make_source):
        make_source(as_user_one, "Wallet")
        make_source(as_user_one, "Wallet backup", is_active=False)
        make_source(as_user_one, "Bank")
        make_source(user_two, "Wallet")
        service = TransactionSourceService(db_session)

        assert service.count() == 3
        assert service.count(search="wallet") == 2
        assert service.count(search="wallet", filters={"is_active": True}) == 1
