"""
Repository Pattern for database access.

EntityRepository is the persistence collaborator of the generic entity
service: lookups by id, search-only and specification queries returning
pages, counts, and case-insensitive name queries (optionally restricted to
one owner).

Usage:
    from finance_api.services.crud.repository import EntityRepository

    repo = EntityRepository(
        TransactionSource,
        db,
        search_columns=[TransactionSource.name, TransactionSource.description],
        owner_column=TransactionSource.user_id,
        name_column=TransactionSource.name,
    )

    page = repo.find_all_by_specification(spec, PageRequest.of(0, 20))
    source = repo.find_by_name_ignore_case("wallet", owner_id=1)
"""

from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import exists as sql_exists
from sqlalchemy import func, inspect, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from finance_api.models import Base
from finance_api.services.crud.pagination import Page, PageRequest, Sort
from finance_api.services.crud.specification import (
    MatchAll,
    Specification,
    search_specification,
)
from shared.utils.exceptions import ValidationError
from shared.utils.validators import normalize_search_term

ModelT = TypeVar("ModelT", bound=Base)


class EntityRepository(Generic[ModelT]):
    """
    Repository over one model class.

    Writes are flushed, never committed: the service owns the transaction.
    """

    def __init__(
        self,
        model: type[ModelT],
        session: Session,
        *,
        search_columns: Sequence[Any] = (),
        owner_column: Any | None = None,
        name_column: Any | None = None,
    ):
        self._model = model
        self._session = session
        self._search_columns = list(search_columns)
        self._owner_column = owner_column
        self._name_column = name_column

    @property
    def model(self) -> type[ModelT]:
        """The SQLAlchemy model class."""
        return self._model

    @property
    def session(self) -> Session:
        """The database session."""
        return self._session

    def _base_query(self) -> Select:
        """Create base select query."""
        return select(self._model)

    # =========================================================================
    # By id
    # =========================================================================

    def find_by_id(self, entity_id: Any) -> ModelT | None:
        query = self._base_query().where(self._model.id == entity_id)
        return self._session.scalar(query)

    def exists_by_id(self, entity_id: Any) -> bool:
        query = select(sql_exists().where(self._model.id == entity_id))
        return self._session.scalar(query) or False

    def save(self, entity: ModelT) -> ModelT:
        """Add entity to session and flush (not committed)."""
        self._session.add(entity)
        self._session.flush()
        return entity

    def delete_by_id(self, entity_id: Any) -> None:
        """Delete entity by id and flush (not committed). Missing ids are ignored."""
        entity = self.find_by_id(entity_id)
        if entity is not None:
            self._session.delete(entity)
            self._session.flush()

    # =========================================================================
    # Queries
    # =========================================================================

    def find_all_by_search(
        self,
        search: Optional[str],
        page_request: PageRequest,
    ) -> Page[ModelT]:
        """
        Page of entities whose searchable columns contain the term (ignoring
        case). A blank term matches everything.
        """
        term = normalize_search_term(search)
        if term is None:
            spec: Specification = MatchAll()
        else:
            spec = search_specification(self._search_columns, term)
        return self._paginate(spec, page_request)

    def find_all_by_specification(
        self,
        spec: Specification,
        page_request: PageRequest,
    ) -> Page[ModelT]:
        return self._paginate(spec, page_request)

    def count(self, spec: Specification | None = None) -> int:
        query = select(func.count()).select_from(self._model)
        if spec is not None:
            query = query.where(spec.to_expression())
        return self._session.scalar(query) or 0

    # =========================================================================
    # Names
    # =========================================================================

    def _name_query(self, name: str, owner_id: Any | None) -> Select:
        column = self._require_name_column()
        query = self._base_query().where(func.lower(column) == name.lower())
        return self._apply_owner(query, owner_id)

    def find_by_name_ignore_case(self, name: str, owner_id: Any | None = None) -> ModelT | None:
        query = self._name_query(name, owner_id).order_by(self._model.id).limit(1)
        return self._session.scalar(query)

    def exists_by_name_ignore_case(self, name: str, owner_id: Any | None = None) -> bool:
        column = self._require_name_column()
        condition = func.lower(column) == name.lower()
        if owner_id is not None:
            condition = condition & (self._require_owner_column() == owner_id)
        query = select(sql_exists().where(condition))
        return self._session.scalar(query) or False

    def find_all_order_by_name(self, owner_id: Any | None = None) -> Sequence[ModelT]:
        column = self._require_name_column()
        query = self._apply_owner(self._base_query(), owner_id)
        query = query.order_by(column.asc(), self._model.id.asc())
        return self._session.scalars(query).all()

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _require_name_column(self) -> Any:
        if self._name_column is None:
            raise AttributeError(
                f"Model {self._model.__name__} has no name column configured."
            )
        return self._name_column

    def _require_owner_column(self) -> Any:
        if self._owner_column is None:
            raise AttributeError(
                f"Model {self._model.__name__} has no owner column configured."
            )
        return self._owner_column

    def _apply_owner(self, query: Select, owner_id: Any | None) -> Select:
        if owner_id is None:
            return query
        return query.where(self._require_owner_column() == owner_id)

    def _order_by(self, sort: Sort) -> list[Any]:
        """
        Translate a Sort into ORDER BY clauses, id ascending last.

        Raises:
            ValidationError: If a sort field is not a mapped column.
        """
        column_attrs = inspect(self._model).column_attrs
        clauses: list[Any] = []
        sorted_by_id = False

        for order in sort:
            if order.field not in column_attrs:
                raise ValidationError(
                    f"Invalid sort field: {order.field}",
                    field="sort_by",
                    value=order.field,
                )
            column = getattr(self._model, order.field)
            clauses.append(column.desc() if order.is_descending else column.asc())
            sorted_by_id = sorted_by_id or order.field == "id"

        if not sorted_by_id:
            clauses.append(self._model.id.asc())
        return clauses

    def _paginate(self, spec: Specification, page_request: PageRequest) -> Page[ModelT]:
        expression = spec.to_expression()
        order_by = self._order_by(page_request.sort)

        total = self._session.scalar(
            select(func.count()).select_from(self._model).where(expression)
        ) or 0

        query = self._base_query().where(expression).order_by(*order_by)
        if page_request.is_paged:
            query = query.offset(page_request.offset).limit(page_request.size)

        items = list(self._session.scalars(query).all())
        return Page(items=items, page_request=page_request, total=total)
