"""
Specification Pattern for dynamic queries.

Specifications encapsulate query conditions and compose with logical
operators (&, |, ~). SpecificationBuilder turns a free-text search term and
a filter map into one specification, per call.

Usage:
    from finance_api.services.crud.specification import FieldEquals, FlagIs

    spec = FlagIs(TransactionSource.is_active, True) & FieldEquals(TransactionSource.user_id, 1)
    query = select(TransactionSource).where(spec.to_expression())
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional

from sqlalchemy import and_, false, func, not_, or_, true

from shared.config.constants import FilterKeys
from shared.config.logging import get_logger
from shared.utils.validators import escape_like_pattern, normalize_search_term

if TYPE_CHECKING:
    from finance_api.services.crud.contracts import EntityModule
    from finance_api.services.crud.ownership import OwnershipGuard

logger = get_logger(__name__)


class Specification:
    """
    Base class for query specifications.

    Subclass this and implement to_expression() to create
    reusable query building blocks.
    """

    def to_expression(self) -> Any:
        """
        Convert specification to SQLAlchemy expression.

        Must be implemented by subclasses.
        """
        raise NotImplementedError

    def __and__(self, other: "Specification") -> "AndSpecification":
        """Combine with AND."""
        return AndSpecification(self, other)

    def __or__(self, other: "Specification") -> "OrSpecification":
        """Combine with OR."""
        return OrSpecification(self, other)

    def __invert__(self) -> "NotSpecification":
        """Negate specification."""
        return NotSpecification(self)


class MatchAll(Specification):
    """Matches every row."""

    def to_expression(self) -> Any:
        return true()


class MatchNone(Specification):
    """Matches no row."""

    def to_expression(self) -> Any:
        return false()


class AndSpecification(Specification):
    """AND combination of specifications."""

    def __init__(self, *specs: Specification):
        self.specs = specs

    def to_expression(self) -> Any:
        return and_(*(s.to_expression() for s in self.specs))


class OrSpecification(Specification):
    """OR combination of specifications."""

    def __init__(self, *specs: Specification):
        self.specs = specs

    def to_expression(self) -> Any:
        return or_(*(s.to_expression() for s in self.specs))


class NotSpecification(Specification):
    """Negation of a specification."""

    def __init__(self, spec: Specification):
        self.spec = spec

    def to_expression(self) -> Any:
        return not_(self.spec.to_expression())


class FieldEquals(Specification):
    def __init__(self, column: Any, value: Any):
        self.column = column
        self.value = value

    def to_expression(self) -> Any:
        return self.column == self.value


class ContainsIgnoreCase(Specification):
    """Case-insensitive substring match. LIKE wildcards in the term match literally."""

    def __init__(self, column: Any, term: str):
        self.column = column
        self.term = term

    def to_expression(self) -> Any:
        return self.column.ilike(f"%{escape_like_pattern(self.term)}%", escape="\\")


class AtLeast(Specification):
    """Inclusive lower bound."""

    def __init__(self, column: Any, value: Any):
        self.column = column
        self.value = value

    def to_expression(self) -> Any:
        return self.column >= self.value


class AtMost(Specification):
    """Inclusive upper bound."""

    def __init__(self, column: Any, value: Any):
        self.column = column
        self.value = value

    def to_expression(self) -> Any:
        return self.column <= self.value


class EqualsIgnoreCase(Specification):
    def __init__(self, column: Any, value: str):
        self.column = column
        self.value = value

    def to_expression(self) -> Any:
        return func.lower(self.column) == self.value.lower()


class FlagIs(Specification):
    def __init__(self, column: Any, flag: bool):
        self.column = column
        self.flag = flag

    def to_expression(self) -> Any:
        return self.column.is_(self.flag)


def all_of(specs: Iterable[Specification]) -> Specification:
    """AND of the given specifications; MatchAll when there are none."""
    specs = list(specs)
    if not specs:
        return MatchAll()
    if len(specs) == 1:
        return specs[0]
    return AndSpecification(*specs)


def any_of(specs: Iterable[Specification]) -> Specification:
    """OR of the given specifications; MatchNone when there are none."""
    specs = list(specs)
    if not specs:
        return MatchNone()
    if len(specs) == 1:
        return specs[0]
    return OrSpecification(*specs)


def search_specification(columns: Iterable[Any], term: str) -> Specification:
    """Free-text clause: the term appears in any of the columns."""
    return any_of(ContainsIgnoreCase(column, term) for column in columns)


def is_true_value(value: Any) -> bool:
    """True for the boolean True or the string "true" (any case)."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


class SpecificationBuilder:
    """
    Compiles a search term and a filter map into a single specification.

    Steps, in order:
    1. Tenant-scoped entities get the owner key injected into the filter
       map (first write wins, the caller's dict is mutated in place).
       A missing tenant fails the call.
    2. A non-blank search term adds an OR clause over the search columns.
    3. Each non-None filter entry adds a clause:
       user_id -> owner equality, name -> contains (ignore case),
       is_active -> flag, other keys -> the entity module's override.
       Keys nobody understands are ignored (debug log).
    4. Everything is AND-ed together; no clauses means MatchAll.

    A new specification is built on every call.
    """

    def __init__(self, module: "EntityModule", guard: "OwnershipGuard"):
        self._module = module
        self._guard = guard

    def build(self, search: Optional[str], filters: Optional[dict[str, Any]]) -> Specification:
        specs: list[Specification] = []

        filters = self._guard.inject_owner_filter(filters)

        term = normalize_search_term(search)
        if term is not None:
            specs.append(search_specification(self._module.search_columns, term))

        for key, value in filters.items():
            if value is None:
                continue
            spec = self._filter_specification(key, value)
            if spec is None:
                logger.debug(
                    "Ignoring unsupported filter",
                    entity=self._module.display_name,
                    filter_key=key,
                )
                continue
            specs.append(spec)

        return all_of(specs)

    def _filter_specification(self, key: str, value: Any) -> Optional[Specification]:
        module = self._module

        if key == FilterKeys.USER_ID:
            column = module.owner_column
            return FieldEquals(column, value) if column is not None else None

        if key == FilterKeys.NAME:
            column = module.name_column
            if column is None or not str(value).strip():
                return None
            return ContainsIgnoreCase(column, str(value))

        if key == FilterKeys.IS_ACTIVE:
            column = module.active_column
            return FlagIs(column, is_true_value(value)) if column is not None else None

        return module.filter_specification(key, value)
