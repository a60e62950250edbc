"""
CRUD core - Generic building blocks for entity services.

Provides:
- EntityModule: Per-entity capabilities (mapping, validation, ownership)
- EntityRepository: Data access with search/specification paging
- Specification Pattern: Composable query predicates and the builder
- OwnershipGuard: Fail-closed per-user isolation
- NameBasedOperations: Case-insensitive name lookups and uniqueness
- Pagination: PageRequest, Sort, Page, normalize_page_request
"""

from .contracts import EntityModule, HasId, HasName, HasOwner
from .name_based import NameBasedOperations
from .ownership import OwnershipGuard
from .pagination import (
    Direction,
    Page,
    PageRequest,
    Sort,
    SortOrder,
    normalize_page_request,
)
from .repository import EntityRepository
from .specification import (
    AndSpecification,
    AtLeast,
    AtMost,
    ContainsIgnoreCase,
    EqualsIgnoreCase,
    FieldEquals,
    FlagIs,
    MatchAll,
    MatchNone,
    NotSpecification,
    OrSpecification,
    Specification,
    SpecificationBuilder,
    all_of,
    any_of,
)

__all__ = [
    # contracts
    "EntityModule",
    "HasId",
    "HasName",
    "HasOwner",
    # name-based
    "NameBasedOperations",
    # ownership
    "OwnershipGuard",
    # pagination
    "Direction",
    "Page",
    "PageRequest",
    "Sort",
    "SortOrder",
    "normalize_page_request",
    # repository
    "EntityRepository",
    # specification
    "AndSpecification",
    "AtLeast",
    "AtMost",
    "ContainsIgnoreCase",
    "EqualsIgnoreCase",
    "FieldEquals",
    "FlagIs",
    "MatchAll",
    "MatchNone",
    "NotSpecification",
    "OrSpecification",
    "Specification",
    "SpecificationBuilder",
    "all_of",
    "any_of",
]
