"""
Page requests, sort orders and result pages.

A PageRequest is either paged (finite size) or unpaged (size None).
normalize_page_request() merges caller-supplied sort parameters into a
page request; an unpaged request that gains a sort becomes a single page
of Limits.UNPAGED_PAGE_SIZE so that "everything, sorted" stays a bounded
query.

Usage:
    from finance_api.services.crud.pagination import PageRequest, normalize_page_request

    request = normalize_page_request(PageRequest.of(0, 10), "name", "desc")
    page = service.find_all(page_request=request)
    page.items, page.total, page.total_pages
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, Iterator, Optional, TypeVar

from shared.config.constants import Limits, SortDirection
from shared.utils.exceptions import ValidationError

T = TypeVar("T")
R = TypeVar("R")


class Direction(str, Enum):
    ASC = SortDirection.ASC
    DESC = SortDirection.DESC

    @classmethod
    def from_string(cls, value: Optional[str]) -> "Direction":
        """DESC only for "desc" (any case); everything else, None included, is ASC."""
        if value is not None and value.lower() == SortDirection.DESC:
            return cls.DESC
        return cls.ASC


@dataclass(frozen=True)
class SortOrder:
    field: str
    direction: Direction = Direction.ASC

    @property
    def is_descending(self) -> bool:
        return self.direction is Direction.DESC


@dataclass(frozen=True)
class Sort:
    """Ordered sort specification. Empty means unsorted."""

    orders: tuple[SortOrder, ...] = ()

    @classmethod
    def by(cls, direction: Direction, *fields: str) -> "Sort":
        return cls(tuple(SortOrder(f, direction) for f in fields))

    @classmethod
    def unsorted(cls) -> "Sort":
        return cls()

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    def __iter__(self) -> Iterator[SortOrder]:
        return iter(self.orders)


@dataclass(frozen=True)
class PageRequest:
    """
    Page number (0-based), page size and sort.

    size=None means unpaged: every matching row, in a single page.
    """

    page: int = 0
    size: Optional[int] = None
    sort: Sort = field(default_factory=Sort.unsorted)

    @classmethod
    def of(cls, page: int, size: int, sort: Sort | None = None) -> "PageRequest":
        """
        Build a paged request.

        Raises:
            ValidationError: If page is negative or size is not positive.
        """
        if page < 0:
            raise ValidationError("Page index must not be less than zero", field="page", value=page)
        if size < 1:
            raise ValidationError("Page size must not be less than one", field="size", value=size)
        return cls(page=page, size=size, sort=sort or Sort.unsorted())

    @classmethod
    def unpaged(cls, sort: Sort | None = None) -> "PageRequest":
        return cls(page=0, size=None, sort=sort or Sort.unsorted())

    @property
    def is_paged(self) -> bool:
        return self.size is not None

    @property
    def offset(self) -> int:
        if self.size is None:
            return 0
        return self.page * self.size

    def with_sort(self, sort: Sort) -> "PageRequest":
        return PageRequest(page=self.page, size=self.size, sort=sort)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the total number of matching rows."""

    items: list[T]
    page_request: PageRequest
    total: int

    @property
    def number(self) -> int:
        return self.page_request.page

    @property
    def size(self) -> int:
        if self.page_request.size is None:
            return len(self.items)
        return self.page_request.size

    @property
    def total_pages(self) -> int:
        if self.page_request.size is None:
            return 1
        return math.ceil(self.total / self.page_request.size)

    @property
    def has_next(self) -> bool:
        return self.number + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.number > 0

    def map(self, fn: Callable[[T], R]) -> "Page[R]":
        return Page(items=[fn(item) for item in self.items], page_request=self.page_request, total=self.total)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def normalize_page_request(
    page_request: PageRequest,
    sort_by: Optional[str],
    sort_direction: Optional[str],
) -> PageRequest:
    """
    Merge an optional sort field and direction into a page request.

    - Blank or missing sort_by: the request is returned unchanged.
    - Otherwise the new sort fully replaces any sort the request carried;
      direction is DESC only for "desc" (any case).
    - A paged request keeps its page and size.
    - An unpaged request becomes page 0 of Limits.UNPAGED_PAGE_SIZE.
    """
    if sort_by is None or not sort_by.strip():
        return page_request

    sort = Sort.by(Direction.from_string(sort_direction), sort_by.strip())

    if page_request.is_paged:
        return page_request.with_sort(sort)

    return PageRequest(page=0, size=Limits.UNPAGED_PAGE_SIZE, sort=sort)
