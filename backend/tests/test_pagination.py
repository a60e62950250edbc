"""
Tests for page requests and sort normalization.
"""

import pytest

from finance_api.services.crud.pagination import (
    Direction,
    Page,
    PageRequest,
    Sort,
    SortOrder,
    normalize_page_request,
)
from shared.config.constants import Limits
from shared.utils.exceptions import ValidationError


class TestNormalizePageRequest:
    """Tests for normalize_page_request()."""

    @pytest.mark.parametrize("sort_by", [None, "", "   "])
    def test_blank_sort_by_returns_input_unchanged(self, sort_by):
        request = PageRequest.of(2, 5, Sort.by(Direction.DESC, "created_at"))

        assert normalize_page_request(request, sort_by, "asc") is request

    def test_missing_direction_is_ascending(self):
        request = PageRequest.of(0, 10)

        result = normalize_page_request(request, "email", None)

        assert result.sort.orders == (SortOrder("email", Direction.ASC),)
        assert result == normalize_page_request(request, "email", "asc")

    @pytest.mark.parametrize("direction", ["desc", "DESC", "Desc"])
    def test_desc_in_any_case_is_descending(self, direction):
        result = normalize_page_request(PageRequest.of(0, 10), "email", direction)

        assert result.sort.orders == (SortOrder("email", Direction.DESC),)

    @pytest.mark.parametrize("direction", ["", "descending", "up", "ASC"])
    def test_other_directions_are_ascending(self, direction):
        result = normalize_page_request(PageRequest.of(0, 10), "email", direction)

        assert result.sort.orders[0].direction is Direction.ASC

    def test_paged_request_keeps_page_and_size(self):
        request = PageRequest.of(3, 25, Sort.by(Direction.DESC, "id"))

        result = normalize_page_request(request, "name", "asc")

        assert result.page == 3
        assert result.size == 25

    def test_new_sort_replaces_existing_sort(self):
        request = PageRequest.of(0, 10, Sort.by(Direction.DESC, "id", "created_at"))

        result = normalize_page_request(request, "name", None)

        assert [o.field for o in result.sort] == ["name"]

    def test_unpaged_request_becomes_single_max_size_page(self):
        result = normalize_page_request(PageRequest.unpaged(), "name", "desc")

        assert result.page == 0
        assert result.size == Limits.UNPAGED_PAGE_SIZE
        assert result.is_paged
        assert result.sort.orders == (SortOrder("name", Direction.DESC),)

    def test_unpaged_request_without_sort_stays_unpaged(self):
        request = PageRequest.unpaged()

        result = normalize_page_request(request, None, None)

        assert not result.is_paged


class TestPageRequest:
    """Tests for PageRequest construction."""

    def test_negative_page_rejected(self):
        with pytest.raises(ValidationError):
            PageRequest.of(-1, 10)

    @pytest.mark.parametrize("size", [0, -5])
    def test_non_positive_size_rejected(self, size):
        with pytest.raises(ValidationError) as exc_info:
            PageRequest.of(0, size)
        assert exc_info.value.status_code == 400

    def test_offset(self):
        assert PageRequest.of(3, 20).offset == 60
        assert PageRequest.unpaged().offset == 0

    def test_default_sort_is_unsorted(self):
        assert not PageRequest.of(0, 10).sort.is_sorted


class TestPage:
    """Tests for Page metadata."""

    def test_total_pages_rounds_up(self):
        page = Page(items=[1, 2], page_request=PageRequest.of(0, 2), total=5)

        assert page.total_pages == 3
        assert page.has_next
        assert not page.has_previous

    def test_last_page(self):
        page = Page(items=[5], page_request=PageRequest.of(2, 2), total=5)

        assert not page.has_next
        assert page.has_previous
        assert page.number == 2

    def test_unpaged_is_single_page(self):
        page = Page(items=[1, 2, 3], page_request=PageRequest.unpaged(), total=3)

        assert page.total_pages == 1
        assert page.size == 3
        assert not page.has_next

    def test_map_keeps_metadata(self):
        page = Page(items=[1, 2], page_request=PageRequest.of(1, 2), total=4)

        mapped = page.map(str)

        assert mapped.items == ["1", "2"]
        assert mapped.total == 4
        assert mapped.page_request == page.page_request
