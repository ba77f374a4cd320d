import pytest

from core.filters.page_pagination import PagePagination


class TestPagePagination:
    def test_middle_page(self) -> None:
        items, info = PagePagination.paginate([1, 2, 3, 4, 5], page=2, limit=2)

        assert items == [3, 4]
        assert info.total == 5
        assert info.total_pages == 3
        assert info.has_more is True

    def test_last_page(self) -> None:
        items, info = PagePagination.paginate([1, 2, 3, 4, 5], page=3, limit=2)

        assert items == [5]
        assert info.has_more is False

    def test_page_past_the_end_is_empty(self) -> None:
        items, info = PagePagination.paginate([1, 2, 3], page=5, limit=2)

        assert items == []
        assert info.total == 3
        assert info.has_more is False

    def test_empty_collection(self) -> None:
        items, info = PagePagination.paginate([], page=1, limit=20)

        assert items == []
        assert info.total_pages == 0
        assert info.has_more is False

    def test_exact_multiple(self) -> None:
        info = PagePagination.get_page_info(page=2, limit=10, total=20)

        assert info.total_pages == 2
        assert info.has_more is False

    @pytest.mark.parametrize(
        ("page", "limit", "message"),
        [
            (0, 20, "Page must be at least 1"),
            (1, 0, "Limit must be at least 1"),
            (1, 101, "Limit must not exceed 100"),
        ],
    )
    def test_validate_rejects(self, page, limit, message) -> None:
        assert PagePagination.validate(page, limit) == (False, message)

    def test_validate_accepts_bounds(self) -> None:
        assert PagePagination.validate(1, 1) == (True, "")
        assert PagePagination.validate(7, 100) == (True, "")
