"""
Page-based pagination utilities.
"""

from typing import TypeVar

from core.models.pagination import PaginationInfo
from core.utils.constants import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    MIN_LIMIT,
)

ItemT = TypeVar("ItemT")


class PagePagination:
    """
    Page-based pagination helper.

    Typical usage:
    1. Validate page and limit parameters
    2. Slice the page out of the full, ordered result list
    3. Return the page along with its metadata
    """

    @staticmethod
    def paginate(
        items: list[ItemT],
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> tuple[list[ItemT], PaginationInfo]:
        """
        Return the ``page``-th slice of ``limit`` items plus its metadata.

        Example:
            items = [1, 2, 3, 4, 5]
            page = 2
            limit = 2

            → ([3, 4], PaginationInfo(page=2, limit=2, total=5, total_pages=3, has_more=True))
        """
        total = len(items)
        offset = (page - 1) * limit

        return items[offset : offset + limit], PagePagination.get_page_info(page, limit, total)

    @staticmethod
    def validate(page: int, limit: int) -> tuple[bool, str]:
        """
        Validate pagination parameters.

        Validation rules:
        - page must be at least 1
        - limit must be within [MIN_LIMIT, MAX_LIMIT]

        Returns:
            A tuple of:
            - is_valid: Whether parameters are valid
            - error_message: Human-readable error message if invalid
        """
        if page < 1:
            return False, "Page must be at least 1"

        if limit < MIN_LIMIT:
            return False, f"Limit must be at least {MIN_LIMIT}"

        if limit > MAX_LIMIT:
            return False, f"Limit must not exceed {MAX_LIMIT}"

        return True, ""

    @staticmethod
    def get_page_info(page: int, limit: int, total: int) -> PaginationInfo:
        """
        Build pagination metadata for API responses.

        Notes:
            - Page numbering starts at 1
            - total_pages is rounded up
        """
        total_pages = (total + limit - 1) // limit if limit > 0 else 0

        return PaginationInfo(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_more=page * limit < total,
        )
