"""
Image query service for list and search operations.

Provides a coordination layer that applies text matching and pagination
to in-memory image collections. This service does not perform data
access and is intended to operate on pre-fetched, newest-first records.
"""

from aws_lambda_powertools import Logger

from core.filters.page_pagination import PagePagination
from core.filters.text_match_filter import TextMatchFilter
from core.models.errors import FilterError
from core.models.image import ImagePage, ImageRecord
from core.utils.constants import SERVICE_NAME

logger = Logger(service=SERVICE_NAME, UTC=True)


class ImageQueryFilter:
    """
    Service responsible for searching and paginating image metadata.

    This class orchestrates in-memory refinement strategies:
    - Text matching on name or tags (case-insensitive substring)
    - Page-based pagination
    """

    def __init__(self) -> None:
        self._text_filter = TextMatchFilter()
        self._pagination = PagePagination()

    def search(self, items: list[ImageRecord], *, search: str | None) -> list[ImageRecord]:
        """Keep the images whose name or tags contain ``search``."""
        return self._text_filter.apply(items, search)

    def paginate(self, items: list[ImageRecord], *, page: int, limit: int) -> ImagePage:
        """
        Cut one page out of the filtered items.

        Raises:
            FilterError: If pagination parameters are invalid
        """
        is_valid, error_message = self._pagination.validate(page, limit)
        if not is_valid:
            logger.error(
                "Invalid pagination parameters",
                extra={"page": page, "limit": limit, "error": error_message},
            )
            raise FilterError(message=error_message, details={"page": page, "limit": limit})

        images, pagination = self._pagination.paginate(items, page, limit)
        return ImagePage(images=images, pagination=pagination)

    def empty_page(self, *, page: int, limit: int) -> ImagePage:
        return ImagePage(images=[], pagination=self._pagination.get_page_info(page, limit, 0))
