"""Text search over image names and tags."""

from core.models.image import ImageRecord


class TextMatchFilter:
    """Filter images by a case-insensitive substring of name OR any tag.

    An image matches when the search term appears anywhere in its display
    name, or anywhere inside at least one of its tags.
    """

    @staticmethod
    def matches(image: ImageRecord, search_term: str) -> bool:
        needle = search_term.strip().lower()

        if needle in image.name.lower():
            return True

        return any(needle in tag.lower() for tag in image.tags)

    @classmethod
    def apply(cls, items: list[ImageRecord], search_term: str | None) -> list[ImageRecord]:
        """Return the items matching ``search_term``; a blank term keeps all."""
        if not cls.validate(search_term):
            return items

        return [item for item in items if cls.matches(item, search_term)]

    @staticmethod
    def validate(search_term: str | None) -> bool:
        """Whether ``search_term`` has anything to match on."""
        return bool(search_term and search_term.strip())
