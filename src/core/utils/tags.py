"""Tag normalization shared by upload and update requests."""

from typing import Any

from core.utils.constants import MAX_TAGS, TAG_MAX_LENGTH


def parse_tags(value: Any) -> list[str]:
    """
    Normalize free-text tags.

    Accepts:
    - comma-separated string
    - list of strings

    Each tag is trimmed and lower-cased and empty entries are dropped.
    Order and repeated tags are kept as given.

    Raises:
        ValueError: On unsupported input, too many tags or an over-long tag
    """
    if value is None:
        return []

    if isinstance(value, str):
        raw_tags = value.split(",")
    elif isinstance(value, list):
        raw_tags = [str(t) for t in value]
    else:
        raise ValueError("tags must be a string or list of strings")

    cleaned = (t.strip().lower() for t in raw_tags)
    tags: list[str] = [t for t in cleaned if t]

    if len(tags) > MAX_TAGS:
        raise ValueError(f"Maximum {MAX_TAGS} tags allowed")

    too_long = [t for t in tags if len(t) > TAG_MAX_LENGTH]
    if too_long:
        raise ValueError(f"Tags must be at most {TAG_MAX_LENGTH} characters")

    return tags
