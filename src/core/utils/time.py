"""
Time and identifier helpers.

Timestamps are UTC ISO-8601 strings so that the ``created_at`` range keys
of the folder and image indexes sort lexicographically in creation order.
"""

import uuid
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format.

    Example:
        2024-01-15T10:42:31.123456+00:00
    """
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def new_id(prefix: str) -> str:
    """Generate a unique, prefixed record identifier (e.g. ``fld_3f2a...``)."""
    return f"{prefix}{uuid.uuid4().hex}"
