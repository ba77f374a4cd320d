"""Request authentication for protected routes."""

from dataclasses import dataclass
from typing import Any

from core.config import Settings
from core.models.errors import UnauthorizedError
from core.security.tokens import decode_token
from core.utils.constants import BEARER_SCHEME
from core.utils.events import get_header


@dataclass(frozen=True)
class Identity:
    """The authenticated caller."""

    user_id: str


def bearer_token(event: dict[str, Any]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    header = get_header(event, "Authorization")

    if not header:
        raise UnauthorizedError(message="Not authorized, no token")

    scheme, _, token = header.strip().partition(" ")
    token = token.strip()

    if scheme.lower() != BEARER_SCHEME or not token:
        raise UnauthorizedError(message="Not authorized, no token")

    return token


def authenticate(event: dict[str, Any], *, settings: Settings) -> Identity:
    """Resolve the caller of a protected request.

    Raises:
        UnauthorizedError: If the credential is missing, malformed or invalid
    """
    user_id = decode_token(bearer_token(event), settings=settings)
    return Identity(user_id=user_id)
