"""Signed bearer tokens (JWT) identifying a user."""

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from core.config import Settings
from core.models.errors import UnauthorizedError
from core.utils.constants import ERROR_CODE_INVALID_TOKEN


def issue_token(user_id: str, *, settings: Settings, now: datetime | None = None) -> str:
    """Sign a token whose subject is ``user_id``."""
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(days=settings.jwt_expires_days)).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, *, settings: Settings) -> str:
    """Verify a token and return its subject.

    Raises:
        UnauthorizedError: If the signature is wrong, the token expired,
            or it carries no subject
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise UnauthorizedError(
            message="Not authorized, token expired",
            error_code=ERROR_CODE_INVALID_TOKEN,
        ) from exc
    except JWTError as exc:
        raise UnauthorizedError(
            message="Not authorized, token failed",
            error_code=ERROR_CODE_INVALID_TOKEN,
        ) from exc

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise UnauthorizedError(
            message="Not authorized, token failed",
            error_code=ERROR_CODE_INVALID_TOKEN,
        )

    return subject
