"""Boundary validation of request bodies and query strings."""

from collections.abc import Iterable
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.models.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# (substring of pydantic's message, replacement), first match wins
MESSAGE_REWRITES: tuple[tuple[str, str], ...] = (
    ("field required", "This field is required"),
    ("valid email", "Please enter a valid email"),
    ("input should be a valid", "Invalid value type"),
)


def friendly_message(raw: str) -> str:
    message = raw.removeprefix("Value error,").strip()
    lowered = message.lower()

    for needle, replacement in MESSAGE_REWRITES:
        if needle in lowered:
            return replacement
    return message


def sanitize_validation_errors(errors: Iterable[dict[str, Any]]) -> list[dict[str, str]]:
    """Reduce pydantic errors to ``{"field", "message"}`` pairs.

    ``input``, ``ctx`` and ``url`` are dropped so request content never
    leaks back into responses or logs. Model-level errors have an empty
    ``loc`` and are reported against ``body``.
    """
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())) or "body",
            "message": friendly_message(err.get("msg", "Invalid value")),
        }
        for err in errors
    ]


def validate_request(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Parse ``data`` into ``model`` or raise a 400 with field-level details.

    A single problem becomes the error message itself; several are
    summarized as "Validation failed" with the list under ``details.errors``.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        errors = sanitize_validation_errors(exc.errors())
        raise ValidationError(
            message=errors[0]["message"] if len(errors) == 1 else "Validation failed",
            details={"errors": errors},
        ) from exc
