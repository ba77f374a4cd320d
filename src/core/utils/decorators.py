"""
Error boundary shared by every API Gateway handler.

Handlers raise; ``api_gateway_handler`` turns whatever escapes into the
standard error envelope, so no handler builds an error response itself.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger

from core.config import get_settings
from core.models.errors import OrganizerError
from core.utils.constants import SERVICE_NAME
from core.utils.response import ResponseBuilder

logger = Logger(service=SERVICE_NAME, UTC=True)

JsonDict = dict[str, Any]
Handler = Callable[[dict[str, Any], Any], JsonDict]

# Messages that are already safe and meaningful for clients
CLIENT_SAFE_PREFIXES = (
    "Invalid",
    "Missing",
    "Must",
    "Cannot",
    "Image",
    "Folder",
    "File",
    "User",
)


@dataclass(frozen=True)
class BuiltinMapping:
    """How a built-in exception that escaped a handler is reported."""

    types: tuple[type[Exception], ...]
    status: HTTPStatus
    message: str | None = None

    @property
    def server_side(self) -> bool:
        return self.status >= HTTPStatus.INTERNAL_SERVER_ERROR


# First match wins; KeyError must hit the 400 row before LookupError
BUILTIN_MAPPINGS: tuple[BuiltinMapping, ...] = (
    BuiltinMapping((ValueError, KeyError, TypeError, AttributeError), HTTPStatus.BAD_REQUEST),
    BuiltinMapping((LookupError,), HTTPStatus.NOT_FOUND, "The requested resource was not found."),
    BuiltinMapping(
        (TimeoutError,),
        HTTPStatus.GATEWAY_TIMEOUT,
        "The request took too long to process. Please try again.",
    ),
    BuiltinMapping(
        (ConnectionError,),
        HTTPStatus.SERVICE_UNAVAILABLE,
        "Unable to connect to required services. Please try again later.",
    ),
)

UNEXPECTED = BuiltinMapping(
    (Exception,),
    HTTPStatus.INTERNAL_SERVER_ERROR,
    "We're experiencing technical difficulties. Please try again in a few moments.",
)


def client_message(exc: Exception) -> str:
    """Message for a 400 raised by a built-in exception."""
    text = str(exc)
    if text and text.startswith(CLIENT_SAFE_PREFIXES):
        return text

    if isinstance(exc, (KeyError, AttributeError)):
        return "A required field is missing. Please ensure all required fields are provided."
    if isinstance(exc, TypeError):
        return "The data format is incorrect. Please check the request format."
    return "The provided data is invalid. Please check your input and try again."


def debug_detail(exc: BaseException) -> str | None:
    """``Type: message`` of the root cause, only in development."""
    try:
        development = get_settings().is_development
    except Exception:  # noqa: BLE001 - configuration itself may be what failed
        development = False

    return f"{type(exc).__name__}: {exc}" if development else None


def configured_cors_origin() -> str | None:
    try:
        return get_settings().cors_origin
    except Exception:  # noqa: BLE001 - fall back to the default origin
        return None


def log_failure(exc: Exception, *, handler_name: str, request_id: str | None, server_side: bool) -> None:
    log_extra: dict[str, Any] = {
        "handler": handler_name,
        "request_id": request_id,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }
    if isinstance(exc, OrganizerError):
        log_extra["error_code"] = exc.error_code

    if server_side:
        logger.exception("Request failed", extra=log_extra)
    else:
        logger.warning("Request rejected", extra=log_extra)


def builtin_response(exc: Exception, *, request_id: str | None, cors_origin: str | None) -> tuple[JsonDict, bool]:
    mapping = next((m for m in BUILTIN_MAPPINGS if isinstance(exc, m.types)), UNEXPECTED)

    response = ResponseBuilder.error(
        mapping.status,
        mapping.message or client_message(exc),
        debug=debug_detail(exc) if mapping.server_side else None,
        request_id=request_id,
        cors_origin=cors_origin,
    )
    return response, mapping.server_side


def api_gateway_handler(func: Handler) -> Handler:
    """
    Wrap an API Gateway proxy handler.

    - ``OPTIONS`` requests are answered with an empty 204 before the handler runs
    - ``OrganizerError`` is rendered with the status its class declares
    - built-in exceptions are mapped through ``BUILTIN_MAPPINGS``
    - server-side failures carry ``debug`` only in development

    Example:
        @api_gateway_handler
        def list_handler(event, context):
            return ResponseBuilder.ok({"message": "Folders retrieved", "data": []})
    """

    @wraps(func)
    def wrapper(event: dict[str, Any], context: Any) -> JsonDict:
        cors_origin = configured_cors_origin()

        if event.get("httpMethod") == "OPTIONS":
            return ResponseBuilder.no_content(cors_origin=cors_origin)

        request_id = getattr(context, "aws_request_id", None)

        try:
            response = func(event, context)
            if cors_origin:
                response.setdefault("headers", {})["Access-Control-Allow-Origin"] = cors_origin
            return response

        except OrganizerError as exc:
            server_side = exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR
            log_failure(exc, handler_name=func.__name__, request_id=request_id, server_side=server_side)
            return ResponseBuilder.from_error(
                exc,
                debug=debug_detail(exc.__cause__ or exc) if server_side else None,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except Exception as exc:
            response, server_side = builtin_response(exc, request_id=request_id, cors_origin=cors_origin)
            log_failure(exc, handler_name=func.__name__, request_id=request_id, server_side=server_side)
            return response

    return wrapper
