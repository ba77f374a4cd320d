"""
API Gateway proxy responses.

Every body is a JSON object carrying a ``success`` flag and a
human-readable ``message``; error bodies add ``error`` (a stable code)
and ``timestamp``.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any

from core.models.errors import OrganizerError
from core.utils.constants import (
    CORS_HEADERS,
    CORS_METHODS,
    CORS_ORIGIN,
    DEFAULT_CONTENT_TYPE,
    EXPOSE_HEADERS,
)
from core.utils.time import utc_now_iso

JsonDict = dict[str, Any]


def response_headers(cors_origin: str | None = None) -> dict[str, str]:
    """JSON content type plus the CORS headers every route answers with."""
    return {
        "Content-Type": DEFAULT_CONTENT_TYPE,
        "Access-Control-Allow-Origin": cors_origin or CORS_ORIGIN,
        "Access-Control-Allow-Headers": CORS_HEADERS,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Expose-Headers": EXPOSE_HEADERS,
    }


class ResponseBuilder:
    """Builds API Gateway proxy integration responses."""

    @staticmethod
    def build(
        status: HTTPStatus,
        body: JsonDict | None = None,
        *,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        payload: JsonDict = {"success": status < HTTPStatus.BAD_REQUEST, **(body or {})}
        if request_id:
            payload["request_id"] = request_id

        return {
            "statusCode": int(status),
            "headers": response_headers(cors_origin),
            "body": json.dumps(payload, default=str),
        }

    @classmethod
    def ok(cls, body: JsonDict, **kwargs: Any) -> JsonDict:
        return cls.build(HTTPStatus.OK, body, **kwargs)

    @classmethod
    def created(cls, body: JsonDict, **kwargs: Any) -> JsonDict:
        return cls.build(HTTPStatus.CREATED, body, **kwargs)

    @staticmethod
    def no_content(*, cors_origin: str | None = None) -> JsonDict:
        """Empty 204, used for CORS preflight."""
        return {
            "statusCode": int(HTTPStatus.NO_CONTENT),
            "headers": response_headers(cors_origin),
            "body": "",
        }

    @classmethod
    def error(
        cls,
        status: HTTPStatus,
        message: str,
        *,
        error: str | None = None,
        details: JsonDict | None = None,
        debug: str | None = None,
        extra: JsonDict | None = None,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        """Error envelope. ``debug`` must only be passed in development."""
        body: JsonDict = {
            "error": error or status.name,
            "message": message,
            "timestamp": utc_now_iso(),
        }
        if details:
            body["details"] = details
        if debug:
            body["debug"] = debug
        body.update(extra or {})

        return cls.build(status, body, request_id=request_id, cors_origin=cors_origin)

    @classmethod
    def from_error(cls, exc: OrganizerError, **kwargs: Any) -> JsonDict:
        """Render a domain error with the status its class declares."""
        return cls.error(
            exc.status,
            exc.message,
            error=exc.error_code,
            details=exc.details or None,
            **kwargs,
        )
