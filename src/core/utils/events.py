"""
Helpers for reading API Gateway proxy events.

API Gateway delivers headers with client-controlled casing and may
base64-encode the body (always for binary media types such as
``multipart/form-data``).
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from email import policy
from email.parser import BytesParser
from typing import Any

from core.models.errors import ValidationError


@dataclass(frozen=True)
class UploadedFile:
    """A file part extracted from a multipart body."""

    filename: str
    content_type: str
    data: bytes


def get_header(event: dict[str, Any], name: str) -> str | None:
    """Case-insensitive header lookup."""
    headers = event.get("headers") or {}
    wanted = name.lower()

    for key, value in headers.items():
        if key.lower() == wanted:
            return value

    return None


def path_param(event: dict[str, Any], name: str) -> str | None:
    return (event.get("pathParameters") or {}).get(name)


def query_params(event: dict[str, Any]) -> dict[str, str]:
    return dict(event.get("queryStringParameters") or {})


def raw_body(event: dict[str, Any]) -> bytes:
    """Return the request body as bytes, undoing API Gateway base64 encoding."""
    body = event.get("body")

    if not body:
        return b""

    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(message="Invalid request body encoding") from exc

    return body.encode("utf-8") if isinstance(body, str) else body


def json_body(event: dict[str, Any]) -> dict[str, Any]:
    """Parse a JSON object body; an empty body is an empty object."""
    data = raw_body(event)

    if not data:
        return {}

    try:
        parsed = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(message="Invalid JSON body") from exc

    if not isinstance(parsed, dict):
        raise ValidationError(message="Request body must be a JSON object")

    return parsed


def is_multipart(event: dict[str, Any]) -> bool:
    content_type = get_header(event, "Content-Type") or ""
    return content_type.lower().startswith("multipart/form-data")


def parse_multipart(event: dict[str, Any]) -> tuple[dict[str, str], dict[str, UploadedFile]]:
    """
    Split a ``multipart/form-data`` body into text fields and file parts.

    Returns:
        (fields, files) keyed by form field name
    """
    content_type = get_header(event, "Content-Type") or ""
    body = raw_body(event)

    # Re-attach the boundary-bearing header so the MIME parser can split parts
    envelope = f"Content-Type: {content_type}\r\n\r\n".encode("latin-1") + body
    message = BytesParser(policy=policy.HTTP).parsebytes(envelope)

    if not message.is_multipart():
        raise ValidationError(message="Invalid multipart body")

    fields: dict[str, str] = {}
    files: dict[str, UploadedFile] = {}

    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name:
            continue

        payload = part.get_payload(decode=True) or b""
        filename = part.get_filename()

        if filename is not None:
            files[str(name)] = UploadedFile(
                filename=filename,
                content_type=part.get_content_type(),
                data=payload,
            )
        else:
            charset = part.get_content_charset() or "utf-8"
            fields[str(name)] = payload.decode(charset, errors="replace")

    return fields, files
