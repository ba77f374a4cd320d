"""
Lambda handlers for the folder tree: create, list, get, update and delete.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.config import get_settings
from core.models.errors import ValidationError
from core.security.authorizer import Identity, authenticate
from core.utils.constants import METRICS_NAMESPACE, SERVICE_NAME
from core.utils.decorators import api_gateway_handler
from core.utils.events import json_body, path_param, query_params
from core.utils.response import ResponseBuilder
from core.utils.validators import validate_request

from .models import (
    CreateFolderRequest,
    DeleteFolderResponse,
    FolderListResponse,
    FolderResponse,
    ListFoldersQuery,
    UpdateFolderRequest,
)
from .service import FolderService

logger = Logger(service=SERVICE_NAME, UTC=True)
tracer = Tracer(service=SERVICE_NAME)
metrics = Metrics(namespace=METRICS_NAMESPACE, service=SERVICE_NAME)


def _start(name: str, event: dict[str, Any], context: LambdaContext) -> tuple[Identity, FolderService]:
    """Log the request, authenticate the caller and wire the service."""
    logger.info(
        f"Received {name} request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "path_params": event.get("pathParameters"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    settings = get_settings()
    identity = authenticate(event, settings=settings)
    return identity, FolderService.from_settings(settings)


def _folder_id(event: dict[str, Any]) -> str:
    folder_id = path_param(event, "folder_id")
    if not folder_id:
        raise ValidationError(message="Folder id is required")
    return folder_id


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def create_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle POST /folders.

    Expected body: {"name": "...", "color": "#RRGGBB", "parent": "<folder id>"}
    """
    identity, service = _start("create folder", event, context)
    request = validate_request(CreateFolderRequest, json_body(event))

    folder = service.create(
        owner_id=identity.user_id,
        name=request.name,
        color=request.color,
        parent_id=request.parent,
    )

    response = FolderResponse(message="Folder created successfully", data=folder)
    return ResponseBuilder.created(response.model_dump())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def list_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle GET /folders?parent=<folder id | root>."""
    identity, service = _start("list folders", event, context)
    query = validate_request(ListFoldersQuery, query_params(event))

    folders = service.list_folders(owner_id=identity.user_id, parent_id=query.parent)

    response = FolderListResponse(
        message="Folders retrieved successfully",
        count=len(folders),
        data=folders,
    )
    return ResponseBuilder.ok(response.model_dump())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def get_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle GET /folders/{id}."""
    identity, service = _start("get folder", event, context)

    folder = service.get(owner_id=identity.user_id, folder_id=_folder_id(event))

    response = FolderResponse(message="Folder retrieved successfully", data=folder)
    return ResponseBuilder.ok(response.model_dump())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def update_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle PUT /folders/{id}.

    Expected body: {"name": "...", "color": "#RRGGBB"} (either or both)
    """
    identity, service = _start("update folder", event, context)
    folder_id = _folder_id(event)
    request = validate_request(UpdateFolderRequest, json_body(event))

    folder = service.update(
        owner_id=identity.user_id,
        folder_id=folder_id,
        name=request.name,
        color=request.color,
    )

    response = FolderResponse(message="Folder updated successfully", data=folder)
    return ResponseBuilder.ok(response.model_dump())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def delete_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle DELETE /folders/{id}. Only empty folders can be deleted."""
    identity, service = _start("delete folder", event, context)
    folder_id = _folder_id(event)

    service.delete(owner_id=identity.user_id, folder_id=folder_id)

    response = DeleteFolderResponse(message="Folder deleted successfully", folder_id=folder_id)
    return ResponseBuilder.ok(response.model_dump())
