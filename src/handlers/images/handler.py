"""
Lambda handlers for the image registry: upload, list, search, get,
update and delete.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.config import get_settings
from core.models.errors import NotFoundError, ValidationError
from core.models.image import ImagePage, ListImagesResponse
from core.security.authorizer import Identity, authenticate
from core.utils.constants import METRICS_NAMESPACE, SERVICE_NAME, UPLOAD_FIELD_NAME
from core.utils.decorators import api_gateway_handler
from core.utils.events import is_multipart, json_body, parse_multipart, path_param, query_params
from core.utils.response import ResponseBuilder
from core.utils.validators import validate_request

from .models import (
    DeleteImageResponse,
    ImageResponse,
    ListImagesQuery,
    SearchImagesQuery,
    UpdateImageRequest,
    UploadImageFields,
    UploadImageJson,
)
from .service import ImageService

logger = Logger(service=SERVICE_NAME, UTC=True)
tracer = Tracer(service=SERVICE_NAME)
metrics = Metrics(namespace=METRICS_NAMESPACE, service=SERVICE_NAME)


def _start(name: str, event: dict[str, Any], context: LambdaContext) -> tuple[Identity, ImageService]:
    """Log the request, authenticate the caller and wire the service."""
    logger.info(
        f"Received {name} request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "path_params": event.get("pathParameters"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
            "remaining_time_ms": context.get_remaining_time_in_millis()
            if hasattr(context, "get_remaining_time_in_millis")
            else None,
        },
    )

    settings = get_settings()
    identity = authenticate(event, settings=settings)
    return identity, ImageService.from_settings(settings)


def _image_id(event: dict[str, Any]) -> str:
    image_id = path_param(event, "image_id")
    if not image_id:
        raise ValidationError(message="Image id is required")
    return image_id


def _page_body(message: str, page: ImagePage, query: str | None = None) -> dict[str, Any]:
    response = ListImagesResponse(
        message=message,
        data=[image.view() for image in page.images],
        pagination=page.pagination,
        query=query,
    )
    return response.model_dump()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def upload_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle POST /images/upload.

    Accepts ``multipart/form-data`` with an ``image`` file part and optional
    ``name``, ``folderId`` and ``tags`` fields, or a JSON body:
    {
        "file": "<base64>",
        "file_name": "beach.jpg",
        "name": "Beach",
        "folder_id": "fld_...",
        "tags": "summer, sea"
    }
    """
    identity, service = _start("image upload", event, context)

    if is_multipart(event):
        fields, files = parse_multipart(event)
        upload = files.get(UPLOAD_FIELD_NAME)
        request: UploadImageFields = validate_request(UploadImageFields, dict(fields))
        file_data = upload.data if upload else b""
        file_name = upload.filename if upload else None
    else:
        json_request = validate_request(UploadImageJson, json_body(event))
        request = json_request
        file_data = json_request.file_bytes()
        file_name = json_request.file_name

    record = service.upload(
        owner_id=identity.user_id,
        file_data=file_data,
        file_name=file_name,
        name=request.name,
        folder_id=request.folder_id,
        tags=request.tags,
    )

    metrics.add_metric(name="ImagesUploaded", unit=MetricUnit.Count, value=1)
    metrics.add_metric(name="UploadedBytes", unit=MetricUnit.Bytes, value=record.size)

    response = ImageResponse(message="Image uploaded successfully", data=record.view())
    return ResponseBuilder.created(response.model_dump())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def list_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle GET /images?folderId=&search=&page=&limit=.

    An unknown or foreign folder yields a 404 that still carries an empty
    page, so listings stay renderable.
    """
    identity, service = _start("list images", event, context)
    query = validate_request(ListImagesQuery, query_params(event))

    try:
        page = service.list_images(
            owner_id=identity.user_id,
            folder_id=query.folder_id,
            search=query.search,
            page=query.page,
            limit=query.limit,
        )
    except NotFoundError as exc:
        logger.info("Listing unknown folder", extra={"folder_id": query.folder_id})
        empty = service.empty_page(page=query.page, limit=query.limit)
        return ResponseBuilder.from_error(
            exc,
            extra={"data": [], "pagination": empty.pagination.model_dump()},
        )

    return ResponseBuilder.ok(_page_body("Images retrieved successfully", page, query.search))


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def search_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle GET /images/search?q=&page=&limit=."""
    identity, service = _start("search images", event, context)
    query = validate_request(SearchImagesQuery, query_params(event))

    page = service.search(
        owner_id=identity.user_id,
        query=query.q,
        page=query.page,
        limit=query.limit,
    )

    return ResponseBuilder.ok(_page_body("Search completed successfully", page, query.q))


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def get_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle GET /images/{id}."""
    identity, service = _start("get image", event, context)

    record = service.get(owner_id=identity.user_id, image_id=_image_id(event))

    response = ImageResponse(message="Image retrieved successfully", data=record.view())
    return ResponseBuilder.ok(response.model_dump())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def update_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle PUT /images/{id}.

    Expected body: {"name": "...", "tags": "a, b"} (either or both)
    """
    identity, service = _start("update image", event, context)
    image_id = _image_id(event)
    request = validate_request(UpdateImageRequest, json_body(event))

    record = service.update(
        owner_id=identity.user_id,
        image_id=image_id,
        name=request.name,
        tags=request.tags,
    )

    response = ImageResponse(message="Image updated successfully", data=record.view())
    return ResponseBuilder.ok(response.model_dump())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def delete_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle DELETE /images/{id}. The stored object is removed first."""
    identity, service = _start("delete image", event, context)
    image_id = _image_id(event)

    service.delete(owner_id=identity.user_id, image_id=image_id)
    metrics.add_metric(name="ImagesDeleted", unit=MetricUnit.Count, value=1)

    response = DeleteImageResponse(message="Image deleted successfully", image_id=image_id)
    return ResponseBuilder.ok(response.model_dump())
