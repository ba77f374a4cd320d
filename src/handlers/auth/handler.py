"""
Lambda handlers for signup, login and the current-user profile.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.config import get_settings
from core.security.authorizer import authenticate
from core.utils.constants import METRICS_NAMESPACE, SERVICE_NAME
from core.utils.decorators import api_gateway_handler
from core.utils.events import json_body
from core.utils.response import ResponseBuilder
from core.utils.validators import validate_request

from .models import AuthResponse, LoginRequest, ProfileResponse, SignupRequest
from .service import AuthService

logger = Logger(service=SERVICE_NAME, UTC=True)
tracer = Tracer(service=SERVICE_NAME)
metrics = Metrics(namespace=METRICS_NAMESPACE, service=SERVICE_NAME)


def _log_request(name: str, event: dict[str, Any], context: LambdaContext) -> None:
    logger.info(
        f"Received {name} request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
            "function_name": getattr(context, "function_name", None),
        },
    )


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def signup_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle POST /auth/signup.

    Expected body: {"name": "...", "email": "...", "password": "..."}

    Returns:
        201 with a bearer token and the public user
    """
    _log_request("signup", event, context)

    request = validate_request(SignupRequest, json_body(event))
    service = AuthService.from_settings(get_settings())

    token, user = service.signup(
        name=request.name,
        email=request.email,
        password=request.password,
    )

    response = AuthResponse(
        message="Account created successfully",
        token=token,
        user=user.public_view(),
    )
    return ResponseBuilder.created(response.model_dump())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def login_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle POST /auth/login.

    Expected body: {"email": "...", "password": "..."}
    """
    _log_request("login", event, context)

    request = validate_request(LoginRequest, json_body(event))
    service = AuthService.from_settings(get_settings())

    token, user = service.login(email=request.email, password=request.password)

    response = AuthResponse(
        message="Logged in successfully",
        token=token,
        user=user.public_view(),
    )
    return ResponseBuilder.ok(response.model_dump())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def me_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle GET /auth/me for the bearer identity."""
    _log_request("profile", event, context)

    settings = get_settings()
    identity = authenticate(event, settings=settings)
    user = AuthService.from_settings(settings).me(user_id=identity.user_id)

    response = ProfileResponse(message="User retrieved successfully", user=user.public_view())
    return ResponseBuilder.ok(response.model_dump())
