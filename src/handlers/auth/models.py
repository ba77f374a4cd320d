"""Pydantic models for signup, login and profile requests/responses."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from core.models.user import PublicUser
from core.utils.constants import PASSWORD_MIN_LENGTH, USER_NAME_MAX_LENGTH


class SignupRequest(BaseModel):
    """Validation model for account creation."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=USER_NAME_MAX_LENGTH, description="Display name")
    email: EmailStr = Field(..., description="Email address, unique per account")
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, description="Plain-text password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(BaseModel):
    """Validation model for login. Both fields are required."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=1, description="Registered email address")
    password: str = Field(..., min_length=1, description="Plain-text password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class AuthResponse(BaseModel):
    """Response for a successful signup or login."""

    message: str = Field(..., description="Success message")
    token: str = Field(..., description="Bearer token for subsequent requests")
    user: PublicUser = Field(..., description="The authenticated user")


class ProfileResponse(BaseModel):
    """Response for the current-user endpoint."""

    message: str = Field(..., description="Success message")
    user: PublicUser = Field(..., description="The authenticated user")
