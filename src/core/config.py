"""Application configuration.

All runtime configuration (table names, bucket, signing secret, limits) is
read once from the environment into a ``Settings`` object which is then passed
explicitly to services, repositories and adapters.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.utils.constants import BCRYPT_ROUNDS, MAX_FILE_SIZE

DEVELOPMENT_ENVIRONMENTS = frozenset({"development", "dev", "local", "test"})


class Settings(BaseSettings):
    """Runtime settings for the image organizer service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        default="production",
        description="Application environment (development, staging, production)",
    )

    # AWS
    aws_region: str = Field(default="us-east-1", description="AWS region")
    aws_endpoint_url: str | None = Field(
        default=None,
        description="Endpoint override, e.g. http://localhost:4566 for LocalStack",
    )
    users_table_name: str = Field(default="image-organizer-users")
    folders_table_name: str = Field(default="image-organizer-folders")
    images_table_name: str = Field(default="image-organizer-images")
    image_bucket_name: str = Field(default="image-organizer-images")
    image_key_prefix: str = Field(
        default="organizer",
        description="Namespace prefix for every stored image object",
    )
    image_public_base_url: str | None = Field(
        default=None,
        description="Base URL images are served from (CDN). Defaults to the S3 URL.",
    )

    # Auth
    jwt_secret: str = Field(min_length=1, description="Token signing secret, always required")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_days: int = Field(default=30, ge=1)
    bcrypt_rounds: int = Field(default=BCRYPT_ROUNDS, ge=4, le=31)

    # Limits
    max_file_size: int = Field(default=MAX_FILE_SIZE, ge=1)
    storage_timeout_seconds: int = Field(default=30, ge=1, le=900)

    cors_origin: str = Field(default="*")

    @property
    def is_development(self) -> bool:
        """Whether internal error detail may be returned to clients."""
        return self.environment.lower() in DEVELOPMENT_ENVIRONMENTS


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()
