"""Business logic for accounts and credentials.

This module coordinates password hashing, token issuing and the identity
store while translating failures into domain-specific errors.
"""

from aws_lambda_powertools import Logger

from core.config import Settings
from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter
from core.infrastructure.aws.dynamodb_users import DynamoDBUsers
from core.models.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from core.models.user import User
from core.repositories.user_repository import UserRepository
from core.security.passwords import hash_password, verify_password
from core.security.tokens import issue_token
from core.utils.constants import (
    DEFAULT_USER_ROLE,
    ERROR_CODE_EMAIL_TAKEN,
    ERROR_CODE_INVALID_CREDENTIALS,
    ERROR_CODE_USER_NOT_FOUND,
    PASSWORD_MIN_LENGTH,
    SERVICE_NAME,
    USER_ID_PREFIX,
)
from core.utils.time import new_id, utc_now_iso

logger = Logger(service=SERVICE_NAME, UTC=True)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class AuthService:
    """Application service responsible for accounts.

    This service orchestrates:
    - Account creation with a unique email
    - Credential checks and token issuing
    - Profile lookup for an authenticated caller
    - Operator password resets
    """

    def __init__(self, *, users: UserRepository, settings: Settings) -> None:
        self.users = users
        self.settings = settings

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthService":
        """Wire the service to the DynamoDB users table."""
        adapter = DynamoDBAdapter(settings.users_table_name, settings=settings)
        return cls(users=DynamoDBUsers(adapter), settings=settings)

    def signup(self, *, name: str, email: str, password: str) -> tuple[str, User]:
        """Create an account and sign a token for it.

        Raises:
            ConflictError: If the email is already registered
            PersistenceError: If the account cannot be stored
        """
        logger.debug("Starting signup")

        # Step 1: Fast path for an already registered email
        if self.users.find_by_email(email=email) is not None:
            raise ConflictError(message="User already exists", error_code=ERROR_CODE_EMAIL_TAKEN)

        # Step 2: Hash the password and persist (the email marker is the real guard)
        user = User(
            user_id=new_id(USER_ID_PREFIX),
            name=name,
            email=email,
            password_hash=hash_password(password, rounds=self.settings.bcrypt_rounds),
            role=DEFAULT_USER_ROLE,
            is_active=True,
            created_at=utc_now_iso(),
        )
        self.users.create_user(user=user)

        logger.info("User signed up", extra={"user_id": user.user_id})
        return issue_token(user.user_id, settings=self.settings), user

    def login(self, *, email: str, password: str) -> tuple[str, User]:
        """Check credentials and sign a token.

        Unknown email, wrong password and inactive accounts are
        indistinguishable to the caller.

        Raises:
            UnauthorizedError: If the credentials are not accepted
        """
        user = self.users.find_by_email(email=email)

        if user is None or not verify_password(password, user.password_hash) or not user.is_active:
            logger.info("Login rejected")
            raise UnauthorizedError(
                message=INVALID_CREDENTIALS_MESSAGE,
                error_code=ERROR_CODE_INVALID_CREDENTIALS,
            )

        logger.info("User logged in", extra={"user_id": user.user_id})
        return issue_token(user.user_id, settings=self.settings), user

    def me(self, *, user_id: str) -> User:
        """Return the account behind an authenticated identity.

        Raises:
            NotFoundError: If the account no longer exists
        """
        user = self.users.fetch_user(user_id=user_id)

        if user is None:
            raise NotFoundError(
                message="User not found",
                error_code=ERROR_CODE_USER_NOT_FOUND,
            )

        return user

    def reset_password(self, *, email: str, new_password: str) -> User:
        """Replace the password of the account registered under ``email``.

        Raises:
            ValidationError: If the new password is too short
            NotFoundError: If no account uses this email
        """
        if len(new_password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(
                message=f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
            )

        user = self.users.find_by_email(email=email.strip().lower())
        if user is None:
            raise NotFoundError(
                message="User not found",
                error_code=ERROR_CODE_USER_NOT_FOUND,
            )

        timestamp = utc_now_iso()
        self.users.update_password(
            user_id=user.user_id,
            password_hash=hash_password(new_password, rounds=self.settings.bcrypt_rounds),
            updated_at=timestamp,
        )

        logger.info("Password reset", extra={"user_id": user.user_id})
        return user.model_copy(update={"updated_at": timestamp})
