"""Abstract contract for user persistence."""

from abc import ABC, abstractmethod

from core.models.user import User


class UserRepository(ABC):
    """Contract for the identity store."""

    @abstractmethod
    def create_user(self, *, user: User) -> None:
        """Persist a new user.

        Raises:
            ConflictError: If the email is already registered
            PersistenceError: If creation fails
        """

    @abstractmethod
    def fetch_user(self, *, user_id: str) -> User | None:
        """Fetch a user by id, None if missing.

        Raises:
            PersistenceError: If the fetch fails
        """

    @abstractmethod
    def find_by_email(self, *, email: str) -> User | None:
        """Fetch a user by (normalized) email, None if missing.

        Raises:
            PersistenceError: If the lookup fails
        """

    @abstractmethod
    def update_password(self, *, user_id: str, password_hash: str, updated_at: str) -> None:
        """Replace a user's password hash.

        Raises:
            NotFoundError: If the user does not exist
            PersistenceError: If the write fails
        """
