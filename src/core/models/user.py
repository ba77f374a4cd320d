"""User record and its public projection."""

from pydantic import BaseModel, Field, StrictBool, StrictStr

from core.utils.constants import DEFAULT_USER_ROLE


class User(BaseModel):
    """User record as persisted in the users table."""

    user_id: StrictStr = Field(..., description="Unique user identifier")
    name: StrictStr = Field(..., description="Display name")
    email: StrictStr = Field(..., description="Lower-cased, unique email address")
    password_hash: StrictStr = Field(..., description="bcrypt hash of the password")
    role: StrictStr = Field(DEFAULT_USER_ROLE, description="Authorization role")
    is_active: StrictBool = Field(True, description="Inactive users cannot log in")

    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")
    updated_at: StrictStr | None = Field(None, description="ISO-8601 last update timestamp (UTC)")

    def public_view(self) -> "PublicUser":
        return PublicUser(id=self.user_id, name=self.name, email=self.email)


class PublicUser(BaseModel):
    """User fields safe to return to clients."""

    id: str
    name: str
    email: str
