"""User and authentication schemas."""

from datetime import datetime

from pydantic import Field, model_validator

from echo_social.schemas.common import CamelModel, UpdateRequest


class UserCreate(CamelModel):
    """Registration payload."""

    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)
    display_name: str = Field(min_length=1, max_length=128)
    email: str | None = None
    avatar: str | None = None
    bio: str | None = None


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserRead(CamelModel):
    """Serialized user. The password never leaves the store."""

    id: int
    username: str
    display_name: str
    email: str | None = None
    avatar: str | None = None
    bio: str | None = None
    created_at: datetime


class UserUpdateRequest(UpdateRequest):
    """Allowed mutable fields for a user profile."""

    display_name: str | None = Field(default=None, min_length=1, max_length=128)
    bio: str | None = None
    avatar: str | None = None

    @model_validator(mode="after")
    def validate_non_empty_update(self) -> "UserUpdateRequest":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided.")
        if "display_name" in self.model_fields_set and self.display_name is None:
            raise ValueError("displayName cannot be null.")
        return self


class AuthResult(CamelModel):
    """User plus the session token to present on the realtime channel."""

    user: UserRead
    token: str
