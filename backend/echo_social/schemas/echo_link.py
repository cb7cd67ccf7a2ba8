"""Echo link and anonymous message schemas."""

from datetime import datetime

from pydantic import Field, model_validator

from echo_social.schemas.common import CamelModel, Id, UpdateRequest


class EchoLinkCreate(CamelModel):
    user_id: Id
    link_id: str | None = Field(default=None, min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    welcome_message: str | None = None
    active: bool = True


class EchoLinkRead(CamelModel):
    id: int
    user_id: int
    link_id: str
    welcome_message: str | None = None
    active: bool
    created_at: datetime


class EchoLinkUpdateRequest(UpdateRequest):
    """Allowed mutable fields for an echo link."""

    welcome_message: str | None = None
    active: bool | None = None

    @model_validator(mode="after")
    def validate_non_empty_update(self) -> "EchoLinkUpdateRequest":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided.")
        if "active" in self.model_fields_set and self.active is None:
            raise ValueError("active cannot be null.")
        return self


class AnonymousMessageCreate(CamelModel):
    echo_link_id: Id
    content: str = Field(min_length=1)


class AnonymousMessageRead(CamelModel):
    id: int
    echo_link_id: int
    content: str
    answered: bool
    created_at: datetime


class AnonymousMessageUpdateRequest(UpdateRequest):
    """Allowed mutable fields for an anonymous message."""

    answered: bool
