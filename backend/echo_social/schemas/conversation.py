"""Conversation, participant and message schemas."""

from datetime import datetime

from pydantic import Field

from echo_social.schemas.common import CamelModel, Id


class ConversationCreate(CamelModel):
    """New conversation, optionally seeded with its participants."""

    name: str | None = None
    is_group: bool = False
    participant_ids: list[Id] = Field(default_factory=list)


class ConversationRead(CamelModel):
    id: int
    name: str | None = None
    is_group: bool
    created_at: datetime


class ParticipantCreate(CamelModel):
    conversation_id: Id
    user_id: Id


class ParticipantRead(CamelModel):
    id: int
    conversation_id: int
    user_id: int
    created_at: datetime


class MessageCreate(CamelModel):
    """REST send payload."""

    conversation_id: Id
    sender_id: Id
    content: str = Field(min_length=1)


class MessageRead(CamelModel):
    """Serialized message, also the body of ``new_message`` frames."""

    id: int
    conversation_id: int
    sender_id: int
    content: str
    created_at: datetime
