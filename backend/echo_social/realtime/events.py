"""Realtime frame envelopes."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from echo_social.schemas.common import CamelModel, Id
from echo_social.schemas.conversation import MessageRead


class AuthEvent(CamelModel):
    """Client -> server: bind this connection to a user."""

    type: Literal["auth"]
    user_id: Id
    token: str | None = None


class SendMessageEvent(CamelModel):
    """Client -> server: send a chat message into a conversation."""

    type: Literal["message"]
    conversation_id: Id | None = None
    user_id: Id | None = None
    content: str = ""


class NewMessageEvent(CamelModel):
    """Server -> client: a message was posted in one of the user's conversations."""

    type: Literal["new_message"] = "new_message"
    message: MessageRead


InboundEvent = Annotated[AuthEvent | SendMessageEvent, Field(discriminator="type")]

inbound_event_adapter: TypeAdapter[AuthEvent | SendMessageEvent] = TypeAdapter(InboundEvent)

KNOWN_INBOUND_TYPES = frozenset({"auth", "message"})
