"""Per-connection realtime protocol and chat message fan-out."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.websockets import WebSocketDisconnect, WebSocketState

from echo_social.realtime.events import (
    KNOWN_INBOUND_TYPES,
    AuthEvent,
    NewMessageEvent,
    SendMessageEvent,
    inbound_event_adapter,
)
from echo_social.realtime.registry import Connection, ConnectionRegistry
from echo_social.schemas.conversation import MessageRead
from echo_social.services.conversations import create_message, list_participant_ids
from echo_social.services.errors import SocialError
from echo_social.services.hooks import MESSAGE_CREATED, PostCommitHooks

if TYPE_CHECKING:
    from echo_social.context import ServerContext

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass(slots=True)
class DeliveryReport:
    """Outcome of one fan-out."""

    message: MessageRead
    pushed_user_ids: list[int] = field(default_factory=list)
    offline_user_ids: list[int] = field(default_factory=list)


def is_connection_open(connection: Connection) -> bool:
    state = getattr(connection, "application_state", WebSocketState.CONNECTED)
    return state == WebSocketState.CONNECTED


async def deliver_chat_message(
    db: Session,
    registry: ConnectionRegistry,
    hooks: PostCommitHooks,
    *,
    conversation_id: int,
    sender_id: int,
    content: str,
    enforce_membership: bool = True,
) -> DeliveryReport:
    """Persist a message, push it to connected participants, then notify all of them.

    Live pushes are best effort; the ``message.created`` hooks run whether or
    not any push succeeded.
    """

    message = create_message(
        db,
        conversation_id,
        sender_id,
        content,
        enforce_membership=enforce_membership,
    )
    message_read = MessageRead.model_validate(message)
    frame = NewMessageEvent(message=message_read).model_dump(mode="json", by_alias=True)
    report = DeliveryReport(message=message_read)

    for user_id in list_participant_ids(db, message.conversation_id):
        if user_id == sender_id:
            continue
        connection = registry.lookup(user_id)
        if connection is None or not is_connection_open(connection):
            report.offline_user_ids.append(user_id)
            continue
        try:
            await connection.send_json(frame)
        except (RuntimeError, OSError, WebSocketDisconnect):
            logger.exception("realtime.push_failed message_id=%s user_id=%s", message.id, user_id)
            report.offline_user_ids.append(user_id)
            continue
        report.pushed_user_ids.append(user_id)

    hooks.run(MESSAGE_CREATED, db, message)
    logger.info(
        "realtime.message_delivered message_id=%s conversation_id=%s pushed=%d offline=%d",
        message.id,
        message.conversation_id,
        len(report.pushed_user_ids),
        len(report.offline_user_ids),
    )
    return report


class RealtimeConnection:
    """State machine for one socket: UNAUTHENTICATED -> AUTHENTICATED -> CLOSED.

    Frames must be fed in arrival order; ``handle_frame`` is awaited to
    completion before the next frame is read. Nothing here ever replies with
    an error frame: bad input is logged and dropped.
    """

    def __init__(self, connection: Connection, context: ServerContext) -> None:
        self.connection = connection
        self.context = context
        self.state = ConnectionState.UNAUTHENTICATED
        self.user_id: int | None = None

    async def handle_frame(self, raw: str | bytes) -> None:
        if self.state is ConnectionState.CLOSED:
            return
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("realtime.frame_unparseable user_id=%s", self.user_id)
            return
        if not isinstance(data, dict):
            logger.warning("realtime.frame_not_object user_id=%s", self.user_id)
            return
        frame_type = data.get("type")
        if not isinstance(frame_type, str) or frame_type not in KNOWN_INBOUND_TYPES:
            logger.debug("realtime.frame_ignored type=%r user_id=%s", frame_type, self.user_id)
            return
        try:
            event = inbound_event_adapter.validate_python(data)
        except ValidationError as exc:
            logger.warning(
                "realtime.frame_invalid type=%s user_id=%s errors=%d",
                frame_type,
                self.user_id,
                exc.error_count(),
            )
            return

        if isinstance(event, AuthEvent):
            self._authenticate(event)
        else:
            await self._send(event)

    def close(self) -> None:
        if self.user_id is not None:
            self.context.registry.remove(self.user_id, self.connection)
            logger.info("realtime.unbound user_id=%s", self.user_id)
        self.state = ConnectionState.CLOSED

    def _authenticate(self, event: AuthEvent) -> None:
        if self.context.settings.realtime_require_token and not self.context.sessions.verify(
            event.token, event.user_id
        ):
            logger.warning("realtime.auth_rejected claimed_user_id=%s", event.user_id)
            return

        registry = self.context.registry
        if self.user_id is not None and self.user_id != event.user_id:
            registry.remove(self.user_id, self.connection)
        replaced = registry.register(event.user_id, self.connection)
        self.user_id = event.user_id
        self.state = ConnectionState.AUTHENTICATED
        logger.info("realtime.auth_bound user_id=%s replaced=%s", event.user_id, replaced is not None)

    async def _send(self, event: SendMessageEvent) -> None:
        if self.state is not ConnectionState.AUTHENTICATED or self.user_id is None:
            logger.warning("realtime.send_dropped reason=unauthenticated")
            return
        if event.conversation_id is None or not event.content.strip():
            logger.warning("realtime.send_dropped reason=invalid user_id=%s", self.user_id)
            return
        if event.user_id is not None and event.user_id != self.user_id:
            logger.warning(
                "realtime.send_dropped reason=sender_mismatch user_id=%s claimed=%s",
                self.user_id,
                event.user_id,
            )
            return

        async with self.context.store_session() as db:
            try:
                await deliver_chat_message(
                    db,
                    self.context.registry,
                    self.context.hooks,
                    conversation_id=event.conversation_id,
                    sender_id=self.user_id,
                    content=event.content,
                    enforce_membership=self.context.settings.enforce_sender_membership,
                )
            except SocialError as exc:
                logger.warning(
                    "realtime.send_dropped reason=%s user_id=%s conversation_id=%s",
                    exc,
                    self.user_id,
                    event.conversation_id,
                )
            except (SQLAlchemyError, OverflowError):
                db.rollback()
                logger.exception(
                    "realtime.send_failed user_id=%s conversation_id=%s",
                    self.user_id,
                    event.conversation_id,
                )
