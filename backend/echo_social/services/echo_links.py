"""Echo link and anonymous message services."""

from __future__ import annotations

import logging
import secrets

from sqlalchemy import select
from sqlalchemy.orm import Session

from echo_social.models.anonymous_message import AnonymousMessage
from echo_social.models.echo_link import EchoLink
from echo_social.models.user import User
from echo_social.schemas.echo_link import (
    AnonymousMessageCreate,
    AnonymousMessageUpdateRequest,
    EchoLinkCreate,
    EchoLinkUpdateRequest,
)
from echo_social.services.errors import ConflictError, InvalidOperationError, NotFoundError
from echo_social.services.hooks import ANONYMOUS_MESSAGE_CREATED, PostCommitHooks

logger = logging.getLogger(__name__)


def get_echo_link(db: Session, echo_link_id: int) -> EchoLink | None:
    return db.get(EchoLink, echo_link_id)


def get_echo_link_by_user(db: Session, user_id: int) -> EchoLink | None:
    return db.scalar(select(EchoLink).where(EchoLink.user_id == user_id).order_by(EchoLink.id.asc()).limit(1))


def get_echo_link_by_slug(db: Session, link_id: str) -> EchoLink | None:
    return db.scalar(select(EchoLink).where(EchoLink.link_id == link_id))


def create_echo_link(db: Session, payload: EchoLinkCreate) -> EchoLink:
    """Create the single echo link a user may own."""

    if db.get(User, payload.user_id) is None:
        raise NotFoundError("User not found")
    if get_echo_link_by_user(db, payload.user_id) is not None:
        raise ConflictError("User already has an Echo Link")
    link_id = payload.link_id or _generate_slug(db)
    if get_echo_link_by_slug(db, link_id) is not None:
        raise ConflictError("Echo Link id is already taken")

    echo_link = EchoLink(
        user_id=payload.user_id,
        link_id=link_id,
        welcome_message=payload.welcome_message,
        active=payload.active,
    )
    db.add(echo_link)
    db.commit()
    db.refresh(echo_link)
    logger.info("echo_links.created echo_link_id=%s user_id=%s", echo_link.id, echo_link.user_id)
    return echo_link


def update_echo_link(db: Session, echo_link_id: int, payload: EchoLinkUpdateRequest) -> EchoLink | None:
    echo_link = db.get(EchoLink, echo_link_id)
    if echo_link is None:
        return None
    fields = payload.provided_fields()
    if "welcome_message" in fields:
        echo_link.welcome_message = payload.welcome_message
    if payload.active is not None:
        echo_link.active = payload.active
    db.commit()
    db.refresh(echo_link)
    return echo_link


def list_anonymous_messages(db: Session, echo_link_id: int) -> list[AnonymousMessage]:
    """Inbox of an echo link, newest first."""

    stmt = (
        select(AnonymousMessage)
        .where(AnonymousMessage.echo_link_id == echo_link_id)
        .order_by(AnonymousMessage.created_at.desc(), AnonymousMessage.id.desc())
    )
    return list(db.scalars(stmt).all())


def create_anonymous_message(
    db: Session,
    payload: AnonymousMessageCreate,
    *,
    hooks: PostCommitHooks | None = None,
) -> AnonymousMessage:
    """Drop a message into an active echo link's inbox and notify its owner."""

    echo_link = db.get(EchoLink, payload.echo_link_id)
    if echo_link is None:
        raise NotFoundError("Echo Link not found")
    if not echo_link.active:
        raise InvalidOperationError("This Echo Link is not accepting messages")
    content = payload.content.strip()
    if not content:
        raise InvalidOperationError("Message content cannot be empty.")

    message = AnonymousMessage(echo_link_id=echo_link.id, content=content, answered=False)
    db.add(message)
    db.commit()
    db.refresh(message)
    if hooks is not None:
        hooks.run(ANONYMOUS_MESSAGE_CREATED, db, message)
    return message


def update_anonymous_message(
    db: Session,
    message_id: int,
    payload: AnonymousMessageUpdateRequest,
) -> AnonymousMessage | None:
    message = db.get(AnonymousMessage, message_id)
    if message is None:
        return None
    message.answered = payload.answered
    db.commit()
    db.refresh(message)
    return message


def _generate_slug(db: Session) -> str:
    while True:
        candidate = secrets.token_urlsafe(6).replace("_", "").replace("-", "").lower()[:8]
        if len(candidate) >= 6 and get_echo_link_by_slug(db, candidate) is None:
            return candidate
