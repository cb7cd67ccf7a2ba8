"""Notification emitter, notification read side and the hooks that emit them."""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from echo_social.models.anonymous_message import AnonymousMessage
from echo_social.models.comment import Comment
from echo_social.models.conversation_participant import ConversationParticipant
from echo_social.models.echo_link import EchoLink
from echo_social.models.follow import Follow
from echo_social.models.like import Like
from echo_social.models.message import Message
from echo_social.models.notification import Notification
from echo_social.models.post import Post
from echo_social.schemas.notification import NotificationType
from echo_social.services.hooks import (
    ANONYMOUS_MESSAGE_CREATED,
    COMMENT_CREATED,
    FOLLOW_CREATED,
    LIKE_CREATED,
    MESSAGE_CREATED,
    PostCommitHooks,
)

logger = logging.getLogger(__name__)

LIKE_TEXT = "Someone liked your post"
COMMENT_TEXT = "Someone commented on your post"
FOLLOW_TEXT = "Someone followed you"
MESSAGE_TEXT = "You have a new message"
ANONYMOUS_MESSAGE_TEXT = "You received an anonymous message"


def emit_notification(
    db: Session,
    user_id: int,
    notification_type: NotificationType,
    content: str,
    reference_id: int | None = None,
) -> Notification:
    """Append one unread notification. Store errors propagate to the caller."""

    notification = Notification(
        user_id=user_id,
        type=notification_type,
        content=content,
        reference_id=reference_id,
        read=False,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    logger.info(
        "notifications.emitted id=%s user_id=%s type=%s reference_id=%s",
        notification.id,
        user_id,
        notification_type,
        reference_id,
    )
    return notification


def list_notifications(db: Session, user_id: int) -> list[Notification]:
    """Return a user's notifications newest first."""

    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(db.scalars(stmt).all())


def count_unread_notifications(db: Session, user_id: int) -> int:
    stmt = select(func.count(Notification.id)).where(
        Notification.user_id == user_id,
        Notification.read.is_(False),
    )
    return int(db.scalar(stmt) or 0)


def mark_notification_read(db: Session, notification_id: int) -> Notification | None:
    """Set the read flag. Already-read notifications are returned unchanged."""

    notification = db.get(Notification, notification_id)
    if notification is None:
        return None
    if not notification.read:
        notification.read = True
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_notifications_read(db: Session, user_id: int) -> int:
    """Mark every unread notification of ``user_id`` as read; return how many changed."""

    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    db.commit()
    return result.rowcount or 0


def notify_post_owner_of_like(db: Session, like: Like) -> Notification | None:
    post = db.get(Post, like.post_id)
    if post is None or post.user_id == like.user_id:
        return None
    return emit_notification(db, post.user_id, "like", LIKE_TEXT, post.id)


def notify_post_owner_of_comment(db: Session, comment: Comment) -> Notification | None:
    post = db.get(Post, comment.post_id)
    if post is None or post.user_id == comment.user_id:
        return None
    return emit_notification(db, post.user_id, "comment", COMMENT_TEXT, post.id)


def notify_followed_user(db: Session, follow: Follow) -> Notification | None:
    if follow.following_id == follow.follower_id:
        return None
    return emit_notification(db, follow.following_id, "follow", FOLLOW_TEXT, follow.follower_id)


def notify_echo_link_owner(db: Session, message: AnonymousMessage) -> Notification | None:
    echo_link = db.get(EchoLink, message.echo_link_id)
    if echo_link is None:
        return None
    return emit_notification(db, echo_link.user_id, "anonymous_message", ANONYMOUS_MESSAGE_TEXT, message.id)


def notify_message_recipients(db: Session, message: Message) -> list[Notification]:
    """Notify every other participant, whether or not they received a live push."""

    recipient_ids = db.scalars(
        select(ConversationParticipant.user_id)
        .where(
            ConversationParticipant.conversation_id == message.conversation_id,
            ConversationParticipant.user_id != message.sender_id,
        )
        .distinct()
        .order_by(ConversationParticipant.user_id.asc())
    ).all()
    emitted: list[Notification] = []
    for recipient_id in recipient_ids:
        try:
            emitted.append(emit_notification(db, recipient_id, "message", MESSAGE_TEXT, message.id))
        except Exception:
            db.rollback()
            logger.exception(
                "notifications.emit_failed message_id=%s user_id=%s",
                message.id,
                recipient_id,
            )
    return emitted


def register_notification_hooks(hooks: PostCommitHooks) -> PostCommitHooks:
    """Attach the notification side effects to their triggering events."""

    hooks.register(LIKE_CREATED, notify_post_owner_of_like)
    hooks.register(COMMENT_CREATED, notify_post_owner_of_comment)
    hooks.register(FOLLOW_CREATED, notify_followed_user)
    hooks.register(MESSAGE_CREATED, notify_message_recipients)
    hooks.register(ANONYMOUS_MESSAGE_CREATED, notify_echo_link_owner)
    return hooks
